"""
test_operators.py - Unit tests for row operators and control tokens

Tests:
- apply_operator: every stored row operator
- OperatorInterpreter.parse_value: trailing operator syntax
- Control tokens: tax, memory, swap, clear
- Default descriptions
"""

import pytest

from tapecalc import (
    OperatorInterpreter, Row, Step, apply_operator,
    DivisionByZero, MalformedNumber,
)


class TestApplyOperator:

    @pytest.mark.parametrize("total,op,value,expected", [
        ("0", "+", "10", "10"),
        ("10", "-", "3", "7"),
        ("7", "*", "2", "14"),
        ("14", "/", "4", "3.5"),
        ("200", "%+", "10", "220"),
        ("200", "%", "10", "220"),
        ("200", "%-", "10", "180"),
        ("200", "%*", "10", "20"),
        ("55", "C", "0", "0"),
    ])
    def test_row_operators(self, total, op, value, expected):
        assert apply_operator(total, op, value) == expected

    def test_divide_by_zero(self):
        with pytest.raises(DivisionByZero):
            apply_operator("1", "/", "0")

    def test_unknown_operator(self):
        with pytest.raises(ValueError):
            apply_operator("1", "^", "2")


class TestParseValue:

    @pytest.mark.parametrize("text,expected", [
        ("12", ("+", "12")),
        ("12*", ("*", "12")),
        ("10%-", ("%-", "10")),
        ("10%+", ("%+", "10")),
        ("10%", ("%", "10")),
        ("-5", ("+", "-5")),
        ("5-", ("-", "5")),
        ("-5-", ("-", "-5")),
        ("1,234.5", ("+", "1234.5")),
        ("3=", ("=", "3")),
        (" 8 / ", ("/", "8")),
    ])
    def test_parse(self, interpreter, text, expected):
        assert interpreter.parse_value(text) == expected

    @pytest.mark.parametrize("text", ["abc", "1,23", "*", "12**"])
    def test_malformed(self, interpreter, text):
        with pytest.raises(MalformedNumber):
            interpreter.parse_value(text)

    def test_control_token_lookup(self):
        assert OperatorInterpreter.control_token("mr") == "MR+"
        assert OperatorInterpreter.control_token(" m ") == "M+"
        assert OperatorInterpreter.control_token("t") == "T"
        assert OperatorInterpreter.control_token("12") is None


class TestValueSteps:

    def test_plain_value_adds(self, interpreter):
        step = interpreter.interpret("10", "5", "0")
        assert step == Step(Row("+", "10"), "15", "0", "", False)

    def test_equals_terminates_and_stores_plus(self, interpreter):
        step = interpreter.interpret("5=", "10", "0")
        assert step.terminal
        assert step.row.operator == "+"
        assert step.sum == "15"

    def test_percent_add_example(self, interpreter):
        assert interpreter.interpret("10%+", "200", "0").sum == "220"


class TestControlTokens:

    def test_tax_rounds_half_up(self, interpreter):
        step = interpreter.interpret("T", "100", "0")
        assert step.row == Row("+", "8.88")
        assert step.sum == "108.88"
        assert step.description == "Sales tax 8.875% on 100"

    def test_tax_on_a_35_digit_sum(self, interpreter):
        step = interpreter.interpret("T", "1e34", "0")
        assert step.row.value == "8875" + "0" * 29 + ".00"
        assert step.sum == "10" + "8875" + "0" * 29 + ".00"

    def test_tax_rate_from_config(self, config):
        interp = OperatorInterpreter.for_config(config.with_overrides(tax_rate="0.1", tax_description="VAT"))
        step = interp.interpret("T", "1234", "0")
        assert step.row.value == "123.40"
        assert step.description == "VAT 10% on 1,234"

    def test_memory_round_trip(self, interpreter):
        store = interpreter.interpret("M+", "25", "0")
        assert store.row == Row("+", "0")
        assert (store.sum, store.memory) == ("25", "25")
        recall = interpreter.interpret("MR", store.sum, store.memory)
        assert recall.row == Row("+", "25")
        assert (recall.sum, recall.memory) == ("50", "25")

    @pytest.mark.parametrize("token,expected_memory", [
        ("M-", "2"),
        ("M*", "24"),
        ("M/", "1.5"),
    ])
    def test_memory_arithmetic(self, interpreter, token, expected_memory):
        step = interpreter.interpret(token, "4", "6")
        assert step.memory == expected_memory
        assert step.sum == "4"
        assert step.row == Row("+", "0")

    def test_memory_clear(self, interpreter):
        step = interpreter.interpret("MC", "4", "7")
        assert step.memory == "0"
        assert step.description == "Memory clear (was 7)"

    @pytest.mark.parametrize("token,op,expected_sum", [
        ("MR-", "-", "6"),
        ("MR*", "*", "40"),
        ("MR/", "/", "2.5"),
    ])
    def test_recall_forces_operator(self, interpreter, token, op, expected_sum):
        step = interpreter.interpret(token, "10", "4")
        assert step.row == Row(op, "4")
        assert step.sum == expected_sum

    def test_swap_keeps_fold(self, interpreter):
        step = interpreter.interpret("MS", "10", "3")
        assert (step.sum, step.memory) == ("3", "10")
        assert apply_operator("10", step.row.operator, step.row.value) == step.sum
        assert step.description == "Swap sum 10 with memory 3"

    def test_clear(self, interpreter):
        step = interpreter.interpret("c", "42", "7")
        assert step.row.is_clear
        assert (step.sum, step.memory) == ("0", "7")
        assert step.description == "Clear (was 42)"

    def test_memory_divide_by_zero_sum(self, interpreter):
        with pytest.raises(DivisionByZero):
            interpreter.interpret("M/", "0", "5")

    def test_recall_divide_by_zero_memory(self, interpreter):
        with pytest.raises(DivisionByZero):
            interpreter.interpret("MR/", "5", "0")

    def test_unknown_token(self, interpreter):
        with pytest.raises(MalformedNumber):
            interpreter.control("MX", "1", "0")
