"""
formatter.py - Thousands grouping between canonical and display forms

    delimit_num("-1234567.891")        -> "-1,234,567.891"
    delimit_num_check("-1,234,567.891") -> "-1234567.891"

Only the integer digits are grouped, in runs of three counted leftward from
the decimal point. The sign is never part of a group. The fraction and the
exponent are copied unchanged.
"""

from __future__ import annotations
from typing import List, Tuple

from .core import NumericValue, DisplayValue, CANONICAL_POINT, MalformedNumber
from .grammar import NumberParts, number_pattern, parse_canonical


DEFAULT_DELIMITER = ","
GROUP_SIZE = 3


def group_digits(digits: str, delimiter: str = DEFAULT_DELIMITER) -> str:
    """
    Insert a delimiter every three digits from the right.

    The leading group keeps the 1-3 digits left over.
    """
    head = len(digits) % GROUP_SIZE or GROUP_SIZE
    groups = [digits[:head]]
    groups.extend(digits[i:i + GROUP_SIZE] for i in range(head, len(digits), GROUP_SIZE))
    return delimiter.join(groups)


def _groups_valid(groups: List[str]) -> bool:
    if len(groups) == 1:
        return bool(groups[0])
    if not 1 <= len(groups[0]) <= GROUP_SIZE:
        return False
    return all(len(g) == GROUP_SIZE for g in groups[1:])


def split_display(
    value: NumericValue,
    delimiter: str = DEFAULT_DELIMITER,
    decimal_point: str = CANONICAL_POINT,
) -> Tuple[str, str]:
    """
    Render value and split it at the end of its integer digits.

    Returns:
        (head, tail): head is sign plus grouped digits, tail is the display
        decimal point, fraction and exponent ("" when there are none).
    """
    parts = parse_canonical(value)
    if parts is None:
        raise MalformedNumber(f"Not a canonical number: {value!r}")
    return parts.sign + group_digits(parts.integer, delimiter), parts.tail(decimal_point)


def delimit_num(
    value: NumericValue,
    delimiter: str = DEFAULT_DELIMITER,
    decimal_point: str = CANONICAL_POINT,
) -> DisplayValue:
    """
    Convert a canonical value to display form.

    Args:
        value: Canonical NumericValue.
        delimiter: Thousands delimiter to insert.
        decimal_point: Display decimal-point character.

    Returns:
        The display string.

    Raises:
        MalformedNumber: If value is not canonical.
    """
    head, tail = split_display(value, delimiter, decimal_point)
    return head + tail


def delimit_num_check(
    text: str,
    delimiter: str = DEFAULT_DELIMITER,
    decimal_point: str = CANONICAL_POINT,
) -> NumericValue:
    """
    Validate a delimited literal and return its canonical form.

    Every group after the first must be exactly three digits and the first
    group one to three digits. An undelimited literal is accepted as is.

    Raises:
        MalformedNumber: If text is not a literal or its grouping is wrong.
    """
    m = number_pattern(decimal_point, delimiter, True).fullmatch(text)
    if m is None:
        raise MalformedNumber(f"Not a number: {text!r}")
    parts = NumberParts.from_match(m)
    groups = parts.integer.split(delimiter)
    if not _groups_valid(groups):
        raise MalformedNumber(f"Bad digit grouping: {text!r}")
    return NumberParts(parts.sign, "".join(groups), parts.fraction, parts.exponent).canonical()


# The inverse of delimit_num.
undelimit = delimit_num_check


def canonicalize_slack(
    text: str,
    delimiter: str = DEFAULT_DELIMITER,
    decimal_point: str = CANONICAL_POINT,
) -> Tuple[NumericValue, int]:
    """
    Canonicalize a slack match, falling back to its longest valid grouped prefix.

    Precedence:
        1. The whole literal, if its grouping validates.
        2. Otherwise, when the leading group has 1-3 digits, the longest run of
           leading groups that validates. Fraction and exponent are dropped,
           since they belonged to the rejected tail:
               "1,234,56" -> "1,234"    "10,20" -> "10"
        3. Otherwise the candidate is rejected ("1234,567").

    Returns:
        (canonical value, number of characters of text it consumed)

    Raises:
        MalformedNumber: If neither rule applies.
    """
    try:
        return delimit_num_check(text, delimiter, decimal_point), len(text)
    except MalformedNumber:
        pass

    m = number_pattern(decimal_point, delimiter, True).fullmatch(text)
    if m is None:
        raise MalformedNumber(f"Not a number: {text!r}")
    parts = NumberParts.from_match(m)
    groups = parts.integer.split(delimiter)
    if len(groups[0]) > GROUP_SIZE:
        raise MalformedNumber(f"Bad digit grouping: {text!r}")

    for k in range(len(groups) - 1, 0, -1):
        prefix = groups[:k]
        if _groups_valid(prefix):
            consumed = len(parts.sign) + len(delimiter.join(prefix))
            return parts.sign + "".join(prefix), consumed
    # unreachable: a single 1-3 digit group always validates
    raise MalformedNumber(f"Bad digit grouping: {text!r}")
