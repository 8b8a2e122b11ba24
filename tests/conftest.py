"""
conftest.py - Shared pytest fixtures for tape calculator tests

Provides common fixtures used across unit and conformance tests:
- Configurations (default, framed, decimal comma)
- Ready-made ledgers and their rendered text
- Buffer and scripted-input factories
- Comparison helpers for rendered ledgers
"""

import pytest
from typing import List, Optional, Sequence

from tapecalc import (
    Ledger, TapeConfig, TapeController, TextBuffer, Position,
    ScriptedInput, OperatorInterpreter, LayoutEngine,
)

from tests.fake_surface import FakeSurface


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

# The ledger of the running example: ((0 + 10) - 3) * 2 = 14
FOURTEEN_TEXT = "\n".join([
    "+   10  apples",
    "-    3",
    "*    2",
    "    --",
    "=   14",
])


def make_ledger(rows: Sequence[tuple], config: TapeConfig = None, column: int = 0) -> Ledger:
    """Build a ledger from (operator, value[, description]) tuples."""
    ledger = Ledger(config or TapeConfig(), column)
    for row in rows:
        ledger.append_row(*row)
    return ledger


def indent(text: str, columns: int) -> str:
    """Shift every non-empty line of text right by columns."""
    pad = " " * columns
    return "\n".join(pad + line if line else line for line in text.split("\n"))


# =============================================================================
# CONFIGURATION FIXTURES
# =============================================================================

@pytest.fixture
def config():
    """Default configuration."""
    return TapeConfig()


@pytest.fixture
def framed_config():
    """Configuration that frames every ledger written."""
    return TapeConfig(draw_frames=True)


@pytest.fixture
def comma_config():
    """Decimal comma with a dot as thousands delimiter."""
    return TapeConfig(decimal_point=",", thousands_delimiter=".")


@pytest.fixture
def interpreter(config):
    return OperatorInterpreter.for_config(config)


@pytest.fixture
def layout(config):
    return LayoutEngine(config)


# =============================================================================
# LEDGER FIXTURES
# =============================================================================

@pytest.fixture
def fourteen(config):
    """Ledger +10 apples, -3, *2 with sum 14."""
    return make_ledger([("+", "10", "apples"), ("-", "3"), ("*", "2")], config)


@pytest.fixture
def fourteen_buffer():
    """The fourteen ledger as text, cursor on its first row."""
    return TextBuffer(FOURTEEN_TEXT, Position(0, 0))


# =============================================================================
# FACTORIES
# =============================================================================

@pytest.fixture
def scripted():
    """Factory for ScriptedInput."""
    def _make(values: Sequence[str], descriptions: Optional[Sequence[Optional[str]]] = None) -> ScriptedInput:
        return ScriptedInput(values, descriptions)
    return _make


@pytest.fixture
def controller_for(config):
    """Factory: TapeController over a buffer with an optional script."""
    def _make(buffer, values=None, descriptions=None, cfg: TapeConfig = None) -> TapeController:
        source = ScriptedInput(values, descriptions) if values is not None else None
        return TapeController(buffer, cfg or config, source)
    return _make


@pytest.fixture
def fake_surface():
    """Factory for the minimal snapshot-based surface."""
    def _make(text: str = "", line: int = 0, column: int = 0) -> FakeSurface:
        return FakeSurface(text, Position(line, column))
    return _make
