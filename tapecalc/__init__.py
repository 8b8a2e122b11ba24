"""
tapecalc - Running-Total Tape Calculator over Text

Finds numbers in plain text, adds them up with exact decimal arithmetic, and
writes the result back as an aligned, optionally framed ledger that can be
edited in place.

Usage:
    from tapecalc import TapeController, TextBuffer, ScriptedInput, Position

    buffer = TextBuffer("")
    tape = TapeController(buffer, input_source=ScriptedInput(
        ["100", "25.50", "T"], ["rent", "power", None],
    ))
    tape.build_ledger()
    print(buffer.text)
    # +   100     rent
    # +    25.50  power
    # +    11.14  Sales tax 8.875% on 125.50
    #     ------
    # =   136.64

    # Total a column of numbers already in the text
    buffer = TextBuffer("apples 1,200\\npears 30.5", cursor=Position(0, 0))
    TapeController(buffer).scan_and_sum().sum      # "1230.5"
"""

# Core types
from .core import (
    Position,
    Row,
    Metrics,
    PromptContext,
    InputSession,
    TextSurface,
    InputSource,
    NumericValue,
    DisplayValue,
    TapeError,
    MalformedNumber,
    MalformedLedger,
    RangeExceedsLedger,
    DivisionByZero,
    FramingGeometryError,
    NumberOutOfRange,
    ROW_OPERATORS,
    CONTROL_TOKENS,
)

# Configuration
from .config import TapeConfig, FrameGlyphs, DEFAULT_CONFIG

# Arithmetic
from .decimal_engine import add, sub, mul, div, round_half_up, canonical, DECIMAL_PRECISION

# Numbers in text
from .formatter import delimit_num, delimit_num_check, undelimit, canonicalize_slack
from .lexer import NumberLexer, NumberMatch, closest_candidate

# Operators
from .operators import OperatorInterpreter, Step, apply_operator

# Ledger model, text grammar and layout
from .ledger import Ledger, ledger_from_rows
from .parser import LedgerGrammar, LedgerRegion, ParsedLedger, parse_ledger
from .layout import LayoutEngine

# Frames
from .frame import FrameBox, FrameRenderer

# Sessions
from .session import (
    Phase, TapeState, AppendRow, RejectInput, Finish, Abort,
    transition, prompt_context,
)

# Surface and input sources
from .surface import TextBuffer, TextEdit, EditLog
from .inputs import ScriptedInput, ConsoleInput

# Operations
from .controller import TapeController, TapeResult


__all__ = [
    # Core
    'Position', 'Row', 'Metrics', 'PromptContext', 'InputSession',
    'TextSurface', 'InputSource', 'NumericValue', 'DisplayValue',
    'TapeError', 'MalformedNumber', 'MalformedLedger', 'RangeExceedsLedger',
    'DivisionByZero', 'FramingGeometryError', 'NumberOutOfRange',
    'ROW_OPERATORS', 'CONTROL_TOKENS',
    # Configuration
    'TapeConfig', 'FrameGlyphs', 'DEFAULT_CONFIG',
    # Arithmetic
    'add', 'sub', 'mul', 'div', 'round_half_up', 'canonical', 'DECIMAL_PRECISION',
    # Numbers in text
    'delimit_num', 'delimit_num_check', 'undelimit', 'canonicalize_slack',
    'NumberLexer', 'NumberMatch', 'closest_candidate',
    # Operators
    'OperatorInterpreter', 'Step', 'apply_operator',
    # Ledger
    'Ledger', 'ledger_from_rows',
    'LedgerGrammar', 'LedgerRegion', 'ParsedLedger', 'parse_ledger',
    'LayoutEngine',
    # Frames
    'FrameBox', 'FrameRenderer',
    # Sessions
    'Phase', 'TapeState', 'AppendRow', 'RejectInput', 'Finish', 'Abort',
    'transition', 'prompt_context',
    # Surface and input
    'TextBuffer', 'TextEdit', 'EditLog', 'ScriptedInput', 'ConsoleInput',
    # Operations
    'TapeController', 'TapeResult',
]

__version__ = '1.0.0'
