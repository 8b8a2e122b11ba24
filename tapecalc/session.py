"""
session.py - The prompt loop as a state machine

Building or editing a ledger alternates between asking for a value and
asking for a description. transition() is the pure step function of that
loop: it takes the current TapeState and one response from the input
source, and returns the next state plus the effects the controller must
carry out. It never touches a surface or an input source, so the same
machine can be driven synchronously (TapeController) or from an event loop.

    AWAITING_VALUE --value--> AWAITING_DESCRIPTION --description--> AWAITING_VALUE
          |                                              |
          +--""--> DONE                                  +--(row ended with "=")--> DONE
          +--bad number--> AWAITING_VALUE (RejectInput)
          +--division by zero--> FAILED (Abort)
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple, Union

from .core import (
    InputSession, NumericValue, PromptContext, ZERO,
    DivisionByZero, MalformedNumber, NumberOutOfRange, TapeError,
)
from .operators import OperatorInterpreter, Step


class Phase(Enum):
    AWAITING_VALUE = "awaiting_value"
    AWAITING_DESCRIPTION = "awaiting_description"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class TapeState:
    """
    Snapshot of one prompt session.

    Attributes:
        phase: What the session is waiting for.
        sum: Running sum after the last committed row.
        memory: Memory register after the last committed row.
        pending: Step waiting for its description (AWAITING_DESCRIPTION only).
        rows_added: Rows committed so far in this session.
        error: The error that moved the session to FAILED.
    """
    phase: Phase = Phase.AWAITING_VALUE
    sum: NumericValue = ZERO
    memory: NumericValue = ZERO
    pending: Optional[Step] = None
    rows_added: int = 0
    error: Optional[TapeError] = None

    @classmethod
    def start(cls, total: NumericValue = ZERO, memory: NumericValue = ZERO) -> TapeState:
        return cls(Phase.AWAITING_VALUE, total, memory)

    @property
    def finished(self) -> bool:
        return self.phase in (Phase.DONE, Phase.FAILED)


# ============================================================================
# EFFECTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class AppendRow:
    """Commit step's row with this description."""
    step: Step
    description: str


@dataclass(frozen=True, slots=True)
class RejectInput:
    """The value input was not understood; ask again."""
    text: str
    reason: str


@dataclass(frozen=True, slots=True)
class Finish:
    """The session ended normally; write the total."""
    sum: NumericValue


@dataclass(frozen=True, slots=True)
class Abort:
    """The session failed; nothing it wrote may survive."""
    error: TapeError


Effect = Union[AppendRow, RejectInput, Finish, Abort]


# ============================================================================
# TRANSITION
# ============================================================================

def transition(
    state: TapeState,
    text: str,
    interpreter: OperatorInterpreter,
) -> Tuple[TapeState, List[Effect]]:
    """
    Advance the session by one response.

    Args:
        state: Current state (must not be finished).
        text: Response to the prompt the phase implies.
        interpreter: Turns value input into steps.

    Returns:
        (next state, effects to carry out in order)

    Raises:
        ValueError: If state is already DONE or FAILED.
    """
    if state.phase is Phase.AWAITING_VALUE:
        if not text or not text.strip():
            return replace(state, phase=Phase.DONE), [Finish(state.sum)]
        try:
            step = interpreter.interpret(text, state.sum, state.memory)
        except (MalformedNumber, NumberOutOfRange) as e:
            return state, [RejectInput(text, str(e))]
        except DivisionByZero as e:
            return replace(state, phase=Phase.FAILED, error=e), [Abort(e)]
        return replace(state, phase=Phase.AWAITING_DESCRIPTION, pending=step), []

    if state.phase is Phase.AWAITING_DESCRIPTION:
        step = state.pending
        description = " ".join((text or "").split())
        committed = TapeState(
            phase=Phase.DONE if step.terminal else Phase.AWAITING_VALUE,
            sum=step.sum,
            memory=step.memory,
            pending=None,
            rows_added=state.rows_added + 1,
        )
        effects: List[Effect] = [AppendRow(step, description)]
        if step.terminal:
            effects.append(Finish(step.sum))
        return committed, effects

    raise ValueError(f"Session is already {state.phase.value}")


def prompt_context(
    state: TapeState,
    interpreter: OperatorInterpreter,
    session: Optional[InputSession] = None,
    first_row: int = 1,
) -> PromptContext:
    """Build the display-form context an input source sees for the next prompt."""
    value = ""
    if state.pending is not None:
        value = interpreter.display(state.pending.row.value)
    return PromptContext(
        sum=interpreter.display(state.sum),
        value=value,
        memory=interpreter.display(state.memory),
        tax_rate=interpreter.tax_percent,
        row_number=first_row + state.rows_added,
        session=session,
    )
