"""
inputs.py - Input sources for build and edit sessions

ScriptedInput replays a fixed list of responses and is what tests and the
demo use. ConsoleInput prompts on the terminal through prompt_toolkit, with
one in-memory history per InputSession so two ledgers never share
up-arrow history.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence
from weakref import WeakKeyDictionary

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.validation import ValidationError, Validator

from .core import InputSession, PromptContext, MalformedNumber
from .operators import OperatorInterpreter


class ScriptedInput:
    """
    Input source that answers from prepared lists.

    Args:
        values: Responses to value prompts, in order. Once they run out
            every value prompt gets "", which ends the session.
        descriptions: Responses to description prompts. None entries, or
            running out, mean "take the suggested description".

    Every PromptContext seen is kept in contexts, in prompt order.
    """

    def __init__(self, values: Sequence[str], descriptions: Optional[Sequence[Optional[str]]] = None):
        self.values: List[str] = list(values)
        self.descriptions: List[Optional[str]] = list(descriptions or [])
        self.contexts: List[PromptContext] = []
        self.suggestions: List[str] = []

    def request_value(self, context: PromptContext) -> str:
        self.contexts.append(context)
        return self.values.pop(0) if self.values else ""

    def request_description(self, context: PromptContext, suggested: str) -> str:
        self.contexts.append(context)
        self.suggestions.append(suggested)
        answer = self.descriptions.pop(0) if self.descriptions else None
        return suggested if answer is None else answer


class _ValueValidator(Validator):
    """Accepts an empty line, a control token, or a value the interpreter can parse."""

    def __init__(self, interpreter: OperatorInterpreter) -> None:
        self._interpreter = interpreter

    def validate(self, document) -> None:
        text = document.text
        if not text.strip() or self._interpreter.control_token(text):
            return
        try:
            self._interpreter.parse_value(text)
        except MalformedNumber as e:
            raise ValidationError(message=str(e)) from None


class ConsoleInput:
    """
    Terminal input source built on prompt_toolkit.

    Ctrl+C or Ctrl+D at a value prompt ends the session the same way an
    empty line does; at a description prompt they keep the suggestion.

    Args:
        interpreter: When given, value input is validated as it is entered.
        input, output: prompt_toolkit input/output objects (tests pass pipes).
    """

    def __init__(self, interpreter: Optional[OperatorInterpreter] = None, input=None, output=None):
        self.interpreter = interpreter
        self._input = input
        self._output = output
        # entries go away with their InputSession
        self._sessions: WeakKeyDictionary[InputSession, Dict[str, PromptSession]] = WeakKeyDictionary()
        self._unscoped: Dict[str, PromptSession] = {}

    def _prompt_session(self, context: PromptContext, kind: str) -> PromptSession:
        if context.session is None:
            sessions = self._unscoped
        else:
            sessions = self._sessions.setdefault(context.session, {})
        if kind not in sessions:
            history = InMemoryHistory()
            for text in self._seed(context.session, kind):
                history.append_string(text)
            sessions[kind] = PromptSession(history=history, input=self._input, output=self._output)
        return sessions[kind]

    @staticmethod
    def _seed(session: Optional[InputSession], kind: str) -> List[str]:
        if session is None:
            return []
        return list(session.value_history if kind == "value" else session.description_history)

    def request_value(self, context: PromptContext) -> str:
        validator = _ValueValidator(self.interpreter) if self.interpreter else None
        message = f"[{context.row_number}] sum {context.sum}  mem {context.memory}  tax {context.tax_rate}% > "
        try:
            return self._prompt_session(context, "value").prompt(
                message, validator=validator, validate_while_typing=False
            )
        except (KeyboardInterrupt, EOFError):
            return ""

    def request_description(self, context: PromptContext, suggested: str) -> str:
        message = f"[{context.row_number}] {context.value}  description: "
        try:
            return self._prompt_session(context, "description").prompt(message, default=suggested)
        except (KeyboardInterrupt, EOFError):
            return suggested
