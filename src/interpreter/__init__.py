"""Rule-based natural-language command interpreter for the task board.

Entry point:
    CommandInterpreter(store).process(message, confirm=False, session_id="") -> ActionResult
"""

from src.interpreter.dispatcher import CommandInterpreter
from src.interpreter.results import ActionResult, ActionTag, FailureReason

__all__ = [
    "ActionResult",
    "ActionTag",
    "CommandInterpreter",
    "FailureReason",
]
