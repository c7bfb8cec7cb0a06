"""Intent classification for board commands.

Rule-based: an ordered cascade of keyword predicates over the normalized
message, first match wins. Cues overlap on purpose ("add" appears in
create, tag, prepend and append commands), so the order of INTENT_RULES
decides which operation a sentence maps to. Narrow phrasings come first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from src.interpreter.normalize import normalize

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    SEARCH = "SEARCH"
    CREATE = "CREATE"
    MOVE = "MOVE"
    DELETE = "DELETE"
    ADD_TAG = "ADD_TAG"
    REMOVE_TAG = "REMOVE_TAG"
    MARK_DONE = "MARK_DONE"
    UPDATE = "UPDATE"
    RENAME_TITLE = "RENAME_TITLE"
    PREPEND_TITLE = "PREPEND_TITLE"
    APPEND_TITLE = "APPEND_TITLE"
    INFO = "INFO"
    HELP = "HELP"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class IntentRule:
    """One predicate in the cascade.

    Matches when any `any_of` cue is present, or every cue of one
    `all_of` group is present, and no `none_of` cue is present.
    All tests are substring tests on the normalized message.
    """

    intent: Intent
    any_of: tuple[str, ...] = ()
    all_of: tuple[tuple[str, ...], ...] = ()
    none_of: tuple[str, ...] = ()

    def match(self, normalized: str) -> str | None:
        """Return the cue that fired, or None."""
        if any(cue in normalized for cue in self.none_of):
            return None
        for cue in self.any_of:
            if cue in normalized:
                return cue
        for group in self.all_of:
            if all(cue in normalized for cue in group):
                return "+".join(group)
        return None


_REMOVE_TAG_CUES = ("remove tag", "remove label", "untag", "detach")

INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(
        Intent.PREPEND_TITLE,
        any_of=("before all", "prepend", "prefix", "add before"),
        all_of=(("before", "task", "add"),),
    ),
    IntentRule(
        Intent.APPEND_TITLE,
        any_of=("after all", "append", "suffix", "add after"),
        all_of=(("after", "task", "add"),),
    ),
    IntentRule(
        Intent.RENAME_TITLE,
        any_of=("rename",),
        all_of=(("change", "title"), ("update", "title")),
    ),
    IntentRule(Intent.ADD_TAG, any_of=("tag", "label"), none_of=_REMOVE_TAG_CUES),
    IntentRule(Intent.REMOVE_TAG, any_of=_REMOVE_TAG_CUES),
    IntentRule(
        Intent.MARK_DONE,
        any_of=("finish task",),
        all_of=(("mark", "done"), ("mark", "complete")),
    ),
    IntentRule(Intent.MOVE, any_of=("move", "transfer", "relocate")),
    IntentRule(Intent.DELETE, any_of=("delete", "remove task", "trash", "eliminate")),
    IntentRule(
        Intent.CREATE,
        any_of=("create", "new task", "add task", "make task"),
        none_of=("tag", "label"),
    ),
    IntentRule(Intent.UPDATE, any_of=("update", "change", "modify", "set priority")),
    IntentRule(
        Intent.SEARCH,
        any_of=("show", "list", "find", "search", "display", "view", "what", "get"),
    ),
    IntentRule(
        Intent.INFO,
        any_of=("info", "summary", "stats", "statistics", "status", "how many"),
    ),
    IntentRule(Intent.HELP, any_of=("help", "what can", "commands")),
)


@dataclass(frozen=True)
class IntentResult:
    """Result of intent classification."""

    intent: Intent
    matched_cue: str | None = None
    rule_index: int | None = None  # position in INTENT_RULES, None for UNKNOWN


class IntentClassifier:
    """Evaluates a rule cascade in order; the first matching rule wins."""

    def __init__(self, rules: tuple[IntentRule, ...] = INTENT_RULES) -> None:
        self._rules = rules

    def classify(self, message: str) -> Intent:
        return self.classify_detailed(message).intent

    def classify_detailed(self, message: str) -> IntentResult:
        normalized = normalize(message)
        if not normalized:
            return IntentResult(intent=Intent.UNKNOWN)

        for index, rule in enumerate(self._rules):
            cue = rule.match(normalized)
            if cue is not None:
                return IntentResult(intent=rule.intent, matched_cue=cue, rule_index=index)

        return IntentResult(intent=Intent.UNKNOWN)


_default_classifier = IntentClassifier()


def detect_action(message: str) -> Intent:
    """Classify a message with the default rule cascade."""
    return _default_classifier.classify(message)
