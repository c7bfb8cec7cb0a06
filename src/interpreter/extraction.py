"""Free-text argument extraction from raw command messages.

Works on the raw message so titles and prefixes keep their case and
spacing. Quoted text always wins over keyword heuristics; a quote only
opens after a non-word character, so apostrophes in "What's" or
"Bob's" never start a span.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

_QUOTED = r"(?<!\w)([\"'])(.+?)\1(?!\w)"
_QUOTED_SPAN = re.compile(_QUOTED)

_CREATE_QUOTED = re.compile(
    r"\b(?:create|add|new|make)\s+(?:a\s+)?(?:new\s+)?task\s+"
    r"(?:called\s+|named\s+|titled\s+)?" + _QUOTED,
    re.IGNORECASE,
)
_CREATE_CALLED = re.compile(r"\b(?:called|named|titled)\s+(.+)$", re.IGNORECASE)
_CREATE_PLAIN = re.compile(
    r"\b(?:create|add|new|make)\s+(?:a\s+)?(?:new\s+)?task\s+(.+)$", re.IGNORECASE
)

_TRAILING_PRIORITY = re.compile(
    r"\s*(?:\b(?:with|as)\s+)?"
    r"(?:\b(?:high|medium|low)\s+priority|\bpriority\s+(?:high|medium|low))\s*$",
    re.IGNORECASE,
)
_EDGE_FILLER = re.compile(r"^(?:the|a|an|task|tasks)\s+|\s+(?:task|tasks)$", re.IGNORECASE)

_LABEL_STOP_WORDS = frozenset(
    "a all an as each every for from in it items on task tasks that the them this to with".split()
)
_TAG_AS = re.compile(r"\b(?:tag|label)\s+(.+?)\s+as\s+[\"']?([\w-]+)", re.IGNORECASE)
_LABEL_PATTERNS = (
    re.compile(r"\badd\s+(?:tag|label)(?:\s*[-:]\s*|\s+)[\"']?([\w-]+)", re.IGNORECASE),
    re.compile(r"\bwith\s+(?:tag|label)(?:\s*[-:]\s*|\s+)[\"']?([\w-]+)", re.IGNORECASE),
    re.compile(r"\btags?(?:\s*[-:]\s*|\s+)[\"']?([\w-]+)", re.IGNORECASE),
    re.compile(r"\blabels?(?:\s*[-:]\s*|\s+)[\"']?([\w-]+)", re.IGNORECASE),
)
_TAG_TARGET = re.compile(r"\b(?:to|on|for)\s+(.+)$", re.IGNORECASE)
_UNTAG_TARGET = re.compile(r"\bfrom\s+(.+)$", re.IGNORECASE)

_MOVE_SUBJECT = (
    re.compile(r"\b(?:move|transfer|relocate)\s+(.+?)\s+(?:to|into)\s+", re.IGNORECASE),
    re.compile(r"\bmark\s+(.+?)\s+as\b", re.IGNORECASE),
    re.compile(r"\bfinish\s+task\s+(.+)$", re.IGNORECASE),
)
_DESTINATION = re.compile(r"\b(?:to|into)\s+", re.IGNORECASE)
_DESTINATION_TAIL = re.compile(r"\s+(?:column|list|lane)$", re.IGNORECASE)

_DELETE_SUBJECT = re.compile(r"\b(?:delete|remove|trash|eliminate)\s+(.+)$", re.IGNORECASE)
_PRIORITY_SUBJECT = (
    re.compile(r"\bfor\s+(.+)$", re.IGNORECASE),
    re.compile(r"\b(?:update|change|modify|set)\s+(.+?)\s+(?:to|priority)\b", re.IGNORECASE),
)
_RENAME = (
    re.compile(r"\brename\s+(.+?)\s+(?:to|as)\s+(.+)$", re.IGNORECASE),
    re.compile(r"\b(?:change|update)\s+(?:the\s+)?title\s+of\s+(.+?)\s+to\s+(.+)$", re.IGNORECASE),
    re.compile(r"\b(?:change|update)\s+(.+?)(?:'s)?\s+title\s+to\s+(.+)$", re.IGNORECASE),
)


def quoted_spans(message: str) -> list[str]:
    return [m.group(2) for m in _QUOTED_SPAN.finditer(message)]


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return text


def clean_fragment(text: str | None) -> str:
    """Trim quotes, punctuation and filler words around a task reference."""
    if not text:
        return ""
    cleaned = _unquote(text).strip(" .!?,;:")
    previous = None
    while previous != cleaned:
        previous = cleaned
        cleaned = _EDGE_FILLER.sub("", cleaned).strip()
    return _unquote(cleaned)


def strip_trailing_context(text: str, names: Iterable[str]) -> str:
    """Drop trailing "in <column>", "to <project> project" and priority phrases.

    Only known column and project names are stripped, so a title that
    happens to end in "in Paris" survives.
    """
    ordered = sorted({n for n in names if n.strip()}, key=len, reverse=True)
    location = None
    if ordered:
        alternatives = "|".join(re.escape(n) for n in ordered)
        location = re.compile(
            r"\s*\b(?:in|to|into|on|under)\s+(?:the\s+)?(?:column\s+)?"
            rf"(?:{alternatives})(?:\s+(?:column|project|board))?\s*$",
            re.IGNORECASE,
        )

    cleaned = text.strip().rstrip(".!?")
    previous = None
    while previous != cleaned:
        previous = cleaned
        cleaned = _TRAILING_PRIORITY.sub("", cleaned).strip()
        if location is not None:
            cleaned = location.sub("", cleaned).strip()
    return cleaned


def extract_create_title(message: str, context_names: Iterable[str] = ()) -> str:
    """Title for a new task, or "" when the message names none.

    Order: quoted title after the verb, any quoted span, then the text
    after "called/named/titled" or "create task" minus trailing context.
    """
    match = _CREATE_QUOTED.search(message)
    if match and match.group(2).strip():
        return match.group(2).strip()

    for span in quoted_spans(message):
        if span.strip():
            return span.strip()

    names = list(context_names)
    for pattern in (_CREATE_CALLED, _CREATE_PLAIN):
        match = pattern.search(message)
        if match:
            title = strip_trailing_context(match.group(1), names)
            title = _unquote(title).strip()
            if title:
                return title
    return ""


def _edit_text(message: str, verbs: str, *, before: bool) -> str:
    adjacent = re.compile(rf"\b(?:{verbs})\s+(?:with\s+)?{_QUOTED}", re.IGNORECASE)
    match = adjacent.search(message)
    if match and match.group(2).strip():
        return match.group(2)

    for span in quoted_spans(message):
        if span.strip():
            return span

    keyword = re.compile(
        rf"\b(?:{verbs})\s+(?:with\s+)?(.+?)(?:\s+(?:to|before|after|on|in)\s+.*)?$",
        re.IGNORECASE,
    )
    match = keyword.search(message)
    if match:
        text = re.sub(r"^(?:(?:before|after|all|task|tasks|in|to)\s+)+", "", match.group(1).strip())
        text = text.strip(" .!?")
        if len(text) > 2:
            return f"{text} " if before else f" {text}"
    return ""


def extract_prefix(message: str) -> str:
    """Text to put before titles. Quoted text is returned verbatim."""
    return _edit_text(message, "add|prepend|prefix", before=True)


def extract_suffix(message: str) -> str:
    """Text to put after titles. Quoted text is returned verbatim."""
    return _edit_text(message, "add|append|suffix", before=False)


def extract_label_name(message: str) -> str | None:
    """Label named by "tag X as L", "add tag L", "with tag L" or "tag L"."""
    match = _TAG_AS.search(message)
    if match:
        return match.group(2)
    for pattern in _LABEL_PATTERNS:
        for match in pattern.finditer(message):
            candidate = match.group(1)
            if candidate.lower() not in _LABEL_STOP_WORDS:
                return candidate
    return None


def extract_tag_target(message: str) -> str:
    """Task reference in a tagging command ("tag X as L", "add tag L to X")."""
    match = _TAG_AS.search(message)
    if match:
        return clean_fragment(match.group(1))
    match = _TAG_TARGET.search(message)
    return clean_fragment(match.group(1)) if match else ""


def extract_move_subject(message: str) -> str:
    for pattern in _MOVE_SUBJECT:
        match = pattern.search(message)
        if match:
            fragment = clean_fragment(match.group(1))
            if fragment:
                return fragment
    return ""


def extract_destinations(message: str) -> list[str]:
    """Candidate column references: the text after each "to"/"into".

    Leftmost first. "Move X to To Do" yields both "To Do" and "Do", so
    callers score every candidate instead of trusting the last "to".
    """
    candidates: list[str] = []
    for match in _DESTINATION.finditer(message):
        fragment = _DESTINATION_TAIL.sub("", clean_fragment(message[match.end() :])).strip()
        if fragment:
            candidates.append(fragment)
    return candidates


def extract_delete_subject(message: str) -> str:
    match = _DELETE_SUBJECT.search(message)
    return clean_fragment(match.group(1)) if match else ""


def extract_priority_subject(message: str) -> str:
    for pattern in _PRIORITY_SUBJECT:
        match = pattern.search(message)
        if match:
            fragment = clean_fragment(_TRAILING_PRIORITY.sub("", match.group(1)))
            fragment = re.sub(r"^priority\s+(?:of\s+)?", "", fragment, flags=re.IGNORECASE)
            if fragment:
                return fragment
    return ""


def extract_rename(message: str) -> tuple[str, str]:
    """(old title reference, new title); either may be ""."""
    for pattern in _RENAME:
        match = pattern.search(message)
        if match:
            return clean_fragment(match.group(1)), _unquote(match.group(2)).strip(" .!?")
    return "", ""


def extract_untag_target(message: str) -> str:
    """Task reference after "from" in "remove label L from X"."""
    match = _UNTAG_TARGET.search(message)
    return clean_fragment(match.group(1)) if match else ""
