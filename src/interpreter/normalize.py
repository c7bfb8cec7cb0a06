"""Text canonicalization shared by matching, extraction and classification."""

from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str | None) -> str:
    """Lower-case, turn punctuation into spaces, collapse whitespace, strip.

    Idempotent: normalize(normalize(x)) == normalize(x).
    """
    if not text:
        return ""
    lowered = _NON_WORD.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", lowered).strip()
