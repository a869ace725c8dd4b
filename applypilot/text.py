"""Tokenizer and small text helpers shared by ranking and parsing."""
from __future__ import annotations

import re
from typing import Iterable

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_NON_PRINTABLE_RE = re.compile(r"[^\x09\x0A\x20-\x7E]")
_MIN_TOKEN_LEN = 3

# Bullets and dashes survive ASCII folding as "-".
_GLYPHS = str.maketrans({
    "•": "-", "·": "-", "▪": "-", "●": "-",
    "–": "-", "—": "-",
})


def tokenize(text: str | None) -> list[str]:
    """Lowercase, keep ``[a-z0-9]`` runs, drop tokens shorter than 3 chars."""
    if not text:
        return []
    return [t for t in _NON_ALNUM_RE.sub(" ", text.lower()).split() if len(t) >= _MIN_TOKEN_LEN]


def unique_strings(values: Iterable[str | None]) -> list[str]:
    """Strip and dedupe case-insensitively; the first spelling wins."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        v = (value or "").strip()
        if not v:
            continue
        key = v.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(v)
    return result


def normalize_text(raw: str | None) -> str:
    """Plain-ASCII text with single spaces and at most one blank line in a row."""
    text = (raw or "").replace("\x00", " ").replace("\r", "")
    text = text.translate(_GLYPHS)
    text = _NON_PRINTABLE_RE.sub(" ", text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" ?\n ?", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
