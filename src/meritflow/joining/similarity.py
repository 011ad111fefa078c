"""Name keys and word-overlap similarity for fuzzy record matching."""

from __future__ import annotations

import re
from typing import Optional

_NON_WORD = re.compile(r"[^\w\s]")
_SPACES = re.compile(r"\s+")


def normalize_employee_id(value: Optional[str]) -> str:
    if not value:
        return ""
    text = value.strip()
    if re.fullmatch(r"\d+\.0+", text):
        text = text.split(".")[0]
    return text.casefold()


def normalize_email(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def normalize_name_key(name: Optional[str]) -> str:
    """Comparable key: "Smith, John A." and "john a smith" both give "john a smith"."""
    if not name:
        return ""
    text = name.strip()
    parts = [p.strip() for p in text.split(",")]
    if len(parts) == 2 and parts[0] and parts[1]:
        text = f"{parts[1]} {parts[0]}"
    text = _NON_WORD.sub("", text.lower())
    return _SPACES.sub(" ", text).strip()


def levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def _words_match(a: str, b: str) -> bool:
    return a == b or a in b or b in a or levenshtein(a, b) <= 1


def name_similarity(name_a: str, name_b: str) -> float:
    """Share of words in ``name_a`` that have a close counterpart in ``name_b``.

    Both inputs should already be name keys. Single-letter words (initials)
    are ignored; the denominator is the larger word count.
    """
    if not name_a or not name_b:
        return 0.0
    if name_a == name_b:
        return 1.0
    words_a = [w for w in name_a.split(" ") if len(w) > 1]
    words_b = [w for w in name_b.split(" ") if len(w) > 1]
    denominator = max(len(words_a), len(words_b))
    if denominator == 0:
        return 0.0
    matches = sum(1 for wa in words_a if any(_words_match(wa, wb) for wb in words_b))
    return matches / denominator
