"""Person-name normalization for HR exports.

Handles "Last, First Middle" inversion, title prefixes, generational and
professional suffixes, and proper-casing with Mc/Mac/O'/D' handling.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any, Optional, Union

from pydantic import BaseModel

PREFIXES = frozenset({"mr", "mrs", "ms", "miss", "dr", "prof", "rev"})
SUFFIXES = frozenset({
    "jr", "sr", "junior", "senior",
    "ii", "iii", "iv", "v",
    "2nd", "3rd", "4th", "5th",
    "phd", "md", "dds", "esq", "cpa",
})

_WHITESPACE = re.compile(r"\s+")
_COMMA = re.compile(r"\s*,\s*")
_CLAN_PREFIX = re.compile(r"^(mc|mac|o'|d')(\w)(.*)$", re.IGNORECASE)

NameInput = Union[str, Mapping[str, Any], None]


class NameOptions(BaseModel):
    preserve_middle_name: bool = False
    handle_suffixes: bool = True
    capitalize_names: bool = True
    trim_whitespace: bool = True


class NormalizedName(BaseModel):
    first_name: str = ""
    last_name: str = ""
    middle_name: Optional[str] = None
    full_name: str = ""
    display_name: str = ""


class DisplayStyle(StrEnum):
    FIRST_LAST = "first-last"
    LAST_FIRST = "last-first"
    FIRST_MIDDLE_LAST = "first-middle-last"
    INITIALS = "initials"


def _bare(token: str) -> str:
    return token.replace(".", "").lower()


def _clean(text: str, options: NameOptions) -> str:
    if options.trim_whitespace:
        text = _WHITESPACE.sub(" ", text.strip())
    return _COMMA.sub(", ", text)


def _proper_word(word: str) -> str:
    if not word:
        return word
    match = _CLAN_PREFIX.match(word)
    # "Mack" and "Macy" are names in their own right
    if match and len(word) > len(match.group(1)) + 2:
        prefix, letter, rest = match.groups()
        return prefix[0].upper() + prefix[1:].lower() + letter.upper() + rest.lower()
    return word[0].upper() + word[1:].lower()


def proper_case(part: str) -> str:
    """Title-case a name part, keeping hyphens and clan prefixes."""
    words = part.split(" ")
    return " ".join("-".join(_proper_word(w) for w in word.split("-")) for word in words)


def _strip_prefixes(tokens: list[str]) -> list[str]:
    while len(tokens) > 1 and _bare(tokens[0]) in PREFIXES:
        tokens = tokens[1:]
    return tokens


def _peel_suffixes(tokens: list[str]) -> tuple[list[str], list[str]]:
    suffixes: list[str] = []
    while len(tokens) > 1 and _bare(tokens[-1]) in SUFFIXES:
        suffixes.insert(0, tokens[-1])
        tokens = tokens[:-1]
    return tokens, suffixes


def _format_suffix(token: str) -> str:
    bare = _bare(token)
    if bare in {"ii", "iii", "iv", "v"}:
        return bare.upper()
    if bare in {"phd"}:
        return "PhD"
    if bare in {"md", "dds", "cpa"}:
        return bare.upper()
    return bare.capitalize() + ("." if bare in {"jr", "sr"} else "")


def _split_comma_form(text: str, options: NameOptions) -> tuple[str, str, Optional[str], list[str]]:
    """Split the inverted form, e.g. "Smith, John Paul" or "Smith, John, Paul"."""
    parts = [p for p in text.split(",") if p.strip()]
    last_tokens = parts[0].split()
    rest = " ".join(p.strip() for p in parts[1:]).split()
    suffixes: list[str] = []
    if options.handle_suffixes:
        last_tokens, suffixes = _peel_suffixes(last_tokens)
        rest, trailing = _peel_suffixes(rest)
        suffixes.extend(trailing)
    rest = _strip_prefixes(rest)
    first = rest[0] if rest else ""
    middle_tokens = rest[1:]
    last = " ".join(last_tokens)
    # the comma form names the surname explicitly, so extra given names stay middle names
    middle = " ".join(middle_tokens) or None
    return first, last, middle, suffixes


def _split_space_form(text: str, options: NameOptions) -> tuple[str, str, Optional[str], list[str]]:
    tokens = _strip_prefixes(text.split())
    suffixes: list[str] = []
    if options.handle_suffixes:
        tokens, suffixes = _peel_suffixes(tokens)
    if not tokens:
        return "", "", None, suffixes
    if len(tokens) == 1:
        return tokens[0], "", None, suffixes
    if len(tokens) == 2:
        return tokens[0], tokens[1], None, suffixes
    first, interior, last = tokens[0], tokens[1:-1], tokens[-1]
    if options.preserve_middle_name:
        return first, last, " ".join(interior), suffixes
    return first, " ".join(interior + [last]), None, suffixes


def _compose(first: str, last: str, middle: Optional[str], suffixes: list[str],
             options: NameOptions) -> NormalizedName:
    if options.capitalize_names:
        first = proper_case(first)
        last = proper_case(last)
        middle = proper_case(middle) if middle else middle
    if suffixes:
        last = " ".join([last] + [_format_suffix(s) for s in suffixes]).strip()
    full = " ".join(p for p in (first, middle, last) if p)
    display = " ".join(p for p in (first, last) if p)
    return NormalizedName(
        first_name=first,
        last_name=last,
        middle_name=middle or None,
        full_name=full,
        display_name=display,
    )


def normalize_name(value: NameInput, options: NameOptions | None = None) -> NormalizedName:
    """Split a free-form or partially structured name into canonical parts.

    ``value`` may be a string or a mapping with any of ``name``,
    ``first_name`` and ``last_name``. When both structured parts are present
    and the free-text form has no comma, the structured parts win.
    """
    options = options or NameOptions()
    if value is None:
        return NormalizedName()

    if isinstance(value, Mapping):
        first = str(value.get("first_name") or "").strip()
        last = str(value.get("last_name") or "").strip()
        text = str(value.get("name") or "").strip()
        if first and last and "," not in text:
            return _compose(first, last, None, [], options)
        if not text:
            text = " ".join(p for p in (first, last) if p)
    else:
        text = str(value)

    text = _clean(text, options)
    if not text:
        return NormalizedName()

    if "," in text:
        first, last, middle, suffixes = _split_comma_form(text, options)
    else:
        first, last, middle, suffixes = _split_space_form(text, options)
    return _compose(first, last, middle, suffixes, options)


def normalize_names(values: Iterable[NameInput], options: NameOptions | None = None) -> list[NormalizedName]:
    return [normalize_name(v, options) for v in values]


def is_well_formatted(name: str) -> bool:
    """True for plain "First Last" text that needs no normalization."""
    if not name or "," in name:
        return False
    tokens = name.split()
    if len(tokens) < 2:
        return False
    return all(re.fullmatch(r"[A-Z][a-zA-Z'\-]*\.?", t) for t in tokens)


def get_initials(value: NameInput) -> str:
    parsed = normalize_name(value)
    return ".".join(p[0].upper() for p in (parsed.first_name, parsed.last_name) if p)


def format_for_display(value: NameInput, style: DisplayStyle | str = DisplayStyle.FIRST_LAST) -> str:
    parsed = normalize_name(value, NameOptions(preserve_middle_name=True))
    style = DisplayStyle(style)
    if style is DisplayStyle.LAST_FIRST:
        if parsed.first_name and parsed.last_name:
            return f"{parsed.last_name}, {parsed.first_name}"
        return parsed.last_name or parsed.first_name
    if style is DisplayStyle.FIRST_MIDDLE_LAST:
        return parsed.full_name
    if style is DisplayStyle.INITIALS:
        return get_initials(value)
    return parsed.display_name
