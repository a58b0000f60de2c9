"""Name canonicalization and variation expansion.

Variations widen match recall for names exported with program tags
("FAUZAN_Web"), nicknames in parentheses or as a single handle
("adinafadillah").
"""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[_\-\s]+")
_PROGRAM_TAG = re.compile(r"_(?:web|ai|artificial)", re.IGNORECASE)
_PARENTHESES = re.compile(r"\(([^)]+)\)")


def normalize(name: str) -> str:
    """Lower-case, drop punctuation and collapse whitespace."""
    lowered = _NON_ALNUM.sub("", name.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def variations(raw_name: str) -> list[str]:
    """Expand a raw name into normalized variations.

    Always includes the normalized full name. Adds the lone token of a
    single-token name, the prefix before a program tag, and the first
    parenthesized nickname when they carry information.

    Args:
        raw_name: Name as it appears in the source

    Returns:
        Duplicate-free list of variations; order is not significant
    """
    found = [normalize(raw_name)]

    parts = [p for p in _SEPARATORS.split(raw_name) if p]
    if len(parts) == 1:
        token = normalize(parts[0])
        if len(token) > 2:
            found.append(token)

    before_tag = _PROGRAM_TAG.split(raw_name, maxsplit=1)[0]
    if before_tag != raw_name:
        found.append(normalize(before_tag))

    nickname = _PARENTHESES.search(raw_name)
    if nickname:
        normalized_nickname = normalize(nickname.group(1))
        if len(normalized_nickname) > 2:
            found.append(normalized_nickname)

    return list(dict.fromkeys(found))
