"""Fuzzy text comparison: normalisation and Levenshtein similarity."""

import re

_TRANSLATE = str.maketrans(
    {
        '‘': "'",
        '’': "'",
        '“': '"',
        '”': '"',
        '–': '-',
        '—': '-',
    }
)
_WS_RE = re.compile(r'\s+')


def normalize_text(text: str) -> str:
    """Lowercase, fold smart quotes and dashes, collapse whitespace."""
    return _WS_RE.sub(' ', text.lower().translate(_TRANSLATE)).strip()


def levenshtein(a: str, b: str) -> int:
    """Edit distance with a two-row table."""
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
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def levenshtein_similarity(a: str, b: str) -> float:
    """1 - distance / longer length. Two empty strings are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def text_similarity(a: str, b: str) -> float:
    """Normalised exact match 1.0, substring 0.9, else Levenshtein similarity."""
    na, nb = normalize_text(a), normalize_text(b)
    if not na or not nb:
        return 1.0 if na == nb else 0.0
    if na == nb:
        return 1.0
    if na in nb or nb in na:
        return 0.9
    return levenshtein_similarity(na, nb)
