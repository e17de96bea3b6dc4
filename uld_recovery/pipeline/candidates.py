# pipeline/candidates.py
from __future__ import annotations

import re

from .grammar import CODE_RE

# common OCR confusions (applied to every character)
CONFUSIONS = {
    "0": "O", "O": "0",
    "1": "I", "I": "1",
    "5": "S", "S": "5",
    "8": "B", "B": "8",
    "2": "Z", "Z": "2",
    "6": "G", "G": "6",
    "D": "0",
}
_CONFUSION_TABLE = str.maketrans(CONFUSIONS)

# shape-aware variant: only push a glyph toward the class its slot expects
_TO_LETTER = str.maketrans({d: l for d, l in CONFUSIONS.items() if d.isdigit()})
_TO_DIGIT = str.maketrans({l: d for l, d in CONFUSIONS.items() if l.isalpha()})

# letter slots also accept digits that read as letters, digit slots the reverse
_L = "[A-Z" + "".join(sorted(d for d in CONFUSIONS if d.isdigit())) + "]"
_D = "[0-9" + "".join(sorted(l for l in CONFUSIONS if l.isalpha())) + "]"
LOOSE_CODE_RE = re.compile(f"{_L}{{3}}{_D}{{5}}{_L}{{2}}")

_WS_RE = re.compile(r"\s+")


def clean_text(raw: str) -> str:
    """Drop all whitespace and uppercase."""
    return _WS_RE.sub("", raw or "").upper()


def extract_candidates(raw: str, loose: bool = False) -> list[str]:
    """
    Shape-matching substrings of the cleaned text, left to right, non-overlapping.
    Vocabulary is not checked here.

    With ``loose=True`` a slot also accepts glyphs that are commonly confused with
    its class (e.g. ``S`` in a digit slot), for use with correct_positional().
    """
    pattern = LOOSE_CODE_RE if loose else CODE_RE
    return [m.group(0) for m in pattern.finditer(clean_text(raw))]


def correct(candidate: str) -> str:
    """
    Swap every commonly confused glyph. Total and deterministic, but NOT idempotent
    (0<->O etc. are involutions), so only use it after direct validation failed.
    """
    return candidate.translate(_CONFUSION_TABLE)


def correct_positional(candidate: str) -> str:
    """Like correct(), but letters stay letters in letter slots and digits stay digits in digit slots."""
    if len(candidate) != 10:
        return correct(candidate)
    head = candidate[:3].translate(_TO_LETTER)
    serial = candidate[3:8].translate(_TO_DIGIT)
    tail = candidate[8:].translate(_TO_LETTER)
    return head + serial + tail
