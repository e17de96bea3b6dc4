# pipeline/grammar.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
import logging
import re

from .models import CODE_RE, Code

log = logging.getLogger(__name__)

PREFIX_RE = re.compile(r"[A-Z]{3}")
SUFFIX_RE = re.compile(r"[A-Z]{2}")


@dataclass(frozen=True)
class Vocabulary:
    prefixes: frozenset[str]
    suffixes: frozenset[str]

    @classmethod
    def of(cls, prefixes: Iterable[str], suffixes: Iterable[str]) -> "Vocabulary":
        return cls(
            prefixes=frozenset(p.strip().upper() for p in prefixes if p.strip()),
            suffixes=frozenset(s.strip().upper() for s in suffixes if s.strip()),
        )

    def unreachable(self) -> list[str]:
        """Entries that can never appear in a code because they break the letter shape."""
        bad = [p for p in self.prefixes if not PREFIX_RE.fullmatch(p)]
        bad += [s for s in self.suffixes if not SUFFIX_RE.fullmatch(s)]
        return sorted(bad)


class CodeGrammar:
    """Shape + closed-vocabulary check. The only place a raw string becomes a Code."""

    def __init__(self, vocabulary: Vocabulary):
        self.vocabulary = vocabulary

        if not vocabulary.prefixes or not vocabulary.suffixes:
            log.warning("Empty prefix or suffix vocabulary: no code will ever validate.")

        unreachable = vocabulary.unreachable()
        if unreachable:
            log.debug(f"Vocabulary entries that cannot match the code shape: {unreachable}")

    def is_valid(self, text) -> bool:
        if not isinstance(text, str):
            return False
        if not CODE_RE.fullmatch(text):
            return False
        return text[:3] in self.vocabulary.prefixes and text[-2:] in self.vocabulary.suffixes

    def parse(self, text) -> Code | None:
        if not self.is_valid(text):
            return None
        return Code(text)
