"""Shared fixtures for the uld_recovery test-suite."""
import logging

import numpy as np
import pytest

from uld_recovery.config import AppConfig
from uld_recovery.pipeline.grammar import CodeGrammar, Vocabulary
from uld_recovery.pipeline.models import FramePacket, RecognitionError, RecognitionResult, TextSegment

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)


class FakeClock:
    def __init__(self, start: int = 1000):
        self.t = start

    def __call__(self) -> int:
        return self.t

    def advance(self, ms: int) -> None:
        self.t += ms


class FakeRecognizer:
    """Returns queued results in order; an Exception instance in the queue is raised instead."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def recognize(self, image):
        self.calls += 1
        item = self.results.pop(0) if self.results else RecognitionResult("", 0.0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, str):
            return RecognitionResult(text=item, confidence=90.0)
        return item


def make_frame(index: int = 0, sharp: bool = True, w: int = 640, h: int = 480) -> FramePacket:
    if sharp:
        rng = np.random.default_rng(index)
        img = rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)
    else:
        img = np.full((h, w, 3), 127, dtype=np.uint8)
    return FramePacket(index=index, timestamp_ms=index * 40, image=img)


@pytest.fixture
def cfg():
    return AppConfig()


@pytest.fixture
def grammar(cfg):
    return CodeGrammar(Vocabulary.of(cfg.prefixes, cfg.suffixes))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sharp_frame():
    return make_frame(0, sharp=True)


@pytest.fixture
def blurry_frame():
    return make_frame(0, sharp=False)

