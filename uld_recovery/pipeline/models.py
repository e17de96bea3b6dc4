# pipeline/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import numpy as np
from typing import Protocol
import re


class RecognitionError(Exception):
    """Raised by a recognizer when the OCR engine fails on a frame."""


@dataclass(frozen=True)
class FramePacket:
    index: int
    timestamp_ms: int
    image: np.ndarray  # BGR image

    @property
    def size(self) -> tuple[int, int]:
        h, w = self.image.shape[:2]
        return w, h


@dataclass(frozen=True)
class Region:
    """Region of interest in source-frame pixels."""
    x: int
    y: int
    width: int
    height: int

    def fits(self, w: int, h: int) -> bool:
        return (
            self.x >= 0 and self.y >= 0
            and self.width > 0 and self.height > 0
            and self.x + self.width <= w
            and self.y + self.height <= h
        )

    def clamp(self, w: int, h: int) -> "Region":
        x1 = max(0, min(self.x, w))
        y1 = max(0, min(self.y, h))
        x2 = max(0, min(self.x + self.width, w))
        y2 = max(0, min(self.y + self.height, h))
        return Region(x1, y1, x2 - x1, y2 - y1)

    @classmethod
    def parse(cls, text: str) -> "Region":
        """Parse ``"x,y,w,h"``."""
        parts = [p.strip() for p in text.split(",")]
        if len(parts) != 4:
            raise ValueError(f"expected x,y,w,h but got {text!r}")
        x, y, w, h = (int(p) for p in parts)
        if min(x, y, w, h) < 0:
            raise ValueError(f"region values must be non-negative: {text!r}")
        return cls(x, y, w, h)


# LLLDDDDDLL, e.g. AKE12345CI
CODE_PATTERN = r"[A-Z]{3}[0-9]{5}[A-Z]{2}"
CODE_RE = re.compile(CODE_PATTERN)


class Code(str):
    """
    A LLLDDDDDLL code. The constructor enforces the shape only; vocabulary
    membership is checked by CodeGrammar.parse, which is how pipeline code builds one.
    """

    def __new__(cls, value: str) -> "Code":
        if not isinstance(value, str) or not CODE_RE.fullmatch(value):
            raise ValueError(f"not a LLLDDDDDLL code: {value!r}")
        return super().__new__(cls, value)

    @property
    def prefix(self) -> str:
        return self[:3]

    @property
    def serial(self) -> str:
        return self[3:8]

    @property
    def suffix(self) -> str:
        return self[8:]


@dataclass(frozen=True)
class Observation:
    code: Code
    confidence: float  # 0..100
    observed_at_ms: int

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 100.0:
            raise ValueError(f"confidence must be within [0, 100], got {self.confidence}")


@dataclass(frozen=True)
class TextSegment:
    text: str
    confidence: float  # 0..100


@dataclass(frozen=True)
class RecognitionResult:
    """Raw recognizer output for one region: whole-pass text + confidence, plus per-line segments when available."""
    text: str
    confidence: float
    segments: tuple[TextSegment, ...] = field(default_factory=tuple)


class CycleStatus(str, Enum):
    ADMITTED = "admitted"
    BUSY = "busy"
    REJECTED_INTERVAL = "rejected_interval"
    REJECTED_FOCUS = "rejected_focus"
    NO_CANDIDATE = "no_candidate"
    VALIDATED = "validated"
    RECOGNITION_FAILED = "recognition_failed"


@dataclass(frozen=True)
class CycleResult:
    status: CycleStatus
    estimate: Code | None = None  # published output after this cycle
    code: Code | None = None  # code accepted in this cycle, if any
    raw_text: str = ""
    confidence: float = 0.0
    sharpness: float | None = None


class Recognizer(Protocol):
    """OCR engine plugin interface (EasyOCR, Tesseract, etc.)."""
    def recognize(self, image: np.ndarray) -> RecognitionResult:
        ...


class RegionTransform(Protocol):
    """Preprocessing plugin interface applied to the ROI crop before OCR."""
    def __call__(self, image_bgr: np.ndarray) -> np.ndarray:
        ...
