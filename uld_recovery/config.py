# config.py
from __future__ import annotations
from dataclasses import dataclass

from .pipeline.models import Region

MIN_INTERVAL_MS = 100
MAX_INTERVAL_MS = 2000

CANDIDATE_STRATEGIES = ("first", "best")
CORRECTION_MODES = ("confusion", "positional")
OCR_ENGINES = ("easyocr", "tesseract")


@dataclass(frozen=True)
class AppConfig:
    # IO
    source: str = "0"  # camera index or video path
    frame_stride: int = 1
    max_frames: int | None = None

    # Admission
    recognition_interval_ms: int = 400
    focus_threshold: float = 80.0  # Laplacian variance of the ROI

    # Region of interest (None -> default centered band)
    user_region: Region | None = None

    # Domain vocabulary
    prefixes: tuple[str, ...] = ("AKE", "PMC", "RKN", "LD3", "LD7")
    suffixes: tuple[str, ...] = ("CI", "BR", "CX", "JL", "NH")

    # Voting
    window_size: int = 5

    # Candidate handling
    candidate_strategy: str = "first"  # or "best"
    correction_mode: str = "confusion"  # or "positional"

    # OCR engine settings
    ocr_engine: str = "easyocr"  # or "tesseract"
    ocr_langs: tuple[str, ...] = ("en",)
    ocr_allowlist: str = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
    ocr_gpu: bool = False
    page_seg_mode: str = "7"  # tesseract only, single text line
    engine_mode: str = "1"  # tesseract only, LSTM

    # Logging
    logging_level: str = "INFO"

    def __post_init__(self) -> None:
        clamped = max(MIN_INTERVAL_MS, min(MAX_INTERVAL_MS, int(self.recognition_interval_ms)))
        object.__setattr__(self, "recognition_interval_ms", clamped)

        if self.frame_stride < 1:
            raise ValueError(f"frame_stride must be >= 1, got {self.frame_stride}")
        if self.window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {self.window_size}")
        if self.candidate_strategy not in CANDIDATE_STRATEGIES:
            raise ValueError(f"unknown candidate_strategy: {self.candidate_strategy!r}")
        if self.correction_mode not in CORRECTION_MODES:
            raise ValueError(f"unknown correction_mode: {self.correction_mode!r}")
        if self.ocr_engine not in OCR_ENGINES:
            raise ValueError(f"unknown ocr_engine: {self.ocr_engine!r}")
