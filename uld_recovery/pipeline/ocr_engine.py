from __future__ import annotations

from collections import defaultdict
import logging

import numpy as np

from ..config import AppConfig
from .models import RecognitionError, RecognitionResult, Recognizer, TextSegment

log = logging.getLogger(__name__)


# ---------- public entry point ----------
def build_recognizer(cfg: AppConfig) -> Recognizer:
    if cfg.ocr_engine == "tesseract":
        return TesseractRecognizer(
            psm=cfg.page_seg_mode,
            oem=cfg.engine_mode,
            whitelist=cfg.ocr_allowlist,
        )
    return EasyOcrRecognizer(
        langs=cfg.ocr_langs,
        allowlist=cfg.ocr_allowlist,
        gpu=cfg.ocr_gpu,
    )


# ---------- helpers ----------
def _clamp_conf(c: float) -> float:
    return float(max(0.0, min(100.0, c)))


def _combine(segments: list[TextSegment]) -> RecognitionResult:
    if not segments:
        return RecognitionResult(text="", confidence=0.0)
    text = " ".join(s.text for s in segments)
    conf = sum(s.confidence for s in segments) / len(segments)
    return RecognitionResult(text=text, confidence=_clamp_conf(conf), segments=tuple(segments))


# ---------- engines ----------
class EasyOcrRecognizer:
    """EasyOCR reader; one segment per detected text line, confidence scaled to 0..100."""

    def __init__(self, langs: tuple[str, ...] = ("en",), allowlist: str | None = None, gpu: bool = False):
        import easyocr

        self.allowlist = allowlist
        self.reader = easyocr.Reader(list(langs), gpu=gpu)
        log.info(f"EasyOCR reader ready (langs={list(langs)}, gpu={gpu}).")

    def recognize(self, image: np.ndarray) -> RecognitionResult:
        try:
            raw = self.reader.readtext(image, detail=1, paragraph=False, allowlist=self.allowlist)
        except Exception as e:
            raise RecognitionError(f"easyocr failed: {e}") from e

        # left to right by the bbox's top-left corner
        raw = sorted(raw, key=lambda r: float(r[0][0][0]))
        segments = [
            TextSegment(text=str(text), confidence=_clamp_conf(float(conf) * 100.0))
            for _, text, conf in raw
            if str(text).strip()
        ]
        return _combine(segments)


class TesseractRecognizer:
    """Tesseract via pytesseract; psm/oem strings are forwarded verbatim."""

    def __init__(self, psm: str = "7", oem: str = "1", whitelist: str | None = None):
        import pytesseract

        self._tess = pytesseract
        self.config = f"--psm {psm} --oem {oem}"
        if whitelist:
            self.config += f" -c tessedit_char_whitelist={whitelist}"
        log.info(f"Tesseract recognizer ready ({self.config}).")

    def recognize(self, image: np.ndarray) -> RecognitionResult:
        try:
            data = self._tess.image_to_data(image, config=self.config, output_type=self._tess.Output.DICT)
        except Exception as e:
            raise RecognitionError(f"tesseract failed: {e}") from e

        # group words into lines
        lines: dict[tuple[int, int, int], list[tuple[str, float]]] = defaultdict(list)
        for i, word in enumerate(data.get("text", [])):
            conf = float(data["conf"][i])
            if conf < 0 or not str(word).strip():
                continue
            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines[key].append((str(word), conf))

        segments = []
        for key in sorted(lines):
            words = lines[key]
            segments.append(
                TextSegment(
                    text=" ".join(w for w, _ in words),
                    confidence=_clamp_conf(sum(c for _, c in words) / len(words)),
                )
            )
        return _combine(segments)
