# pipeline/utils.py
import logging
import time

import cv2
import numpy as np

def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)

# ──────────────────────────────────────────────
# Image helpers
# ──────────────────────────────────────────────

def to_gray(img: np.ndarray) -> np.ndarray:
    if img.ndim == 2:
        return img
    return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)

def sharpness_score(bgr_roi) -> float:
    """Blur metric (variance of the Laplacian): higher is sharper."""
    if bgr_roi is None or bgr_roi.size == 0:
        return 0.0
    gray = to_gray(bgr_roi)
    return float(cv2.Laplacian(gray, cv2.CV_64F).var())
