# pipeline/preprocess.py
from __future__ import annotations

import cv2
import numpy as np

from .utils import to_gray


def preprocess_region(img: np.ndarray, contrast: float = 2.0, brightness: float = 1.2) -> np.ndarray:
    """
    Default ROI transform before OCR:
    grayscale -> contrast/brightness -> unsharp mask -> Otsu threshold -> small close.
    Returns a single-channel uint8 image (dark text on white).
    """
    if img is None or img.size == 0:
        return np.zeros((1, 1), dtype=np.uint8)

    gray = to_gray(img)

    # contrast around mid-gray, then brightness gain
    boosted = (gray.astype(np.float32) - 128.0) * contrast + 128.0
    boosted = np.clip(boosted * brightness, 0, 255).astype(np.uint8)

    blur = cv2.GaussianBlur(boosted, (0, 0), 3)
    sharp = cv2.addWeighted(boosted, 1.5, blur, -0.5, 0)

    _, bw = cv2.threshold(sharp, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)

    # keep text dark on a light background
    if float(bw.mean()) < 127:
        bw = cv2.bitwise_not(bw)

    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (2, 2))
    return cv2.morphologyEx(bw, cv2.MORPH_CLOSE, kernel, iterations=1)
