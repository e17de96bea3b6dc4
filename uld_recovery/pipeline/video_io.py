# pipeline/video_io.py
from __future__ import annotations

import cv2
from pathlib import Path
from typing import Iterator

from .models import FramePacket
from .utils import monotonic_ms


def open_capture(source: str | int | Path) -> tuple[cv2.VideoCapture, bool]:
    """Open a camera (index like "0") or a video file. Returns (capture, is_live)."""
    is_live = isinstance(source, int) or (isinstance(source, str) and source.isdigit())
    target = int(source) if is_live else str(source)

    cap = cv2.VideoCapture(target)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open video source: {source}")
    return cap, is_live


def iter_frames(source: str | int | Path, stride: int = 1, max_frames: int | None = None) -> Iterator[FramePacket]:
    cap, is_live = open_capture(source)
    fps = cap.get(cv2.CAP_PROP_FPS) or 25.0

    idx = -1
    yielded = 0
    try:
        while True:
            ok, frame = cap.read()
            if not ok:
                break
            idx += 1

            if idx % stride != 0:
                continue

            # live: wall clock; file: position in the stream
            t = monotonic_ms() if is_live else int(idx * 1000 / fps)
            yield FramePacket(index=idx, timestamp_ms=t, image=frame)

            yielded += 1
            if max_frames is not None and yielded >= max_frames:
                break
    finally:
        cap.release()
