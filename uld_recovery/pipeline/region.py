# pipeline/region.py
from __future__ import annotations

import logging
import numpy as np

from .models import Region

log = logging.getLogger(__name__)

# default band: 90% wide, 40% tall, 5% side margins, starting 30% down
DEFAULT_MARGIN_X = 0.05
DEFAULT_TOP = 0.30
DEFAULT_WIDTH = 0.90
DEFAULT_HEIGHT = 0.40


def default_region(frame_w: int, frame_h: int) -> Region:
    return Region(
        x=int(frame_w * DEFAULT_MARGIN_X),
        y=int(frame_h * DEFAULT_TOP),
        width=int(frame_w * DEFAULT_WIDTH),
        height=int(frame_h * DEFAULT_HEIGHT),
    )


def active_region(frame_w: int, frame_h: int, user_region: Region | None = None) -> Region:
    """
    The ROI to recognize in this frame. A user region is returned unchanged when it fits,
    clamped when it overhangs the frame, and rejected when nothing of it is left.
    """
    if frame_w <= 0 or frame_h <= 0:
        raise ValueError(f"invalid frame size {frame_w}x{frame_h}")

    if user_region is None:
        return default_region(frame_w, frame_h)

    if user_region.fits(frame_w, frame_h):
        return user_region

    clamped = user_region.clamp(frame_w, frame_h)
    if clamped.width <= 0 or clamped.height <= 0:
        raise ValueError(f"region {user_region} lies outside the {frame_w}x{frame_h} frame")

    log.debug(f"Clamped user region {user_region} -> {clamped}")
    return clamped


def crop_region(image: np.ndarray, region: Region) -> np.ndarray:
    return image[region.y:region.y + region.height, region.x:region.x + region.width]
