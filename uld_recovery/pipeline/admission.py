# pipeline/admission.py
from __future__ import annotations

from dataclasses import dataclass
import logging

from .models import CycleStatus

log = logging.getLogger(__name__)


@dataclass
class AdmissionState:
    last_recognition_at_ms: int | None = None
    in_flight: bool = False


class AdmissionController:
    """
    Decides whether a frame is worth a recognition job.

    Rules, in order: one job in flight at most, minimum spacing between jobs,
    minimum sharpness. Every admit() that returns True must be matched by exactly
    one release(), on success and on failure alike.
    """

    def __init__(self, interval_ms: int = 400, focus_threshold: float = 80.0):
        self.interval_ms = interval_ms
        self.focus_threshold = focus_threshold
        self.state = AdmissionState()

    @property
    def in_flight(self) -> bool:
        return self.state.in_flight

    def evaluate(self, now_ms: int, focus: float | None = None) -> CycleStatus:
        """Side-effect free check. focus=None skips the sharpness rule."""
        st = self.state
        if st.in_flight:
            return CycleStatus.BUSY
        if st.last_recognition_at_ms is not None and now_ms - st.last_recognition_at_ms < self.interval_ms:
            return CycleStatus.REJECTED_INTERVAL
        if focus is not None and focus < self.focus_threshold:
            return CycleStatus.REJECTED_FOCUS
        return CycleStatus.ADMITTED

    def admit(self, now_ms: int, focus: float) -> bool:
        status = self.evaluate(now_ms, focus)
        if status is not CycleStatus.ADMITTED:
            return False
        self.state.in_flight = True
        return True

    def release(self, now_ms: int) -> None:
        if not self.state.in_flight:
            raise RuntimeError("release() called with no recognition job in flight")
        self.state.in_flight = False
        self.state.last_recognition_at_ms = now_ms
