# pipeline/voting.py
from __future__ import annotations

from collections import deque, defaultdict
import logging

from .models import Code, Observation

log = logging.getLogger(__name__)


class VotingAggregator:
    """
    Confidence-weighted vote over the last `capacity` observations.

    The code with the highest summed confidence wins; equal sums go to the code
    seen most recently. Old observations fall out of the window, so the estimate
    follows the camera when it moves to a different code.
    """

    def __init__(self, capacity: int = 5):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._window: deque[Observation] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._window)

    @property
    def observations(self) -> tuple[Observation, ...]:
        return tuple(self._window)

    def record(self, observation: Observation) -> None:
        self._window.append(observation)  # deque(maxlen) drops the oldest

    def clear(self) -> None:
        self._window.clear()

    def tally(self) -> dict[Code, float]:
        totals: dict[Code, float] = defaultdict(float)
        for obs in self._window:
            totals[obs.code] += obs.confidence
        return dict(totals)

    def current_estimate(self) -> Code | None:
        if not self._window:
            return None

        totals: dict[Code, float] = defaultdict(float)
        latest: dict[Code, tuple[int, int]] = {}
        for pos, obs in enumerate(self._window):
            totals[obs.code] += obs.confidence
            # (timestamp, insertion position): later wins on equal sums
            latest[obs.code] = max(latest.get(obs.code, (obs.observed_at_ms, pos)), (obs.observed_at_ms, pos))

        best = max(totals, key=lambda c: (totals[c], latest[c]))
        return best
