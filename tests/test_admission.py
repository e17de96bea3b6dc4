# tests/test_admission.py
import random

import pytest

from uld_recovery.pipeline.admission import AdmissionController
from uld_recovery.pipeline.models import CycleStatus


def test_first_frame_admitted():
    ctl = AdmissionController(interval_ms=400, focus_threshold=80.0)
    assert ctl.admit(0, 100.0) is True
    assert ctl.in_flight is True


def test_interval_boundary_inclusive():
    ctl = AdmissionController(interval_ms=400, focus_threshold=80.0)
    assert ctl.admit(500, 100.0)
    ctl.release(1000)

    assert ctl.admit(1399, 1e9) is False
    assert ctl.evaluate(1399, 1e9) is CycleStatus.REJECTED_INTERVAL
    assert ctl.admit(1400, 80.0) is True


def test_focus_gate():
    ctl = AdmissionController(interval_ms=400, focus_threshold=80.0)
    assert ctl.evaluate(0, 79.9) is CycleStatus.REJECTED_FOCUS
    assert ctl.admit(0, 79.9) is False
    assert ctl.in_flight is False
    assert ctl.admit(0, 80.0) is True


def test_busy_wins_over_everything():
    ctl = AdmissionController(interval_ms=400, focus_threshold=80.0)
    assert ctl.admit(0, 100.0)
    # far in the future and perfectly sharp: still busy
    assert ctl.evaluate(10_000_000, 1e9) is CycleStatus.BUSY
    assert ctl.admit(10_000_000, 1e9) is False


def test_interval_checked_before_focus():
    ctl = AdmissionController(interval_ms=400, focus_threshold=80.0)
    ctl.admit(0, 100.0)
    ctl.release(0)
    assert ctl.evaluate(100, 0.0) is CycleStatus.REJECTED_INTERVAL


def test_evaluate_without_focus_skips_focus_rule():
    ctl = AdmissionController()
    assert ctl.evaluate(0) is CycleStatus.ADMITTED
    assert ctl.in_flight is False


def test_release_without_admit_raises():
    ctl = AdmissionController()
    with pytest.raises(RuntimeError):
        ctl.release(0)


def test_release_records_time():
    ctl = AdmissionController(interval_ms=400)
    ctl.admit(0, 100.0)
    ctl.release(750)
    assert ctl.state.last_recognition_at_ms == 750
    assert ctl.state.in_flight is False


def test_random_sequences_never_overlap():
    rng = random.Random(7)
    ctl = AdmissionController(interval_ms=100, focus_threshold=50.0)
    t = 0
    outstanding = 0
    for _ in range(2000):
        t += rng.randint(0, 300)
        if outstanding and rng.random() < 0.3:
            ctl.release(t)
            outstanding -= 1
        elif ctl.admit(t, rng.uniform(0, 100)):
            outstanding += 1
        assert outstanding <= 1
        assert ctl.in_flight == (outstanding == 1)
