# tests/test_config.py
import pytest

from uld_recovery.config import AppConfig
from uld_recovery.main import parse_args
from uld_recovery.pipeline.models import Region


def test_defaults():
    cfg = AppConfig()
    assert cfg.recognition_interval_ms == 400
    assert cfg.focus_threshold == 80.0
    assert cfg.window_size == 5
    assert cfg.candidate_strategy == "first"
    assert "AKE" in cfg.prefixes and "CI" in cfg.suffixes


@pytest.mark.parametrize("given,expected", [(10, 100), (100, 100), (750, 750), (2000, 2000), (99999, 2000)])
def test_interval_clamped(given, expected):
    assert AppConfig(recognition_interval_ms=given).recognition_interval_ms == expected


@pytest.mark.parametrize("kwargs", [
    {"candidate_strategy": "all"},
    {"correction_mode": "fuzzy"},
    {"ocr_engine": "paddleocr"},
    {"window_size": 0},
    {"frame_stride": 0},
])
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        AppConfig(**kwargs)


def test_parse_args_defaults():
    cfg = parse_args([])
    assert cfg == AppConfig(max_frames=None)


def test_parse_args_full():
    cfg = parse_args([
        "--source", "clip.mp4",
        "--interval", "50",
        "--focus", "120",
        "--roi", "10,20,300,80",
        "--window", "7",
        "--engine", "tesseract",
        "--psm", "6",
        "--oem", "3",
        "--strategy", "best",
        "--correction", "positional",
        "--prefixes", "ake, pmc",
        "--suffixes", "CI",
        "--stride", "0",
        "--max-frames", "25",
    ])
    assert cfg.source == "clip.mp4"
    assert cfg.recognition_interval_ms == 100
    assert cfg.focus_threshold == 120.0
    assert cfg.user_region == Region(10, 20, 300, 80)
    assert cfg.window_size == 7
    assert (cfg.ocr_engine, cfg.page_seg_mode, cfg.engine_mode) == ("tesseract", "6", "3")
    assert (cfg.candidate_strategy, cfg.correction_mode) == ("best", "positional")
    assert cfg.prefixes == ("AKE", "PMC")
    assert cfg.suffixes == ("CI",)
    assert cfg.frame_stride == 1
    assert cfg.max_frames == 25


def test_parse_args_bad_roi():
    with pytest.raises(SystemExit):
        parse_args(["--roi", "1,2,3"])
