# main.py
from __future__ import annotations

import argparse
import logging

from .config import AppConfig
from .pipeline.models import CycleStatus, Region
from .pipeline.ocr_engine import build_recognizer
from .pipeline.recognition import CodeReader
from .pipeline.utils import setup_logging
from .pipeline.video_io import iter_frames

log = logging.getLogger(__name__)

STATUS_EVERY = 100  # frames between status lines


def run(cfg: AppConfig) -> str | None:
    setup_logging(cfg.logging_level)

    recognizer = build_recognizer(cfg)
    counts: dict[CycleStatus, int] = {s: 0 for s in CycleStatus}
    published = None

    with CodeReader(cfg, recognizer) as reader:
        for frame in iter_frames(cfg.source, stride=cfg.frame_stride, max_frames=cfg.max_frames):
            # collect the previous job before gating this frame
            done = reader.poll()
            if done is not None:
                counts[done.status] += 1

            submitted = reader.submit_frame(frame)
            counts[submitted.status] += 1

            if reader.estimate != published:
                published = reader.estimate
                print(f"[frame {frame.index}] estimate: {published}")

            if frame.index % STATUS_EVERY == 0:
                summary = " ".join(f"{s.value}={n}" for s, n in counts.items() if n)
                print(f"[frame {frame.index}] last={reader.last_status.value} {summary}")

        done = reader.drain()
        if done is not None:
            counts[done.status] += 1
        published = reader.estimate

    print(f"Final estimate: {published if published is not None else '(none)'}")
    if published is None:
        print("No code validated. Check the ROI, focus threshold and vocabulary.")
    return published


def _csv(text: str) -> tuple[str, ...]:
    return tuple(p.strip().upper() for p in text.split(",") if p.strip())


def build_parser() -> argparse.ArgumentParser:
    defaults = AppConfig()
    p = argparse.ArgumentParser(description="Read a stable ULD code from a live video feed.")
    p.add_argument("--source", default=defaults.source, help="Camera index or path to a video file")
    p.add_argument("--interval", type=int, default=defaults.recognition_interval_ms, help="Min ms between OCR jobs (100-2000)")
    p.add_argument("--focus", type=float, default=defaults.focus_threshold, help="Min Laplacian variance of the ROI")
    p.add_argument("--roi", type=Region.parse, default=None, help="User ROI as x,y,w,h (default: centered band)")
    p.add_argument("--window", type=int, default=defaults.window_size, help="Voting window size")
    p.add_argument("--engine", choices=("easyocr", "tesseract"), default=defaults.ocr_engine)
    p.add_argument("--psm", default=defaults.page_seg_mode, help="Tesseract page segmentation mode")
    p.add_argument("--oem", default=defaults.engine_mode, help="Tesseract OCR engine mode")
    p.add_argument("--gpu", action="store_true", help="Run EasyOCR on the GPU")
    p.add_argument("--strategy", choices=("first", "best"), default=defaults.candidate_strategy)
    p.add_argument("--correction", choices=("confusion", "positional"), default=defaults.correction_mode)
    p.add_argument("--prefixes", type=_csv, default=defaults.prefixes, help="Comma separated valid prefixes")
    p.add_argument("--suffixes", type=_csv, default=defaults.suffixes, help="Comma separated valid suffixes")
    p.add_argument("--stride", type=int, default=1, help="Process every Nth frame")
    p.add_argument("--max-frames", type=int, default=0, help="0 means no limit")
    p.add_argument("--log-level", default=defaults.logging_level)
    return p


def parse_args(argv: list[str] | None = None) -> AppConfig:
    args = build_parser().parse_args(argv)

    cfg = AppConfig(
        source=args.source,
        frame_stride=max(1, args.stride),
        max_frames=(None if args.max_frames == 0 else args.max_frames),
        recognition_interval_ms=args.interval,
        focus_threshold=args.focus,
        user_region=args.roi,
        prefixes=args.prefixes,
        suffixes=args.suffixes,
        window_size=args.window,
        candidate_strategy=args.strategy,
        correction_mode=args.correction,
        ocr_engine=args.engine,
        ocr_gpu=args.gpu,
        page_seg_mode=args.psm,
        engine_mode=args.oem,
        logging_level=args.log_level,
    )
    return cfg


def cli() -> None:
    run(parse_args())


if __name__ == "__main__":
    cli()
