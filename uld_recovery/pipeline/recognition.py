from __future__ import annotations

from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable
import logging

import numpy as np

from ..config import AppConfig
from .admission import AdmissionController
from .candidates import correct, correct_positional, extract_candidates
from .grammar import CodeGrammar, Vocabulary
from .models import (
    Code,
    CycleResult,
    CycleStatus,
    FramePacket,
    Observation,
    RecognitionError,
    RecognitionResult,
    Recognizer,
    RegionTransform,
)
from .preprocess import preprocess_region
from .region import active_region, crop_region
from .utils import monotonic_ms, sharpness_score
from .voting import VotingAggregator

log = logging.getLogger(__name__)


class CodeReader:
    """
    Frame -> stable code.

    gate (busy / interval / focus) -> ROI crop -> transform -> OCR
    -> candidates -> validate (or correct + validate) -> vote -> publish.

    process_frame() runs a whole cycle inline. submit_frame() + poll() run the OCR
    job on a single background worker while the caller keeps feeding frames; the
    interpretation and voting still happen on the caller's thread.
    """

    def __init__(
        self,
        cfg: AppConfig,
        recognizer: Recognizer,
        transform: RegionTransform = preprocess_region,
        clock: Callable[[], int] = monotonic_ms,
        executor: Executor | None = None,
    ):
        self.cfg = cfg
        self.recognizer = recognizer
        self.transform = transform
        self.clock = clock

        self.admission = AdmissionController(cfg.recognition_interval_ms, cfg.focus_threshold)
        self.grammar = CodeGrammar(Vocabulary.of(cfg.prefixes, cfg.suffixes))
        self.votes = VotingAggregator(cfg.window_size)

        positional = cfg.correction_mode == "positional"
        self._loose = positional
        self._correct = correct_positional if positional else correct

        self._executor = executor
        self._owns_executor = executor is None
        self._pending: Future | None = None

        self.estimate: Code | None = None
        self.last_status: CycleStatus | None = None

        log.info(
            f"CodeReader initialized (interval={self.admission.interval_ms}ms, "
            f"focus>={self.admission.focus_threshold}, window={cfg.window_size}, "
            f"strategy={cfg.candidate_strategy}, correction={cfg.correction_mode})."
        )

    # ---------- gating ----------
    def _gate(self, frame: FramePacket) -> tuple[CycleResult | None, np.ndarray | None]:
        """Admit the frame or explain why not. On admit, returns the ROI crop."""
        now = self.clock()

        # cheap rules first so rejected frames skip the crop + sharpness work
        status = self.admission.evaluate(now)
        if status is not CycleStatus.ADMITTED:
            return self._publish(CycleResult(status=status, estimate=self.estimate)), None

        w, h = frame.size
        region = active_region(w, h, self.cfg.user_region)
        crop = crop_region(frame.image, region)
        sharp = sharpness_score(crop)

        if not self.admission.admit(now, sharp):
            status = self.admission.evaluate(now, sharp)
            return self._publish(CycleResult(status=status, estimate=self.estimate, sharpness=sharp)), None

        log.debug(f"frame {frame.index}: admitted (sharpness={sharp:.1f}, roi={region})")
        return None, crop

    def _recognize(self, crop: np.ndarray) -> RecognitionResult:
        """Transform + OCR. Any failure in here is a per-frame RecognitionError."""
        try:
            return self.recognizer.recognize(self.transform(crop))
        except RecognitionError:
            raise
        except Exception as e:
            raise RecognitionError(f"{type(e).__name__}: {e}") from e

    # ---------- synchronous ----------
    def process_frame(self, frame: FramePacket) -> CycleResult:
        rejected, crop = self._gate(frame)
        if rejected is not None:
            return rejected

        try:
            result = self._recognize(crop)
            return self.interpret(result, self.clock())
        except RecognitionError as e:
            return self._failed(frame.index, e)
        finally:
            self.admission.release(self.clock())

    # ---------- asynchronous ----------
    def submit_frame(self, frame: FramePacket) -> CycleResult:
        rejected, crop = self._gate(frame)
        if rejected is not None:
            return rejected

        try:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ocr")
            self._pending = self._executor.submit(self._recognize, crop)
        except BaseException:
            self.admission.release(self.clock())
            raise

        return self._publish(CycleResult(status=CycleStatus.ADMITTED, estimate=self.estimate))

    def poll(self) -> CycleResult | None:
        """Collect the in-flight job if it finished. Returns None while it is still running."""
        if self._pending is None or not self._pending.done():
            return None
        return self._collect()

    def drain(self) -> CycleResult | None:
        """Block until the in-flight job (if any) finishes and collect it."""
        if self._pending is None:
            return None
        self._pending.exception()  # waits
        return self._collect()

    def _collect(self) -> CycleResult:
        fut, self._pending = self._pending, None
        try:
            return self.interpret(fut.result(), self.clock())
        except RecognitionError as e:
            return self._failed(None, e)
        finally:
            self.admission.release(self.clock())

    def _discard(self) -> None:
        """Wait for the in-flight job and release it without interpreting or raising."""
        fut, self._pending = self._pending, None
        if fut is None:
            return
        try:
            err = fut.exception()
            if err is not None:
                log.debug(f"Discarded failed background job: {err!r}")
        finally:
            self.admission.release(self.clock())

    def close(self, discard: bool = False) -> None:
        """Finish the in-flight job and stop the worker. discard=True drops its result silently."""
        try:
            if discard:
                self._discard()
            else:
                self.drain()
        finally:
            if self._owns_executor and self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

    def __enter__(self) -> "CodeReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # already unwinding: don't let the pending job's outcome replace that error
        self.close(discard=exc_type is not None)

    # ---------- interpretation ----------
    def _accept(self, candidate: str) -> Code | None:
        code = self.grammar.parse(candidate)
        if code is not None:
            return code
        return self.grammar.parse(self._correct(candidate))

    def _first_valid(self, text: str) -> Code | None:
        for candidate in extract_candidates(text, loose=self._loose):
            code = self._accept(candidate)
            if code is not None:
                return code
        return None

    def _select(self, result: RecognitionResult) -> tuple[Code | None, float]:
        if self.cfg.candidate_strategy == "best" and result.segments:
            best: tuple[Code | None, float] = (None, 0.0)
            for seg in result.segments:
                code = self._first_valid(seg.text)
                # strict > keeps the leftmost on ties
                if code is not None and (best[0] is None or seg.confidence > best[1]):
                    best = (code, seg.confidence)
            if best[0] is not None:
                return best
            # a code split across segments still shows up in the joined text
        return self._first_valid(result.text), result.confidence

    def interpret(self, result: RecognitionResult, now_ms: int) -> CycleResult:
        code, conf = self._select(result)

        if code is None:
            log.debug(f"no valid candidate in {result.text!r}")
            return self._publish(
                CycleResult(
                    status=CycleStatus.NO_CANDIDATE,
                    estimate=self.estimate,
                    raw_text=result.text,
                    confidence=result.confidence,
                )
            )

        self.votes.record(Observation(code=code, confidence=conf, observed_at_ms=now_ms))
        estimate = self.votes.current_estimate()
        if estimate != self.estimate:
            log.info(f"Estimate changed: {self.estimate} -> {estimate} (tally={self.votes.tally()})")
        self.estimate = estimate

        return self._publish(
            CycleResult(
                status=CycleStatus.VALIDATED,
                estimate=self.estimate,
                code=code,
                raw_text=result.text,
                confidence=conf,
            )
        )

    # ---------- misc ----------
    def _failed(self, frame_index: int | None, err: Exception) -> CycleResult:
        where = f"frame {frame_index}" if frame_index is not None else "background job"
        log.warning(f"Recognition failed on {where}: {err}")
        return self._publish(CycleResult(status=CycleStatus.RECOGNITION_FAILED, estimate=self.estimate))

    def _publish(self, result: CycleResult) -> CycleResult:
        self.last_status = result.status
        return result

    def reset(self) -> None:
        """Forget the voting window and the published estimate (e.g. new target)."""
        self.votes.clear()
        self.estimate = None
        log.info("CodeReader reset.")
