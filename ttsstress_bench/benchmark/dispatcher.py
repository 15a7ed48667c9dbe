#!/usr/bin/env python3
"""
Batch Dispatcher

Groups the sentence stream into batches sized by the current concurrency
level, synthesizes each batch concurrently and waits for every result before
forming the next batch. The concurrency level ramps up as sentences are
accepted, and the run halts after the first batch containing a failure.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait, ALL_COMPLETED
from enum import Enum
from typing import Callable, Iterable, List, Optional

from ..config.bench_config import BenchmarkConfig
from ..config.constants import INITIAL_CONCURRENCY
from ..engines.synthesis_client import SynthesisClient
from ..metrics.schemas import SentenceRecord, SynthesisResult, BatchReport, RunSummary
from ..metrics.stats import batch_report

logger = logging.getLogger(__name__)


class DispatcherState(Enum):
    """States of the batch dispatcher"""
    READING = "reading"
    BATCHING = "batching"
    DISPATCHING = "dispatching"
    REPORTING = "reporting"
    HALTED = "halted"


class HaltReason(Enum):
    """Why the dispatcher stopped consuming input"""
    EXHAUSTED = "exhausted"
    MAX_COUNT = "max_count"
    ERROR = "error"


class ConcurrencyRamp:
    """Concurrency level that grows by one every `interval` accepted sentences, up to `cap`"""

    def __init__(self, cap: int, interval: int):
        self.cap = cap
        self.interval = interval
        self.level = min(INITIAL_CONCURRENCY, cap)

    def on_accepted(self, accepted: int) -> bool:
        """Apply the ramp-up rule after `accepted` sentences; True if the level rose"""
        if accepted % self.interval == 0 and self.level < self.cap:
            self.level += 1
            return True
        return False


class BatchDispatcher:
    """
    Drives a benchmark run over a stream of sentence records.

    Only the dispatcher loop touches the accepted count and the concurrency
    level; worker threads only run SynthesisClient.synthesize and hand back
    their own result.
    """

    def __init__(self,
                 config: BenchmarkConfig,
                 client: SynthesisClient,
                 on_batch: Optional[Callable[[BatchReport], None]] = None):
        self.config = config
        self.client = client
        self.on_batch = on_batch
        self.ramp = ConcurrencyRamp(config.max_concurrency, config.ramp_interval)

        self.state = DispatcherState.READING
        self.accepted = 0
        self.dispatched = 0
        self.batches = 0

    @property
    def concurrency(self) -> int:
        return self.ramp.level

    def _set_state(self, state: DispatcherState):
        if state != self.state:
            logger.debug(f"Dispatcher {self.state.value} -> {state.value}")
            self.state = state

    def dispatch(self, executor: ThreadPoolExecutor, batch: List[SentenceRecord]) -> List[SynthesisResult]:
        """Synthesize every record of the batch concurrently and wait for all of them"""
        self._set_state(DispatcherState.DISPATCHING)
        futures = [executor.submit(self.client.synthesize, record) for record in batch]
        wait(futures, return_when=ALL_COMPLETED)
        return [future.result() for future in futures]

    def _run_batch(self, executor: ThreadPoolExecutor, batch: List[SentenceRecord]) -> BatchReport:
        started = time.perf_counter()
        results = self.dispatch(executor, batch)
        duration = time.perf_counter() - started

        self._set_state(DispatcherState.REPORTING)
        self.batches += 1
        self.dispatched += len(batch)
        report = batch_report(self.batches, len(batch), results, duration)

        if self.on_batch:
            self.on_batch(report)
        return report

    def run(self, records: Iterable[SentenceRecord]) -> RunSummary:
        """
        Consume the records until they run out, the sentence limit is hit or a
        batch fails.

        Args:
            records: Sentence records in sequence order

        Returns:
            RunSummary describing where and why the run stopped
        """
        run_started = time.perf_counter()
        records = iter(records)
        halt_reason = HaltReason.EXHAUSTED
        batch: List[SentenceRecord] = []

        try:
            with ThreadPoolExecutor(max_workers=self.config.max_concurrency,
                                    thread_name_prefix="SynthWorker") as executor:
                for record in records:
                    self.accepted += 1
                    self._set_state(DispatcherState.BATCHING)
                    batch.append(record)

                    if len(batch) == self.concurrency:
                        report = self._run_batch(executor, batch)
                        batch = []
                        if report.failed:
                            logger.error(f"Batch {report.batch_number} failed after "
                                         f"{self.accepted} sentences at concurrency {report.concurrency}")
                            halt_reason = HaltReason.ERROR
                            break

                    if self.ramp.on_accepted(self.accepted):
                        logger.info(f"Concurrency raised to {self.concurrency} after {self.accepted} sentences")

                    if not self.config.unlimited and self.accepted >= self.config.max_sentences:
                        logger.info(f"Reached max no of sentences: {self.accepted}")
                        halt_reason = HaltReason.MAX_COUNT
                        break
                    self._set_state(DispatcherState.READING)

                if batch and halt_reason != HaltReason.ERROR and self.config.dispatch_partial_batch:
                    report = self._run_batch(executor, batch)
                    batch = []
                    if report.failed:
                        halt_reason = HaltReason.ERROR
        finally:
            close = getattr(records, "close", None)
            if close is not None:
                close()
            self._set_state(DispatcherState.HALTED)

        if batch:
            logger.warning(f"{len(batch)} sentence(s) left in an incomplete batch were not dispatched")

        return RunSummary(
            sentences_accepted=self.accepted,
            sentences_dispatched=self.dispatched,
            batches=self.batches,
            final_concurrency=self.concurrency,
            elapsed=time.perf_counter() - run_started,
            halt_reason=halt_reason.value,
            undispatched=len(batch)
        )
