"""
Per-sentence and per-batch metrics for synthesis results
"""
from typing import List

from .schemas import SynthesisResult, SentenceStats, BatchReport


def count_chars(text: str) -> int:
    """Unicode code points in text"""
    return len(text)


def chars_per_byte(n_chars: int, audio_length: int):
    if audio_length <= 0:
        return None
    return n_chars / audio_length


def sentence_stats(result: SynthesisResult) -> SentenceStats:
    """Length metrics for one synthesis result"""
    n_chars = count_chars(result.text)
    return SentenceStats(
        n=result.n,
        text=result.text,
        audio_length=result.audio_length,
        n_chars=n_chars,
        chars_per_byte=chars_per_byte(n_chars, result.audio_length),
        error=result.error
    )


def batch_report(batch_number: int,
                 concurrency: int,
                 results: List[SynthesisResult],
                 duration: float) -> BatchReport:
    """
    Build the report for one dispatched batch.

    The per-call latency is the batch wall-clock time divided by the
    concurrency level, an approximation of one call's latency under that load.
    """
    return BatchReport(
        batch_number=batch_number,
        concurrency=concurrency,
        started_n=results[0].n if results else 0,
        results=results,
        sentences=[sentence_stats(r) for r in results],
        duration=duration,
        per_call_latency=duration / concurrency if concurrency > 0 else 0.0
    )
