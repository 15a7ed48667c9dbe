#!/usr/bin/env python3
"""
TTSStress Benchmark Runner - Load test an HTTP speech-synthesis endpoint
"""
import argparse
import logging
import sys
from typing import List, Optional

from ..config.bench_config import BenchmarkConfig
from ..config.constants import (
    DEFAULT_SYNTHESIS_URL, DEFAULT_LANG, DEFAULT_AUDIO_DIR,
    DEFAULT_MAX_CONCURRENCY, DEFAULT_RAMP_INTERVAL
)
from ..data.corpus_reader import open_corpus
from ..engines.synthesis_client import SynthesisClient
from ..metrics.schemas import BatchReport, RunSummary
from ..output.audio_store import AudioStore
from ..output.formatters import ConsoleReporter, BenchmarkFormatter
from ..utils.exceptions import BenchmarkError, handle_keyboard_interrupt
from ..utils.system_info import host_info_dict
from .dispatcher import BatchDispatcher

logger = logging.getLogger(__name__)


class BenchmarkRunner:
    """Runs one load test: corpus -> adaptive batches -> report"""

    def __init__(self,
                 config: BenchmarkConfig,
                 corpus_path: str,
                 client: Optional[SynthesisClient] = None,
                 reporter: Optional[ConsoleReporter] = None):
        self.config = config
        self.corpus_path = corpus_path
        self.reporter = reporter or ConsoleReporter()
        self.audio_store = AudioStore(config.audio_dir) if config.save_audio else None
        self.client = client or SynthesisClient(config, audio_store=self.audio_store)
        self.batch_reports: List[BatchReport] = []

    def _on_batch(self, report: BatchReport):
        self.reporter.print_batch(report)
        if self.config.output_dir:
            self.batch_reports.append(report)

    def run(self) -> RunSummary:
        """
        Run the complete benchmark.

        Raises:
            BenchmarkError: on fatal input, corpus or file-system errors
        """
        self.reporter.print_settings(self.config, self.corpus_path)

        if self.audio_store:
            self.audio_store.prepare()

        dispatcher = BatchDispatcher(self.config, self.client, on_batch=self._on_batch)
        try:
            records = open_corpus(self.corpus_path, self.config.lang)
            summary = dispatcher.run(records)
        finally:
            self.client.close()

        logger.info(f"Run halted ({summary.halt_reason}) after {summary.batches} batches")
        self.reporter.print_summary(summary, self.config)

        if self.config.output_dir:
            files_created = BenchmarkFormatter(self.config.output_dir).save_results(
                batch_reports=self.batch_reports,
                summary=summary,
                config_info=self.config.to_report_dict(),
                system_info=host_info_dict()
            )
            for format_type, path in files_created.items():
                print(f"  {format_type}: {path}")

        return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TTSStress Benchmark Runner - stream a corpus to a speech-synthesis server "
                    "with gradually increasing concurrency",
        epilog="The corpus is a .txt file (one sentence per line) or a corpus/text/sentence/w "
               "XML corpus file, plain or compressed as .xml.bz2 / .xml.gz"
    )

    parser.add_argument("corpus", help="Text file or XML corpus file")

    # Server connection
    parser.add_argument("-u", "--url", default=DEFAULT_SYNTHESIS_URL,
                        help=f"Synthesis server URL (default: {DEFAULT_SYNTHESIS_URL})")
    parser.add_argument("-l", "--lang", default=DEFAULT_LANG,
                        help=f"Language tag (default: {DEFAULT_LANG})")
    parser.add_argument("--timeout", type=float,
                        help="Per-request timeout in seconds (default: no timeout)")

    # Run configuration
    parser.add_argument("-n", "--max-sentences", type=int, default=0,
                        help="Max number of sentences to synthesize (default: no limit)")
    parser.add_argument("--max-concurrency", type=int, default=DEFAULT_MAX_CONCURRENCY,
                        help=f"Max number of concurrent calls (default: {DEFAULT_MAX_CONCURRENCY})")
    parser.add_argument("--ramp-interval", type=int, default=DEFAULT_RAMP_INTERVAL,
                        help=f"Sentences between concurrency increments (default: {DEFAULT_RAMP_INTERVAL})")
    parser.add_argument("--dispatch-partial-batch", action="store_true",
                        help="Also synthesize the incomplete last batch when the corpus ends")

    # Output
    parser.add_argument("-a", "--save-audio", action="store_true",
                        help="Save audio files to disk")
    parser.add_argument("--audio-dir", default=DEFAULT_AUDIO_DIR,
                        help=f"Folder for saved audio files (default: {DEFAULT_AUDIO_DIR})")
    parser.add_argument("--output-dir",
                        help="Write CSV and JSON result files to this folder")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Log level for diagnostics on stderr (default: WARNING)")
    return parser


def setup_logging(level: str) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    root.handlers.clear()
    root.addHandler(handler)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = BenchmarkConfig(
            synthesis_url=args.url,
            lang=args.lang,
            request_timeout=args.timeout,
            max_sentences=args.max_sentences,
            max_concurrency=args.max_concurrency,
            ramp_interval=args.ramp_interval,
            dispatch_partial_batch=args.dispatch_partial_batch,
            save_audio=args.save_audio,
            audio_dir=args.audio_dir,
            output_dir=args.output_dir
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        BenchmarkRunner(config, args.corpus).run()
    except KeyboardInterrupt:
        handle_keyboard_interrupt()
    except BenchmarkError as e:
        e.print_and_exit()

    return 0


if __name__ == "__main__":
    sys.exit(main())
