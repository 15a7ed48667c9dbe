import csv
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Optional, TextIO, TYPE_CHECKING

if TYPE_CHECKING:
    from ..config.bench_config import BenchmarkConfig
    from ..metrics.schemas import BatchReport, RunSummary


class ConsoleReporter:
    """Prints benchmark progress in the line-oriented format used by the load test"""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def _print(self, line: str = ""):
        print(line, file=self.stream)

    def print_settings(self, config: "BenchmarkConfig", corpus_path: str):
        max_sentences = "no limit" if config.unlimited else str(config.max_sentences)
        save_audio = f" in folder: {config.audio_dir}" if config.save_audio else ": no"
        timeout = f"{config.request_timeout}s" if config.request_timeout else "none"

        self._print("Settings:")
        self._print(f" - input file: {corpus_path}")
        self._print(f" - synthesis url: {config.base_url}")
        self._print(f" - language tag: {config.lang}")
        self._print(f" - max number of sentences: {max_sentences}")
        self._print(f" - max concurrency: {config.max_concurrency} (+1 every {config.ramp_interval} sentences)")
        self._print(f" - request timeout: {timeout}")
        self._print(f" - save audio{save_audio}")
        self._print()

    def print_batch(self, report: "BatchReport"):
        for stats in report.sentences:
            ratio = stats.chars_per_byte if stats.chars_per_byte is not None else 0.0
            self._print(f"SENT: {stats.n}\t{stats.text}\nAUDIO LEN: {stats.audio_length}")
            self._print(f"LEN DATA:\t#{stats.n}\t{stats.n_chars}\t{stats.audio_length}\t{ratio:f}")
            if stats.error:
                self._print(f"Failed call : {stats.error}")
        self._print(f"SYNTH DUR: {report.per_call_latency:f}s")
        self._print("------------")

    def print_summary(self, summary: "RunSummary", config: "BenchmarkConfig"):
        if summary.halt_reason == "max_count":
            self._print(f"Reached max no of sentences: {summary.sentences_accepted}")
        elif summary.halt_reason == "error":
            self._print(f"Number of sentences: {summary.sentences_accepted}")
            self._print(f"Concurrent sentences: {summary.final_concurrency}")
        if summary.undispatched:
            self._print(f"Sentences not dispatched (incomplete last batch): {summary.undispatched}")
        self._print(f"MAIN LOOP TOOK {summary.elapsed:.3f}s")
        if config.save_audio:
            self._print(f"AUDIO FILES SAVED TO FOLDER: {config.audio_dir}")


class BenchmarkFormatter:
    """Formats benchmark results for machine consumption"""

    def __init__(self, output_dir: str = "results"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def save_results(self,
                     batch_reports: List["BatchReport"],
                     summary: "RunSummary",
                     config_info: Dict[str, Any],
                     system_info: Dict[str, Any],
                     run_timestamp: Optional[datetime] = None) -> Dict[str, str]:
        """Save results as CSV and JSON and return file paths"""

        if run_timestamp is None:
            run_timestamp = datetime.now()

        timestamp_str = run_timestamp.strftime("%Y%m%d_%H%M%S")
        base_filename = f"tts_benchmark_{timestamp_str}"

        files_created = {}

        csv_path = self.output_dir / f"{base_filename}.csv"
        self._save_csv(batch_reports, csv_path)
        files_created['csv'] = str(csv_path)

        json_path = self.output_dir / f"{base_filename}.json"
        self._save_json(batch_reports, summary, config_info, system_info, run_timestamp, json_path)
        files_created['json'] = str(json_path)

        return files_created

    def _save_csv(self, reports: List["BatchReport"], path: Path):
        """One row per synthesized sentence"""
        with open(path, 'w', newline='', encoding='utf-8') as csvfile:
            fieldnames = [
                'n',
                'batch_number',
                'concurrency',
                'n_chars',
                'audio_length',
                'chars_per_byte',
                'call_duration',
                'batch_per_call_latency',
                'error_kind',
                'error',
                'text'
            ]

            writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
            writer.writeheader()

            for report in reports:
                for result, stats in zip(report.results, report.sentences):
                    writer.writerow({
                        'n': stats.n,
                        'batch_number': report.batch_number,
                        'concurrency': report.concurrency,
                        'n_chars': stats.n_chars,
                        'audio_length': stats.audio_length,
                        'chars_per_byte': round(stats.chars_per_byte, 6) if stats.chars_per_byte is not None else '',
                        'call_duration': round(result.duration, 3),
                        'batch_per_call_latency': round(report.per_call_latency, 3),
                        'error_kind': result.error_kind or '',
                        'error': result.error or '',
                        'text': stats.text
                    })

    def _save_json(self, reports: List["BatchReport"],
                   summary: "RunSummary",
                   config_info: Dict[str, Any],
                   system_info: Dict[str, Any],
                   run_timestamp: datetime,
                   path: Path):
        """Save the full run, batch by batch"""
        data = {
            "run_timestamp": run_timestamp.isoformat(),
            "config": config_info,
            "system_info": system_info,
            "summary": summary.model_dump(mode="json"),
            "batches": [
                {
                    "batch_number": report.batch_number,
                    "concurrency": report.concurrency,
                    "duration": report.duration,
                    "per_call_latency": report.per_call_latency,
                    "sentences": [s.model_dump(mode="json") for s in report.sentences]
                }
                for report in reports
            ]
        }

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
