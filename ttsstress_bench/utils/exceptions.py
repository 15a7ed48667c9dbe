"""
Exception types for TTSStress-Bench with actionable error messages
"""
import sys
from typing import Optional


class BenchmarkError(Exception):
    """Base benchmark error with actionable messages"""

    error_kind = "unknown"

    def __init__(self, message: str, suggestion: Optional[str] = None, exit_code: int = 1):
        self.message = message
        self.suggestion = suggestion
        self.exit_code = exit_code
        super().__init__(message)

    def print_and_exit(self):
        """Print error message with suggestion to stderr and exit"""
        print(f"Error: {self.message}", file=sys.stderr)
        if self.suggestion:
            print(f"Solution: {self.suggestion}", file=sys.stderr)
        sys.exit(self.exit_code)


# =============================================================================
# Fatal errors: the run cannot start or cannot continue
# =============================================================================

class InputNotFoundError(BenchmarkError):
    """Corpus file is missing or cannot be read"""

    error_kind = "input_not_found"

    def __init__(self, path: str, reason: Optional[str] = None):
        message = f"Input file does not exist: {path}"
        if reason:
            message = f"Cannot read input file {path}: {reason}"
        super().__init__(message, "Check the corpus path and its read permissions")
        self.path = path


class InputFormatError(BenchmarkError):
    """Corpus file suffix is not one we can parse"""

    error_kind = "input_format_unrecognized"

    def __init__(self, path: str):
        super().__init__(
            f"Unknown file type: {path}",
            "Use a .txt file (one sentence per line) or a .xml, .xml.bz2 or .xml.gz corpus file"
        )
        self.path = path


class CorpusSchemaError(BenchmarkError):
    """Corpus XML contains something the reader does not understand"""

    error_kind = "corpus_schema_violation"

    def __init__(self, message: str, element: Optional[str] = None):
        super().__init__(
            message,
            "The corpus reader only accepts corpus/text/sentence/ne/w elements; check the corpus schema"
        )
        self.element = element


class FileSystemError(BenchmarkError):
    """Audio directory or audio file could not be written"""

    error_kind = "file_system"

    def __init__(self, message: str):
        super().__init__(message, "Check that the audio directory is writable and the disk is not full")


# =============================================================================
# Per-sentence errors: captured into the synthesis result
# =============================================================================

class SynthesisError(BenchmarkError):
    """Failure while synthesizing one sentence"""

    error_kind = "synthesis"


class NetworkError(SynthesisError):
    """HTTP call failed, timed out or returned an error status"""

    error_kind = "network"


class ResponseDecodeError(SynthesisError):
    """Synthesis response was not the expected JSON"""

    error_kind = "response_decode"


class AudioURLParseError(SynthesisError):
    """Audio URL in the synthesis response is unusable"""

    error_kind = "audio_url_parse"


def handle_keyboard_interrupt():
    """Handle user cancellation gracefully"""
    print("\nBenchmark interrupted by user", file=sys.stderr)
    sys.exit(130)
