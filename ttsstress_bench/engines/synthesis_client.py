import logging
import time
from typing import Optional
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from pydantic import ValidationError

from ..config.bench_config import BenchmarkConfig
from ..config.constants import RESPONSE_PREVIEW_CHARS
from ..metrics.schemas import SentenceRecord, SynthesisResponse, SynthesisResult
from ..output.audio_store import AudioStore
from ..utils.exceptions import (
    BenchmarkError, NetworkError, ResponseDecodeError, AudioURLParseError
)

logger = logging.getLogger(__name__)


class SynthesisClient:
    """Client for a synthesis server: one text request plus one audio download per sentence"""

    def __init__(self, config: BenchmarkConfig, audio_store: Optional[AudioStore] = None):
        self.config = config
        self.base_url = config.base_url
        self.timeout = config.request_timeout
        self.session = requests.Session()
        # One pooled connection per worker thread
        adapter = HTTPAdapter(pool_connections=2, pool_maxsize=config.max_concurrency)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.audio_store = audio_store
        if config.save_audio and audio_store is None:
            self.audio_store = AudioStore(config.audio_dir)

    def request_synthesis(self, record: SentenceRecord) -> SynthesisResponse:
        """Ask the server to synthesize one sentence and decode its JSON answer"""
        try:
            response = self.session.get(
                f"{self.base_url}/",
                params={"lang": record.lang, "input": record.text},
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.Timeout as e:
            raise NetworkError(f"Synthesis request timed out after {self.timeout}s: {e}")
        except requests.RequestException as e:
            raise NetworkError(f"Synthesis request failed: {e}")

        try:
            return SynthesisResponse.model_validate_json(response.content)
        except ValidationError as e:
            body = response.text[:RESPONSE_PREVIEW_CHARS]
            raise ResponseDecodeError(f"Failed to unmarshal json {body!r}: {e}")

    def validate_audio_url(self, audio_url: str) -> str:
        """Check that the audio URL can be fetched"""
        try:
            parsed = urlparse(audio_url)
        except ValueError as e:
            raise AudioURLParseError(f"Failed to parse audio url {audio_url!r}: {e}")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise AudioURLParseError(f"Failed to parse audio url {audio_url!r}: not an absolute http(s) URL")
        return audio_url

    def fetch_audio(self, audio_url: str) -> bytes:
        """Download the generated audio"""
        try:
            response = self.session.get(audio_url, timeout=self.timeout)
            response.raise_for_status()
            return response.content
        except requests.Timeout as e:
            raise NetworkError(f"Audio download timed out after {self.timeout}s: {e}")
        except requests.RequestException as e:
            raise NetworkError(f"Failed to get audio: {e}")

    def synthesize(self, record: SentenceRecord) -> SynthesisResult:
        """
        Synthesize one sentence and download its audio.

        Never raises for per-sentence failures: the first failing step ends the
        call and its error is carried in the returned result.

        Args:
            record: Sentence to synthesize

        Returns:
            SynthesisResult with the audio byte length, or with error set
        """
        start_time = time.perf_counter()
        audio_url = None

        try:
            synthesis = self.request_synthesis(record)
            audio_url = self.validate_audio_url(synthesis.audio)
            audio = self.fetch_audio(audio_url)
            if self.config.save_audio:
                self.audio_store.save(audio_url, audio)
        except BenchmarkError as e:
            logger.warning(f"Sentence {record.n} failed ({e.error_kind}): {e.message}")
            return SynthesisResult(
                n=record.n,
                lang=record.lang,
                text=record.text,
                audio_url=audio_url,
                error=e.message,
                error_kind=e.error_kind,
                duration=time.perf_counter() - start_time
            )

        return SynthesisResult(
            n=record.n,
            lang=record.lang,
            text=record.text,
            audio_length=len(audio),
            audio_url=audio_url,
            duration=time.perf_counter() - start_time
        )

    def close(self):
        self.session.close()
