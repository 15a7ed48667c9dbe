from typing import Dict, Any, Optional
from pydantic import BaseModel, Field
from ..config.constants import (
    DEFAULT_SYNTHESIS_URL, DEFAULT_LANG, DEFAULT_MAX_SENTENCES, DEFAULT_AUDIO_DIR,
    DEFAULT_MAX_CONCURRENCY, DEFAULT_RAMP_INTERVAL, REQUEST_TIMEOUT
)


class BenchmarkConfig(BaseModel):
    """Configuration for a synthesis load-test run"""

    # Endpoint configuration
    synthesis_url: str = Field(default=DEFAULT_SYNTHESIS_URL, description="Base URL of the synthesis server")
    lang: str = Field(default=DEFAULT_LANG, description="Language tag sent with every request")
    request_timeout: Optional[float] = Field(default=REQUEST_TIMEOUT, gt=0, description="Seconds per HTTP call (None = no timeout)")

    # Run limits
    max_sentences: int = Field(default=DEFAULT_MAX_SENTENCES, ge=0, description="Maximum sentences to synthesize (0 = no limit)")

    # Concurrency ramp-up
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1, description="Cap for concurrent synthesis calls")
    ramp_interval: int = Field(default=DEFAULT_RAMP_INTERVAL, ge=1, description="Accepted sentences between concurrency increments")
    dispatch_partial_batch: bool = Field(default=False, description="Dispatch the trailing short batch when input ends")

    # Output
    save_audio: bool = Field(default=False, description="Save returned audio files to disk")
    audio_dir: str = Field(default=DEFAULT_AUDIO_DIR, description="Directory for saved audio files")
    output_dir: Optional[str] = Field(default=None, description="Directory for CSV/JSON result files")

    class Config:
        frozen = True

    @property
    def base_url(self) -> str:
        """Synthesis URL without trailing slashes"""
        return self.synthesis_url.rstrip("/")

    @property
    def unlimited(self) -> bool:
        return self.max_sentences == 0

    def to_report_dict(self) -> Dict[str, Any]:
        """Settings as stored in result files"""
        return {
            "synthesis_url": self.base_url,
            "lang": self.lang,
            "max_sentences": self.max_sentences,
            "max_concurrency": self.max_concurrency,
            "ramp_interval": self.ramp_interval,
            "request_timeout": self.request_timeout,
            "save_audio": self.save_audio,
            "audio_dir": self.audio_dir if self.save_audio else None,
            "dispatch_partial_batch": self.dispatch_partial_batch,
        }
