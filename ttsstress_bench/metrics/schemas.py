from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class SentenceRecord(BaseModel):
    """One sentence read from the corpus"""

    lang: str = Field(..., description="Language tag of the sentence")
    text: str = Field(..., description="Sentence text")
    n: int = Field(..., ge=1, description="Sequence number, dense from 1")

    class Config:
        frozen = True


class SynthesisToken(BaseModel):
    """Word timing returned by the synthesis server"""

    endtime: float = Field(..., description="End time of the token in the audio (seconds)")
    orth: str = Field(..., description="Orthographic form of the token")


class SynthesisResponse(BaseModel):
    """JSON body of a synthesis request"""

    audio: str = Field(..., description="URL of the generated audio")
    tokens: List[SynthesisToken] = Field(default_factory=list, description="Token timings (unused by dispatch)")


class SynthesisResult(BaseModel):
    """Outcome of synthesizing a single sentence"""

    n: int = Field(..., description="Sequence number of the originating sentence")
    lang: str = Field(..., description="Language tag")
    text: str = Field(..., description="Original sentence text")
    audio_length: int = Field(default=0, description="Audio size in bytes (0 on failure)")
    audio_url: Optional[str] = Field(default=None, description="Audio URL returned by the server")
    error: Optional[str] = Field(default=None, description="Error description, None on success")
    error_kind: Optional[str] = Field(default=None, description="Error category, None on success")
    duration: float = Field(default=0.0, description="Wall-clock time for both round-trips (seconds)")

    @property
    def ok(self) -> bool:
        return self.error is None


class SentenceStats(BaseModel):
    """Per-sentence length metrics"""

    n: int = Field(..., description="Sequence number")
    text: str = Field(..., description="Sentence text")
    audio_length: int = Field(..., description="Audio size in bytes")
    n_chars: int = Field(..., description="Unicode code points in the text")
    chars_per_byte: Optional[float] = Field(default=None, description="n_chars / audio_length, None when no audio")
    error: Optional[str] = Field(default=None, description="Error of the synthesis call, if any")


class BatchReport(BaseModel):
    """Results of one concurrently dispatched batch"""

    batch_number: int = Field(..., description="1-based batch index")
    concurrency: int = Field(..., description="Concurrency level the batch was dispatched at")
    started_n: int = Field(..., description="Sequence number of the first sentence in the batch")
    results: List[SynthesisResult] = Field(..., description="Results in sentence order")
    sentences: List[SentenceStats] = Field(..., description="Per-sentence metrics in sentence order")
    duration: float = Field(..., description="Wall-clock batch duration (seconds)")
    per_call_latency: float = Field(..., description="Batch duration divided by concurrency")

    @property
    def failed(self) -> bool:
        return any(not r.ok for r in self.results)


class RunSummary(BaseModel):
    """Summary of a complete benchmark run"""

    sentences_accepted: int = Field(..., description="Sentences taken from the corpus")
    sentences_dispatched: int = Field(..., description="Sentences sent to the synthesis server")
    batches: int = Field(..., description="Number of dispatched batches")
    final_concurrency: int = Field(..., description="Concurrency level when the run stopped")
    elapsed: float = Field(..., description="Total run time (seconds)")
    halt_reason: str = Field(..., description="exhausted, max_count or error")
    undispatched: int = Field(default=0, description="Accepted sentences left in a short trailing batch")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the run finished")

    class Config:
        json_encoders = {
            datetime: lambda v: v.isoformat()
        }
