import logging
import posixpath
from pathlib import Path
from urllib.parse import urlparse

from ..utils.exceptions import FileSystemError

logger = logging.getLogger(__name__)


class AudioStore:
    """Writes raw audio payloads to a directory, one file per sentence"""

    def __init__(self, audio_dir: str):
        self.audio_dir = Path(audio_dir)

    def prepare(self) -> None:
        """Create the audio directory"""
        try:
            self.audio_dir.mkdir(parents=True, exist_ok=True, mode=0o700)
        except OSError as e:
            raise FileSystemError(f"Failed to create audio dir {self.audio_dir}: {e}")

    @staticmethod
    def filename_for(audio_url: str) -> str:
        """Final path segment of the audio URL"""
        name = posixpath.basename(urlparse(audio_url).path)
        if not name:
            raise FileSystemError(f"Audio URL has no file name: {audio_url}")
        return name

    def save(self, audio_url: str, data: bytes) -> Path:
        """Save audio bytes under the name taken from the audio URL"""
        path = self.audio_dir / self.filename_for(audio_url)
        try:
            path.write_bytes(data)
        except OSError as e:
            raise FileSystemError(f"Failed to write audio file {path}: {e}")
        logger.debug(f"Saved {len(data)} bytes to {path}")
        return path
