"""
TTSStress-Bench: a load-test driver for network speech-synthesis services
"""

__version__ = "0.1.0"
__author__ = "TTSStress-Bench Contributors"
__description__ = "Adaptive-concurrency load test for HTTP text-to-speech endpoints"

from .config.constants import *

__all__ = [
    "__version__",
    "__author__",
    "__description__",
]
