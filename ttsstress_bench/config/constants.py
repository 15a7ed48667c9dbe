"""
Constants for TTSStress-Bench - keeping it simple
"""

# =============================================================================
# NETWORK CONFIGURATION
# =============================================================================
DEFAULT_SYNTHESIS_URL = "http://localhost:10000"
DEFAULT_LANG = "sv"
REQUEST_TIMEOUT = None                # No timeout unless --timeout is given

# =============================================================================
# CONCURRENCY RAMP-UP
# =============================================================================
DEFAULT_MAX_CONCURRENCY = 10          # Cap for sentences sent in parallel
DEFAULT_RAMP_INTERVAL = 100           # Accepted sentences per +1 concurrency
INITIAL_CONCURRENCY = 1

# =============================================================================
# CORPUS AND OUTPUT
# =============================================================================
DEFAULT_AUDIO_DIR = "audio"
DEFAULT_MAX_SENTENCES = 0             # 0 means no limit
CORPUS_ELEMENTS = frozenset({"corpus", "text", "sentence", "ne", "w"})
TEXT_SUFFIXES = (".txt",)
XML_SUFFIXES = (".xml",)
BZ2_XML_SUFFIXES = (".xml.bz2",)
GZIP_XML_SUFFIXES = (".xml.gz",)
RESPONSE_PREVIEW_CHARS = 200          # Body excerpt kept in decode errors
