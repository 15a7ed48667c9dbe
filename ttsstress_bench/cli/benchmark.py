#!/usr/bin/env python3
"""
CLI entry point for TTSStress benchmark runner
"""

import sys
from ..benchmark.runner import main

if __name__ == "__main__":
    sys.exit(main())
