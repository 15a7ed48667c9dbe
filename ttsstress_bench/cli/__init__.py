"""
CLI module for TTSStress-Bench
"""

from .benchmark import main as benchmark_main

__all__ = ["benchmark_main"]
