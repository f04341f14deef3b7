"""Utility functions."""

from .helpers import DEFAULT_CONFIG, load_config, save_results, load_results, print_config
from .parallel import parallel_map

__all__ = ["DEFAULT_CONFIG", "load_config", "save_results", "load_results",
           "print_config", "parallel_map"]
