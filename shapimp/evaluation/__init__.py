"""
Comparison of importance methods built on the public shapimp API.
"""

from .comparison import pfi, ge, compare_importance, importance_table

__all__ = ["pfi", "ge", "compare_importance", "importance_table"]
