"""Models for comparison runs."""

from .mlp import MLPRegressor, create_model, fix_seed

__all__ = ["MLPRegressor", "create_model", "fix_seed"]
