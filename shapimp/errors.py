"""
Exception types raised by shapimp.
"""


class ShapimpError(Exception):
    """Base class for all shapimp errors."""


class ConfigurationError(ShapimpError, ValueError):
    """Invalid arguments: unknown columns, bad sample counts, bad bounds."""


class InsufficientSamplesError(ShapimpError, ValueError):
    """Too few permutations to compute an uncertainty estimate."""


class EvaluationError(ShapimpError, RuntimeError):
    """A value function evaluation failed for some coalition."""
