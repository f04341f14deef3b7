"""
shapimp: Shapley Feature Importance

Estimates the contribution of each feature to the performance of a fitted
model by averaging marginal contributions over feature permutations, with
generalization error or permutation feature importance as the value function.
"""

__version__ = "0.1.0"
__author__ = "shapimp Authors"

from .errors import ShapimpError, ConfigurationError, InsufficientSamplesError, EvaluationError
from .data import cartesian
from .measures import Measure, get_measure, measure_performance
from .valuation import (generate_permutations, GeneralizationErrorValue,
                        PermutationImportanceValue, ValueFunction,
                        ShapleyImportance, shapley_importance)

__all__ = [
    "ShapimpError",
    "ConfigurationError",
    "InsufficientSamplesError",
    "EvaluationError",
    "cartesian",
    "Measure",
    "get_measure",
    "measure_performance",
    "generate_permutations",
    "GeneralizationErrorValue",
    "PermutationImportanceValue",
    "ValueFunction",
    "ShapleyImportance",
    "shapley_importance",
]
