"""Permutation sampling, coalition value functions and Shapley estimation."""

from .sampling import MAX_PERMUTATIONS, count_permutations, generate_permutations
from .coalitions import (Coalition, MarginalContribution, make_coalition, coalition_label,
                         generate_marginal_contributions, unique_coalitions,
                         marginal_contribution_values)
from .value_functions import (ValueFunction, GeneralizationErrorValue,
                              PermutationImportanceValue, VALUE_FUNCTIONS,
                              get_value_function, evaluate_coalitions)
from .shapley import (ShapleyImportance, shapley_importance, shapley_value,
                      shapley_uncertainty, aggregate_marginal_contributions)

__all__ = [
    "MAX_PERMUTATIONS",
    "count_permutations",
    "generate_permutations",
    "Coalition",
    "MarginalContribution",
    "make_coalition",
    "coalition_label",
    "generate_marginal_contributions",
    "unique_coalitions",
    "marginal_contribution_values",
    "ValueFunction",
    "GeneralizationErrorValue",
    "PermutationImportanceValue",
    "VALUE_FUNCTIONS",
    "get_value_function",
    "evaluate_coalitions",
    "ShapleyImportance",
    "shapley_importance",
    "shapley_value",
    "shapley_uncertainty",
    "aggregate_marginal_contributions",
]
