"""
Permutation sampling for Shapley value estimation.

Small feature sets are enumerated exactly; larger ones are sampled uniformly
without duplicates.
"""

import itertools
import math
import warnings
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError

# Upper bound on the number of permutations used per computation
MAX_PERMUTATIONS = 8192
DEFAULT_N_SHAPLEY_PERM = 120


def count_permutations(num_features: int) -> int:
    """Number of unique orderings of `num_features` features."""
    return math.factorial(num_features)


def check_bound_size(bound_size: Optional[int]) -> Optional[int]:
    """Validate the coalition size bound."""
    if bound_size is None:
        return None
    if isinstance(bound_size, bool) or int(bound_size) != bound_size:
        raise ConfigurationError(f"bound_size must be an integer, got {bound_size!r}")
    if bound_size < 1:
        raise ConfigurationError(f"bound_size must be >= 1, got {bound_size}")
    return int(bound_size)


def resolve_num_permutations(n_shapley_perm: Optional[int], strict: bool = False) -> int:
    """
    Turn the user's sample count into the effective cap.

    `None` means "as many as allowed". Requests above MAX_PERMUTATIONS are
    clamped with a warning, or rejected when `strict` is set.
    """
    if n_shapley_perm is None:
        return MAX_PERMUTATIONS
    if isinstance(n_shapley_perm, bool) or int(n_shapley_perm) != n_shapley_perm:
        raise ConfigurationError(
            f"n_shapley_perm must be an integer or None, got {n_shapley_perm!r}")
    n_shapley_perm = int(n_shapley_perm)
    if n_shapley_perm < 1:
        raise ConfigurationError(f"n_shapley_perm must be >= 1, got {n_shapley_perm}")
    if n_shapley_perm > MAX_PERMUTATIONS:
        if strict:
            raise ConfigurationError(
                f"n_shapley_perm={n_shapley_perm} exceeds the maximum of {MAX_PERMUTATIONS}")
        warnings.warn(
            f"n_shapley_perm={n_shapley_perm} exceeds the maximum of {MAX_PERMUTATIONS}; "
            f"using {MAX_PERMUTATIONS} permutations",
            UserWarning, stacklevel=3)
        return MAX_PERMUTATIONS
    return n_shapley_perm


def generate_permutations(features: Sequence, n_shapley_perm: Optional[int] = DEFAULT_N_SHAPLEY_PERM,
                          bound_size: Optional[int] = None, random_state=None,
                          strict: bool = False) -> List[Tuple]:
    """
    Generate the feature orderings used to estimate Shapley values.

    Args:
        features: All features of the game (target excluded)
        n_shapley_perm: Desired number of permutations, None for all unique
            permutations (up to MAX_PERMUTATIONS)
        bound_size: Optional bound on coalition size, validated here and
            applied when marginal contributions are extracted
        random_state: Seed or numpy Generator used for sampling
        strict: Raise instead of clamping when n_shapley_perm is too large

    Returns:
        List of permutations, each a tuple containing every feature once
    """
    features = list(features)
    if len(features) == 0:
        raise ConfigurationError("Cannot generate permutations of an empty feature set")
    if len(set(features)) != len(features):
        raise ConfigurationError(f"Duplicated features: {features}")
    check_bound_size(bound_size)

    cap = resolve_num_permutations(n_shapley_perm, strict=strict)
    num_features = len(features)

    if count_permutations(num_features) <= cap:
        return list(itertools.permutations(features))

    rng = np.random.default_rng(random_state)
    seen = set()
    permutations = []
    while len(permutations) < cap:
        perm = tuple(features[i] for i in rng.permutation(num_features))
        if perm in seen:
            continue
        seen.add(perm)
        permutations.append(perm)
    return permutations
