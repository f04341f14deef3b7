"""
Shapley importance of features.

Implements the permutation-based Shapley value of Cohen, Dror & Ruppin (2007),
"Feature selection via coalitional game theory", with model performance as the
value of a coalition:

1. generate (or enumerate) feature permutations,
2. collect the (before, after) coalitions of every requested feature,
3. evaluate the value function once per unique coalition,
4. average value(after) - value(before) over permutations.
"""

import warnings
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from scipy import stats

from ..data.replacement import OBS_ID, as_list
from ..errors import ConfigurationError, InsufficientSamplesError
from ..measures import Measure, check_measures
from ..utils.parallel import check_backend, resolve_n_jobs
from .coalitions import (generate_marginal_contributions,
                         marginal_contribution_values, unique_coalitions)
from .sampling import DEFAULT_N_SHAPLEY_PERM, check_bound_size, generate_permutations
from .value_functions import ValueFunction, evaluate_coalitions, get_value_function, value_function_frame


def shapley_value(values) -> np.ndarray:
    """Mean marginal contribution over permutations (axis 0)."""
    values = np.asarray(values, dtype=float)
    return values.mean(axis=0)


def shapley_uncertainty(values, strict: bool = False) -> np.ndarray:
    """
    Standard error of the mean marginal contribution over permutations.

    With a single permutation the standard error is undefined: NaN is
    returned with a warning, or InsufficientSamplesError is raised if
    `strict` is set.
    """
    values = np.asarray(values, dtype=float)
    if values.shape[0] < 2:
        if strict:
            raise InsufficientSamplesError(
                f"At least 2 permutations are needed for an uncertainty estimate, got {values.shape[0]}")
        warnings.warn("Only one permutation available, Shapley uncertainty is NaN",
                      UserWarning, stacklevel=2)
        return np.full(values.shape[1:], np.nan)
    return stats.sem(values, axis=0, ddof=1)


def aggregate_marginal_contributions(mc: pd.DataFrame, measure_ids: Sequence[str],
                                     strict: bool = False) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Shapley values and uncertainties from a marginal contribution table.

    Groups by feature (and obs.id for local values) keeping the feature order
    of `mc`.

    Returns:
        Tuple of (shapley_value, shapley_uncertainty) frames
    """
    keys = ['feature', OBS_ID] if OBS_ID in mc.columns else ['feature']
    measure_ids = list(measure_ids)

    value_rows = []
    uncertainty_rows = []
    for key, group in mc.groupby(keys, sort=False):
        key = key if isinstance(key, tuple) else (key,)
        values = group[measure_ids].to_numpy(dtype=float)
        value_rows.append(key + tuple(shapley_value(values)))
        uncertainty_rows.append(key + tuple(shapley_uncertainty(values, strict=strict)))

    columns = keys + measure_ids
    return (pd.DataFrame(value_rows, columns=columns),
            pd.DataFrame(uncertainty_rows, columns=columns))


@dataclass
class ShapleyImportance:
    """Result of `shapley_importance`."""
    permutations: List[Tuple]
    measures: List[Measure]
    value_function: pd.DataFrame
    shapley_value: pd.DataFrame
    shapley_uncertainty: pd.DataFrame
    marginal_contributions: pd.DataFrame

    @property
    def features(self) -> List:
        return list(self.shapley_value['feature'].unique())

    def __str__(self):
        lines = [
            "Object of class 'ShapleyImportance'",
            f"Measures used: {', '.join(m.id for m in self.measures)}",
            f"Number of permutations: {len(self.permutations)}",
            "Shapley value(s):",
            self.shapley_value.to_string(index=False),
        ]
        return '\n'.join(lines)

    def summary(self):
        print(self)


def _check_columns(data: pd.DataFrame, features: List, target: List):
    if not features:
        raise ConfigurationError("At least one feature must be explained")
    if not target:
        raise ConfigurationError("A target column is required")
    columns = set(data.columns)
    missing = [f for f in features if f not in columns]
    if missing:
        raise ConfigurationError(f"Features not found in data: {missing}")
    missing = [t for t in target if t not in columns]
    if missing:
        raise ConfigurationError(f"Target not found in data: {missing}")
    overlap = [f for f in features if f in target]
    if overlap:
        raise ConfigurationError(f"Target column(s) cannot be explained as features: {overlap}")
    if len(set(features)) != len(features):
        raise ConfigurationError(f"Duplicated features: {features}")


def shapley_importance(model, data: pd.DataFrame, features: Sequence,
                       target: Union[str, Sequence], measures,
                       local: bool = False, bound_size: Optional[int] = None,
                       n_shapley_perm: Optional[int] = DEFAULT_N_SHAPLEY_PERM,
                       value_function: Union[ValueFunction, str, None] = None,
                       predict_fun: Optional[Callable] = None,
                       n_jobs: Optional[int] = 1, backend: str = 'thread',
                       random_state=None, strict: bool = False,
                       verbose: bool = False) -> ShapleyImportance:
    """
    Compute the Shapley importance of `features`.

    Args:
        model: Fitted model exposing `predict(data)` (or see `predict_fun`)
        data: Dataset the importance is measured on
        features: Feature(s) to explain
        target: Target column(s)
        measures: Measure ids or Measure instances
        local: Per-observation instead of aggregate importance
        bound_size: Bound on coalition size (Cohen et al. 2007)
        n_shapley_perm: Number of permutations, at most 8192. If it is at
            least the number of unique permutations, all of them are used;
            None uses all unique permutations (or 8192)
        value_function: ValueFunction instance, or 'ge' / 'pfi';
            defaults to PermutationImportanceValue
        predict_fun: Optional `predict_fun(model, data)`
        n_jobs: Workers used to evaluate coalitions
        backend: 'thread' or 'process'
        random_state: Seed for permutation sampling
        strict: Raise on clamped sample counts and undefined uncertainties
        verbose: Whether to print progress

    Returns:
        ShapleyImportance
    """
    features = as_list(features)
    target = as_list(target)
    _check_columns(data, features, target)
    measures = check_measures(measures)
    bound_size = check_bound_size(bound_size)
    value_function = get_value_function(value_function)
    n_jobs = resolve_n_jobs(n_jobs)
    backend = check_backend(backend)

    data = data.reset_index(drop=True)
    all_feats = [c for c in data.columns if c not in target]
    target = target[0] if len(target) == 1 else target

    permutations = generate_permutations(all_feats, n_shapley_perm=n_shapley_perm,
                                         bound_size=bound_size, random_state=random_state,
                                         strict=strict)

    records = []
    for feature in features:
        records.extend(generate_marginal_contributions(feature, permutations, bound_size=bound_size))
    coalitions = unique_coalitions(records)

    if verbose:
        print(f"Features: {len(features)}, permutations: {len(permutations)}, "
              f"unique coalitions: {len(coalitions)}")

    table = evaluate_coalitions(value_function, coalitions, model, data, target, measures,
                                local=local, predict_fun=predict_fun, n_jobs=n_jobs,
                                backend=backend, verbose=verbose)

    mc = marginal_contribution_values(records, table)
    measure_ids = [m.id for m in measures]
    values, uncertainty = aggregate_marginal_contributions(mc, measure_ids, strict=strict)

    return ShapleyImportance(
        permutations=permutations,
        measures=measures,
        value_function=value_function_frame(table),
        shapley_value=values,
        shapley_uncertainty=uncertainty,
        marginal_contributions=mc,
    )
