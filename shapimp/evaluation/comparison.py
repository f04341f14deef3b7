"""
Compare classic permutation feature importance with Shapley importance.

Everything here is composed from the public shapimp API: `cartesian`,
`measure_performance` and `shapley_importance`.
"""

from typing import Dict, Sequence

import pandas as pd

from ..data.replacement import as_list, cartesian
from ..measures import check_measures, measure_performance
from ..valuation.shapley import shapley_importance
from ..valuation.value_functions import GeneralizationErrorValue, PermutationImportanceValue


def pfi(model, data: pd.DataFrame, target, measures, features: Sequence) -> Dict[str, dict]:
    """
    Permutation feature importance of each feature on its own.

    Each feature is replaced by the values of every other observation; the
    importance is the change in performance, both as difference and as ratio.

    Returns:
        Dict feature -> {'pfi_diff': frame, 'pfi_ratio': frame}
    """
    measures = check_measures(measures)
    unpermuted = measure_performance(model, data, target, measures)

    results = {}
    for feature in as_list(features):
        data_perm = cartesian(data, [feature], target, keep_na=False)
        permuted = measure_performance(model, data_perm, target, measures)
        results[feature] = {
            'pfi_diff': permuted - unpermuted,
            'pfi_ratio': permuted / unpermuted,
        }
    return results


def ge(model, data: pd.DataFrame, target, measures) -> Dict[str, pd.DataFrame]:
    """
    Performance on the original data (geP) and on data where all features
    were replaced (ge0).
    """
    measures = check_measures(measures)
    target_cols = as_list(target)
    all_feats = [c for c in data.columns if c not in target_cols]

    ge_p = measure_performance(model, data, target, measures)
    data_0 = cartesian(data, all_feats, target, keep_na=False)
    ge_0 = measure_performance(model, data_0, target, measures)
    return {'geP': ge_p, 'ge0': ge_0}


def compare_importance(model, data: pd.DataFrame, target, measures, features: Sequence,
                       **kwargs) -> dict:
    """
    Classic PFI next to Shapley importance with both value functions.

    Extra keyword arguments are passed to `shapley_importance`.

    Returns:
        Dict with keys 'pfi', 'shapley_ge' and 'shapley_pfi'
    """
    kwargs.pop('value_function', None)
    return {
        'pfi': pfi(model, data, target, measures, features),
        'shapley_ge': shapley_importance(model, data, features, target, measures,
                                         value_function=GeneralizationErrorValue(), **kwargs),
        'shapley_pfi': shapley_importance(model, data, features, target, measures,
                                          value_function=PermutationImportanceValue(), **kwargs),
    }


def importance_table(comparison: dict, measure_id: str) -> pd.DataFrame:
    """One row per feature with PFI, Shapley GE and Shapley PFI for a measure."""
    rows = []
    shapley_ge = comparison['shapley_ge'].shapley_value.set_index('feature')[measure_id]
    shapley_pfi = comparison['shapley_pfi'].shapley_value.set_index('feature')[measure_id]
    for feature, frames in comparison['pfi'].items():
        rows.append({
            'feature': feature,
            'pfi': frames['pfi_diff'][measure_id].iloc[0],
            'shapley_ge': shapley_ge.get(feature),
            'shapley_pfi': shapley_pfi.get(feature),
        })
    return pd.DataFrame(rows)
