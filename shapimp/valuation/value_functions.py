"""
Value functions for Shapley importance.

A value function maps a coalition of features to the performance attributable
to that coalition. Two strategies are provided:

- GeneralizationErrorValue: keep the coalition, replace every other feature,
  and compare against the fully replaced data.
- PermutationImportanceValue: replace the coalition itself and compare
  against the unmodified data.

Both rely on `cartesian` to simulate absent features.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Sequence, Union

import pandas as pd

from ..data.replacement import as_list, cartesian
from ..errors import ConfigurationError, EvaluationError
from ..measures import Measure, measure_performance
from ..utils.parallel import parallel_map
from .coalitions import Coalition, coalition_label


class ValueFunction(ABC):
    """Interface of a coalition value function."""

    name = None

    @abstractmethod
    def evaluate(self, coalition: Coalition, model, data: pd.DataFrame,
                 target: Union[str, Sequence], measures: Sequence[Measure],
                 local: bool = False, predict_fun: Optional[Callable] = None) -> pd.DataFrame:
        """
        Value of `coalition`, one column per measure.

        Returns a single row, or one row per observation (indexed by obs.id)
        when `local` is set.
        """

    def __repr__(self):
        return f"{type(self).__name__}()"

    @staticmethod
    def _positional(data: pd.DataFrame) -> pd.DataFrame:
        # local values of expanded and unexpanded data are keyed by row position
        return data.reset_index(drop=True)

    @staticmethod
    def _all_features(data: pd.DataFrame, target) -> List:
        target = as_list(target)
        return [c for c in data.columns if c not in target]

    @staticmethod
    def _performance(model, data, target, measures, features, local, predict_fun):
        data = data.dropna(subset=as_list(target))
        return measure_performance(model, data, target, measures, features=features,
                                   local=local, predict_fun=predict_fun)


class GeneralizationErrorValue(ValueFunction):
    """Performance kept by the coalition relative to fully replaced data."""

    name = 'ge'

    def evaluate(self, coalition, model, data, target, measures, local=False, predict_fun=None):
        data = self._positional(data)
        all_feats = self._all_features(data, target)
        kept = set(coalition)
        shuffle_features = [f for f in all_feats if f not in kept]

        data_perm = cartesian(data, shuffle_features, target, keep_na=False)
        ge_s = self._performance(model, data_perm, target, measures, all_feats, local, predict_fun)

        data_0 = cartesian(data, all_feats, target, keep_na=False)
        ge_0 = self._performance(model, data_0, target, measures, all_feats, local, predict_fun)

        return ge_s - ge_0


class PermutationImportanceValue(ValueFunction):
    """Performance lost when the coalition is replaced."""

    name = 'pfi'

    def evaluate(self, coalition, model, data, target, measures, local=False, predict_fun=None):
        data = self._positional(data)
        all_feats = self._all_features(data, target)

        data_perm = cartesian(data, list(coalition), target, keep_na=False)
        ge_sc = self._performance(model, data_perm, target, measures, all_feats, local, predict_fun)

        ge_p = self._performance(model, data, target, measures, all_feats, local, predict_fun)

        return ge_sc - ge_p


VALUE_FUNCTIONS: Dict[str, type] = {
    GeneralizationErrorValue.name: GeneralizationErrorValue,
    PermutationImportanceValue.name: PermutationImportanceValue,
}


def get_value_function(value_function: Union[str, ValueFunction, None]) -> ValueFunction:
    """Resolve a value function by name ('ge', 'pfi'); instances pass through."""
    if value_function is None:
        return PermutationImportanceValue()
    if isinstance(value_function, ValueFunction):
        return value_function
    try:
        return VALUE_FUNCTIONS[value_function]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown value function: {value_function!r}. "
            f"Available: {sorted(VALUE_FUNCTIONS)}") from None


def _evaluate_coalition(coalition: Coalition, value_function: ValueFunction, **kwargs) -> pd.DataFrame:
    try:
        return value_function.evaluate(coalition, **kwargs)
    except Exception as exc:
        raise EvaluationError(
            f"{value_function!r} failed for coalition "
            f"[{coalition_label(coalition)}]: {exc}") from exc


def evaluate_coalitions(value_function: ValueFunction, coalitions: Sequence[Coalition],
                        model, data: pd.DataFrame, target, measures: Sequence[Measure],
                        local: bool = False, predict_fun: Optional[Callable] = None,
                        n_jobs: Optional[int] = 1, backend: str = 'thread',
                        verbose: bool = False) -> Dict[Coalition, pd.DataFrame]:
    """
    Evaluate `value_function` once per coalition.

    Evaluations are independent and may run in parallel; the table is built
    after all of them finished. A single failure aborts the computation with
    an EvaluationError.

    Returns:
        Value function table mapping coalition -> value frame
    """
    coalitions = list(coalitions)
    more_args = dict(value_function=value_function, model=model, data=data, target=target,
                     measures=measures, local=local, predict_fun=predict_fun)
    values = parallel_map(_evaluate_coalition, coalitions, more_args=more_args,
                          n_jobs=n_jobs, backend=backend,
                          desc="Evaluating coalitions", verbose=verbose)
    return dict(zip(coalitions, values))


def value_function_frame(table: Dict[Coalition, pd.DataFrame]) -> pd.DataFrame:
    """Flatten the value function table, labelling rows by coalition."""
    frames = []
    for coalition, values in table.items():
        values = values.reset_index(drop=values.index.name is None)
        values.insert(0, 'features', coalition_label(coalition))
        frames.append(values)
    return pd.concat(frames, ignore_index=True)
