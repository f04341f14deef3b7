"""
Performance measures and model evaluation on (replaced) data.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score, mean_absolute_error, mean_squared_error

from .data.replacement import OBS_ID, REPLACE_ID, as_list
from .errors import ConfigurationError


@dataclass(frozen=True)
class Measure:
    """
    A scalar performance measure.

    `fun(truth, predictions)` returns a float. `minimize` records whether
    lower is better; it is carried along but not used in the Shapley math.
    """
    id: str
    fun: Callable
    minimize: bool = True

    def __call__(self, truth, predictions) -> float:
        return float(self.fun(truth, predictions))


def _rmse(truth, predictions) -> float:
    return np.sqrt(mean_squared_error(truth, predictions))


def _mmce(truth, predictions) -> float:
    return 1.0 - accuracy_score(truth, predictions)


def _mean_prediction(truth, predictions) -> float:
    return np.mean(predictions)


MEASURES: Dict[str, Measure] = {
    'mse': Measure('mse', mean_squared_error),
    'mae': Measure('mae', mean_absolute_error),
    'rmse': Measure('rmse', _rmse),
    'mmce': Measure('mmce', _mmce),
    'acc': Measure('acc', accuracy_score, minimize=False),
    'pred': Measure('pred', _mean_prediction, minimize=False),
}


def get_measure(measure: Union[str, Measure]) -> Measure:
    """Look up a built-in measure by id; Measure instances pass through."""
    if isinstance(measure, Measure):
        return measure
    try:
        return MEASURES[measure]
    except KeyError:
        raise ConfigurationError(
            f"Unknown measure: {measure!r}. Available: {sorted(MEASURES)}") from None


def check_measures(measures) -> List[Measure]:
    """Normalize to a non-empty list of Measures with unique ids."""
    if measures is None:
        raise ConfigurationError("At least one measure is required")
    if isinstance(measures, (str, Measure)):
        measures = [measures]
    measures = [get_measure(m) for m in measures]
    if not measures:
        raise ConfigurationError("At least one measure is required")
    ids = [m.id for m in measures]
    if len(set(ids)) != len(ids):
        raise ConfigurationError(f"Duplicated measure ids: {ids}")
    return measures


def predict(model, data: pd.DataFrame, predict_fun: Optional[Callable] = None) -> np.ndarray:
    """Predictions of `model` on `data`, via `predict_fun(model, data)` if given."""
    if predict_fun is not None:
        predictions = predict_fun(model, data)
    else:
        predictions = model.predict(data)
    return np.asarray(predictions)


def measure_performance(model, data: pd.DataFrame, target: Union[str, Sequence],
                        measures: Sequence[Measure], features: Optional[Sequence] = None,
                        local: bool = False, predict_fun: Optional[Callable] = None) -> pd.DataFrame:
    """
    Evaluate `measures` for the predictions of `model` on `data`.

    Args:
        model: Fitted model
        data: Dataset, possibly expanded by `cartesian`
        target: Target column(s)
        measures: Measures to compute
        features: Columns passed to the model; defaults to all columns except
            the target and the replacement bookkeeping columns
        local: Compute one row per observation instead of one aggregate row
        predict_fun: Optional `predict_fun(model, data)` override

    Returns:
        One-row frame, or with `local=True` a frame indexed by `obs.id`, with
        one column per measure id. Unexpanded data is grouped by its index,
        which must then hold 0-based row positions
    """
    target = as_list(target)
    if features is None:
        features = [c for c in data.columns if c not in target and c not in (OBS_ID, REPLACE_ID)]

    predictions = predict(model, data[list(features)], predict_fun=predict_fun)
    truth = data[target[0]] if len(target) == 1 else data[target]
    truth = truth.to_numpy()

    if not local:
        return pd.DataFrame([{m.id: m(truth, predictions) for m in measures}])

    if OBS_ID in data.columns:
        obs_ids = data[OBS_ID].to_numpy()
    else:
        obs_ids = data.index.to_numpy()

    rows = {}
    for obs in np.unique(obs_ids):
        mask = obs_ids == obs
        rows[obs] = {m.id: m(truth[mask], predictions[mask]) for m in measures}

    result = pd.DataFrame.from_dict(rows, orient='index', columns=[m.id for m in measures])
    result.index.name = OBS_ID
    return result
