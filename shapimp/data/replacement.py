"""
Coalition replacement (cartesian expansion) of tabular data.

Every observation is paired with every other observation and the selected
features are overwritten by the values of the partner row. Value functions use
this to simulate "feature is absent" without refitting the model.
"""

from typing import List, Sequence, Union

import numpy as np
import pandas as pd

OBS_ID = 'obs.id'
REPLACE_ID = 'replace.id'


def as_list(columns) -> List:
    if columns is None:
        return []
    if isinstance(columns, str):
        return [columns]
    return list(columns)


def cartesian(data: pd.DataFrame, features: Sequence, target: Union[str, Sequence],
              keep_na: bool = True) -> pd.DataFrame:
    """
    Replace `features` of every row by the values of every other row.

    Args:
        data: Dataset with n rows
        features: Columns to overwrite; empty means no replacement
        target: Target column(s)
        keep_na: Set the target of self pairs (i == j) to NaN so that they
            can be dropped downstream

    Returns:
        `data` itself if `features` is empty, otherwise a new frame with n*n
        rows. Row j*n + i is row i with `features` taken from row j, and the
        leading columns `obs.id` (= i) and `replace.id` (= j) hold 0-based
        positions.
    """
    features = as_list(features)
    if len(features) == 0:
        return data

    target = as_list(target)
    n = len(data)
    row_indices = np.tile(np.arange(n), n)
    replace_indices = np.repeat(np.arange(n), n)

    expanded = data.iloc[row_indices].reset_index(drop=True)
    replaced = data[features].iloc[replace_indices].reset_index(drop=True)
    for col in features:
        expanded[col] = replaced[col]

    if keep_na:
        keep = pd.Series(row_indices != replace_indices)
        for col in target:
            expanded[col] = expanded[col].where(keep)

    expanded.insert(0, REPLACE_ID, replace_indices)
    expanded.insert(0, OBS_ID, row_indices)
    return expanded
