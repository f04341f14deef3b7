"""
Run configuration and result persistence.
"""

import os
import json
import pickle
import numpy as np
import pandas as pd
import yaml

from ..errors import ConfigurationError

# Defaults of a Shapley importance run (see configs/default.yaml)
DEFAULT_CONFIG = {
    'value_function': 'pfi',
    'measures': ['mse'],
    'n_shapley_perm': 120,
    'bound_size': None,
    'local': False,
    'n_jobs': 1,
    'backend': 'thread',
    'seed': 0,
    'strict': False,
    'verbose': True,
}

RESULT_FORMATS = {'.json': 'json', '.pkl': 'pickle', '.pickle': 'pickle'}


def load_config(config_path: str = None, overrides: dict = None) -> dict:
    """
    Load a run configuration.

    Args:
        config_path: Optional YAML file whose keys override DEFAULT_CONFIG
        overrides: Optional dict applied last (e.g. from the command line)

    Returns:
        Configuration dict
    """
    config = dict(DEFAULT_CONFIG)
    if config_path is not None:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {config_path}")
        config.update(loaded)
    if overrides:
        config.update({k: v for k, v in overrides.items() if v is not None})

    unknown = sorted(set(config) - set(DEFAULT_CONFIG))
    if unknown:
        raise ConfigurationError(f"Unknown config keys: {unknown}")
    return config


def _result_format(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    try:
        return RESULT_FORMATS[ext]
    except KeyError:
        raise ConfigurationError(
            f"Cannot infer result format of {path}, use one of {sorted(RESULT_FORMATS)}") from None


def _to_json(obj):
    """`json.dump` hook for frames and numpy values; missing values become null."""
    if isinstance(obj, pd.DataFrame):
        return obj.astype(object).where(obj.notna(), None).to_dict(orient='records')
    if isinstance(obj, pd.Series):
        return obj.astype(object).where(obj.notna(), None).to_dict()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    return str(obj)


def save_results(results: dict, output_path: str):
    """
    Save a dict of Shapley results.

    Frames are written as lists of records in JSON; pickle keeps them as
    DataFrames. The format follows the extension (.json, .pkl, .pickle).
    """
    fmt = _result_format(output_path)
    os.makedirs(os.path.dirname(output_path) or '.', exist_ok=True)

    if fmt == 'json':
        with open(output_path, 'w') as f:
            json.dump(results, f, indent=2, default=_to_json)
    else:
        with open(output_path, 'wb') as f:
            pickle.dump(results, f)

    print(f"Results saved to: {output_path}")


def load_results(input_path: str) -> dict:
    if _result_format(input_path) == 'json':
        with open(input_path, 'r') as f:
            return json.load(f)
    with open(input_path, 'rb') as f:
        return pickle.load(f)


def print_config(config: dict, title: str = "Configuration"):
    """Print a configuration as aligned `key: value` lines."""
    width = max((len(str(k)) for k in config), default=0)
    print(f"\n{title}")
    print('-' * max(len(title), width + 12))
    for key, value in config.items():
        print(f"  {str(key).ljust(width)} : {value}")
    print()
