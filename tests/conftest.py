import numpy as np
import pandas as pd
import pytest


class ColumnModel:
    """Predicts the value of a single column."""

    def __init__(self, column='a'):
        self.column = column

    def predict(self, data):
        return data[self.column].to_numpy(dtype=float)


class ConstantModel:
    """Predicts the same value for every row."""

    def __init__(self, value=5.0):
        self.value = value

    def predict(self, data):
        return np.full(len(data), self.value)


class FailingModel:
    def predict(self, data):
        raise RuntimeError("inference failed")


@pytest.fixture
def small_data():
    """Four rows, features a and b, target y equal to a."""
    return pd.DataFrame({
        'a': [1.0, 2.0, 3.0, 4.0],
        'b': [10.0, 20.0, 30.0, 40.0],
        'y': [1.0, 2.0, 3.0, 4.0],
    })


@pytest.fixture
def column_model():
    return ColumnModel('a')


@pytest.fixture
def constant_model():
    return ConstantModel()


@pytest.fixture
def failing_model():
    return FailingModel()
