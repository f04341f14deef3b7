import numpy as np
import pandas as pd
import pytest

from shapimp.data import cartesian
from shapimp.errors import ConfigurationError
from shapimp.measures import (Measure, MEASURES, check_measures, get_measure,
                              measure_performance)


def test_builtin_measures():
    truth = np.array([1.0, 2.0, 3.0])
    pred = np.array([1.0, 2.0, 5.0])

    assert get_measure('mse')(truth, pred) == pytest.approx(4.0 / 3.0)
    assert get_measure('mae')(truth, pred) == pytest.approx(2.0 / 3.0)
    assert get_measure('rmse')(truth, pred) == pytest.approx(np.sqrt(4.0 / 3.0))
    assert get_measure('pred')(truth, pred) == pytest.approx(8.0 / 3.0)
    assert get_measure('mmce')(np.array([0, 1, 1]), np.array([0, 1, 0])) == pytest.approx(1.0 / 3.0)
    assert get_measure('acc').minimize is False
    assert get_measure('mse').minimize is True


def test_custom_measure_passes_through():
    measure = Measure('max_err', lambda t, p: np.max(np.abs(t - p)))
    assert get_measure(measure) is measure
    assert 'max_err' not in MEASURES


def test_check_measures():
    assert [m.id for m in check_measures('mse')] == ['mse']
    assert [m.id for m in check_measures(['mse', 'mae'])] == ['mse', 'mae']

    with pytest.raises(ConfigurationError):
        check_measures([])
    with pytest.raises(ConfigurationError):
        check_measures(None)
    with pytest.raises(ConfigurationError):
        check_measures(['mse', 'mse'])
    with pytest.raises(ConfigurationError):
        check_measures(['not_a_measure'])


def test_global_performance(small_data, column_model):
    result = measure_performance(column_model, small_data, 'y', check_measures(['mse', 'mae']))

    assert list(result.columns) == ['mse', 'mae']
    assert len(result) == 1
    assert result['mse'].iloc[0] == 0.0


def test_model_sees_feature_columns_only(small_data):
    seen = []

    class RecordingModel:
        def predict(self, data):
            seen.append(list(data.columns))
            return np.zeros(len(data))

    expanded = cartesian(small_data, ['a'], 'y', keep_na=False)
    measure_performance(RecordingModel(), expanded, 'y', check_measures('mse'))
    assert seen == [['a', 'b']]


def test_local_performance(small_data, column_model):
    expanded = cartesian(small_data, ['a'], 'y', keep_na=False)
    result = measure_performance(column_model, expanded, 'y', check_measures('mse'), local=True)

    assert result.index.name == 'obs.id'
    assert result.index.tolist() == [0, 1, 2, 3]
    assert result['mse'].tolist() == pytest.approx([3.5, 1.5, 1.5, 3.5])


def test_local_performance_unexpanded(small_data, constant_model):
    result = measure_performance(constant_model, small_data, 'y', check_measures('mse'), local=True)
    expected = (small_data['y'] - 5.0) ** 2

    assert result['mse'].tolist() == pytest.approx(expected.tolist())


def test_predict_fun(small_data, column_model):
    calls = []

    def predict_fun(model, data):
        calls.append(len(data))
        return np.zeros(len(data))

    result = measure_performance(column_model, small_data, 'y', check_measures('mse'),
                                 predict_fun=predict_fun)
    assert calls == [4]
    assert result['mse'].iloc[0] == pytest.approx((small_data['y'] ** 2).mean())


if __name__ == "__main__":
    pytest.main([__file__])
