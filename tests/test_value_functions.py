import numpy as np
import pandas as pd
import pytest

from shapimp.errors import ConfigurationError, EvaluationError
from shapimp.measures import check_measures
from shapimp.valuation.value_functions import (GeneralizationErrorValue,
                                               PermutationImportanceValue, ValueFunction,
                                               evaluate_coalitions, get_value_function)

MSE = check_measures('mse')


def _value(value_function, coalition, model, data, local=False):
    return value_function.evaluate(coalition, model=model, data=data, target='y',
                                   measures=MSE, local=local)


@pytest.mark.parametrize('coalition, expected', [
    ((), 0.0),
    (('a',), 2.5),
    (('b',), 0.0),
    (('a', 'b'), 2.5),
])
def test_pfi_value(small_data, column_model, coalition, expected):
    """Replacing `a` costs the mean squared pairwise difference of a."""
    result = _value(PermutationImportanceValue(), coalition, column_model, small_data)
    assert result['mse'].iloc[0] == pytest.approx(expected)


@pytest.mark.parametrize('coalition, expected', [
    ((), 0.0),
    (('a',), -2.5),
    (('b',), 0.0),
    (('a', 'b'), -2.5),
])
def test_ge_value(small_data, column_model, coalition, expected):
    """Keeping `a` fixed recovers the error of the fully replaced data."""
    result = _value(GeneralizationErrorValue(), coalition, column_model, small_data)
    assert result['mse'].iloc[0] == pytest.approx(expected)


def test_local_pfi_value(small_data, column_model):
    result = _value(PermutationImportanceValue(), ('a',), column_model, small_data, local=True)

    assert result.index.name == 'obs.id'
    assert result['mse'].tolist() == pytest.approx([3.5, 1.5, 1.5, 3.5])


def test_local_ge_value(small_data, column_model):
    result = _value(GeneralizationErrorValue(), ('a',), column_model, small_data, local=True)
    assert result['mse'].tolist() == pytest.approx([-3.5, -1.5, -1.5, -3.5])


@pytest.mark.parametrize('value_function, expected', [
    (PermutationImportanceValue(), [3.5, 1.5, 1.5, 3.5]),
    (GeneralizationErrorValue(), [-3.5, -1.5, -1.5, -3.5]),
])
def test_local_value_ignores_data_index(small_data, column_model, value_function, expected):
    """Local values are keyed by row position whatever the index of the data."""
    data = small_data.set_axis([10, 20, 30, 40])
    table = evaluate_coalitions(value_function, [('a',)], column_model, data, 'y', MSE, local=True)

    result = table[('a',)]
    assert list(result.index) == [0, 1, 2, 3]
    assert result['mse'].notna().all()
    assert result['mse'].tolist() == pytest.approx(expected)


@pytest.mark.parametrize('value_function', [GeneralizationErrorValue(), PermutationImportanceValue()])
def test_evaluation_is_idempotent(small_data, column_model, value_function):
    first = _value(value_function, ('a',), column_model, small_data)
    second = _value(value_function, ('a',), column_model, small_data)
    pd.testing.assert_frame_equal(first, second)


def test_constant_model_has_zero_value(small_data, constant_model):
    for coalition in [(), ('a',), ('b',), ('a', 'b')]:
        result = _value(PermutationImportanceValue(), coalition, constant_model, small_data)
        assert result['mse'].iloc[0] == pytest.approx(0.0, abs=1e-12)


def test_constant_model_on_float_targets(constant_model):
    """Zero up to rounding: the two errors average over n^2 and n rows."""
    rng = np.random.default_rng(1)
    data = pd.DataFrame(rng.random((7, 3)), columns=['a', 'b', 'y'])
    for coalition in [('a',), ('a', 'b')]:
        result = _value(PermutationImportanceValue(), coalition, constant_model, data)
        assert result['mse'].iloc[0] == pytest.approx(0.0, abs=1e-12)


def test_get_value_function():
    assert isinstance(get_value_function(None), PermutationImportanceValue)
    assert isinstance(get_value_function('ge'), GeneralizationErrorValue)
    assert isinstance(get_value_function('pfi'), PermutationImportanceValue)
    custom = GeneralizationErrorValue()
    assert get_value_function(custom) is custom
    with pytest.raises(ConfigurationError):
        get_value_function('shap')


def test_custom_value_function(small_data, column_model):
    class CoalitionSize(ValueFunction):
        def evaluate(self, coalition, model, data, target, measures, local=False, predict_fun=None):
            return pd.DataFrame([{m.id: float(len(coalition)) for m in measures}])

    table = evaluate_coalitions(CoalitionSize(), [(), ('a',), ('a', 'b')],
                                column_model, small_data, 'y', MSE)
    assert {k: v['mse'].iloc[0] for k, v in table.items()} == {(): 0.0, ('a',): 1.0, ('a', 'b'): 2.0}


@pytest.mark.parametrize('n_jobs', [1, 2])
def test_evaluate_coalitions(small_data, column_model, n_jobs):
    coalitions = [(), ('a',), ('b',), ('a', 'b')]
    table = evaluate_coalitions(PermutationImportanceValue(), coalitions, column_model,
                                small_data, 'y', MSE, n_jobs=n_jobs)

    assert list(table) == coalitions
    assert [table[c]['mse'].iloc[0] for c in coalitions] == pytest.approx([0.0, 2.5, 0.0, 2.5])


def test_evaluation_failure_is_wrapped(small_data, failing_model):
    with pytest.raises(EvaluationError) as excinfo:
        evaluate_coalitions(PermutationImportanceValue(), [('a',)], failing_model,
                            small_data, 'y', MSE)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


if __name__ == "__main__":
    pytest.main([__file__])
