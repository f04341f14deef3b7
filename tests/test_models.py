import numpy as np
import pandas as pd
import pytest
from sklearn.ensemble import RandomForestRegressor
from sklearn.linear_model import LinearRegression

from shapimp.models import MLPRegressor, create_model, fix_seed
from shapimp.valuation import shapley_importance


def _linear_data(n=64, seed=0):
    rng = np.random.default_rng(seed)
    data = pd.DataFrame(rng.normal(size=(n, 3)), columns=['a', 'b', 'c'])
    data['y'] = 2.0 * data['a'] - data['b']
    return data


def test_create_model():
    assert isinstance(create_model('mlp', num_features=3), MLPRegressor)
    assert isinstance(create_model('linear', num_features=3), LinearRegression)
    assert isinstance(create_model('Forest', num_features=3, config={'n_estimators': 5}),
                      RandomForestRegressor)
    with pytest.raises(ValueError):
        create_model('svm', num_features=3)


def test_mlp_learns():
    data = _linear_data()
    features = ['a', 'b', 'c']
    model = MLPRegressor(num_features=3, hidden_dim=16, seed=0)

    before = np.mean((model.predict(data[features]) - data['y']) ** 2)
    model.fit(data[features], data['y'], num_epochs=300, lr=0.01)
    after = np.mean((model.predict(data[features]) - data['y']) ** 2)

    assert after < before
    assert model.predict(data[features]).shape == (len(data),)


def test_mlp_selects_training_columns():
    data = _linear_data()
    model = MLPRegressor(num_features=3, hidden_dim=8, seed=0)
    model.fit(data[['a', 'b', 'c']], data['y'], num_epochs=10)

    reordered = data[['c', 'y', 'b', 'a']]
    np.testing.assert_allclose(model.predict(reordered), model.predict(data[['a', 'b', 'c']]))


def test_shapley_importance_of_linear_model():
    """The unused feature c gets zero importance, the rest sums to the total."""
    data = _linear_data(n=12)
    model = create_model('linear', num_features=3)
    model.fit(data[['a', 'b', 'c']], data['y'])

    result = shapley_importance(model, data, ['a', 'b', 'c'], 'y', 'mse', n_shapley_perm=None)
    values = result.shapley_value.set_index('feature')['mse']

    assert values['c'] == pytest.approx(0.0, abs=1e-8)
    assert values['a'] > 0

    # all permutations were used, so the values add up to v(all) - v(empty)
    table = result.value_function.set_index('features')['mse']
    assert values.sum() == pytest.approx(table['a,b,c'] - table[''])


def test_fix_seed():
    fix_seed(3)
    first = np.random.rand(3)
    fix_seed(3)
    assert np.array_equal(first, np.random.rand(3))


if __name__ == "__main__":
    pytest.main([__file__])
