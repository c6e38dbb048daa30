from types import SimpleNamespace

import numpy as np
import pytest

from imbalance_eval.classifiers import (
    ClassifierFactory,
    SKLearnClassifierAdapter,
    XGBoostClassifierAdapter
)
from imbalance_eval.core.error_handling.error_handler import ConfigurationError, FitDivergenceError, FitFailureError


@pytest.fixture
def training_data(dataset_factory):
    dataset = dataset_factory(60, 40, n_features=3, seed=3)
    return dataset.X, dataset.y


def _sklearn(mock_app_logger, mock_error_handler, model_type):
    return SKLearnClassifierAdapter(mock_app_logger, mock_error_handler, model_type=model_type)


@pytest.mark.parametrize("model_type", ['randomforest', 'gradientboosting', 'svm', 'decisiontree',
                                        'logisticregression'])
def test_sklearn_adapter_predicts_two_column_probabilities(mock_app_logger, mock_error_handler,
                                                           training_data, model_type):
    X, y = training_data
    adapter = _sklearn(mock_app_logger, mock_error_handler, model_type)
    model = adapter.fit(X, y, random_state=0)

    probabilities = adapter.predict_probabilities(model, X)
    labels = adapter.predict_labels(model, X)

    assert probabilities.shape == (len(y), 2)
    np.testing.assert_allclose(probabilities.sum(axis=1), 1.0)
    assert set(np.unique(labels)) <= {0, 1}
    assert model.model_name == model_type
    assert model.n_train_samples == len(y)


def test_random_state_reaches_estimator(mock_app_logger, mock_error_handler, training_data):
    X, y = training_data
    adapter = _sklearn(mock_app_logger, mock_error_handler, 'randomforest')
    model = adapter.fit(X, y, hyperparameters={'n_estimators': 10}, random_state=42)

    assert model.estimator.random_state == 42
    assert model.estimator.n_estimators == 10
    assert model.hyperparameters == {'n_estimators': 10}


def test_fits_with_same_seed_are_identical(mock_app_logger, mock_error_handler, training_data):
    X, y = training_data
    adapter = _sklearn(mock_app_logger, mock_error_handler, 'randomforest')
    first = adapter.predict_probabilities(adapter.fit(X, y, hyperparameters={'n_estimators': 20}, random_state=3), X)
    second = adapter.predict_probabilities(adapter.fit(X, y, hyperparameters={'n_estimators': 20}, random_state=3), X)
    np.testing.assert_array_equal(first, second)


def test_sample_weights_change_the_fit(mock_app_logger, mock_error_handler, training_data):
    X, y = training_data
    adapter = _sklearn(mock_app_logger, mock_error_handler, 'logisticregression')
    weights = np.where(y == 1, 10.0, 0.1)

    plain = adapter.predict_probabilities(adapter.fit(X, y), X)
    weighted = adapter.predict_probabilities(adapter.fit(X, y, sample_weight=weights), X)

    assert weighted[:, 1].mean() > plain[:, 1].mean()


def test_non_convergence_raises_fit_divergence(mock_app_logger, mock_error_handler, training_data):
    X, y = training_data
    adapter = _sklearn(mock_app_logger, mock_error_handler, 'logisticregression')
    with pytest.raises(FitDivergenceError):
        adapter.fit(X * 1000, y, hyperparameters={'max_iter': 1})


def test_unknown_sklearn_model_type(mock_app_logger, mock_error_handler):
    with pytest.raises(ConfigurationError):
        _sklearn(mock_app_logger, mock_error_handler, 'naivebayes')


@pytest.mark.parametrize("hyperparameters", [
    {'max_depth': 0},
    {'criterion': 'variance'},
    {'depth': 3},
])
def test_rejected_sklearn_hyperparameters_raise_fit_failure(mock_app_logger, mock_error_handler,
                                                           training_data, hyperparameters):
    X, y = training_data
    adapter = _sklearn(mock_app_logger, mock_error_handler, 'decisiontree')
    with pytest.raises(FitFailureError):
        adapter.fit(X, y, hyperparameters=hyperparameters)


def test_rejected_xgboost_hyperparameters_raise_fit_failure(mock_app_logger, mock_error_handler, training_data):
    X, y = training_data
    config = SimpleNamespace(XGBoost=SimpleNamespace(num_boost_round=5))
    adapter = XGBoostClassifierAdapter(config, mock_app_logger, mock_error_handler)
    with pytest.raises(FitFailureError):
        adapter.fit(X, y, hyperparameters={'max_depth': -1})


def test_feature_importances(mock_app_logger, mock_error_handler, training_data):
    X, y = training_data
    forest = _sklearn(mock_app_logger, mock_error_handler, 'randomforest')
    svm = _sklearn(mock_app_logger, mock_error_handler, 'svm')

    assert forest.feature_importances(forest.fit(X, y, random_state=0)).shape == (3,)
    assert svm.feature_importances(svm.fit(X, y, random_state=0)) is None


def test_xgboost_adapter(mock_app_logger, mock_error_handler, training_data):
    X, y = training_data
    config = SimpleNamespace(XGBoost=SimpleNamespace(num_boost_round=20))
    adapter = XGBoostClassifierAdapter(config, mock_app_logger, mock_error_handler)

    model = adapter.fit(X, y, hyperparameters={'max_depth': 2}, random_state=1)
    again = adapter.fit(X, y, hyperparameters={'max_depth': 2}, random_state=1)
    probabilities = adapter.predict_probabilities(model, X)

    assert probabilities.shape == (len(y), 2)
    np.testing.assert_allclose(probabilities.sum(axis=1), 1.0)
    np.testing.assert_array_equal(probabilities, adapter.predict_probabilities(again, X))
    np.testing.assert_array_equal(adapter.predict_labels(model, X), (probabilities[:, 1] >= 0.5).astype(int))
    assert adapter.feature_importances(model).shape == (3,)


def test_xgboost_accepts_weights(mock_app_logger, mock_error_handler, training_data):
    X, y = training_data
    adapter = XGBoostClassifierAdapter(SimpleNamespace(), mock_app_logger, mock_error_handler)
    weights = np.where(y == 1, 0.5 / 40, 0.5 / 60)
    model = adapter.fit(X, y, sample_weight=weights, hyperparameters={'num_boost_round': 5})
    assert model.hyperparameters == {'num_boost_round': 5}
    assert adapter.predict_probabilities(model, X).shape == (len(y), 2)


def test_factory_creates_enabled_adapters(mock_app_logger, mock_error_handler):
    config = SimpleNamespace(models=SimpleNamespace(
        sklearn_randomforest=True,
        sklearn_svm=False,
        xgboost=True
    ))
    classifiers = ClassifierFactory.create_classifiers(config, mock_app_logger, mock_error_handler)

    assert set(classifiers) == {'randomforest', 'xgboost'}
    assert isinstance(classifiers['randomforest'], SKLearnClassifierAdapter)
    assert isinstance(classifiers['xgboost'], XGBoostClassifierAdapter)


def test_factory_rejects_unknown_models(mock_app_logger, mock_error_handler):
    config = SimpleNamespace(models=SimpleNamespace(lightgbm=True))
    with pytest.raises(ConfigurationError):
        ClassifierFactory.create_classifiers(config, mock_app_logger, mock_error_handler)
