import pytest
import numpy as np
import pandas as pd
from resample_eval.errors import FitError, InvalidInputError, MetricError
from resample_eval.evaluation.metrics import rmse
from resample_eval.models import ModelSpec, fit_model


@pytest.fixture
def fitted():
    x = np.linspace(0, 10, 30)
    df = pd.DataFrame({"x": x, "y": 2 + 3 * x})
    return fit_model(df, ModelSpec(name="linear", response="y", predictors=("x",)))


def test_perfect_fit_has_zero_rmse(fitted):
    test = pd.DataFrame({"x": [1.0, 4.0], "y": [5.0, 14.0]})
    assert rmse(fitted, test) == pytest.approx(0.0, abs=1e-9)


def test_rmse_value(fitted):
    # residuals +1 and -3
    test = pd.DataFrame({"x": [0.0, 1.0], "y": [3.0, 2.0]})
    assert rmse(fitted, test) == pytest.approx(np.sqrt((1 + 9) / 2))


def test_rmse_is_non_negative(fitted):
    rng = np.random.default_rng(0)
    test = pd.DataFrame({"x": rng.normal(size=20), "y": rng.normal(size=20)})
    assert rmse(fitted, test) >= 0


def test_empty_table_raises(fitted):
    with pytest.raises(MetricError, match="empty") as excinfo:
        rmse(fitted, pd.DataFrame({"x": [], "y": []}))
    assert excinfo.value.model_id == "linear"


def test_metric_error_is_invalid_input(fitted):
    with pytest.raises(InvalidInputError):
        rmse(fitted, pd.DataFrame({"x": [], "y": []}))


def test_non_finite_response_raises(fitted):
    test = pd.DataFrame({"x": [1.0, 2.0], "y": [np.nan, 8.0]})
    with pytest.raises(MetricError, match="Non-finite"):
        rmse(fitted, test)


def test_unfitted_model_raises():
    from resample_eval.models import LinearModel
    model = LinearModel(ModelSpec(name="linear", response="y", predictors=("x",)))
    with pytest.raises(FitError):
        rmse(model, pd.DataFrame({"x": [1.0], "y": [1.0]}))
