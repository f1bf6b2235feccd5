import pickle

import pytest
from resample_eval.errors import (
    FitError, InvalidInputError, MetricError, ResamplingError,
)


def test_message_without_context():
    assert str(FitError("singular design")) == "singular design"


def test_message_names_repetition_and_model():
    err = FitError("singular design", repetition=3, model_id="smooth")
    assert str(err) == "singular design (repetition=3, model=smooth)"


def test_with_context_keeps_class_and_fills_missing_fields():
    err = FitError("boom", model_id="linear").with_context(repetition=7)
    assert isinstance(err, FitError)
    assert err.repetition == 7
    assert err.model_id == "linear"


def test_errors_survive_pickling():
    err = MetricError("empty", repetition=2, model_id="linear")
    restored = pickle.loads(pickle.dumps(err))
    assert type(restored) is MetricError
    assert restored.repetition == 2
    assert str(restored) == str(err)


def test_taxonomy():
    assert issubclass(InvalidInputError, ValueError)
    assert issubclass(FitError, RuntimeError)
    assert issubclass(MetricError, InvalidInputError)
    for cls in (InvalidInputError, FitError, MetricError):
        assert issubclass(cls, ResamplingError)


def test_metric_error_caught_as_invalid_input():
    with pytest.raises(InvalidInputError):
        raise MetricError("undefined")
