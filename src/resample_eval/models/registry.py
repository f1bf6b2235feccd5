import numpy as np
import pandas as pd

from resample_eval.data.table import validate_table
from resample_eval.errors import FitError, ResamplingError
from .base import BaseModel, ModelFamily, ModelSpec
from .linear import LinearModel, PiecewiseLinearModel
from .smooth import SmoothModel

MODEL_FAMILIES: dict[ModelFamily, type[BaseModel]] = {
    ModelFamily.LINEAR: LinearModel,
    ModelFamily.PIECEWISE: PiecewiseLinearModel,
    ModelFamily.SMOOTH: SmoothModel,
}


def build_model(spec: ModelSpec) -> BaseModel:
    """Instantiate the unfitted model for a spec's family."""
    return MODEL_FAMILIES[spec.family](spec)


def fit_model(table: pd.DataFrame, spec: ModelSpec) -> BaseModel:
    """Fit ``spec`` on ``table``.

    Numerical failures from the underlying estimators (singular design,
    non-finite values, too few rows) are raised as FitError tagged with the
    model name. Nothing is retried.
    """
    validate_table(table, spec.columns)
    model = build_model(spec)
    try:
        return model.fit(table)
    except ResamplingError as e:
        raise e.with_context(model_id=spec.name) from e
    except (ValueError, np.linalg.LinAlgError) as e:
        raise FitError(str(e), model_id=spec.name) from e
