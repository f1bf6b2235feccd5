from .base import BaseModel, ModelFamily, ModelSpec, INTERCEPT
from .linear import LinearModel, PiecewiseLinearModel
from .smooth import SmoothModel
from .registry import MODEL_FAMILIES, build_model, fit_model

__all__ = [
    "BaseModel", "ModelFamily", "ModelSpec", "INTERCEPT",
    "LinearModel", "PiecewiseLinearModel", "SmoothModel",
    "MODEL_FAMILIES", "build_model", "fit_model",
]
