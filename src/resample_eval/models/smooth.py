import numpy as np
import pandas as pd
from sklearn.linear_model import Ridge
from sklearn.preprocessing import SplineTransformer

from resample_eval.errors import InvalidInputError
from .base import BaseModel, ModelSpec, INTERCEPT


class SmoothModel(BaseModel):
    """Penalized cubic regression spline in the first predictor.

    The spline basis uses uniformly spaced knots over the training range and
    extrapolates linearly outside it, so held-out rows beyond the training
    range still get finite predictions.
    """

    def __init__(self, spec: ModelSpec):
        super().__init__(spec)
        self.basis = SplineTransformer(
            n_knots=spec.n_knots,
            degree=3,
            extrapolation="linear",
            include_bias=False,
        )
        self.model = Ridge(alpha=spec.penalty)

    def _features(self, table: pd.DataFrame, fit: bool = False) -> pd.DataFrame:
        primary = self.spec.primary
        x = table[[primary]].to_numpy(dtype=float)
        spline = self.basis.fit_transform(x) if fit else self.basis.transform(x)
        spline = pd.DataFrame(
            spline,
            index=table.index,
            columns=[f"s({primary}).{j + 1}" for j in range(spline.shape[1])],
        )
        rest = self._linear_features(table, self.spec.predictors[1:], fit)
        return pd.concat([spline, rest], axis=1)

    def fit(self, table: pd.DataFrame) -> "SmoothModel":
        """Fit the spline basis and the ridge regression on it."""
        if not pd.api.types.is_numeric_dtype(table[self.spec.primary]):
            raise InvalidInputError(
                f"Smooth model '{self.name}' needs a numeric first predictor, "
                f"'{self.spec.primary}' is {table[self.spec.primary].dtype}"
            )
        X = self._features(table, fit=True)
        y = self._response(table)
        self.model.fit(X.to_numpy(dtype=float), y)
        self.feature_columns = list(X.columns)
        self.is_fitted = True
        return self

    def coefficients(self) -> dict[str, float]:
        coefs = {INTERCEPT: float(self.model.intercept_)}
        coefs.update(
            (name, float(value))
            for name, value in zip(self.feature_columns, np.ravel(self.model.coef_))
        )
        return coefs
