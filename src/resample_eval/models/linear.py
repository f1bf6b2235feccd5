import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression

from resample_eval.errors import FitError, InvalidInputError
from .base import BaseModel, ModelSpec, INTERCEPT


class LinearModel(BaseModel):
    """Ordinary least squares on the predictors."""

    def __init__(self, spec: ModelSpec):
        super().__init__(spec)
        self.model = LinearRegression()
        self._design: np.ndarray | None = None
        self._y: np.ndarray | None = None

    def _features(self, table: pd.DataFrame, fit: bool = False) -> pd.DataFrame:
        return self._linear_features(table, self.spec.predictors, fit)

    def fit(self, table: pd.DataFrame) -> "LinearModel":
        """Fit OLS; raises FitError on a rank-deficient design."""
        X = self._features(table, fit=True)
        y = self._response(table)

        design = np.column_stack([np.ones(len(X)), X.to_numpy(dtype=float)])
        self._check_design(design)

        self.model.fit(X.to_numpy(dtype=float), y)
        self.feature_columns = list(X.columns)
        self._design = design
        self._y = y
        self.is_fitted = True
        return self

    def coefficients(self) -> dict[str, float]:
        coefs = {INTERCEPT: float(self.model.intercept_)}
        coefs.update(
            (name, float(value))
            for name, value in zip(self.feature_columns, self.model.coef_)
        )
        return coefs

    def standard_errors(self) -> dict[str, float]:
        """Classical OLS standard errors, sqrt(diag(sigma^2 (X'X)^-1)).

        These assume constant noise variance; bootstrap standard errors do not.
        """
        if not self.is_fitted:
            raise FitError(f"Model '{self.name}' is not fitted", model_id=self.name)
        n, p = self._design.shape
        dof = n - p
        if dof <= 0:
            raise FitError(f"No residual degrees of freedom ({n} rows, {p} parameters)")

        resid = self._y - self._design @ np.r_[self.model.intercept_, self.model.coef_]
        sigma2 = float(resid @ resid) / dof
        cov = sigma2 * np.linalg.inv(self._design.T @ self._design)
        se = np.sqrt(np.diag(cov))
        return dict(zip([INTERCEPT, *self.feature_columns], (float(s) for s in se)))


class PiecewiseLinearModel(LinearModel):
    """Linear model plus hinge terms max(x - k, 0) on the first predictor.

    Knots default to the median of the first predictor in the training table.
    """

    def __init__(self, spec: ModelSpec):
        super().__init__(spec)
        self.knots: tuple[float, ...] = spec.knots

    def _features(self, table: pd.DataFrame, fit: bool = False) -> pd.DataFrame:
        X = self._linear_features(table, self.spec.predictors, fit)
        x = table[self.spec.primary].to_numpy(dtype=float)
        for k in self.knots:
            X[f"{self.spec.primary}_cp{k:g}"] = np.maximum(x - k, 0.0)
        return X

    def fit(self, table: pd.DataFrame) -> "PiecewiseLinearModel":
        primary = table[self.spec.primary]
        if not pd.api.types.is_numeric_dtype(primary):
            raise InvalidInputError(
                f"Piecewise model '{self.name}' needs a numeric first predictor, "
                f"'{self.spec.primary}' is {primary.dtype}"
            )
        if not self.spec.knots:
            self.knots = (float(np.median(primary.to_numpy(dtype=float))),)
        return super().fit(table)
