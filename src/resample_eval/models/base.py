from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
import numpy as np
import pandas as pd

from resample_eval.errors import FitError, InvalidInputError

INTERCEPT = "(Intercept)"


class ModelFamily(str, Enum):
    """Shape of the response curve in the first predictor."""
    LINEAR = "linear"
    PIECEWISE = "piecewise"
    SMOOTH = "smooth"


@dataclass(frozen=True)
class ModelSpec:
    """Descriptor for one candidate model: ``response ~ predictors`` plus a family.

    The first predictor gets the piecewise/smooth expansion; any further
    predictors enter linearly. Categorical predictors are dummy coded.
    """
    name: str
    response: str
    predictors: tuple[str, ...]
    family: ModelFamily = ModelFamily.LINEAR
    knots: tuple[float, ...] = field(default_factory=tuple)  # piecewise change points
    n_knots: int = 8  # smooth: spline knots
    penalty: float = 0.1  # smooth: ridge penalty on the spline basis

    def __post_init__(self):
        object.__setattr__(self, "predictors", tuple(self.predictors))
        object.__setattr__(self, "knots", tuple(sorted(float(k) for k in self.knots)))
        try:
            object.__setattr__(self, "family", ModelFamily(self.family))
        except ValueError:
            allowed = [f.value for f in ModelFamily]
            raise InvalidInputError(
                f"Unknown model family {self.family!r}. Allowed: {allowed}"
            ) from None

        if not self.name:
            raise InvalidInputError("Model spec needs a name")
        if not self.predictors:
            raise InvalidInputError(f"Model '{self.name}' needs at least one predictor")
        if self.response in self.predictors:
            raise InvalidInputError(
                f"Model '{self.name}': response '{self.response}' is also a predictor"
            )
        if len(set(self.predictors)) != len(self.predictors):
            raise InvalidInputError(f"Model '{self.name}' repeats a predictor")
        if not all(np.isfinite(self.knots)):
            raise InvalidInputError(f"Model '{self.name}': knots must be finite")
        if self.n_knots < 2:
            raise InvalidInputError(f"Model '{self.name}': n_knots must be >= 2")
        if self.penalty < 0:
            raise InvalidInputError(f"Model '{self.name}': penalty must be >= 0")

    @property
    def columns(self) -> list[str]:
        return [self.response, *self.predictors]

    @property
    def primary(self) -> str:
        """Predictor that receives the nonlinear expansion."""
        return self.predictors[0]


class BaseModel(ABC):
    """Abstract base class for fitted regression models."""

    def __init__(self, spec: ModelSpec):
        self.spec = spec
        self.name = spec.name
        self.model = None
        self.feature_columns: list[str] = []
        self._linear_columns: list[str] = []
        self.is_fitted = False

    @abstractmethod
    def fit(self, table: pd.DataFrame) -> "BaseModel":
        """Fit the model on a table holding the spec's columns."""
        pass

    @abstractmethod
    def _features(self, table: pd.DataFrame, fit: bool = False) -> pd.DataFrame:
        """Model matrix (without intercept) for a table."""
        pass

    @abstractmethod
    def coefficients(self) -> dict[str, float]:
        """Term name -> estimate, intercept first."""
        pass

    def predict(self, table: pd.DataFrame) -> np.ndarray:
        """Predict the response for each row of ``table``."""
        if not self.is_fitted:
            raise FitError(f"Model '{self.name}' is not fitted", model_id=self.name)
        return self.model.predict(self._features(table).to_numpy(dtype=float))

    def _response(self, table: pd.DataFrame) -> np.ndarray:
        y = table[self.spec.response].to_numpy(dtype=float)
        if not np.isfinite(y).all():
            raise FitError(f"Response '{self.spec.response}' has non-finite values")
        return y

    def _linear_features(
        self,
        table: pd.DataFrame,
        predictors: tuple[str, ...],
        fit: bool,
    ) -> pd.DataFrame:
        """Numeric predictors as-is, categorical ones dummy coded.

        On fit the first level of each categorical column is the baseline; on
        predict the columns are aligned to the fitted ones so unseen or
        missing levels map to zeros.
        """
        if not predictors:
            return pd.DataFrame(index=table.index)

        X = table[list(predictors)]
        categorical = [
            c for c in predictors
            if not pd.api.types.is_numeric_dtype(X[c]) or pd.api.types.is_bool_dtype(X[c])
        ]
        X = pd.get_dummies(X, columns=categorical, drop_first=fit, dtype=float)
        if fit:
            self._linear_columns = list(X.columns)
            return X.astype(float)
        return X.reindex(columns=self._linear_columns, fill_value=0.0).astype(float)

    @staticmethod
    def _check_design(design: np.ndarray) -> None:
        """Raise FitError unless the design (with intercept) has full column rank."""
        n, p = design.shape
        if not np.isfinite(design).all():
            raise FitError("Design matrix has non-finite values")
        if n < p:
            raise FitError(f"{n} rows cannot identify {p} parameters")
        rank = np.linalg.matrix_rank(design)
        if rank < p:
            raise FitError(f"Singular design matrix (rank {rank} < {p} parameters)")
