import numpy as np
import pandas as pd
from sklearn.metrics import mean_squared_error

from resample_eval.errors import MetricError
from resample_eval.models.base import BaseModel


def rmse(model: BaseModel, test_table: pd.DataFrame) -> float:
    """Root-mean-squared prediction error of a fitted model on a table.

    Args:
        model: Fitted model; its spec names the response column
        test_table: Held-out rows with the response and predictors

    Raises:
        MetricError: If the table is empty or predictions are not finite
    """
    if len(test_table) == 0:
        raise MetricError("RMSE is undefined on an empty table", model_id=model.name)

    y_true = test_table[model.spec.response].to_numpy(dtype=float)
    try:
        y_pred = np.asarray(model.predict(test_table), dtype=float)
    except ValueError as e:
        raise MetricError(f"Prediction failed: {e}", model_id=model.name) from e

    if not (np.isfinite(y_pred).all() and np.isfinite(y_true).all()):
        raise MetricError("Non-finite values in predictions or response", model_id=model.name)

    return float(np.sqrt(mean_squared_error(y_true, y_pred)))
