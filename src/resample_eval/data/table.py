import pandas as pd
from dataclasses import dataclass, field

from resample_eval.errors import InvalidInputError


@dataclass(frozen=True)
class TableSchema:
    """Columns a table must carry for a response ~ predictors analysis."""
    response: str
    predictors: tuple[str, ...]
    categorical: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "predictors", tuple(self.predictors))
        object.__setattr__(self, "categorical", tuple(self.categorical))
        if not self.predictors:
            raise InvalidInputError("Schema needs at least one predictor")
        stray = set(self.categorical) - set(self.predictors)
        if stray:
            raise InvalidInputError(f"Categorical columns must be predictors: {sorted(stray)}")

    @property
    def columns(self) -> list[str]:
        return [self.response, *self.predictors]


def validate_table(table: pd.DataFrame, columns: list[str] | None = None) -> pd.DataFrame:
    """Check that a table is a non-empty DataFrame holding the given columns."""
    if not isinstance(table, pd.DataFrame):
        raise InvalidInputError(f"Expected a pandas DataFrame, got {type(table).__name__}")
    if len(table) == 0:
        raise InvalidInputError("Table is empty")
    if columns:
        missing = [c for c in columns if c not in table.columns]
        if missing:
            raise InvalidInputError(f"Table is missing columns: {missing}")
    return table
