import logging
from pathlib import Path

import pandas as pd

from resample_eval.data.table import TableSchema, validate_table
from resample_eval.errors import InvalidInputError

logger = logging.getLogger(__name__)


class DelimitedTableLoader:
    """Load analysis tables from delimited text files."""

    def __init__(self, sep: str = ","):
        self.sep = sep

    def load(self, path: str | Path, schema: TableSchema) -> pd.DataFrame:
        """
        Read a delimited file and keep the schema's columns.

        Args:
            path: File to read
            schema: Response, predictors and categorical columns to keep

        Returns:
            DataFrame with lower-cased column names, categorical columns cast
            to ``category`` and rows with missing required values dropped
        """
        path = Path(path)
        if not path.exists():
            raise InvalidInputError(f"No such data file: {path}")

        try:
            df = pd.read_csv(path, sep=self.sep)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            raise InvalidInputError(f"Cannot parse {path.name}: {e}") from e
        df.columns = df.columns.str.strip().str.lower()

        columns = [c.lower() for c in schema.columns]
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise InvalidInputError(f"{path.name} is missing columns: {missing}")
        df = df[columns].copy()

        for col in schema.categorical:
            df[col.lower()] = df[col.lower()].astype("category")

        n_before = len(df)
        df = df.dropna()
        if len(df) < n_before:
            logger.warning(
                "Dropped %d of %d rows with missing values from %s",
                n_before - len(df), n_before, path.name,
            )

        if df.empty:
            raise InvalidInputError(f"No usable rows in {path}")

        return validate_table(df.reset_index(drop=True), columns)

    def load_many(self, paths: list[str | Path], schema: TableSchema) -> pd.DataFrame:
        """Load several files with the same schema and stack them."""
        frames = [self.load(p, schema) for p in paths]
        if not frames:
            raise InvalidInputError("No data files given")
        combined = pd.concat(frames, ignore_index=True)
        for col in schema.categorical:
            combined[col.lower()] = combined[col.lower()].astype("category")
        return combined


def load_table(path: str | Path, schema: TableSchema, sep: str = ",") -> pd.DataFrame:
    """Shortcut for ``DelimitedTableLoader(sep).load(path, schema)``."""
    return DelimitedTableLoader(sep=sep).load(path, schema)
