import numpy as np
import pandas as pd
from dataclasses import dataclass

from resample_eval.data.table import validate_table
from resample_eval.errors import InvalidInputError


@dataclass
class RandomSplit:
    """Disjoint train/test partition of a table.

    ``train_rows`` and ``test_rows`` hold 0-based row positions in the source,
    so two splits can be compared without looking at the data even when the
    source index has duplicate labels. Either side may be empty when the
    fraction rounds to it.
    """
    train: pd.DataFrame
    test: pd.DataFrame
    train_rows: tuple
    test_rows: tuple

    @property
    def train_size(self) -> int:
        return len(self.train)

    @property
    def test_size(self) -> int:
        return len(self.test)


def split_sizes(n_rows: int, train_fraction: float) -> tuple[int, int]:
    """Return (n_train, n_test) for a table of ``n_rows`` rows.

    Raises InvalidInputError if the fraction is outside (0, 1). Rounding may
    leave one side empty; callers that need both sides check the result.
    """
    if not 0 < train_fraction < 1:
        raise InvalidInputError(f"train_fraction must be in (0, 1), got {train_fraction}")
    n_train = int(round(train_fraction * n_rows))
    return n_train, n_rows - n_train


def bootstrap_resample(table: pd.DataFrame, rng: np.random.Generator) -> pd.DataFrame:
    """Draw ``len(table)`` rows uniformly with replacement.

    Row labels of the source are kept, duplicates included.

    Args:
        table: Source table (must be non-empty)
        rng: Random source; the same generator state gives the same resample
    """
    validate_table(table)
    n = len(table)
    indices = rng.integers(0, n, size=n)
    return table.iloc[indices]


def random_split(
    table: pd.DataFrame,
    train_fraction: float,
    rng: np.random.Generator,
) -> RandomSplit:
    """Shuffle rows and cut them into train/test without replacement.

    The first ``round(train_fraction * len(table))`` shuffled rows go to train,
    the remainder to test. Only the fraction is checked: on a small table
    rounding can leave either side empty, and sizes always sum to the table
    length.
    """
    n_train, _ = split_sizes(len(table), train_fraction)

    order = rng.permutation(len(table))
    train_pos, test_pos = order[:n_train], order[n_train:]

    return RandomSplit(
        train=table.iloc[train_pos],
        test=table.iloc[test_pos],
        train_rows=tuple(int(i) for i in train_pos),
        test_rows=tuple(int(i) for i in test_pos),
    )
