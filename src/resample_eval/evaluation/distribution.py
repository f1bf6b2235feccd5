import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import Callable, Iterator

from joblib import Parallel, delayed


@dataclass(frozen=True)
class MetricSample:
    """One scalar from one repetition: a coefficient estimate or an error metric."""
    value: float
    repetition: int
    model_id: str | None = None
    term: str | None = None  # coefficient name, bootstrap only
    test_rows: tuple | None = None  # held-out row positions, cross-validation only


@dataclass(frozen=True)
class RepetitionFailure:
    """A repetition whose fit failed and was left out of the aggregates."""
    repetition: int
    model_id: str | None
    error: str


@dataclass
class MetricDistribution:
    """Collection of MetricSample values; aggregates ignore sample order."""
    samples: list[MetricSample] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[MetricSample]:
        return iter(self.samples)

    def values(self) -> np.ndarray:
        return np.array([s.value for s in self.samples], dtype=float)

    def mean(self) -> float:
        return float(np.mean(self.values())) if self.samples else float("nan")

    def std(self) -> float:
        """Sample standard deviation (ddof=1)."""
        if len(self.samples) < 2:
            return float("nan")
        return float(np.std(self.values(), ddof=1))

    def median(self) -> float:
        return float(np.median(self.values())) if self.samples else float("nan")

    def quantile(self, q: float | list[float]) -> float | np.ndarray:
        if not self.samples:
            return float("nan")
        result = np.quantile(self.values(), q)
        return float(result) if np.ndim(result) == 0 else result

    def terms(self) -> list[str]:
        """Coefficient names in order of first appearance."""
        return list(dict.fromkeys(s.term for s in self.samples if s.term is not None))

    def repetitions(self) -> list[int]:
        return sorted({s.repetition for s in self.samples})

    def for_term(self, term: str) -> "MetricDistribution":
        return MetricDistribution([s for s in self.samples if s.term == term])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [(s.model_id, s.term, s.repetition, s.value) for s in self.samples],
            columns=["model_identifier", "term", "repetition", "value"],
        )


def spawn_generators(rng: np.random.Generator | int, n: int) -> list[np.random.Generator]:
    """One independent generator per repetition.

    Repetition i always draws from the i-th child, so sequential and parallel
    runs see the same random numbers.
    """
    return np.random.default_rng(rng).spawn(n)


def run_repetitions(
    worker: Callable,
    generators: list[np.random.Generator],
    n_jobs: int = 1,
    **kwargs,
) -> list:
    """Call ``worker(repetition, rng, **kwargs)`` for repetitions 1..N.

    Results come back in repetition order regardless of completion order.
    """
    return Parallel(n_jobs=n_jobs)(
        delayed(worker)(repetition, rng, **kwargs)
        for repetition, rng in enumerate(generators, start=1)
    )
