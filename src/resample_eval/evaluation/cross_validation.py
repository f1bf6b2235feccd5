import logging
from dataclasses import dataclass, field
from typing import Callable

import numpy as np
import pandas as pd

from resample_eval.config import CrossValidationConfig
from resample_eval.data.splits import random_split, split_sizes
from resample_eval.data.table import validate_table
from resample_eval.errors import FitError, InvalidInputError, MetricError
from resample_eval.models.base import BaseModel, ModelSpec
from resample_eval.models.registry import fit_model
from resample_eval.evaluation.bootstrap import BootstrapResult, bootstrap_statistic
from resample_eval.evaluation.distribution import (
    MetricDistribution, MetricSample, RepetitionFailure,
    run_repetitions, spawn_generators,
)
from resample_eval.evaluation.metrics import rmse

logger = logging.getLogger(__name__)

Fitter = Callable[[pd.DataFrame, ModelSpec], BaseModel]


@dataclass(frozen=True)
class SplitRecord:
    """Row positions of the train/test partition used in one repetition."""
    repetition: int
    train_rows: tuple
    test_rows: tuple


@dataclass
class CrossValidationResult:
    """Held-out RMSE distributions, one per candidate model.

    All models in a repetition were scored on the same split, so RMSE values
    with the same repetition index are paired.
    """
    distributions: dict[str, MetricDistribution]
    splits: list[SplitRecord]
    train_fraction: float
    failures: list[RepetitionFailure] = field(default_factory=list)

    @property
    def model_ids(self) -> list[str]:
        return list(self.distributions)

    @property
    def repetitions(self) -> int:
        return len(self.splits)

    @property
    def n_failures(self) -> int:
        return len(self.failures)

    def to_frame(self) -> pd.DataFrame:
        """Long table with columns model_identifier, repetition, rmse."""
        rows = [
            (model_id, s.repetition, s.value)
            for model_id, dist in self.distributions.items()
            for s in dist
        ]
        return pd.DataFrame(rows, columns=["model_identifier", "repetition", "rmse"])

    def summarize(self) -> pd.DataFrame:
        """Per-model mean, median and sd of RMSE, plus the sample count."""
        return pd.DataFrame(
            [
                (model_id, dist.mean(), dist.median(), dist.std(), len(dist))
                for model_id, dist in self.distributions.items()
            ],
            columns=["model_identifier", "mean_rmse", "median_rmse", "std_rmse", "n"],
        )

    def paired_differences(self, model_a: str, model_b: str) -> pd.Series:
        """RMSE(a) - RMSE(b) per repetition, over repetitions where both were scored."""
        for model_id in (model_a, model_b):
            if model_id not in self.distributions:
                raise InvalidInputError(f"Unknown model '{model_id}'. Known: {self.model_ids}")
        a = {s.repetition: s.value for s in self.distributions[model_a]}
        b = {s.repetition: s.value for s in self.distributions[model_b]}
        common = sorted(a.keys() & b.keys())
        return pd.Series(
            [a[r] - b[r] for r in common],
            index=pd.Index(common, name="repetition"),
            name=f"{model_a} - {model_b}",
        )

    def compare(
        self,
        model_a: str,
        model_b: str,
        repetitions: int = 1000,
        rng: np.random.Generator | int = 0,
        ci_level: float = 0.95,
    ) -> BootstrapResult:
        """Bootstrap interval for the mean paired RMSE difference (a - b).

        A negative interval means model_a predicts better.
        """
        diffs = self.paired_differences(model_a, model_b)
        return bootstrap_statistic(
            diffs.to_numpy(), np.mean,
            repetitions=repetitions, rng=rng, ci_level=ci_level, name=str(diffs.name),
        )

    def best_model(self) -> str:
        """Model with the lowest median RMSE."""
        scored = {m: d.median() for m, d in self.distributions.items() if len(d)}
        if not scored:
            raise MetricError("No model has any RMSE samples")
        return min(scored, key=scored.get)

    def summary(self) -> str:
        lines = [
            "Cross-validation RMSE",
            "=" * 56,
            f"{'Model':<20} {'Mean':>8} {'Median':>8} {'SD':>8} {'N':>7}",
            "-" * 56,
        ]
        for _, row in self.summarize().iterrows():
            lines.append(
                f"{row['model_identifier']:<20} {row['mean_rmse']:>8.4f} "
                f"{row['median_rmse']:>8.4f} {row['std_rmse']:>8.4f} {int(row['n']):>7}"
            )
        lines += [
            "-" * 56,
            f"{self.repetitions} splits at {self.train_fraction:.0%} train, "
            f"{self.n_failures} failed fits",
        ]
        return "\n".join(lines)


def _cv_repetition(
    repetition: int,
    rng: np.random.Generator,
    table: pd.DataFrame,
    specs: list[ModelSpec],
    train_fraction: float,
    skip_failures: bool,
    fitter: Fitter,
) -> tuple[SplitRecord, list[MetricSample], list[RepetitionFailure]]:
    split = random_split(table, train_fraction, rng)
    samples = []
    failures = []

    for spec in specs:
        try:
            model = fitter(split.train, spec)
            value = rmse(model, split.test)
        except (FitError, MetricError) as e:
            err = e.with_context(repetition=repetition, model_id=spec.name)
            if not skip_failures:
                raise err from e
            failures.append(RepetitionFailure(repetition, spec.name, str(err)))
            continue
        samples.append(MetricSample(
            value=value,
            repetition=repetition,
            model_id=spec.name,
            test_rows=split.test_rows,
        ))

    record = SplitRecord(repetition, split.train_rows, split.test_rows)
    return record, samples, failures


def evaluate_cv(
    table: pd.DataFrame,
    model_specs: list[ModelSpec],
    repetitions: int,
    train_fraction: float,
    rng: np.random.Generator | int,
    skip_failures: bool = False,
    n_jobs: int = 1,
    fitter: Fitter = fit_model,
) -> CrossValidationResult:
    """Compare models by held-out RMSE over repeated random splits.

    Every repetition draws one split; every model is fitted on its train part
    and scored on its test part.

    Args:
        table: Source table
        model_specs: Candidate models, unique names
        repetitions: Number of random splits
        train_fraction: Share of rows used for fitting, in (0, 1)
        rng: Random source or seed
        skip_failures: Record failed fits and continue instead of aborting
        n_jobs: joblib workers; results do not depend on it
        fitter: Callable(table, spec) -> fitted model

    Raises:
        InvalidInputError: Before any repetition, for bad inputs
        MetricError: Before any repetition, if the fraction leaves the test
            partition empty
        FitError, MetricError: From the first failing fit when
            skip_failures is False, tagged with repetition and model
    """
    model_specs = list(model_specs)
    if not model_specs:
        raise InvalidInputError("At least one model spec is required")
    names = [s.name for s in model_specs]
    if len(set(names)) != len(names):
        raise InvalidInputError(f"Model names must be unique, got {names}")

    columns = list(dict.fromkeys(c for s in model_specs for c in s.columns))
    validate_table(table, columns)
    CrossValidationConfig(  # validates
        repetitions=repetitions,
        train_fraction=train_fraction,
        skip_failures=skip_failures,
        n_jobs=n_jobs,
    )
    n_train, n_test = split_sizes(len(table), train_fraction)
    if n_test == 0:
        raise MetricError(
            f"RMSE is undefined: train_fraction={train_fraction} on {len(table)} rows "
            f"leaves an empty test partition"
        )
    if n_train == 0:
        raise InvalidInputError(
            f"train_fraction={train_fraction} on {len(table)} rows leaves no rows to fit on"
        )

    logger.info(
        "Cross-validating %d models: %d splits of %d train / %d test rows",
        len(model_specs), repetitions, n_train, n_test,
    )

    outcomes = run_repetitions(
        _cv_repetition,
        spawn_generators(rng, repetitions),
        n_jobs=n_jobs,
        table=table,
        specs=model_specs,
        train_fraction=train_fraction,
        skip_failures=skip_failures,
        fitter=fitter,
    )

    distributions = {name: MetricDistribution() for name in names}
    splits = []
    failures = []
    for record, samples, rep_failures in outcomes:
        splits.append(record)
        for sample in samples:
            distributions[sample.model_id].samples.append(sample)
        for failure in rep_failures:
            logger.warning("Cross-validation fit skipped: %s", failure.error)
        failures.extend(rep_failures)

    return CrossValidationResult(
        distributions=distributions,
        splits=splits,
        train_fraction=train_fraction,
        failures=failures,
    )
