import logging
from dataclasses import dataclass, field, replace
from typing import Callable

import numpy as np
import pandas as pd

from resample_eval.config import BootstrapConfig
from resample_eval.data.splits import bootstrap_resample
from resample_eval.data.table import validate_table
from resample_eval.errors import FitError, InvalidInputError
from resample_eval.models.base import BaseModel, ModelFamily, ModelSpec
from resample_eval.models.registry import fit_model
from resample_eval.evaluation.distribution import (
    MetricDistribution, MetricSample, RepetitionFailure,
    run_repetitions, spawn_generators,
)

logger = logging.getLogger(__name__)

Fitter = Callable[[pd.DataFrame, ModelSpec], BaseModel]


@dataclass
class BootstrapResult:
    """Percentile bootstrap interval for one statistic."""
    term: str
    point_estimate: float
    standard_error: float  # sd of the bootstrap samples
    ci_lower: float
    ci_upper: float
    samples: np.ndarray
    is_significant: bool  # CI doesn't cross zero

    @property
    def ci_width(self) -> float:
        return self.ci_upper - self.ci_lower


def _summarize_samples(
    term: str,
    point_estimate: float,
    samples: np.ndarray,
    ci_level: float,
) -> BootstrapResult:
    alpha = (1 - ci_level) / 2
    if len(samples) == 0:
        # term never estimated, e.g. a category level absent from every resample
        ci_lower = ci_upper = float("nan")
    else:
        ci_lower = float(np.percentile(samples, alpha * 100))
        ci_upper = float(np.percentile(samples, (1 - alpha) * 100))
    standard_error = float(np.std(samples, ddof=1)) if len(samples) > 1 else float("nan")

    return BootstrapResult(
        term=term,
        point_estimate=float(point_estimate),
        standard_error=standard_error,
        ci_lower=ci_lower,
        ci_upper=ci_upper,
        samples=samples,
        is_significant=(ci_lower > 0) or (ci_upper < 0),
    )


def bootstrap_statistic(
    data: np.ndarray | pd.Series,
    statistic: Callable[[np.ndarray], float],
    repetitions: int = 1000,
    rng: np.random.Generator | int = 0,
    ci_level: float = 0.95,
    name: str = "",
) -> BootstrapResult:
    """Bootstrap confidence interval for any statistic of a 1-d sample.

    Args:
        data: Values to resample
        statistic: Function computing the statistic from an array
        repetitions: Number of bootstrap resamples
        rng: Random source or seed
        ci_level: Confidence level (e.g., 0.95 for 95% CI)
        name: Label stored as the result's term
    """
    data = np.asarray(data, dtype=float)
    if data.size == 0:
        raise InvalidInputError("Cannot bootstrap an empty sample")
    if repetitions <= 0:
        raise InvalidInputError(f"repetitions must be positive, got {repetitions}")
    if not 0 < ci_level < 1:
        raise InvalidInputError(f"ci_level must be in (0, 1), got {ci_level}")

    rng = np.random.default_rng(rng)
    boot_stats = np.empty(repetitions)
    for i in range(repetitions):
        resample = data[rng.integers(0, data.size, size=data.size)]
        boot_stats[i] = statistic(resample)

    return _summarize_samples(name, float(statistic(data)), boot_stats, ci_level)


@dataclass
class BootstrapSummary:
    """Bootstrap distribution of a model's coefficients."""
    model_id: str
    repetitions: int
    ci_level: float
    results: dict[str, BootstrapResult]
    distribution: MetricDistribution
    failures: list[RepetitionFailure] = field(default_factory=list)

    @property
    def n_failures(self) -> int:
        return len(self.failures)

    @property
    def n_successful(self) -> int:
        return self.repetitions - self.n_failures

    def standard_errors(self) -> dict[str, float]:
        return {term: r.standard_error for term, r in self.results.items()}

    def to_frame(self) -> pd.DataFrame:
        """One row per term: estimate, standard_error, ci_lower, ci_upper."""
        return pd.DataFrame(
            [
                (r.term, r.point_estimate, r.standard_error, r.ci_lower, r.ci_upper)
                for r in self.results.values()
            ],
            columns=["term", "estimate", "standard_error", "ci_lower", "ci_upper"],
        )

    def summary(self) -> str:
        lines = [
            f"Bootstrap: {self.model_id}",
            "=" * 66,
            f"{'Term':<20} {'Estimate':>10} {'Std. err':>10} {'CI low':>11} {'CI high':>11}",
            "-" * 66,
        ]
        for r in self.results.values():
            lines.append(
                f"{r.term:<20} {r.point_estimate:>10.4f} {r.standard_error:>10.4f} "
                f"{r.ci_lower:>11.4f} {r.ci_upper:>11.4f}"
            )
        lines += [
            "-" * 66,
            f"{self.n_successful}/{self.repetitions} repetitions used, "
            f"{self.n_failures} failed, {self.ci_level:.0%} percentile intervals",
        ]
        return "\n".join(lines)


def _bootstrap_repetition(
    repetition: int,
    rng: np.random.Generator,
    table: pd.DataFrame,
    spec: ModelSpec,
    fitter: Fitter,
) -> list[MetricSample] | RepetitionFailure:
    resample = bootstrap_resample(table, rng)
    try:
        model = fitter(resample, spec)
    except FitError as e:
        return RepetitionFailure(
            repetition=repetition,
            model_id=spec.name,
            error=str(e.with_context(repetition=repetition, model_id=spec.name)),
        )
    return [
        MetricSample(value=value, repetition=repetition, model_id=spec.name, term=term)
        for term, value in model.coefficients().items()
    ]


def evaluate_bootstrap(
    table: pd.DataFrame,
    model_spec: ModelSpec,
    repetitions: int,
    rng: np.random.Generator | int,
    ci_level: float = 0.95,
    n_jobs: int = 1,
    fitter: Fitter = fit_model,
) -> BootstrapSummary:
    """Bootstrap the coefficients of one model.

    Each repetition refits ``model_spec`` on a same-size resample drawn with
    replacement. A FitError in a repetition is recorded as a failure and left
    out of the aggregates; every other error propagates.

    Args:
        table: Source table
        model_spec: Model to refit
        repetitions: Number of bootstrap resamples
        rng: Random source or seed
        ci_level: Percentile interval level (0.95 gives the 2.5%/97.5% quantiles)
        n_jobs: joblib workers; results do not depend on it
        fitter: Callable(table, spec) -> fitted model

    Raises:
        InvalidInputError: Before any repetition, for an empty table, missing
            columns or bad parameters
        FitError: If the full-table fit fails or every repetition fails
    """
    validate_table(table, model_spec.columns)
    BootstrapConfig(repetitions=repetitions, ci_level=ci_level, n_jobs=n_jobs)  # validates

    point_model = fitter(table, model_spec)
    point = point_model.coefficients()
    if model_spec.family == ModelFamily.PIECEWISE and not model_spec.knots:
        # Pin the change points so every resample estimates the same terms
        model_spec = replace(model_spec, knots=point_model.knots)

    logger.info(
        "Bootstrapping '%s': %d repetitions on %d rows",
        model_spec.name, repetitions, len(table),
    )

    outcomes = run_repetitions(
        _bootstrap_repetition,
        spawn_generators(rng, repetitions),
        n_jobs=n_jobs,
        table=table,
        spec=model_spec,
        fitter=fitter,
    )

    samples: list[MetricSample] = []
    failures: list[RepetitionFailure] = []
    for outcome in outcomes:
        if isinstance(outcome, RepetitionFailure):
            logger.warning("Bootstrap fit failed: %s", outcome.error)
            failures.append(outcome)
        else:
            samples.extend(outcome)

    if len(failures) == repetitions:
        raise FitError(
            f"All {repetitions} bootstrap repetitions failed; first error: {failures[0].error}",
            model_id=model_spec.name,
        )
    if failures:
        logger.warning(
            "'%s': %d of %d bootstrap repetitions failed and were excluded",
            model_spec.name, len(failures), repetitions,
        )

    distribution = MetricDistribution(samples)
    results = {
        term: _summarize_samples(
            term, estimate, distribution.for_term(term).values(), ci_level
        )
        for term, estimate in point.items()
    }

    return BootstrapSummary(
        model_id=model_spec.name,
        repetitions=repetitions,
        ci_level=ci_level,
        results=results,
        distribution=distribution,
        failures=failures,
    )
