import logging
from dataclasses import dataclass

import pandas as pd

from resample_eval.config import AppConfig, BootstrapConfig, CrossValidationConfig
from resample_eval.models.base import ModelSpec
from resample_eval.evaluation.bootstrap import BootstrapSummary, evaluate_bootstrap
from resample_eval.evaluation.cross_validation import CrossValidationResult, evaluate_cv

logger = logging.getLogger(__name__)


@dataclass
class EvaluationReport:
    """Coefficient variability of one model plus predictive comparison of several."""
    bootstrap: BootstrapSummary
    cross_validation: CrossValidationResult

    def summary(self) -> str:
        best = self.cross_validation.best_model()
        return "\n\n".join([
            self.bootstrap.summary(),
            self.cross_validation.summary(),
            f"Lowest median RMSE: {best}",
        ])


class ResamplingEvaluator:
    """Run the bootstrap and cross-validation evaluators from configuration."""

    def __init__(
        self,
        bootstrap_config: BootstrapConfig | None = None,
        cv_config: CrossValidationConfig | None = None,
    ):
        """
        Args:
            bootstrap_config: Repetitions, CI level, seed and workers for the bootstrap
            cv_config: Repetitions, train fraction, seed, failure policy and workers
                for cross-validation
        """
        self.bootstrap_config = bootstrap_config or BootstrapConfig()
        self.cv_config = cv_config or CrossValidationConfig()

    @classmethod
    def from_config(cls, config: AppConfig) -> "ResamplingEvaluator":
        return cls(config.bootstrap, config.cross_validation)

    def bootstrap(self, table: pd.DataFrame, spec: ModelSpec) -> BootstrapSummary:
        cfg = self.bootstrap_config
        return evaluate_bootstrap(
            table,
            spec,
            repetitions=cfg.repetitions,
            rng=cfg.random_seed,
            ci_level=cfg.ci_level,
            n_jobs=cfg.n_jobs,
        )

    def cross_validate(
        self,
        table: pd.DataFrame,
        specs: list[ModelSpec],
    ) -> CrossValidationResult:
        cfg = self.cv_config
        return evaluate_cv(
            table,
            specs,
            repetitions=cfg.repetitions,
            train_fraction=cfg.train_fraction,
            rng=cfg.random_seed,
            skip_failures=cfg.skip_failures,
            n_jobs=cfg.n_jobs,
        )

    def evaluate(
        self,
        table: pd.DataFrame,
        bootstrap_spec: ModelSpec,
        cv_specs: list[ModelSpec],
    ) -> EvaluationReport:
        """Bootstrap one model's coefficients and cross-validate the candidates."""
        report = EvaluationReport(
            bootstrap=self.bootstrap(table, bootstrap_spec),
            cross_validation=self.cross_validate(table, cv_specs),
        )
        logger.info(
            "Evaluation done: %d bootstrap failures, %d cross-validation failures",
            report.bootstrap.n_failures, report.cross_validation.n_failures,
        )
        return report
