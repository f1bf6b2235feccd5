from .distribution import MetricDistribution, MetricSample, RepetitionFailure
from .metrics import rmse
from .bootstrap import BootstrapResult, BootstrapSummary, bootstrap_statistic, evaluate_bootstrap
from .cross_validation import CrossValidationResult, SplitRecord, evaluate_cv
from .evaluator import ResamplingEvaluator, EvaluationReport

__all__ = [
    "MetricDistribution", "MetricSample", "RepetitionFailure",
    "rmse",
    "BootstrapResult", "BootstrapSummary", "bootstrap_statistic", "evaluate_bootstrap",
    "CrossValidationResult", "SplitRecord", "evaluate_cv",
    "ResamplingEvaluator", "EvaluationReport",
]
