import argparse
import logging
import sys
from pathlib import Path

import numpy as np
import pandas as pd

from resample_eval.config import SyntheticConfig
from resample_eval.errors import InvalidInputError, ResamplingError

SYNTHETIC_DEFAULTS = {
    "linear": ("y", ["x"]),
    "growth": ("armc", ["weight"]),
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Bootstrap and cross-validation for regression models",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    sim_parser = subparsers.add_parser("simulate", help="Write a synthetic dataset")
    sim_parser.add_argument("kind", choices=["linear", "growth"])
    sim_parser.add_argument("--rows", type=int, default=250)
    sim_parser.add_argument("--seed", type=int, default=1)
    sim_parser.add_argument("--heteroscedastic", action="store_true",
                            help="Noise sd grows with |x| (linear only)")
    sim_parser.add_argument("--intercept", type=float, default=2.0, help="True intercept (linear only)")
    sim_parser.add_argument("--slope", type=float, default=3.0, help="True slope (linear only)")
    sim_parser.add_argument("--noise-std", type=float, default=1.0, help="Noise sd (linear only)")
    sim_parser.add_argument("--output", type=Path, required=True)

    # Bootstrap command
    boot_parser = subparsers.add_parser("bootstrap", help="Bootstrap regression coefficients")
    _add_data_args(boot_parser)
    boot_parser.add_argument("--family", choices=["linear", "piecewise", "smooth"], default="linear")
    boot_parser.add_argument("--knots", type=float, nargs="+", default=[],
                             help="Change points for the piecewise family")
    boot_parser.add_argument("--repetitions", type=int, default=1000)
    boot_parser.add_argument("--ci-level", type=float, default=0.95)
    boot_parser.add_argument("--n-jobs", type=int, default=1)
    boot_parser.add_argument("--output", type=Path, help="Write the coefficient table as CSV")

    # Cross-validation command
    cv_parser = subparsers.add_parser("cv", help="Compare models by held-out RMSE")
    _add_data_args(cv_parser)
    cv_parser.add_argument("--models", nargs="+", choices=["linear", "piecewise", "smooth"],
                           default=["linear", "piecewise", "smooth"])
    cv_parser.add_argument("--knots", type=float, nargs="+", default=[],
                           help="Change points for the piecewise model")
    cv_parser.add_argument("--n-knots", type=int, default=8, help="Spline knots for the smooth model")
    cv_parser.add_argument("--penalty", type=float, default=0.1, help="Ridge penalty for the smooth model")
    cv_parser.add_argument("--repetitions", type=int, default=100)
    cv_parser.add_argument("--train-fraction", type=float, default=0.8)
    cv_parser.add_argument("--skip-failures", action="store_true",
                           help="Record failed fits and continue instead of aborting")
    cv_parser.add_argument("--n-jobs", type=int, default=1)
    cv_parser.add_argument("--output", type=Path, help="Write per-repetition RMSE as CSV")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    commands = {"simulate": run_simulate, "bootstrap": run_bootstrap, "cv": run_cv}
    if args.command not in commands:
        parser.print_help()
        return 1

    try:
        commands[args.command](args)
    except ResamplingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 0


def _add_data_args(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--data", type=Path, help="Delimited file to analyze")
    source.add_argument("--synthetic", choices=["linear", "growth"], help="Simulate the data instead")
    parser.add_argument("--rows", type=int, default=250, help="Rows to simulate")
    parser.add_argument("--sep", default=",", help="Field separator of --data")
    parser.add_argument("--response", help="Response column")
    parser.add_argument("--predictors", nargs="+", help="Predictor columns, nonlinear one first")
    parser.add_argument("--categorical", nargs="+", default=[], help="Predictors to dummy code")
    parser.add_argument("--seed", type=int, default=1)


def _simulate(kind: str, cfg: SyntheticConfig) -> pd.DataFrame:
    from resample_eval.data import simulate_growth, simulate_linear_from_config

    if kind == "growth":
        return simulate_growth(cfg.n_rows, np.random.default_rng(cfg.random_seed))
    return simulate_linear_from_config(cfg)


def _load_data(args) -> tuple[pd.DataFrame, str, list[str]]:
    """Return (table, response, predictors) from --data or --synthetic."""
    from resample_eval.data import TableSchema, load_table

    if args.synthetic:
        response, predictors = SYNTHETIC_DEFAULTS[args.synthetic]
        response = args.response or response
        predictors = args.predictors or predictors
        if args.categorical:
            raise InvalidInputError(
                "--categorical only applies to --data; synthetic tables set their own types"
            )
        table = _simulate(args.synthetic, SyntheticConfig(n_rows=args.rows, random_seed=args.seed))
        print(f"Simulated {len(table)} rows ({args.synthetic}, seed {args.seed})")
        return table, response, predictors

    if not args.response or not args.predictors:
        raise InvalidInputError("--response and --predictors are required with --data")
    schema = TableSchema(
        response=args.response.lower(),
        predictors=[p.lower() for p in args.predictors],
        categorical=[c.lower() for c in args.categorical],
    )
    table = load_table(args.data, schema, sep=args.sep)
    print(f"Loaded {len(table)} rows from {args.data}")
    return table, schema.response, list(schema.predictors)


def run_simulate(args):
    """Write a synthetic dataset to CSV."""
    cfg = SyntheticConfig(
        n_rows=args.rows,
        intercept=args.intercept,
        slope=args.slope,
        noise_std=args.noise_std,
        heteroscedastic=args.heteroscedastic,
        random_seed=args.seed,
    )
    table = _simulate(args.kind, cfg)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(args.output, index=False)
    print(f"Wrote {len(table)} rows to {args.output}")


def run_bootstrap(args):
    """Bootstrap the coefficients of one model."""
    from resample_eval.models import ModelSpec
    from resample_eval.evaluation import evaluate_bootstrap

    table, response, predictors = _load_data(args)
    spec = ModelSpec(
        name=args.family,
        response=response,
        predictors=predictors,
        family=args.family,
        knots=args.knots,
    )

    print(f"Bootstrapping {response} ~ {' + '.join(predictors)} ({args.repetitions} repetitions)...")
    summary = evaluate_bootstrap(
        table,
        spec,
        repetitions=args.repetitions,
        rng=args.seed,
        ci_level=args.ci_level,
        n_jobs=args.n_jobs,
    )
    print(summary.summary())

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        summary.to_frame().to_csv(args.output, index=False)
        print(f"Saved coefficient table to {args.output}")


def run_cv(args):
    """Cross-validate candidate models on repeated random splits."""
    from resample_eval.models import ModelSpec
    from resample_eval.evaluation import evaluate_cv

    table, response, predictors = _load_data(args)
    specs = [
        ModelSpec(
            name=family,
            response=response,
            predictors=predictors,
            family=family,
            knots=args.knots if family == "piecewise" else (),
            n_knots=args.n_knots,
            penalty=args.penalty,
        )
        for family in dict.fromkeys(args.models)
    ]

    print(f"Cross-validating {len(specs)} models ({args.repetitions} splits, "
          f"{args.train_fraction:.0%} train)...")
    result = evaluate_cv(
        table,
        specs,
        repetitions=args.repetitions,
        train_fraction=args.train_fraction,
        rng=args.seed,
        skip_failures=args.skip_failures,
        n_jobs=args.n_jobs,
    )
    print(result.summary())
    print(f"Lowest median RMSE: {result.best_model()}")

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        result.to_frame().to_csv(args.output, index=False)
        print(f"Saved per-repetition RMSE to {args.output}")


if __name__ == "__main__":
    sys.exit(main())
