"""
Synthetic tables for resampling experiments.

- simulate_linear: y = intercept + slope * x + noise, with constant or
  non-constant noise variance
- simulate_growth: child-growth style data where arm circumference rises
  steeply with weight up to a change point and flattens after it
"""

import numpy as np
import pandas as pd

from resample_eval.config import SyntheticConfig
from resample_eval.errors import InvalidInputError


def simulate_linear(
    n: int,
    rng: np.random.Generator,
    intercept: float = 2.0,
    slope: float = 3.0,
    noise_std: float = 1.0,
    heteroscedastic: bool = False,
) -> pd.DataFrame:
    """Simulate a simple linear regression dataset.

    Args:
        n: Number of rows
        rng: Random source
        intercept: True intercept
        slope: True slope
        noise_std: Noise standard deviation (at |x| = 1 when heteroscedastic)
        heteroscedastic: Scale the noise with |x| instead of keeping it constant

    Returns:
        DataFrame with columns x, y
    """
    if n <= 0:
        raise InvalidInputError(f"n must be positive, got {n}")
    if noise_std < 0:
        raise InvalidInputError(f"noise_std must be non-negative, got {noise_std}")

    x = rng.normal(loc=1.0, scale=1.0, size=n)
    scale = noise_std * np.abs(x) if heteroscedastic else noise_std
    noise = rng.normal(size=n) * scale
    return pd.DataFrame({"x": x, "y": intercept + slope * x + noise})


def simulate_linear_from_config(cfg: SyntheticConfig) -> pd.DataFrame:
    """Run simulate_linear with a SyntheticConfig and its own seed."""
    return simulate_linear(
        n=cfg.n_rows,
        rng=np.random.default_rng(cfg.random_seed),
        intercept=cfg.intercept,
        slope=cfg.slope,
        noise_std=cfg.noise_std,
        heteroscedastic=cfg.heteroscedastic,
    )


def simulate_growth(
    n: int,
    rng: np.random.Generator,
    change_point: float = 7.0,
    noise_std: float = 0.5,
) -> pd.DataFrame:
    """Simulate child anthropometry with a nonlinear weight/arm-circumference curve.

    Args:
        n: Number of children
        rng: Random source
        change_point: Weight (kg) where the arm-circumference slope drops
        noise_std: Arm-circumference noise standard deviation (cm)

    Returns:
        DataFrame with columns id, sex, age (months), weight (kg), armc (cm)
    """
    if n <= 0:
        raise InvalidInputError(f"n must be positive, got {n}")

    sex = rng.choice(["female", "male"], size=n)
    age = rng.uniform(1, 60, size=n)
    weight = 3.5 + 13.0 * (1 - np.exp(-age / 25)) + rng.normal(scale=0.8, size=n)
    weight = np.clip(weight, 2.0, None)

    over = np.maximum(weight - change_point, 0.0)
    armc = (
        7.5
        + 0.9 * np.minimum(weight, change_point)
        + 0.25 * over
        - 0.01 * over ** 2
        + 0.2 * (sex == "male")
        + rng.normal(scale=noise_std, size=n)
    )

    return pd.DataFrame({
        "id": np.arange(1, n + 1),
        "sex": pd.Categorical(sex, categories=["female", "male"]),
        "age": age,
        "weight": weight,
        "armc": armc,
    })
