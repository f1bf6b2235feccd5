from dataclasses import dataclass, field, asdict

from resample_eval.errors import InvalidInputError


def _check_repetitions(repetitions: int) -> None:
    if not isinstance(repetitions, int) or isinstance(repetitions, bool) or repetitions <= 0:
        raise InvalidInputError(f"repetitions must be a positive integer, got {repetitions!r}")


def _check_n_jobs(n_jobs: int) -> None:
    if not isinstance(n_jobs, int) or n_jobs == 0:
        raise InvalidInputError(f"n_jobs must be a non-zero integer, got {n_jobs!r}")


@dataclass
class BootstrapConfig:
    """Bootstrap resampling parameters."""
    repetitions: int = 1000
    ci_level: float = 0.95
    random_seed: int = 1
    n_jobs: int = 1  # joblib convention, -1 uses all cores

    def __post_init__(self):
        _check_repetitions(self.repetitions)
        _check_n_jobs(self.n_jobs)
        if not 0 < self.ci_level < 1:
            raise InvalidInputError(f"ci_level must be in (0, 1), got {self.ci_level}")

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CrossValidationConfig:
    """Repeated train/test split parameters."""
    repetitions: int = 100
    train_fraction: float = 0.8
    random_seed: int = 1
    skip_failures: bool = False  # abort on the first failed fit unless set
    n_jobs: int = 1

    def __post_init__(self):
        _check_repetitions(self.repetitions)
        _check_n_jobs(self.n_jobs)
        if not 0 < self.train_fraction < 1:
            raise InvalidInputError(
                f"train_fraction must be in (0, 1), got {self.train_fraction}"
            )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SyntheticConfig:
    """Parameters for the simulated linear dataset."""
    n_rows: int = 250
    intercept: float = 2.0
    slope: float = 3.0
    noise_std: float = 1.0
    heteroscedastic: bool = False
    random_seed: int = 1

    def __post_init__(self):
        if self.n_rows <= 0:
            raise InvalidInputError(f"n_rows must be positive, got {self.n_rows}")
        if self.noise_std < 0:
            raise InvalidInputError(f"noise_std must be non-negative, got {self.noise_std}")

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AppConfig:
    """Top-level configuration."""
    bootstrap: BootstrapConfig = field(default_factory=BootstrapConfig)
    cross_validation: CrossValidationConfig = field(default_factory=CrossValidationConfig)
    synthetic: SyntheticConfig = field(default_factory=SyntheticConfig)

    def to_dict(self) -> dict:
        return {
            "bootstrap": self.bootstrap.to_dict(),
            "cross_validation": self.cross_validation.to_dict(),
            "synthetic": self.synthetic.to_dict(),
        }

    @classmethod
    def from_dict(cls, config: dict) -> "AppConfig":
        """Build from a (possibly partial) nested dict; missing keys keep defaults."""
        sections = {
            "bootstrap": BootstrapConfig,
            "cross_validation": CrossValidationConfig,
            "synthetic": SyntheticConfig,
        }
        unknown = set(config) - set(sections)
        if unknown:
            raise InvalidInputError(f"Unknown config sections: {sorted(unknown)}")
        kwargs = {}
        for name, section_cls in sections.items():
            values = config.get(name) or {}
            try:
                kwargs[name] = section_cls(**values)
            except TypeError as e:
                raise InvalidInputError(f"Invalid '{name}' config: {e}") from e
        return cls(**kwargs)
