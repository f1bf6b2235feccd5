import pytest
from resample_eval.config import (
    AppConfig, BootstrapConfig, CrossValidationConfig, SyntheticConfig,
)
from resample_eval.errors import InvalidInputError


class TestBootstrapConfig:
    def test_default_values(self):
        cfg = BootstrapConfig()
        assert cfg.repetitions == 1000
        assert cfg.ci_level == 0.95
        assert cfg.n_jobs == 1

    @pytest.mark.parametrize("repetitions", [0, -5, 2.5])
    def test_invalid_repetitions_raises(self, repetitions):
        with pytest.raises(InvalidInputError, match="repetitions"):
            BootstrapConfig(repetitions=repetitions)

    @pytest.mark.parametrize("level", [0.0, 1.0, 1.5])
    def test_invalid_ci_level_raises(self, level):
        with pytest.raises(ValueError, match="ci_level"):
            BootstrapConfig(ci_level=level)

    def test_zero_jobs_raises(self):
        with pytest.raises(InvalidInputError, match="n_jobs"):
            BootstrapConfig(n_jobs=0)


class TestCrossValidationConfig:
    def test_default_values(self):
        cfg = CrossValidationConfig()
        assert cfg.repetitions == 100
        assert cfg.train_fraction == 0.8
        assert cfg.skip_failures is False

    @pytest.mark.parametrize("fraction", [0.0, 1.0, -0.2, 1.2])
    def test_invalid_train_fraction_raises(self, fraction):
        with pytest.raises(InvalidInputError, match="train_fraction"):
            CrossValidationConfig(train_fraction=fraction)


class TestSyntheticConfig:
    def test_negative_noise_raises(self):
        with pytest.raises(InvalidInputError, match="noise_std"):
            SyntheticConfig(noise_std=-1.0)

    def test_zero_rows_raises(self):
        with pytest.raises(InvalidInputError, match="n_rows"):
            SyntheticConfig(n_rows=0)


class TestAppConfig:
    def test_creates_with_all_defaults(self):
        cfg = AppConfig()
        assert isinstance(cfg.bootstrap, BootstrapConfig)
        assert isinstance(cfg.cross_validation, CrossValidationConfig)
        assert isinstance(cfg.synthetic, SyntheticConfig)

    def test_from_dict_partial_keeps_defaults(self):
        cfg = AppConfig.from_dict({
            "bootstrap": {"repetitions": 200},
            "cross_validation": {"train_fraction": 0.7},
        })
        assert cfg.bootstrap.repetitions == 200
        assert cfg.bootstrap.ci_level == 0.95
        assert cfg.cross_validation.train_fraction == 0.7
        assert cfg.synthetic.n_rows == 250

    def test_to_dict_roundtrip(self):
        original = AppConfig(bootstrap=BootstrapConfig(repetitions=10, random_seed=7))
        restored = AppConfig.from_dict(original.to_dict())
        assert restored == original

    def test_unknown_section_raises(self):
        with pytest.raises(InvalidInputError, match="Unknown config sections"):
            AppConfig.from_dict({"plots": {}})

    def test_unknown_key_raises(self):
        with pytest.raises(InvalidInputError, match="bootstrap"):
            AppConfig.from_dict({"bootstrap": {"samples": 10}})

    def test_invalid_value_in_dict_raises(self):
        with pytest.raises(InvalidInputError, match="train_fraction"):
            AppConfig.from_dict({"cross_validation": {"train_fraction": 2}})

    def test_independent_instances(self):
        cfg1 = AppConfig()
        cfg2 = AppConfig()
        cfg1.bootstrap.repetitions = 5
        assert cfg2.bootstrap.repetitions == 1000
