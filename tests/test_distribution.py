import pytest
import numpy as np
from joblib import parallel_config
from resample_eval.evaluation.distribution import (
    MetricDistribution, MetricSample, run_repetitions, spawn_generators,
)


def _draw(repetition, rng, scale=1.0):
    return repetition, float(rng.normal() * scale)


@pytest.fixture
def coefficient_samples():
    samples = []
    for rep in range(1, 5):
        samples.append(MetricSample(value=float(rep), repetition=rep, model_id="m", term="(Intercept)"))
        samples.append(MetricSample(value=10.0 * rep, repetition=rep, model_id="m", term="x"))
    return MetricDistribution(samples)


def test_empty_distribution_aggregates_are_nan():
    dist = MetricDistribution()
    assert len(dist) == 0
    assert np.isnan(dist.mean())
    assert np.isnan(dist.median())
    assert np.isnan(dist.std())
    assert np.isnan(dist.quantile(0.5))


def test_single_sample_has_nan_std():
    dist = MetricDistribution([MetricSample(value=2.0, repetition=1)])
    assert dist.mean() == 2.0
    assert np.isnan(dist.std())


def test_aggregates():
    dist = MetricDistribution([MetricSample(value=v, repetition=i) for i, v in enumerate([1.0, 2.0, 3.0, 10.0], 1)])
    assert dist.mean() == pytest.approx(4.0)
    assert dist.median() == pytest.approx(2.5)
    assert dist.std() == pytest.approx(np.std([1, 2, 3, 10], ddof=1))
    np.testing.assert_allclose(dist.quantile([0.0, 1.0]), [1.0, 10.0])


def test_aggregates_ignore_order():
    values = [4.0, 1.0, 7.0, 2.0]
    a = MetricDistribution([MetricSample(value=v, repetition=i) for i, v in enumerate(values, 1)])
    b = MetricDistribution([MetricSample(value=v, repetition=i) for i, v in enumerate(reversed(values), 1)])
    assert a.mean() == b.mean()
    assert a.median() == b.median()
    assert a.std() == b.std()


def test_terms_and_for_term(coefficient_samples):
    assert coefficient_samples.terms() == ["(Intercept)", "x"]
    x = coefficient_samples.for_term("x")
    assert len(x) == 4
    assert x.mean() == pytest.approx(25.0)
    assert coefficient_samples.repetitions() == [1, 2, 3, 4]


def test_to_frame(coefficient_samples):
    df = coefficient_samples.to_frame()
    assert list(df.columns) == ["model_identifier", "term", "repetition", "value"]
    assert len(df) == 8
    assert (df["model_identifier"] == "m").all()


def test_spawned_generators_are_reproducible():
    a = [g.random() for g in spawn_generators(5, 3)]
    b = [g.random() for g in spawn_generators(5, 3)]
    assert a == b
    assert len(set(a)) == 3


def test_run_repetitions_numbers_from_one():
    results = run_repetitions(_draw, spawn_generators(0, 4))
    assert [rep for rep, _ in results] == [1, 2, 3, 4]


def test_run_repetitions_passes_keyword_arguments():
    plain = run_repetitions(_draw, spawn_generators(0, 3))
    scaled = run_repetitions(_draw, spawn_generators(0, 3), scale=2.0)
    for (_, a), (_, b) in zip(plain, scaled):
        assert b == pytest.approx(2 * a)


def test_run_repetitions_threads_match_sequential():
    sequential = run_repetitions(_draw, spawn_generators(3, 6), n_jobs=1)
    with parallel_config(backend="threading"):
        threaded = run_repetitions(_draw, spawn_generators(3, 6), n_jobs=2)
    assert sequential == threaded
