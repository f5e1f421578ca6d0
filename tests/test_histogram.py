import random

import pytest

from benchtally.histogram import LatencyHistogram


def test_empty_histogram_reports_zeros():
    h = LatencyHistogram()
    assert h.total_count() == 0
    assert h.min() == 0
    assert h.max() == 0
    assert h.mean() == 0.0
    assert h.stddev() == 0.0
    assert h.value_at_quantile(50) == 0


def test_quantiles_over_uniform_samples(make_histogram):
    h = make_histogram(*range(1, 101))
    assert h.value_at_quantile(0) == 1
    assert h.value_at_quantile(25) == 25
    assert h.value_at_quantile(50) == 50
    assert h.value_at_quantile(99) == 99
    assert h.value_at_quantile(99.999) == 100
    assert h.value_at_quantile(100) == 100


def test_mean_and_stddev(make_histogram):
    h = make_histogram(1000, 2000, 3000)
    assert h.mean() == pytest.approx(2000.0)
    assert h.stddev() == pytest.approx(816.4966, rel=1e-5)
    assert h.min() == 1000
    assert h.max() == 3000


def test_negative_sample_rejected():
    with pytest.raises(ValueError):
        LatencyHistogram().record(-1)


def test_merge_matches_direct_recording():
    rng = random.Random(7)
    samples = [rng.randint(100, 50_000) for _ in range(2000)]
    direct = LatencyHistogram()
    parts = [LatencyHistogram() for _ in range(4)]
    for i, s in enumerate(samples):
        direct.record(s)
        parts[i % 4].record(s)

    forward = LatencyHistogram()
    for p in parts:
        forward.merge(p)
    backward = LatencyHistogram()
    for p in reversed(parts):
        backward.merge(p)

    for q in (0, 25, 50, 75, 95, 99, 99.999, 100):
        assert forward.value_at_quantile(q) == direct.value_at_quantile(q)
        assert backward.value_at_quantile(q) == direct.value_at_quantile(q)
    assert forward.total_count() == direct.total_count()
    assert forward.mean() == pytest.approx(direct.mean())
    assert backward.stddev() == pytest.approx(direct.stddev())


def test_copy_is_independent(make_histogram):
    h = make_histogram(5, 6)
    dup = h.copy()
    h.record(100)
    assert dup.total_count() == 2
    assert dup.max() == 6


def test_dict_form_keeps_counts(make_histogram):
    h = make_histogram(10, 10, 20)
    assert h.to_dict() == {"10": 2, "20": 1}
    assert LatencyHistogram.from_dict(h.to_dict()) == h
