import math

import numpy as np
import pytest

from mathviz.distributions import Family, catalog, get, stats


def test_catalog_covers_every_family():
    assert [dist.family for dist in catalog()] == list(Family)
    for dist in catalog():
        lo, hi = dist.domain
        assert lo < hi
        assert 1 <= len(dist.params) <= 2
        assert dist.description


def test_lookup_by_name_and_member():
    assert get(Family.POISSON) is get("poisson")
    assert get("Normal").family is Family.NORMAL
    with pytest.raises(KeyError):
        get("gamma")


def test_defaults_pad_missing_parameter():
    assert get(Family.POISSON).defaults() == (3.0, 0.0)
    assert get(Family.BINOMIAL).defaults() == (20, 0.5)


def test_validate_rejects_out_of_bounds():
    with pytest.raises(ValueError):
        get(Family.NORMAL).validate(0.0, 0.0)
    with pytest.raises(ValueError):
        get(Family.UNIFORM).validate(3.0, 1.0)
    get(Family.UNIFORM).validate(0.0, 5.0)


def test_normal_pdf_integrates_to_one():
    xs, ys = stats.curve(Family.NORMAL, 0.0, 1.0, points=2001)
    assert stats.integrate(xs, ys) == pytest.approx(1.0, abs=1e-2)


def test_normal_cdf_reference_points():
    normal = get(Family.NORMAL)
    assert normal.cdf(0.0, 0.0, 1.0) == pytest.approx(0.5, abs=1e-7)
    assert normal.cdf(1.96, 0.0, 1.0) == pytest.approx(0.9750021, abs=1e-6)


@pytest.mark.parametrize("n", [1, 5, 20, 21, 35, 50])
@pytest.mark.parametrize("p", [0.01, 0.5, 0.99])
def test_binomial_cdf_reaches_one_at_n(n, p):
    assert get(Family.BINOMIAL).cdf(n, n, p) == pytest.approx(1.0, abs=1e-9)


def test_discrete_mass_sums_to_one():
    binomial = get(Family.BINOMIAL)
    assert sum(binomial.pdf(k, 50, 0.3) for k in range(51)) == pytest.approx(1.0)
    poisson = get(Family.POISSON)
    assert poisson.cdf(20, 3.0) == pytest.approx(1.0, abs=1e-6)


def test_pdf_zero_outside_support():
    assert get(Family.BINOMIAL).pdf(2.5, 10, 0.5) == 0.0
    assert get(Family.BINOMIAL).pdf(-1, 10, 0.5) == 0.0
    assert get(Family.BINOMIAL).pdf(11, 10, 0.5) == 0.0
    assert get(Family.POISSON).pdf(1.5, 3.0) == 0.0
    assert get(Family.POISSON).pdf(-2, 3.0) == 0.0
    assert get(Family.POISSON).pdf(30, 3.0) == 0.0
    assert get(Family.EXPONENTIAL).pdf(-0.1, 1.0) == 0.0
    assert get(Family.UNIFORM).pdf(5.5, 0.0, 5.0) == 0.0
    assert get(Family.UNIFORM).pdf(2.0, 0.0, 5.0) == pytest.approx(0.2)


@pytest.mark.parametrize("family", list(Family))
def test_cdf_monotone_and_bounded(family):
    dist = get(family)
    p1, p2 = dist.defaults()
    xs, ys = stats.curve(family, p1, p2, kind="cdf", points=401)
    assert np.all(np.isfinite(ys))
    assert np.all(ys >= 0.0) and np.all(ys <= 1.0)
    assert np.all(np.diff(ys) >= -1e-12)
    assert dist.cdf(dist.domain[0] - 1.0, p1, p2) == pytest.approx(0.0, abs=1e-12)


def test_uniform_sample_mean():
    draws = stats.draw(Family.UNIFORM, 0.0, 1.0, size=10_000)
    assert len(draws) == 10_000
    assert abs(stats.describe(draws).mean - 0.5) < 0.05
    assert draws.values.min() >= 0.0 and draws.values.max() <= 1.0


@pytest.mark.parametrize(
    "family, p1, p2, mean, std",
    [
        (Family.NORMAL, 1.0, 2.0, 1.0, 2.0),
        (Family.BINOMIAL, 20, 0.3, 6.0, math.sqrt(20 * 0.3 * 0.7)),
        (Family.POISSON, 4.0, 0.0, 4.0, 2.0),
        (Family.EXPONENTIAL, 2.0, 0.0, 0.5, 0.5),
    ],
)
def test_sampling_moments(family, p1, p2, mean, std):
    rng = np.random.default_rng(1234)
    summary = stats.describe(stats.draw(family, p1, p2, size=5000, rng=rng))
    assert summary.mean == pytest.approx(mean, abs=0.15 * max(1.0, std))
    assert summary.std == pytest.approx(std, rel=0.1)


def test_discrete_samples_are_counts():
    rng = np.random.default_rng(7)
    for family, p1, p2 in [(Family.BINOMIAL, 10, 0.5), (Family.POISSON, 2.0, 0.0)]:
        values = stats.draw(family, p1, p2, size=500, rng=rng).values
        assert np.all(values >= 0)
        assert np.all(values == np.floor(values))
    assert stats.draw(Family.BINOMIAL, 10, 0.5, size=500, rng=rng).values.max() <= 10


def test_describe_population_statistics():
    summary = stats.describe([3.0, 1.0, 2.0, 4.0])
    assert summary.mean == 2.5
    assert summary.std == pytest.approx(math.sqrt(1.25))
    assert summary.median == 3.0
    assert (summary.min, summary.max, summary.count) == (1.0, 4.0, 4)


def test_describe_empty_raises():
    with pytest.raises(ValueError):
        stats.describe([])


def test_histogram_drops_out_of_range():
    counts, edges = stats.histogram([0.0, 0.5, 1.0, -1.0, 10.0], (0.0, 1.0), bins=2)
    assert counts.tolist() == [1, 1]
    assert edges.tolist() == [0.0, 0.5, 1.0]


def test_discrete_pdf_curve_uses_integers():
    xs, ys = stats.curve(Family.POISSON, 3.0)
    assert xs.tolist() == list(range(0, 21))
    assert ys.sum() == pytest.approx(1.0, abs=1e-6)
    with pytest.raises(ValueError):
        stats.curve(Family.POISSON, 3.0, kind="mgf")


@pytest.mark.parametrize("k", [21, 400, math.inf])
@pytest.mark.parametrize(
    "family, p1, p2",
    [(Family.POISSON, 10.0, 0.0), (Family.POISSON, 0.1, 0.0), (Family.BINOMIAL, 50, 0.99)],
)
def test_discrete_functions_total_for_large_counts(family, p1, p2, k):
    dist = get(family)
    mass = dist.pdf(k, p1, p2)
    total = dist.cdf(k, p1, p2)
    assert math.isfinite(mass) and 0.0 <= mass <= 1.0
    assert 0.0 <= total <= 1.0
    if k > 50:
        assert mass == 0.0
        assert total == pytest.approx(dist.cdf(20 if family is Family.POISSON else 50, p1, p2))


def test_discrete_cdf_at_infinity():
    assert get(Family.BINOMIAL).cdf(math.inf, 10, 0.5) == pytest.approx(1.0, abs=1e-9)
    assert get(Family.POISSON).cdf(math.inf, 3.0) == pytest.approx(1.0, abs=1e-6)
    assert get(Family.POISSON).pdf(math.inf, 3.0) == 0.0
    assert get(Family.BINOMIAL).cdf(-math.inf, 10, 0.5) == 0.0
    assert get(Family.POISSON).pdf(21, 3.0) == 0.0


def test_missing_second_parameter_uses_family_default():
    xs, ys = stats.curve(Family.NORMAL, 0.0)
    assert stats.integrate(xs, ys) == pytest.approx(1.0, abs=1e-2)
    rng = np.random.default_rng(11)
    draws = stats.draw(Family.NORMAL, 0.0, size=2000, rng=rng)
    assert draws.p2 == 1.0
    assert stats.describe(draws).std == pytest.approx(1.0, rel=0.1)
    uniform = get(Family.UNIFORM)
    assert uniform.pdf(4.0, 0.0) == pytest.approx(0.2)
    assert uniform.cdf(2.5, 0.0) == pytest.approx(0.5)
    uniform.validate(0.0)
