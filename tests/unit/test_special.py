import math

import pytest

from mathviz.distributions.special import TOO_LARGE, binomial_coefficient, erf, factorial


def test_factorial_small_values():
    assert factorial(0) == 1
    assert factorial(1) == 1
    assert factorial(5) == 120
    assert factorial(20) == 2432902008176640000


def test_factorial_overflow_sentinel():
    assert factorial(21) is TOO_LARGE
    assert math.isinf(factorial(50))


def test_binomial_coefficient_edges():
    assert binomial_coefficient(5, 6) == 0
    assert binomial_coefficient(5, 0) == 1
    assert binomial_coefficient(5, 5) == 1
    assert binomial_coefficient(5, 2) == 10
    assert binomial_coefficient(50, 25) == pytest.approx(math.comb(50, 25), rel=1e-12)


def test_erf_accuracy_and_symmetry():
    assert erf(0.0) == pytest.approx(0.0, abs=1e-8)
    for x in (0.1, 0.5, 1.0, 2.0, 3.5):
        assert erf(x) == pytest.approx(math.erf(x), abs=2e-7)
        assert erf(-x) == pytest.approx(-erf(x))
