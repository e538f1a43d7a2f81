"""Special functions used by the distribution families."""

from __future__ import annotations

import math

FACTORIAL_LIMIT = 20
TOO_LARGE = math.inf

# Abramowitz & Stegun 7.1.26
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911


def factorial(n: int) -> float:
    """Return ``n!``, or :data:`TOO_LARGE` once it no longer fits in 64 bits."""

    if n <= 1:
        return 1.0
    if n > FACTORIAL_LIMIT:
        return TOO_LARGE
    result = 1
    for i in range(2, int(n) + 1):
        result *= i
    return float(result)


def binomial_coefficient(n: int, k: int) -> float:
    if k > n or k < 0:
        return 0.0
    if k == 0 or k == n:
        return 1.0
    k = min(k, n - k)
    result = 1.0
    for i in range(1, k + 1):
        result = result * (n - k + i) / i
    return result


def erf(x: float) -> float:
    """Error function approximation, absolute error below 1.5e-7."""

    sign = 1.0 if x >= 0 else -1.0
    x = abs(x)
    t = 1.0 / (1.0 + _P * x)
    poly = ((((_A5 * t + _A4) * t + _A3) * t + _A2) * t + _A1) * t
    return sign * (1.0 - poly * math.exp(-x * x))


__all__ = ["FACTORIAL_LIMIT", "TOO_LARGE", "binomial_coefficient", "erf", "factorial"]
