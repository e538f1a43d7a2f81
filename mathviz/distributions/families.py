"""The five distribution families offered by the explorer.

Each family is one member of :class:`Family`; :func:`get` maps a member to
an implementation sharing the :class:`Distribution` interface. Families
with a single parameter ignore ``p2``; a missing ``p2`` falls back to the
family's declared default.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Protocol, Tuple

import numpy as np

from ..core.types import ParamSpec
from .special import FACTORIAL_LIMIT, TOO_LARGE, binomial_coefficient, erf, factorial


class Family(str, Enum):
    NORMAL = "normal"
    BINOMIAL = "binomial"
    POISSON = "poisson"
    EXPONENTIAL = "exponential"
    UNIFORM = "uniform"


class Distribution(Protocol):
    """Interface shared by every family."""

    family: Family
    title: str
    description: str
    params: Tuple[ParamSpec, ...]
    domain: Tuple[float, float]
    discrete: bool

    def pdf(self, x: float, p1: float, p2: float | None = None) -> float:
        """Density (or mass) at ``x``; zero outside the support."""

    def cdf(self, x: float, p1: float, p2: float | None = None) -> float:
        """Probability that a draw is at most ``x``."""

    def sample(
        self, p1: float, p2: float | None = None, rng: np.random.Generator | None = None
    ) -> float:
        """Draw one value."""

    def defaults(self) -> Tuple[float, float]:
        """Default ``(p1, p2)``."""

    def validate(self, p1: float, p2: float | None = None) -> None:
        """Raise :class:`ValueError` for parameters outside the declared bounds."""


def _uniform01(rng: np.random.Generator | None) -> float:
    """Uniform draw on ``(0, 1]`` so that logarithms stay finite."""

    rng = rng or np.random.default_rng()
    return 1.0 - float(rng.random())


def _is_count(x: float) -> bool:
    return math.isfinite(x) and x >= 0 and x == math.floor(x)


@dataclass(frozen=True)
class _FamilyBase:
    family: ClassVar[Family]
    title: ClassVar[str]
    description: ClassVar[str]
    params: ClassVar[Tuple[ParamSpec, ...]]
    domain: ClassVar[Tuple[float, float]]
    discrete: ClassVar[bool] = False

    def defaults(self) -> Tuple[float, float]:
        values = [spec.default for spec in self.params]
        values.extend([0.0] * (2 - len(values)))
        return values[0], values[1]

    def _second(self, p2: float | None) -> float:
        return self.defaults()[1] if p2 is None else p2

    def validate(self, p1: float, p2: float | None = None) -> None:
        for spec, value in zip(self.params, (p1, self._second(p2))):
            if not spec.contains(value):
                raise ValueError(
                    f"{self.family.value}: {spec.name}={value} outside "
                    f"[{spec.min}, {spec.max}]"
                )


@dataclass(frozen=True)
class Normal(_FamilyBase):
    family: ClassVar[Family] = Family.NORMAL
    title: ClassVar[str] = "Normal (Gaussian)"
    description: ClassVar[str] = "Bell curve - models natural phenomena, Central Limit Theorem"
    params: ClassVar[Tuple[ParamSpec, ...]] = (
        ParamSpec("Mean (μ)", min=-5.0, max=5.0, default=0.0, step=0.1),
        ParamSpec("Std Dev (σ)", min=0.1, max=3.0, default=1.0, step=0.1),
    )
    domain: ClassVar[Tuple[float, float]] = (-10.0, 10.0)

    def pdf(self, x: float, p1: float, p2: float | None = None) -> float:
        mu, sigma = p1, self._second(p2)
        coefficient = 1.0 / (sigma * math.sqrt(2.0 * math.pi))
        return coefficient * math.exp(-((x - mu) ** 2) / (2.0 * sigma * sigma))

    def cdf(self, x: float, p1: float, p2: float | None = None) -> float:
        mu, sigma = p1, self._second(p2)
        value = 0.5 * (1.0 + erf((x - mu) / (sigma * math.sqrt(2.0))))
        return min(1.0, max(0.0, value))

    def sample(
        self, p1: float, p2: float | None = None, rng: np.random.Generator | None = None
    ) -> float:
        # Box-Muller
        rng = rng or np.random.default_rng()
        u1 = _uniform01(rng)
        u2 = float(rng.random())
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return p1 + self._second(p2) * z


@dataclass(frozen=True)
class Binomial(_FamilyBase):
    family: ClassVar[Family] = Family.BINOMIAL
    title: ClassVar[str] = "Binomial"
    description: ClassVar[str] = "Coin flips - number of successes in n trials"
    params: ClassVar[Tuple[ParamSpec, ...]] = (
        ParamSpec("Trials (n)", min=1, max=50, default=20, step=1),
        ParamSpec("Success Prob (p)", min=0.01, max=0.99, default=0.5, step=0.01),
    )
    domain: ClassVar[Tuple[float, float]] = (0.0, 50.0)
    discrete: ClassVar[bool] = True

    def pdf(self, x: float, p1: float, p2: float | None = None) -> float:
        n, p = int(p1), self._second(p2)
        if not _is_count(x) or x > n:
            return 0.0
        k = int(x)
        return binomial_coefficient(n, k) * p**k * (1.0 - p) ** (n - k)

    def cdf(self, x: float, p1: float, p2: float | None = None) -> float:
        if math.isnan(x) or x < 0:
            return 0.0
        n = int(p1)
        upper = n if x >= n else int(math.floor(x))
        total = sum(self.pdf(k, p1, p2) for k in range(upper + 1))
        return min(1.0, total)

    def sample(
        self, p1: float, p2: float | None = None, rng: np.random.Generator | None = None
    ) -> float:
        rng = rng or np.random.default_rng()
        p = self._second(p2)
        successes = 0
        for _ in range(int(p1)):
            if rng.random() < p:
                successes += 1
        return float(successes)


@dataclass(frozen=True)
class Poisson(_FamilyBase):
    family: ClassVar[Family] = Family.POISSON
    title: ClassVar[str] = "Poisson"
    description: ClassVar[str] = "Rare events - number of occurrences in a fixed interval"
    params: ClassVar[Tuple[ParamSpec, ...]] = (
        ParamSpec("Rate (λ)", min=0.1, max=10.0, default=3.0, step=0.1),
    )
    domain: ClassVar[Tuple[float, float]] = (0.0, 20.0)
    discrete: ClassVar[bool] = True

    def pdf(self, x: float, p1: float, p2: float | None = None) -> float:
        if not _is_count(x):
            return 0.0
        k = int(x)
        denominator = factorial(k)
        # no mass is reported past the factorial limit
        if denominator == TOO_LARGE:
            return 0.0
        return p1**k * math.exp(-p1) / denominator

    def cdf(self, x: float, p1: float, p2: float | None = None) -> float:
        if math.isnan(x) or x < 0:
            return 0.0
        upper = FACTORIAL_LIMIT if x >= FACTORIAL_LIMIT else int(math.floor(x))
        total = sum(self.pdf(k, p1) for k in range(upper + 1))
        return min(1.0, total)

    def sample(
        self, p1: float, p2: float | None = None, rng: np.random.Generator | None = None
    ) -> float:
        # Knuth: multiply uniforms until the product drops below e^-λ
        rng = rng or np.random.default_rng()
        limit = math.exp(-p1)
        k = 0
        product = 1.0
        while True:
            k += 1
            product *= float(rng.random())
            if product <= limit:
                return float(k - 1)


@dataclass(frozen=True)
class Exponential(_FamilyBase):
    family: ClassVar[Family] = Family.EXPONENTIAL
    title: ClassVar[str] = "Exponential"
    description: ClassVar[str] = "Waiting times - time between events in Poisson process"
    params: ClassVar[Tuple[ParamSpec, ...]] = (
        ParamSpec("Rate (λ)", min=0.1, max=3.0, default=1.0, step=0.1),
    )
    domain: ClassVar[Tuple[float, float]] = (0.0, 10.0)

    def pdf(self, x: float, p1: float, p2: float | None = None) -> float:
        if x < 0:
            return 0.0
        return p1 * math.exp(-p1 * x)

    def cdf(self, x: float, p1: float, p2: float | None = None) -> float:
        if x < 0:
            return 0.0
        return 1.0 - math.exp(-p1 * x)

    def sample(
        self, p1: float, p2: float | None = None, rng: np.random.Generator | None = None
    ) -> float:
        return -math.log(_uniform01(rng)) / p1


@dataclass(frozen=True)
class Uniform(_FamilyBase):
    family: ClassVar[Family] = Family.UNIFORM
    title: ClassVar[str] = "Uniform"
    description: ClassVar[str] = "Equal probability - all values equally likely"
    params: ClassVar[Tuple[ParamSpec, ...]] = (
        ParamSpec("Min (a)", min=-5.0, max=5.0, default=0.0, step=0.1),
        ParamSpec("Max (b)", min=-5.0, max=10.0, default=5.0, step=0.1),
    )
    domain: ClassVar[Tuple[float, float]] = (-6.0, 11.0)

    def pdf(self, x: float, p1: float, p2: float | None = None) -> float:
        a, b = p1, self._second(p2)
        if x < a or x > b:
            return 0.0
        return 1.0 / (b - a)

    def cdf(self, x: float, p1: float, p2: float | None = None) -> float:
        a, b = p1, self._second(p2)
        if x < a:
            return 0.0
        if x > b:
            return 1.0
        return (x - a) / (b - a)

    def sample(
        self, p1: float, p2: float | None = None, rng: np.random.Generator | None = None
    ) -> float:
        rng = rng or np.random.default_rng()
        b = self._second(p2)
        return p1 + float(rng.random()) * (b - p1)

    def validate(self, p1: float, p2: float | None = None) -> None:
        b = self._second(p2)
        super().validate(p1, b)
        if b <= p1:
            raise ValueError(f"uniform: upper bound b={b} must exceed a={p1}")


_CATALOG: Dict[Family, Distribution] = {
    Family.NORMAL: Normal(),
    Family.BINOMIAL: Binomial(),
    Family.POISSON: Poisson(),
    Family.EXPONENTIAL: Exponential(),
    Family.UNIFORM: Uniform(),
}


def get(family: Family | str) -> Distribution:
    """Return the implementation for ``family``.

    Strings are accepted at the configuration boundary and converted to a
    :class:`Family` member once.
    """

    if not isinstance(family, Family):
        try:
            family = Family(str(family).lower())
        except ValueError as exc:
            available = ", ".join(f.value for f in Family)
            raise KeyError(
                f"Unknown distribution {family!r}. Available distributions: {available}"
            ) from exc
    return _CATALOG[family]


def catalog() -> Tuple[Distribution, ...]:
    return tuple(_CATALOG[family] for family in Family)


__all__ = [
    "Binomial",
    "Distribution",
    "Exponential",
    "Family",
    "Normal",
    "Poisson",
    "Uniform",
    "catalog",
    "get",
]
