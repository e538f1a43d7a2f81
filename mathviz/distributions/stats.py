"""Sample sets, descriptive statistics and curve helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Sequence, Tuple

import numpy as np

from ..core.types import Array, ParamSpec
from .families import Family, get

DEFAULT_BINS = 40
DEFAULT_POINTS = 201
SAMPLE_SIZE = ParamSpec("Sample size", min=100, max=5000, default=1000, step=100)


@dataclass(frozen=True)
class SampleSet:
    """Values drawn for one parameter setting, in draw order."""

    family: Family
    p1: float
    p2: float
    values: Array

    def __len__(self) -> int:
        return int(self.values.size)


@dataclass(frozen=True)
class SampleStats:
    mean: float
    std: float
    median: float
    min: float
    max: float
    count: int

    def as_dict(self) -> Mapping[str, float]:
        return {
            "mean": self.mean,
            "std": self.std,
            "median": self.median,
            "min": self.min,
            "max": self.max,
            "count": float(self.count),
        }


def draw(
    family: Family | str,
    p1: float,
    p2: float | None = None,
    size: int = 1000,
    rng: np.random.Generator | None = None,
) -> SampleSet:
    dist = get(family)
    if p2 is None:
        p2 = dist.defaults()[1]
    rng = rng or np.random.default_rng()
    values = np.fromiter(
        (dist.sample(p1, p2, rng) for _ in range(int(size))),
        dtype=np.float64,
        count=int(size),
    )
    return SampleSet(family=dist.family, p1=p1, p2=p2, values=values)


def describe(samples: SampleSet | Sequence[float] | Array) -> SampleStats:
    """Population statistics of ``samples``.

    The median is the upper midpoint ``sorted[n // 2]`` rather than the mean
    of the two middle values.
    """

    values = samples.values if isinstance(samples, SampleSet) else np.asarray(samples, dtype=np.float64)
    if values.size == 0:
        raise ValueError("Cannot describe an empty sample set")
    ordered = np.sort(values)
    mean = float(np.mean(values))
    variance = float(np.mean((values - mean) ** 2))
    return SampleStats(
        mean=mean,
        std=math.sqrt(variance),
        median=float(ordered[values.size // 2]),
        min=float(ordered[0]),
        max=float(ordered[-1]),
        count=int(values.size),
    )


def histogram(
    samples: SampleSet | Sequence[float] | Array,
    domain: Tuple[float, float],
    bins: int = DEFAULT_BINS,
) -> Tuple[Array, Array]:
    """Return ``(counts, edges)``; samples outside ``[lo, hi)`` are dropped."""

    values = samples.values if isinstance(samples, SampleSet) else np.asarray(samples, dtype=np.float64)
    lo, hi = domain
    width = (hi - lo) / bins
    idx = np.floor((values - lo) / width).astype(np.int64)
    idx = idx[(idx >= 0) & (idx < bins)]
    counts = np.bincount(idx, minlength=bins)
    edges = lo + width * np.arange(bins + 1, dtype=np.float64)
    return counts, edges


def curve(
    family: Family | str,
    p1: float,
    p2: float | None = None,
    *,
    kind: str = "pdf",
    points: int = DEFAULT_POINTS,
) -> Tuple[Array, Array]:
    """Evaluate the pdf or cdf across the family's display domain.

    Discrete families are evaluated at the integers of the domain, since
    their mass is zero everywhere else. ``p2`` defaults to the family's
    own default.
    """

    dist = get(family)
    if p2 is None:
        p2 = dist.defaults()[1]
    if kind not in {"pdf", "cdf"}:
        raise ValueError(f"kind must be 'pdf' or 'cdf', got {kind!r}")
    lo, hi = dist.domain
    if dist.discrete and kind == "pdf":
        xs = np.arange(math.ceil(lo), math.floor(hi) + 1, dtype=np.float64)
    else:
        xs = np.linspace(lo, hi, points)
    fn = dist.pdf if kind == "pdf" else dist.cdf
    ys = np.array([fn(float(x), p1, p2) for x in xs], dtype=np.float64)
    return xs, ys


def integrate(xs: Array, ys: Array) -> float:
    trapezoid = getattr(np, "trapezoid", None)
    if callable(trapezoid):
        return float(trapezoid(ys, xs))
    return float(np.trapz(ys, xs))


__all__ = [
    "SAMPLE_SIZE",
    "SampleSet",
    "SampleStats",
    "curve",
    "describe",
    "draw",
    "histogram",
    "integrate",
]
