"""Probability distribution explorer: families, sampling and statistics."""

from . import families, special, stats
from .families import Family, catalog, get
from .stats import curve, describe, draw, histogram

__all__ = [
    "Family",
    "catalog",
    "curve",
    "describe",
    "draw",
    "families",
    "get",
    "histogram",
    "special",
    "stats",
]
