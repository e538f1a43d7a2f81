"""mathviz public API."""

from .core import descent, lagrange, network
from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .demos import DemoResult, load_preset, presets, run_demo
from .distributions import Family, stats
from .distributions import get as get_distribution

__all__ = [
    "DemoResult",
    "Family",
    "activations",
    "descent",
    "get_distribution",
    "lagrange",
    "load_preset",
    "network",
    "presets",
    "run_demo",
    "stats",
    "types",
]
