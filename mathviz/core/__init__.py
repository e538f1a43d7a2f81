"""Numerical primitives behind the mathviz demos."""

from . import activations, descent, lagrange, network, types

__all__ = ["activations", "descent", "lagrange", "network", "types"]
