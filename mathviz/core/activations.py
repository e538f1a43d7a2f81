"""Activation utilities for mathviz."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid ``1 / (1 + e^-x)``."""

    return 1.0 / (1.0 + np.exp(-x))


def sigmoid_deriv(z: Array) -> Array:
    """Derivative of :func:`sigmoid` evaluated at the pre-activation ``z``."""

    s = sigmoid(z)
    return s * (1.0 - s)
