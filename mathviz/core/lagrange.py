"""Lagrange multiplier demo: minimise ``x^2 + y^2`` subject to ``x + y = 2``.

The solution and its multiplier are constants of this one problem; nothing
here solves constrained systems in general.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .types import Array, ParamSpec, Point

SOLUTION: Point = (1.0, 1.0)
TRUE_MULTIPLIER = 2.0
ALIGNMENT_TOLERANCE = 0.5
NEAR_OPTIMAL_TOLERANCE = 0.3

MULTIPLIER = ParamSpec("Lambda (λ)", min=0.0, max=4.0, default=1.5, step=0.1)


def objective(x: float, y: float) -> float:
    return x * x + y * y


def constraint(x: float, y: float) -> float:
    return x + y - 2.0


def grad_f(x: float, y: float) -> Point:
    return 2.0 * x, 2.0 * y


def grad_g(x: float, y: float) -> Point:
    return 1.0, 1.0


def scaled_constraint_gradient(lam: float) -> Point:
    gx, gy = grad_g(*SOLUTION)
    return lam * gx, lam * gy


def alignment_error(lam: float) -> float:
    """Distance between ``∇f`` and ``λ∇g`` at the solution."""

    fx, fy = grad_f(*SOLUTION)
    sx, sy = scaled_constraint_gradient(lam)
    return math.hypot(fx - sx, fy - sy)


def check_alignment(lam: float) -> bool:
    return alignment_error(lam) < ALIGNMENT_TOLERANCE


def is_near_optimal(lam: float) -> bool:
    return abs(lam - TRUE_MULTIPLIER) < NEAR_OPTIMAL_TOLERANCE


def constraint_curve(xs: Sequence[float]) -> Array:
    """Rows of ``(x, y, f(x, y))`` along the line ``y = 2 - x``."""

    x = np.asarray(xs, dtype=np.float64)
    y = 2.0 - x
    return np.column_stack([x, y, x * x + y * y])


__all__ = [
    "ALIGNMENT_TOLERANCE",
    "MULTIPLIER",
    "SOLUTION",
    "TRUE_MULTIPLIER",
    "alignment_error",
    "check_alignment",
    "constraint",
    "constraint_curve",
    "grad_f",
    "grad_g",
    "is_near_optimal",
    "objective",
    "scaled_constraint_gradient",
]
