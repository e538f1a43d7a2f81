"""Gradient descent on the paraboloid ``z = x^2 + y^2``."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping

import numpy as np

from .types import Array, ParamSpec, Point, StepCallback

START: Point = (2.0, 2.0)
CONVERGENCE_THRESHOLD = 0.01
RANDOM_HALF_WIDTH = 4.0

LEARNING_RATE = ParamSpec("Learning rate (α)", min=0.001, max=1.0, default=0.1, step=0.001)
FAST_RATE = 0.5
SLOW_RATE = 0.01


def learning_rate_hint(learning_rate: float) -> str:
    """Short guidance shown next to the learning rate control."""

    if learning_rate > FAST_RATE:
        return "Very high"
    if learning_rate < SLOW_RATE:
        return "Very slow"
    return "Good range"


def loss(x: float, y: float) -> float:
    return x * x + y * y


def gradient(x: float, y: float) -> Point:
    return 2.0 * x, 2.0 * y


def gradient_magnitude(x: float, y: float) -> float:
    dx, dy = gradient(x, y)
    return math.sqrt(dx * dx + dy * dy)


@dataclass(frozen=True)
class OptimizerState:
    """Ball position on the surface together with everywhere it has been."""

    position: Point
    path: tuple[Point, ...]
    steps: int = 0

    @classmethod
    def at(cls, x: float, y: float) -> "OptimizerState":
        point = (float(x), float(y))
        return cls(position=point, path=(point,), steps=0)

    @property
    def loss(self) -> float:
        return loss(*self.position)

    @property
    def converged(self) -> bool:
        return self.loss < CONVERGENCE_THRESHOLD

    def metrics(self) -> Mapping[str, float]:
        x, y = self.position
        return {
            "x": x,
            "y": y,
            "loss": self.loss,
            "grad_norm": gradient_magnitude(x, y),
            "converged": float(self.converged),
        }


def reset() -> OptimizerState:
    return OptimizerState.at(*START)


def randomize(rng: np.random.Generator | None = None) -> OptimizerState:
    """Start from a point drawn uniformly from ``[-4, 4]`` on both axes."""

    rng = rng or np.random.default_rng()
    x = (rng.random() - 0.5) * 2 * RANDOM_HALF_WIDTH
    y = (rng.random() - 0.5) * 2 * RANDOM_HALF_WIDTH
    return OptimizerState.at(x, y)


def step(state: OptimizerState, learning_rate: float) -> OptimizerState:
    """Take one descent step; the learning rate is deliberately unbounded."""

    x, y = state.position
    dx, dy = gradient(x, y)
    new_position = (x - learning_rate * dx, y - learning_rate * dy)
    return OptimizerState(
        position=new_position,
        path=state.path + (new_position,),
        steps=state.steps + 1,
    )


def loss_history(state: OptimizerState) -> Array:
    return np.array([loss(x, y) for x, y in state.path], dtype=np.float64)


def is_diverging(state: OptimizerState) -> bool:
    history = loss_history(state)
    return bool(history.size > 1 and history[-1] > history[0])


def descend(
    state: OptimizerState,
    learning_rate: float,
    max_steps: int,
    callbacks: Iterable[StepCallback] = (),
) -> OptimizerState:
    """Drive :func:`step` until convergence or ``max_steps`` transitions.

    Stands in for the periodic timer of an interactive front end; callers
    that own their own timer should call :func:`step` directly.
    """

    callbacks = list(callbacks)
    for _ in range(max(0, max_steps)):
        if state.converged:
            break
        state = step(state, learning_rate)
        metrics = state.metrics()
        for callback in callbacks:
            callback.on_step(state.steps, metrics)
        if not all(math.isfinite(v) for v in state.position):
            break
    return state


__all__ = [
    "CONVERGENCE_THRESHOLD",
    "LEARNING_RATE",
    "OptimizerState",
    "START",
    "descend",
    "gradient",
    "gradient_magnitude",
    "is_diverging",
    "learning_rate_hint",
    "loss",
    "loss_history",
    "randomize",
    "reset",
    "step",
]
