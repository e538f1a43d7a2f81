"""Core typing contracts for mathviz."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Protocol, Tuple

import numpy as np

Array = np.ndarray
Point = Tuple[float, float]


@dataclass(frozen=True)
class ParamSpec:
    """Bounds and defaults for a single user-adjustable control."""

    name: str
    min: float
    max: float
    default: float
    step: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


class StepCallback(Protocol):
    """Receiver notified after every stepping operation."""

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        """Consume the metrics produced by ``step``."""
