"""Forward and backward pass through the fixed 2-2-1 demonstration network."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence, Tuple

import numpy as np

from .activations import sigmoid, sigmoid_deriv
from .types import Array


@dataclass(frozen=True)
class Network:
    """Fully connected sigmoid network with weights shaped ``(out, in)``."""

    layers: Tuple[int, ...]
    weights: Tuple[Array, ...]
    biases: Tuple[Array, ...]

    def __post_init__(self) -> None:
        if len(self.layers) < 2:
            raise ValueError("Network needs at least an input and an output layer")
        expected = len(self.layers) - 1
        if len(self.weights) != expected or len(self.biases) != expected:
            raise ValueError(
                f"Expected {expected} weight matrices and bias vectors, got "
                f"{len(self.weights)} and {len(self.biases)}"
            )
        for idx, (W, b) in enumerate(zip(self.weights, self.biases)):
            in_dim, out_dim = self.layers[idx], self.layers[idx + 1]
            if W.shape != (out_dim, in_dim):
                raise ValueError(
                    f"W{idx} has shape {W.shape}, expected {(out_dim, in_dim)}"
                )
            if b.shape != (out_dim,):
                raise ValueError(f"b{idx} has shape {b.shape}, expected {(out_dim,)}")

    @classmethod
    def from_lists(
        cls,
        layers: Sequence[int],
        weights: Sequence[Sequence[Sequence[float]]],
        biases: Sequence[Sequence[float]],
    ) -> "Network":
        return cls(
            layers=tuple(int(n) for n in layers),
            weights=tuple(np.asarray(W, dtype=np.float64) for W in weights),
            biases=tuple(np.asarray(b, dtype=np.float64) for b in biases),
        )

    def parameter_count(self) -> int:
        return int(sum(W.size + b.size for W, b in zip(self.weights, self.biases)))


DEFAULT_NETWORK = Network.from_lists(
    layers=[2, 2, 1],
    weights=[
        [[0.5, -0.3], [0.8, 0.2]],
        [[0.6, -0.4]],
    ],
    biases=[[0.1, -0.2], [0.3]],
)
DEFAULT_INPUT: Tuple[float, float] = (0.5, 0.8)
DEFAULT_TARGET = 1.0
DEFAULT_LEARNING_RATE = 0.1


@dataclass(frozen=True)
class ForwardResult:
    """Intermediate values of one forward pass.

    ``activations[0]`` is the input vector, so ``activations[l + 1]`` is the
    output of layer ``l`` and ``pre_activations[l]`` the matching ``z``.
    """

    inputs: Array
    pre_activations: Tuple[Array, ...]
    activations: Tuple[Array, ...]
    loss: float

    @property
    def prediction(self) -> float:
        return float(self.activations[-1][0])


@dataclass(frozen=True)
class BackwardResult:
    """Gradients of the loss with respect to every quantity of the network."""

    deltas: Tuple[Array, ...]
    weight_grads: Tuple[Array, ...]
    bias_grads: Tuple[Array, ...]
    hidden_errors: Tuple[Array, ...]


def forward(
    inputs: Sequence[float] = DEFAULT_INPUT,
    target: float = DEFAULT_TARGET,
    network: Network = DEFAULT_NETWORK,
) -> ForwardResult:
    x = np.asarray(inputs, dtype=np.float64)
    if x.shape != (network.layers[0],):
        raise ValueError(
            f"Network expects {network.layers[0]} inputs, got shape {x.shape}"
        )
    pre: list[Array] = []
    acts: list[Array] = [x]
    a = x
    for W, b in zip(network.weights, network.biases):
        z = W @ a + b
        a = sigmoid(z)
        pre.append(z)
        acts.append(a)
    loss = float(0.5 * np.sum((a - target) ** 2))
    return ForwardResult(
        inputs=x,
        pre_activations=tuple(pre),
        activations=tuple(acts),
        loss=loss,
    )


def backward(
    result: ForwardResult,
    target: float = DEFAULT_TARGET,
    network: Network = DEFAULT_NETWORK,
) -> BackwardResult:
    """Apply the chain rule to ``result`` layer by layer, output first."""

    n_layers = len(network.weights)
    deltas: list[Array] = [np.empty(0)] * n_layers
    weight_grads: list[Array] = [np.empty(0)] * n_layers
    hidden_errors: list[Array] = []

    output = result.activations[-1]
    delta = (output - target) * sigmoid_deriv(result.pre_activations[-1])
    for idx in reversed(range(n_layers)):
        deltas[idx] = delta
        weight_grads[idx] = np.outer(delta, result.activations[idx])
        if idx == 0:
            break
        upstream = network.weights[idx].T @ delta
        hidden_errors.insert(0, upstream)
        delta = upstream * sigmoid_deriv(result.pre_activations[idx - 1])

    return BackwardResult(
        deltas=tuple(deltas),
        weight_grads=tuple(weight_grads),
        bias_grads=tuple(d.copy() for d in deltas),
        hidden_errors=tuple(hidden_errors),
    )


def weight_update(
    network: Network,
    grads: BackwardResult,
    learning_rate: float = DEFAULT_LEARNING_RATE,
) -> Network:
    """Return ``w - lr * dL/dw`` as a new network; ``network`` is untouched."""

    return replace(
        network,
        weights=tuple(W - learning_rate * g for W, g in zip(network.weights, grads.weight_grads)),
        biases=tuple(b - learning_rate * g for b, g in zip(network.biases, grads.bias_grads)),
    )


# ----------------------------------------------------------------------------
# Walkthrough


WALKTHROUGH_STAGES: Tuple[Tuple[str, str], ...] = (
    ("Input Layer", "Feed input values [0.5, 0.8] into the network"),
    ("Hidden Layer - Compute z", "Calculate weighted sum: z = Wx + b"),
    ("Hidden Layer - Activation", "Apply sigmoid: a = σ(z)"),
    ("Output Layer - Compute z", "Calculate weighted sum for output"),
    ("Output Layer - Activation", "Apply sigmoid to get prediction"),
    ("Calculate Loss", "Loss = 0.5(prediction - target)² = {loss:.4f}"),
    ("Output Gradient", "Compute ∂L/∂z for output layer"),
    ("Output Weight Gradients", "Compute ∂L/∂w for output weights"),
    ("Backprop to Hidden", "Flow gradients back to hidden layer"),
    ("Hidden Layer Gradients", "Compute ∂L/∂z for hidden neurons"),
    ("Hidden Weight Gradients", "Compute ∂L/∂w for hidden weights"),
    ("Update Weights", "Apply gradients: w = w - α·∂L/∂w"),
)
LOSS_STAGE = 5
FIRST_BACKWARD_STAGE = 6


def describe_stage(stage: int, result: ForwardResult) -> Tuple[str, str]:
    title, template = WALKTHROUGH_STAGES[stage]
    return title, template.format(loss=result.loss)


@dataclass(frozen=True)
class Walkthrough:
    """Position of the step-by-step backprop walkthrough.

    Every transition returns a new instance; a timer outside this module
    calls :meth:`advance` while ``playing`` is set.
    """

    stage: int = 0
    playing: bool = False

    @property
    def last_stage(self) -> int:
        return len(WALKTHROUGH_STAGES) - 1

    @property
    def in_backward_pass(self) -> bool:
        return self.stage >= FIRST_BACKWARD_STAGE

    def advance(self) -> "Walkthrough":
        if self.stage >= self.last_stage:
            return replace(self, playing=False)
        return replace(self, stage=self.stage + 1)

    def retreat(self) -> "Walkthrough":
        return replace(self, stage=max(0, self.stage - 1))

    def reset(self) -> "Walkthrough":
        return Walkthrough()

    def toggle(self) -> "Walkthrough":
        return replace(self, playing=not self.playing)


__all__ = [
    "BackwardResult",
    "DEFAULT_INPUT",
    "DEFAULT_LEARNING_RATE",
    "DEFAULT_NETWORK",
    "DEFAULT_TARGET",
    "ForwardResult",
    "Network",
    "WALKTHROUGH_STAGES",
    "Walkthrough",
    "backward",
    "describe_stage",
    "forward",
    "weight_update",
]
