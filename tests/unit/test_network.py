from dataclasses import replace

import numpy as np
import pytest

from mathviz.core import network
from mathviz.core.activations import sigmoid, sigmoid_deriv


def test_sigmoid_derivative_uses_pre_activation():
    z = np.array([-2.0, 0.0, 0.11, 3.0])
    s = sigmoid(z)
    assert np.allclose(sigmoid_deriv(z), s * (1 - s))
    assert sigmoid_deriv(np.array([0.0]))[0] == pytest.approx(0.25)


def test_forward_regression_loss():
    result = network.forward([0.5, 0.8], 1.0)
    assert round(result.loss, 4) == 0.0824
    assert result.prediction == pytest.approx(0.5941, abs=1e-4)
    assert np.allclose(result.pre_activations[0], [0.11, 0.36])
    assert [a.shape for a in result.activations] == [(2,), (2,), (1,)]


def test_forward_rejects_wrong_input_size():
    with pytest.raises(ValueError):
        network.forward([0.5, 0.8, 0.1])


def test_network_shape_validation():
    with pytest.raises(ValueError):
        network.Network.from_lists(
            layers=[2, 2, 1],
            weights=[[[0.5, -0.3], [0.8, 0.2]], [[0.6], [-0.4]]],
            biases=[[0.1, -0.2], [0.3]],
        )
    with pytest.raises(ValueError):
        network.Network.from_lists(
            layers=[2, 2, 1],
            weights=[[[0.5, -0.3], [0.8, 0.2]], [[0.6, -0.4]]],
            biases=[[0.1], [0.3]],
        )


def _loss_with(weights, biases):
    net = replace(network.DEFAULT_NETWORK, weights=tuple(weights), biases=tuple(biases))
    return network.forward(network.DEFAULT_INPUT, network.DEFAULT_TARGET, net).loss


def test_backward_matches_finite_differences():
    base = network.DEFAULT_NETWORK
    grads = network.backward(network.forward())
    eps = 1e-6
    for layer, W in enumerate(base.weights):
        assert grads.weight_grads[layer].shape == W.shape
        for idx in np.ndindex(W.shape):
            plus = [w.copy() for w in base.weights]
            minus = [w.copy() for w in base.weights]
            plus[layer][idx] += eps
            minus[layer][idx] -= eps
            numeric = (_loss_with(plus, base.biases) - _loss_with(minus, base.biases)) / (2 * eps)
            assert grads.weight_grads[layer][idx] == pytest.approx(numeric, abs=1e-8)
    for layer, b in enumerate(base.biases):
        for idx in np.ndindex(b.shape):
            plus = [v.copy() for v in base.biases]
            minus = [v.copy() for v in base.biases]
            plus[layer][idx] += eps
            minus[layer][idx] -= eps
            numeric = (_loss_with(base.weights, plus) - _loss_with(base.weights, minus)) / (2 * eps)
            assert grads.bias_grads[layer][idx] == pytest.approx(numeric, abs=1e-8)


def test_backward_chain_rule_terms():
    fwd = network.forward()
    grads = network.backward(fwd)
    out_delta = (fwd.prediction - 1.0) * sigmoid_deriv(fwd.pre_activations[-1])
    assert np.allclose(grads.deltas[-1], out_delta)
    assert np.allclose(grads.weight_grads[1], out_delta * fwd.activations[1])
    expected_hidden = network.DEFAULT_NETWORK.weights[1][0] * out_delta[0]
    assert np.allclose(grads.hidden_errors[0], expected_hidden)
    assert np.allclose(
        grads.weight_grads[0], np.outer(grads.deltas[0], [0.5, 0.8])
    )


def test_weight_update_is_presentational():
    before = [w.copy() for w in network.DEFAULT_NETWORK.weights]
    fwd = network.forward()
    grads = network.backward(fwd)
    updated = network.weight_update(network.DEFAULT_NETWORK, grads, 0.1)
    for original, current in zip(before, network.DEFAULT_NETWORK.weights):
        assert np.array_equal(original, current)
    assert np.allclose(updated.weights[1], before[1] - 0.1 * grads.weight_grads[1])
    assert network.forward(network=updated).loss < fwd.loss


def test_walkthrough_transitions():
    walk = network.Walkthrough().toggle()
    assert walk.playing
    for _ in range(20):
        walk = walk.advance()
    assert walk.stage == len(network.WALKTHROUGH_STAGES) - 1
    assert not walk.playing
    assert walk.in_backward_pass
    assert walk.retreat().stage == walk.stage - 1
    assert walk.reset() == network.Walkthrough()
    assert network.Walkthrough().retreat().stage == 0


def test_loss_stage_reports_value():
    title, text = network.describe_stage(5, network.forward())
    assert title == "Calculate Loss"
    assert text.endswith("0.0824")
