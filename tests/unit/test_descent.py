import numpy as np
import pytest

from mathviz.core import descent
from mathviz.reporting.metrics import MetricsCapture


@pytest.mark.parametrize("x, y", [(0.0, 0.0), (1.5, -2.25), (-3.0, 4.0), (1e-3, 7.5)])
def test_gradient_closed_form(x, y):
    assert descent.gradient(x, y) == (2 * x, 2 * y)


def test_reset_state():
    state = descent.reset()
    assert state.position == (2.0, 2.0)
    assert state.path == ((2.0, 2.0),)
    assert state.steps == 0
    assert not state.converged


def test_loss_strictly_decreases_for_small_learning_rate():
    state = descent.reset()
    for _ in range(10):
        nxt = descent.step(state, 0.1)
        assert nxt.loss < state.loss
        state = nxt
    assert state.steps == 10


def test_step_appends_to_path():
    state = descent.reset()
    nxt = descent.step(state, 0.25)
    assert nxt.position == pytest.approx((1.0, 1.0))
    assert nxt.path[:-1] == state.path
    assert nxt.path[-1] == nxt.position
    assert state.path == ((2.0, 2.0),)


def test_descend_stops_on_convergence():
    capture = MetricsCapture()
    final = descent.descend(descent.reset(), 0.1, max_steps=500, callbacks=[capture])
    assert final.converged
    assert final.steps == 15
    assert len(final.path) == 16
    assert len(capture.history) == 15
    assert capture.last["converged"] == 1.0


def test_converged_state_is_not_stepped():
    state = descent.OptimizerState.at(0.01, 0.01)
    assert descent.descend(state, 0.1, max_steps=10) is state


def test_large_learning_rate_diverges_without_error():
    final = descent.descend(descent.reset(), 1.05, max_steps=20)
    history = descent.loss_history(final)
    assert final.steps == 20
    assert descent.is_diverging(final)
    assert np.all(np.diff(history) > 0)


def test_randomize_range():
    rng = np.random.default_rng(0)
    for _ in range(200):
        state = descent.randomize(rng)
        x, y = state.position
        assert -4.0 <= x <= 4.0
        assert -4.0 <= y <= 4.0
        assert state.path == (state.position,)
        assert state.steps == 0


def test_gradient_magnitude():
    assert descent.gradient_magnitude(3.0, 4.0) == pytest.approx(10.0)


def test_diverging_step_reaches_callbacks():
    capture = MetricsCapture()
    final = descent.descend(descent.reset(), 1e200, max_steps=10, callbacks=[capture])
    assert final.steps == 2
    assert len(capture.history) == 2
    assert capture.history[-1][0] == final.steps
    assert not np.isfinite(capture.last["x"])


@pytest.mark.parametrize(
    "rate, hint",
    [(0.001, "Very slow"), (0.01, "Good range"), (0.1, "Good range"), (0.5, "Good range"), (0.75, "Very high")],
)
def test_learning_rate_hint(rate, hint):
    assert descent.learning_rate_hint(rate) == hint
