"""Headless-safe plotting adapters.

matplotlib is imported lazily and forced onto the ``Agg`` backend so that
nothing here needs a display.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import numpy as np

from ..core import descent
from ..distributions import stats
from ..distributions.families import Family, get
from ..distributions.stats import SampleSet


def _pyplot():
    import matplotlib

    matplotlib.use("Agg", force=True)
    import matplotlib.pyplot as plt

    return plt


class PlotAdapter:
    """Track loss and gradient norm per step and optionally chart them.

    Steps whose values are not finite (a diverged descent) are skipped.
    """

    def __init__(
        self,
        run_dir: str | Path,
        enable_plots: bool = False,
        title: str = "Gradient descent",
    ):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.title = title
        self._history: List[Tuple[int, float, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_step(self, step: int, metrics):
        if not self.enable_plots:
            return
        loss = float(metrics.get("loss", 0.0))
        grad_norm = float(metrics.get("grad_norm", 0.0))
        if np.isfinite(loss) and np.isfinite(grad_norm):
            self._history.append((step, loss, grad_norm))

    @property
    def history(self) -> List[Tuple[int, float, float]]:
        return list(self._history)

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        plt = _pyplot()
        steps, losses, grad_norms = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(steps, losses, label="loss x²+y²")
        ax.plot(steps, grad_norms, linestyle="--", label="|∇f|")
        ax.set_xlabel("Step")
        ax.set_ylabel("Value")
        final_step, final_loss, _ = self._history[-1]
        ax.set_title(f"{self.title}: loss {final_loss:.4f} after {final_step} steps")
        ax.legend()
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path

    __call__ = on_step


def plot_descent(state: descent.OptimizerState, path: str | Path, extent: float = 5.0) -> Path:
    """Contour of ``x^2 + y^2`` with the descent path drawn on top."""

    plt = _pyplot()
    grid = np.linspace(-extent, extent, 101)
    X, Y = np.meshgrid(grid, grid)
    fig, ax = plt.subplots()
    ax.contourf(X, Y, X**2 + Y**2, levels=20, cmap="coolwarm")
    pts = np.asarray(state.path, dtype=np.float64)
    ax.plot(pts[:, 0], pts[:, 1], "o-", color="gold", markersize=3)
    ax.plot(*state.position, "o", color="white", markeredgecolor="black")
    ax.set_xlim(-extent, extent)
    ax.set_ylim(-extent, extent)
    ax.set_aspect("equal")
    ax.set_title(f"Gradient descent ({state.steps} steps, loss {state.loss:.4f})")
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out)
    plt.close(fig)
    return out


def plot_distribution(
    family: Family | str,
    p1: float,
    p2: float,
    path: str | Path,
    *,
    samples: SampleSet | None = None,
    show_cdf: bool = False,
) -> Path:
    """Pdf curve of ``family``, plus an optional histogram and cdf."""

    plt = _pyplot()
    dist = get(family)
    fig, ax = plt.subplots()
    if samples is not None and len(samples):
        counts, edges = stats.histogram(samples, dist.domain)
        density = counts / (len(samples) * np.diff(edges))
        ax.bar(edges[:-1], density, width=np.diff(edges), align="edge", alpha=0.4, label="samples")
    xs, ys = stats.curve(dist.family, p1, p2, kind="pdf")
    if dist.discrete:
        ax.vlines(xs, 0, ys, label="pmf")
    else:
        ax.plot(xs, ys, label="pdf")
    if show_cdf:
        cx, cy = stats.curve(dist.family, p1, p2, kind="cdf")
        ax.plot(cx, cy, linestyle="--", label="cdf")
    ax.set_xlim(*dist.domain)
    ax.set_title(dist.title)
    ax.legend()
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out)
    plt.close(fig)
    return out


__all__ = ["PlotAdapter", "plot_descent", "plot_distribution"]
