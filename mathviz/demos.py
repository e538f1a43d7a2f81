"""Preset configurations and the runner behind the command line."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Tuple

import numpy as np

from .core import descent, lagrange, network
from .distributions import stats
from .distributions.families import get as get_distribution
from .reporting.metrics import CsvSink, JsonlSink, MetricsCapture
from .reporting.plots import PlotAdapter, plot_descent, plot_distribution


@dataclass(frozen=True)
class DemoResult:
    """Summary returned by :func:`run_demo`."""

    demo: str
    summary: Mapping[str, object]
    metrics_path: str
    summary_path: str
    plot_path: str = ""


def _distribution_preset(family: str, p1: float, p2: float = 0.0) -> Mapping[str, object]:
    return {
        "demo": {
            "name": "distribution",
            "family": family,
            "p1": p1,
            "p2": p2,
            "sample_size": 1000,
            "show_cdf": False,
        },
        "output": {
            "run_dir": f"runs/{family}-samples",
            "enable_plots": False,
            "seed": 0,
        },
    }


_PRESETS: Dict[str, Mapping[str, object]] = {
    "backprop": {
        "demo": {
            "name": "backprop",
            "inputs": list(network.DEFAULT_INPUT),
            "target": network.DEFAULT_TARGET,
            "learning_rate": network.DEFAULT_LEARNING_RATE,
        },
        "output": {"run_dir": "runs/backprop", "enable_plots": False, "seed": 0},
    },
    "descent-default": {
        "demo": {
            "name": "descent",
            "learning_rate": 0.1,
            "max_steps": 200,
            "start": "reset",
        },
        "output": {"run_dir": "runs/descent-default", "enable_plots": False, "seed": 0},
    },
    "descent-random": {
        "demo": {
            "name": "descent",
            "learning_rate": 0.05,
            "max_steps": 200,
            "start": "random",
        },
        "output": {"run_dir": "runs/descent-random", "enable_plots": False, "seed": 3},
    },
    "descent-divergent": {
        "demo": {
            "name": "descent",
            "learning_rate": 1.05,
            "max_steps": 25,
            "start": "reset",
        },
        "output": {"run_dir": "runs/descent-divergent", "enable_plots": False, "seed": 0},
    },
    "lagrange-sweep": {
        "demo": {"name": "lagrange", "multiplier": lagrange.MULTIPLIER.default},
        "output": {"run_dir": "runs/lagrange-sweep", "enable_plots": False, "seed": 0},
    },
    "normal-samples": _distribution_preset("normal", 0.0, 1.0),
    "binomial-samples": _distribution_preset("binomial", 20, 0.5),
    "poisson-samples": _distribution_preset("poisson", 3.0),
    "exponential-samples": _distribution_preset("exponential", 1.0),
    "uniform-samples": _distribution_preset("uniform", 0.0, 5.0),
}

_PRESET_DIR = Path(__file__).resolve().parents[1] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = {"demo", "output"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(
                        f"Preset {file.name} is missing required sections: {missing_str}"
                    )
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def run_demo(config: Mapping[str, object]) -> DemoResult:
    demo_cfg = dict(config.get("demo", {}))
    output_cfg = dict(config.get("output", {}))
    name = str(demo_cfg.get("name", ""))
    try:
        runner = _RUNNERS[name]
    except KeyError:
        available = ", ".join(sorted(_RUNNERS))
        raise ValueError(f"Unknown demo {name!r}. Available demos: {available}") from None

    seed = int(output_cfg.get("seed", 0))
    run_dir = _resolve_run_dir(output_cfg, name)
    run_dir.mkdir(parents=True, exist_ok=True)
    enable_plots = bool(output_cfg.get("enable_plots", False))

    _print_startup_summary(demo=name, run_dir=run_dir, seed=seed, params=demo_cfg)

    jsonl = JsonlSink(run_dir / "metrics.jsonl", demo=name, seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", demo=name)
    capture = MetricsCapture()
    ctx = _RunContext(
        run_dir=run_dir,
        rng=np.random.default_rng(seed),
        sinks=(jsonl, csv_sink, capture),
        enable_plots=enable_plots,
    )
    summary, plot_path = runner(demo_cfg, ctx)

    summary_path = run_dir / "summary.json"
    summary_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    (run_dir / "config.json").write_text(json.dumps(config, sort_keys=True, indent=2))

    return DemoResult(
        demo=name,
        summary=summary,
        metrics_path=str(jsonl.path),
        summary_path=str(summary_path),
        plot_path=str(plot_path) if plot_path else "",
    )


# ----------------------------------------------------------------------------
# Runners


@dataclass
class _RunContext:
    run_dir: Path
    rng: np.random.Generator
    sinks: tuple
    enable_plots: bool

    def emit(self, step: int, metrics: Mapping[str, float]) -> None:
        for sink in self.sinks:
            sink.on_step(step, metrics)


_Runner = Callable[[Mapping[str, object], _RunContext], Tuple[Dict[str, object], Optional[Path]]]


def _run_backprop(cfg: Mapping[str, object], ctx: _RunContext):
    inputs = [float(v) for v in cfg.get("inputs", network.DEFAULT_INPUT)]
    target = float(cfg.get("target", network.DEFAULT_TARGET))
    lr = float(cfg.get("learning_rate", network.DEFAULT_LEARNING_RATE))

    fwd = network.forward(inputs, target)
    grads = network.backward(fwd, target)
    updated = network.weight_update(network.DEFAULT_NETWORK, grads, lr)
    after = network.forward(inputs, target, updated)

    walkthrough = network.Walkthrough()
    while True:
        ctx.emit(
            walkthrough.stage,
            {
                "stage": walkthrough.stage,
                "loss": fwd.loss,
                "prediction": fwd.prediction,
                "backward": float(walkthrough.in_backward_pass),
            },
        )
        if walkthrough.stage == walkthrough.last_stage:
            break
        walkthrough = walkthrough.advance()

    summary: Dict[str, object] = {
        "loss": fwd.loss,
        "prediction": fwd.prediction,
        "hidden_activations": fwd.activations[1].tolist(),
        "output_delta": grads.deltas[-1].tolist(),
        "hidden_deltas": grads.deltas[0].tolist(),
        "weight_grads": [g.tolist() for g in grads.weight_grads],
        "bias_grads": [g.tolist() for g in grads.bias_grads],
        "updated_weights": [w.tolist() for w in updated.weights],
        "loss_after_update": after.loss,
        "stages": [network.describe_stage(i, fwd)[0] for i in range(len(network.WALKTHROUGH_STAGES))],
    }
    return summary, None


def _run_descent(cfg: Mapping[str, object], ctx: _RunContext):
    lr = float(cfg.get("learning_rate", descent.LEARNING_RATE.default))
    max_steps = int(cfg.get("max_steps", 100))
    start = cfg.get("start", "reset")
    if start == "reset":
        state = descent.reset()
    elif start == "random":
        state = descent.randomize(ctx.rng)
    elif isinstance(start, (list, tuple)) and len(start) == 2:
        state = descent.OptimizerState.at(float(start[0]), float(start[1]))
    else:
        raise ValueError(f"start must be 'reset', 'random' or [x, y], got {start!r}")

    plotter = PlotAdapter(
        ctx.run_dir,
        enable_plots=ctx.enable_plots,
        title=f"Gradient descent, α={lr:g}",
    )
    ctx.emit(0, state.metrics())
    final = descent.descend(state, lr, max_steps, callbacks=[*ctx.sinks, plotter])
    plotter.close()

    plot_path = None
    if ctx.enable_plots:
        plot_path = plot_descent(final, ctx.run_dir / "descent.png")

    summary: Dict[str, object] = {
        "learning_rate": lr,
        "learning_rate_hint": descent.learning_rate_hint(lr),
        "start": list(state.position),
        "position": list(final.position),
        "steps": final.steps,
        "loss": final.loss,
        "converged": final.converged,
        "diverging": descent.is_diverging(final),
        "path_length": len(final.path),
    }
    return summary, plot_path


def _run_lagrange(cfg: Mapping[str, object], ctx: _RunContext):
    spec = lagrange.MULTIPLIER
    chosen = float(cfg.get("multiplier", spec.default))
    count = int(round((spec.max - spec.min) / spec.step)) + 1
    sweep = np.linspace(spec.min, spec.max, count)
    aligned = []
    for idx, lam in enumerate(sweep):
        lam = float(lam)
        ok = lagrange.check_alignment(lam)
        if ok:
            aligned.append(round(lam, 6))
        ctx.emit(
            idx,
            {
                "lambda": lam,
                "alignment_error": lagrange.alignment_error(lam),
                "aligned": float(ok),
                "near_optimal": float(lagrange.is_near_optimal(lam)),
            },
        )

    summary: Dict[str, object] = {
        "solution": list(lagrange.SOLUTION),
        "objective": lagrange.objective(*lagrange.SOLUTION),
        "constraint": lagrange.constraint(*lagrange.SOLUTION),
        "grad_f": list(lagrange.grad_f(*lagrange.SOLUTION)),
        "true_multiplier": lagrange.TRUE_MULTIPLIER,
        "multiplier": chosen,
        "scaled_grad_g": list(lagrange.scaled_constraint_gradient(chosen)),
        "aligned": lagrange.check_alignment(chosen),
        "alignment_error": lagrange.alignment_error(chosen),
        "aligned_multipliers": aligned,
    }
    return summary, None


def _run_distribution(cfg: Mapping[str, object], ctx: _RunContext):
    dist = get_distribution(str(cfg.get("family", "normal")))
    d1, d2 = dist.defaults()
    p1 = float(cfg.get("p1", d1))
    p2 = float(cfg.get("p2", d2))
    dist.validate(p1, p2)
    size = int(cfg.get("sample_size", stats.SAMPLE_SIZE.default))
    if not stats.SAMPLE_SIZE.contains(size):
        raise ValueError(
            f"sample_size={size} outside [{stats.SAMPLE_SIZE.min:g}, {stats.SAMPLE_SIZE.max:g}]"
        )

    samples = stats.draw(dist.family, p1, p2, size, rng=ctx.rng)
    described = stats.describe(samples)
    ctx.emit(0, described.as_dict())
    counts, edges = stats.histogram(samples, dist.domain)
    xs, ys = stats.curve(dist.family, p1, p2, kind="pdf")

    plot_path = None
    if ctx.enable_plots:
        plot_path = plot_distribution(
            dist.family,
            p1,
            p2,
            ctx.run_dir / f"{dist.family.value}.png",
            samples=samples,
            show_cdf=bool(cfg.get("show_cdf", False)),
        )

    summary: Dict[str, object] = {
        "family": dist.family.value,
        "title": dist.title,
        "description": dist.description,
        "params": {spec.name: value for spec, value in zip(dist.params, (p1, p2))},
        "domain": list(dist.domain),
        "statistics": dict(described.as_dict()),
        "histogram": {"counts": counts.tolist(), "edges": edges.tolist()},
        "pdf_peak": float(ys.max()) if ys.size else 0.0,
        "pdf_mass": float(ys.sum()) if dist.discrete else stats.integrate(xs, ys),
    }
    return summary, plot_path


_RUNNERS: Dict[str, _Runner] = {
    "backprop": _run_backprop,
    "descent": _run_descent,
    "lagrange": _run_lagrange,
    "distribution": _run_distribution,
}


def _resolve_run_dir(output_cfg: Mapping[str, object], demo: str) -> Path:
    if "run_dir" in output_cfg:
        return Path(str(output_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / demo


def _print_startup_summary(
    *,
    demo: str,
    run_dir: Path,
    seed: int,
    params: Mapping[str, object],
) -> None:
    shown = {k: v for k, v in params.items() if k != "name"}
    print("=== mathviz run ===")
    print(f"Demo          : {demo}")
    print(f"Parameters    : {json.dumps(shown, sort_keys=True)}")
    print(f"Seed          : {seed}")
    print(f"Run dir       : {run_dir}")
    print("===================")


__all__ = ["DemoResult", "load_preset", "presets", "run_demo"]
