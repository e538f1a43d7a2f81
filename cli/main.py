"""Command line entry point for the mathviz demos."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

import yaml

from mathviz import demos
from mathviz.distributions.families import Family


def _format_result(result: demos.DemoResult) -> str:
    payload = {
        "demo": result.demo,
        "metrics": result.metrics_path,
        "summary": result.summary_path,
    }
    if result.plot_path:
        payload["plot"] = result.plot_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(demos.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="descent-default",
        help="Preset configuration to execute",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config override"
    )
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write PNG figures to the run directory"
    )
    parser.add_argument("--seed", type=int, help="Seed for random starts and sampling")
    parser.add_argument("--run-dir", type=Path, help="Override the output directory")
    parser.add_argument(
        "--learning-rate",
        type=float,
        help="Learning rate for the backprop and descent demos",
    )
    parser.add_argument(
        "--distribution",
        choices=[family.value for family in Family],
        help="Switch the distribution demo to another family (parameters reset to its defaults)",
    )
    parser.add_argument("--p1", type=float, help="First distribution parameter")
    parser.add_argument("--p2", type=float, help="Second distribution parameter")
    parser.add_argument("--sample-size", type=int, help="Number of samples to draw")
    parser.add_argument("--multiplier", type=float, help="Lambda for the Lagrange demo")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        return yaml.safe_load(text) or {}
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def _apply_flags(config: dict, args: argparse.Namespace) -> dict:
    demo_cfg = config.setdefault("demo", {})
    output_cfg = config.setdefault("output", {})

    if args.distribution:
        demo_cfg.clear()
        demo_cfg.update({"name": "distribution", "family": args.distribution})
    if args.learning_rate is not None:
        demo_cfg["learning_rate"] = float(args.learning_rate)
    if args.p1 is not None:
        demo_cfg["p1"] = float(args.p1)
    if args.p2 is not None:
        demo_cfg["p2"] = float(args.p2)
    if args.sample_size is not None:
        demo_cfg["sample_size"] = int(args.sample_size)
    if args.multiplier is not None:
        demo_cfg["multiplier"] = float(args.multiplier)

    if args.enable_plots:
        output_cfg["enable_plots"] = True
    if args.seed is not None:
        output_cfg["seed"] = int(args.seed)
    if args.run_dir is not None:
        output_cfg["run_dir"] = str(args.run_dir)
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(demos.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = json.loads(json.dumps(demos.load_preset(args.preset)))

    if args.config:
        override = _load_override(args.config)
        if {"demo", "output"} <= set(override.keys()) and "name" in override["demo"]:
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    config = _apply_flags(config, args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = demos.run_demo(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
