"""
Bird Simulator CLI entry point

Usage:
    python main.py --config config/default_config.json
    python main.py --generations 20 --seed 7
    python main.py --set eye.cells=11 --set generation.gen_length=1000
"""

import argparse
import json
import sys
import time
from typing import Any


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Bird Simulator: evolve field-of-view foragers on a torus",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --config config/default_config.json          Run with a config file
  python main.py --generations 50 --seed 1                    Run 50 generations
  python main.py --set eye.fov_range=0.4 --set eye.cells=5    Override single values
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to JSON config file (default: built-in defaults)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override random seed (overrides config value)",
    )
    parser.add_argument(
        "--generations",
        type=int,
        default=10,
        help="Number of generations to simulate (default: 10)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Override output directory",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a config value with dot notation, e.g. eye.cells=11 (repeatable)",
    )

    return parser.parse_args(argv)


def parse_override(text: str) -> tuple[str, Any]:
    """Split 'a.b=value'; the value is parsed as JSON when possible."""
    if "=" not in text:
        raise ValueError(f"Override must look like key=value, got '{text}'")
    key, raw = text.split("=", 1)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key.strip(), value


def run_simulation(config_path: str | None, seed_override: int | None = None,
                   generations: int = 10, output_dir: str | None = None,
                   overrides: list[str] | None = None) -> None:
    """Run a simulation for a fixed number of generations."""
    from birdsim.core.config import apply_param_override, get_default_config, load_config
    from birdsim.simulation.engine import SimulationEngine
    from birdsim.simulation.metrics import MetricsCollector
    from birdsim.logging.run_manager import RunManager

    config = load_config(config_path) if config_path else get_default_config()

    for text in overrides or []:
        key, value = parse_override(text)
        apply_param_override(config, key, value)

    if seed_override is not None:
        config.world.seed = seed_override

    errors = config.validate()
    if errors:
        print("Error: invalid configuration:")
        for e in errors:
            print(f"  - {e}")
        sys.exit(1)

    out_dir = output_dir or config.output.output_dir

    print(f"[Bird Simulator]")
    print(f"  Config: {config_path or '(defaults)'}")
    print(f"  Birds: {config.world.animal_count}  Foods: {config.world.food_count}")
    print(f"  Eye: range={config.eye.fov_range} angle={config.eye.fov_angle:.3f} cells={config.eye.cells}")
    print(f"  Seed: {config.world.seed}")
    print(f"  Generations: {generations} x {config.generation.gen_length} ticks")
    print(f"  Output: {out_dir}")
    print()

    engine = SimulationEngine(config)
    run_manager = RunManager(config, MetricsCollector(config), base_dir=out_dir)

    start_time = time.time()

    def on_generation(gen_number: int, eng: SimulationEngine) -> None:
        kpis = run_manager.record_generation(
            eng.world,
            eng.generation_manager.get_last_gen_stats(),
            eng.get_accumulated_stats(),
        )
        eng.reset_accumulated_stats()
        print(
            f"  Gen {gen_number:4d} | min={kpis['min_fitness']:5.1f} "
            f"max={kpis['max_fitness']:5.1f} avg={kpis['avg_fitness']:6.2f} "
            f"diversity={kpis['brain_diversity']:.3f}"
        )

    engine.on_generation = on_generation
    run_manager.start(engine.world)

    result = engine.run(max_generations=generations)
    summary = run_manager.finalize(result, time.time() - start_time)

    print()
    print(f"[Result]")
    print(f"  Ticks: {result.total_ticks}")
    print(f"  Generations: {result.total_generations}")
    print(f"  Food eaten: {result.total_food_eaten}")
    print(f"  Best avg fitness: {summary['best_avg_fitness']:.2f}")
    print(f"  Elapsed: {summary['elapsed_seconds']:.1f}s")
    print(f"  Output saved to: {run_manager.run_dir}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    if args.generations < 1:
        print("Error: --generations must be >= 1")
        sys.exit(1)

    try:
        run_simulation(
            args.config,
            seed_override=args.seed,
            generations=args.generations,
            output_dir=args.output,
            overrides=args.overrides,
        )
    except (FileNotFoundError, ValueError, KeyError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
