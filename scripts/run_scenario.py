"""CLI for running offline elevator fleet scenarios defined in JSON configs."""
from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from dispatch import CustomAlgorithm
from simulation import Simulation, SimulationConfig


def build_simulation(config: Dict) -> Simulation:
    sim_cfg = dict(config.get("config", {}))
    algorithm_cfg = config.get("algorithm", {})
    if algorithm_cfg.get("path"):
        sim_cfg["algorithm"] = CustomAlgorithm.from_import_path(algorithm_cfg["path"])
    elif algorithm_cfg.get("name"):
        sim_cfg["algorithm"] = algorithm_cfg["name"]

    return Simulation(
        SimulationConfig(**sim_cfg),
        metrics_hook_interval=config.get("metrics_hook_interval", 10),
    )


def _apply_scheduled_calls(
    simulation: Simulation, calls: Iterable[Dict], window_end: float
) -> None:
    for call in calls:
        if simulation.current_time <= call.get("time", 0.0) < window_end:
            simulation.request(call["origin"], call["direction"])


def run_simulation(simulation: Simulation, config: Dict) -> List[Dict]:
    duration = config.get("duration_sec", 300.0)
    dt = config.get("tick_sec", 0.1)
    calls = config.get("calls", [])
    snapshots: List[Dict] = []

    simulation.on_event("metrics", lambda payload: snapshots.append(asdict(payload["metrics"])))
    for _ in range(int(round(duration / dt))):
        _apply_scheduled_calls(simulation, calls, simulation.current_time + dt)
        simulation.step(dt)
    return snapshots


def save_results(output_path: Optional[Path], data: Dict) -> None:
    if not output_path:
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="Path to a JSON scenario configuration file")
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional file path to write statistics snapshots as JSON",
    )
    parser.add_argument("--verbose", action="store_true", help="Log dispatch and stop details")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    config = json.loads(args.config.read_text())
    simulation = build_simulation(config)
    snapshots = run_simulation(simulation, config)

    final_stats = asdict(simulation.stats())
    results = {
        "scenario": config.get("name", args.config.stem),
        "description": config.get("description"),
        "duration_sec": config.get("duration_sec", 300.0),
        "algorithm": simulation.algorithm.name,
        "final_stats": final_stats,
        "stats_over_time": snapshots,
    }

    save_results(args.output, results)

    print(f"Scenario: {results['scenario']}")
    if results["description"]:
        print(results["description"])
    print(f"Algorithm: {results['algorithm']}")
    print(f"Duration: {results['duration_sec']} s")
    print("Final statistics:")
    for key, value in final_stats.items():
        print(f"  {key}: {value}")
    if args.output:
        print(f"Saved statistics to {args.output}")


if __name__ == "__main__":
    main()
