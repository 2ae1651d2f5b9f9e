"""
Offline pipeline for a scenario JSON file:
embedding summary, heatmap cells and the greedy simulation for one day.

Usage:
    python scripts/simulate_scenario.py scenario.json --day 0 --feature service_stop_time
"""

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

# Ensure project root is in sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import get_settings
from config.logging_setup import setup_logging
from spe.analysis_layer.heatmap import aggregate_heatmap
from spe.analysis_layer.spectral_embedding import SpectralEmbedder
from spe.data_layer.models import Scenario
from spe.simulation_layer.engine import SimulationEngine


def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Embed, map and simulate one scenario")
    parser.add_argument("scenario", type=Path, help="Scenario JSON document")
    parser.add_argument("--day", type=int, default=0, help="Cycle day to map and simulate")
    parser.add_argument("--feature", default="service_stop_time", help="Heatmap feature")
    parser.add_argument(
        "--h3-level", type=int, default=settings.simulation.h3_resolution, help="Heatmap H3 resolution"
    )
    parser.add_argument("--save", action="store_true", help="Persist the scenario and its embedding")
    parser.add_argument("--output", type=Path, default=None, help="Write full results as JSON")
    args = parser.parse_args()

    setup_logging()
    scenario = Scenario.model_validate_json(args.scenario.read_text(encoding="utf-8"))
    print(f"Scenario '{scenario.name}': {len(scenario.agents)} agents, {len(scenario.accounts)} accounts")

    embedding = SpectralEmbedder().embed(scenario)
    print(f"Embedding: {len(embedding.embedding)} dims")
    for name, (start, end) in embedding.offsets.items():
        print(f"  {name:<26} [{start:>4}, {end:>4})")

    cells = aggregate_heatmap(scenario, args.feature, args.day, args.h3_level)
    print(f"Heatmap '{args.feature}' day {args.day}: {len(cells)} cells")
    for cell in cells[:10]:
        print(f"  {cell.h3}  ({cell.lat:.5f}, {cell.lng:.5f})  {cell.value:.3f}")

    result = SimulationEngine.from_settings().run(scenario, args.day)
    stats = result.stats
    print(f"Simulation day {args.day}:")
    print(f"  vehicles: {stats.reps_used_per_day[0]}")
    print(f"  travel: {stats.total_travel_sec / 60:.1f} min, service: {stats.total_service_sec / 60:.1f} min")
    print(f"  unassigned: {stats.unassigned_stops}")
    print(f"  optimizer: {'yes' if result.optimizer_output is not None else 'not available'}")

    if args.save:
        from spe.data_layer.vector_store import get_vector_store

        store = get_vector_store()
        scenario_id = store.save_scenario(scenario)
        embedding_id = store.add_embedding(scenario_id, embedding.embedding)
        print(f"Saved scenario {scenario_id}, embedding {embedding_id}")

    if args.output:
        payload = {
            "embedding": embedding.to_dict(),
            "heatmap": [asdict(cell) for cell in cells],
            "simulation": {
                "vroom_input": result.optimizer_input.to_dict(),
                "vroom_output": result.optimizer_output,
                "stats": stats.to_dict(),
                "vector": result.vector,
            },
        }
        args.output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Results written to {args.output}")


if __name__ == "__main__":
    main()
