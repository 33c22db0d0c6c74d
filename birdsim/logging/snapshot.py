"""
Snapshot manager for the bird simulator.

Saves and loads world state snapshots (JSON) per generation: every bird's
position, heading, speed and satiation, and every food position. Snapshots
are for inspection and plotting; they do not carry brains and cannot
resume a run.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np

from birdsim.core.world import World


class SnapshotManager:
    """
    Saves and loads world state snapshots as JSON files.

    Each snapshot is saved to: {output_dir}/snapshots/gen_{N:04d}.json

    Attributes:
        output_dir: Base output directory for the run.
    """

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)
        self.snapshot_dir = self.output_dir / "snapshots"
        self.snapshot_dir.mkdir(parents=True, exist_ok=True)

    def save(self, world: World, generation: int) -> Path:
        """
        Save a snapshot of the current world state.

        Args:
            world: The simulation world to snapshot.
            generation: Generation number (for filename).

        Returns:
            Path to the saved snapshot file.
        """
        snapshot = self._world_to_dict(world, generation)
        file_path = self.snapshot_dir / f"gen_{generation:04d}.json"

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, indent=2, ensure_ascii=False, default=_json_default)

        return file_path

    def load(self, generation: int) -> dict:
        """
        Load a snapshot for a specific generation.

        Raises:
            FileNotFoundError: If snapshot doesn't exist.
        """
        file_path = self.snapshot_dir / f"gen_{generation:04d}.json"
        if not file_path.exists():
            raise FileNotFoundError(f"Snapshot not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)

    @staticmethod
    def _world_to_dict(world: World, generation: int) -> dict:
        return {
            "generation": generation,
            "tick": world.tick_count,
            "animal_count": world.animal_count,
            "food_count": world.food_count,
            "animals": [a.to_dict() for a in world.animals],
            "foods": [f.to_dict() for f in world.foods],
        }


def _json_default(obj: Any) -> Any:
    """JSON serialization fallback for NumPy types."""
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")
