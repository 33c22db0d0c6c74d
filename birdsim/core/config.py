"""
Configuration system for the bird simulator.

Provides a hierarchical dataclass-based config with JSON serialization,
validation, and sensible defaults for all simulation parameters.
"""

from __future__ import annotations

import json
import math
import warnings
from copy import deepcopy
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any


# ---------------------------------------------------------------------------
# Sub-config dataclasses (grouped by domain)
# ---------------------------------------------------------------------------

@dataclass
class WorldConfig:
    """Arena population and seeding."""
    seed: int = 42
    animal_count: int = 40
    food_count: int = 60

    def validate(self) -> list[str]:
        errors = []
        if self.animal_count < 0:
            errors.append(f"world.animal_count must be >= 0, got {self.animal_count}")
        if self.food_count < 0:
            errors.append(f"world.food_count must be >= 0, got {self.food_count}")
        if self.animal_count > 100_000:
            errors.append(f"world.animal_count must be <= 100000, got {self.animal_count}")
        return errors


@dataclass
class EyeConfig:
    """Field-of-view sensor settings."""
    fov_range: float = 0.25
    fov_angle: float = math.pi + math.pi / 4
    cells: int = 9

    def validate(self) -> list[str]:
        errors = []
        if self.fov_range <= 0:
            errors.append(f"eye.fov_range must be > 0, got {self.fov_range}")
        if self.fov_angle <= 0:
            errors.append(f"eye.fov_angle must be > 0, got {self.fov_angle}")
        if self.cells < 1:
            errors.append(f"eye.cells must be >= 1, got {self.cells}")
        return errors


@dataclass
class AnimalConfig:
    """Kinematic limits applied when resolving controller commands."""
    initial_speed: float = 0.002
    speed_min: float = 0.001
    speed_max: float = 0.005
    speed_accel: float = 0.2
    rotation_accel: float = math.pi / 2

    def validate(self) -> list[str]:
        errors = []
        if self.speed_min < 0:
            errors.append(f"animal.speed_min must be >= 0, got {self.speed_min}")
        if self.speed_min > self.speed_max:
            errors.append("animal.speed_min must be <= speed_max")
        if not (self.speed_min <= self.initial_speed <= self.speed_max):
            errors.append(
                f"animal.initial_speed must be in [{self.speed_min}, {self.speed_max}], "
                f"got {self.initial_speed}"
            )
        if self.speed_accel < 0:
            errors.append(f"animal.speed_accel must be >= 0, got {self.speed_accel}")
        if self.rotation_accel < 0:
            errors.append(f"animal.rotation_accel must be >= 0, got {self.rotation_accel}")
        return errors


@dataclass
class GeneticsConfig:
    """Mutation parameters for the genetic algorithm."""
    mutation_chance: float = 0.01
    mutation_coeff: float = 0.3

    def validate(self) -> list[str]:
        errors = []
        if not (0.0 <= self.mutation_chance <= 1.0):
            errors.append(f"genetics.mutation_chance must be in [0, 1], got {self.mutation_chance}")
        if self.mutation_coeff < 0:
            errors.append(f"genetics.mutation_coeff must be >= 0, got {self.mutation_coeff}")
        return errors


@dataclass
class GenerationConfig:
    """Generation lifecycle parameters."""
    gen_length: int = 2500  # ticks per generation

    def validate(self) -> list[str]:
        errors = []
        if self.gen_length < 1:
            errors.append(f"generation.gen_length must be >= 1, got {self.gen_length}")
        return errors


@dataclass
class OutputConfig:
    """Run output settings."""
    output_dir: str = "runs"
    snapshot_every_gen: bool = True

    def validate(self) -> list[str]:
        errors = []
        if not self.output_dir:
            errors.append("output.output_dir must not be empty")
        return errors


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

@dataclass
class SimConfig:
    """
    Top-level simulation configuration.

    All parameters are adjustable. Nested dataclasses group related settings.
    Load from JSON with `load_config()`, validate with `validate()`.
    """
    world: WorldConfig = field(default_factory=WorldConfig)
    eye: EyeConfig = field(default_factory=EyeConfig)
    animal: AnimalConfig = field(default_factory=AnimalConfig)
    genetics: GeneticsConfig = field(default_factory=GeneticsConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def validate(self) -> list[str]:
        """Validate all config sections. Returns list of error messages (empty = valid)."""
        errors = []
        for f in fields(self):
            sub = getattr(self, f.name)
            if hasattr(sub, "validate"):
                errors.extend(sub.validate())
        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to nested dict for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimConfig:
        """Create SimConfig from nested dict, merging with defaults."""
        config = cls()
        _merge_section(config, data, "")
        return config

    def copy(self) -> SimConfig:
        """Deep copy of this config."""
        return deepcopy(self)


# ---------------------------------------------------------------------------
# Value checking and merging
# ---------------------------------------------------------------------------

def _is_section(value: Any) -> bool:
    return hasattr(value, "__dataclass_fields__")


def _checked_value(current: Any, value: Any, path: str) -> Any:
    """
    Return `value` converted to the type of the field's current value.

    ints widen to float; nothing else is converted (a JSON string "5" is not
    a cell count, and bools are not numbers here).

    Raises:
        ValueError: If the value has the wrong type.
    """
    expected = type(current)
    if expected is bool:
        ok = isinstance(value, bool)
    elif expected is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif expected is float:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    else:
        ok = isinstance(value, expected)

    if not ok:
        raise ValueError(
            f"{path} expects {expected.__name__}, got {type(value).__name__} {value!r}"
        )
    return float(value) if expected is float else value


def _merge_section(section: Any, data: Any, prefix: str) -> None:
    """
    Recursively merge a JSON object into a config section.

    Unknown keys emit a warning and are skipped; wrongly typed values raise.
    """
    if not isinstance(data, dict):
        raise ValueError(f"{prefix or 'config'} must be a JSON object, got {data!r}")

    known = {f.name for f in fields(section)}
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else key
        if key not in known:
            warnings.warn(
                f"Unknown config key '{path}' in section {type(section).__name__} - ignored.",
                UserWarning,
                stacklevel=3,
            )
            continue

        current = getattr(section, key)
        if _is_section(current):
            _merge_section(current, value, path)
        else:
            setattr(section, key, _checked_value(current, value, path))


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------

def load_config(path: str | Path) -> SimConfig:
    """
    Load config from a JSON file. Missing fields use defaults.

    Raises:
        FileNotFoundError: If path doesn't exist.
        json.JSONDecodeError: If JSON is malformed.
        ValueError: If a value has the wrong type or fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        config = SimConfig.from_dict(json.load(f))

    errors = config.validate()
    if errors:
        raise ValueError("Invalid configuration:\n" + "\n".join(f"  - {e}" for e in errors))
    return config


def save_config(config: SimConfig, path: str | Path) -> None:
    """Write config as indented JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)


def get_default_config() -> SimConfig:
    """Return a fresh default config (all defaults, validated)."""
    config = SimConfig()
    errors = config.validate()
    assert not errors, f"Default config is invalid: {errors}"
    return config


def apply_param_override(config: SimConfig, dotted_key: str, value: Any) -> None:
    """
    Set one leaf value by dotted path, e.g. ("eye.cells", 11).

    Raises:
        KeyError: If the path is unknown or names a whole section.
        ValueError: If the value has the wrong type for the field.
    """
    *sections, leaf = dotted_key.split(".")
    section: Any = config
    for name in sections:
        if name not in {f.name for f in fields(section)}:
            raise KeyError(f"Config path '{dotted_key}': no section '{name}'")
        section = getattr(section, name)
        if not _is_section(section):
            raise KeyError(f"Config path '{dotted_key}': '{name}' is a value, not a section")

    if not _is_section(section) or leaf not in {f.name for f in fields(section)}:
        raise KeyError(f"Config path '{dotted_key}': no field '{leaf}'")

    current = getattr(section, leaf)
    if _is_section(current):
        raise KeyError(f"Config path '{dotted_key}' names a section; set one of its fields instead")
    setattr(section, leaf, _checked_value(current, value, dotted_key))
