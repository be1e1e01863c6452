"""
Configuration Loader
====================

Loads game_config.yaml and clamps it into a GameConfig the engine can trust.
Out-of-range integers are clamped and unparsable ones fall back to defaults;
structural problems (bad kind list, too many memories) are ConfigurationErrors.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml

from crush.components.memory_album import Memory
from crush.constants import (
    DEFAULT_BONUS_MOVES,
    DEFAULT_GRID_SIZE,
    DEFAULT_STARTING_MOVES,
    DEFAULT_TILE_KINDS,
    GENERATION_ATTEMPTS,
    MAX_CASCADE_PASSES,
    MAX_GRID_SIZE,
    MAX_SHUFFLE_ATTEMPTS,
    MAX_STARTING_MOVES,
    MIN_GRID_SIZE,
    MIN_STARTING_MOVES,
    MIN_TILE_KINDS,
    REFILL_BIAS_PROBABILITY,
)
from crush.errors import ConfigurationError

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "game_config.yaml")


@dataclass(frozen=True)
class GameConfig:
    """
    Complete session configuration.

    All values are immutable to prevent accidental modification during runtime.
    """
    grid_size: int = DEFAULT_GRID_SIZE
    starting_moves: int = DEFAULT_STARTING_MOVES
    bonus_moves: int = DEFAULT_BONUS_MOVES
    tile_kinds: Tuple[str, ...] = DEFAULT_TILE_KINDS
    memories: Tuple[Memory, ...] = ()
    refill_bias_probability: float = REFILL_BIAS_PROBABILITY
    generation_attempts: int = GENERATION_ATTEMPTS
    max_cascade_passes: int = MAX_CASCADE_PASSES
    max_shuffle_attempts: int = MAX_SHUFFLE_ATTEMPTS


def safe_int(value: Any, minimum: int, maximum: int, default: int) -> int:
    """Parse value as an integer clamped to [minimum, maximum]; default when unparsable."""
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(minimum, min(maximum, number))


def safe_probability(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return max(0.0, min(1.0, number))


def _parse_tile_kinds(raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return DEFAULT_TILE_KINDS
    if not isinstance(raw, (list, tuple)):
        raise ConfigurationError(f"tile_kinds must be a list of names, got {raw!r}")
    kinds = tuple(str(kind).strip() for kind in raw)
    if any(not kind for kind in kinds) or len(set(kinds)) != len(kinds):
        raise ConfigurationError(f"tile_kinds must be unique non-empty names, got {list(kinds)!r}")
    if len(kinds) < MIN_TILE_KINDS:
        raise ConfigurationError(f"At least {MIN_TILE_KINDS} tile kinds are required, got {len(kinds)}")
    return kinds


def _parse_memories(raw: Any) -> Tuple[Memory, ...]:
    """Keep well-formed entries only; each must name a photo."""
    if not isinstance(raw, list):
        return ()
    memories = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        photo = str(entry.get("photo") or "").strip()
        if not photo:
            continue
        caption = entry.get("caption")
        memories.append(Memory(photo=photo, caption=caption if isinstance(caption, str) else ""))
    return tuple(memories)


def validate_game_config(raw: Optional[dict]) -> GameConfig:
    """Build a GameConfig from an untrusted mapping (e.g. parsed YAML)."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration must be a mapping, got {type(raw).__name__}")
    settings = raw.get("settings") or {}
    if not isinstance(settings, dict):
        raise ConfigurationError("'settings' must be a mapping")
    engine = raw.get("engine") or {}
    if not isinstance(engine, dict):
        raise ConfigurationError("'engine' must be a mapping")

    config = GameConfig(
        grid_size=safe_int(settings.get("grid_size"), MIN_GRID_SIZE, MAX_GRID_SIZE, DEFAULT_GRID_SIZE),
        starting_moves=safe_int(
            settings.get("starting_moves"), MIN_STARTING_MOVES, MAX_STARTING_MOVES, DEFAULT_STARTING_MOVES
        ),
        bonus_moves=safe_int(settings.get("bonus_moves"), 1, MAX_STARTING_MOVES, DEFAULT_BONUS_MOVES),
        tile_kinds=_parse_tile_kinds(settings.get("tile_kinds")),
        memories=_parse_memories(raw.get("memories")),
        refill_bias_probability=safe_probability(engine.get("refill_bias_probability"), REFILL_BIAS_PROBABILITY),
        generation_attempts=safe_int(engine.get("generation_attempts"), 1, 1000, GENERATION_ATTEMPTS),
        max_cascade_passes=safe_int(engine.get("max_cascade_passes"), 1, 10000, MAX_CASCADE_PASSES),
        max_shuffle_attempts=safe_int(engine.get("max_shuffle_attempts"), 1, 1000000, MAX_SHUFFLE_ATTEMPTS),
    )
    _validate_config(config)
    return config


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    cells = config.grid_size * config.grid_size
    if len(config.memories) > cells:
        raise ConfigurationError(
            f"{len(config.memories)} memories do not fit on a {config.grid_size}x{config.grid_size} board"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to a YAML file. If None, uses the bundled default.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If the file's structure is invalid.
    """
    path = Path(config_path or DEFAULT_CONFIG_PATH)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    return validate_game_config(raw)
