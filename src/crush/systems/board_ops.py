from __future__ import annotations

import logging
import random
from typing import Mapping, Optional, Type, TypeVar

from esper import World

from crush.components.board import BiasFn, Board, Position
from crush.components.memory_album import MemoryAlbum
from crush.components.move_budget import MoveBudget
from crush.components.tile_types import TileKinds
from crush.config import GameConfig
from crush.constants import GENERATION_ATTEMPTS, MAX_SHUFFLE_ATTEMPTS, REFILL_BIAS_RADIUS
from crush.errors import InternalInvariantViolation
from crush.systems.match import find_all_matches, find_possible_match

logger = logging.getLogger(__name__)

C = TypeVar("C")


def _single_component(world: World, component_type: Type[C]) -> C:
    for _, component in world.get_component(component_type):
        return component
    raise RuntimeError(f"{component_type.__name__} component not found")


def get_board(world: World) -> Board:
    return _single_component(world, Board)


def get_tile_kinds(world: World) -> TileKinds:
    return _single_component(world, TileKinds)


def get_move_budget(world: World) -> MoveBudget:
    return _single_component(world, MoveBudget)


def get_memory_album(world: World) -> MemoryAlbum:
    return _single_component(world, MemoryAlbum)


def get_config(world: World) -> GameConfig:
    for _, config in world.get_component(GameConfig):
        return config
    return GameConfig()


def world_rng(world: World) -> random.Random:
    rng = getattr(world, "random", None)
    if isinstance(rng, random.Random):
        return rng
    rng = random.Random()
    setattr(world, "random", rng)
    return rng


def helpful_kind_for(board: Board, pos: Position, radius: int = REFILL_BIAS_RADIUS) -> Optional[str]:
    """Kind of the first memory tile found in the square window around pos (row-major)."""
    row, col = pos
    for dr in range(-radius, radius + 1):
        for dc in range(-radius, radius + 1):
            cell = board.get((row + dr, col + dc))
            if cell is not None and cell.is_memory:
                return cell.kind
    return None


def make_refill_bias(board: Board, rng: random.Random, probability: float) -> BiasFn:
    """Bias a refill toward nearby memory tiles' kinds with the given probability."""

    def bias(pos: Position) -> Optional[str]:
        if rng.random() < probability:
            return helpful_kind_for(board, pos)
        return None

    return bias


def populate_board(
    board: Board,
    kinds: TileKinds,
    rng: random.Random,
    memories: Optional[Mapping[Position, int]] = None,
    *,
    attempts: int = GENERATION_ATTEMPTS,
) -> None:
    board.generate(lambda: kinds.random_kind(rng), memories, max_attempts=attempts)


def ensure_playable(
    board: Board,
    rng: random.Random,
    *,
    max_attempts: int = MAX_SHUFFLE_ATTEMPTS,
) -> int:
    """Reshuffle until the board has no immediate match and at least one move.

    Returns the number of shuffles performed (0 when a move already exists).
    """
    if find_possible_match(board) is not None:
        return 0
    for attempt in range(1, max_attempts + 1):
        board.shuffle(rng)
        if find_all_matches(board):
            continue
        if find_possible_match(board) is None:
            continue
        logger.info("Board reshuffled after %d attempt(s)", attempt)
        return attempt
    raise InternalInvariantViolation(f"Unable to reshuffle board into a playable state in {max_attempts} attempts")
