from __future__ import annotations

import random
from typing import Callable

from esper import World

from crush.components.board import Board
from crush.components.memory_album import Memory
from crush.components.tile import Cell, SpecialKind
from crush.config import GameConfig
from crush.events.bus import EventBus
from crush.systems.board_ops import get_board
from crush.world import create_world

KINDS = ['heart', 'diamond', 'rose', 'star', 'ring']


def filler_kind(row: int, col: int) -> str:
    return KINDS[(row + 2 * col) % len(KINDS)]


def filler_board(size: int = 8) -> Board:
    """Board where no two orthogonal neighbours share a kind.

    It holds no match and no swap on it can create one, so it doubles as a
    stalemate layout.
    """
    board = Board.create(size)
    for row, col in board.positions():
        board.set((row, col), Cell(kind=filler_kind(row, col)))
    return board


def put(board: Board, pos, kind: str, special: SpecialKind = SpecialKind.NONE, memory_id=None) -> None:
    board.set(pos, Cell(kind=kind, special=special, memory_id=memory_id))


def make_config(size: int = 8, *, memories: int = 0, moves: int = 50, **overrides) -> GameConfig:
    return GameConfig(
        grid_size=size,
        starting_moves=moves,
        memories=tuple(Memory(photo=f"photo-{i:02d}.svg", caption=f"memory {i}") for i in range(memories)),
        **overrides,
    )


def make_session(size: int = 8, *, memories: int = 0, moves: int = 50, seed: int = 1234, **overrides):
    bus = EventBus()
    world = create_world(bus, make_config(size, memories=memories, moves=moves, **overrides), rng=random.Random(seed))
    return bus, world


def install(world: World, layout: Board) -> Board:
    """Copy layout's cells into the session board and return the session board."""
    board = get_board(world)
    assert board.size == layout.size
    board.cells = [list(row) for row in layout.cells]
    return board


def capture(bus: EventBus, event: str) -> list[dict]:
    received: list[dict] = []
    bus.subscribe(event, lambda sender, **payload: received.append(payload))
    return received


def capture_names(bus: EventBus, *events: str) -> list[str]:
    names: list[str] = []
    for event in events:
        bus.subscribe(event, _recorder(names, event))
    return names


def _recorder(names: list[str], event: str) -> Callable:
    def record(sender, **payload):
        names.append(event)
    return record
