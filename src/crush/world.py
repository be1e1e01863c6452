import random
from typing import Optional

from esper import World

from crush.components.board import Board
from crush.components.game_state import GameMode, GameState
from crush.components.memory_album import MemoryAlbum
from crush.components.move_budget import MoveBudget
from crush.components.tile_types import TileKinds
from crush.components.turn_state import TurnState
from crush.config import GameConfig
from crush.events.bus import EventBus
from crush.systems.board import BoardSystem
from crush.systems.game_flow_system import GameFlowSystem
from crush.systems.memory_system import MemorySystem
from crush.systems.turn_engine import TurnEngine


def create_world(
    event_bus: EventBus,
    config: Optional[GameConfig] = None,
    *,
    initial_mode: GameMode = GameMode.MENU,
    rng: Optional[random.Random] = None,
) -> World:
    """Build one game session: its components plus the systems wired to event_bus.

    The board is populated on return. Systems are reachable as world attributes
    (turn_engine, board_system, memory_system, game_flow).
    """
    config = config or GameConfig()
    world = World()
    setattr(world, "random", rng or random.Random())

    # Session-wide resources share one entity.
    world.create_entity(
        config,
        GameState(mode=initial_mode),
        TileKinds(kinds=list(config.tile_kinds)),
        MoveBudget(starting=config.starting_moves),
        MemoryAlbum(memories=list(config.memories)),
        TurnState(),
    )
    world.create_entity(Board.create(config.grid_size))

    setattr(world, "turn_engine", TurnEngine(world, event_bus))
    setattr(world, "memory_system", MemorySystem(world, event_bus))
    setattr(world, "board_system", BoardSystem(world, event_bus))
    setattr(world, "game_flow", GameFlowSystem(world, event_bus))
    return world
