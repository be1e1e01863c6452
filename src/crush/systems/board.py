import logging
from typing import Optional, Tuple

from esper import World

from crush.components.game_state import GameMode
from crush.components.turn_state import TurnPhase
from crush.events.bus import (
    EventBus,
    EVENT_BOARD_POPULATED,
    EVENT_BOARD_SHUFFLED,
    EVENT_GAME_STARTED,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAP_REQUEST,
)
from crush.systems.board_ops import (
    ensure_playable,
    get_board,
    get_config,
    get_memory_album,
    get_tile_kinds,
    populate_board,
    world_rng,
)
from crush.systems.match import are_adjacent
from crush.systems.memory_system import generate_memory_positions
from crush.systems.turn_state_utils import get_or_create_turn_state
from crush.utils.game_state import get_game_mode

logger = logging.getLogger(__name__)


class BoardSystem:
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.selected: Optional[Tuple[int, int]] = None
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_GAME_STARTED, self.on_game_started)
        self._init_board()

    def _init_board(self):
        board = get_board(self.world)
        rng = world_rng(self.world)
        config = get_config(self.world)
        memories = generate_memory_positions(board.size, get_memory_album(self.world).total, rng)
        populate_board(board, get_tile_kinds(self.world), rng, memories, attempts=config.generation_attempts)
        shuffles = ensure_playable(board, rng, max_attempts=config.max_shuffle_attempts)
        if shuffles:
            self.event_bus.emit(EVENT_BOARD_SHUFFLED, attempts=shuffles)
        state = get_or_create_turn_state(self.world)
        state.phase = TurnPhase.IDLE
        state.cascade_depth = 0
        state.last_report = None
        self.selected = None
        logger.debug("Populated %dx%d board with %d memory tiles", board.size, board.size, len(memories))
        self.event_bus.emit(EVENT_BOARD_POPULATED, size=board.size, memory_positions=sorted(memories))

    def on_game_started(self, sender, **kwargs):
        self._init_board()

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        # Input is only live while playing and between turns
        if get_game_mode(self.world) != GameMode.PLAYING:
            return
        if not get_or_create_turn_state(self.world).accepting_swaps:
            return
        if not get_board(self.world).in_bounds((row, col)):
            return
        if self.selected is None:
            self.selected = (row, col)
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)
        elif self.selected == (row, col):
            self.clear_selection(reason='same_tile')
        elif self.is_adjacent(self.selected, (row, col)):
            src = self.selected
            dst = (row, col)
            self.selected = None
            self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=src, dst=dst)
        else:
            # Change selection to new tile
            self.selected = (row, col)
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)

    def clear_selection(self, reason: str = 'cleared'):
        prev = self.selected
        if prev is None:
            return
        self.selected = None
        self.event_bus.emit(EVENT_TILE_DESELECTED, reason=reason, prev_row=prev[0], prev_col=prev[1])

    @staticmethod
    def is_adjacent(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        return are_adjacent(a, b)
