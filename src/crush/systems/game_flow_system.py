"""High-level coordinator for game mode transitions."""
from __future__ import annotations

import logging

from esper import World

from crush.components.game_state import GameMode
from crush.events.bus import (
    EVENT_BONUS_MOVES_GRANTED,
    EVENT_GAME_STARTED,
    EVENT_MOVES_CHANGED,
    EVENT_OUT_OF_MOVES,
    EVENT_TURN_COMPLETED,
    EVENT_VICTORY,
    EventBus,
)
from crush.systems.board_ops import get_config, get_memory_album, get_move_budget
from crush.utils.game_state import get_game_mode, set_game_mode

logger = logging.getLogger(__name__)


class GameFlowSystem:
    """Starts sessions and ends them on victory or when moves run out."""

    def __init__(self, world: World, event_bus: EventBus) -> None:
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TURN_COMPLETED, self._on_turn_completed)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start_game(self, reason: str = "new_game") -> None:
        """Reset the album and move budget, repopulate the board, and enter PLAYING."""
        get_memory_album(self.world).reset()
        budget = get_move_budget(self.world)
        previous = budget.remaining
        budget.reset()
        self.event_bus.emit(EVENT_MOVES_CHANGED, remaining=budget.remaining, delta=budget.remaining - previous)
        logger.info("Starting game (%s) with %d moves", reason, budget.remaining)
        # BoardSystem repopulates on this event.
        self.event_bus.emit(EVENT_GAME_STARTED, reason=reason)
        set_game_mode(self.world, self.event_bus, GameMode.PLAYING)

    def restart(self) -> None:
        self.start_game(reason="restart")

    def grant_bonus_moves(self) -> bool:
        """Accept the out-of-moves offer. Returns False when no offer is pending."""
        if get_game_mode(self.world) != GameMode.OUT_OF_MOVES:
            return False
        amount = get_config(self.world).bonus_moves
        remaining = get_move_budget(self.world).grant(amount)
        self.event_bus.emit(EVENT_BONUS_MOVES_GRANTED, amount=amount, remaining=remaining)
        self.event_bus.emit(EVENT_MOVES_CHANGED, remaining=remaining, delta=amount)
        set_game_mode(self.world, self.event_bus, GameMode.PLAYING)
        return True

    def decline_bonus(self) -> bool:
        """Turn down the out-of-moves offer; the session ends on the victory gallery."""
        if get_game_mode(self.world) != GameMode.OUT_OF_MOVES:
            return False
        self._enter_victory()
        return True

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_turn_completed(self, sender, **payload) -> None:
        report = payload.get("report")
        if report is None or not report.accepted:
            return
        if get_game_mode(self.world) != GameMode.PLAYING:
            return
        if get_memory_album(self.world).is_complete():
            self._enter_victory()
            return
        budget = get_move_budget(self.world)
        if budget.remaining <= 0:
            bonus = get_config(self.world).bonus_moves
            set_game_mode(self.world, self.event_bus, GameMode.OUT_OF_MOVES)
            self.event_bus.emit(EVENT_OUT_OF_MOVES, bonus_moves=bonus)

    def _enter_victory(self) -> None:
        album = get_memory_album(self.world)
        set_game_mode(self.world, self.event_bus, GameMode.VICTORY)
        self.event_bus.emit(EVENT_VICTORY, revealed=album.revealed_count, total=album.total)
