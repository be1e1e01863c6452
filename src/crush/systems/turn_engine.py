"""Swap validation and cascade resolution for one player turn.

A turn runs synchronously from the swap to a settled, fully populated,
move-legal board. Every step is published on the event bus as it happens
and summarised in the returned TurnReport, so a presentation layer can replay
it at whatever pace it likes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from esper import World

from crush.components.board import Board, FallMove, Position, TileSpawn
from crush.components.tile import Cell
from crush.components.turn_state import TurnPhase
from crush.errors import InternalInvariantViolation, InvalidSwapError
from crush.events.bus import (
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_BOARD_SHUFFLED,
    EVENT_GRAVITY_APPLIED,
    EVENT_HINT_REQUEST,
    EVENT_HINT_SHOWN,
    EVENT_MATCH_FOUND,
    EVENT_MEMORY_UNCOVERED,
    EVENT_MOVES_CHANGED,
    EVENT_REFILL_COMPLETED,
    EVENT_SPECIAL_COMBINATION,
    EVENT_SPECIAL_CREATED,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_REJECTED,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILE_SWAP_VALID,
    EVENT_TILES_CLEARED,
    EVENT_TURN_COMPLETED,
    EVENT_TURN_STARTED,
    EventBus,
)
from crush.systems.board_ops import (
    ensure_playable,
    get_board,
    get_config,
    get_move_budget,
    get_tile_kinds,
    make_refill_bias,
    world_rng,
)
from crush.systems.combo import (
    Combination,
    CombinationType,
    clear_positions_for,
    detect_combination,
    expand_chained_specials,
    special_clear_positions,
)
from crush.systems.match import (
    MatchSet,
    SpecialSpawnRequest,
    are_adjacent,
    find_all_matches,
    find_possible_match,
    would_match,
)
from crush.systems.turn_state_utils import get_or_create_turn_state

logger = logging.getLogger(__name__)

PASS_CAUSE_MATCH = 'match'
PASS_CAUSE_COMBO = 'combo'


class ClearCause(Enum):
    ORDINARY_MATCH = 'ordinary-match'
    SPECIAL_ACTIVATION = 'special-activation'
    COMBO = 'combo'


@dataclass(slots=True)
class ClearEvent:
    position: Position
    cause: ClearCause
    # Visual treatment tag from the combo module; None for plain matches.
    effect: Optional[str] = None


@dataclass(slots=True)
class MemoryUncovered:
    memory_id: int
    position: Position


@dataclass(slots=True)
class CascadePass:
    depth: int
    cause: str
    clears: List[ClearEvent] = field(default_factory=list)
    specials: List[SpecialSpawnRequest] = field(default_factory=list)
    falls: List[FallMove] = field(default_factory=list)
    spawns: List[TileSpawn] = field(default_factory=list)


@dataclass(slots=True)
class TurnReport:
    """Everything one swap did to the board, in the order it happened."""
    src: Position
    dst: Position
    accepted: bool = False
    moves_used: int = 0
    combination: Optional[CombinationType] = None
    passes: List[CascadePass] = field(default_factory=list)
    memories_uncovered: List[MemoryUncovered] = field(default_factory=list)
    shuffles: int = 0
    move_legal: bool = True

    @property
    def cascade_count(self) -> int:
        return len(self.passes)

    @property
    def clears(self) -> List[ClearEvent]:
        return [clear for cascade_pass in self.passes for clear in cascade_pass.clears]

    @property
    def specials_created(self) -> List[SpecialSpawnRequest]:
        return [special for cascade_pass in self.passes for special in cascade_pass.specials]


def _as_position(value: Any) -> Position:
    try:
        row, col = value
        return int(row), int(col)
    except (TypeError, ValueError):
        raise InvalidSwapError(f"Not a board position: {value!r}") from None


class TurnEngine:
    """Drives the Idle -> SwapPending -> Resolving -> Settled state machine."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)
        self.event_bus.subscribe(EVENT_HINT_REQUEST, self.on_hint_request)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if src is None or dst is None:
            return
        try:
            self.player_swap(src, dst)
        except InvalidSwapError as exc:
            logger.warning("Rejected swap %s -> %s: %s", src, dst, exc)
            self.event_bus.emit(EVENT_TILE_SWAP_REJECTED, src=src, dst=dst, reason=str(exc))

    def on_hint_request(self, sender, **kwargs):
        self.request_hint()

    # ------------------------------------------------------------------
    # Inbound interface
    # ------------------------------------------------------------------

    def request_hint(self) -> Optional[Tuple[Position, Position]]:
        pair = find_possible_match(get_board(self.world))
        self.event_bus.emit(EVENT_HINT_SHOWN, positions=list(pair) if pair else None)
        return pair

    def is_move_legal(self) -> bool:
        return find_possible_match(get_board(self.world)) is not None

    def player_swap(self, src: Any, dst: Any) -> TurnReport:
        """Validate and play one swap, cascading until the board settles.

        Raises InvalidSwapError, before touching the board, for out-of-bounds
        or non-adjacent positions, when no moves remain, and for a swap
        arriving mid-resolution. An InternalInvariantViolation during the
        cascade returns the turn to Idle before propagating.
        """
        state = get_or_create_turn_state(self.world)
        if not state.accepting_swaps:
            raise InvalidSwapError(f"Swap rejected while turn is {state.phase.name}")
        board = get_board(self.world)
        src = _as_position(src)
        dst = _as_position(dst)
        if not board.in_bounds(src) or not board.in_bounds(dst):
            raise InvalidSwapError(f"Swap {src} -> {dst} is out of bounds for a {board.size}x{board.size} board")
        if not are_adjacent(src, dst):
            raise InvalidSwapError(f"Swap {src} -> {dst} is not between adjacent tiles")
        if get_move_budget(self.world).remaining <= 0:
            raise InvalidSwapError("No moves remaining")

        report = TurnReport(src=src, dst=dst)
        state.phase = TurnPhase.SWAP_PENDING
        self.event_bus.emit(EVENT_TURN_STARTED, src=src, dst=dst)

        combination = detect_combination(board, src, dst)
        if combination is None and not would_match(board, src, dst):
            logger.debug("Swap %s -> %s makes no match; reverted", src, dst)
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst)
            report.move_legal = find_possible_match(board) is not None
            state.phase = TurnPhase.IDLE
            return self._complete(report)

        board.swap(src, dst)
        report.accepted = True
        report.combination = combination.combination_type if combination else None
        self._consume_move(report)
        self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst, combination=report.combination)

        state.phase = TurnPhase.RESOLVING
        try:
            self._resolve(board, report, combination)
            self._settle(board, report)
        except InternalInvariantViolation:
            state.phase = TurnPhase.IDLE
            state.cascade_depth = 0
            raise
        return self._complete(report)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _resolve(self, board: Board, report: TurnReport, combination: Optional[Combination]) -> None:
        """Single iterative cascade loop; the combo, if any, is its first pass."""
        state = get_or_create_turn_state(self.world)
        max_passes = get_config(self.world).max_cascade_passes
        while True:
            if combination is not None:
                cause = PASS_CAUSE_COMBO
                matches = None
            else:
                cause = PASS_CAUSE_MATCH
                matches = find_all_matches(board)
                if not matches:
                    break
            if len(report.passes) >= max_passes:
                raise InternalInvariantViolation(f"Cascade did not settle within {max_passes} passes")

            depth = len(report.passes) + 1
            state.cascade_depth = depth
            cascade_pass = CascadePass(depth=depth, cause=cause)
            self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, cause=cause)

            if combination is not None:
                cascade_pass.clears = self._combo_clears(board, combination)
                combination = None
            else:
                cascade_pass.clears, cascade_pass.specials = self._match_clears(board, matches, depth)

            self._apply_clears(board, cascade_pass, report)
            self._create_specials(board, cascade_pass.specials)
            self._apply_gravity(board, cascade_pass)
            self._refill(board, cascade_pass)
            report.passes.append(cascade_pass)
            logger.debug(
                "Cascade pass %d (%s): %d cleared, %d specials, %d spawned",
                depth, cause, len(cascade_pass.clears), len(cascade_pass.specials), len(cascade_pass.spawns),
            )

        state.cascade_depth = 0
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=len(report.passes))

    def _combo_clears(self, board: Board, combination: Combination) -> List[ClearEvent]:
        self.event_bus.emit(EVENT_SPECIAL_COMBINATION, combination=combination)
        targets = clear_positions_for(board, combination)
        chained = expand_chained_specials(board, targets, consumed=(combination.pos1, combination.pos2))
        clears = [ClearEvent(t.position, ClearCause.COMBO, t.effect) for t in targets]
        clears.extend(ClearEvent(t.position, ClearCause.SPECIAL_ACTIVATION, t.effect) for t in chained)
        logger.debug(
            "%s combination at %s/%s clears %d (%d chained)",
            combination.combination_type.value, combination.pos1, combination.pos2, len(clears), len(chained),
        )
        return clears

    def _match_clears(
        self, board: Board, matches: MatchSet, depth: int
    ) -> Tuple[List[ClearEvent], List[SpecialSpawnRequest]]:
        """Clear list for an ordinary pass plus the spawns that survive it.

        Matched specials fire their own clear pattern. A spawn is only created
        when its target was not cleared this pass; when two spawns target one
        position the later request wins.
        """
        self.event_bus.emit(
            EVENT_MATCH_FOUND, positions=list(matches.positions), specials=list(matches.specials), depth=depth
        )
        clears = [ClearEvent(pos, ClearCause.ORDINARY_MATCH) for pos in matches.positions]
        cleared: Set[Position] = set(matches.positions)
        for pos in matches.positions:
            cell = board.get(pos)
            if cell is None or not cell.is_special:
                continue
            for target in special_clear_positions(board, pos, cell.special):
                if target.position in cleared:
                    continue
                cleared.add(target.position)
                clears.append(ClearEvent(target.position, ClearCause.SPECIAL_ACTIVATION, target.effect))

        spawns: Dict[Position, SpecialSpawnRequest] = {}
        for request in matches.specials:
            if request.position in cleared:
                logger.debug(
                    "Skipping %s spawn at %s: target cleared this pass", request.special.value, request.position
                )
                continue
            spawns.pop(request.position, None)
            spawns[request.position] = request
        return clears, list(spawns.values())

    def _apply_clears(self, board: Board, cascade_pass: CascadePass, report: TurnReport) -> None:
        uncovered: List[MemoryUncovered] = []
        for clear in cascade_pass.clears:
            cell = board.clear(clear.position)
            if cell is not None and cell.is_memory:
                uncovered.append(MemoryUncovered(memory_id=cell.memory_id, position=clear.position))
        self.event_bus.emit(EVENT_TILES_CLEARED, clears=list(cascade_pass.clears), depth=cascade_pass.depth)
        for memory in uncovered:
            report.memories_uncovered.append(memory)
            self.event_bus.emit(EVENT_MEMORY_UNCOVERED, memory_id=memory.memory_id, position=memory.position)

    def _create_specials(self, board: Board, specials: List[SpecialSpawnRequest]) -> None:
        for request in specials:
            board.set(request.position, Cell(kind=request.kind, special=request.special))
            self.event_bus.emit(
                EVENT_SPECIAL_CREATED, position=request.position, special=request.special, kind=request.kind
            )

    def _apply_gravity(self, board: Board, cascade_pass: CascadePass) -> None:
        for col, column_moves in enumerate(board.compact()):
            cascade_pass.falls.extend(FallMove(col, from_row, to_row) for from_row, to_row in column_moves)
        self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=list(cascade_pass.falls), depth=cascade_pass.depth)

    def _refill(self, board: Board, cascade_pass: CascadePass) -> None:
        rng = world_rng(self.world)
        kinds = get_tile_kinds(self.world)
        bias = make_refill_bias(board, rng, get_config(self.world).refill_bias_probability)
        cascade_pass.spawns = board.fill_empties(lambda: kinds.random_kind(rng), bias)
        if not board.is_full():
            raise InternalInvariantViolation("Board still has empty cells after refill")
        self.event_bus.emit(EVENT_REFILL_COMPLETED, spawns=list(cascade_pass.spawns), depth=cascade_pass.depth)

    def _settle(self, board: Board, report: TurnReport) -> None:
        state = get_or_create_turn_state(self.world)
        if find_possible_match(board) is not None:
            state.phase = TurnPhase.SETTLED_LEGAL
            report.move_legal = True
            return
        state.phase = TurnPhase.SETTLED_NO_MOVES
        logger.info("No moves left after cascade; reshuffling")
        report.shuffles = ensure_playable(
            board, world_rng(self.world), max_attempts=get_config(self.world).max_shuffle_attempts
        )
        self.event_bus.emit(EVENT_BOARD_SHUFFLED, attempts=report.shuffles)
        report.move_legal = True
        state.phase = TurnPhase.SETTLED_LEGAL

    def _consume_move(self, report: TurnReport) -> None:
        budget = get_move_budget(self.world)
        remaining = budget.consume(1)
        report.moves_used = 1
        self.event_bus.emit(EVENT_MOVES_CHANGED, remaining=remaining, delta=-1)

    def _complete(self, report: TurnReport) -> TurnReport:
        state = get_or_create_turn_state(self.world)
        state.last_report = report
        self.event_bus.emit(EVENT_TURN_COMPLETED, report=report)
        return report
