"""Special-tile activation and special+special combination rules."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Set

from crush.components.board import Board, Position
from crush.components.tile import SpecialKind

# Visual treatment tags for the animator; the engine never branches on them.
EFFECT_ROW = 'clearing-row'
EFFECT_COLUMN = 'clearing-column'
EFFECT_AREA = 'exploding'
EFFECT_CROSS = 'clearing-cross'
EFFECT_GIANT_CROSS = 'clearing-giant-cross'
EFFECT_MEGA = 'mega-exploding'


class CombinationType(Enum):
    STRIPED_STRIPED = 'striped-striped'
    STRIPED_WRAPPED = 'striped-wrapped'
    WRAPPED_WRAPPED = 'wrapped-wrapped'
    NONE = 'none'


@dataclass(slots=True)
class Combination:
    pos1: Position
    pos2: Position
    kind1: SpecialKind
    kind2: SpecialKind
    combination_type: CombinationType


@dataclass(slots=True)
class ClearTarget:
    position: Position
    effect: str


class _TargetCollector:
    """Ordered, deduplicated, bounds-clipped accumulation of clear targets."""

    def __init__(self, board: Board, seen: Optional[Set[Position]] = None):
        self.board = board
        self.seen: Set[Position] = set(seen or ())
        self.targets: List[ClearTarget] = []

    def add(self, row: int, col: int, effect: str) -> None:
        pos = (row, col)
        if pos in self.seen or not self.board.in_bounds(pos):
            return
        self.seen.add(pos)
        self.targets.append(ClearTarget(pos, effect))

    def add_row(self, row: int, effect: str) -> None:
        for col in range(self.board.size):
            self.add(row, col, effect)

    def add_column(self, col: int, effect: str) -> None:
        for row in range(self.board.size):
            self.add(row, col, effect)

    def add_square(self, center: Position, radius: int, effect: str) -> None:
        for dr in range(-radius, radius + 1):
            for dc in range(-radius, radius + 1):
                self.add(center[0] + dr, center[1] + dc, effect)


def combination_type_for(kind1: SpecialKind, kind2: SpecialKind) -> CombinationType:
    wrapped = SpecialKind.AREA_CLEAR
    if kind1.is_line_clear and kind2.is_line_clear:
        return CombinationType.STRIPED_STRIPED
    if (kind1.is_line_clear and kind2 is wrapped) or (kind1 is wrapped and kind2.is_line_clear):
        return CombinationType.STRIPED_WRAPPED
    if kind1 is wrapped and kind2 is wrapped:
        return CombinationType.WRAPPED_WRAPPED
    return CombinationType.NONE


def detect_combination(board: Board, pos1: Position, pos2: Position) -> Optional[Combination]:
    """Return a Combination when both positions hold special tiles, else None.

    A special next to a normal tile is not a combination; it simply activates
    when matched during the cascade.
    """
    cell1 = board.get(pos1)
    cell2 = board.get(pos2)
    if cell1 is None or cell2 is None or not (cell1.is_special and cell2.is_special):
        return None
    return Combination(
        pos1=pos1,
        pos2=pos2,
        kind1=cell1.special,
        kind2=cell2.special,
        combination_type=combination_type_for(cell1.special, cell2.special),
    )


def clear_positions_for(board: Board, combination: Combination) -> List[ClearTarget]:
    collector = _TargetCollector(board)
    pos1, pos2 = combination.pos1, combination.pos2
    kind = combination.combination_type
    if kind is CombinationType.STRIPED_STRIPED:
        # Row and column through each of the two tiles.
        for pos in (pos1, pos2):
            collector.add_row(pos[0], EFFECT_CROSS)
            collector.add_column(pos[1], EFFECT_CROSS)
    elif kind is CombinationType.STRIPED_WRAPPED:
        for offset in (-1, 0, 1):
            collector.add_row(pos1[0] + offset, EFFECT_GIANT_CROSS)
        for offset in (-1, 0, 1):
            collector.add_column(pos1[1] + offset, EFFECT_GIANT_CROSS)
    elif kind is CombinationType.WRAPPED_WRAPPED:
        collector.add_square(pos1, 2, EFFECT_MEGA)
    return collector.targets


def special_clear_positions(board: Board, pos: Position, special: SpecialKind) -> List[ClearTarget]:
    """Positions cleared when a single special tile at pos activates."""
    collector = _TargetCollector(board)
    if special is SpecialKind.ROW_CLEAR:
        collector.add_row(pos[0], EFFECT_ROW)
    elif special is SpecialKind.COLUMN_CLEAR:
        collector.add_column(pos[1], EFFECT_COLUMN)
    elif special is SpecialKind.AREA_CLEAR:
        collector.add_square(pos, 1, EFFECT_AREA)
    return collector.targets


def expand_chained_specials(
    board: Board,
    targets: Iterable[ClearTarget],
    consumed: Iterable[Position] = (),
) -> List[ClearTarget]:
    """Extra targets produced by specials caught inside targets, chained transitively.

    consumed positions (the combined pair) never re-activate. Only the new
    positions are returned, in activation order.
    """
    initial = list(targets)
    collector = _TargetCollector(board, seen=(t.position for t in initial))
    activated: Set[Position] = set(consumed)
    queue: List[Position] = [t.position for t in initial]
    index = 0
    while index < len(queue):
        pos = queue[index]
        index += 1
        if pos in activated:
            continue
        cell = board.get(pos)
        if cell is None or not cell.is_special:
            continue
        activated.add(pos)
        before = len(collector.targets)
        for target in special_clear_positions(board, pos, cell.special):
            collector.add(target.position[0], target.position[1], target.effect)
        queue.extend(t.position for t in collector.targets[before:])
    return collector.targets
