from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set, Tuple

from crush.components.board import Board, Position
from crush.components.tile import SpecialKind
from crush.constants import AREA_CLEAR_RUN_LENGTH, LINE_CLEAR_RUN_LENGTH, MIN_RUN_LENGTH


@dataclass(slots=True)
class SpecialSpawnRequest:
    position: Position
    special: SpecialKind
    kind: str


@dataclass(slots=True)
class MatchSet:
    """Result of a full scan: unique matched positions plus specials to create.

    positions are kept in row-major order so callers that record uncovered
    memory tiles get a stable discovery order.
    """
    positions: List[Position] = field(default_factory=list)
    specials: List[SpecialSpawnRequest] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.positions)

    def __len__(self) -> int:
        return len(self.positions)

    def __contains__(self, pos: object) -> bool:
        return pos in self.positions

    def __iter__(self) -> Iterator[Position]:
        return iter(self.positions)


def find_all_matches(board: Board) -> MatchSet:
    """Detect every horizontal or vertical run of three or more same-kind tiles."""
    matched: Set[Position] = set()
    specials: List[SpecialSpawnRequest] = []
    size = board.size

    # Horizontal runs
    for row in range(size):
        start = 0
        for col in range(1, size + 1):
            if col < size and _same_kind(board, (row, col), (row, col - 1)):
                continue
            length = col - start
            if length >= MIN_RUN_LENGTH:
                matched.update((row, c) for c in range(start, col))
                spawn = _spawn_for_run(length, SpecialKind.ROW_CLEAR)
                if spawn is not None:
                    middle = (row, start + length // 2)
                    specials.append(SpecialSpawnRequest(middle, spawn, board.kind_at((row, start))))
            start = col

    # Vertical runs
    for col in range(size):
        start = 0
        for row in range(1, size + 1):
            if row < size and _same_kind(board, (row, col), (row - 1, col)):
                continue
            length = row - start
            if length >= MIN_RUN_LENGTH:
                matched.update((r, col) for r in range(start, row))
                spawn = _spawn_for_run(length, SpecialKind.COLUMN_CLEAR)
                if spawn is not None:
                    middle = (start + length // 2, col)
                    specials.append(SpecialSpawnRequest(middle, spawn, board.kind_at((start, col))))
            start = row

    positions = sorted(matched)
    # L and T shapes come last so an area clear supersedes a line clear at the same spot.
    specials.extend(find_lt_shapes(board, positions))
    return MatchSet(positions=positions, specials=specials)


def find_lt_shapes(board: Board, matched: List[Position]) -> List[SpecialSpawnRequest]:
    """Area-clear spawns at every matched position anchoring both a horizontal and a vertical run.

    Only exact-position duplicates are collapsed; two intersections of one
    connected shape each yield their own spawn.
    """
    specials: List[SpecialSpawnRequest] = []
    checked: Set[Position] = set()
    for pos in matched:
        if pos in checked:
            continue
        kind = board.kind_at(pos)
        if kind is None:
            continue
        horizontal, vertical = run_lengths_through(board, pos)
        if horizontal >= MIN_RUN_LENGTH and vertical >= MIN_RUN_LENGTH:
            specials.append(SpecialSpawnRequest(pos, SpecialKind.AREA_CLEAR, kind))
            checked.add(pos)
    return specials


def run_lengths_through(board: Board, pos: Position) -> Tuple[int, int]:
    """Lengths of the contiguous same-kind runs through pos, horizontally and vertically."""
    kind = board.kind_at(pos)
    if kind is None:
        return 0, 0
    horizontal = 1 + _count_from(board, pos, 0, -1, kind) + _count_from(board, pos, 0, 1, kind)
    vertical = 1 + _count_from(board, pos, -1, 0, kind) + _count_from(board, pos, 1, 0, kind)
    return horizontal, vertical


def has_match_at(board: Board, pos: Position) -> bool:
    """Return True if a run of three or more passes through pos."""
    horizontal, vertical = run_lengths_through(board, pos)
    return horizontal >= MIN_RUN_LENGTH or vertical >= MIN_RUN_LENGTH


def would_match(board: Board, a: Position, b: Position) -> bool:
    """Return True if swapping a and b would create a match.

    Two specials always make a legal swap. Otherwise the swap is applied,
    both positions are checked, and the swap is reverted no matter what.
    """
    cell_a = board.get(a)
    cell_b = board.get(b)
    if cell_a is not None and cell_b is not None and cell_a.is_special and cell_b.is_special:
        return True
    board.swap(a, b)
    try:
        return has_match_at(board, a) or has_match_at(board, b)
    finally:
        board.swap(a, b)


def find_possible_match(board: Board) -> Optional[Tuple[Position, Position]]:
    """First swap (row-major, right neighbour then down neighbour) that would match."""
    size = board.size
    for row in range(size):
        for col in range(size):
            pos = (row, col)
            if col + 1 < size and would_match(board, pos, (row, col + 1)):
                return pos, (row, col + 1)
            if row + 1 < size and would_match(board, pos, (row + 1, col)):
                return pos, (row + 1, col)
    return None


def are_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def _same_kind(board: Board, a: Position, b: Position) -> bool:
    kind = board.kind_at(a)
    return kind is not None and kind == board.kind_at(b)


def _count_from(board: Board, pos: Position, dr: int, dc: int, kind: str) -> int:
    count = 0
    row, col = pos[0] + dr, pos[1] + dc
    while board.kind_at((row, col)) == kind:
        count += 1
        row += dr
        col += dc
    return count


def _spawn_for_run(length: int, line_special: SpecialKind) -> Optional[SpecialKind]:
    if length >= AREA_CLEAR_RUN_LENGTH:
        return SpecialKind.AREA_CLEAR
    if length == LINE_CLEAR_RUN_LENGTH:
        return line_special
    return None
