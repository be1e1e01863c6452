from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from crush.components.tile import Cell
from crush.constants import GENERATION_ATTEMPTS, MAX_GRID_SIZE, MIN_GRID_SIZE
from crush.errors import ConfigurationError

Position = Tuple[int, int]
KindFn = Callable[[], str]
BiasFn = Callable[[Position], Optional[str]]


@dataclass(slots=True)
class FallMove:
    col: int
    from_row: int
    to_row: int


@dataclass(slots=True)
class TileSpawn:
    position: Position
    kind: str
    # Index within the column's spawn batch; the animator staggers on this.
    delay: int


@dataclass(slots=True)
class Board:
    """Square grid of tile cells owned by a single session.

    Row 0 is the top of the board; gravity pulls toward the highest row index.
    Reads never raise: out-of-bounds positions read as absent (None), the same
    value an empty cell holds.
    """
    size: int
    cells: List[List[Optional[Cell]]] = field(default_factory=list)

    @classmethod
    def create(cls, size: int) -> "Board":
        if not isinstance(size, int) or not MIN_GRID_SIZE <= size <= MAX_GRID_SIZE:
            raise ConfigurationError(
                f"Board size must be between {MIN_GRID_SIZE} and {MAX_GRID_SIZE}, got {size!r}"
            )
        return cls(size=size, cells=[[None] * size for _ in range(size)])

    def in_bounds(self, pos: Position) -> bool:
        row, col = pos
        return 0 <= row < self.size and 0 <= col < self.size

    def get(self, pos: Position) -> Optional[Cell]:
        if not self.in_bounds(pos):
            return None
        return self.cells[pos[0]][pos[1]]

    def kind_at(self, pos: Position) -> Optional[str]:
        cell = self.get(pos)
        return cell.kind if cell is not None else None

    def set(self, pos: Position, cell: Optional[Cell]) -> bool:
        """Store cell (or None to empty it). Returns False, untouched, when out of bounds."""
        if not self.in_bounds(pos):
            return False
        self.cells[pos[0]][pos[1]] = cell
        return True

    def clear(self, pos: Position) -> Optional[Cell]:
        """Empty the position and return what it held."""
        cell = self.get(pos)
        if cell is not None:
            self.cells[pos[0]][pos[1]] = None
        return cell

    def positions(self) -> Iterator[Position]:
        """Every position in row-major order."""
        for row in range(self.size):
            for col in range(self.size):
                yield (row, col)

    def neighbors4(self, pos: Position) -> List[Position]:
        row, col = pos
        neighbors: List[Position] = []
        for dr, dc in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            candidate = (row + dr, col + dc)
            if self.in_bounds(candidate):
                neighbors.append(candidate)
        return neighbors

    def swap(self, a: Position, b: Position) -> None:
        # No adjacency check: probing code swaps and reverts freely.
        (ar, ac), (br, bc) = a, b
        self.cells[ar][ac], self.cells[br][bc] = self.cells[br][bc], self.cells[ar][ac]

    def compact(self) -> List[List[Tuple[int, int]]]:
        """Let tiles fall into empty cells below them.

        Returns, per column, the (from_row, to_row) moves that happened, listed
        bottom-up in the order they were applied.
        """
        moves: List[List[Tuple[int, int]]] = []
        for col in range(self.size):
            column_moves: List[Tuple[int, int]] = []
            target = self.size - 1
            for row in range(self.size - 1, -1, -1):
                cell = self.cells[row][col]
                if cell is None:
                    continue
                if row != target:
                    self.cells[target][col] = cell
                    self.cells[row][col] = None
                    column_moves.append((row, target))
                target -= 1
            moves.append(column_moves)
        return moves

    def empty_positions(self) -> List[Position]:
        """Empty cells column by column, top to bottom (spawn stagger order)."""
        return [
            (row, col)
            for col in range(self.size)
            for row in range(self.size)
            if self.cells[row][col] is None
        ]

    def fill_empties(self, random_kind: KindFn, bias: Optional[BiasFn] = None) -> List[TileSpawn]:
        spawned: List[TileSpawn] = []
        batch: Dict[int, int] = {}
        for pos in self.empty_positions():
            kind = random_kind()
            if bias is not None:
                preferred = bias(pos)
                if preferred is not None:
                    kind = preferred
            self.cells[pos[0]][pos[1]] = Cell(kind=kind)
            delay = batch.get(pos[1], 0)
            batch[pos[1]] = delay + 1
            spawned.append(TileSpawn(position=pos, kind=kind, delay=delay))
        return spawned

    def is_full(self) -> bool:
        return all(cell is not None for row in self.cells for cell in row)

    def generate(
        self,
        random_kind: KindFn,
        memories: Optional[Mapping[Position, int]] = None,
        *,
        max_attempts: int = GENERATION_ATTEMPTS,
    ) -> None:
        """Populate every cell so that no run of three exists at the start.

        Each cell only looks backward at already-placed neighbours. After
        max_attempts colliding candidates the last one is kept, tolerating a
        rare starting match instead of looping forever.
        """
        memories = memories or {}
        self.cells = [[None] * self.size for _ in range(self.size)]
        for row in range(self.size):
            for col in range(self.size):
                kind = random_kind()
                attempts = 1
                while attempts < max_attempts and self._would_create_initial_match(row, col, kind):
                    kind = random_kind()
                    attempts += 1
                self.cells[row][col] = Cell(kind=kind, memory_id=memories.get((row, col)))

    def _would_create_initial_match(self, row: int, col: int, kind: str) -> bool:
        if col >= 2 and self.kind_at((row, col - 1)) == kind and self.kind_at((row, col - 2)) == kind:
            return True
        if row >= 2 and self.kind_at((row - 1, col)) == kind and self.kind_at((row - 2, col)) == kind:
            return True
        return False

    def shuffle(self, rng: random.Random) -> None:
        """Permute every cell's full contents in place (Fisher-Yates)."""
        contents = [cell for row in self.cells for cell in row]
        rng.shuffle(contents)
        self.cells = [contents[row * self.size:(row + 1) * self.size] for row in range(self.size)]

    def snapshot(self) -> Tuple[Tuple[Optional[Tuple[str, str, Optional[int]]], ...], ...]:
        """Immutable copy of the grid contents for comparisons."""
        return tuple(
            tuple(
                (cell.kind, cell.special.value, cell.memory_id) if cell is not None else None
                for cell in row
            )
            for row in self.cells
        )
