from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SpecialKind(Enum):
    """Clear behaviour carried by a tile. Values double as render class names."""
    NONE = 'none'
    ROW_CLEAR = 'striped-h'
    COLUMN_CLEAR = 'striped-v'
    AREA_CLEAR = 'wrapped'

    @property
    def is_line_clear(self) -> bool:
        return self in (SpecialKind.ROW_CLEAR, SpecialKind.COLUMN_CLEAR)


@dataclass(slots=True)
class Cell:
    """Contents of one occupied board position.

    kind: base kind used for matching, regardless of any special behaviour.
    memory_id: index into the external memory list; present only on tagged tiles.
    An empty position is represented by None on the Board, never by a Cell.
    """
    kind: str
    special: SpecialKind = SpecialKind.NONE
    memory_id: Optional[int] = None

    @property
    def is_special(self) -> bool:
        return self.special is not SpecialKind.NONE

    @property
    def is_memory(self) -> bool:
        return self.memory_id is not None
