from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True, slots=True)
class Memory:
    photo: str
    caption: str = ''


@dataclass(slots=True)
class MemoryAlbum:
    """Externally supplied memories, revealed in chronological order.

    Uncovering any tagged tile reveals the next unrevealed memory; the tile's
    memory_id only marks it as a payload carrier.
    """
    memories: List[Memory] = field(default_factory=list)
    revealed_count: int = 0

    @property
    def total(self) -> int:
        return len(self.memories)

    def is_complete(self) -> bool:
        return self.revealed_count >= self.total

    def reveal_next(self) -> Optional[Memory]:
        if self.is_complete():
            return None
        memory = self.memories[self.revealed_count]
        self.revealed_count += 1
        return memory

    def revealed(self) -> List[Memory]:
        return self.memories[:self.revealed_count]

    def reset(self) -> None:
        self.revealed_count = 0
