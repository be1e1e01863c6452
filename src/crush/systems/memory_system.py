"""Memory tile placement and reveal bookkeeping."""
from __future__ import annotations

import logging
import random
from typing import Dict, Optional

from esper import World

from crush.components.board import Position
from crush.constants import MEMORY_INNER_BIAS, MEMORY_PLACEMENT_ATTEMPTS
from crush.errors import ConfigurationError
from crush.events.bus import (
    EVENT_ALL_MEMORIES_REVEALED,
    EVENT_MEMORY_REVEALED,
    EVENT_MEMORY_UNCOVERED,
    EventBus,
)
from crush.systems.board_ops import get_memory_album

logger = logging.getLogger(__name__)


def generate_memory_positions(size: int, count: int, rng: random.Random) -> Dict[Position, int]:
    """Pick count distinct board positions for memory tiles, mapped to ids 0..count-1.

    Positions favour the inner area (away from the border) so tagged tiles are
    easier to match. After MEMORY_PLACEMENT_ATTEMPTS collisions the first free
    cell in row-major order is used.
    """
    if count > size * size:
        raise ConfigurationError(f"{count} memories do not fit on a {size}x{size} board")
    positions: Dict[Position, int] = {}
    for memory_id in range(count):
        pos: Optional[Position] = None
        for _ in range(MEMORY_PLACEMENT_ATTEMPTS):
            if size > 2 and rng.random() < MEMORY_INNER_BIAS:
                candidate = (rng.randint(1, size - 2), rng.randint(1, size - 2))
            else:
                candidate = (rng.randrange(size), rng.randrange(size))
            if candidate not in positions:
                pos = candidate
                break
        if pos is None:
            pos = next((r, c) for r in range(size) for c in range(size) if (r, c) not in positions)
        positions[pos] = memory_id
    return positions


class MemorySystem:
    """Reveals the next memory of the album each time a tagged tile is cleared."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_MEMORY_UNCOVERED, self.on_memory_uncovered)

    def on_memory_uncovered(self, sender, **kwargs):
        album = get_memory_album(self.world)
        memory = album.reveal_next()
        if memory is None:
            return
        logger.debug(
            "Memory tile %s at %s revealed %s (%d/%d)",
            kwargs.get('memory_id'), kwargs.get('position'), memory.photo, album.revealed_count, album.total,
        )
        self.event_bus.emit(
            EVENT_MEMORY_REVEALED,
            memory=memory,
            index=album.revealed_count - 1,
            revealed=album.revealed_count,
            total=album.total,
        )
        if album.is_complete():
            logger.info("All %d memories revealed", album.total)
            self.event_bus.emit(EVENT_ALL_MEMORIES_REVEALED, total=album.total)
