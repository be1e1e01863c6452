from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional


class TurnPhase(Enum):
    IDLE = auto()
    SWAP_PENDING = auto()
    RESOLVING = auto()
    SETTLED_LEGAL = auto()
    SETTLED_NO_MOVES = auto()


@dataclass(slots=True)
class TurnState:
    """Tracks the engine's position in the swap/cascade state machine."""

    phase: TurnPhase = TurnPhase.IDLE
    cascade_depth: int = 0
    last_report: Optional[Any] = None

    @property
    def accepting_swaps(self) -> bool:
        return self.phase in (TurnPhase.IDLE, TurnPhase.SETTLED_LEGAL)
