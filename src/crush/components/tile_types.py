import random
from dataclasses import dataclass, field
from typing import List

from crush.constants import DEFAULT_TILE_KINDS, MIN_TILE_KINDS
from crush.errors import ConfigurationError


@dataclass(slots=True)
class TileKinds:
    """Canonical base-kind set for a session, stored on a single entity.

    The set is fixed for the lifetime of the session; order is preserved so
    seeded draws are reproducible.
    """
    kinds: List[str] = field(default_factory=lambda: list(DEFAULT_TILE_KINDS))

    def __post_init__(self) -> None:
        seen: set[str] = set()
        filtered: List[str] = []
        for name in self.kinds:
            if not name or name in seen:
                raise ConfigurationError(f"Tile kinds must be unique non-empty names, got {self.kinds!r}")
            filtered.append(name)
            seen.add(name)
        if len(filtered) < MIN_TILE_KINDS:
            raise ConfigurationError(
                f"At least {MIN_TILE_KINDS} tile kinds are required, got {len(filtered)}"
            )
        self.kinds = filtered

    def random_kind(self, rng: random.Random) -> str:
        return rng.choice(self.kinds)

    def __contains__(self, kind: str) -> bool:
        return kind in self.kinds

    def __len__(self) -> int:
        return len(self.kinds)
