from dataclasses import dataclass


@dataclass(slots=True)
class MoveBudget:
    starting: int
    remaining: int = -1

    def __post_init__(self) -> None:
        if self.remaining < 0:
            self.remaining = self.starting

    def consume(self, amount: int = 1) -> int:
        self.remaining -= amount
        return self.remaining

    def reset(self) -> None:
        self.remaining = self.starting

    def grant(self, amount: int) -> int:
        self.remaining += amount
        return self.remaining
