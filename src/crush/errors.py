"""Exception types raised by the board engine."""


class ConfigurationError(ValueError):
    """Invalid board size, kind set, or memory list at session creation."""


class InvalidSwapError(ValueError):
    """Swap request that is out of bounds, not adjacent, or arrives mid-resolution.

    Raised before any board mutation, so the caller may retry with a corrected request.
    """


class InternalInvariantViolation(RuntimeError):
    """Engine logic defect: runaway cascade, unfilled board after refill, endless reshuffle."""
