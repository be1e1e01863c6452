MIN_GRID_SIZE = 6
MAX_GRID_SIZE = 10
DEFAULT_GRID_SIZE = 8

MIN_STARTING_MOVES = 10
MAX_STARTING_MOVES = 999
DEFAULT_STARTING_MOVES = 50
DEFAULT_BONUS_MOVES = 10

# Reduced to five kinds for easier matching.
DEFAULT_TILE_KINDS = ('heart', 'diamond', 'rose', 'star', 'ring')
MIN_TILE_KINDS = 2

MIN_RUN_LENGTH = 3
LINE_CLEAR_RUN_LENGTH = 4
AREA_CLEAR_RUN_LENGTH = 5

# Per-cell retries before a candidate that completes a run is accepted anyway.
GENERATION_ATTEMPTS = 50
REFILL_BIAS_PROBABILITY = 0.4
# Chebyshev radius of the window searched for memory tiles when biasing a refill.
REFILL_BIAS_RADIUS = 2
MAX_CASCADE_PASSES = 100
MAX_SHUFFLE_ATTEMPTS = 10000

# Memory placement favours the inner area so tagged tiles are easier to match.
MEMORY_INNER_BIAS = 0.8
MEMORY_PLACEMENT_ATTEMPTS = 100
