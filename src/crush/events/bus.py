from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects.

    Delivery is synchronous: emit returns only after every subscriber ran, so
    engine correctness never depends on how long a presentation layer animates.
    """
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# INPUT & INTERACTION
# ============================================================================
EVENT_TILE_CLICK = "tile_click"                    # payload: row, col
EVENT_TILE_SELECTED = "tile_selected"              # payload: row, col
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: reason=str, prev_row, prev_col
EVENT_HINT_REQUEST = "hint_request"                # payload: None
EVENT_HINT_SHOWN = "hint_shown"                    # payload: positions=[(r,c),(r,c)] | None


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_REJECTED = "tile_swap_rejected"    # payload: src, dst, reason=str
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(r,c), dst=(r,c), combination=CombinationType|None
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(r,c), dst=(r,c)  (swapped then reverted)
EVENT_SPECIAL_COMBINATION = "special_combination"  # payload: combination=Combination
EVENT_MATCH_FOUND = "match_found"                  # payload: positions=[(r,c),...], specials=[SpecialSpawnRequest], depth=int
EVENT_TILES_CLEARED = "tiles_cleared"              # payload: clears=[ClearEvent], depth=int
EVENT_SPECIAL_CREATED = "special_created"          # payload: position=(r,c), special=SpecialKind, kind=str
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=[FallMove], depth=int
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: spawns=[TileSpawn], depth=int
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, cause=str
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int
EVENT_BOARD_SHUFFLED = "board_shuffled"            # payload: attempts=int
EVENT_BOARD_POPULATED = "board_populated"          # payload: size=int, memory_positions=[(r,c),...]


# ============================================================================
# TURN SYSTEM
# ============================================================================
EVENT_TURN_STARTED = "turn_started"                # payload: src=(r,c), dst=(r,c)
EVENT_TURN_COMPLETED = "turn_completed"            # payload: report=TurnReport
EVENT_MOVES_CHANGED = "moves_changed"              # payload: remaining=int, delta=int


# ============================================================================
# MEMORIES
# ============================================================================
EVENT_MEMORY_UNCOVERED = "memory_uncovered"                # payload: memory_id=int, position=(r,c)
EVENT_MEMORY_REVEALED = "memory_revealed"                  # payload: memory=Memory, index=int, revealed=int, total=int
EVENT_ALL_MEMORIES_REVEALED = "all_memories_revealed"      # payload: total=int


# ============================================================================
# GAME FLOW & STATE
# ============================================================================
EVENT_GAME_STARTED = "game_started"                # payload: reason=str
EVENT_GAME_MODE_CHANGED = "game_mode_changed"      # payload: previous_mode=GameMode|None, new_mode=GameMode
EVENT_OUT_OF_MOVES = "out_of_moves"                # payload: bonus_moves=int
EVENT_BONUS_MOVES_GRANTED = "bonus_moves_granted"  # payload: amount=int, remaining=int
EVENT_VICTORY = "victory"                          # payload: revealed=int, total=int
