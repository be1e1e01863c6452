"""Headless entry point for the memory-crush board engine.

Builds a session from the YAML config and plays hint moves until every memory
is revealed or the moves run out. Stands in for the browser presentation layer.
"""
import argparse
import logging
import random
import sys

from crush.components.game_state import GameMode
from crush.config import load_config
from crush.errors import ConfigurationError
from crush.events.bus import (
    EVENT_BOARD_SHUFFLED,
    EVENT_MEMORY_REVEALED,
    EVENT_OUT_OF_MOVES,
    EVENT_VICTORY,
    EventBus,
)
from crush.systems.board_ops import get_memory_album, get_move_budget
from crush.utils.game_state import get_game_mode
from crush.world import create_world

logger = logging.getLogger("crush")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Play a memory-crush session without a UI")
    parser.add_argument("--config", help="path to a game_config.yaml (defaults to the bundled one)")
    parser.add_argument("--seed", type=int, help="random seed for a reproducible session")
    parser.add_argument("--moves-limit", type=int, default=1000, help="stop after this many swaps")
    parser.add_argument("--debug", action="store_true", help="log every cascade pass")
    return parser.parse_args(argv)


def play(world, moves_limit: int) -> int:
    """Swap the hinted pair until the session leaves PLAYING. Returns swaps played."""
    engine = world.turn_engine
    game_flow = world.game_flow
    played = 0
    while played < moves_limit:
        mode = get_game_mode(world)
        if mode == GameMode.OUT_OF_MOVES:
            game_flow.decline_bonus()
            continue
        if mode != GameMode.PLAYING:
            break
        hint = engine.request_hint()
        if hint is None:
            logger.error("Settled board offered no move")
            break
        report = engine.player_swap(*hint)
        played += 1
        logger.info(
            "Swap %s -> %s: %d cleared over %d cascade(s), %d memory tile(s), %d moves left",
            report.src, report.dst, len(report.clears), report.cascade_count, len(report.memories_uncovered),
            get_move_budget(world).remaining,
        )
    return played


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(args.config)
    except (FileNotFoundError, ConfigurationError) as exc:
        logger.error("Cannot load configuration: %s", exc)
        return 2

    event_bus = EventBus()
    event_bus.subscribe(EVENT_MEMORY_REVEALED, lambda sender, **kw: logger.info(
        "Memory %d/%d revealed: %s %s", kw["revealed"], kw["total"], kw["memory"].photo, kw["memory"].caption))
    event_bus.subscribe(EVENT_BOARD_SHUFFLED, lambda sender, **kw: logger.info(
        "Board reshuffled (%d attempt(s))", kw["attempts"]))
    event_bus.subscribe(EVENT_OUT_OF_MOVES, lambda sender, **kw: logger.info(
        "Out of moves; %d bonus moves on offer", kw["bonus_moves"]))
    event_bus.subscribe(EVENT_VICTORY, lambda sender, **kw: logger.info(
        "Victory: %d of %d memories revealed", kw["revealed"], kw["total"]))

    world = create_world(event_bus, config, rng=random.Random(args.seed))
    world.game_flow.start_game()
    played = play(world, args.moves_limit)

    album = get_memory_album(world)
    print(f"Played {played} swap(s); revealed {album.revealed_count}/{album.total} memories; "
          f"final mode {get_game_mode(world).name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
