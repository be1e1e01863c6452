from crush.components.game_state import GameMode
from crush.events.bus import (
    EVENT_BONUS_MOVES_GRANTED,
    EVENT_BOARD_POPULATED,
    EVENT_GAME_MODE_CHANGED,
    EVENT_OUT_OF_MOVES,
    EVENT_VICTORY,
)
from crush.systems.board_ops import get_board, get_memory_album, get_move_budget
from crush.systems.match import find_possible_match
from crush.utils.game_state import get_game_mode

from helpers import capture, filler_board, install, make_session, put

SRC, DST = (0, 2), (1, 2)


def valid_swap_layout():
    board = filler_board(8)
    put(board, (0, 1), 'heart')
    return board


def test_start_game_enters_playing_with_fresh_board():
    bus, world = make_session(memories=3)
    populated = capture(bus, EVENT_BOARD_POPULATED)
    modes = capture(bus, EVENT_GAME_MODE_CHANGED)
    assert get_game_mode(world) == GameMode.MENU

    world.game_flow.start_game()

    assert get_game_mode(world) == GameMode.PLAYING
    assert modes == [{'previous_mode': GameMode.MENU, 'new_mode': GameMode.PLAYING}]
    assert len(populated) == 1
    assert len(populated[0]['memory_positions']) == 3
    board = get_board(world)
    assert board.is_full()
    assert find_possible_match(board) is not None


def test_restart_resets_album_and_budget():
    bus, world = make_session(memories=3, moves=20)
    world.game_flow.start_game()
    get_memory_album(world).reveal_next()
    get_move_budget(world).consume(7)

    world.game_flow.restart()

    assert get_memory_album(world).revealed_count == 0
    assert get_move_budget(world).remaining == 20
    assert get_game_mode(world) == GameMode.PLAYING


def test_last_move_offers_bonus_moves():
    bus, world = make_session(memories=2, moves=10)
    world.game_flow.start_game()
    install(world, valid_swap_layout())
    get_move_budget(world).remaining = 1
    offers = capture(bus, EVENT_OUT_OF_MOVES)
    granted = capture(bus, EVENT_BONUS_MOVES_GRANTED)

    world.turn_engine.player_swap(SRC, DST)

    assert get_game_mode(world) == GameMode.OUT_OF_MOVES
    assert offers == [{'bonus_moves': 10}]

    assert world.game_flow.grant_bonus_moves()
    assert get_move_budget(world).remaining == 10
    assert granted == [{'amount': 10, 'remaining': 10}]
    assert get_game_mode(world) == GameMode.PLAYING
    assert not world.game_flow.grant_bonus_moves()


def test_declining_bonus_ends_in_victory():
    bus, world = make_session(memories=2, moves=10)
    world.game_flow.start_game()
    install(world, valid_swap_layout())
    get_move_budget(world).remaining = 1
    victories = capture(bus, EVENT_VICTORY)

    world.turn_engine.player_swap(SRC, DST)
    assert world.game_flow.decline_bonus()

    assert get_game_mode(world) == GameMode.VICTORY
    assert victories == [{'revealed': 0, 'total': 2}]


def test_revealing_every_memory_wins():
    bus, world = make_session(memories=1)
    world.game_flow.start_game()
    layout = valid_swap_layout()
    put(layout, (0, 0), 'heart', memory_id=0)
    install(world, layout)
    victories = capture(bus, EVENT_VICTORY)

    report = world.turn_engine.player_swap(SRC, DST)

    assert len(report.memories_uncovered) == 1
    assert get_memory_album(world).is_complete()
    assert get_game_mode(world) == GameMode.VICTORY
    assert victories == [{'revealed': 1, 'total': 1}]


def test_invalid_swap_does_not_end_the_game():
    bus, world = make_session(memories=2, moves=10)
    world.game_flow.start_game()
    install(world, valid_swap_layout())
    get_move_budget(world).remaining = 1

    report = world.turn_engine.player_swap((5, 5), (5, 6))

    assert not report.accepted
    assert get_move_budget(world).remaining == 1
    assert get_game_mode(world) == GameMode.PLAYING


def test_session_without_memories_wins_on_first_move():
    bus, world = make_session(memories=0)
    world.game_flow.start_game()
    install(world, valid_swap_layout())
    world.turn_engine.player_swap(SRC, DST)
    assert get_game_mode(world) == GameMode.VICTORY
