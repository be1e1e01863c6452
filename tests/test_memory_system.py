import random

import pytest

from crush.errors import ConfigurationError
from crush.events.bus import EVENT_ALL_MEMORIES_REVEALED, EVENT_MEMORY_REVEALED, EVENT_MEMORY_UNCOVERED
from crush.systems.board_ops import get_board, get_memory_album
from crush.systems.memory_system import generate_memory_positions

from helpers import capture, make_session


@pytest.mark.parametrize("seed", range(5))
def test_memory_positions_are_distinct_and_numbered(seed):
    positions = generate_memory_positions(8, 8, random.Random(seed))
    assert sorted(positions.values()) == list(range(8))
    assert len(positions) == 8
    assert all(0 <= r < 8 and 0 <= c < 8 for r, c in positions)


def test_memory_positions_favour_inner_area():
    positions = generate_memory_positions(10, 40, random.Random(11))
    inner = sum(1 for r, c in positions if 1 <= r <= 8 and 1 <= c <= 8)
    assert inner > len(positions) // 2


def test_every_cell_can_hold_a_memory():
    positions = generate_memory_positions(6, 36, random.Random(2))
    assert set(positions) == {(r, c) for r in range(6) for c in range(6)}


def test_more_memories_than_cells_is_rejected():
    with pytest.raises(ConfigurationError):
        generate_memory_positions(6, 37, random.Random(0))


def test_board_is_populated_with_memory_tiles():
    bus, world = make_session(memories=5)
    board = get_board(world)
    tagged = sorted(board.get(pos).memory_id for pos in board.positions() if board.get(pos).is_memory)
    assert tagged == [0, 1, 2, 3, 4]


def test_uncovered_tiles_reveal_memories_in_chronological_order():
    bus, world = make_session(memories=2)
    revealed = capture(bus, EVENT_MEMORY_REVEALED)
    finished = capture(bus, EVENT_ALL_MEMORIES_REVEALED)

    # Tag ids never pick the memory; the album order does.
    bus.emit(EVENT_MEMORY_UNCOVERED, memory_id=1, position=(3, 3))
    assert [(p['memory'].photo, p['index'], p['revealed'], p['total']) for p in revealed] == [
        ("photo-00.svg", 0, 1, 2),
    ]
    assert finished == []

    bus.emit(EVENT_MEMORY_UNCOVERED, memory_id=0, position=(4, 4))
    assert revealed[-1]['memory'].photo == "photo-01.svg"
    assert finished == [{'total': 2}]

    bus.emit(EVENT_MEMORY_UNCOVERED, memory_id=7, position=(5, 5))
    assert len(revealed) == 2
    assert len(finished) == 1
    assert get_memory_album(world).is_complete()
