from crush.components.tile import Cell, SpecialKind
from crush.systems.match import (
    are_adjacent,
    find_all_matches,
    find_possible_match,
    has_match_at,
    run_lengths_through,
    would_match,
)

from helpers import filler_board, put


def test_filler_layout_has_no_matches_and_no_moves():
    board = filler_board(8)
    assert not find_all_matches(board)
    assert find_possible_match(board) is None


def test_horizontal_run_of_four_spawns_row_clear_in_middle():
    board = filler_board(8)
    for col in range(4):
        put(board, (0, col), 'heart')
    matches = find_all_matches(board)
    assert len(matches) == 4
    assert matches.positions == [(0, 0), (0, 1), (0, 2), (0, 3)]
    assert len(matches.specials) == 1
    spawn = matches.specials[0]
    assert spawn.position == (0, 2)
    assert spawn.special is SpecialKind.ROW_CLEAR
    assert spawn.kind == 'heart'


def test_run_of_three_spawns_nothing():
    board = filler_board(8)
    for col in range(3):
        put(board, (0, col), 'heart')
    matches = find_all_matches(board)
    assert len(matches) == 3
    assert matches.specials == []


def test_vertical_run_of_four_spawns_column_clear():
    board = filler_board(8)
    for row in range(4):
        put(board, (row, 0), 'heart')
    matches = find_all_matches(board)
    assert sorted(matches) == [(0, 0), (1, 0), (2, 0), (3, 0)]
    assert [(s.position, s.special) for s in matches.specials] == [((2, 0), SpecialKind.COLUMN_CLEAR)]


def test_run_of_five_spawns_single_area_clear():
    board = filler_board(8)
    for col in range(5):
        put(board, (0, col), 'heart')
    matches = find_all_matches(board)
    assert len(matches) == 5
    assert [(s.position, s.special) for s in matches.specials] == [((0, 2), SpecialKind.AREA_CLEAR)]


def test_l_shape_spawns_area_clear_at_intersection():
    board = filler_board(8)
    for pos in [(0, 0), (0, 1), (0, 2), (1, 0), (2, 0)]:
        put(board, pos, 'heart')
    matches = find_all_matches(board)
    assert len(matches) == 5
    assert [(s.position, s.special, s.kind) for s in matches.specials] == [
        ((0, 0), SpecialKind.AREA_CLEAR, 'heart'),
    ]
    assert run_lengths_through(board, (0, 0)) == (3, 3)


def test_run_of_four_overlapping_an_l_yields_two_specials():
    board = filler_board(8)
    for pos in [(0, 0), (0, 1), (0, 2), (0, 3), (1, 0), (2, 0)]:
        put(board, pos, 'heart')
    matches = find_all_matches(board)
    assert len(matches) == 6
    assert [(s.position, s.special) for s in matches.specials] == [
        ((0, 2), SpecialKind.ROW_CLEAR),
        ((0, 0), SpecialKind.AREA_CLEAR),
    ]


def test_symmetric_shape_spawns_area_clear_at_each_intersection():
    board = filler_board(8)
    for pos in [(0, 0), (0, 1), (0, 2), (1, 0), (2, 0), (1, 2), (2, 2)]:
        put(board, pos, 'heart')
    matches = find_all_matches(board)
    assert len(matches) == 7
    assert [(s.position, s.special) for s in matches.specials] == [
        ((0, 0), SpecialKind.AREA_CLEAR),
        ((0, 2), SpecialKind.AREA_CLEAR),
    ]


def test_empty_cell_breaks_a_run():
    board = filler_board(8)
    for col in (0, 1, 3):
        put(board, (0, col), 'heart')
    board.clear((0, 2))
    assert not find_all_matches(board)


def test_specials_match_by_base_kind():
    board = filler_board(8)
    put(board, (0, 0), 'heart', SpecialKind.COLUMN_CLEAR)
    put(board, (0, 1), 'heart', memory_id=0)
    put(board, (0, 2), 'heart')
    assert has_match_at(board, (0, 1))
    assert len(find_all_matches(board)) == 3


def test_would_match_reverts_the_probe_swap():
    board = filler_board(8)
    put(board, (0, 1), 'heart')
    before = board.snapshot()
    assert would_match(board, (0, 2), (1, 2))
    assert board.snapshot() == before
    assert not would_match(board, (5, 5), (5, 6))
    assert board.snapshot() == before


def test_two_specials_always_make_a_legal_swap():
    board = filler_board(8)
    put(board, (4, 4), 'ring', SpecialKind.ROW_CLEAR)
    put(board, (4, 5), 'star', SpecialKind.AREA_CLEAR)
    assert would_match(board, (4, 4), (4, 5))


def test_hint_search_finds_the_only_move():
    board = filler_board(8)
    put(board, (0, 1), 'heart')
    pair = find_possible_match(board)
    assert pair is not None
    assert would_match(board, *pair)
    assert are_adjacent(*pair)


def test_are_adjacent_is_orthogonal_distance_one():
    assert are_adjacent((2, 2), (2, 3))
    assert are_adjacent((2, 2), (1, 2))
    assert not are_adjacent((2, 2), (3, 3))
    assert not are_adjacent((2, 2), (2, 4))
    assert not are_adjacent((2, 2), (2, 2))


def test_cell_tag_invariant_holds_by_construction():
    assert not Cell(kind='heart').is_memory
    assert Cell(kind='heart', memory_id=0).is_memory
