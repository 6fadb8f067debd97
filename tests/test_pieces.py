import pytest

from tinitetris.pieces import (
    NUM_PIECES,
    PIECES,
    PieceRotation,
    piece_rotation,
)


def all_rotations():
    for idx, piece in enumerate(PIECES):
        for rot in range(piece.num_rots):
            yield idx, rot


def test_every_piece_index_resolves():
    shapes = [piece_rotation(idx, 0) for idx in range(NUM_PIECES)]
    assert len(shapes) == 7
    assert all(len(list(shape.cells())) == 4 for shape in shapes)
    with pytest.raises(IndexError):
        piece_rotation(7, 0)


@pytest.mark.parametrize("idx,rot", list(all_rotations()))
def test_every_rotation_has_four_cells(idx, rot):
    shape = piece_rotation(idx, rot)
    assert len(list(shape.cells())) == 4


@pytest.mark.parametrize("idx,rot", list(all_rotations()))
def test_cells_fill_bounding_box_tightly(idx, rot):
    shape = piece_rotation(idx, rot)
    cells = list(shape.cells())
    rows = {r for r, _ in cells}
    cols = {c for _, c in cells}
    assert min(rows) == 0 and max(rows) == shape.h - 1
    assert min(cols) == 0 and max(cols) == shape.w - 1


@pytest.mark.parametrize("idx,rot", list(all_rotations()))
def test_no_bits_outside_bounding_box(idx, rot):
    shape = piece_rotation(idx, rot)
    inside = set(shape.cells())
    for row in range(4):
        for col in range(4):
            if (row, col) not in inside:
                assert shape.cell(row, col) is False


def test_rotations_within_piece_are_distinct():
    for idx, piece in enumerate(PIECES):
        bits = [piece_rotation(idx, rot).bits for rot in range(piece.num_rots)]
        assert len(set(bits)) == piece.num_rots


def test_i_piece_horizontal_cells():
    assert list(piece_rotation(0, 0).cells()) == [(0, 0), (0, 1), (0, 2), (0, 3)]


def test_o_piece_cells():
    assert list(piece_rotation(1, 0).cells()) == [(0, 0), (0, 1), (1, 0), (1, 1)]


def test_t_piece_spawn_cells():
    assert list(piece_rotation(2, 0).cells()) == [(0, 1), (1, 0), (1, 1), (1, 2)]


def test_rotation_wraps_modulo_count():
    for idx, piece in enumerate(PIECES):
        for rot in range(piece.num_rots):
            assert piece_rotation(idx, rot + piece.num_rots) is piece_rotation(idx, rot)


def test_vertical_and_horizontal_swap_dimensions():
    for idx, piece in enumerate(PIECES):
        if piece.num_rots > 1:
            first = piece_rotation(idx, 0)
            second = piece_rotation(idx, 1)
            assert (first.w, first.h) == (second.h, second.w)


def test_piece_index_out_of_range():
    with pytest.raises(IndexError):
        piece_rotation(NUM_PIECES, 0)


def test_cell_out_of_grid_raises():
    shape = PieceRotation(1, 1, 0x8000)
    with pytest.raises(IndexError):
        shape.cell(4, 0)
    assert shape.cell(0, 0) is True