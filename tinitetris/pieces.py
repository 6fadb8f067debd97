"""Tetromino shapes packed as 4x4 bitmasks, with their rotations."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

NUM_PIECES = 7

_GRID = 4


def _pack(r0: int, r1: int, r2: int, r3: int) -> int:
    return ((r0 & 0xF) << 12) | ((r1 & 0xF) << 8) | ((r2 & 0xF) << 4) | (r3 & 0xF)


@dataclass(frozen=True)
class PieceRotation:
    """One orientation of a piece: its bounding box and packed cell bits.

    Row 0 occupies bits 15..12, row 1 bits 11..8 and so on; within a row
    the leftmost column is the most significant bit.
    """

    w: int
    h: int
    bits: int

    def cell(self, row: int, col: int) -> bool:
        """Return whether the 4x4 grid cell at (row, col) is filled."""
        if not (0 <= row < _GRID and 0 <= col < _GRID):
            raise IndexError(f"cell ({row}, {col}) outside the 4x4 piece grid")
        return bool(self.bits & (0x8000 >> (row * _GRID + col)))

    def cells(self) -> Iterator[tuple[int, int]]:
        """Yield the (row, col) of every filled cell, row by row."""
        for row in range(self.h):
            for col in range(self.w):
                if self.cell(row, col):
                    yield row, col


@dataclass(frozen=True)
class PieceDef:
    """A piece and the distinct rotations it can take."""

    name: str
    rotations: tuple[PieceRotation, ...]

    @property
    def num_rots(self) -> int:
        return len(self.rotations)


PIECES: tuple[PieceDef, ...] = (
    PieceDef("I", (
        PieceRotation(4, 1, _pack(0xF, 0, 0, 0)),
        PieceRotation(1, 4, _pack(0x8, 0x8, 0x8, 0x8)),
    )),
    PieceDef("O", (
        PieceRotation(2, 2, _pack(0xC, 0xC, 0, 0)),
    )),
    PieceDef("T", (
        PieceRotation(3, 2, _pack(0x4, 0xE, 0, 0)),
        PieceRotation(2, 3, _pack(0x8, 0xC, 0x8, 0)),
        PieceRotation(3, 2, _pack(0xE, 0x4, 0, 0)),
        PieceRotation(2, 3, _pack(0x4, 0xC, 0x4, 0)),
    )),
    PieceDef("S", (
        PieceRotation(3, 2, _pack(0x6, 0xC, 0, 0)),
        PieceRotation(2, 3, _pack(0x8, 0xC, 0x4, 0)),
    )),
    PieceDef("Z", (
        PieceRotation(3, 2, _pack(0xC, 0x6, 0, 0)),
        PieceRotation(2, 3, _pack(0x4, 0xC, 0x8, 0)),
    )),
    PieceDef("L", (
        PieceRotation(2, 3, _pack(0x8, 0x8, 0xC, 0)),
        PieceRotation(3, 2, _pack(0xE, 0x8, 0, 0)),
        PieceRotation(2, 3, _pack(0xC, 0x4, 0x4, 0)),
        PieceRotation(3, 2, _pack(0x2, 0xE, 0, 0)),
    )),
    PieceDef("J", (
        PieceRotation(2, 3, _pack(0x4, 0x4, 0xC, 0)),
        PieceRotation(3, 2, _pack(0x8, 0xE, 0, 0)),
        PieceRotation(2, 3, _pack(0xC, 0x8, 0x8, 0)),
        PieceRotation(3, 2, _pack(0xE, 0x2, 0, 0)),
    )),
)

T_PIECE = 2


def piece_rotation(piece_idx: int, rot: int) -> PieceRotation:
    """Return rotation ``rot`` of piece ``piece_idx``, wrapping ``rot``."""
    if not 0 <= piece_idx < NUM_PIECES:
        raise IndexError(f"piece index {piece_idx} out of range")
    piece = PIECES[piece_idx]
    return piece.rotations[rot % piece.num_rots]