"""Tile patterns, player palettes, the 3x5 font and fixed tile indices."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

COLOR_TRANSPARENT = 0
COLOR_BLACK = 1
COLOR_MEDIUM_GREEN = 2
COLOR_LIGHT_GREEN = 3
COLOR_DARK_BLUE = 4
COLOR_LIGHT_BLUE = 5
COLOR_DARK_RED = 6
COLOR_CYAN = 7
COLOR_MEDIUM_RED = 8
COLOR_LIGHT_RED = 9
COLOR_DARK_YELLOW = 10
COLOR_LIGHT_YELLOW = 11
COLOR_DARK_GREEN = 12
COLOR_MAGENTA = 13
COLOR_GRAY = 14
COLOR_WHITE = 15

PAT_EMPTY = bytes(8)
PAT_BLOCK = bytes([0xFF, 0x80, 0x80, 0x80, 0x80, 0x80, 0x80, 0x00])
PAT_GHOST = bytes([0xFF, 0x81, 0x81, 0x81, 0x81, 0x81, 0x81, 0xFF])
PAT_SOLID = bytes([0xFF] * 8)


def pair(fg: int, bg: int) -> int:
    """Pack a foreground/background colour pair into one colour byte."""
    return ((fg & 0xF) << 4) | (bg & 0xF)


@dataclass(frozen=True)
class PlayerColors:
    """The colour scheme of one player's strip."""

    bg: int
    block: int
    shadow: int
    text: int


PLAYER_COLORS: tuple[PlayerColors, ...] = (
    PlayerColors(COLOR_DARK_BLUE, COLOR_CYAN, COLOR_DARK_BLUE, COLOR_LIGHT_BLUE),
    PlayerColors(COLOR_DARK_RED, COLOR_LIGHT_RED, COLOR_DARK_RED, COLOR_MEDIUM_RED),
    PlayerColors(COLOR_DARK_GREEN, COLOR_LIGHT_GREEN, COLOR_DARK_GREEN, COLOR_MEDIUM_GREEN),
    PlayerColors(COLOR_MAGENTA, COLOR_LIGHT_YELLOW, COLOR_MAGENTA, COLOR_DARK_YELLOW),
)


def _colors(player_idx: int) -> PlayerColors:
    if not 0 <= player_idx < len(PLAYER_COLORS):
        raise ValueError(f"player index {player_idx} out of range")
    return PLAYER_COLORS[player_idx]


def _solid(value: int) -> bytes:
    return bytes([value] * 8)


def color_block(player_idx: int) -> bytes:
    """Colours for a block: white highlight on rows 0-6, shadow on row 7."""
    pc = _colors(player_idx)
    return bytes([pair(COLOR_WHITE, pc.block)] * 7 + [pair(pc.shadow, pc.block)])


def color_ghost(player_idx: int) -> bytes:
    """Colours for a landing preview: block colour outline on the background."""
    pc = _colors(player_idx)
    return _solid(pair(pc.block, pc.bg))


def color_empty(player_idx: int) -> bytes:
    """Colours for an empty cell: solid player background."""
    pc = _colors(player_idx)
    return _solid(pair(pc.bg, pc.bg))


def color_separator(player_idx: int) -> bytes:
    """Colours for the header separator: solid block colour."""
    pc = _colors(player_idx)
    return _solid(pair(pc.block, pc.block))


def color_flash() -> bytes:
    """Colours for a clearing row: solid white."""
    return _solid(pair(COLOR_WHITE, COLOR_WHITE))


def color_text(player_idx: int) -> bytes:
    """Colours for dim text: player text colour on the background."""
    pc = _colors(player_idx)
    return _solid(pair(pc.text, pc.bg))


def color_bright(player_idx: int) -> bytes:
    """Colours for bright text: white on the player background."""
    pc = _colors(player_idx)
    return _solid(pair(COLOR_WHITE, pc.bg))


def _glyph_rows(a: int, b: int, c: int, d: int, e: int) -> bytes:
    return bytes([0, (a & 7) << 3, (b & 7) << 3, (c & 7) << 3,
                  (d & 7) << 3, (e & 7) << 3, 0, 0])


_BLANK = (0, 0, 0, 0, 0)

_GLYPHS: dict[str, tuple[int, int, int, int, int]] = {
    "0": (7, 5, 5, 5, 7), "1": (2, 6, 2, 2, 7), "2": (7, 1, 2, 4, 7),
    "3": (7, 1, 3, 1, 7), "4": (5, 5, 7, 1, 1), "5": (7, 4, 7, 1, 7),
    "6": (7, 4, 7, 5, 7), "7": (7, 1, 2, 2, 2), "8": (7, 5, 7, 5, 7),
    "9": (7, 5, 7, 1, 7),
    "A": (2, 5, 7, 5, 5), "C": (3, 4, 4, 4, 3), "D": (6, 5, 5, 5, 6),
    "E": (7, 4, 6, 4, 7), "F": (7, 4, 6, 4, 4), "G": (3, 4, 5, 5, 3),
    "I": (7, 2, 2, 2, 7), "J": (3, 1, 1, 5, 2), "K": (5, 6, 6, 5, 5),
    "L": (4, 4, 4, 4, 7), "M": (5, 7, 5, 5, 5), "N": (5, 7, 7, 5, 5),
    "O": (2, 5, 5, 5, 2), "P": (6, 5, 6, 4, 4), "R": (6, 5, 6, 5, 5),
    "S": (3, 4, 2, 1, 6), "T": (7, 2, 2, 2, 2), "U": (5, 5, 5, 5, 7),
    "V": (5, 5, 5, 5, 2), "W": (5, 5, 7, 7, 5), "X": (5, 2, 2, 2, 5),
    "Y": (5, 5, 2, 2, 2),
}

FONT_FIRST = 32
FONT_LAST = ord("Y")

FONT: tuple[bytes, ...] = tuple(
    _glyph_rows(*_GLYPHS.get(chr(code), _BLANK))
    for code in range(FONT_FIRST, FONT_LAST + 1)
)

FONT_COUNT = len(FONT)


def glyph(ch: str | int) -> bytes:
    """Return the 8-byte pattern for a character; unknown ones draw as a space."""
    code = ord(ch) if isinstance(ch, str) else ch
    if FONT_FIRST <= code < FONT_FIRST + FONT_COUNT:
        return FONT[code - FONT_FIRST]
    return FONT[0]


class Tile(IntEnum):
    """Fixed tile slots used by the gameplay name table."""

    EMPTY_BLACK = 0
    EMPTY_P0 = 1
    EMPTY_P1 = 2
    EMPTY_P2 = 3
    EMPTY_P3 = 4
    BLOCK_P0 = 5
    BLOCK_P1 = 6
    BLOCK_P2 = 7
    BLOCK_P3 = 8
    GARBAGE = 9
    FLASH = 10
    SEP_P0 = 11
    SEP_P1 = 12
    SEP_P2 = 13
    SEP_P3 = 14
    DEAD = 15
    DEAD_G = 16
    DEAD_A = 17
    DEAD_M = 18
    DEAD_E = 19
    DEAD_O = 20
    DEAD_V = 21
    DEAD_R = 22
    GHOST_P0 = 23
    GHOST_P1 = 24
    GHOST_P2 = 25
    GHOST_P3 = 26


FIXED_TILE_COUNT = len(Tile)

GARBAGE_CELL = 5


def board_tile(val: int, player_idx: int) -> Tile:
    """Map a board cell value (0 empty, 1-4 owner, 5 garbage) to its tile."""
    if val == 0:
        return Tile(Tile.EMPTY_P0 + player_idx)
    if val == GARBAGE_CELL:
        return Tile.GARBAGE
    return Tile(Tile.BLOCK_P0 + (val - 1))