"""Full-screen title, victory and statistics screens, one tile per cell."""

from __future__ import annotations

from dataclasses import dataclass

from .game import NUM_PLAYERS
from .pieces import NUM_PIECES  # noqa: F401  (kept for symmetry with the board layout)
from .render import SCREEN_COLS, SCREEN_ROWS, STRIP_WIDTH, Renderer
from .tiles import (
    COLOR_BLACK,
    COLOR_GRAY,
    COLOR_WHITE,
    PAT_BLOCK,
    PAT_EMPTY,
    color_block,
    color_separator,
    color_text,
    glyph,
    pair,
)
from .vdp import NUM_SPRITES, SPRITE_HIDDEN_Y

MODE_KB_JOY = 0


@dataclass(frozen=True)
class _Palette:
    bg: int
    block: int
    text: int


def _check_player(player_idx: int) -> None:
    if not 0 <= player_idx < NUM_PLAYERS:
        raise ValueError(f"player index {player_idx} out of range")


def _palette(player_idx: int) -> _Palette:
    _check_player(player_idx)
    block = color_separator(player_idx)[0] >> 4
    text_byte = color_text(player_idx)[0]
    return _Palette(bg=text_byte & 0x0F, block=block, text=text_byte >> 4)


def _solid(fg: int, bg: int) -> bytes:
    return bytes([pair(fg, bg)] * 8)


def _label(renderer: Renderer, x: int, y: int, text: str, colors: bytes) -> None:
    """Write ``text`` from (x, y); spaces leave their cells untouched."""
    for i, ch in enumerate(text):
        if ch != " ":
            renderer.put_tile_identity(x + i, y, glyph(ch), colors)


def _fill(renderer: Renderer, colors: bytes) -> None:
    for r in range(SCREEN_ROWS):
        for c in range(SCREEN_COLS):
            renderer.put_tile_identity(c, r, PAT_EMPTY, colors)


def _hide_sprites(renderer: Renderer) -> None:
    for i in range(NUM_SPRITES):
        renderer.vdp.set_sprite(i, 0, SPRITE_HIDDEN_Y, 0, 0)


def _big_char(renderer: Renderer, x: int, y: int, ch: str, color_idx: int) -> None:
    pattern = glyph(ch)
    colors = color_block(color_idx)
    for r in range(5):
        row = pattern[r + 1]
        for c in range(3):
            if row & (0x20 >> c):
                renderer.put_tile_identity(x + c, y + r, PAT_BLOCK, colors)


_TITLE_WORDS = (
    (8, 1, (("T", 0), ("I", 1), ("N", 2), ("Y", 3))),
    (4, 7, (("T", 1), ("E", 0), ("T", 3), ("R", 2), ("I", 1), ("S", 0))),
    (12, 13, (("V", 3), ("S", 1))),
)


def title_screen(renderer: Renderer) -> None:
    """Draw the title logo and a join prompt for every player slot."""
    renderer.identity_mode()
    _hide_sprites(renderer)
    _fill(renderer, _solid(COLOR_BLACK, COLOR_BLACK))

    for x, y, letters in _TITLE_WORDS:
        for i, (ch, color_idx) in enumerate(letters):
            _big_char(renderer, x + 4 * i, y, ch, color_idx)

    for i in range(NUM_PLAYERS):
        pc = _palette(i)
        sx = i * STRIP_WIDTH
        col_p = _solid(pc.block, COLOR_BLACK)
        col_txt = _solid(pc.text, COLOR_BLACK)
        _label(renderer, sx + 3, 19, f"P{i + 1}", col_p)
        _label(renderer, sx + 1, 21, "PRESS", col_txt)
        _label(renderer, sx + 3, 22, "A", col_p)


def title_mode(renderer: Renderer) -> None:
    """Show the current input mode on the bottom row of the title screen."""
    white = _solid(COLOR_WHITE, COLOR_BLACK)
    for i in range(SCREEN_COLS):
        renderer.put_tile_identity(i, 23, PAT_EMPTY, _solid(COLOR_BLACK, COLOR_BLACK))
    _label(renderer, 2, 23, "F1", white)
    if renderer.game.input_mode == MODE_KB_JOY:
        _label(renderer, 5, 23, "KEY", white)
        _label(renderer, 10, 23, "P1P2 P3P4 JOY", _solid(COLOR_GRAY, COLOR_BLACK))
    else:
        _label(renderer, 5, 23, "NTAP", white)


def title_ready(renderer: Renderer, player_idx: int) -> None:
    """Replace a slot's join prompt with READY."""
    pc = _palette(player_idx)
    sx = player_idx * STRIP_WIDTH
    blank = _solid(COLOR_BLACK, COLOR_BLACK)
    for x in range(sx, sx + STRIP_WIDTH):
        renderer.put_tile_identity(x, 21, PAT_EMPTY, blank)
        renderer.put_tile_identity(x, 22, PAT_EMPTY, blank)
    _label(renderer, sx + 1, 21, "READY", _solid(pc.block, COLOR_BLACK))


def title_cpu(renderer: Renderer, player_idx: int) -> None:
    """Mark an unclaimed slot as computer-controlled."""
    pc = _palette(player_idx)
    sx = player_idx * STRIP_WIDTH
    blank = _solid(COLOR_BLACK, COLOR_BLACK)
    renderer.put_tile_identity(sx + 1, 21, PAT_EMPTY, blank)
    renderer.put_tile_identity(sx + 5, 21, PAT_EMPTY, blank)
    renderer.put_tile_identity(sx + 3, 22, PAT_EMPTY, blank)
    _label(renderer, sx + 2, 21, "CPU", _solid(pc.text, COLOR_BLACK))


def victory(renderer: Renderer, winner_idx: int) -> None:
    """Fill the screen in the winner's colour and announce the winner."""
    pc = _palette(winner_idx)
    renderer.identity_mode()
    _hide_sprites(renderer)
    _fill(renderer, _solid(pc.bg, pc.bg))
    col_txt = _solid(COLOR_WHITE, pc.bg)
    col_block = _solid(pc.block, pc.bg)
    _label(renderer, 12, 9, "PLAYER", col_txt)
    _label(renderer, 19, 9, str(winner_idx + 1), col_block)
    _label(renderer, 14, 11, "WINS", col_block)


_STAT_ROWS = (
    (7, "SCO", "score"),
    (9, "LIN", "lines"),
    (11, "GRB", "garbage_sent"),
    (13, "TSP", "t_spin_count"),
    (15, "CMB", "max_combo"),
    (17, "LVL", "level"),
)


def stats(renderer: Renderer) -> None:
    """Draw the post-match statistics of every player in their own strip."""
    renderer.identity_mode()
    _fill(renderer, _solid(COLOR_BLACK, COLOR_BLACK))
    white = _solid(COLOR_WHITE, COLOR_BLACK)
    _label(renderer, 13, 1, "STATS", white)

    for i, player in enumerate(renderer.game.players):
        pc = _palette(i)
        sx = i * STRIP_WIDTH
        col_h = _solid(pc.block, COLOR_BLACK)
        col_l = _solid(pc.text, COLOR_BLACK)
        _label(renderer, sx + 3, 4, f"P{i + 1}", col_h)
        if not player.dead:
            _label(renderer, sx + 2, 5, "WIN", white)
        for row, caption, attr in _STAT_ROWS:
            _label(renderer, sx + 1, row, caption, col_l)
            _label(renderer, sx + 5, row, f"{getattr(player, attr) % 1000:03d}", col_h)