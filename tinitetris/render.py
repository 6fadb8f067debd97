"""Drawing the four boards through a RAM copy of the name table."""

from __future__ import annotations

from dataclasses import dataclass

from .game import (
    BOARD_H,
    BOARD_W,
    FLASH_TOGGLE,
    HEADER_ROWS,
    NUM_PLAYERS,
    Game,
    Player,
)
from .pieces import piece_rotation
from .tiles import (
    COLOR_CYAN,
    COLOR_DARK_RED,
    COLOR_DARK_YELLOW,
    COLOR_GRAY,
    COLOR_LIGHT_GREEN,
    COLOR_LIGHT_RED,
    COLOR_LIGHT_YELLOW,
    COLOR_BLACK,
    COLOR_WHITE,
    PAT_BLOCK,
    PAT_EMPTY,
    PAT_GHOST,
    PAT_SOLID,
    Tile,
    board_tile,
    color_block,
    color_bright,
    color_empty,
    color_flash,
    color_ghost,
    color_separator,
    color_text,
    glyph,
    pair,
)
from .vdp import (
    BANK_SIZE,
    NAME_TABLE_SIZE,
    NUM_SPRITES,
    SPRITE_HIDDEN_Y,
    VRAM_CT,
    VRAM_NT,
    VRAM_PT,
    VRAM_SAT,
    VRAM_SIZE,
    VRAM_SPT,
    Vdp,
)

SCREEN_COLS = 32
SCREEN_ROWS = 24
HEADER_TILE_BASE = 128
STRIP_WIDTH = 8

ARROW_PATTERN = bytes([0x00, 0x7E, 0x3C, 0x3C, 0x18, 0x18, 0x00, 0x00])
SPRITE_COLORS = (COLOR_CYAN, COLOR_LIGHT_RED, COLOR_LIGHT_GREEN, COLOR_LIGHT_YELLOW)
SPRITE_X_OFFSETS = (4, 20, 36, 52)

# Rotation used for the 4x2 next-piece preview; L and J lie flat.
PREVIEW_ROT = (0, 0, 0, 0, 0, 1, 1)

_DEAD_WORDS = (
    (11, (Tile.DEAD_G, Tile.DEAD_A, Tile.DEAD_M, Tile.DEAD_E)),
    (12, (Tile.DEAD_O, Tile.DEAD_V, Tile.DEAD_E, Tile.DEAD_R)),
)


@dataclass
class _RenderState:
    """What was last drawn for one player; None means nothing drawn yet."""

    px: int | None = None
    py: int | None = None
    rot: int | None = None
    piece_idx: int | None = None
    score: int | None = None
    lines: int | None = None
    level: int | None = None
    next_idx: int | None = None
    ghost_y: int | None = None
    dead: bool = False
    header_drawn: bool = False
    flash_state: int = 0
    lock_h: bool = False


class Renderer:
    """Draws a match into video RAM, sending only the board rows that changed."""

    def __init__(self, game: Game, vdp: Vdp | None = None) -> None:
        self.game = game
        self.vdp = vdp if vdp is not None else Vdp()
        self.name_buffer = bytearray(NAME_TABLE_SIZE)
        self.gameplay = False
        self._dirty = [False] * BOARD_H
        self._states = [_RenderState() for _ in range(NUM_PLAYERS)]

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    def _write_tile_data(self, y: int, tile: int, pattern: bytes, colors: bytes) -> None:
        addr = (y >> 3) * BANK_SIZE + (tile << 3)
        self.vdp.write_vram(pattern, VRAM_PT + addr)
        self.vdp.write_vram(colors, VRAM_CT + addr)

    def _build_tile(self, bank: int, tile: int, pattern: bytes, colors: bytes) -> None:
        addr = bank * BANK_SIZE + (tile << 3)
        self.vdp.write_vram(pattern, VRAM_PT + addr)
        self.vdp.write_vram(colors, VRAM_CT + addr)

    def _build_fixed_tiles(self) -> None:
        dead_col = bytes([pair(COLOR_DARK_RED, COLOR_DARK_RED)] * 8)
        dead_txt = bytes([pair(COLOR_WHITE, COLOR_DARK_RED)] * 8)
        garbage = bytes([pair(COLOR_WHITE, COLOR_GRAY)] * 7
                        + [pair(COLOR_DARK_YELLOW, COLOR_GRAY)])
        letters = {
            Tile.DEAD_G: "G", Tile.DEAD_A: "A", Tile.DEAD_M: "M", Tile.DEAD_E: "E",
            Tile.DEAD_O: "O", Tile.DEAD_V: "V", Tile.DEAD_R: "R",
        }
        for bank in range(3):
            self._build_tile(bank, Tile.EMPTY_BLACK, PAT_EMPTY,
                             bytes([pair(COLOR_BLACK, COLOR_BLACK)] * 8))
            for i in range(NUM_PLAYERS):
                self._build_tile(bank, Tile.EMPTY_P0 + i, PAT_EMPTY, color_empty(i))
            for i in range(NUM_PLAYERS):
                self._build_tile(bank, Tile.BLOCK_P0 + i, PAT_BLOCK, color_block(i))
            self._build_tile(bank, Tile.GARBAGE, PAT_BLOCK, garbage)
            self._build_tile(bank, Tile.FLASH, PAT_SOLID, color_flash())
            for i in range(NUM_PLAYERS):
                self._build_tile(bank, Tile.SEP_P0 + i, PAT_SOLID, color_separator(i))
            self._build_tile(bank, Tile.DEAD, PAT_EMPTY, dead_col)
            for tile, letter in letters.items():
                self._build_tile(bank, tile, glyph(letter), dead_txt)
            for i in range(NUM_PLAYERS):
                self._build_tile(bank, Tile.GHOST_P0 + i, PAT_GHOST, color_ghost(i))

    def _setup_identity_name_table(self) -> None:
        for i in range(NAME_TABLE_SIZE):
            self.name_buffer[i] = ((i >> 5) & 7) * SCREEN_COLS + (i & 31)
        self.vdp.write_vram(self.name_buffer, VRAM_NT)

    def _setup_game_name_table(self) -> None:
        for r in range(HEADER_ROWS):
            for c in range(SCREEN_COLS):
                self.name_buffer[r * SCREEN_COLS + c] = HEADER_TILE_BASE + r * SCREEN_COLS + c
        for r in range(HEADER_ROWS, SCREEN_ROWS):
            for c in range(SCREEN_COLS):
                self.name_buffer[r * SCREEN_COLS + c] = Tile.EMPTY_P0 + (c >> 3)
        self.vdp.write_vram(self.name_buffer, VRAM_NT)

    def _flush_board(self) -> None:
        for r, dirty in enumerate(self._dirty):
            if dirty:
                off = (r + HEADER_ROWS) * SCREEN_COLS
                self.vdp.write_vram(self.name_buffer[off:off + SCREEN_COLS], VRAM_NT + off)
                self._dirty[r] = False

    def _hide_all_sprites(self) -> None:
        for i in range(NUM_SPRITES):
            self.vdp.set_sprite(i, 0, SPRITE_HIDDEN_Y, 0, 0)

    def _put_char(self, x: int, y: int, ch: str, player_idx: int, bright: bool) -> None:
        colors = color_bright(player_idx) if bright else color_text(player_idx)
        if self.gameplay and y < HEADER_ROWS:
            tile = HEADER_TILE_BASE + y * SCREEN_COLS + x
        else:
            tile = (y & 7) * SCREEN_COLS + x
        self._write_tile_data(y, tile, glyph(ch), colors)

    def _put_num(self, x: int, y: int, val: int, width: int, player_idx: int) -> None:
        digits = f"{val % 10 ** width:0{width}d}"
        for i, d in enumerate(digits):
            self._put_char(x + i, y, d, player_idx, True)

    def _header_tile(self, row: int, x: int, pattern: bytes, colors: bytes) -> None:
        self._write_tile_data(row, HEADER_TILE_BASE + row * SCREEN_COLS + x, pattern, colors)

    def _put_board(self, x: int, y: int, tile: int) -> None:
        idx = y * SCREEN_COLS + x
        if self.name_buffer[idx] == tile:
            return
        self.name_buffer[idx] = tile
        if y >= HEADER_ROWS:
            self._dirty[y - HEADER_ROWS] = True

    # ------------------------------------------------------------------
    # Public setup
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Set up screen mode, sprites and an identity name table."""
        self.vdp.mode = "graphic2"
        self.vdp.backdrop = 0x11
        self.vdp.fill_vram(0x00, 0x0000, VRAM_SIZE)
        self.vdp.sat = VRAM_SAT
        self.vdp.spt = VRAM_SPT
        self.vdp.write_vram(ARROW_PATTERN, VRAM_SPT)
        self._hide_all_sprites()
        self._states = [_RenderState() for _ in range(NUM_PLAYERS)]
        self.gameplay = False
        self._setup_identity_name_table()

    def game_begin(self) -> None:
        """Prepare fixed tiles and the gameplay layout for a new match."""
        self._states = [_RenderState() for _ in range(NUM_PLAYERS)]
        self.vdp.fill_vram(0x00, VRAM_PT, BANK_SIZE * 3)
        self.vdp.fill_vram(0x00, VRAM_CT, BANK_SIZE * 3)
        self._build_fixed_tiles()
        self.gameplay = True
        self._dirty = [False] * BOARD_H
        self._setup_game_name_table()

    def identity_mode(self) -> None:
        """Switch to a full-screen layout where every cell owns its tile."""
        self.gameplay = False
        self.vdp.fill_vram(0x00, VRAM_PT, BANK_SIZE * 3)
        self.vdp.fill_vram(0x00, VRAM_CT, BANK_SIZE * 3)
        self._setup_identity_name_table()

    def put_tile_identity(self, x: int, y: int, pattern: bytes, colors: bytes) -> None:
        """Write the pattern and colours of the cell at (x, y) in identity layout."""
        if not (0 <= x < SCREEN_COLS and 0 <= y < SCREEN_ROWS):
            raise ValueError(f"cell ({x}, {y}) outside the screen")
        self._write_tile_data(y, (y & 7) * SCREEN_COLS + x, pattern, colors)

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------

    def _render_next_preview(self, player_idx: int, piece_idx: int) -> None:
        sx = player_idx * STRIP_WIDTH + 4
        shape = piece_rotation(piece_idx, PREVIEW_ROT[piece_idx])
        block = color_block(player_idx)
        empty = color_empty(player_idx)
        for r in range(2):
            for c in range(4):
                filled = r < shape.h and c < shape.w and shape.cell(r, c)
                if filled:
                    self._header_tile(r, sx + c, PAT_BLOCK, block)
                else:
                    self._header_tile(r, sx + c, PAT_EMPTY, empty)

    def _render_header(self, p: Player, idx: int) -> None:
        sx = idx * STRIP_WIDTH
        rs = self._states[idx]
        if not rs.header_drawn:
            empty = color_empty(idx)
            self._put_char(sx, 0, "P", idx, True)
            self._put_char(sx + 1, 0, str(idx + 1), idx, True)
            for c in (2, 3):
                self._header_tile(0, sx + c, PAT_EMPTY, empty)
            for c in range(4):
                self._header_tile(1, sx + c, PAT_EMPTY, empty)
            self._put_char(sx, 2, "L", idx, False)
            for c in (1, 2, 3, 4):
                self._header_tile(2, sx + c, PAT_EMPTY, empty)
            self._put_char(sx + 5, 2, "V", idx, False)
            for c in (6, 7):
                self._header_tile(2, sx + c, PAT_EMPTY, empty)
            separator = color_separator(idx)
            for c in range(STRIP_WIDTH):
                self._header_tile(3, sx + c, PAT_SOLID, separator)
            rs.header_drawn = True
        if p.score != rs.score:
            self._put_num(sx, 1, p.score, 4, idx)
            rs.score = p.score
        if p.lines != rs.lines:
            self._put_num(sx + 1, 2, p.lines, 3, idx)
            rs.lines = p.lines
        if p.level != rs.level:
            self._put_num(sx + 6, 2, p.level, 1, idx)
            rs.level = p.level
        if p.next_idx != rs.next_idx:
            self._render_next_preview(idx, p.next_idx)
            rs.next_idx = p.next_idx

    # ------------------------------------------------------------------
    # Board
    # ------------------------------------------------------------------

    def _draw_cell(self, idx: int, r: int, c: int) -> None:
        val = self.game.players[idx].board[r][c]
        self._put_board(idx * STRIP_WIDTH + c, r + HEADER_ROWS, board_tile(val, idx))

    def _draw_rows(self, idx: int, lo: int, hi: int) -> None:
        for r in range(max(lo, 0), min(hi, BOARD_H - 1) + 1):
            for c in range(BOARD_W):
                self._draw_cell(idx, r, c)

    def _draw_board(self, idx: int) -> None:
        self._draw_rows(idx, 0, BOARD_H - 1)

    def _piece_cells(self, piece_idx: int, rot: int, px: int, py: int):
        for r, c in piece_rotation(piece_idx, rot).cells():
            br, bc = py + r, px + c
            if 0 <= br < BOARD_H and 0 <= bc < BOARD_W:
                yield br, bc

    def _erase_piece(self, idx: int, piece_idx: int, rot: int, px: int, py: int) -> None:
        for br, bc in self._piece_cells(piece_idx, rot, px, py):
            self._draw_cell(idx, br, bc)

    def _draw_shape(self, idx: int, piece_idx: int, rot: int, px: int, py: int,
                    tile: int) -> None:
        sx = idx * STRIP_WIDTH
        for br, bc in self._piece_cells(piece_idx, rot, px, py):
            self._put_board(sx + bc, br + HEADER_ROWS, tile)

    def _ghost_y(self, p: Player) -> int:
        y = p.py
        while self.game.is_valid(p, p.piece_idx, p.rot, p.px, y + 1):
            y += 1
        return y

    def _render_flash(self, p: Player, idx: int) -> None:
        rs = self._states[idx]
        state = 1 if (p.flash_timer % FLASH_TOGGLE) < FLASH_TOGGLE // 2 else 2
        if state == rs.flash_state:
            return
        rs.flash_state = state
        sx = idx * STRIP_WIDTH
        for row in p.flash_rows:
            sy = row + HEADER_ROWS
            for c in range(BOARD_W):
                tile = Tile.FLASH if state == 1 else board_tile(p.board[row][c], idx)
                self._put_board(sx + c, sy, tile)

    def _render_dead_strip(self, idx: int) -> None:
        sx = idx * STRIP_WIDTH
        for r in range(HEADER_ROWS, SCREEN_ROWS):
            for c in range(STRIP_WIDTH):
                self._put_board(sx + c, r, Tile.DEAD)
        dark_red = bytes([pair(COLOR_DARK_RED, COLOR_DARK_RED)] * 8)
        for r in range(HEADER_ROWS):
            for c in range(STRIP_WIDTH):
                self._header_tile(r, sx + c, PAT_EMPTY, dark_red)
        for row, word in _DEAD_WORDS:
            for i, tile in enumerate(word):
                self._put_board(sx + 2 + i, row, tile)

    def _render_player(self, p: Player, idx: int) -> None:
        rs = self._states[idx]

        if p.dead:
            if not rs.dead:
                self._render_dead_strip(idx)
                rs.dead = True
            return

        self._render_header(p, idx)

        if p.board_dirty:
            if rs.piece_idx is not None:
                self._erase_piece(idx, rs.piece_idx, rs.rot, rs.px, rs.py)
                rs.piece_idx = None
            self._draw_board(idx)
            p.board_dirty = False

        if rs.flash_state and p.flash_timer == 0:
            rs.flash_state = 0
            self._draw_board(idx)
            rs.piece_idx = None

        if p.flash_timer > 0:
            if rs.piece_idx is not None:
                if rs.ghost_y is not None and rs.ghost_y != rs.py:
                    self._erase_piece(idx, rs.piece_idx, rs.rot, rs.px, rs.ghost_y)
                self._erase_piece(idx, rs.piece_idx, rs.rot, rs.px, rs.py)
                rs.piece_idx = None
                rs.ghost_y = None
            self._render_flash(p, idx)
            return

        piece_changed = rs.piece_idx is not None and p.piece_idx != rs.piece_idx
        if piece_changed:
            old_h = piece_rotation(rs.piece_idx, rs.rot).h
            self._draw_rows(idx, rs.py, rs.py + old_h - 1)
            # The stale ghost sits on other rows and would linger otherwise.
            if rs.ghost_y is not None and rs.ghost_y != rs.py:
                self._draw_rows(idx, rs.ghost_y, rs.ghost_y + old_h - 1)
            rs.piece_idx = None
            rs.ghost_y = None

        if rs.piece_idx is None and not piece_changed and not rs.lock_h:
            self._draw_board(idx)

        moved = (p.px != rs.px or p.py != rs.py
                 or p.rot != rs.rot or p.piece_idx != rs.piece_idx)
        if not moved:
            return

        show_ghost = bool(self.game.human_mask & (1 << idx))
        recompute = p.px != rs.px or p.rot != rs.rot or p.piece_idx != rs.piece_idx

        if rs.piece_idx is not None:
            if rs.ghost_y is not None and rs.ghost_y != rs.py:
                self._erase_piece(idx, rs.piece_idx, rs.rot, rs.px, rs.ghost_y)
            self._erase_piece(idx, rs.piece_idx, rs.rot, rs.px, rs.py)

        if show_ghost and recompute:
            rs.ghost_y = self._ghost_y(p)
        elif not show_ghost:
            rs.ghost_y = None

        if show_ghost and rs.ghost_y is not None and rs.ghost_y > p.py:
            self._draw_shape(idx, p.piece_idx, p.rot, p.px, rs.ghost_y,
                             Tile.GHOST_P0 + idx)
        self._draw_shape(idx, p.piece_idx, p.rot, p.px, p.py, Tile.BLOCK_P0 + idx)

        rs.px = p.px
        rs.py = p.py
        rs.rot = p.rot
        rs.piece_idx = p.piece_idx
        rs.lock_h = True

    # ------------------------------------------------------------------
    # Public drawing
    # ------------------------------------------------------------------

    def frame(self) -> None:
        """Draw what changed on every board and place the targeting arrows."""
        for idx, player in enumerate(self.game.players):
            self._render_player(player, idx)
        if self.gameplay:
            self._flush_board()

        bob = 2 if (self.game.frame >> 3) & 1 else 0
        for idx, player in enumerate(self.game.players):
            if player.dead:
                self.vdp.set_sprite(idx, 0, SPRITE_HIDDEN_Y, 0, 0)
            else:
                sy = HEADER_ROWS * 8 - 10 + bob
                sx = (player.target_player * 64 + SPRITE_X_OFFSETS[idx]) & 0xFF
                self.vdp.set_sprite(idx, sx, sy, 0, SPRITE_COLORS[idx])

    def countdown(self, ch: str) -> None:
        """Draw a large character in the middle of every board."""
        pattern = glyph(ch)
        for p in range(NUM_PLAYERS):
            sx = p * STRIP_WIDTH + 2
            sy = 11
            for r in range(7):
                for c in range(4):
                    self._put_board(sx + c, sy + r, Tile.EMPTY_P0 + p)
            for r in range(5):
                row = pattern[r + 1]
                for c in range(3):
                    if row & (0x20 >> c):
                        self._put_board(sx + c, sy + 1 + r, Tile.BLOCK_P0 + p)
        self._flush_board()

    def clear_countdown(self) -> None:
        """Empty every board area again."""
        for p in range(NUM_PLAYERS):
            sx = p * STRIP_WIDTH
            for r in range(HEADER_ROWS, SCREEN_ROWS):
                for c in range(STRIP_WIDTH):
                    self._put_board(sx + c, r, Tile.EMPTY_P0 + p)
        self._flush_board()