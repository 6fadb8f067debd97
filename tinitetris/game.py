"""Match rules for four-player Tetris: boards, pieces, garbage and the AI."""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass, field

from .pieces import NUM_PIECES, PIECES, T_PIECE, piece_rotation
from .tiles import GARBAGE_CELL

NUM_PLAYERS = 4
BOARD_W = 8
BOARD_H = 20
HEADER_ROWS = 4

FLASH_DURATION = 20
FLASH_TOGGLE = 4

DROP_INITIAL = 50
DROP_MIN = 5
DROP_ACCEL = 4
LINES_PER_LVL = 10
SOFT_DROP_INTERVAL = 3
GARBAGE_INTERVAL = 3

AI_BUDGET = 2
AI_NO_SCORE = -32000

_SCORE_TABLE = (0, 1, 3, 6, 10)
_GARBAGE_TABLE = (0, 0, 1, 2, 4)


def _empty_board() -> list[list[int]]:
    return [[0] * BOARD_W for _ in range(BOARD_H)]


@dataclass
class Player:
    """State of one player's board, falling piece, statistics and AI search."""

    index: int
    board: list[list[int]] = field(default_factory=_empty_board)
    score: int = 0
    level: int = 1
    lines: int = 0
    dead: bool = False

    piece_idx: int = 0
    rot: int = 0
    px: int = BOARD_W // 2 - 1
    py: int = 0
    next_idx: int = 0

    drop_timer: int = 0
    drop_interval: int = DROP_INITIAL
    soft_drop: bool = False
    flash_timer: int = 0
    flash_rows: list[int] = field(default_factory=list)
    last_was_rotate: bool = False
    combo_count: int = 0

    ai_target_x: int | None = None
    ai_target_rot: int = 0
    ai_computed: bool = False
    ai_goal: int = 2
    ai_drop_delay: int = 0
    ai_drop_counter: int = 0
    ai_eval_rot: int = 0
    ai_eval_col: int = 0
    ai_base_ready: bool = False
    ai_best_score: int = AI_NO_SCORE
    ai_base_heights: list[int] = field(default_factory=lambda: [0] * BOARD_W)
    ai_base_row_count: list[int] = field(default_factory=lambda: [0] * BOARD_H)

    garbage_sent: int = 0
    t_spin_count: int = 0
    max_combo: int = 0

    target_player: int = 0
    board_dirty: bool = False
    pending_garbage: int = 0
    garbage_timer: int = 0

    @property
    def flash_count(self) -> int:
        return len(self.flash_rows)


class Game:
    """The four boards of a match and the rules that drive them."""

    def __init__(self, seed: int | None = None,
                 random_source: Callable[[], int] | None = None) -> None:
        if random_source is None:
            rnd = random.Random(seed)
            random_source = lambda: rnd.getrandbits(8)  # noqa: E731
        self._random = random_source
        self.players: list[Player] = []
        self.frame = 0
        self.human_mask = 0x01
        self.input_mode = 0
        self.reset()

    def random8(self) -> int:
        """Return the next random byte (0..255)."""
        return self._random() & 0xFF

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _new_player(self, idx: int) -> Player:
        p = Player(index=idx, target_player=(idx + 1) % NUM_PLAYERS)
        p.piece_idx = self.random8() % NUM_PIECES
        p.next_idx = self.random8() % NUM_PIECES
        if not self.is_valid(p, p.piece_idx, p.rot, p.px, p.py):
            p.dead = True
        return p

    def reset(self) -> None:
        """Start a fresh match with four empty boards."""
        self.players = [self._new_player(i) for i in range(NUM_PLAYERS)]
        self.frame = 0

    def winner(self) -> int | None:
        """Return the index of the last player alive, or None while the match runs."""
        alive = [i for i, p in enumerate(self.players) if not p.dead]
        return alive[0] if len(alive) == 1 else None

    # ------------------------------------------------------------------
    # Piece placement
    # ------------------------------------------------------------------

    def is_valid(self, player: Player, piece_idx: int, rot: int, x: int, y: int) -> bool:
        """Return whether the piece fits on the board at (x, y); rows above the top are allowed."""
        shape = piece_rotation(piece_idx, rot)
        for r, c in shape.cells():
            nx, ny = x + c, y + r
            if nx < 0 or nx >= BOARD_W or ny >= BOARD_H:
                return False
            if ny >= 0 and player.board[ny][nx] != 0:
                return False
        return True

    def spawn(self, player: Player) -> None:
        """Bring in the next piece at the top and reset the AI search for it."""
        p = player
        p.piece_idx = p.next_idx
        p.next_idx = self.random8() % NUM_PIECES
        p.rot = 0
        p.px = BOARD_W // 2 - 1
        p.py = 0

        p.ai_computed = False
        p.ai_base_ready = False
        p.ai_eval_rot = 0
        p.ai_eval_col = 0
        p.ai_best_score = AI_NO_SCORE
        p.ai_target_x = None
        p.ai_target_rot = 0

        r = self.random8()
        if r < 20:
            p.ai_goal = 4
        elif r < 76:
            p.ai_goal = 3
        else:
            p.ai_goal = 2

        p.ai_drop_delay = 8 + (self.random8() & 7)
        p.ai_drop_counter = 0

        if not self.is_valid(p, p.piece_idx, p.rot, p.px, p.py):
            p.dead = True

    def move(self, player: Player, dx: int) -> None:
        """Shift the falling piece sideways if it fits."""
        p = player
        if p.dead or p.flash_timer > 0:
            return
        if self.is_valid(p, p.piece_idx, p.rot, p.px + dx, p.py):
            p.px += dx
            p.last_was_rotate = False

    def rotate(self, player: Player) -> None:
        """Rotate the falling piece, kicking one column left or right if needed."""
        p = player
        if p.dead or p.flash_timer > 0:
            return
        new_rot = (p.rot + 1) % PIECES[p.piece_idx].num_rots
        for kick in (0, -1, 1):
            if self.is_valid(p, p.piece_idx, new_rot, p.px + kick, p.py):
                p.px += kick
                p.rot = new_rot
                p.last_was_rotate = True
                return

    def drop(self, player: Player) -> None:
        """Move the piece down one row, locking it if it cannot go further."""
        p = player
        if p.dead or p.flash_timer > 0:
            return
        if self.is_valid(p, p.piece_idx, p.rot, p.px, p.py + 1):
            p.py += 1
            p.last_was_rotate = False
        else:
            self._lock(p)

    def _is_t_spin(self, p: Player) -> bool:
        if p.piece_idx != T_PIECE or not p.last_was_rotate:
            return False
        cx, cy = p.px + 1, p.py + 1

        def blocked(x: int, y: int) -> bool:
            return x < 0 or y < 0 or x >= BOARD_W or y >= BOARD_H or p.board[y][x] != 0

        corners = sum(blocked(cx + dx, cy + dy) for dy in (-1, 1) for dx in (-1, 1))
        return corners >= 3

    def _lock(self, p: Player) -> None:
        shape = piece_rotation(p.piece_idx, p.rot)
        for r, c in shape.cells():
            by, bx = p.py + r, p.px + c
            if 0 <= by < BOARD_H and 0 <= bx < BOARD_W:
                p.board[by][bx] = p.index + 1

        p.flash_rows = [r for r, row in enumerate(p.board) if all(row)][:4]

        if not p.flash_rows:
            p.combo_count = 0
            self.spawn(p)
            return

        count = p.flash_count
        t_spin = self._is_t_spin(p)
        p.combo_count += 1

        sent = count * 2 if t_spin else _GARBAGE_TABLE[count]
        if p.combo_count > 1:
            sent += p.combo_count - 1
        if sent > 0:
            self.add_garbage(self.players[p.target_player], sent)
            p.garbage_sent = (p.garbage_sent + sent) & 0xFF

        if t_spin:
            p.t_spin_count += 1
        p.max_combo = max(p.max_combo, p.combo_count)

        p.flash_timer = FLASH_DURATION
        p.score = (p.score + _SCORE_TABLE[count] + (count * 3 if t_spin else 0)) & 0xFFFF
        p.lines = (p.lines + count) & 0xFF
        p.level = p.lines // LINES_PER_LVL + 1
        interval = (DROP_INITIAL - p.level * DROP_ACCEL) & 0xFF
        p.drop_interval = max(interval, DROP_MIN)

    def _clear_lines(self, p: Player) -> None:
        # Top to bottom: removing an upper row leaves lower indices valid.
        for row in p.flash_rows:
            del p.board[row]
            p.board.insert(0, [0] * BOARD_W)
        p.flash_rows = []
        self.spawn(p)

    # ------------------------------------------------------------------
    # Per-tick update
    # ------------------------------------------------------------------

    def update(self, player: Player) -> None:
        """Advance one tick: retarget, deliver garbage, run the flash or gravity."""
        p = player
        if p.dead:
            return

        if self.players[p.target_player].dead:
            start = self.random8() & 3
            for j in range(NUM_PLAYERS):
                cand = (start + j) & 3
                if cand != p.index and not self.players[cand].dead:
                    p.target_player = cand
                    break

        if p.pending_garbage > 0 and p.flash_timer == 0:
            p.garbage_timer += 1
            if p.garbage_timer >= GARBAGE_INTERVAL:
                p.garbage_timer = 0
                self._add_one_garbage_row(p)
                p.pending_garbage -= 1
                if p.dead:
                    return

        if p.flash_timer > 0:
            p.flash_timer -= 1
            if p.flash_timer == 0:
                self._clear_lines(p)
            return

        p.drop_timer += 1
        interval = SOFT_DROP_INTERVAL if p.soft_drop else p.drop_interval
        if p.drop_timer >= interval:
            p.drop_timer = 0
            self.drop(p)

    # ------------------------------------------------------------------
    # AI
    # ------------------------------------------------------------------

    def _landing_y(self, p: Player, piece_idx: int, rot: int, x: int) -> int | None:
        shape = piece_rotation(piece_idx, rot)
        best = 100
        for c in range(shape.w):
            rows = [r for r in range(shape.h) if shape.cell(r, c)]
            if not rows:
                continue
            bc = x + c
            if bc < 0 or bc >= BOARD_W:
                return None
            best = min(best, BOARD_H - 1 - p.ai_base_heights[bc] - rows[-1])
        if best < 0 or best >= BOARD_H:
            return None
        return best

    @staticmethod
    def _compute_base_state(p: Player) -> None:
        heights = []
        for c in range(BOARD_W):
            top = next((r for r in range(BOARD_H) if p.board[r][c]), None)
            heights.append(0 if top is None else BOARD_H - top)
        p.ai_base_heights = heights
        p.ai_base_row_count = [sum(1 for v in row if v) for row in p.board]
        p.ai_base_ready = True

    @staticmethod
    def _eval_pos(p: Player, piece_idx: int, rot: int, x: int, y: int) -> int:
        shape = piece_rotation(piece_idx, rot)
        heights = list(p.ai_base_heights)
        row_add = [0] * BOARD_H
        extra_holes = 0

        for c in range(shape.w):
            bc = x + c
            if bc < 0 or bc >= BOARD_W:
                continue
            rows = [r for r in range(shape.h) if shape.cell(r, c)]
            if not rows:
                continue
            top_row, bot_row = y + rows[0], y + rows[-1]
            old_top_row = BOARD_H - p.ai_base_heights[bc]
            if top_row < 0:
                continue
            if bot_row + 1 < old_top_row:
                extra_holes += old_top_row - (bot_row + 1)
            heights[bc] = max(heights[bc], BOARD_H - top_row)

        for r, c in shape.cells():
            br = y + r
            if 0 <= br < BOARD_H:
                row_add[br] += 1

        lines = sum(
            1 for r in range(BOARD_H)
            if row_add[r] and p.ai_base_row_count[r] + row_add[r] >= BOARD_W
        )
        max_h = max(heights)
        bump = sum(abs(a - b) for a, b in zip(heights, heights[1:]))

        if max_h >= 15:
            line_score = lines * 300
        elif lines == 0:
            line_score = 80
        elif lines < p.ai_goal:
            line_score = 20
        else:
            line_score = 500 + lines * 200
        return line_score - extra_holes * 150 - bump * 20 - max_h * 10

    def ai_step(self, player: Player) -> None:
        """Search a few placements, then take one step toward the best found so far."""
        p = player
        if p.dead or p.flash_timer > 0:
            return

        if not p.ai_computed:
            num_rots = PIECES[p.piece_idx].num_rots
            budget = AI_BUDGET
            if not p.ai_base_ready:
                self._compute_base_state(p)
                budget -= 1
            while budget > 0 and not p.ai_computed:
                budget -= 1
                xi = p.ai_eval_col - 1
                ri = p.ai_eval_rot
                yi = self._landing_y(p, p.piece_idx, ri, xi)
                if yi is not None:
                    score = self._eval_pos(p, p.piece_idx, ri, xi, yi)
                    if score > p.ai_best_score:
                        p.ai_best_score = score
                        p.ai_target_x = xi
                        p.ai_target_rot = ri
                p.ai_eval_col += 1
                if p.ai_eval_col > BOARD_W:
                    p.ai_eval_col = 0
                    p.ai_eval_rot += 1
                    if p.ai_eval_rot >= num_rots:
                        p.ai_computed = True

        p.soft_drop = False
        if p.ai_target_x is None:
            return

        if p.rot != p.ai_target_rot:
            p.rot = p.ai_target_rot % PIECES[p.piece_idx].num_rots
            p.ai_drop_counter = 0
        elif p.px < p.ai_target_x:
            self.move(p, 1)
            p.ai_drop_counter = 0
        elif p.px > p.ai_target_x:
            self.move(p, -1)
            p.ai_drop_counter = 0
        else:
            p.ai_drop_counter += 1
            if p.ai_drop_counter >= p.ai_drop_delay:
                p.ai_drop_counter = 0
                self.drop(p)

    # ------------------------------------------------------------------
    # Targeting and garbage
    # ------------------------------------------------------------------

    def cycle_target(self, player: Player, player_idx: int) -> None:
        """Aim at the next living opponent after the current target."""
        nxt = player.target_player
        for _ in range(NUM_PLAYERS - 1):
            nxt = (nxt + 1) % NUM_PLAYERS
            if nxt != player_idx and not self.players[nxt].dead:
                player.target_player = nxt
                return

    def _add_one_garbage_row(self, p: Player) -> None:
        if p.flash_timer == 0 and not self.is_valid(p, p.piece_idx, p.rot, p.px, p.py + 1):
            self._lock(p)
            if p.dead:
                return

        if any(p.board[0]):
            p.dead = True
            return

        del p.board[0]
        gap = self.random8() % BOARD_W
        p.board.append([0 if c == gap else GARBAGE_CELL for c in range(BOARD_W)])

        if p.py > 0:
            p.py -= 1

        if p.flash_timer > 0:
            p.flash_rows = [row - 1 for row in p.flash_rows if row > 0]
            if not p.flash_rows:
                p.flash_timer = 0

        p.board_dirty = True

    def add_garbage(self, player: Player, count: int) -> None:
        """Queue garbage rows to rise into a living player's board."""
        if player.dead:
            return
        player.pending_garbage = (player.pending_garbage + count) & 0xFF
        player.garbage_timer = 0