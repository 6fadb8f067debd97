import pytest

from tinitetris.game import (
    BOARD_H,
    BOARD_W,
    DROP_INITIAL,
    FLASH_DURATION,
    GARBAGE_INTERVAL,
    NUM_PLAYERS,
    Game,
)
from tinitetris.tiles import GARBAGE_CELL


def make_game(value=0):
    return Game(random_source=lambda: value)


def land(game, p):
    for _ in range(BOARD_H + 2):
        before = p.py
        game.drop(p)
        if p.flash_timer or p.py == before:
            return


def test_reset_state():
    game = make_game()
    for i, p in enumerate(game.players):
        assert not p.dead
        assert p.index == i
        assert p.target_player == (i + 1) % NUM_PLAYERS
        assert p.drop_interval == DROP_INITIAL
        assert p.level == 1
        assert p.px == BOARD_W // 2 - 1
        assert all(v == 0 for row in p.board for v in row)
    assert game.winner() is None


def test_seeded_games_repeat():
    a, b = Game(seed=7), Game(seed=7)
    assert [p.piece_idx for p in a.players] == [p.piece_idx for p in b.players]
    assert all(0 <= a.random8() < 256 for _ in range(50))


def test_is_valid_bounds_and_cells():
    game = make_game()
    p = game.players[0]
    assert game.is_valid(p, 0, 0, 4, 0)
    assert not game.is_valid(p, 0, 0, 5, 0)
    assert not game.is_valid(p, 0, 0, -1, 0)
    assert game.is_valid(p, 0, 0, 0, -1)
    assert game.is_valid(p, 0, 0, 0, BOARD_H - 1)
    assert not game.is_valid(p, 0, 0, 0, BOARD_H)
    p.board[5][2] = 1
    assert not game.is_valid(p, 0, 0, 0, 5)


def test_is_valid_bad_piece():
    game = make_game()
    with pytest.raises(IndexError):
        game.is_valid(game.players[0], 9, 0, 0, 0)


def test_move_and_walls():
    game = make_game()
    p = game.players[0]
    game.move(p, -1)
    assert p.px == 2
    for _ in range(10):
        game.move(p, -1)
    assert p.px == 0
    for _ in range(10):
        game.move(p, 1)
    assert p.px == BOARD_W - 4


def test_rotate_sets_flag():
    game = make_game()
    p = game.players[0]
    game.rotate(p)
    assert p.rot == 1
    assert p.last_was_rotate
    game.move(p, 1)
    assert not p.last_was_rotate


def test_single_line_clear():
    game = make_game()
    p = game.players[0]
    for c in (0, 1, 2, 7):
        p.board[BOARD_H - 1][c] = GARBAGE_CELL
    land(game, p)
    assert p.flash_rows == [BOARD_H - 1]
    assert p.flash_timer == FLASH_DURATION
    assert p.score == 1
    assert p.lines == 1
    assert p.garbage_sent == 0
    for _ in range(FLASH_DURATION):
        game.update(p)
    assert p.flash_rows == []
    assert all(v == 0 for row in p.board for v in row)


def test_four_lines_send_garbage():
    game = make_game()
    p = game.players[0]
    for r in range(BOARD_H - 4, BOARD_H):
        for c in range(1, BOARD_W):
            p.board[r][c] = GARBAGE_CELL
    p.rot, p.px = 1, 0
    land(game, p)
    assert p.flash_count == 4
    assert p.score == 10
    assert p.garbage_sent == 4
    assert game.players[1].pending_garbage == 4


def test_combo_adds_garbage():
    game = make_game()
    p = game.players[0]
    for c in (0, 1, 2, 7):
        p.board[BOARD_H - 1][c] = GARBAGE_CELL
    land(game, p)
    for _ in range(FLASH_DURATION):
        game.update(p)
    for c in (0, 1, 2, 7):
        p.board[BOARD_H - 1][c] = GARBAGE_CELL
    land(game, p)
    assert p.combo_count == 2
    assert p.max_combo == 2
    assert game.players[1].pending_garbage == 1


def test_gravity_interval():
    game = make_game()
    p = game.players[0]
    for _ in range(DROP_INITIAL - 1):
        game.update(p)
    assert p.py == 0
    game.update(p)
    assert p.py == 1


def test_garbage_rises_gradually():
    game = make_game()
    p = game.players[0]
    game.add_garbage(p, 2)
    for _ in range(GARBAGE_INTERVAL):
        game.update(p)
    assert p.board[BOARD_H - 1] == [0] + [GARBAGE_CELL] * (BOARD_W - 1)
    assert p.pending_garbage == 1
    assert p.board_dirty


def test_garbage_to_dead_player_ignored():
    game = make_game()
    p = game.players[2]
    p.dead = True
    game.add_garbage(p, 3)
    assert p.pending_garbage == 0


def test_garbage_tops_out():
    game = make_game()
    p = game.players[0]
    p.board[0][0] = 1
    game.add_garbage(p, 1)
    for _ in range(GARBAGE_INTERVAL):
        game.update(p)
    assert p.dead


def test_spawn_blocked_kills():
    game = make_game()
    p = game.players[0]
    p.board[0][3] = 1
    game.spawn(p)
    assert p.dead


def test_cycle_target_skips_dead_and_self():
    game = make_game()
    p = game.players[0]
    game.players[1].dead = True
    game.cycle_target(p, 0)
    assert p.target_player == 2
    game.cycle_target(p, 0)
    assert p.target_player == 3
    game.cycle_target(p, 0)
    assert p.target_player == 2


def test_update_retargets_when_target_dead():
    game = make_game()
    p = game.players[0]
    game.players[1].dead = True
    game.update(p)
    assert p.target_player == 2


def test_winner():
    game = make_game()
    for i in (0, 1, 3):
        game.players[i].dead = True
    assert game.winner() == 2


def test_ai_places_piece_flat():
    game = make_game()
    p = game.players[0]
    for _ in range(20):
        game.ai_step(p)
        if p.ai_computed:
            break
    assert p.ai_computed
    assert p.ai_target_rot == 0
    assert game.is_valid(p, p.piece_idx, p.ai_target_rot, p.ai_target_x, 0)
    for _ in range(2000):
        if any(p.board[BOARD_H - 1]):
            break
        game.ai_step(p)
    assert sum(1 for v in p.board[BOARD_H - 1] if v) == 4
    assert all(v == 0 for row in p.board[:BOARD_H - 1] for v in row)


def test_ai_idle_when_dead():
    game = make_game()
    p = game.players[0]
    p.dead = True
    game.ai_step(p)
    assert not p.ai_base_ready
    assert p.ai_target_x is None