import pytest

from tinitetris.controls import (
    REPEAT_DELAY,
    REPEAT_RATE,
    Button,
    InputHandler,
    KeyboardMatrix,
    NinjaTap,
)
from tinitetris.game import Game
from tinitetris.pieces import PIECES

O_PIECE = 1
T_PIECE = 2


def make(ports=2, mask=0x01, mode=0):
    game = Game(seed=7)
    game.human_mask = mask
    game.input_mode = mode
    kb = KeyboardMatrix()
    tap = NinjaTap(port_count=ports)
    return InputHandler(game, kb, tap), kb, tap, game


def place(player, piece, px, py=5):
    player.piece_idx = piece
    player.rot = 0
    player.px = px
    player.py = py


# ---------------------------------------------------------------- keyboard


def test_keyboard_idle_rows_read_all_high():
    kb = KeyboardMatrix()
    assert kb.read(8) == 0xFF


def test_keyboard_press_and_release():
    kb = KeyboardMatrix()
    kb.press(8, 4)
    assert kb.read(8) == 0xFF ^ (1 << 4)
    kb.release(8, 4)
    assert kb.read(8) == 0xFF


def test_keyboard_bad_row_and_bit():
    kb = KeyboardMatrix()
    with pytest.raises(IndexError):
        kb.read(11)
    with pytest.raises(ValueError):
        kb.press(0, 8)


# ---------------------------------------------------------------- ninjatap


def test_ninjatap_latches_on_update():
    tap = NinjaTap()
    tap.set_buttons(0, Button.A)
    assert not tap.is_pressed(0, Button.A)
    tap.update()
    assert tap.is_pressed(0, Button.A)
    assert tap.is_pushed(0, Button.A)
    tap.update()
    assert tap.is_pressed(0, Button.A)
    assert tap.was_pressed(0, Button.A)
    assert not tap.is_pushed(0, Button.A)


def test_ninjatap_buttons_are_independent():
    tap = NinjaTap()
    tap.set_buttons(1, Button.LEFT | Button.UP)
    tap.update()
    assert tap.is_pressed(1, Button.LEFT) and tap.is_pressed(1, Button.UP)
    assert not tap.is_pressed(1, Button.RIGHT)
    assert not tap.is_pressed(0, Button.LEFT)


def test_ninjatap_validation():
    with pytest.raises(ValueError):
        NinjaTap(port_count=9)
    with pytest.raises(IndexError):
        NinjaTap().set_buttons(8, Button.A)


# ---------------------------------------------------------------- title


def test_title_p_key_is_edge_triggered():
    h, kb, _, _ = make()
    kb.press(4, 5)
    assert (h.title_check() & 0x01) == 0x01
    assert (h.title_check() & 0x01) == 0


def test_title_v_key_joins_p2_only_in_keyboard_mode():
    h, kb, _, _ = make(mode=0)
    kb.press(5, 3)
    assert (h.title_check() & 0x02) == 0x02
    h2, kb2, _, _ = make(mode=1)
    kb2.press(5, 3)
    assert (h2.title_check() & 0x02) == 0


def test_title_f1_sets_bit_seven():
    h, kb, _, _ = make()
    kb.press(6, 5)
    assert (h.title_check() & 0x80) == 0x80


def test_title_number_keys():
    h, kb, _, _ = make()
    kb.press(0, 3)
    assert (h.title_check() & 0x04) == 0x04


def test_title_joystick_in_keyboard_mode_joins_p3():
    h, _, tap, _ = make(ports=2, mode=0)
    tap.set_buttons(0, Button.A)
    assert (h.title_check() & 0x04) == 0x04


def test_title_joystick_in_ninjatap_mode_maps_directly():
    h, _, tap, _ = make(ports=4, mode=1)
    tap.set_buttons(3, Button.A)
    assert (h.title_check() & 0x08) == 0x08


def test_title_ignores_undetected_ports():
    h, _, tap, _ = make(ports=0, mode=1)
    tap.set_buttons(0, Button.A)
    assert h.title_check() == 0


# ---------------------------------------------------------------- gameplay


def test_left_arrow_moves_then_auto_repeats():
    h, kb, _, game = make()
    p = game.players[0]
    start = 6
    place(p, O_PIECE, start)
    kb.press(8, 4)
    h.game_update()
    assert p.px == start - 1
    for _ in range(REPEAT_DELAY - 1):
        h.game_update()
    assert p.px == start - 1
    h.game_update()
    assert p.px == start - 2
    for _ in range(REPEAT_RATE - 1):
        h.game_update()
    assert p.px == start - 2
    h.game_update()
    assert p.px == start - 3


def test_left_and_right_together_cancel():
    h, kb, _, game = make()
    p = game.players[0]
    place(p, O_PIECE, 3)
    kb.press(8, 4)
    kb.press(8, 7)
    h.game_update()
    assert p.px == 3


def test_up_arrow_rotates_once_per_press():
    h, kb, _, game = make()
    p = game.players[0]
    place(p, T_PIECE, 3)
    num_rots = PIECES[T_PIECE].num_rots
    kb.press(8, 5)
    h.game_update()
    assert p.rot == 1 % num_rots
    h.game_update()
    assert p.rot == 1 % num_rots
    kb.release(8, 5)
    h.game_update()
    kb.press(8, 5)
    h.game_update()
    assert p.rot == 2 % num_rots


def test_down_arrow_soft_drops():
    h, kb, _, game = make()
    p = game.players[0]
    place(p, O_PIECE, 3, py=5)
    p.drop_timer = 9
    kb.press(8, 6)
    h.game_update()
    assert p.soft_drop
    assert p.py == 6
    assert p.drop_timer == 0
    h.game_update()
    assert p.py == 6
    kb.release(8, 6)
    h.game_update()
    assert not p.soft_drop


def test_p_key_cycles_target():
    h, kb, _, game = make()
    p = game.players[0]
    before = p.target_player
    kb.press(4, 5)
    h.game_update()
    assert p.target_player == before + 1


def test_wasd_controls_player_two():
    h, kb, _, game = make(mask=0x02)
    p = game.players[1]
    place(p, O_PIECE, 3)
    kb.press(3, 1)
    h.game_update()
    assert p.px == 4


def test_non_human_player_ignores_keyboard():
    h, kb, _, game = make(mask=0x00)
    p = game.players[0]
    place(p, O_PIECE, 3)
    kb.press(8, 4)
    h.game_update()
    assert p.px == 3


def test_joystick_drives_player_three_in_keyboard_mode():
    h, _, tap, game = make(ports=2, mask=0x04)
    p = game.players[2]
    place(p, O_PIECE, 3)
    tap.set_buttons(0, Button.LEFT | Button.A)
    h.game_update()
    assert p.px == 2
    assert p.target_player == 0


def test_ninjatap_mode_needs_five_ports():
    h, _, tap, game = make(ports=2, mask=0x01, mode=1)
    p = game.players[0]
    place(p, O_PIECE, 3)
    tap.set_buttons(0, Button.RIGHT)
    h.game_update()
    assert p.px == 3


def test_ninjatap_mode_drives_player_one():
    h, _, tap, game = make(ports=5, mask=0x01, mode=1)
    p = game.players[0]
    place(p, O_PIECE, 3)
    tap.set_buttons(0, Button.RIGHT)
    h.game_update()
    assert p.px == 4