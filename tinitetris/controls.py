"""Keyboard and joystick input for the title screen and for play."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag

from .game import NUM_PLAYERS, Game, Player

REPEAT_DELAY = 12
REPEAT_RATE = 3

KEYBOARD_ROWS = 11
ESC_ROW = 7
ESC_BIT = 2
MAX_PORTS = 8

MODE_KB_JOY = 0
MODE_NINJATAP = 1


class Button(IntFlag):
    """Joystick lines, in the bit order a port reports them."""

    UP = 0x01
    DOWN = 0x02
    LEFT = 0x04
    RIGHT = 0x08
    A = 0x10
    B = 0x20


def _low(byte: int, mask: int) -> bool:
    """Lines are active low: a clear bit means held."""
    return not byte & mask


class KeyboardMatrix:
    """The keyboard as rows of eight active-low key bits."""

    def __init__(self) -> None:
        self._rows = [0xFF] * KEYBOARD_ROWS

    @staticmethod
    def _check(row: int, bit: int | None = None) -> None:
        if not 0 <= row < KEYBOARD_ROWS:
            raise IndexError(f"keyboard row {row} out of range")
        if bit is not None and not 0 <= bit < 8:
            raise ValueError(f"keyboard bit {bit} out of range")

    def read(self, row: int) -> int:
        """Return the row byte; a zero bit is a held key."""
        self._check(row)
        return self._rows[row]

    def press(self, row: int, bit: int) -> None:
        """Hold the key at ``row``/``bit``."""
        self._check(row, bit)
        self._rows[row] &= ~(1 << bit) & 0xFF

    def release(self, row: int, bit: int) -> None:
        """Let go of the key at ``row``/``bit``."""
        self._check(row, bit)
        self._rows[row] |= 1 << bit


class NinjaTap:
    """Joystick ports, latched once per update, with the previous latch kept."""

    def __init__(self, port_count: int = 2) -> None:
        if not 0 <= port_count <= MAX_PORTS:
            raise ValueError(f"port count {port_count} out of range")
        self.port_count = port_count
        self._live = [0xFF] * MAX_PORTS
        self._data = [0xFF] * MAX_PORTS
        self._prev = [0xFF] * MAX_PORTS

    @staticmethod
    def _check(joy: int) -> None:
        if not 0 <= joy < MAX_PORTS:
            raise IndexError(f"joystick {joy} out of range")

    def set_buttons(self, joy: int, buttons: Button | int) -> None:
        """Set which buttons are physically held on ``joy``; seen after update."""
        self._check(joy)
        self._live[joy] = ~int(Button(buttons)) & 0xFF

    def update(self) -> None:
        """Latch the held buttons, keeping the former latch as previous."""
        self._prev = list(self._data)
        self._data = list(self._live)

    def is_pressed(self, joy: int, button: Button) -> bool:
        """Return whether ``button`` was held at the last latch."""
        self._check(joy)
        return _low(self._data[joy], button)

    def was_pressed(self, joy: int, button: Button) -> bool:
        """Return whether ``button`` was held at the latch before."""
        self._check(joy)
        return _low(self._prev[joy], button)

    def is_pushed(self, joy: int, button: Button) -> bool:
        """Return whether ``button`` went down between the last two latches."""
        return self.is_pressed(joy, button) and not self.was_pressed(joy, button)


@dataclass(frozen=True)
class _Pad:
    left: bool
    right: bool
    rotate: bool
    drop: bool


class InputHandler:
    """Turns keyboard and joystick state into moves for the human players.

    In the keyboard+joystick mode player 1 uses the arrows and P, player 2
    uses WASD and V, and players 3 and 4 use the two joystick ports.
    In NinjaTap mode all four players use tap ports 0-3.
    """

    def __init__(self, game: Game, keyboard: KeyboardMatrix | None = None,
                 ninjatap: NinjaTap | None = None) -> None:
        self.game = game
        self.keyboard = keyboard if keyboard is not None else KeyboardMatrix()
        self.ninjatap = ninjatap if ninjatap is not None else NinjaTap()
        self.ports = self.ninjatap.port_count
        self._rep_timer = [0] * NUM_PLAYERS
        self._prev_p1_r8 = 0xFF
        self._prev_p1_r4 = 0xFF
        self._prev_p2_r2 = 0xFF
        self._prev_p2_r3 = 0xFF
        self._prev_p2_r5 = 0xFF
        self._title_r4 = 0xFF
        self._title_r5 = 0xFF
        self._title_r0 = 0xFF
        self._title_r6 = 0xFF

    # ------------------------------------------------------------------
    # Shared movement handling
    # ------------------------------------------------------------------

    def _steer(self, p: Player, p_num: int, dx: int, held_before: bool) -> None:
        if not held_before:
            self.game.move(p, dx)
            self._rep_timer[p_num] = 0
            return
        self._rep_timer[p_num] = (self._rep_timer[p_num] + 1) & 0xFF
        t = self._rep_timer[p_num]
        if t >= REPEAT_DELAY and (t - REPEAT_DELAY) % REPEAT_RATE == 0:
            self.game.move(p, dx)

    def _do_player(self, p_num: int, now: _Pad, before: _Pad) -> None:
        p = self.game.players[p_num]
        if now.rotate and not before.rotate:
            self.game.rotate(p)

        p.soft_drop = now.drop
        if now.drop and not before.drop:
            self.game.drop(p)
            p.drop_timer = 0

        if now.left and not now.right:
            self._steer(p, p_num, -1, before.left)
        elif now.right and not now.left:
            self._steer(p, p_num, 1, before.right)
        else:
            self._rep_timer[p_num] = 0

    def _do_joy_player(self, p_num: int, joy: int) -> None:
        tap = self.ninjatap
        now = _Pad(
            left=tap.is_pressed(joy, Button.LEFT),
            right=tap.is_pressed(joy, Button.RIGHT),
            rotate=tap.is_pressed(joy, Button.UP),
            drop=tap.is_pressed(joy, Button.DOWN),
        )
        before = _Pad(
            left=tap.was_pressed(joy, Button.LEFT),
            right=tap.was_pressed(joy, Button.RIGHT),
            rotate=tap.was_pressed(joy, Button.UP),
            drop=tap.was_pressed(joy, Button.DOWN),
        )
        self._do_player(p_num, now, before)
        if tap.is_pushed(joy, Button.A):
            self.game.cycle_target(self.game.players[p_num], p_num)

    @staticmethod
    def _arrows(row8: int) -> _Pad:
        return _Pad(left=_low(row8, 0x10), right=_low(row8, 0x80),
                    rotate=_low(row8, 0x20), drop=_low(row8, 0x40))

    def _do_keyboard_p1(self) -> None:
        row8 = self.keyboard.read(8)
        row4 = self.keyboard.read(4)
        self._do_player(0, self._arrows(row8), self._arrows(self._prev_p1_r8))
        if _low(row4, 0x20) and not _low(self._prev_p1_r4, 0x20):
            self.game.cycle_target(self.game.players[0], 0)
        self._prev_p1_r8 = row8
        self._prev_p1_r4 = row4

    @staticmethod
    def _wasd(row2: int, row3: int, row5: int) -> _Pad:
        return _Pad(left=_low(row2, 0x40), right=_low(row3, 0x02),
                    rotate=_low(row5, 0x10), drop=_low(row5, 0x01))

    def _do_keyboard_p2(self) -> None:
        row2 = self.keyboard.read(2)
        row3 = self.keyboard.read(3)
        row5 = self.keyboard.read(5)
        self._do_player(
            1,
            self._wasd(row2, row3, row5),
            self._wasd(self._prev_p2_r2, self._prev_p2_r3, self._prev_p2_r5),
        )
        if _low(row5, 0x08) and not _low(self._prev_p2_r5, 0x08):
            self.game.cycle_target(self.game.players[1], 1)
        self._prev_p2_r2 = row2
        self._prev_p2_r3 = row3
        self._prev_p2_r5 = row5

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def title_check(self) -> int:
        """Return a mask of players who just pressed join; bit 7 is the mode toggle."""
        result = 0
        row4 = self.keyboard.read(4)
        row6 = self.keyboard.read(6)

        if _low(row4, 0x20) and not _low(self._title_r4, 0x20):
            result |= 0x01
        self._title_r4 = row4

        if self.game.input_mode == MODE_KB_JOY:
            row5 = self.keyboard.read(5)
            if _low(row5, 0x08) and not _low(self._title_r5, 0x08):
                result |= 0x02
            self._title_r5 = row5

        if _low(row6, 0x20) and not _low(self._title_r6, 0x20):
            result |= 0x80
        self._title_r6 = row6

        row0 = self.keyboard.read(0)
        for k in range(NUM_PLAYERS):
            mask = 1 << (k + 1)
            if _low(row0, mask) and not _low(self._title_r0, mask):
                result |= 1 << k
        self._title_r0 = row0

        self.ninjatap.update()
        for port in range(min(self.ports, NUM_PLAYERS)):
            if self.ninjatap.is_pushed(port, Button.A):
                if self.game.input_mode == MODE_KB_JOY:
                    result |= 1 << (port + 2)
                else:
                    result |= 1 << port
        return result

    def game_update(self) -> None:
        """Apply this frame's input to every human player."""
        self.ninjatap.update()
        mask = self.game.human_mask
        if self.game.input_mode == MODE_KB_JOY:
            if mask & 0x01:
                self._do_keyboard_p1()
            if mask & 0x02:
                self._do_keyboard_p2()
            if self.ports >= 1:
                if mask & 0x04:
                    self._do_joy_player(2, 0)
                if self.ports >= 2 and mask & 0x08:
                    self._do_joy_player(3, 1)
        elif self.ports >= 5:
            for p_num in range(NUM_PLAYERS):
                if mask & (1 << p_num):
                    self._do_joy_player(p_num, p_num)