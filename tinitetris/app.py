"""The whole program: title screen, match and results, driven frame by frame."""

from __future__ import annotations

import argparse
from collections.abc import Callable

from . import screens
from .controls import ESC_BIT, ESC_ROW, InputHandler, KeyboardMatrix, NinjaTap
from .game import NUM_PLAYERS, Game
from .music import MusicPlayer, Psg
from .render import Renderer
from .vdp import Vdp

TITLE_COUNTDOWN = 400
ATTRACT_TIMEOUT = 750
ALL_READY = (1 << NUM_PLAYERS) - 1
MAX_ELAPSED = 8
COUNTDOWN_FRAMES = 50
VICTORY_FRAMES = 200
STATS_FRAMES = 750


class Machine:
    """Video, sound, input and game state, advanced one vertical blank at a time."""

    def __init__(self, seed: int | None = None,
                 keyboard: KeyboardMatrix | None = None,
                 ninjatap: NinjaTap | None = None,
                 on_halt: Callable[[Machine], None] | None = None) -> None:
        self.game = Game(seed=seed)
        self.keyboard = keyboard if keyboard is not None else KeyboardMatrix()
        self.ninjatap = ninjatap if ninjatap is not None else NinjaTap()
        self.vdp = Vdp()
        self.renderer = Renderer(self.game, self.vdp)
        self.input = InputHandler(self.game, self.keyboard, self.ninjatap)
        self.music = MusicPlayer(Psg())
        self.on_halt = on_halt
        self.jiffy = 0
        self.renderer.init()

    def halt(self) -> None:
        """Wait for the next vertical blank."""
        self.jiffy = (self.jiffy + 1) & 0xFFFF
        if self.on_halt is not None:
            self.on_halt(self)

    def _wait(self, frames: int) -> None:
        for _ in range(frames):
            self.halt()
            self.music.update()

    def _esc_pressed(self) -> bool:
        return not self.keyboard.read(ESC_ROW) & (1 << ESC_BIT)

    def run_title(self) -> int:
        """Run the title screen until players have joined; return the human mask."""
        self.music.start_title()
        ready = 0
        timer = 0
        attract = ATTRACT_TIMEOUT
        screens.title_screen(self.renderer)
        screens.title_mode(self.renderer)

        while True:
            self.halt()
            self.music.update()
            pressed = self.input.title_check()
            if pressed & 0x80:
                self.game.input_mode ^= 1
                screens.title_mode(self.renderer)

            joined = False
            for p in range(NUM_PLAYERS):
                bit = 1 << p
                if pressed & bit and not ready & bit:
                    ready |= bit
                    screens.title_ready(self.renderer, p)
                    joined = True
            if joined:
                timer = TITLE_COUNTDOWN
                attract = 0
            if ready == ALL_READY:
                break

            if timer > 0:
                timer -= 1
                if timer == 0 and ready:
                    break
            if attract > 0:
                attract -= 1
                if attract == 0 and not ready:
                    break

        self.game.human_mask = ready
        for p in range(NUM_PLAYERS):
            if not ready & (1 << p):
                self.halt()
                screens.title_cpu(self.renderer, p)
        self._wait(60 if ready else 20)
        return ready

    def _tick_players(self) -> None:
        game = self.game
        ai_turn = game.frame & 3
        exec_tick = game.frame & 1
        for i, player in enumerate(game.players):
            if not game.human_mask & (1 << i):
                if i == ai_turn or (player.ai_computed and exec_tick):
                    game.ai_step(player)
            game.update(player)

    def _show_results(self, winner: int) -> None:
        self.music.start_victory()
        screens.victory(self.renderer, winner)
        for _ in range(VICTORY_FRAMES):
            self.halt()
            self.music.update()
            if self._esc_pressed():
                break
        screens.stats(self.renderer)
        for _ in range(STATS_FRAMES):
            self.halt()
            self.music.update()
            if self.keyboard.read(8) != 0xFF or self._esc_pressed():
                break

    def run_match(self) -> int | None:
        """Play one match; return the winner, or None if it was abandoned."""
        game = self.game
        game.reset()
        self.music.start_game()
        self.renderer.game_begin()

        for ch in "321":
            self.renderer.countdown(ch)
            self._wait(COUNTDOWN_FRAMES)
        self.renderer.clear_countdown()

        self.renderer.frame()
        last = self.jiffy

        while True:
            self.halt()
            elapsed = (self.jiffy - last) & 0xFF
            elapsed = min(max(elapsed, 1), MAX_ELAPSED)
            last = self.jiffy

            self.input.game_update()
            for _ in range(elapsed):
                self._tick_players()
                self.music.update()
                game.frame = (game.frame + 1) & 0xFF

            self.renderer.frame()

            winner = game.winner()
            if winner is not None:
                self._show_results(winner)
                return winner

            # In attract mode any key returns to the title.
            if game.human_mask == 0 and game.input_mode == 0:
                if self.keyboard.read(8) != 0xFF:
                    return None

            if self._esc_pressed():
                return None

    def run(self, rounds: int) -> list[int | None]:
        """Cycle title and match ``rounds`` times; return each match's outcome."""
        if rounds < 0:
            raise ValueError(f"rounds must not be negative, got {rounds}")
        results: list[int | None] = []
        for _ in range(rounds):
            self.run_title()
            results.append(self.run_match())
        return results


def main(argv: list[str] | None = None) -> int:
    """Run matches without a display and report who won each."""
    parser = argparse.ArgumentParser(
        prog="tinitetris",
        description="Four-player falling-block matches, played by the computer.",
    )
    parser.add_argument("--rounds", type=int, default=1, help="number of matches")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args(argv)
    if args.rounds < 0:
        parser.error("--rounds must not be negative")

    machine = Machine(seed=args.seed)
    for n, result in enumerate(machine.run(args.rounds), start=1):
        if result is None:
            print(f"Match {n}: abandoned")
        else:
            print(f"Match {n}: player {result + 1} wins")
    return 0