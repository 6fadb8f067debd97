# tinitetris

A four-player falling-block battle game. Each of the four players has an
8×20 board. When a player clears lines, garbage rows go to the player they
are targeting. T-spins and combos make the attack bigger. Any seat that
nobody claims on the title screen is played by the computer. The last
player left alive wins.

The package holds the full game rules and a computer opponent. It also
models the machine the game runs on: video RAM with sprites, the sound
chip's registers, a keyboard matrix and joystick ports. A whole session
(title screen, match, victory and stats screens) can be run frame by frame
against these models.

## Installation

```
pip install .
```

To install with the test dependencies as well:

```
pip install .[test]
```

## Command

```
tinitetris [--rounds N] [--seed SEED]
```

This runs `N` sessions, one by default. Each session goes through the
title screen, a match, and the victory and stats screens. No keys are
pressed, so the title screen times out into attract mode, and four
computer players play each match. For each match the command prints one
line, for example `Match 1: player 3 wins`, or `Match 1: abandoned` if the
match ended without a winner. Use `--seed` to make a run repeatable. A
negative `--rounds` is rejected.

## Library use

The game rules can be used on their own:

```python
from tinitetris.game import Game

game = Game(seed=1)
while game.winner() is None:
    for player in game.players:
        game.ai_step(player)
        game.update(player)
print("winner:", game.winner())
```

`Game` also has `move`, `rotate`, `drop`, `cycle_target`, `add_garbage`,
`spawn`, `is_valid` and `reset`. Each `Player` keeps its board, score,
lines, level and match statistics (`garbage_sent`, `t_spin_count`,
`max_combo`).

To drive a whole session, use `tinitetris.app.Machine`. Its `run(rounds)`
method returns the outcome of each match. `run_title()` and `run_match()`
run the two phases separately. For scripted input, pass your own
`KeyboardMatrix` and `NinjaTap`. An `on_halt` callback is called once per
frame, and you can use it to press and release keys or set joystick
buttons.

Modules:

- `tinitetris.pieces`: piece shapes and rotations (`piece_rotation`, `PIECES`).
- `tinitetris.tiles`: tile indices (`Tile`), player colours, the 3×5 font
  (`glyph`), colour-table builders and `board_tile`.
- `tinitetris.game`: board rules, line clears, garbage, targeting and the
  computer opponent (`Game`, `Player`).
- `tinitetris.vdp`: 16K video RAM and the sprite table (`Vdp`, `Sprite`).
- `tinitetris.controls`: the keyboard matrix, the joystick ports and
  per-player input with auto-repeat (`KeyboardMatrix`, `NinjaTap`,
  `Button`, `InputHandler`).
- `tinitetris.render`: drawing the boards, headers, ghost pieces and
  targeting arrows into video RAM (`Renderer`).
- `tinitetris.music`: the title, game and victory tunes and their player
  (`MusicPlayer`, `Psg`, `Tune`, `Note`).
- `tinitetris.screens`: the title, victory and stats screens.
- `tinitetris.app`: the session loop (`Machine`) and the command (`main`).

## What it does not do

The package never opens a window and never plays sound. Everything is
drawn into the in-memory `Vdp`, and tunes only set `Psg` register values.
It does not read a real keyboard or joystick either. Input comes only from
the `KeyboardMatrix` and `NinjaTap` objects that the caller fills in. As a
result, the `tinitetris` command can only run computer-played matches.

## Tests

```
pytest
```