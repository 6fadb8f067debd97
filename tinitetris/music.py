"""A two-channel tune player driving the sound chip's tone registers."""

from __future__ import annotations

from dataclasses import dataclass

NUM_REGISTERS = 16

# Tone periods for a ~1.7734 MHz clock.
_PERIODS = {
    "R": 0,
    "A2": 1008, "B2": 898, "C3": 848, "D3": 756, "E3": 674, "F3": 636,
    "G3": 566, "Gs3": 534,
    "A3": 504, "Bb3": 476, "B3": 449,
    "C4": 424, "Cs4": 400, "D4": 378, "Ds4": 357, "E4": 337, "F4": 318,
    "Fs4": 300, "G4": 283, "Gs4": 267, "A4": 252, "Bb4": 238, "B4": 224,
    "C5": 212, "D5": 189, "E5": 168,
}

# Lengths in 50 Hz frames; a quarter note is 20 frames.
_DURATIONS = {"16": 5, "8": 10, "4": 20, "4.": 30, "2": 40, "1": 80}


@dataclass(frozen=True)
class Note:
    """A tone period (0 for a rest) held for ``dur`` frames."""

    period: int
    dur: int

    @property
    def is_rest(self) -> bool:
        return self.period == 0


def _notes(text: str) -> tuple[Note, ...]:
    result = []
    for token in text.split():
        name, length = token.split(":")
        result.append(Note(_PERIODS[name], _DURATIONS[length]))
    return tuple(result)


@dataclass(frozen=True)
class Tune:
    """Melody and bass lines with their volumes.

    A tune that holds its tail keeps repeating its last two entries once it
    reaches the end instead of starting over.
    """

    name: str
    melody: tuple[Note, ...]
    bass: tuple[Note, ...]
    melody_volume: int
    bass_volume: int
    hold_tail: bool = False


TITLE = Tune(
    "title",
    _notes("C4:8 E4:8 G4:4 G4:8 A4:8 G4:4 E4:4 C4:8 D4:8 E4:4 E4:8 F4:8 E4:4 D4:4 "
           "C4:8 E4:8 G4:4 A4:8 B4:8 C5:4 A4:4 G4:8 F4:8 E4:8 D4:8 C4:2 R:4 R:4"),
    _notes("C3:4 C3:4 E3:4 E3:4 C3:4 C3:4 F3:4 F3:4 G3:4 G3:4 G3:4 G3:4 "
           "C3:4 C3:4 F3:4 F3:4 E3:4 F3:4 G3:4 G3:4 G3:4 G3:4 C3:2 R:4 R:4"),
    melody_volume=12,
    bass_volume=9,
)

GAME = Tune(
    "game",
    _notes("E4:4 B3:8 C4:8 D4:4 C4:8 B3:8 A3:4 A3:8 C4:8 E4:4 D4:8 C4:8 "
           "B3:4. C4:8 D4:4 E4:4 C4:4 A3:4 A3:4 R:4 "
           "R:8 D4:4. F4:8 A4:4 G4:8 F4:8 E4:4. C4:8 E4:4 D4:8 C4:8 "
           "B3:4. C4:8 D4:4 E4:4 C4:4 A3:4 A3:4 R:4 "
           "E4:2 E4:2 C4:2 C4:2 A3:2 A3:2 R:4 R:4"),
    _notes("E3:4 E3:4 E3:4 E3:4 A2:4 A2:4 A2:4 A2:4 Gs3:4 Gs3:4 E3:4 E3:4 "
           "A2:4 A2:4 A2:4 R:4 "
           "D3:4 D3:4 D3:4 D3:4 C3:4 C3:4 C3:4 C3:4 Gs3:4 Gs3:4 E3:4 E3:4 "
           "A2:4 A2:4 A2:4 R:4 "
           "A2:2 A2:2 A2:2 A2:2 A2:2 A2:2 R:4 R:4"),
    melody_volume=12,
    bass_volume=9,
)

VICTORY = Tune(
    "victory",
    _notes("C4:8 E4:8 G4:8 C5:4 R:8 G4:8 C5:4. "
           "R:8 E4:8 G4:8 A4:4 G4:8 E4:8 C4:4 E4:4 C4:2 R:4 R:4 "
           "C4:8 E4:8 G4:8 C5:2 G4:4 E4:4 C4:2 C4:2 R:2 R:2"),
    _notes("C3:4 C3:4 E3:4 C3:4 G3:4 G3:4 C3:4. "
           "R:8 C3:4 C3:4 F3:4 G3:4 C3:4 G3:4 C3:2 R:4 R:4 "
           "C3:4 C3:4 E3:4 C3:2 G3:4 C3:4 C3:2 C3:2 R:2 R:2"),
    melody_volume=14,
    bass_volume=11,
    hold_tail=True,
)


class Psg:
    """The sound chip's sixteen byte-wide registers."""

    def __init__(self) -> None:
        self.registers = [0] * NUM_REGISTERS

    def set_register(self, reg: int, value: int) -> None:
        """Store ``value`` in register ``reg``."""
        if not 0 <= reg < NUM_REGISTERS:
            raise ValueError(f"register {reg} out of range")
        if not 0 <= value <= 0xFF:
            raise ValueError(f"register value {value} does not fit in a byte")
        self.registers[reg] = value


class MusicPlayer:
    """Plays a tune frame by frame: melody on channel A, bass on channel B."""

    def __init__(self, psg: Psg | None = None) -> None:
        self.psg = psg if psg is not None else Psg()
        self.tune = TITLE
        self._reset()

    def _reset(self) -> None:
        self._mel_idx = 0
        self._bas_idx = 0
        self._mel_timer = 1
        self._bas_timer = 1

    def start_title(self) -> None:
        """Set up the mixer and start the title theme."""
        # Port B stays an output (bit 7) so joystick pulses reach the pins.
        self.psg.set_register(7, 0xBC)
        self.psg.set_register(8, 12)
        self.psg.set_register(9, 9)
        self.psg.set_register(10, 0)
        self.tune = TITLE
        self._reset()

    def start_game(self) -> None:
        """Switch to the in-game theme."""
        self.tune = GAME
        self._reset()
        self.psg.set_register(8, 12)
        self.psg.set_register(9, 9)

    def start_victory(self) -> None:
        """Switch to the victory fanfare."""
        self.tune = VICTORY
        self._reset()
        self.psg.set_register(8, 14)
        self.psg.set_register(9, 11)

    def _advance(self, notes: tuple[Note, ...], idx: int, timer: int,
                 tone_reg: int, vol_reg: int, volume: int) -> tuple[int, int]:
        timer -= 1
        if timer != 0:
            return idx, timer
        note = notes[idx]
        timer = note.dur
        idx += 1
        if idx >= len(notes):
            idx = len(notes) - 2 if self.tune.hold_tail else 0
        if note.is_rest:
            self.psg.set_register(vol_reg, 0)
        else:
            self.psg.set_register(tone_reg, note.period & 0xFF)
            self.psg.set_register(tone_reg + 1, (note.period >> 8) & 0x0F)
            self.psg.set_register(vol_reg, volume)
        return idx, timer

    def update(self) -> None:
        """Advance one frame, starting new notes as the current ones run out."""
        tune = self.tune
        self._mel_idx, self._mel_timer = self._advance(
            tune.melody, self._mel_idx, self._mel_timer, 0, 8, tune.melody_volume)
        self._bas_idx, self._bas_timer = self._advance(
            tune.bass, self._bas_idx, self._bas_timer, 2, 9, tune.bass_volume)