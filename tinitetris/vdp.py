"""An in-memory model of the 16K video RAM and the sprite attribute table."""

from __future__ import annotations

from dataclasses import dataclass

VRAM_SIZE = 0x4000

VRAM_PT = 0x0000
VRAM_NT = 0x1800
VRAM_CT = 0x2000
VRAM_SAT = 0x1B00
VRAM_SPT = 0x3800
BANK_SIZE = 2048

NAME_TABLE_SIZE = 768
NUM_SPRITES = 32
SPRITE_HIDDEN_Y = 208


@dataclass(frozen=True)
class Sprite:
    """One entry of the sprite attribute table."""

    x: int
    y: int
    pattern: int
    color: int


def _check_byte(name: str, value: int) -> int:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} {value} does not fit in a byte")
    return value


class Vdp:
    """Video RAM with pattern, name, colour and sprite tables at fixed addresses."""

    def __init__(self, sat: int = VRAM_SAT, spt: int = VRAM_SPT) -> None:
        self.vram = bytearray(VRAM_SIZE)
        self.sat = sat
        self.spt = spt
        self.mode: str | None = None
        self.backdrop = 0

    @staticmethod
    def _check_range(addr: int, count: int) -> None:
        if count < 0:
            raise ValueError(f"negative length {count}")
        if addr < 0 or addr + count > VRAM_SIZE:
            raise ValueError(
                f"range {addr:#06x}+{count} lies outside video RAM"
            )

    def write_vram(self, data: bytes | bytearray | list[int], addr: int) -> None:
        """Copy ``data`` into video RAM starting at ``addr``."""
        payload = bytes(data)
        self._check_range(addr, len(payload))
        self.vram[addr:addr + len(payload)] = payload

    def fill_vram(self, value: int, addr: int, count: int) -> None:
        """Set ``count`` bytes from ``addr`` to ``value``."""
        _check_byte("fill value", value)
        self._check_range(addr, count)
        self.vram[addr:addr + count] = bytes([value]) * count

    def read_vram(self, addr: int, count: int) -> bytes:
        """Return ``count`` bytes of video RAM starting at ``addr``."""
        self._check_range(addr, count)
        return bytes(self.vram[addr:addr + count])

    def _sprite_addr(self, index: int) -> int:
        if not 0 <= index < NUM_SPRITES:
            raise IndexError(f"sprite index {index} out of range")
        return self.sat + index * 4

    def set_sprite(self, index: int, x: int, y: int, pattern: int, color: int) -> None:
        """Write a sprite's attributes (stored as y, x, pattern, colour)."""
        addr = self._sprite_addr(index)
        entry = [
            _check_byte("y", y),
            _check_byte("x", x),
            _check_byte("pattern", pattern),
            _check_byte("color", color),
        ]
        self.write_vram(entry, addr)

    def sprite(self, index: int) -> Sprite:
        """Read back a sprite's attributes."""
        y, x, pattern, color = self.read_vram(self._sprite_addr(index), 4)
        return Sprite(x=x, y=y, pattern=pattern, color=color)