import pytest

from tinitetris.vdp import (
    NUM_SPRITES,
    SPRITE_HIDDEN_Y,
    VRAM_CT,
    VRAM_NT,
    VRAM_SAT,
    VRAM_SIZE,
    Sprite,
    Vdp,
)


def test_fresh_vram_is_zeroed():
    vdp = Vdp()
    assert vdp.read_vram(0, VRAM_SIZE) == bytes(VRAM_SIZE)


def test_write_read_round_trip():
    vdp = Vdp()
    data = bytes(range(32))
    vdp.write_vram(data, VRAM_NT)
    assert vdp.read_vram(VRAM_NT, len(data)) == data
    assert vdp.read_vram(VRAM_NT + len(data), 4) == bytes(4)


def test_write_accepts_list():
    vdp = Vdp()
    vdp.write_vram([1, 2, 3], VRAM_CT)
    assert vdp.read_vram(VRAM_CT, 3) == bytes([1, 2, 3])


def test_fill_sets_only_requested_span():
    vdp = Vdp()
    vdp.fill_vram(0x11, 100, 10)
    assert vdp.read_vram(100, 10) == bytes([0x11] * 10)
    assert vdp.read_vram(99, 1) == bytes(1)
    assert vdp.read_vram(110, 1) == bytes(1)


def test_last_byte_is_addressable():
    vdp = Vdp()
    vdp.write_vram([0xAB], VRAM_SIZE - 1)
    assert vdp.read_vram(VRAM_SIZE - 1, 1) == bytes([0xAB])


@pytest.mark.parametrize("addr,count", [(VRAM_SIZE, 1), (VRAM_SIZE - 2, 3), (-1, 1)])
def test_out_of_range_read_raises(addr, count):
    with pytest.raises(ValueError):
        Vdp().read_vram(addr, count)


def test_out_of_range_write_raises():
    with pytest.raises(ValueError):
        Vdp().write_vram(bytes(8), VRAM_SIZE - 4)


def test_fill_rejects_non_byte():
    with pytest.raises(ValueError):
        Vdp().fill_vram(256, 0, 4)


def test_sprite_round_trip():
    vdp = Vdp()
    vdp.set_sprite(3, 40, 22, 0, 7)
    assert vdp.sprite(3) == Sprite(x=40, y=22, pattern=0, color=7)


def test_sprite_stored_y_first_in_attribute_table():
    vdp = Vdp()
    vdp.set_sprite(1, 68, SPRITE_HIDDEN_Y, 0, 9)
    assert vdp.read_vram(VRAM_SAT + 4, 4) == bytes([SPRITE_HIDDEN_Y, 68, 0, 9])


@pytest.mark.parametrize("index", [-1, NUM_SPRITES])
def test_sprite_index_out_of_range(index):
    vdp = Vdp()
    with pytest.raises(IndexError):
        vdp.set_sprite(index, 0, 0, 0, 0)
    with pytest.raises(IndexError):
        vdp.sprite(index)


def test_sprite_value_must_fit_byte():
    with pytest.raises(ValueError):
        Vdp().set_sprite(0, 300, 0, 0, 0)