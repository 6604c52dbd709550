"""Tests for the keyboard layout and debouncer."""

import pytest
from chipcore.keypad import KEY_LAYOUT, Debouncer, key_index, check_key


def test_layout_covers_every_key():
    assert sorted(KEY_LAYOUT.values()) == list(range(16))


@pytest.mark.parametrize("name,key", [("1", 0x1), ("4", 0xC), ("q", 0x4), ("x", 0x0), ("v", 0xF), ("F", 0xE)])
def test_key_index(name, key):
    assert key_index(name) == key


def test_unmapped_key():
    assert key_index("space") is None


def test_check_key_bounds():
    assert check_key(15) == 15
    with pytest.raises(ValueError):
        check_key(-1)
    with pytest.raises(ValueError):
        check_key(16)


def test_debouncer_holds_key_for_delay():
    debouncer = Debouncer(delay=3)
    debouncer.press(0xA)

    held = [debouncer.tick()[0xA] for _ in range(5)]

    assert held == [True, True, True, False, False]


def test_repeated_press_extends_hold():
    debouncer = Debouncer(delay=2)
    debouncer.press(1)
    debouncer.tick()
    debouncer.press(1)

    held = [debouncer.tick()[1] for _ in range(3)]

    assert held == [True, True, False]


def test_press_all():
    debouncer = Debouncer()
    debouncer.press_all([0, 5])

    keys = debouncer.tick()

    assert [i for i, k in enumerate(keys) if k] == [0, 5]
