"""Keyboard layout and input debouncing for drivers.

The interpreter only sees 16 boolean keys. Physical keys map onto them through the
conventional 4x4 layout::

    1 2 3 4        1 2 3 C
    q w e r   ->   4 5 6 D
    a s d f        7 8 9 E
    z x c v        A 0 B F
"""

from typing import Dict, Iterable, List

from chipcore.constants import NUM_KEYS

KEY_LAYOUT: Dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}

DEBOUNCE_CYCLES = 25


def key_index(name: str):
    """Keypad index for a physical key name, or None when the key is unmapped."""
    return KEY_LAYOUT.get(name.lower())


def check_key(key: int) -> int:
    if not 0 <= int(key) < NUM_KEYS:
        raise ValueError(f"Key index must be in [0, {NUM_KEYS}), got {key}")
    return int(key)


class Debouncer:
    """Holds keys down for a fixed number of cycles after each press.

    Drivers that only see key-down events call :meth:`press` on each event and
    :meth:`tick` once per interpreter cycle; a key stays held until its counter
    runs out.
    """

    def __init__(self, delay: int = DEBOUNCE_CYCLES):
        self.delay = delay
        self.counters: List[int] = [0] * NUM_KEYS
        self.held: List[bool] = [False] * NUM_KEYS

    def press(self, key: int):
        key = check_key(key)
        self.held[key] = True
        self.counters[key] = self.delay

    def tick(self) -> List[bool]:
        """Advance one cycle and return the keys still held."""
        for key in range(NUM_KEYS):
            if self.counters[key] > 0:
                self.counters[key] -= 1
            else:
                self.held[key] = False
        return list(self.held)

    def press_all(self, keys: Iterable[int]):
        for key in keys:
            self.press(key)
