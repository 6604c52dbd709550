"""Mutable interpreter facade over the functional core.

The core functions in :mod:`chipcore.emulator` map one immutable
:class:`~chipcore.state.EmulatorState` to the next. Drivers usually want an
object they can poke between cycles instead: :class:`Interpreter` owns the
current state, replaces it on every :meth:`Interpreter.step`, and turns the beep
edge and faults into callbacks.
"""

from typing import Callable, Iterable, List, Optional

import jax
import jax.numpy as jnp
import numpy as np
from tqdm import tqdm

from chipcore.constants import MAX_PROGRAM_SIZE, NUM_KEYS
from chipcore.emulator import step, load_program
from chipcore.keypad import check_key
from chipcore.logging import EmulatorLogger, default_logger
from chipcore.state import EmulatorState, Fault, Quirks, create_state


class Interpreter:
    """A CHIP-8 machine advanced one cycle at a time by its driver.

    Args:
        quirks: Compatibility policies, defaults to :class:`Quirks()`
        seed: Seed for the random number generator used by CXNN
        logger: Logger receiving faults, beeps and load messages
        on_beep: Called with the cycle number when the sound timer expires
        on_fault: Called with the :class:`Fault` when a step reports one
    """

    def __init__(
        self,
        quirks: Optional[Quirks] = None,
        seed: int = 0,
        logger: Optional[EmulatorLogger] = None,
        on_beep: Optional[Callable[[int], None]] = None,
        on_fault: Optional[Callable[[Fault], None]] = None,
    ):
        self.quirks = quirks or Quirks()
        self.seed = seed
        self.logger = logger or default_logger
        self.on_beep = on_beep
        self.on_fault = on_fault
        self.program = b""
        self.reset(reload=False)

    def reset(self, reload: bool = True):
        """Return to power-on state, reloading the last program unless told otherwise."""
        self.state: EmulatorState = create_state(jax.random.PRNGKey(self.seed), self.quirks)
        self.cycles = 0
        if reload and self.program:
            self.state = load_program(self.state, self.program)

    def load(self, data: bytes, truncate: bool = False, source: str = "<bytes>"):
        """Copy a raw program image into memory at 0x200.

        The image kept for :meth:`reset` is the one actually loaded, so a
        truncated program reloads truncated.
        """
        self.state = load_program(self.state, data, truncate=truncate)
        self.program = bytes(data)[:MAX_PROGRAM_SIZE]
        self.logger.log_program_loaded(len(self.program), source)

    def load_rom(self, filename: str, truncate: bool = False):
        """Load a program image from a file."""
        with open(filename, 'rb') as f:
            data = f.read()
        self.load(data, truncate=truncate, source=filename)

    def step(self):
        """Advance one fetch-decode-execute cycle plus one timer tick."""
        self.state = step(self.state, self.logger)
        self.cycles += 1

        if self.beeped:
            self.logger.log_beep(self.cycles)
            if self.on_beep is not None:
                self.on_beep(self.cycles)

        fault = self.fault
        if fault != Fault.NONE and self.on_fault is not None:
            self.on_fault(fault)

    def run(self, cycles: int, progress: bool = False) -> List[np.ndarray]:
        """Run ``cycles`` steps, returning a framebuffer copy for each redraw.

        Redraw requests are consumed, so the caller receives each frame once.
        """
        frames = []
        for _ in tqdm(range(cycles), desc="Running", unit="cycle", disable=not progress):
            self.step()
            if self.redraw_pending:
                frames.append(np.array(self.state.framebuffer))
                self.clear_redraw()
        return frames

    def press(self, key: int):
        self.state = self.state.replace(keypad=self.state.keypad.at[check_key(key)].set(True))

    def release(self, key: int):
        self.state = self.state.replace(keypad=self.state.keypad.at[check_key(key)].set(False))

    def set_keypad(self, keys: Iterable[bool]):
        """Replace all 16 key states at once."""
        keys = list(keys)
        if len(keys) != NUM_KEYS:
            raise ValueError(f"Expected {NUM_KEYS} key states, got {len(keys)}")
        self.state = self.state.replace(keypad=jnp.array(keys, dtype=jnp.bool_))

    def clear_redraw(self):
        """Acknowledge that the current framebuffer has been presented."""
        self.state = self.state.replace(redraw=jnp.asarray(False))

    @property
    def framebuffer(self) -> np.ndarray:
        """Pixels as a (32, 64) uint8 grid."""
        return np.asarray(self.state.screen)

    @property
    def redraw_pending(self) -> bool:
        return bool(self.state.redraw)

    @property
    def beeped(self) -> bool:
        return bool(self.state.beep)

    @property
    def awaiting_key(self) -> bool:
        return bool(self.state.awaiting_key)

    @property
    def fault(self) -> Fault:
        return Fault(int(self.state.fault))
