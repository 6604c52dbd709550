"""CHIP-8 machine state structures."""

import dataclasses
import enum

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipcore.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_SIZE, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS,
)

STACK_POLICIES = ("strict", "wrap")


class Fault(enum.IntEnum):
    """Condition reported by the most recent step."""
    NONE = 0
    UNKNOWN_INSTRUCTION = 1
    STACK_OVERFLOW = 2
    STACK_UNDERFLOW = 3


@dataclasses.dataclass(unsafe_hash=True)
class Quirks:
    """Compatibility policies for behaviours that differ between CHIP-8 interpreters.

    Attributes:
        stack_policy: "strict" reports stack overflow/underflow as a fault and skips the
            offending call/return; "wrap" lets the stack pointer wrap silently modulo 16.
        key_wait_scans_f: FX0A also scans key 0xF (the classic scan stops at 0xE).
        memory_increments_index: FX55/FX65 advance I by X + 1 after the transfer.
        shift_uses_vy: 8XY6/8XYE shift VY into VX instead of shifting VX in place.
        jump_uses_vx: BXNN jumps to XNN + VX instead of NNN + V0.
        font_address_includes_base: FX29 points I at FONT_START + 5 * VX instead of 5 * VX.
    """
    stack_policy: str = "strict"
    key_wait_scans_f: bool = False
    memory_increments_index: bool = False
    shift_uses_vy: bool = False
    jump_uses_vx: bool = False
    font_address_includes_base: bool = False

    def __post_init__(self):
        if self.stack_policy not in STACK_POLICIES:
            raise ValueError(
                f"Unknown stack policy '{self.stack_policy}'. Available: {list(STACK_POLICIES)}"
            )


@dataclass(frozen=True)
class StackState:
    """Call stack; pointer is the next free slot."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


class EmulatorState(PyTreeNode):
    """Complete CHIP-8 machine state.

    ``V[0xF]`` is both a general purpose register and the flag register: carry, borrow,
    shifted-out bit, index overflow and sprite collision all land there.
    ``framebuffer`` is flat and row-major, pixel (x, y) lives at ``x + y * 64``.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    framebuffer: jnp.ndarray = field(default_factory=lambda: jnp.zeros(SCREEN_SIZE, dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    redraw: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    beep: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    awaiting_key: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    quirks: Quirks = field(pytree_node=False, default=Quirks())

    @property
    def screen(self) -> jnp.ndarray:
        """Framebuffer as a (height, width) grid."""
        return self.framebuffer.reshape(SCREEN_HEIGHT, SCREEN_WIDTH)


def create_state(rng: jax.random.PRNGKey = jax.random.PRNGKey(0), quirks: Quirks = None) -> EmulatorState:
    """Create initial machine state with font data loaded."""
    state = EmulatorState(rng, quirks=quirks or Quirks())
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
