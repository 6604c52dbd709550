"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction
from chipcore.constants import SCREEN_WIDTH, SCREEN_SIZE, ADDRESS_MASK, FLAG_REGISTER

# Sprite coordinate grids: up to 15 rows of 8 pixels
rows = jnp.arange(15)[:, None]
cols = jnp.arange(8)[None, :]


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Pixel positions are ``x + col + (y + row) * 64``; positions past the end of the
    framebuffer are clamped onto the last cell rather than wrapped. VF is set when
    any set pixel gets cleared.
    """
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32)
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32)

    addresses = (jnp.astype(state.I, jnp.int32) + rows[:, 0]) & ADDRESS_MASK
    sprite_bytes = jnp.astype(state.memory[addresses], jnp.int32)[:, None]
    bits = ((sprite_bytes >> (7 - cols)) & 1) * (rows < instruction.n)

    positions = jnp.minimum(sprite_x + cols + (sprite_y + rows) * SCREEN_WIDTH, SCREEN_SIZE - 1)
    hits = jnp.zeros(SCREEN_SIZE, dtype=jnp.int32).at[positions.ravel()].add(bits.ravel())

    # A cell hit more than once (only possible after clamping) collides on its second hit.
    collision = jnp.any(((hits > 0) & (state.framebuffer == 1)) | (hits > 1))

    return state.replace(
        framebuffer=state.framebuffer ^ jnp.astype(hits & 1, jnp.uint8),
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
        redraw=jnp.asarray(True),
    )
