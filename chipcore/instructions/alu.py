"""CHIP-8 ALU operations (8xxx)."""

import jax.numpy as jnp
from chipcore.constants import FLAG_REGISTER
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction

# Each ALU op maps (vx, vy) to (result, flag). A flag of None leaves VF alone.


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.uint16) + jnp.astype(vy, jnp.uint16)
    return jnp.astype(result & 0xFF, jnp.uint8), jnp.astype(result >> 8, jnp.uint8)


def _subtract(minuend, subtrahend):
    # Borrow in from bit 8, so VF = 1 means no borrow occurred.
    result = (0x100 | jnp.astype(minuend, jnp.uint16)) - jnp.astype(subtrahend, jnp.uint16)
    return jnp.astype(result & 0xFF, jnp.uint8), jnp.astype((result & 0x100) >> 8, jnp.uint8)


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    return _subtract(vx, vy)


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    return _subtract(vy, vx)


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1, VF = shifted-out bit."""
    return vx >> 1, vx & 1


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1, VF = shifted-out bit."""
    return jnp.astype((jnp.astype(vx, jnp.uint16) << 1) & 0xFF, jnp.uint8), vx >> 7


def make_alu_instruction(alu_fn, shift: bool = False):
    """Factory wrapping an ALU op into an instruction handler."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        if shift and state.quirks.shift_uses_vy:
            vx = vy

        result, flag = alu_fn(vx, vy)

        new_V = state.V.at[instruction.x].set(result)
        if flag is not None:
            new_V = new_V.at[FLAG_REGISTER].set(flag)
        return state.replace(V=new_V)
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right, shift=True)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left, shift=True)
