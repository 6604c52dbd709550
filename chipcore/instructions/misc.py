"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import EmulatorState
from chipcore.decode import DecodedInstruction
from chipcore.constants import (
    FONT_START, FONT_GLYPH_SIZE, ADDRESS_MASK, FLAG_REGISTER, NUM_KEYS, NUM_REGISTERS,
)


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register, VF = 1 if the sum leaves the 12-bit range."""
    new_i = jnp.astype(state.I, jnp.uint16) + jnp.astype(state.V[instruction.x], jnp.uint16)
    overflow_flag = jnp.astype(new_i > ADDRESS_MASK, jnp.uint8)
    return state.replace(
        I=new_i & ADDRESS_MASK,
        V=state.V.at[FLAG_REGISTER].set(overflow_flag)
    )


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Polls rather than blocks: with no key held the program counter is rewound onto
    this instruction so the next step runs it again. The lowest held key wins. The
    classic scan stops at key 0xE unless the key_wait_scans_f quirk is set.
    """
    scan_bound = NUM_KEYS if state.quirks.key_wait_scans_f else NUM_KEYS - 1
    scanned = state.keypad[:scan_bound]

    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(scanned), jnp.uint8)
        return state.replace(
            V=state.V.at[instruction.x].set(pressed_key),
            awaiting_key=jnp.asarray(False),
        )

    def wait_action(state):
        return state.replace(pc=state.pc - 2, awaiting_key=jnp.asarray(True))

    return jax.lax.cond(jnp.any(scanned), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    base = FONT_START if state.quirks.font_address_includes_base else 0
    font_address = base + jnp.astype(state.V[instruction.x], jnp.uint16) * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address & ADDRESS_MASK, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = (jnp.arange(3) + state.I) & ADDRESS_MASK
    return state.replace(memory=state.memory.at[indices].set(digits))


def _advance_index(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    if state.quirks.memory_increments_index:
        return jnp.astype((state.I + instruction.x + 1) & ADDRESS_MASK, jnp.uint16)
    return state.I


def _register_window(state: EmulatorState, instruction: DecodedInstruction):
    """Memory addresses I..I+15 and a mask selecting V0 through VX."""
    registers = jnp.arange(NUM_REGISTERS)
    return (state.I + registers) & ADDRESS_MASK, registers <= instruction.x


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX (inclusive) in memory starting at I."""
    indices, selected = _register_window(state, instruction)
    new_memory = state.memory.at[indices].set(jnp.where(selected, state.V, state.memory[indices]))
    return state.replace(memory=new_memory, I=_advance_index(state, instruction))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX (inclusive) from memory starting at I."""
    indices, selected = _register_window(state, instruction)
    new_V = jnp.where(selected, state.memory[indices], state.V)
    return state.replace(V=new_V, I=_advance_index(state, instruction))
