"""Main CHIP-8 interpreter execution engine."""

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import EmulatorState, Fault
from chipcore.decode import OPS, Op, decode, op_index
from chipcore.constants import PROGRAM_START, MAX_PROGRAM_SIZE, ADDRESS_MASK
from chipcore.logging import EmulatorLogger, default_logger
from chipcore.instructions.system import execute_machine_call, execute_clear_screen, execute_return, execute_unknown
from chipcore.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key,
)
from chipcore.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left,
)
from chipcore.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipcore.instructions.display import execute_display
from chipcore.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
)

HANDLERS = {
    Op.SYS: execute_machine_call,
    Op.CLS: execute_clear_screen,
    Op.RET: execute_return,
    Op.JP: execute_jump,
    Op.CALL: execute_call,
    Op.SE_IMM: execute_skip_if_equal_immediate,
    Op.SNE_IMM: execute_skip_if_not_equal_immediate,
    Op.SE_REG: execute_skip_if_equal_register,
    Op.LD_IMM: execute_set,
    Op.ADD_IMM: execute_add,
    Op.LD_REG: execute_alu_set,
    Op.OR: execute_alu_or,
    Op.AND: execute_alu_and,
    Op.XOR: execute_alu_xor,
    Op.ADD_REG: execute_alu_add,
    Op.SUB: execute_alu_sub_xy,
    Op.SHR: execute_alu_shift_right,
    Op.SUBN: execute_alu_sub_yx,
    Op.SHL: execute_alu_shift_left,
    Op.SNE_REG: execute_skip_if_not_equal_register,
    Op.LD_I: execute_set_index,
    Op.JP_V0: execute_jump_with_offset,
    Op.RND: execute_random,
    Op.DRW: execute_display,
    Op.SKP: execute_skip_if_key,
    Op.SKNP: execute_skip_if_not_key,
    Op.LD_VX_DT: execute_get_delay_timer,
    Op.LD_VX_K: execute_wait_for_key,
    Op.LD_DT_VX: execute_set_delay_timer,
    Op.LD_ST_VX: execute_set_sound_timer,
    Op.ADD_I: execute_add_to_index,
    Op.LD_F: execute_font_character,
    Op.LD_B: execute_bcd_conversion,
    Op.LD_MEM_VX: execute_store_registers,
    Op.LD_VX_MEM: execute_load_registers,
    Op.UNKNOWN: execute_unknown,
}


BRANCHES = [HANDLERS[op] for op in OPS]


@jax.jit
def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    ``state.pc`` is expected to point past the instruction already, as left by
    :func:`fetch`. Unknown instructions execute as a no-op and are reported via
    ``state.fault``.
    """
    decoded_instruction = decode(instruction)
    state = state.replace(fault=jnp.zeros((), dtype=jnp.uint8))
    return jax.lax.switch(op_index(decoded_instruction), BRANCHES, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory (big-endian) and advance pc by 2."""
    address = state.pc & ADDRESS_MASK
    instruction = _pack_u16(state.memory[address], state.memory[(address + 1) & ADDRESS_MASK])
    return state.replace(pc=jnp.astype(state.pc + 2, jnp.uint16)), instruction


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Count both timers down by one; flag a beep when the sound timer expires."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer).astype(jnp.uint8),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer).astype(jnp.uint8),
        beep=state.sound_timer == 1,
    )


@jax.jit
def cycle(state: EmulatorState) -> EmulatorState:
    """Run one fetch-decode-execute cycle followed by one timer tick."""
    state, instruction = fetch(state)
    state = execute(state, instruction)
    return tick_timers(state)


def instruction_at(state: EmulatorState, address: int) -> int:
    """The big-endian word stored at ``address``."""
    address = int(address) & ADDRESS_MASK
    return int(_pack_u16(state.memory[address], state.memory[(address + 1) & ADDRESS_MASK]))


def step(state: EmulatorState, logger: EmulatorLogger = None) -> EmulatorState:
    """Run :func:`cycle` and log the fault it reports, if any."""
    new_state = cycle(state)
    fault = int(new_state.fault)
    if fault != Fault.NONE:
        pc = int(state.pc) & ADDRESS_MASK
        (logger or default_logger).log_fault(fault, pc, instruction_at(state, pc))
    return new_state


def encode_program(instructions) -> bytes:
    """Assemble a sequence of 16-bit instruction words into a big-endian program image."""
    return b"".join(int(word).to_bytes(2, "big") for word in instructions)


def load_program(state: EmulatorState, data: bytes, truncate: bool = False) -> EmulatorState:
    """Copy a raw program image into memory starting at 0x200.

    The rest of the program region is zeroed, so no bytes of an earlier, longer
    program survive.

    Images larger than the 3584 bytes available raise ``ValueError`` unless
    ``truncate`` is set, in which case the excess is dropped.
    """
    data = bytes(data)
    if len(data) > MAX_PROGRAM_SIZE:
        if not truncate:
            raise ValueError(
                f"Program is {len(data)} bytes, at most {MAX_PROGRAM_SIZE} fit in memory"
            )
        data = data[:MAX_PROGRAM_SIZE]
    program = jnp.array(list(data.ljust(MAX_PROGRAM_SIZE, b"\x00")), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:].set(program)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str, truncate: bool = False) -> EmulatorState:
    """Load ROM file into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data, truncate=truncate)
