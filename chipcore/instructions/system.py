"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chipcore.state import EmulatorState, Fault
from chipcore.decode import DecodedInstruction
from chipcore.stack import pop


def execute_machine_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """0NNN - Call machine code routine; not supported on an interpreter, ignored."""
    return state


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(framebuffer=jnp.zeros_like(state.framebuffer), redraw=jnp.asarray(True))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine, resuming after the call instruction."""
    stack, address, fault = pop(state.stack, state.quirks.stack_policy)
    failed = fault != int(Fault.NONE)
    return state.replace(
        stack=stack,
        pc=jnp.where(failed, state.pc, jnp.astype(address + 2, jnp.uint16)),
        fault=fault,
    )


def execute_unknown(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Unrecognised word: nothing changes except the fault."""
    return state.replace(fault=jnp.asarray(int(Fault.UNKNOWN_INSTRUCTION), dtype=jnp.uint8))
