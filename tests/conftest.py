"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
import jax.numpy as jnp
from chipcore import create_state, load_program, encode_program, Quirks


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


@pytest.fixture
def wrap_state():
    """Provide a fresh state whose stack wraps silently."""
    return create_state(quirks=Quirks(stack_policy="wrap"))


@pytest.fixture
def legacy_state():
    """Provide a fresh state with the alternate historical behaviours enabled."""
    return create_state(quirks=Quirks(
        key_wait_scans_f=True,
        memory_increments_index=True,
        shift_uses_vy=True,
        jump_uses_vx=True,
        font_address_includes_base=True,
    ))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V0=1, VF=2)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def with_program(state, *instructions):
    """Helper to load instruction words at 0x200."""
    return load_program(state, encode_program(instructions))
