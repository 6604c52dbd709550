"""Tests for control flow instructions."""

import pytest
from chipcore import execute, step
from conftest import set_registers, with_program


class TestJump:
    """Test jump instructions."""

    def test_execute_jump(self, fresh_state):
        """1NNN - Jump to address."""
        state = execute(fresh_state, 0x1001)
        assert state.pc == 1

    def test_jump_through_step(self, fresh_state):
        """1NNN - A step lands exactly on NNN, no extra advance."""
        state = with_program(fresh_state, 0x1234)
        state = step(state)
        assert state.pc == 0x234


class TestSkipInstructions:
    """Test all skip instruction variants."""

    def test_skip_if_equal_immediate_true(self, fresh_state):
        """3XNN - Should skip when VX == NN."""
        state = set_registers(fresh_state, V5=0x42)
        initial_pc = state.pc

        state = execute(state, 0x3542)
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_immediate_false(self, fresh_state):
        """3XNN - Should not skip when VX != NN."""
        state = set_registers(fresh_state, V5=0x41)
        initial_pc = state.pc

        state = execute(state, 0x3542)
        assert state.pc == initial_pc

    def test_skip_if_not_equal_immediate_true(self, fresh_state):
        """4XNN - Should skip when VX != NN."""
        state = set_registers(fresh_state, V3=0x10)
        initial_pc = state.pc

        state = execute(state, 0x4320)
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_immediate_false(self, fresh_state):
        """4XNN - Should not skip when VX == NN."""
        state = set_registers(fresh_state, V3=0x20)
        initial_pc = state.pc

        state = execute(state, 0x4320)
        assert state.pc == initial_pc

    def test_skip_if_equal_register_true(self, fresh_state):
        """5XY0 - Should skip when VX == VY."""
        state = set_registers(fresh_state, V1=0x55, V2=0x55)
        initial_pc = state.pc

        state = execute(state, 0x5120)
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_register_false(self, fresh_state):
        """5XY0 - Should not skip when VX != VY."""
        state = set_registers(fresh_state, V1=0x55, V2=0x44)
        initial_pc = state.pc

        state = execute(state, 0x5120)
        assert state.pc == initial_pc

    def test_skip_if_not_equal_register_true(self, fresh_state):
        """9XY0 - Should skip when VX != VY."""
        state = set_registers(fresh_state, V7=0xAA, V8=0xBB)
        initial_pc = state.pc

        state = execute(state, 0x9780)
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_register_false(self, fresh_state):
        """9XY0 - Should not skip when VX == VY."""
        state = set_registers(fresh_state, V7=0xCC, V8=0xCC)
        initial_pc = state.pc

        state = execute(state, 0x9780)
        assert state.pc == initial_pc

    @pytest.mark.parametrize("instruction,skips", [
        (0x30FF, True),   # V0 == 0xFF
        (0x40FF, False),  # V0 != 0xFF
        (0x3000, False),  # V0 == 0
    ])
    def test_skip_distance_through_step(self, fresh_state, instruction, skips):
        """A taken skip advances pc by 4 over the whole step, otherwise by 2."""
        state = set_registers(with_program(fresh_state, instruction), V0=0xFF)

        state = step(state)

        assert state.pc == 0x200 + (4 if skips else 2)


class TestJumpWithOffset:
    """Test jump with offset in both modes."""

    def test_jump_with_offset(self, fresh_state):
        """BNNN - Jump with V0 offset."""
        state = set_registers(fresh_state, V0=0x10, V2=0x30)
        state = execute(state, 0xB250)
        assert state.pc == 0x260

    def test_jump_with_offset_vx_quirk(self, legacy_state):
        """BXNN - Jump with VX offset under jump_uses_vx."""
        state = set_registers(legacy_state, V0=0x10, V2=0x30)
        state = execute(state, 0xB250)
        assert state.pc == 0x280

    def test_jump_with_offset_masks_address(self, fresh_state):
        """BNNN - The target stays inside the 12-bit address space."""
        state = set_registers(fresh_state, V0=0xFF)
        state = execute(state, 0xBFFF)
        assert state.pc == (0xFFF + 0xFF) & 0xFFF


class TestKeySkips:
    """Test EX9E / EXA1."""

    def test_skip_if_key_pressed(self, fresh_state):
        """EX9E - Skip if key pressed."""
        state = set_registers(fresh_state, V0=5)
        state = state.replace(keypad=state.keypad.at[5].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE09E)
        assert state.pc == initial_pc + 2

    def test_no_skip_if_key_released(self, fresh_state):
        """EX9E - No skip when the key is up."""
        state = set_registers(fresh_state, V0=5)
        initial_pc = state.pc

        state = execute(state, 0xE09E)
        assert state.pc == initial_pc

    def test_skip_if_key_not_pressed(self, fresh_state):
        """EXA1 - Skip if key not pressed."""
        state = set_registers(fresh_state, V0=5)
        initial_pc = state.pc

        state = execute(state, 0xE0A1)
        assert state.pc == initial_pc + 2

    def test_no_skip_if_key_held(self, fresh_state):
        """EXA1 - No skip when the key is held."""
        state = set_registers(fresh_state, V3=0xF)
        state = state.replace(keypad=state.keypad.at[0xF].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE3A1)
        assert state.pc == initial_pc
