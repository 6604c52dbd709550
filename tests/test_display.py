"""Tests for display operations (00E0, DXYN)."""

import jax.numpy as jnp
from chipcore import execute, step, SCREEN_WIDTH
from conftest import setup_sprite_in_memory, set_registers, with_program


def pixel(state, x, y):
    return int(state.framebuffer[x + y * SCREEN_WIDTH])


class TestClearScreen:
    """Test 00E0."""

    def test_clear_screen(self, fresh_state):
        """A lit framebuffer is fully cleared and a redraw requested."""
        state = with_program(fresh_state, 0x00E0)
        state = state.replace(framebuffer=jnp.full_like(state.framebuffer, 255))

        state = step(state)

        assert jnp.all(state.framebuffer == 0)
        assert bool(state.redraw)
        assert state.pc == 0x202

    def test_clear_is_idempotent(self, fresh_state):
        """Clearing twice gives the same framebuffer as clearing once."""
        state = fresh_state.replace(framebuffer=fresh_state.framebuffer.at[100].set(1))

        once = execute(state, 0x00E0)
        twice = execute(once, 0x00E0)

        assert jnp.array_equal(once.framebuffer, twice.framebuffer)


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Draw a 2x2 box without collision."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xC0, 0xC0])
        state = set_registers(state, V0=10, V1=5)
        state = execute(state, 0xA300)  # I = 0x300

        state = execute(state, 0xD012)

        assert pixel(state, 10, 5) == 1
        assert pixel(state, 11, 5) == 1
        assert pixel(state, 10, 6) == 1
        assert pixel(state, 11, 6) == 1
        assert pixel(state, 12, 5) == 0
        assert state.V[15] == 0
        assert bool(state.redraw)

    def test_collision_detection(self, fresh_state):
        """Collision flag when sprite overlaps existing pixels."""
        state = setup_sprite_in_memory(fresh_state, 0x400, [0x80])
        state = set_registers(state, V0=20, V1=10)
        state = execute(state, 0xA400)

        state = execute(state, 0xD011)
        assert pixel(state, 20, 10) == 1
        assert state.V[15] == 0

        state = execute(state, 0xD011)
        assert pixel(state, 20, 10) == 0  # Pixel erased by XOR
        assert state.V[15] == 1

    def test_draw_twice_restores_framebuffer(self, fresh_state):
        """Drawing the same sprite twice restores the prior picture and reports a collision."""
        state = setup_sprite_in_memory(fresh_state, 0x500, [0xF0, 0x90, 0xF0])
        state = state.replace(framebuffer=state.framebuffer.at[3 + 2 * SCREEN_WIDTH].set(1))
        state = set_registers(state, V0=0, V1=0)
        state = execute(state, 0xA500)
        before = state.framebuffer

        state = execute(state, 0xD013)
        state = execute(state, 0xD013)

        assert jnp.array_equal(state.framebuffer, before)
        assert state.V[15] == 1

    def test_xor_with_existing_pixels(self, fresh_state):
        """Only set sprite bits flip pixels; VF reports the cleared one."""
        state = setup_sprite_in_memory(fresh_state, 0x500, [0xA0])  # 10100000
        state = state.replace(framebuffer=state.framebuffer.at[0].set(1).at[1].set(1))
        state = execute(state, 0xA500)

        state = execute(state, 0xD011)  # V0 = V1 = 0

        assert pixel(state, 0, 0) == 0
        assert pixel(state, 1, 0) == 1  # bit clear, untouched
        assert pixel(state, 2, 0) == 1
        assert state.V[15] == 1

    def test_vf_cleared_without_collision(self, fresh_state):
        """VF is reset to 0 by a draw without collision."""
        state = setup_sprite_in_memory(fresh_state, 0xB00, [0x80])
        state = set_registers(state, VF=1, V0=5, V1=5)
        state = execute(state, 0xAB00)

        state = execute(state, 0xD011)

        assert state.V[15] == 0


class TestScreenBoundaries:
    """Out-of-range pixels follow the row-major layout and clamp at the end."""

    def test_right_edge_spills_into_next_row(self, fresh_state):
        """x + column past 63 lands at the start of the next row."""
        state = setup_sprite_in_memory(fresh_state, 0x600, [0xFF])
        state = set_registers(state, V0=60, V1=0)
        state = execute(state, 0xA600)

        state = execute(state, 0xD011)

        for x in range(60, 64):
            assert pixel(state, x, 0) == 1
        for x in range(0, 4):
            assert pixel(state, x, 1) == 1

    def test_bottom_edge_clamps_to_last_cell(self, fresh_state):
        """Rows past the bottom collapse onto pixel 2047."""
        state = setup_sprite_in_memory(fresh_state, 0x700, [0x80, 0x80, 0x80])
        state = set_registers(state, V0=0, V1=30)
        state = execute(state, 0xA700)

        state = execute(state, 0xD013)  # rows 30, 31, 32

        assert pixel(state, 0, 30) == 1
        assert pixel(state, 0, 31) == 1
        assert int(state.framebuffer[2047]) == 1
        assert state.V[15] == 0

    def test_clamped_pixels_toggle_in_turn(self, fresh_state):
        """Two pixels clamped onto the same cell cancel out and collide."""
        state = setup_sprite_in_memory(fresh_state, 0x700, [0x80, 0x80])
        state = set_registers(state, V0=0, V1=40)  # both rows past the end
        state = execute(state, 0xA700)

        state = execute(state, 0xD012)

        assert int(state.framebuffer[2047]) == 0
        assert int(jnp.sum(state.framebuffer)) == 0
        assert state.V[15] == 1

    def test_large_coordinates_are_not_wrapped(self, fresh_state):
        """Coordinates are used as-is, so x = 70 on row 0 lands at index 70."""
        state = setup_sprite_in_memory(fresh_state, 0x800, [0x80])
        state = set_registers(state, V0=70, V1=0)
        state = execute(state, 0xA800)

        state = execute(state, 0xD011)

        assert int(state.framebuffer[70]) == 1
        assert pixel(state, 6, 0) == 0


class TestSpriteVariations:
    """Test different sprite configurations."""

    def test_different_sprite_heights(self, fresh_state):
        """Only N rows are drawn."""
        state = setup_sprite_in_memory(fresh_state, 0x900, [0x80, 0x40, 0x20, 0x10, 0x08])
        state = set_registers(state, V0=10, V1=8)
        state = execute(state, 0xA900)

        state = execute(state, 0xD013)

        assert pixel(state, 10, 8) == 1
        assert pixel(state, 11, 9) == 1
        assert pixel(state, 12, 10) == 1
        assert pixel(state, 13, 11) == 0

    def test_zero_height_draws_nothing(self, fresh_state):
        """DXY0 draws no rows but still requests a redraw."""
        state = setup_sprite_in_memory(fresh_state, 0x900, [0xFF])
        state = execute(state, 0xA900)

        state = execute(state, 0xD010)

        assert int(jnp.sum(state.framebuffer)) == 0
        assert state.V[15] == 0
        assert bool(state.redraw)

    def test_font_glyph_draw(self, legacy_state):
        """The built-in glyph for 0 draws its 4x5 outline."""
        state = set_registers(legacy_state, V0=0, V1=0, V2=0)
        state = execute(state, 0xF029)  # I = glyph 0

        state = execute(state, 0xD125)

        assert [pixel(state, x, 0) for x in range(4)] == [1, 1, 1, 1]
        assert [pixel(state, x, 1) for x in range(4)] == [1, 0, 0, 1]
