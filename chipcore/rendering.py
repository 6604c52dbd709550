"""Framebuffer rendering utilities for drivers and debugging."""

from typing import Sequence, Tuple

import jax.numpy as jnp
import numpy as np
import cv2
from PIL import Image

from chipcore.constants import SCREEN_WIDTH, SCREEN_HEIGHT


def framebuffer_to_pixels(framebuffer: jnp.ndarray) -> np.ndarray:
    """Reshape a flat row-major framebuffer into a boolean (32, 64) grid."""
    pixels = np.asarray(framebuffer).astype(np.bool_)
    if pixels.size != SCREEN_WIDTH * SCREEN_HEIGHT:
        raise ValueError(
            f"Expected {SCREEN_WIDTH * SCREEN_HEIGHT} pixels, got shape {pixels.shape}"
        )
    return pixels.reshape(SCREEN_HEIGHT, SCREEN_WIDTH)


def framebuffer_to_rgb(
    framebuffer: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (114, 159, 207),
    off_color: Tuple[int, int, int] = (0, 26, 33),
) -> np.ndarray:
    """Convert the framebuffer to an RGB array with optional upscaling.

    Args:
        framebuffer: Flat array of 2048 pixels (or a (32, 64) grid), non-zero means lit
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels
        off_color: RGB color for "off" pixels

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    pixels = framebuffer_to_pixels(framebuffer)

    rgb_frame = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Nearest neighbour upscaling
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "tango",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for rendering.

    Args:
        scheme: Color scheme name ("tango", "classic", "amber", "white", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "tango": ((114, 159, 207), (0, 26, 33)),  # Sky blue on deep teal
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]


def save_frame(framebuffer: jnp.ndarray, filename: str, scale: int = 8, color_scheme: str = "tango") -> None:
    """Write the framebuffer to an image file (format chosen from the extension)."""
    on_color, off_color = create_color_scheme(color_scheme)
    Image.fromarray(framebuffer_to_rgb(framebuffer, scale, on_color, off_color)).save(filename)


def create_video(
        frames: Sequence[jnp.ndarray],
        filename: str,
        fps: float = 60.0,
        scale: int = 8,
        color_scheme: str = "tango",
        persistence: bool = True,
) -> None:
    """Save a sequence of framebuffers as an MP4 with optional phosphor persistence.

    Args:
        frames: Framebuffers captured by the driver, one per video frame
        filename: Output MP4 file
        fps: Video frame rate
        scale: Upscaling factor
        color_scheme: Color scheme for rendering
        persistence: Enable phosphor screen simulation (smooth fading)
    """
    if len(frames) == 0:
        raise ValueError("No frames to encode")
    pixel_frames = [framebuffer_to_pixels(frame) for frame in frames]

    height, width = SCREEN_HEIGHT * scale, SCREEN_WIDTH * scale
    on_color, off_color = np.array(create_color_scheme(color_scheme))

    fourcc = cv2.VideoWriter_fourcc(*'mp4v')
    writer = cv2.VideoWriter(filename, fourcc, fps, (width, height))

    glow = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=np.float32)
    decay = 0.8

    try:
        for pixels in pixel_frames:
            if persistence:
                glow = np.clip(glow * decay + pixels.astype(np.float32), 0.0, 1.0)
                pixel_values = glow
            else:
                pixel_values = pixels.astype(np.float32)

            # Interpolate between the off and on colours
            frame = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH, 3), dtype=np.uint8)
            for c in range(3):
                frame[:, :, c] = off_color[c] + pixel_values * (on_color[c] - off_color[c])

            if scale > 1:
                frame = np.repeat(np.repeat(frame, scale, axis=0), scale, axis=1)
            writer.write(cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
    finally:
        writer.release()
