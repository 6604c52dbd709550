"""
Interactive CHIP-8 driver: pygame window, debounced keyboard, 60 Hz pacing.

    python main.py rom=games/PONG quirks.key_wait_scans_f=true
"""

import hydra
import pygame
from omegaconf import DictConfig, OmegaConf

from chipcore import Interpreter
from chipcore.config import load_config
from chipcore.keypad import Debouncer, key_index
from chipcore.logging import EmulatorLogger
from chipcore.rendering import create_color_scheme, framebuffer_to_rgb, save_frame


def draw_overlay_text(surface, text_lines, position, font, bg_color=(0, 0, 0), text_color=(255, 255, 255), alpha=120):
    """Draw text with semi-transparent background overlay"""
    if not text_lines:
        return

    line_height = font.get_height()
    max_width = max(font.size(line)[0] for line in text_lines)
    overlay = pygame.Surface((max_width + 16, len(text_lines) * line_height + 8))
    overlay.set_alpha(alpha)
    overlay.fill(bg_color)
    surface.blit(overlay, position)

    x, y = position
    for i, line in enumerate(text_lines):
        text_surface = font.render(line, True, text_color)
        surface.blit(text_surface, (x + 8, y + 4 + i * line_height))


def debug_lines(interpreter):
    state = interpreter.state
    lines = [
        f"PC: 0x{int(state.pc):03X}  I: 0x{int(state.I):03X}  SP: {int(state.stack.pointer)}",
        f"DT: {int(state.delay_timer)}  ST: {int(state.sound_timer)}  Cycles: {interpreter.cycles}",
    ]
    for i in range(0, 16, 8):
        lines.append(" ".join(f"V{j:X}:{int(state.V[j]):02X}" for j in range(i, i + 8)))
    if interpreter.awaiting_key:
        lines.append("Waiting for key...")
    return lines


def run_emulator(config):
    """Main driver loop."""
    logger = EmulatorLogger(name="driver", log_level=config.log_level)
    logger.log_config(OmegaConf.to_container(OmegaConf.structured(config)))

    interpreter = Interpreter(quirks=config.quirks, seed=config.seed, logger=logger)
    try:
        interpreter.load_rom(config.rom)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot load {config.rom}: {e}")
        return

    pygame.init()
    scale = config.scale
    screen = pygame.display.set_mode((64 * scale, 32 * scale))
    pygame.display.set_caption(f"CHIP-8 - {config.rom}")
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, 18)
    on_color, off_color = create_color_scheme(config.color_scheme)

    debouncer = Debouncer(config.debounce_cycles)
    running = True
    paused = False
    show_debug = False

    logger.info("Controls: ESC=Quit, F1=Pause, F2=Reset, F3=Debug, F12=Screenshot")

    while running:
        clock.tick(config.fps)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_F1:
                    paused = not paused
                elif event.key == pygame.K_F2:
                    interpreter.reset()
                    debouncer = Debouncer(config.debounce_cycles)
                    logger.info("Reset")
                elif event.key == pygame.K_F3:
                    show_debug = not show_debug
                elif event.key == pygame.K_F12:
                    filename = f"screenshot_{interpreter.cycles}.png"
                    save_frame(interpreter.state.framebuffer, filename, scale, config.color_scheme)
                    logger.info(f"Saved {filename}")
                else:
                    key = key_index(pygame.key.name(event.key))
                    if key is not None:
                        debouncer.press(key)

        if not paused:
            for _ in range(config.cycles_per_frame):
                interpreter.set_keypad(debouncer.tick())
                interpreter.step()

        if interpreter.redraw_pending or show_debug or paused:
            frame = framebuffer_to_rgb(interpreter.state.framebuffer, scale, on_color, off_color)
            pygame.surfarray.blit_array(screen, frame.swapaxes(0, 1))
            interpreter.clear_redraw()

            if show_debug:
                draw_overlay_text(screen, debug_lines(interpreter), (5, 5), font, alpha=100)
            if paused:
                draw_overlay_text(screen, ["PAUSED - F1 to resume"], (5, 32 * scale - 25), font,
                                  text_color=(255, 255, 0))
            pygame.display.flip()

    pygame.quit()


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    config = load_config(cfg)
    if config.rom is None:
        raise SystemExit("Usage: python main.py rom=<path to CHIP-8 program>")
    run_emulator(config)


if __name__ == "__main__":
    main()
