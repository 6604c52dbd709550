"""
Run a CHIP-8 program headless and record it.

    python scripts/record.py games/IBM --cycles 2000 --output ibm.mp4
    python scripts/record.py games/IBM --screenshot ibm.png
"""

import argparse

from chipcore import Interpreter
from chipcore.config import load_quirks
from chipcore.logging import EmulatorLogger
from chipcore.rendering import create_video, save_frame


def main():
    parser = argparse.ArgumentParser(description="Record a CHIP-8 program to video")
    parser.add_argument("rom", help="Path to the program image")
    parser.add_argument("--cycles", type=int, default=1000)
    parser.add_argument("--output", default=None, help="MP4 file for every redrawn frame")
    parser.add_argument("--screenshot", default=None, help="Image file for the final frame")
    parser.add_argument("--scale", type=int, default=8)
    parser.add_argument("--color-scheme", default="tango")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--wrap-stack", action="store_true", help="Wrap the call stack instead of faulting")
    args = parser.parse_args()

    logger = EmulatorLogger(name="record")
    quirks = load_quirks({"stack_policy": "wrap" if args.wrap_stack else "strict"})
    interpreter = Interpreter(quirks=quirks, seed=args.seed, logger=logger)
    interpreter.load_rom(args.rom)

    frames = interpreter.run(args.cycles, progress=True)
    logger.info(f"{len(frames)} frames in {interpreter.cycles} cycles")
    logger.log_state(interpreter.state, level="INFO")

    if args.output:
        if frames:
            create_video(frames, args.output, scale=args.scale, color_scheme=args.color_scheme)
            logger.info(f"Video saved to {args.output}")
        else:
            logger.warning("Program never drew anything, no video written")
    if args.screenshot:
        save_frame(interpreter.state.framebuffer, args.screenshot, args.scale, args.color_scheme)
        logger.info(f"Screenshot saved to {args.screenshot}")


if __name__ == "__main__":
    main()
