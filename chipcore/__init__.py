"""CHIP-8 interpreter core package."""

from chipcore.state import EmulatorState, StackState, Quirks, Fault, create_state
from chipcore.emulator import execute, fetch, cycle, step, tick_timers, load_program, load_rom, encode_program
from chipcore.decode import DecodedInstruction, Op, decode, classify, disassemble
from chipcore.interpreter import Interpreter
from chipcore.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "Quirks",
    "Fault",
    "create_state",
    "fetch",
    "execute",
    "cycle",
    "step",
    "tick_timers",
    "load_program",
    "load_rom",
    "encode_program",
    "DecodedInstruction",
    "Op",
    "decode",
    "classify",
    "disassemble",
    "Interpreter",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
