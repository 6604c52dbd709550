"""Console logging utilities for the chipcore interpreter.

A small levelled console logger with optional colours and timestamps, plus an
emulator-flavoured subclass that knows how to report faults, beeps, loaded
programs and register dumps.
"""

import time
import sys
from typing import Any, Dict

from chipcore.decode import disassemble
from chipcore.state import Fault


class ConsoleLogger:
    """Levelled console logger with optional colours and elapsed-time stamps."""

    LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        name: str = "chipcore",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        if self.log_level not in self.LEVELS:
            raise ValueError(
                f"Unknown log level '{log_level}'. Available: {list(self.LEVELS)}"
            )
        self.use_colors = use_colors and sys.stdout.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def _should_log(self, level: str) -> bool:
        return self.LEVELS.index(level) >= self.LEVELS.index(self.log_level)

    def _format_message(self, level: str, message: str) -> str:
        timestamp = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        level_str = f"[{level:>8s}]"
        if self.use_colors:
            level_str = f"{self.COLORS[level]}{level_str}{self.RESET}"
        return f"{timestamp}{level_str}[{self.name}] {message}"

    def log(self, level: str, message: str):
        if self._should_log(level):
            print(self._format_message(level, message), flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)


class EmulatorLogger(ConsoleLogger):
    """Logger for interpreter events: faults, beeps, loads and register dumps."""

    FAULT_MESSAGES = {
        Fault.UNKNOWN_INSTRUCTION: "Unknown instruction",
        Fault.STACK_OVERFLOW: "Stack overflow on call",
        Fault.STACK_UNDERFLOW: "Stack underflow on return",
    }

    def log_fault(self, fault: Fault, pc: int, instruction: int):
        """Report a non-fatal fault raised while executing ``instruction`` at ``pc``."""
        fault = Fault(int(fault))
        if fault == Fault.NONE:
            return
        message = self.FAULT_MESSAGES[fault]
        self.warning(
            f"{message}: {int(instruction):04X} ({disassemble(instruction)}) at 0x{int(pc):03X}"
        )

    def log_beep(self, cycle: int):
        self.info(f"BEEP at cycle {cycle}")

    def log_program_loaded(self, size: int, source: str = "<bytes>"):
        self.info(f"Loaded {size} bytes from {source}")

    def log_config(self, config: Dict[str, Any]):
        """Log interpreter configuration."""
        self.info("Interpreter configuration:")
        for key, value in config.items():
            self.info(f"  {key}: {value}")

    def log_state(self, state, level: str = "DEBUG"):
        """Dump program counter, index, timers and registers."""
        if not self._should_log(level):
            return
        self.log(
            level,
            f"PC: 0x{int(state.pc):03X} I: 0x{int(state.I):03X} "
            f"SP: {int(state.stack.pointer)} DT: {int(state.delay_timer)} ST: {int(state.sound_timer)}",
        )
        for i in range(0, 16, 4):
            self.log(level, " ".join(f"V{j:X}:{int(state.V[j]):02X}" for j in range(i, i + 4)))


default_logger = EmulatorLogger(log_level="WARNING")
