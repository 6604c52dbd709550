"""CHIP-8 instruction decoding."""

import enum

import jax.numpy as jnp
import numpy as np
from chex import dataclass


class Op(enum.Enum):
    """Every instruction the interpreter knows, plus an explicit unknown variant."""
    SYS = "0NNN"
    CLS = "00E0"
    RET = "00EE"
    JP = "1NNN"
    CALL = "2NNN"
    SE_IMM = "3XNN"
    SNE_IMM = "4XNN"
    SE_REG = "5XY0"
    LD_IMM = "6XNN"
    ADD_IMM = "7XNN"
    LD_REG = "8XY0"
    OR = "8XY1"
    AND = "8XY2"
    XOR = "8XY3"
    ADD_REG = "8XY4"
    SUB = "8XY5"
    SHR = "8XY6"
    SUBN = "8XY7"
    SHL = "8XYE"
    SNE_REG = "9XY0"
    LD_I = "ANNN"
    JP_V0 = "BNNN"
    RND = "CXNN"
    DRW = "DXYN"
    SKP = "EX9E"
    SKNP = "EXA1"
    LD_VX_DT = "FX07"
    LD_VX_K = "FX0A"
    LD_DT_VX = "FX15"
    LD_ST_VX = "FX18"
    ADD_I = "FX1E"
    LD_F = "FX29"
    LD_B = "FX33"
    LD_MEM_VX = "FX55"
    LD_VX_MEM = "FX65"
    UNKNOWN = "????"


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


# Families whose operation is fully selected by the top nibble.
_SINGLE_OP_FAMILIES = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_IMM,
    0x4: Op.SNE_IMM,
    0x5: Op.SE_REG,
    0x6: Op.LD_IMM,
    0x7: Op.ADD_IMM,
    0x9: Op.SNE_REG,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}

_ALU_OPS = {
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

_KEY_OPS = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

_MISC_OPS = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I,
    0x29: Op.LD_F,
    0x33: Op.LD_B,
    0x55: Op.LD_MEM_VX,
    0x65: Op.LD_VX_MEM,
}


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components.

    Works on Python ints as well as traced jax scalars.
    """
    instruction = instruction & 0xFFFF
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def _classify_word(word: int) -> Op:
    family = word >> 12
    if family in _SINGLE_OP_FAMILIES:
        return _SINGLE_OP_FAMILIES[family]
    if family == 0x0:
        if word == 0x00E0:
            return Op.CLS
        if word == 0x00EE:
            return Op.RET
        return Op.SYS
    if family == 0x8:
        return _ALU_OPS.get(word & 0xF, Op.UNKNOWN)
    if family == 0xE:
        return _KEY_OPS.get(word & 0xFF, Op.UNKNOWN)
    return _MISC_OPS.get(word & 0xFF, Op.UNKNOWN)


# Dispatch order for jax.lax.switch, and the branch index of every 16-bit word.
OPS = tuple(Op)
_OP_INDEX = {op: i for i, op in enumerate(OPS)}
OP_TABLE = jnp.asarray(
    np.array([_OP_INDEX[_classify_word(word)] for word in range(0x10000)], dtype=np.uint8)
)


def classify(instruction: DecodedInstruction) -> Op:
    """Map a decoded instruction to its operation, Op.UNKNOWN if none matches."""
    return _classify_word(int(instruction.raw))


def op_index(instruction: DecodedInstruction) -> jnp.ndarray:
    """Position in :data:`OPS` of the instruction's operation; traceable."""
    return jnp.astype(OP_TABLE[instruction.raw], jnp.int32)


def disassemble(instruction: int) -> str:
    """Render an instruction word as ``NAME operands`` text, e.g. ``ADD_REG x=1 y=2``."""
    decoded = decode(int(instruction))
    op = classify(decoded)
    pattern = op.value
    operands = []
    if "X" in pattern:
        operands.append(f"x={decoded.x:X}")
    if "Y" in pattern:
        operands.append(f"y={decoded.y:X}")
    if pattern.endswith("NNN"):
        operands.append(f"nnn=0x{decoded.nnn:03X}")
    elif pattern.endswith("NN"):
        operands.append(f"nn=0x{decoded.nn:02X}")
    elif pattern.endswith("N"):
        operands.append(f"n={decoded.n}")
    name = op.name if op is not Op.UNKNOWN else f"UNKNOWN {decoded.raw:04X}"
    return " ".join([name] + operands)
