"""
chip8asm: CHIP-8 Assembler
==========================
Translates CHIP-8 assembly text into a flat binary of big-endian 16-bit
opcodes, loaded by the interpreter at 0x200.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌──────────────┐    ┌──────────────┐
    │ Source   │───>│ Pass 1   │───>│ Pass 2       │───>│ Binary       │
    │ (.chip8) │    │ (labels) │    │ (parse/enc.) │    │ (.c8)        │
    └──────────┘    └──────────┘    └──────────────┘    └──────────────┘

    - operands.py:     token -> Operand (registers, hex literals, labels)
    - instructions.py: opcode table, operand shapes, encoding
    - assembler.py:    two-pass label resolver and pipeline, listing
"""

__version__ = "0.1.0"

from .errors import (AssemblerError, OperandShapeError, UnknownMnemonicError,
                     UnresolvedLabelError)
from .operands import Operand, parse_operand, split_operands
from .instructions import Instruction, OPCODES, parse_instruction
from .assembler import (Assembler, assemble, resolve_labels, BASE_ADDRESS,
                        TARGET_PROFILES)
