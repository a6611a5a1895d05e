"""
CHIP-8 Instruction Catalog.

Every CHIP-8 instruction is one 16-bit word. The top nibble selects the
family, register indices sit in the next nibbles and any constant or
address fills the low 4, 8 or 12 bits:

  x    register in bits 8-11        e.g. 6xnn  LD Vx, nn
  y    register in bits 4-7         e.g. 8xy4  ADD Vx, Vy
  n    4-bit constant               e.g. Dxyn  DRW Vx, Vy, n
  nn   8-bit constant               e.g. 7xnn  ADD Vx, nn
  nnn  12-bit address               e.g. 1nnn  JP addr

The catalog maps each mnemonic to the operand shapes it accepts. A shape is
a tuple of operand patterns; the first form whose shape matches the parsed
operands wins. Parsing validates, resolution swaps labels for addresses and
encoding packs the operands into the form's opcode.

Reference: Cowgod's Chip-8 Technical Reference v1.0
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple
import logging

from .errors import OperandShapeError, UnknownMnemonicError, UnresolvedLabelError
from .operands import (Operand, split_operands, REG, IMM, IREG, IDEREF, DT, ST,
                       KEY, FONT, BCD, BLANK, LABEL)

__all__ = ['Instruction', 'Form', 'OPCODES', 'ALIASES', 'is_mnemonic',
           'canonical_mnemonic', 'parse_instruction']

log = logging.getLogger(__name__)

Shape = Tuple[str, ...]

# Shape-only pattern: a register operand that must be V0
V0 = 'V0'

# Field name -> (shift, mask)
FIELDS: Dict[str, Tuple[int, int]] = {
    'x':   (8, 0xF),
    'y':   (4, 0xF),
    'n':   (0, 0xF),
    'nn':  (0, 0xFF),
    'nnn': (0, 0xFFF),
}


@dataclass(frozen=True)
class Form:
    """One accepted operand shape of a mnemonic.

    Normalizing forms carry no opcode: they rewrite the operands into
    another form's shape during parsing and are never encoded directly.
    """
    shape: Shape
    opcode: Optional[int] = None
    fields: Tuple[Optional[str], ...] = ()
    normalize: Optional[Callable[[Tuple[Operand, ...]], Tuple[Operand, ...]]] = None


# ──────────────────────────────────────────────
# CHIP-8 Opcode Table
# ──────────────────────────────────────────────
# Format: { 'MNEMONIC': [Form, ...] } in match order.

OPCODES: Dict[str, List[Form]] = {}

# Alternate spellings accepted on input
ALIASES: Dict[str, str] = {
    'RAND': 'RND',
}


def _op(mnemonic: str, shape: Shape, opcode: int, fields: Tuple[Optional[str], ...] = ()):
    """Register an opcode entry."""
    assert len(fields) in (0, len(shape)), mnemonic
    OPCODES.setdefault(mnemonic, []).append(Form(shape, opcode, fields or (None,) * len(shape)))


def _default(mnemonic: str, shape: Shape, normalize):
    """Register a shape that is rewritten into a full form at parse time."""
    OPCODES.setdefault(mnemonic, []).append(Form(shape, normalize=normalize))


def _same_register(ops):
    # SHR Vx  ==  SHR Vx, Vx
    return (ops[0], ops[0])


def _full_mask(ops):
    # RND Vx  ==  RND Vx, 0xFF
    return (ops[0], Operand(IMM, 0xFF))


# ── Display / flow without operands ──
_op('CLS',  (),            0x00E0)
_op('RET',  (),            0x00EE)

# ── Jumps and calls ──
_op('JP',   (IMM,),        0x1000, ('nnn',))
_op('JP',   (V0, IMM),     0xB000, (None, 'nnn'))
_op('CALL', (IMM,),        0x2000, ('nnn',))

# ── Conditional skips ──
_op('SE',   (REG, IMM),    0x3000, ('x', 'nn'))
_op('SE',   (REG, REG),    0x5000, ('x', 'y'))
_op('SNE',  (REG, IMM),    0x4000, ('x', 'nn'))
_op('SNE',  (REG, REG),    0x9000, ('x', 'y'))
_op('SKP',  (REG,),        0xE09E, ('x',))
_op('SKNP', (REG,),        0xE0A1, ('x',))

# ── LD ──
_op('LD',   (REG, IMM),    0x6000, ('x', 'nn'))
_op('LD',   (REG, REG),    0x8000, ('x', 'y'))
_op('LD',   (IREG, IMM),   0xA000, (None, 'nnn'))
_op('LD',   (REG, DT),     0xF007, ('x', None))
_op('LD',   (REG, KEY),    0xF00A, ('x', None))
_op('LD',   (DT, REG),     0xF015, (None, 'x'))
_op('LD',   (ST, REG),     0xF018, (None, 'x'))
_op('LD',   (FONT, REG),   0xF029, (None, 'x'))
_op('LD',   (BCD, REG),    0xF033, (None, 'x'))
_op('LD',   (IDEREF, REG), 0xF055, (None, 'x'))
_op('LD',   (REG, IDEREF), 0xF065, ('x', None))

# ── Register-register ALU (8xyN) ──
for mnem, low in [
    ('OR',   0x1),
    ('AND',  0x2),
    ('XOR',  0x3),
    ('SUB',  0x5),
    ('SUBN', 0x7),
]:
    _op(mnem, (REG, REG), 0x8000 | low, ('x', 'y'))

# ── ADD ──
_op('ADD',  (REG, IMM),    0x7000, ('x', 'nn'))
_op('ADD',  (REG, REG),    0x8004, ('x', 'y'))
_op('ADD',  (IREG, REG),   0xF01E, (None, 'x'))

# ── Shifts: the second register defaults to the first ──
_op('SHR',  (REG, REG),    0x8006, ('x', 'y'))
_default('SHR', (REG, BLANK), _same_register)
_op('SHL',  (REG, REG),    0x800E, ('x', 'y'))
_default('SHL', (REG, BLANK), _same_register)

# ── Random: the mask defaults to 0xFF ──
_op('RND',  (REG, IMM),    0xC000, ('x', 'nn'))
_default('RND', (REG, BLANK), _full_mask)

# ── Sprites ──
_op('DRW',  (REG, REG, IMM), 0xD000, ('x', 'y', 'n'))


# ──────────────────────────────────────────────
# Shape matching
# ──────────────────────────────────────────────

_BLANK_OPERAND = Operand(BLANK)


def _matches(pattern: str, operand: Operand) -> bool:
    if pattern == V0:
        return operand.kind == REG and operand.value == 0
    if pattern == IMM:
        # A label stands in for an address until pass 2 resolves it
        return operand.kind in (IMM, LABEL)
    return operand.kind == pattern


def _fit(shape: Shape, operands: Sequence[Operand]) -> Optional[Tuple[Operand, ...]]:
    """Match operands against a shape, treating missing or extra slots as BLANK.

    Returns the operands trimmed to the shape's arity, or None.
    """
    width = max(len(shape), len(operands))
    padded = list(operands) + [_BLANK_OPERAND] * (width - len(operands))
    patterns = shape + (BLANK,) * (width - len(shape))
    if all(_matches(p, o) for p, o in zip(patterns, padded)):
        return tuple(padded[:len(shape)])
    return None


def is_mnemonic(token: str) -> bool:
    """True if token (any case) names a catalog instruction."""
    token = token.upper()
    return token in OPCODES or token in ALIASES


def canonical_mnemonic(token: str) -> str:
    token = token.upper()
    return ALIASES.get(token, token)


# ──────────────────────────────────────────────
# Instruction
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Instruction:
    """A parsed instruction: mnemonic tag plus its normalized operands."""
    mnemonic: str
    operands: Tuple[Operand, ...] = ()
    line_text: str = ""
    line_num: int = 0

    def __str__(self) -> str:
        if not self.operands:
            return self.mnemonic
        return f"{self.mnemonic} {', '.join(str(op) for op in self.operands)}"

    @property
    def labels(self) -> List[str]:
        """Names of all label references still held by this instruction."""
        return [op.value for op in self.operands if op.is_label]

    def resolve(self, symbols: Mapping[str, int]) -> Instruction:
        """Return a copy with every label operand replaced by its address."""
        if not self.labels:
            return self

        resolved = []
        for op in self.operands:
            if op.is_label:
                if op.value not in symbols:
                    raise UnresolvedLabelError(
                        f"Undefined label: '{op.value}'", self.line_num, self.line_text)
                op = Operand(IMM, symbols[op.value])
            resolved.append(op)
        return replace(self, operands=tuple(resolved))

    def encode(self) -> int:
        """Pack the operands into the 16-bit opcode.

        Only valid on an instruction that came out of parse_instruction()
        and has been resolved.
        """
        if self.labels:
            raise UnresolvedLabelError(
                f"Label '{self.labels[0]}' reached encoding unresolved",
                self.line_num, self.line_text)

        for form in OPCODES.get(self.mnemonic, []):
            if form.normalize is None and len(form.shape) == len(self.operands) \
                    and all(_matches(p, o) for p, o in zip(form.shape, self.operands)):
                break
        else:
            raise ValueError(f"No encoding for {self.mnemonic} with operands "
                             f"{[op.kind for op in self.operands]}")

        opcode = form.opcode
        for op, field in zip(self.operands, form.fields):
            if field is None:
                continue
            shift, mask = FIELDS[field]
            if op.value > mask:
                log.warning("Line %d: %s value 0x%X truncated to 0x%X",
                            self.line_num, self.mnemonic, op.value, op.value & mask)
            opcode |= (op.value & mask) << shift
        return opcode


def parse_instruction(mnemonic: str, args: str, line_text: str = "",
                      line_num: int = 0) -> Instruction:
    """Parse the argument text of one mnemonic into an Instruction.

    Raises UnknownMnemonicError for a mnemonic outside the catalog and
    OperandShapeError when no accepted shape matches the operands.
    """
    mnem = canonical_mnemonic(mnemonic)
    if mnem not in OPCODES:
        raise UnknownMnemonicError(f"Unknown mnemonic: {mnemonic}", line_num, line_text)

    operands = split_operands(args)
    for form in OPCODES[mnem]:
        fitted = _fit(form.shape, operands)
        if fitted is None:
            continue
        if form.normalize is not None:
            fitted = form.normalize(fitted)
        return Instruction(mnem, fitted, line_text, line_num)

    raise OperandShapeError(
        f"{mnem}: unsupported operands: {line_text.strip() or args}", line_num, line_text)
