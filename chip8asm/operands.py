"""
Operand parsing for the CHIP-8 assembler.

Turns one comma-separated operand token into a typed Operand. Parsing never
fails: anything that is not a register, a hex literal or one of the special
names becomes a LABEL, and the instruction catalog decides whether a label
is allowed in that slot.

Operand syntax:
  V0-VF     General register
  0xNNNN    Immediate value / address (1-4 hex digits)
  I         Index register
  [I]       Memory at I
  DT, ST    Delay / sound timer
  K         Wait for keypress
  F         Font sprite for a register
  B         BCD digits of a register
  label     Anything else (resolved in pass 1)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Union
import re

__all__ = ['Operand', 'parse_operand', 'split_operands', 'strip_comment',
           'REG', 'IMM', 'IREG', 'IDEREF', 'DT', 'ST', 'KEY', 'FONT', 'BCD',
           'BLANK', 'LABEL']


# ──────────────────────────────────────────────
# Operand kinds
# ──────────────────────────────────────────────

REG = 'REG'        # General register V0-VF
IMM = 'IMM'        # Immediate value or resolved address
IREG = 'I'         # Index register
IDEREF = '[I]'     # Memory cell addressed by I
DT = 'DT'          # Delay timer
ST = 'ST'          # Sound timer
KEY = 'K'          # Keypad wait
FONT = 'F'         # Font sprite table
BCD = 'B'          # BCD digits
BLANK = 'BLANK'    # Operand slot not supplied
LABEL = 'LABEL'    # Symbolic reference, not yet resolved

_SPECIAL = {
    'K': KEY,
    'DT': DT,
    'ST': ST,
    'I': IREG,
    '[I]': IDEREF,
    'B': BCD,
    'F': FONT,
}

_REGISTER_RE = re.compile(r'^V([0-9A-F])$')
_IMMEDIATE_RE = re.compile(r'^0X([0-9A-F]{1,4})$')

COMMENT = '//'


@dataclass(frozen=True)
class Operand:
    """One parsed operand: a kind tag plus its register index, value or label text."""
    kind: str
    value: Optional[Union[int, str]] = None

    @property
    def is_label(self) -> bool:
        return self.kind == LABEL

    def __str__(self) -> str:
        if self.kind == REG:
            return f"V{self.value:X}"
        if self.kind == IMM:
            return f"0x{self.value:03X}"
        if self.kind == LABEL:
            return str(self.value)
        if self.kind == BLANK:
            return ''
        return self.kind


def parse_operand(token: str) -> Operand:
    """Parse one operand token. Never raises."""
    text = token.strip().upper()

    if not text:
        return Operand(BLANK)

    if text in _SPECIAL:
        return Operand(_SPECIAL[text])

    m = _REGISTER_RE.match(text)
    if m:
        return Operand(REG, int(m.group(1), 16))

    m = _IMMEDIATE_RE.match(text)
    if m:
        return Operand(IMM, int(m.group(1), 16))

    # Malformed literals like 0xZZ or V1G land here on purpose
    return Operand(LABEL, text)


def strip_comment(line: str) -> str:
    """Drop everything from the first '//' to end of line."""
    pos = line.find(COMMENT)
    if pos >= 0:
        return line[:pos]
    return line


def split_operands(text: str) -> List[Operand]:
    """Split an argument string on commas and parse each piece.

    An empty argument string yields no operands at all; callers pad
    missing trailing slots with BLANK.
    """
    text = strip_comment(text).strip()
    if not text:
        return []
    return [parse_operand(part) for part in text.split(',')]
