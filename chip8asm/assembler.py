"""
CHIP-8 Two-Pass Assembler.

Assembles CHIP-8 assembly text into a flat binary of big-endian 16-bit
opcodes, loaded verbatim at the base address (0x200 on the COSMAC VIP).

Source format:
  CLS                 // instruction, mnemonic first
  LOOP                // label: a lone token on its own line (':' optional)
  JP LOOP             // labels may be referenced before or after definition

Label names are the trimmed line text minus its comment, upper-cased, with
one trailing ':' dropped, so "loop:" and "LOOP" define the same label.
Lines are split on '\\n' (and '\\r\\n') only.

How the two-pass algorithm works:
  Pass 1: Scan all lines. Every instruction is exactly 2 bytes, so the PC
          just advances by 2 per instruction line. A label line binds its
          name to the current PC, i.e. the address of the next instruction.
  Pass 2: Parse each instruction through the catalog, swap label operands
          for their pass-1 addresses, encode and emit high byte first.

Any error aborts the whole run; no partial binary is produced.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Set, Tuple
from dataclasses import dataclass
import logging

from .errors import AssemblerError, UnknownMnemonicError
from .instructions import canonical_mnemonic, is_mnemonic, parse_instruction
from .operands import strip_comment

__all__ = ['Assembler', 'AssemblerError', 'assemble', 'resolve_labels',
           'BASE_ADDRESS', 'TARGET_PROFILES']

log = logging.getLogger(__name__)

BASE_ADDRESS = 0x200
INSTRUCTION_SIZE = 2
ADDRESS_LIMIT = 0x1000   # 4K address space, 12-bit addresses

TARGET_PROFILES = {
    "chip8": {
        "org": 0x200,
        "description": "COSMAC VIP CHIP-8 interpreter",
    },
    "eti660": {
        "org": 0x600,
        "description": "ETI 660 CHIP-8 interpreter",
    },
}


# ──────────────────────────────────────────────
# Line Parser
# ──────────────────────────────────────────────

@dataclass
class AsmLine:
    """Parsed assembly source line."""
    label: Optional[str] = None
    mnemonic: Optional[str] = None
    operand: str = ""
    line_num: int = 0
    raw: str = ""
    address: Optional[int] = None   # Label lines: PC bound in pass 1

    @property
    def is_instruction(self) -> bool:
        return self.mnemonic is not None and is_mnemonic(self.mnemonic)


def _parse_line(line: str, line_num: int) -> AsmLine:
    """Classify one line as blank, label or instruction.

    A line whose first token is not a mnemonic is a label only when that
    token is all there is; anything longer keeps its first token as the
    mnemonic so pass 2 can report it as unknown.
    """
    result = AsmLine(line_num=line_num, raw=line)

    text = strip_comment(line).strip().upper()
    if not text:
        return result

    parts = text.split(None, 1)
    head = parts[0]

    if is_mnemonic(head):
        result.mnemonic = canonical_mnemonic(head)
        result.operand = parts[1].strip() if len(parts) > 1 else ""
        return result

    if len(parts) == 1:
        name = head[:-1] if head.endswith(':') else head
        if name:
            result.label = name
            return result

    result.mnemonic = head
    result.operand = parts[1].strip() if len(parts) > 1 else ""
    return result


def _parse_source(source: str) -> List[AsmLine]:
    # Only \n (or \r\n) ends a line; other control characters stay inside comments
    lines = []
    for i, line in enumerate(source.split('\n'), 1):
        if line.endswith('\r'):
            line = line[:-1]
        lines.append(_parse_line(line, i))
    return lines


def _scan_labels(lines: List[AsmLine], base_address: int) -> Tuple[Dict[str, int], int]:
    """Pass 1 over parsed lines. Returns (symbols, final PC)."""
    symbols: Dict[str, int] = {}
    pc = base_address

    for line in lines:
        if line.is_instruction:
            pc += INSTRUCTION_SIZE
        elif line.label is not None:
            if line.label in symbols and symbols[line.label] != pc:
                log.warning("Line %d: label '%s' redefined (0x%03X -> 0x%03X)",
                            line.line_num, line.label, symbols[line.label], pc)
            symbols[line.label] = pc
            line.address = pc

    return symbols, pc


def resolve_labels(source: str, base_address: int = BASE_ADDRESS) -> Dict[str, int]:
    """Build the symbol table for source: label name -> address.

    Several labels in a row all get the address of the next instruction.
    A label after the last instruction gets the address one past the end.
    """
    symbols, _ = _scan_labels(_parse_source(source), base_address)
    return symbols


# ──────────────────────────────────────────────
# The Assembler
# ──────────────────────────────────────────────

class Assembler:
    """Two-pass CHIP-8 assembler.

    Usage:
        asm = Assembler()
        binary = asm.assemble(source_text)
        listing = asm.get_listing()
    """

    def __init__(self, base_address: int = BASE_ADDRESS):
        self.base_addr: int = base_address          # Load address of the first instruction
        self.symbols: Dict[str, int] = {}           # Label table: name -> address
        self.binary: bytearray = bytearray()        # Assembled output of the last successful run
        self._lines: List[AsmLine] = []
        self._emitted: Dict[int, Tuple[int, int]] = {}  # line_num -> (address, opcode)

    def assemble(self, source: str) -> bytearray:
        """Assemble source text into binary.

        Raises an AssemblerError subclass on the first problem, leaving
        self.binary empty.
        """
        self.symbols = {}
        self.binary = bytearray()
        self._emitted = {}
        self._lines = _parse_source(source)

        self._pass1()
        binary = self._pass2()

        end = self.base_addr + len(binary)
        if end > ADDRESS_LIMIT:
            log.warning("Program ends at 0x%04X, past the 12-bit address space", end)

        self.binary = binary
        return self.binary

    def _pass1(self):
        """Pass 1: bind every label to the address of the following instruction."""
        self.symbols, end = _scan_labels(self._lines, self.base_addr)
        log.debug("Pass 1: %d labels, %d instructions",
                  len(self.symbols), (end - self.base_addr) // INSTRUCTION_SIZE)

    def _pass2(self) -> bytearray:
        """Pass 2: parse, resolve and encode every instruction line."""
        data = bytearray()
        emitted = {}
        referenced: Set[str] = set()
        pc = self.base_addr

        for line in self._lines:
            if line.mnemonic is None:
                continue
            if not line.is_instruction:
                raise UnknownMnemonicError(
                    f"Unknown mnemonic: {line.mnemonic}", line.line_num, line.raw)

            instr = parse_instruction(line.mnemonic, line.operand, line.raw, line.line_num)
            referenced.update(instr.labels)
            opcode = instr.resolve(self.symbols).encode()
            log.debug("0x%03X  %04X  %s", pc, opcode, instr)

            data.append((opcode >> 8) & 0xFF)
            data.append(opcode & 0xFF)
            emitted[line.line_num] = (pc, opcode)
            pc += INSTRUCTION_SIZE

        for name in sorted(set(self.symbols) - referenced):
            log.warning("Label '%s' is never referenced", name)

        self._emitted = emitted
        log.debug("Pass 2: emitted %d bytes", len(data))
        return data

    def get_listing(self) -> str:
        """Return a human-readable listing showing address, bytes, and source."""
        lines = []
        lines.append(f"{'ADDR':>6}  {'BYTES':<5}  SOURCE")
        lines.append("-" * 60)

        for asmline in self._lines:
            raw = asmline.raw.strip()
            if asmline.line_num in self._emitted:
                addr, opcode = self._emitted[asmline.line_num]
                lines.append(f"0x{addr:04X}  {opcode >> 8:02X} {opcode & 0xFF:02X}  {raw}")
            elif asmline.label is not None:
                addr = asmline.address if asmline.address is not None else 0
                lines.append(f"0x{addr:04X}  {'':5}  {raw}")
            elif raw:
                lines.append(f"{'':6}  {'':5}  {raw}")

        return '\n'.join(lines)


# ──────────────────────────────────────────────
# Convenience functions
# ──────────────────────────────────────────────

def assemble(source: str, base_address: int = BASE_ADDRESS) -> bytes:
    """Assemble source text, return the raw opcode bytes."""
    asm = Assembler(base_address)
    return bytes(asm.assemble(source))
