"""
Assembler exceptions.

Every error is fatal to the run: the assembler stops at the first one and
returns no output.
"""

__all__ = ['AssemblerError', 'OperandShapeError', 'UnknownMnemonicError',
           'UnresolvedLabelError']


class AssemblerError(Exception):
    """Raised on assembly errors."""
    def __init__(self, message: str, line_num: int = 0, line_text: str = ""):
        self.line_num = line_num
        self.line_text = line_text
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


class OperandShapeError(AssemblerError):
    """A mnemonic was given an operand combination it does not accept."""


class UnknownMnemonicError(AssemblerError):
    """The first token of an instruction line is not a known mnemonic."""


class UnresolvedLabelError(AssemblerError):
    """An operand names a label that was never defined."""
