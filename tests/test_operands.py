"""
Operand parser tests.

Every token must parse to exactly one Operand; unknown or malformed tokens
fall back to a label reference instead of raising.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from chip8asm.operands import (Operand, parse_operand, split_operands, strip_comment,
                               REG, IMM, IREG, IDEREF, DT, ST, KEY, FONT, BCD,
                               BLANK, LABEL)


class TestSpecialOperands:

    def test_special_names(self):
        cases = [
            ("K",   KEY),
            ("DT",  DT),
            ("ST",  ST),
            ("I",   IREG),
            ("[I]", IDEREF),
            ("B",   BCD),
            ("F",   FONT),
        ]
        for text, kind in cases:
            assert parse_operand(text) == Operand(kind), text

    def test_special_names_case_folded(self):
        assert parse_operand("dt") == Operand(DT)
        assert parse_operand("[i]") == Operand(IDEREF)
        assert parse_operand("k") == Operand(KEY)

    def test_empty_is_blank(self):
        assert parse_operand("") == Operand(BLANK)
        assert parse_operand("   ") == Operand(BLANK)


class TestRegisters:

    def test_all_registers(self):
        for i in range(16):
            assert parse_operand(f"V{i:X}") == Operand(REG, i)

    def test_lowercase_register(self):
        assert parse_operand("va") == Operand(REG, 0xA)

    def test_surrounding_whitespace(self):
        assert parse_operand("  V3 ") == Operand(REG, 3)

    def test_two_digit_register_is_label(self):
        assert parse_operand("V10") == Operand(LABEL, "V10")

    def test_non_hex_register_is_label(self):
        assert parse_operand("VG") == Operand(LABEL, "VG")
        assert parse_operand("V") == Operand(LABEL, "V")


class TestImmediates:

    def test_hex_values(self):
        assert parse_operand("0x12") == Operand(IMM, 0x12)
        assert parse_operand("0x0") == Operand(IMM, 0)
        assert parse_operand("0xFFFF") == Operand(IMM, 0xFFFF)
        assert parse_operand("0x2a0") == Operand(IMM, 0x2A0)

    def test_uppercase_prefix(self):
        assert parse_operand("0X1F") == Operand(IMM, 0x1F)

    def test_malformed_hex_is_label(self):
        assert parse_operand("0xZZ").kind == LABEL
        assert parse_operand("0x").kind == LABEL
        assert parse_operand("0x12345").kind == LABEL

    def test_decimal_is_label(self):
        assert parse_operand("12") == Operand(LABEL, "12")


class TestLabels:

    def test_identifier(self):
        assert parse_operand("loop") == Operand(LABEL, "LOOP")

    def test_is_label_flag(self):
        assert parse_operand("draw_ball").is_label
        assert not parse_operand("V0").is_label


class TestSplitting:

    def test_strip_comment(self):
        assert strip_comment("CLS // clear") == "CLS "
        assert strip_comment("// only comment") == ""
        assert strip_comment("RET") == "RET"

    def test_split_two(self):
        assert split_operands("V0, 0x12") == [Operand(REG, 0), Operand(IMM, 0x12)]

    def test_split_three(self):
        ops = split_operands("V1,V2,0x5")
        assert ops == [Operand(REG, 1), Operand(REG, 2), Operand(IMM, 5)]

    def test_split_drops_comment(self):
        assert split_operands("V3 // shift me") == [Operand(REG, 3)]

    def test_split_empty(self):
        assert split_operands("") == []
        assert split_operands("  // nothing") == []

    def test_missing_trailing_operand_is_blank(self):
        assert split_operands("V3,") == [Operand(REG, 3), Operand(BLANK)]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
