"""
Command-line tests for c8asm.

Runs main() in-process against temporary source files.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
import c8asm


PROGRAM = """\
START
        CLS
        JP START
"""


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "prog.chip8"
    path.write_text(PROGRAM, encoding="utf-8")
    return path


class TestBinaryOutput:

    def test_writes_binary(self, source, tmp_path):
        out = tmp_path / "prog.c8"
        c8asm.main([str(source), "-o", str(out)])
        assert out.read_bytes() == b'\x00\xE0\x12\x00'

    def test_default_output_name(self, source, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        c8asm.main([str(source)])
        assert (tmp_path / "a.c8").read_bytes() == b'\x00\xE0\x12\x00'

    def test_org_override(self, source, tmp_path):
        out = tmp_path / "prog.c8"
        c8asm.main([str(source), "-o", str(out), "--org", "0x300"])
        assert out.read_bytes() == b'\x00\xE0\x13\x00'

    def test_target_profile(self, source, tmp_path):
        out = tmp_path / "prog.c8"
        c8asm.main([str(source), "-o", str(out), "--target", "eti660"])
        assert out.read_bytes() == b'\x00\xE0\x16\x00'


class TestListingOutput:

    def test_listing_to_stdout(self, source, capsys):
        c8asm.main([str(source), "--format", "listing"])
        out = capsys.readouterr().out
        assert "0x0202  12 00  JP START" in out

    def test_listing_from_extension(self, source, tmp_path):
        out = tmp_path / "prog.lst"
        c8asm.main([str(source), "-o", str(out)])
        assert "0x0200  00 E0  CLS" in out.read_text(encoding="utf-8")


class TestFailures:

    def test_missing_input(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            c8asm.main([str(tmp_path / "nope.chip8")])
        assert exc.value.code == 1
        assert "not found" in capsys.readouterr().err

    def test_assembly_error_writes_nothing(self, tmp_path, capsys):
        src = tmp_path / "bad.chip8"
        src.write_text("CLS\nJP NOWHERE\n", encoding="utf-8")
        out = tmp_path / "bad.c8"
        with pytest.raises(SystemExit) as exc:
            c8asm.main([str(src), "-o", str(out)])
        assert exc.value.code == 1
        assert not out.exists()
        assert "NOWHERE" in capsys.readouterr().err

    def test_bad_org(self, source, tmp_path):
        with pytest.raises(SystemExit) as exc:
            c8asm.main([str(source), "-o", str(tmp_path / "x.c8"), "--org", "0xZZ"])
        assert exc.value.code == 1

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            c8asm.main(["--version"])
        assert exc.value.code == 0
        assert "c8asm" in capsys.readouterr().out


class TestParseIntArg:

    def test_formats(self):
        assert c8asm.parse_int_arg("0x200") == 0x200
        assert c8asm.parse_int_arg("$600") == 0x600
        assert c8asm.parse_int_arg("512") == 512


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
