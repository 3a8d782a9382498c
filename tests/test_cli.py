# =============================================================================
# test_cli.py - Command-Line Interface Tests
# =============================================================================
# Tests for the recasm and recdisasm commands, run in-process through
# click's CliRunner.
# =============================================================================

from pathlib import Path

import pytest
from click.testing import CliRunner

from recop_asm.cli import recasm, recdisasm
from recop_asm.cli.errors import ExitCode

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"

# Keep a RECOP_INSTRUCTIONS from the developer's shell out of the tests
CLEAN_ENV = {"RECOP_INSTRUCTIONS": None}


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "prog.asm"
    path.write_text("start: mov r1 #5\n       noop\n")
    return path


# =============================================================================
# recasm Tests
# =============================================================================

class TestRecasm:
    """Test the assembler command."""

    def setup_method(self):
        self.runner = CliRunner()

    def invoke(self, args, env=None):
        return self.runner.invoke(recasm.main, [str(arg) for arg in args], env=env or CLEAN_ENV)

    def test_help(self):
        result = self.invoke(["--help"])
        assert result.exit_code == 0
        assert "Assemble ReCOP source code" in result.output

    def test_version(self):
        result = self.invoke(["--version"])
        assert result.exit_code == 0
        assert "recasm" in result.output

    def test_default_hex_output(self, source_file, opcodes_file):
        """Without -o the output goes next to the input with a .hex suffix."""
        result = self.invoke([source_file, "-i", opcodes_file])
        assert result.exit_code == ExitCode.SUCCESS
        assert (source_file.parent / "prog.hex").read_text() == "41100005\n34000000\n"

    def test_mif_format(self, source_file, opcodes_file):
        result = self.invoke([source_file, "-i", opcodes_file, "-f", "mif"])
        assert result.exit_code == 0
        mif = (source_file.parent / "prog.mif").read_text()
        assert "0000: 41100005;" in mif
        assert mif.endswith("END;\n")

    def test_explicit_output_and_extras(self, source_file, opcodes_file, tmp_path):
        out = tmp_path / "build" / "out.hex"
        out.parent.mkdir()
        result = self.invoke([
            source_file, "-i", opcodes_file,
            "-o", out,
            "-m", tmp_path / "rom.mif",
            "-l", tmp_path / "prog.lst",
            "-s", tmp_path / "prog.sym",
        ])
        assert result.exit_code == 0
        assert out.exists()
        assert (tmp_path / "rom.mif").read_text().startswith("DEPTH = 32768;")
        assert "ReCOP Assembler Listing" in (tmp_path / "prog.lst").read_text()
        assert "start 0000" in (tmp_path / "prog.sym").read_text()

    def test_depth_option(self, source_file, opcodes_file):
        result = self.invoke([source_file, "-i", opcodes_file, "-f", "mif", "--depth", "256"])
        assert result.exit_code == 0
        assert (source_file.parent / "prog.mif").read_text().startswith("DEPTH = 256;")

    def test_program_too_long_for_depth(self, source_file, opcodes_file):
        result = self.invoke([source_file, "-i", opcodes_file, "-f", "mif", "--depth", "1"])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Assembly error:" in result.output
        assert not (source_file.parent / "prog.mif").exists()

    def test_depth_overflow_writes_no_files(self, source_file, opcodes_file, tmp_path):
        """A failing extra MIF must not leave the hex file or listing behind."""
        result = self.invoke([
            source_file, "-i", opcodes_file,
            "-l", tmp_path / "prog.lst",
            "-m", tmp_path / "rom.mif",
            "--depth", "1",
        ])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert not (source_file.parent / "prog.hex").exists()
        assert not (tmp_path / "prog.lst").exists()
        assert not (tmp_path / "rom.mif").exists()

    def test_mif_twice_is_rejected(self, source_file, opcodes_file, tmp_path):
        result = self.invoke([source_file, "-i", opcodes_file, "-f", "mif", "-m", tmp_path / "x.mif"])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "cannot be combined" in result.output

    def test_instructions_from_environment(self, source_file, opcodes_file):
        result = self.invoke([source_file], env={"RECOP_INSTRUCTIONS": str(opcodes_file)})
        assert result.exit_code == 0
        assert (source_file.parent / "prog.hex").exists()

    def test_missing_instructions(self, source_file):
        result = self.invoke([source_file])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_missing_input(self, opcodes_file, tmp_path):
        result = self.invoke([tmp_path / "nope.asm", "-i", opcodes_file])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_assembly_error(self, opcodes_file, tmp_path):
        path = tmp_path / "bad.asm"
        path.write_text("noop\nfoo r1 r2\n")
        result = self.invoke([path, "-i", opcodes_file])

        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "error: opcode is not defined in the instruction table: 'foo'" in result.output
        assert f"--> {path}:2:1" in result.output
        assert "2 │ foo r1 r2" in result.output
        assert not (tmp_path / "bad.hex").exists()

    def test_error_hint_is_shown(self, opcodes_file, tmp_path):
        path = tmp_path / "bad.asm"
        path.write_text("jmp r1\n")
        result = self.invoke([path, "-i", opcodes_file])
        assert result.exit_code == 1
        assert "hint: jmp supports: immediate" in result.output

    def test_invalid_instruction_table(self, source_file, tmp_path):
        table = tmp_path / "bad.toml"
        table.write_text("[mov]\nopcode = 1\n")
        result = self.invoke([source_file, "-i", table])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Assembly error:" in result.output
        assert "missing required key 'args'" in result.output

    def test_verbose(self, source_file, opcodes_file):
        result = self.invoke([source_file, "-i", opcodes_file, "-v"])
        assert result.exit_code == 0
        assert "Loaded 8 opcodes" in result.output
        assert "Assembly complete: 2 instructions" in result.output

    def test_example_program(self, tmp_path):
        out = tmp_path / "countdown.hex"
        result = self.invoke([
            EXAMPLES_DIR / "countdown.asm",
            "-i", EXAMPLES_DIR / "recop.toml",
            "-o", out,
        ])
        assert result.exit_code == 0
        assert len(out.read_text().splitlines()) == 8


# =============================================================================
# recdisasm Tests
# =============================================================================

class TestRecdisasm:
    """Test the disassembler command."""

    def setup_method(self):
        self.runner = CliRunner()

    def invoke(self, args, env=None):
        return self.runner.invoke(recdisasm.main, [str(arg) for arg in args], env=env or CLEAN_ENV)

    def test_disassemble_to_stdout(self, opcodes_file, tmp_path):
        dump = tmp_path / "prog.hex"
        dump.write_text("41100005\n34000000\n")
        result = self.invoke([dump, "-i", opcodes_file])
        assert result.exit_code == 0
        assert "0000: 41100005  mov r1 #5" in result.output
        assert "0001: 34000000  noop" in result.output

    def test_source_only_to_file(self, opcodes_file, tmp_path):
        dump = tmp_path / "prog.hex"
        dump.write_text("41100005\n34000000\n")
        out = tmp_path / "prog.asm"
        result = self.invoke([dump, "-i", opcodes_file, "--no-words", "-o", out])
        assert result.exit_code == 0
        assert out.read_text() == "mov r1 #5\nnoop\n"

    def test_round_trip_through_both_commands(self, source_file, opcodes_file, tmp_path):
        CliRunner().invoke(recasm.main, [str(source_file), "-i", str(opcodes_file)], env=CLEAN_ENV)
        hex_file = source_file.with_suffix(".hex")
        out = tmp_path / "again.asm"
        result = self.invoke([hex_file, "-i", opcodes_file, "--no-words", "-o", out])
        assert result.exit_code == 0

        result = CliRunner().invoke(
            recasm.main, [str(out), "-i", str(opcodes_file)], env=CLEAN_ENV
        )
        assert result.exit_code == 0
        assert out.with_suffix(".hex").read_text() == hex_file.read_text()

    def test_invalid_hex_dump(self, opcodes_file, tmp_path):
        dump = tmp_path / "prog.hex"
        dump.write_text("41100005\nzzzz\n")
        result = self.invoke([dump, "-i", opcodes_file])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "line 2" in result.output

    def test_version(self):
        result = self.invoke(["--version"])
        assert result.exit_code == 0
        assert "recdisasm" in result.output
