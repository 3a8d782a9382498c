# =============================================================================
# test_assembler.py - Assembler Integration Tests
# =============================================================================
# End-to-end tests running source through the lexer, parser and code
# generator, including the example program shipped in examples/.
# =============================================================================

from pathlib import Path

import pytest

from recop_asm import Assembler, assemble, assemble_file, load_opcode_table
from recop_asm.assembler import DEFAULT_MIF_DEPTH
from recop_asm.errors import AsmError, DuplicateLabelError, ErrorKind, RecopError

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"

COUNTDOWN_WORDS = [
    0x4010000A,  # start: ldr r1 #10
    0x40200001,  #        ldr r2 #1
    0x82100064,  # loop:  str r1 $100
    0x43110001,  #        subv r1 r1 #1
    0x5C100006,  #        present r1 'done
    0x58000002,  #        jmp 'loop
    0x9D0000C8,  # done:  strpc $200
    0x34000000,  #        noop
]


# =============================================================================
# Example Program Tests
# =============================================================================

class TestExampleProgram:
    """Assemble examples/countdown.asm with examples/recop.toml."""

    def setup_method(self):
        self.asm = Assembler.from_file(EXAMPLES_DIR / "recop.toml")

    def test_words(self):
        self.asm.assemble_file(EXAMPLES_DIR / "countdown.asm")
        assert self.asm.get_words() == COUNTDOWN_WORDS

    def test_labels(self):
        self.asm.assemble_file(EXAMPLES_DIR / "countdown.asm")
        assert self.asm.get_symbols() == {"start": 0, "loop": 2, "done": 6}

    def test_write_outputs(self, tmp_path):
        self.asm.assemble_file(EXAMPLES_DIR / "countdown.asm")
        self.asm.write_hex(tmp_path / "countdown.hex")
        self.asm.write_mif(tmp_path / "countdown.mif")

        hex_lines = (tmp_path / "countdown.hex").read_text().splitlines()
        assert hex_lines == [f"{word:08x}" for word in COUNTDOWN_WORDS]

        mif = (tmp_path / "countdown.mif").read_text()
        assert mif.startswith(f"DEPTH = {DEFAULT_MIF_DEPTH};\nWIDTH = 32;\n")
        assert "0007: 34000000;\nEND;\n" in mif

    def test_instructions_keep_locations(self):
        self.asm.assemble_file(EXAMPLES_DIR / "countdown.asm")
        instructions = self.asm.get_instructions()
        assert instructions[0].location.line == 4
        assert instructions[-1].mnemonic == "noop"
        assert instructions[-1].location.filename.endswith("countdown.asm")


# =============================================================================
# Assembler Behaviour Tests
# =============================================================================

class TestAssembler:
    """Test the Assembler class with the shared instruction table."""

    def test_assemble_string(self, opcodes):
        asm = Assembler(opcodes)
        records = asm.assemble_string("mov r1 #5\nnoop")
        assert [str(r) for r in records] == ["41100005", "34000000"]
        assert asm.get_code() == b"\x41\x10\x00\x05\x34\x00\x00\x00"

    def test_one_record_per_instruction_line(self, opcodes):
        source = "; comment\n\nstart:\n  noop\n  noop ; again\nend:\n"
        asm = Assembler(opcodes)
        assert len(asm.assemble_string(source)) == 2
        assert asm.get_symbols() == {"start": 0, "end": 2}

    def test_reassembly_replaces_previous_result(self, opcodes):
        asm = Assembler(opcodes)
        asm.assemble_string("a: noop\nnoop")
        asm.assemble_string("mov r1 #1")
        assert asm.get_words() == [0x41100001]
        assert asm.get_symbols() == {}

    def test_failure_leaves_no_partial_output(self, opcodes):
        asm = Assembler(opcodes)
        asm.assemble_string("noop")
        with pytest.raises(AsmError):
            asm.assemble_string("noop\nmov r1\n")
        assert asm.get_records() == []
        assert asm.get_instructions() == []
        assert asm.get_hex() == ""

    def test_error_message_format(self, opcodes):
        with pytest.raises(AsmError) as exc_info:
            assemble("jmp r1", opcodes)
        lines = str(exc_info.value).splitlines()
        assert lines[0] == "<input>:1:5: error: 'jmp' does not support register addressing mode"
        assert lines[1] == "    jmp r1"
        assert lines[2] == "        ^"
        assert lines[3] == "hint: jmp supports: immediate"

    def test_duplicate_label(self, opcodes):
        with pytest.raises(DuplicateLabelError):
            assemble("x: noop\nx: noop", opcodes)

    def test_errors_share_base_class(self, opcodes):
        with pytest.raises(RecopError):
            assemble("bogus", opcodes)

    def test_mif_depth(self, opcodes):
        asm = Assembler(opcodes, mif_depth=16)
        asm.assemble_string("noop")
        assert asm.get_mif().startswith("DEPTH = 16;")

    def test_listing(self, opcodes):
        asm = Assembler(opcodes)
        asm.assemble_string("top: jmp 'top")
        listing = asm.get_listing()
        assert "0000  58000000     1  top: jmp 'top" in listing

    def test_write_symbols_and_listing(self, opcodes, tmp_path):
        asm = Assembler(opcodes)
        asm.assemble_string("top: jmp 'top")
        asm.write_symbols(tmp_path / "prog.sym")
        asm.write_listing(tmp_path / "prog.lst")
        assert "top 0000" in (tmp_path / "prog.sym").read_text()
        assert "Symbol Table" in (tmp_path / "prog.lst").read_text()


class TestConvenienceFunctions:
    """Test the module-level helpers."""

    def test_assemble(self, opcodes):
        records = assemble("ler r7", opcodes)
        assert records[0].to_word() == 0xF6700000

    def test_assemble_file(self, opcodes, tmp_path):
        path = tmp_path / "prog.asm"
        path.write_text("noop\nfoo\n")
        with pytest.raises(AsmError) as exc_info:
            assemble_file(path, opcodes)
        assert exc_info.value.kind == ErrorKind.OPCODE_UNDEFINED
        assert str(exc_info.value).startswith(f"{path}:2:1: error:")

    def test_assemble_missing_file(self, opcodes, tmp_path):
        with pytest.raises(FileNotFoundError):
            assemble_file(tmp_path / "missing.asm", opcodes)

    def test_from_file(self, opcodes_file):
        asm = Assembler.from_file(opcodes_file, mif_depth=8)
        asm.assemble_string("strpc $1")
        assert asm.get_words() == [0x9D000001]
        assert load_opcode_table(opcodes_file)["strpc"].opcode == 29
