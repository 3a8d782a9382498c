"""
ReCOP Assembler - Main Interface
================================

This module provides the main Assembler class, the primary interface for
assembling ReCOP source code. It runs the lexer and then the parser over
the whole source, and hands the result to the code generator for output.

Example Usage
-------------
>>> from recop_asm.assembler import Assembler
>>> from recop_asm.cpu import parse_opcode_table
>>>
>>> opcodes = parse_opcode_table('''
... [ldr]
... opcode = 0
... args = 2
... imm = true
... [jmp]
... opcode = 24
... args = 1
... imm = true
... ''')
>>> asm = Assembler(opcodes)
>>> records = asm.assemble_string('''
... loop:
...     ldr r1 #10
...     jmp 'loop
... ''')
>>> asm.get_words()
[1074790410, 1476395008]
>>> asm.write_mif("prog.mif")

Command-Line Usage
------------------
    $ recasm prog.asm -i recop.toml -o prog.hex
"""

import logging
from pathlib import Path
from typing import Optional

from recop_asm.assembler.codegen import DEFAULT_MIF_DEPTH, CodeGenerator, InstructionRecord
from recop_asm.assembler.lexer import LexedSource, Lexer
from recop_asm.assembler.parser import Instruction, Parser
from recop_asm.cpu import OpcodeTable, load_opcode_table

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main ReCOP assembler class.

    The opcode table is fixed for the lifetime of the assembler; each call
    to assemble_string() or assemble_file() replaces the previous result.

    Attributes:
        opcodes: The instruction table used to validate source
    """

    def __init__(self, opcodes: OpcodeTable, mif_depth: int = DEFAULT_MIF_DEPTH):
        """
        Initialize the assembler.

        Args:
            opcodes: Instruction table (see recop_asm.cpu.load_opcode_table)
            mif_depth: Memory depth in words for MIF output
        """
        self.opcodes = opcodes
        self._parser = Parser(opcodes)
        self._codegen = CodeGenerator(mif_depth=mif_depth)
        self._lexed: Optional[LexedSource] = None
        self._instructions: list[Instruction] = []

    @classmethod
    def from_file(cls, opcode_path: str | Path, **kwargs) -> "Assembler":
        """Create an assembler from an instruction table TOML file."""
        return cls(load_opcode_table(opcode_path), **kwargs)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> list[InstructionRecord]:
        """
        Assemble source code from a string.

        The assembly pipeline is:
        1. Lex the whole source, collecting every label (lexer)
        2. Validate and encode each instruction line (parser)
        3. Hand the program to the code generator for output

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            Instruction records in address order

        Raises:
            AsmError: On the first rule violation; no partial output is kept
        """
        self._lexed = None
        self._instructions = []
        self._codegen.generate([])

        lexed = Lexer(source, filename).tokenize()
        instructions = self._parser.parse(lexed)

        self._lexed = lexed
        self._instructions = instructions
        records = self._codegen.generate(instructions, dict(lexed.labels), lexed.source_lines)

        logger.info(f"Assembled {filename}: {len(records)} instructions, {len(lexed.labels)} labels")
        return records

    def assemble_file(self, filepath: str | Path) -> list[InstructionRecord]:
        """
        Assemble source code from a file.

        Raises:
            AsmError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        logger.debug(f"Assembling {filepath}")
        return self.assemble_string(filepath.read_text(), str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_records(self) -> list[InstructionRecord]:
        return self._codegen.get_records()

    def get_instructions(self) -> list[Instruction]:
        """Return parsed instructions with their source locations."""
        return list(self._instructions)

    def get_words(self) -> list[int]:
        """Return the packed 32-bit instruction words."""
        return self._codegen.get_words()

    def get_code(self) -> bytes:
        """Return the program as raw big-endian bytes."""
        return self._codegen.get_code()

    def get_symbols(self) -> dict[str, int]:
        """Return the label table of the last assembly."""
        return self._codegen.get_symbols()

    def get_hex(self) -> str:
        return self._codegen.get_hex()

    def get_mif(self) -> str:
        return self._codegen.get_mif()

    def get_listing(self) -> str:
        return self._codegen.get_listing()

    def write_hex(self, filepath: str | Path) -> None:
        """Write the hex dump (one 8-digit word per line)."""
        self._codegen.write_hex(filepath)

    def write_mif(self, filepath: str | Path) -> None:
        """Write the FPGA memory initialization file."""
        self._codegen.write_mif(filepath)

    def write_listing(self, filepath: str | Path) -> None:
        self._codegen.write_listing(filepath)

    def write_symbols(self, filepath: str | Path) -> None:
        self._codegen.write_symbols(filepath)


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, opcodes: OpcodeTable, filename: str = "<input>") -> list[InstructionRecord]:
    """
    Convenience function to assemble source code.

    Raises:
        AsmError: If assembly fails
    """
    return Assembler(opcodes).assemble_string(source, filename)


def assemble_file(filepath: str | Path, opcodes: OpcodeTable) -> list[InstructionRecord]:
    """
    Convenience function to assemble a file.

    Raises:
        AsmError: If assembly fails
    """
    return Assembler(opcodes).assemble_file(filepath)
