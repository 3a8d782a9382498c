"""
ReCOP Assembler - Toolchain for ReCOP-class Processors
======================================================

This package provides an assembler and disassembler for ReCOP-class CPUs,
small processors whose instruction set is configured by an external opcode
table rather than fixed in the toolchain.

Every instruction assembles to one 32-bit word::

    [addr_mode:2][opcode:6][reg_z:4][reg_x:4][operand:16]

Main Components
---------------
- **cpu**: Addressing modes, field widths and the opcode table loader
- **assembler**: Lexer, parser and code generator (recasm)
    Converts assembly source into a hex dump or an FPGA memory
    initialization file (.mif)
- **disassembler**: Decodes instruction words back into source (recdisasm)

Quick Start
-----------
Assemble a program:
    >>> from recop_asm import Assembler, load_opcode_table
    >>> asm = Assembler(load_opcode_table("recop.toml"))
    >>> asm.assemble_file("prog.asm")
    >>> asm.write_mif("prog.mif")

Or use the command-line tools:
    $ recasm prog.asm -i recop.toml -o prog.hex
    $ recdisasm prog.hex -i recop.toml
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from recop_asm.assembler import (
    Assembler,
    InstructionRecord,
    Instruction,
    Lexer,
    Parser,
    Token,
    TokenType,
    assemble,
    assemble_file,
)
from recop_asm.cpu import (
    AddrMode,
    OpcodeDef,
    OpcodeTable,
    load_opcode_table,
    parse_opcode_table,
)
from recop_asm.disassembler import RecopDisassembler, parse_hex_dump
from recop_asm.errors import (
    RecopError,
    AssemblerError,
    AsmError,
    AddressingModeError,
    UndefinedLabelError,
    DuplicateLabelError,
    ErrorKind,
    OpcodeTableError,
    OutputError,
    SourceLocation,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "InstructionRecord",
    "Instruction",
    "Lexer",
    "Parser",
    "Token",
    "TokenType",
    "assemble",
    "assemble_file",
    # CPU definitions
    "AddrMode",
    "OpcodeDef",
    "OpcodeTable",
    "load_opcode_table",
    "parse_opcode_table",
    # Disassembler
    "RecopDisassembler",
    "parse_hex_dump",
    # Exception hierarchy
    "RecopError",
    "AssemblerError",
    "AsmError",
    "AddressingModeError",
    "UndefinedLabelError",
    "DuplicateLabelError",
    "ErrorKind",
    "OpcodeTableError",
    "OutputError",
    "SourceLocation",
]
