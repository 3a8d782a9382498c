"""
ReCOP Assembler
===============

This package assembles ReCOP-class assembly source into 32-bit instruction
words, driven by an external opcode table that defines the opcode number,
argument count and enabled addressing modes of every mnemonic.

Main Components
---------------
- **Assembler**: Main class that runs the pipeline and writes output files
- **Lexer**: Splits source into token lines and collects label addresses
- **Parser**: Validates token lines and encodes InstructionRecords
- **CodeGenerator**: Renders hex dump, MIF, listing and symbol outputs

Assembly Process
----------------
1. **Lexing**: the whole source is tokenized first, so the label table is
   complete before any instruction is parsed (forward references resolve).
2. **Parsing**: every line is checked against the opcode table, its
   addressing mode inferred, and its fields encoded.
3. **Output**: the records are rendered in the requested format.

The first error aborts the run; there is no partial output.

Example Usage
-------------
>>> from recop_asm.assembler import Assembler
>>> from recop_asm.cpu import load_opcode_table
>>> asm = Assembler(load_opcode_table("recop.toml"))
>>> asm.assemble_file("prog.asm")
>>> asm.write_hex("prog.hex")
"""

from recop_asm.assembler.assembler import Assembler, assemble, assemble_file
from recop_asm.assembler.lexer import Lexer, LexedSource, Token, TokenType, tokenize
from recop_asm.assembler.addressing import resolve_addressing_mode
from recop_asm.assembler.parser import Parser, Instruction, parse_source
from recop_asm.assembler.codegen import (
    CodeGenerator,
    InstructionRecord,
    DEFAULT_MIF_DEPTH,
    format_hex,
    format_mif,
    format_symbols,
)
from recop_asm.cpu import AddrMode, OpcodeDef, OpcodeTable

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "Lexer",
    "LexedSource",
    "Token",
    "TokenType",
    "tokenize",
    # Addressing
    "resolve_addressing_mode",
    # Parser
    "Parser",
    "Instruction",
    "parse_source",
    # Code generator
    "CodeGenerator",
    "InstructionRecord",
    "DEFAULT_MIF_DEPTH",
    "format_hex",
    "format_mif",
    "format_symbols",
    # Opcodes
    "AddrMode",
    "OpcodeDef",
    "OpcodeTable",
]
