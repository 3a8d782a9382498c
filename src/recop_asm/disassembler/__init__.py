"""
ReCOP Disassembler Package
==========================

Decodes ReCOP instruction words back into assembly source using the same
opcode table as the assembler.
"""

from recop_asm.disassembler.recop import (
    DisassembledInstruction,
    RecopDisassembler,
    parse_hex_dump,
)

__all__ = [
    "DisassembledInstruction",
    "RecopDisassembler",
    "parse_hex_dump",
]
