"""
ReCOP CPU Package
=================

CPU architecture definitions shared by the assembler and the disassembler:
addressing modes, instruction word field widths, and the configurable
opcode table.

Usage:
    from recop_asm.cpu import AddrMode, OpcodeDef, load_opcode_table

    opcodes = load_opcode_table("recop.toml")
    mov = opcodes["mov"]
"""

from recop_asm.cpu.recop import (
    # Core types
    AddrMode,
    OpcodeDef,
    OpcodeTable,
    # Field widths
    ADDR_MODE_BITS,
    OPCODE_BITS,
    REGISTER_BITS,
    OPERAND_BITS,
    MAX_OPCODE,
    MAX_REGISTER,
    MAX_OPERAND,
    REGISTER_SLOTS,
    MAX_ARGS,
    # Loading
    load_opcode_table,
    parse_opcode_table,
)

__all__ = [
    "AddrMode",
    "OpcodeDef",
    "OpcodeTable",
    "ADDR_MODE_BITS",
    "OPCODE_BITS",
    "REGISTER_BITS",
    "OPERAND_BITS",
    "MAX_OPCODE",
    "MAX_REGISTER",
    "MAX_OPERAND",
    "REGISTER_SLOTS",
    "MAX_ARGS",
    "load_opcode_table",
    "parse_opcode_table",
]
