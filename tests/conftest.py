# =============================================================================
# conftest.py - Shared Fixtures
# =============================================================================
# Instruction table used across the assembler test modules. It covers every
# addressing mode, the operand-as-register rule and opcodes that deliberately
# leave modes disabled.
# =============================================================================

import pytest

from recop_asm.cpu import parse_opcode_table


OPCODES_TOML = """
[mov]
opcode = 1
args = 2
reg = true
imm = true

[ldr]
opcode = 0
args = 2
imm = true
reg = true
dir = true
operand_as_reg = 1

[ler]
opcode = 54
args = 1
reg = true
operand_as_reg = 0

[add]
opcode = 56
args = 3
imm = true
reg = true
operand_as_reg = 1

[jmp]
opcode = 24
args = 1
imm = true

[noop]
opcode = 52
args = 0
inh = true

[clfz]
opcode = 16
args = 0

[strpc]
opcode = 29
args = 1
dir = true
"""


@pytest.fixture
def opcodes():
    """The shared test instruction table."""
    return parse_opcode_table(OPCODES_TOML, source="<test>")


@pytest.fixture
def opcodes_file(tmp_path):
    """The shared test instruction table written to a TOML file."""
    path = tmp_path / "recop.toml"
    path.write_text(OPCODES_TOML)
    return path
