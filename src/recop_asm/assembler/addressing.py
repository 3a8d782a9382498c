"""
Addressing Mode Resolution
==========================

The addressing mode of a ReCOP instruction is inferred from its trailing
token, then checked against the modes the opcode enables:

| Trailing token        | Mode      | Required flag |
|-----------------------|-----------|---------------|
| rN                    | REGISTER  | reg           |
| #N or 'label          | IMMEDIATE | imm           |
| $N                    | DIRECT    | dir           |
| the mnemonic itself   | INHERENT  | inh           |

No mode is ever assumed: an opcode must enable every mode it is used with.
A label reference always resolves as an immediate value (its address).
"""

from typing import Optional

from recop_asm.assembler.lexer import Token, TokenType
from recop_asm.cpu import AddrMode, OpcodeDef
from recop_asm.errors import AddressingModeError, AsmError, ErrorKind


# Trailing token type -> addressing mode it selects
TOKEN_MODES = {
    TokenType.REG: AddrMode.REGISTER,
    TokenType.IMM: AddrMode.IMMEDIATE,
    TokenType.LABEL: AddrMode.IMMEDIATE,
    TokenType.DIR: AddrMode.DIRECT,
    TokenType.OPCODE: AddrMode.INHERENT,
}


def resolve_addressing_mode(
    operand: Token,
    opcode: OpcodeDef,
    mnemonic: Optional[Token] = None,
) -> AddrMode:
    """
    Infer the addressing mode from the trailing token of an instruction.

    Args:
        operand: The last token of the instruction line
        opcode: Definition of the instruction's mnemonic
        mnemonic: The mnemonic token. An OPCODE-type trailing token only
            means inherent mode when it *is* the mnemonic; any other bare
            word in operand position is a missing operand sigil.

    Returns:
        The addressing mode to encode

    Raises:
        AddressingModeError: If the opcode does not enable the inferred mode
        AsmError: OperandExpected, if a bare word stands in operand position
    """
    if operand.type is TokenType.OPCODE and mnemonic is not None and operand is not mnemonic:
        raise AsmError(
            ErrorKind.OPERAND_EXPECTED,
            operand,
            hint="prefix the operand with r, #, $ or ' (label reference)",
        )

    mode = TOKEN_MODES[operand.type]
    if not opcode.supports(mode):
        name = mnemonic.value if mnemonic is not None else operand.value
        raise AddressingModeError(
            name,
            str(mode),
            operand,
            valid_modes=[str(m) for m in opcode.valid_modes],
        )
    return mode
