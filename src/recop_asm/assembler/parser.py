"""
ReCOP Instruction Parser
========================

This module implements the second stage of the assembler. It validates each
token line produced by the lexer against the opcode table and turns it into
an encoded InstructionRecord.

Instruction Syntax
------------------
```
mnemonic [rZ [rX]] [operand]
```
The number of tokens after the mnemonic must equal the opcode's ``args``.
The last token selects the addressing mode (see addressing.py); every token
between the mnemonic and the last token must be a register and fills the
register slots reg_z then reg_x.

Register Mode
-------------
In register mode with fewer than three arguments the trailing register is
stored in a register slot and the 16-bit operand field stays 0. The slot is
``operand_as_reg`` when the opcode declares it, otherwise the first slot
not taken by an explicit register argument:

```asm
; mov: args = 2, reg = true
mov r1 r2       ; reg_z = 1, reg_x = 2, operand = 0
; ler: args = 1, reg = true, operand_as_reg = 1
ler r7          ; reg_z = 0, reg_x = 7, operand = 0
```

With three arguments both slots are taken, so the trailing register index
goes into the operand field.

Validation Order
----------------
Each line is checked in a fixed order and the first failure aborts the
whole assembly:

1. OpcodeExpected / OpcodeUndefined - first token
2. ArgsNumber - token count
3. ImmInvalid / RegInvalid / DirInvalid / InhInvalid / OperandExpected
4. ArgParse / UndefinedLabel - operand value
5. RegExpected / ArgParse / ValueRange - register arguments
6. ValueRange - operand value or trailing register
"""

import difflib
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from recop_asm.assembler.addressing import resolve_addressing_mode
from recop_asm.assembler.codegen import InstructionRecord
from recop_asm.assembler.lexer import LexedSource, Lexer, Token, TokenType
from recop_asm.cpu import (
    MAX_ARGS,
    MAX_OPERAND,
    MAX_REGISTER,
    REGISTER_SLOTS,
    AddrMode,
    OpcodeDef,
    OpcodeTable,
)
from recop_asm.errors import (
    AsmError,
    AssemblerError,
    ErrorKind,
    SourceLocation,
    UndefinedLabelError,
)

logger = logging.getLogger(__name__)

# Unsigned decimal integer
_UNSIGNED = re.compile(r"[0-9]+")


# =============================================================================
# Statement Data Class
# =============================================================================

@dataclass
class Instruction:
    """
    A parsed and encoded instruction.

    Attributes:
        address: Instruction index in the program
        record: The encoded fields
        location: Source location of the mnemonic
        tokens: The token line the instruction was built from
    """
    address: int
    record: InstructionRecord
    location: SourceLocation
    tokens: tuple[Token, ...] = field(default_factory=tuple)

    @property
    def mnemonic(self) -> str:
        return self.tokens[0].value if self.tokens else ""


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Validates and encodes lexed ReCOP instructions.

    The parser is stateless between lines: the only shared data is the
    opcode table and the label table, both read-only. This is what allows a
    single pass once the lexer has collected every label.

    Usage:
        parser = Parser(opcodes)
        instructions = parser.parse(Lexer(source).tokenize())
    """

    def __init__(self, opcodes: OpcodeTable):
        self._opcodes = opcodes

    def parse(self, lexed: LexedSource) -> list[Instruction]:
        """
        Parse every instruction line in address order.

        Raises:
            AsmError: On the first rule violation, with the offending source
                line attached
        """
        instructions = []
        for address, tokens in enumerate(lexed.lines):
            try:
                record = self.parse_instruction(tokens, lexed.labels)
            except AssemblerError as e:
                if e.source_line is None and e.location is not None:
                    e.with_source_line(lexed.source_line(e.location.line))
                raise
            instructions.append(Instruction(
                address=address,
                record=record,
                location=tokens[0].location,
                tokens=tokens,
            ))

        logger.debug(f"Parsed {len(instructions)} instructions from {lexed.filename}")
        return instructions

    def parse_instruction(
        self,
        tokens: tuple[Token, ...] | list[Token],
        labels: dict[str, int] | None = None,
    ) -> InstructionRecord:
        """
        Validate and encode one instruction line.

        Args:
            tokens: Non-empty token list for one instruction
            labels: Label table used to resolve label references

        Returns:
            The encoded instruction

        Raises:
            AsmError: If any rule is violated
        """
        if not tokens:
            raise ValueError("cannot parse an empty instruction line")
        labels = labels if labels is not None else {}

        mnemonic = tokens[0]
        opcode = self._lookup_opcode(mnemonic)

        arguments = tokens[1:]
        if len(arguments) != opcode.args:
            raise AsmError(
                ErrorKind.ARGS_NUMBER,
                arguments[opcode.args] if len(arguments) > opcode.args else tokens[-1],
                message=(
                    f"'{mnemonic.value}' expects {opcode.args} "
                    f"argument{'s' if opcode.args != 1 else ''}, got {len(arguments)}"
                ),
            )

        operand_token = tokens[-1]
        mode = resolve_addressing_mode(operand_token, opcode, mnemonic)

        if mode is AddrMode.INHERENT:
            operand = 0
        elif operand_token.type is TokenType.LABEL:
            operand = self._resolve_label(operand_token, labels)
        else:
            operand = self._parse_unsigned(operand_token)

        register_tokens = tokens[1:-1]
        registers = self._parse_registers(register_tokens)

        if mode is AddrMode.REGISTER:
            operand = self._check_register(operand_token, operand)
            if opcode.args < MAX_ARGS:
                slot = opcode.operand_as_reg
                if slot is None:
                    slot = len(register_tokens)
                registers[slot] = operand
                operand = 0
        elif operand > MAX_OPERAND:
            raise AsmError(
                ErrorKind.VALUE_RANGE,
                operand_token,
                message=f"operand {operand} does not fit in 16 bits (0-{MAX_OPERAND})",
            )

        return InstructionRecord(
            addr_mode=mode,
            opcode=opcode.opcode,
            reg_z=registers[0],
            reg_x=registers[1],
            operand=operand,
        )

    # =========================================================================
    # Field Resolution
    # =========================================================================

    def _lookup_opcode(self, token: Token) -> OpcodeDef:
        if token.type is not TokenType.OPCODE:
            raise AsmError(ErrorKind.OPCODE_EXPECTED, token)

        try:
            return self._opcodes[token.value]
        except KeyError:
            similar = difflib.get_close_matches(token.value, list(self._opcodes), n=3)
            hint = None
            if similar:
                hint = "did you mean " + ", ".join(f"'{s}'" for s in similar) + "?"
            raise AsmError(ErrorKind.OPCODE_UNDEFINED, token, hint=hint) from None

    def _parse_registers(self, tokens: tuple[Token, ...] | list[Token]) -> list[int]:
        """Fill register slots from the tokens between mnemonic and operand."""
        registers = [0] * REGISTER_SLOTS
        for slot, token in enumerate(tokens):
            if token.type is not TokenType.REG:
                raise AsmError(ErrorKind.REG_EXPECTED, token)
            registers[slot] = self._check_register(token, self._parse_unsigned(token))
        return registers

    def _resolve_label(self, token: Token, labels: dict[str, int]) -> int:
        try:
            return labels[token.value]
        except KeyError:
            similar = difflib.get_close_matches(token.value, list(labels), n=3)
            raise UndefinedLabelError(token, similar_labels=similar) from None

    @staticmethod
    def _parse_unsigned(token: Token) -> int:
        if not _UNSIGNED.fullmatch(token.value):
            raise AsmError(ErrorKind.ARG_PARSE, token)
        return int(token.value)

    @staticmethod
    def _check_register(token: Token, value: int) -> int:
        if value > MAX_REGISTER:
            raise AsmError(
                ErrorKind.VALUE_RANGE,
                token,
                message=f"register r{value} does not exist (r0-r{MAX_REGISTER})",
            )
        return value


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(
    source: str,
    opcodes: OpcodeTable,
    filename: str = "<input>",
) -> list[Instruction]:
    """
    Lex and parse source text in one call.

    The lexer runs to completion first so that forward label references
    resolve.
    """
    lexed = Lexer(source, filename).tokenize()
    return Parser(opcodes).parse(lexed)
