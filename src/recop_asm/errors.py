"""
ReCOP Assembler Error Hierarchy
===============================

This module defines the exception hierarchy for the ReCOP toolchain.
All exceptions inherit from RecopError, allowing callers to catch every
toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
RecopError (base)
├── AssemblerError (assembler-related, carries source location)
│   └── AsmError - a rule violation of a specific ErrorKind at a token
│       ├── AddressingModeError - opcode does not support the inferred mode
│       ├── UndefinedLabelError - reference to a label never declared
│       └── DuplicateLabelError - label declared more than once
├── OpcodeTableError - invalid opcode table configuration
└── OutputError - program cannot be written in the requested format

Assembly is fail-fast: the first AsmError raised aborts the whole run.
There is no warning tier.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from recop_asm.assembler.lexer import Token


# =============================================================================
# Base Exception Class
# =============================================================================

class RecopError(Exception):
    """
    Base exception for all ReCOP toolchain errors.

        try:
            assembler.assemble_file("program.asm")
        except RecopError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Error Kinds
# =============================================================================

class ErrorKind(Enum):
    """
    Every rule violation the lexer and parser can detect.

    The value is the default human-readable message for the kind.
    """
    OPCODE_EXPECTED = "expected an opcode at the start of the instruction"
    OPCODE_UNDEFINED = "opcode is not defined in the instruction table"
    REG_EXPECTED = "expected a register argument"
    OPERAND_EXPECTED = "expected an operand"
    ARGS_NUMBER = "wrong number of arguments"
    IMM_INVALID = "opcode does not support immediate addressing"
    REG_INVALID = "opcode does not support register addressing"
    DIR_INVALID = "opcode does not support direct addressing"
    INH_INVALID = "opcode does not support inherent addressing"
    ARG_PARSE = "argument could not be parsed as an unsigned integer"
    VALUE_RANGE = "value does not fit in its instruction field"
    UNDEFINED_LABEL = "undefined label"
    DUPLICATE_LABEL = "duplicate label"
    LABEL_SYNTAX = "label declaration has no name"

    def __str__(self) -> str:
        # OPCODE_EXPECTED -> OpcodeExpected
        return "".join(part.capitalize() for part in self.name.split("_"))


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(RecopError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.asm:3:5: error: opcode is not defined in the instruction table: 'foo'
                foo r1 r2
                ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def with_source_line(self, source_line: str) -> "AssemblerError":
        """Attach the offending source text and rebuild the message."""
        self.source_line = source_line
        self.args = (self._format_message(),)
        return self


class AsmError(AssemblerError):
    """
    A rule violation detected while lexing or parsing.

    Carries the ErrorKind and the offending Token so that callers can
    report the exact line and column, or inspect the token content.

    Attributes:
        kind: Which rule was violated
        token: The token that violated it
    """

    def __init__(
        self,
        kind: ErrorKind,
        token: "Token",
        message: Optional[str] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.kind = kind
        self.token = token
        if message is None:
            message = f"{kind.value}: '{token.text}'"
        super().__init__(
            message,
            location=token.location,
            hint=hint,
            source_line=source_line,
        )

    @property
    def line(self) -> int:
        """Source line number of the offending token."""
        return self.token.line


class AddressingModeError(AsmError):
    """
    The trailing operand selects an addressing mode the opcode lacks.

    Example:
        jmp r3      ; error if jmp only enables immediate mode
    """

    MODE_KINDS = {
        "inherent": ErrorKind.INH_INVALID,
        "immediate": ErrorKind.IMM_INVALID,
        "direct": ErrorKind.DIR_INVALID,
        "register": ErrorKind.REG_INVALID,
    }

    def __init__(
        self,
        mnemonic: str,
        mode: str,
        token: "Token",
        valid_modes: Optional[list[str]] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        self.mode = mode
        self.valid_modes = valid_modes or []

        if self.valid_modes:
            hint = f"{mnemonic} supports: {', '.join(self.valid_modes)}"
        else:
            hint = f"{mnemonic} has no addressing modes enabled"

        super().__init__(
            self.MODE_KINDS[mode],
            token,
            message=f"'{mnemonic}' does not support {mode} addressing mode",
            hint=hint,
            source_line=source_line,
        )


class UndefinedLabelError(AsmError):
    """
    Reference to a label that is not declared anywhere in the source.

    Suggests similarly-named labels to help catch typos.
    """

    def __init__(
        self,
        token: "Token",
        similar_labels: Optional[list[str]] = None,
        source_line: Optional[str] = None,
    ):
        self.label = token.value
        self.similar_labels = similar_labels or []

        hint = None
        if self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            ErrorKind.UNDEFINED_LABEL,
            token,
            message=f"undefined label '{token.value}'",
            hint=hint,
            source_line=source_line,
        )


class DuplicateLabelError(AsmError):
    """
    Label declared more than once.

    Labels are bound to their declaration position and never redefined.
    """

    def __init__(
        self,
        token: "Token",
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = token.value
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{token.value}' was first declared at {original_location}"

        super().__init__(
            ErrorKind.DUPLICATE_LABEL,
            token,
            message=f"duplicate label '{token.value}'",
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# Configuration and Output Exceptions
# =============================================================================

class OpcodeTableError(RecopError):
    """
    Invalid opcode table configuration.

    Raised when loading an instruction table that:
    - Is not valid TOML
    - Misses a required key (opcode, args)
    - Uses an unknown key or a value of the wrong type
    - Holds a value that does not fit its instruction field
    """

    def __init__(self, message: str, mnemonic: Optional[str] = None,
                 source: Optional[str] = None):
        self.mnemonic = mnemonic
        self.source = source
        prefix = f"{source}: " if source else ""
        if mnemonic is not None:
            prefix += f"[{mnemonic}] "
        super().__init__(f"{prefix}{message}")


class OutputError(RecopError):
    """
    The assembled program cannot be written in the requested format.

    For example, a program longer than the memory depth of a MIF file.
    """
    pass
