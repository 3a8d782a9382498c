"""
ReCOP Assembly Language Lexer
=============================

This module implements the first stage of the assembler. It splits source
text into one token list per instruction line and builds the label table.
It has no knowledge of opcode semantics.

Token Types
-----------
A token is classified by its first character:

| Sigil | Type   | Example  | Value  |
|-------|--------|----------|--------|
| r     | REG    | r12      | "12"   |
| #     | IMM    | #40      | "40"   |
| $     | DIR    | $1000    | "1000" |
| '     | LABEL  | 'loop    | "loop" |
| ;     | comment, discards the rest of the line |
| other | OPCODE | add      | "add"  |

Any other token ending in ``:`` declares a label. Declarations are removed
from the token stream and bound to the address of the next instruction, so
``loop: add r1 r2`` and a ``loop:`` line followed by ``add r1 r2`` are
equivalent.

Addresses
---------
Blank lines, comment-only lines and label-only lines produce no instruction
and do not advance the address counter. The index of a token line in the
result is the address of the instruction it encodes.

Example
-------
>>> from recop_asm.assembler.lexer import Lexer
>>> lexed = Lexer("start: ldr r1 #5  ; load\\n  jmp 'start").tokenize()
>>> lexed.labels["start"]
0
>>> [t.value for t in lexed.lines[1]]
['jmp', 'start']
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType

from recop_asm.errors import (
    AsmError,
    DuplicateLabelError,
    ErrorKind,
    SourceLocation,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for ReCOP assembly language."""
    LABEL = auto()   # 'name, label reference (resolves to an address)
    OPCODE = auto()  # mnemonic, or any unprefixed word
    REG = auto()     # rN, register index
    IMM = auto()     # #N, immediate value
    DIR = auto()     # $N, direct memory address


# First character -> token type
SIGILS = {
    "r": TokenType.REG,
    "#": TokenType.IMM,
    "$": TokenType.DIR,
    "'": TokenType.LABEL,
}

COMMENT_CHAR = ";"
LABEL_SUFFIX = ":"

# Runs of spaces/tabs separate tokens
_WORD = re.compile(r"\S+")


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from the source code.

    Attributes:
        type: The TokenType classification
        value: Token content with its sigil stripped ("12" for "r12")
        line: Line number in source (1-indexed)
        column: Column of the token's first character (1-indexed)
        filename: Name of the source file
        text: The token exactly as written (lower-cased)
    """
    type: TokenType
    value: str
    line: int
    column: int
    filename: str = "<input>"
    text: str = ""

    def __post_init__(self) -> None:
        if not self.text:
            object.__setattr__(self, "text", self._default_text())

    def _default_text(self) -> str:
        for sigil, token_type in SIGILS.items():
            if token_type is self.type:
                return f"{sigil}{self.value}"
        return self.value

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Lexer Output
# =============================================================================

@dataclass(frozen=True)
class LexedSource:
    """
    Immutable result of lexing, handed to the parser.

    Attributes:
        lines: One non-empty token tuple per instruction, in address order
        labels: Label name -> instruction address
        source_lines: Original (not lower-cased) physical source lines
        filename: Name of the source file
    """
    lines: tuple[tuple[Token, ...], ...]
    labels: Mapping[str, int]
    source_lines: tuple[str, ...] = ()
    filename: str = "<input>"

    def source_line(self, line: int) -> str:
        """Original text of a physical source line (1-indexed)."""
        if 1 <= line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return ""

    def __len__(self) -> int:
        return len(self.lines)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes ReCOP assembly source code.

    Usage:
        lexer = Lexer(source_text, filename)
        lexed = lexer.tokenize()
        for tokens in lexed.lines:
            ...

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        # Only \n ends a physical line; \f, \v and Unicode separators do not
        self._source_lines = tuple(line.removesuffix("\r") for line in source.split("\n"))
        self._labels: dict[str, int] = {}
        self._label_locations: dict[str, SourceLocation] = {}
        self._lines: list[tuple[Token, ...]] = []

    def tokenize(self) -> LexedSource:
        """
        Tokenize the whole source and collect label addresses.

        Returns:
            LexedSource with every instruction line and the complete label table

        Raises:
            AsmError: On an empty label declaration (LabelSyntax)
            DuplicateLabelError: If a label is declared twice
        """
        self._labels.clear()
        self._label_locations.clear()
        self._lines.clear()

        for index, text in enumerate(self._source_lines):
            tokens = self._tokenize_line(text.lower(), index + 1)
            if tokens:
                self._lines.append(tuple(tokens))

        logger.debug(
            f"Lexed {self.filename}: {len(self._lines)} instructions, "
            f"{len(self._labels)} labels"
        )

        return LexedSource(
            lines=tuple(self._lines),
            labels=MappingProxyType(dict(self._labels)),
            source_lines=self._source_lines,
            filename=self.filename,
        )

    # =========================================================================
    # Line Scanning
    # =========================================================================

    def _tokenize_line(self, text: str, line_number: int) -> list[Token]:
        """Tokenize one physical line, recording any label declarations."""
        tokens: list[Token] = []

        for match in _WORD.finditer(text):
            word = match.group()
            column = match.start() + 1
            first = word[0]

            if first == COMMENT_CHAR:
                break

            if first in SIGILS:
                tokens.append(self._make_token(SIGILS[first], word[1:], word, line_number, column))
            elif word.endswith(LABEL_SUFFIX):
                self._declare_label(word, line_number, column)
            else:
                tokens.append(self._make_token(TokenType.OPCODE, word, word, line_number, column))

        return tokens

    def _declare_label(self, word: str, line_number: int, column: int) -> None:
        """Bind a label to the address of the next instruction."""
        name = word[:-len(LABEL_SUFFIX)]
        token = self._make_token(TokenType.LABEL, name, word, line_number, column)

        if not name:
            raise AsmError(
                ErrorKind.LABEL_SYNTAX,
                token,
                hint="write the label name before the colon, e.g. 'loop:'",
                source_line=self._source_line(line_number),
            )

        if name in self._labels:
            raise DuplicateLabelError(
                token,
                original_location=self._label_locations[name],
                source_line=self._source_line(line_number),
            )

        # The current line is not committed yet, so this is the address the
        # next emitted instruction will occupy.
        self._labels[name] = len(self._lines)
        self._label_locations[name] = token.location

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str,
        text: str,
        line: int,
        column: int,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=line,
            column=column,
            filename=self.filename,
            text=text,
        )

    def _source_line(self, line: int) -> str:
        if 1 <= line <= len(self._source_lines):
            return self._source_lines[line - 1]
        return ""


def tokenize(source: str, filename: str = "<input>") -> LexedSource:
    """Convenience function: lex source text in one call."""
    return Lexer(source, filename).tokenize()
