"""
ReCOP Instruction Set Definition
================================

ReCOP-class processors have a small, configurable instruction set: the
numeric opcodes and the addressing modes each mnemonic accepts are not fixed
in silicon but supplied in an instruction table. This module defines the
data model of that table and loads it from TOML.

Instruction Word
----------------
Every instruction is a single 32-bit big-endian word:

    31    30 29        24 23    20 19    16 15                 0
    +-------+------------+--------+--------+--------------------+
    | mode  |   opcode   | reg_z  | reg_x  |      operand       |
    +-------+------------+--------+--------+--------------------+
       2          6          4        4              16

Addressing Modes
----------------
1. **INHERENT** (0): No operand (e.g. ``noop``)
2. **IMMEDIATE** (1): Literal constant or label address (``#5``, ``'loop``)
3. **DIRECT** (2): Memory address (``$100``)
4. **REGISTER** (3): Register index (``r2``)

Instruction Table Format
------------------------
One TOML table per mnemonic::

    [ldr]
    opcode = 2          # 0-63
    args = 2            # operand tokens after the mnemonic, 0-3
    imm = true          # optional mode flags: inh, imm, reg, dir
    reg = true
    dir = true
    operand_as_reg = 1  # optional register slot for register-mode operands
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Optional

from recop_asm.errors import OpcodeTableError


# =============================================================================
# Field Widths
# =============================================================================

ADDR_MODE_BITS = 2
OPCODE_BITS = 6
REGISTER_BITS = 4
OPERAND_BITS = 16

MAX_OPCODE = (1 << OPCODE_BITS) - 1        # 63
MAX_REGISTER = (1 << REGISTER_BITS) - 1    # 15
MAX_OPERAND = (1 << OPERAND_BITS) - 1      # 65535

# Register slots available to explicit register arguments (reg_z, reg_x)
REGISTER_SLOTS = 2

# Maximum operand tokens after the mnemonic: two registers plus one operand
MAX_ARGS = REGISTER_SLOTS + 1


# =============================================================================
# Addressing Mode Enumeration
# =============================================================================

class AddrMode(IntEnum):
    """
    ReCOP addressing modes.

    The integer values are the 2-bit encoding in the instruction word and
    must not change.
    """
    INHERENT = 0
    IMMEDIATE = 1
    DIRECT = 2
    REGISTER = 3

    def __str__(self) -> str:
        """Return human-readable name for error messages."""
        return self.name.lower()


# =============================================================================
# Opcode Definition
# =============================================================================

@dataclass(frozen=True)
class OpcodeDef:
    """
    Definition of a single mnemonic from the instruction table.

    Attributes:
        opcode: Numeric opcode (6 bits)
        args: Number of operand tokens expected after the mnemonic (0-3)
        supports_inherent: Mnemonic may be used without an operand
        supports_immediate: Trailing operand may be ``#value`` or ``'label``
        supports_register: Trailing operand may be ``rN``
        supports_direct: Trailing operand may be ``$address``
        operand_as_reg: In register mode with fewer than three arguments,
            store the trailing register into this slot (0 = reg_z,
            1 = reg_x) instead of the first free one
    """
    opcode: int
    args: int
    supports_inherent: bool = False
    supports_immediate: bool = False
    supports_register: bool = False
    supports_direct: bool = False
    operand_as_reg: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0 <= self.opcode <= MAX_OPCODE:
            raise ValueError(f"opcode {self.opcode} does not fit in {OPCODE_BITS} bits")
        if not 0 <= self.args <= MAX_ARGS:
            raise ValueError(f"args must be between 0 and {MAX_ARGS}, got {self.args}")
        if self.operand_as_reg is not None and not 0 <= self.operand_as_reg < REGISTER_SLOTS:
            raise ValueError(
                f"operand_as_reg must be a register slot 0-{REGISTER_SLOTS - 1}, "
                f"got {self.operand_as_reg}"
            )

    def supports(self, mode: AddrMode) -> bool:
        """Check whether the given addressing mode is enabled."""
        return {
            AddrMode.INHERENT: self.supports_inherent,
            AddrMode.IMMEDIATE: self.supports_immediate,
            AddrMode.DIRECT: self.supports_direct,
            AddrMode.REGISTER: self.supports_register,
        }[mode]

    @property
    def valid_modes(self) -> list[AddrMode]:
        """All addressing modes this opcode accepts, in encoding order."""
        return [mode for mode in AddrMode if self.supports(mode)]


# =============================================================================
# Opcode Table
# =============================================================================

# TOML key -> (OpcodeDef field, expected type)
_TABLE_KEYS: dict[str, tuple[str, type]] = {
    "opcode": ("opcode", int),
    "args": ("args", int),
    "inh": ("supports_inherent", bool),
    "imm": ("supports_immediate", bool),
    "reg": ("supports_register", bool),
    "dir": ("supports_direct", bool),
    "operand_as_reg": ("operand_as_reg", int),
}

_REQUIRED_KEYS = ("opcode", "args")


class OpcodeTable(Mapping[str, OpcodeDef]):
    """
    Immutable mapping of mnemonic to OpcodeDef.

    Mnemonics are stored lower-case so that lookups match the lower-cased
    source text. The table is built once and then shared read-only by the
    parser and the disassembler.

    Example:
        >>> table = OpcodeTable({"mov": OpcodeDef(opcode=1, args=2, supports_register=True)})
        >>> table["MOV"].opcode
        1
    """

    def __init__(self, definitions: Mapping[str, OpcodeDef] | None = None):
        entries: dict[str, OpcodeDef] = {}
        for mnemonic, definition in (definitions or {}).items():
            key = mnemonic.lower()
            if key in entries:
                raise OpcodeTableError("mnemonic defined more than once", mnemonic=key)
            entries[key] = definition
        self._entries = MappingProxyType(entries)

    def __getitem__(self, mnemonic: str) -> OpcodeDef:
        return self._entries[mnemonic.lower()]

    def __contains__(self, mnemonic: object) -> bool:
        return isinstance(mnemonic, str) and mnemonic.lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"OpcodeTable({len(self)} mnemonics)"

    def by_opcode(self) -> dict[int, str]:
        """
        Build a reverse lookup of opcode number to mnemonic.

        When several mnemonics share an opcode the first one defined wins.
        """
        reverse: dict[int, str] = {}
        for mnemonic, definition in self._entries.items():
            reverse.setdefault(definition.opcode, mnemonic)
        return reverse

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: Optional[str] = None) -> "OpcodeTable":
        """
        Build a table from parsed TOML data (or any equivalent mapping).

        Args:
            data: Mapping of mnemonic to a mapping of table keys
            source: Name of the configuration source, for error messages

        Raises:
            OpcodeTableError: If any entry is malformed
        """
        definitions = {}
        for mnemonic, entry in data.items():
            definitions[mnemonic] = _build_definition(mnemonic, entry, source)
        return cls(definitions)


def _build_definition(mnemonic: str, entry: Any, source: Optional[str]) -> OpcodeDef:
    """Validate one TOML table and turn it into an OpcodeDef."""
    if not isinstance(entry, Mapping):
        raise OpcodeTableError("expected a table of instruction keys", mnemonic, source)
    if not mnemonic or any(ch.isspace() for ch in mnemonic):
        raise OpcodeTableError("mnemonic must be a single non-empty word", mnemonic, source)

    for key in _REQUIRED_KEYS:
        if key not in entry:
            raise OpcodeTableError(f"missing required key '{key}'", mnemonic, source)

    fields: dict[str, Any] = {}
    for key, value in entry.items():
        if key not in _TABLE_KEYS:
            valid = ", ".join(_TABLE_KEYS)
            raise OpcodeTableError(f"unknown key '{key}' (valid keys: {valid})", mnemonic, source)
        field_name, expected = _TABLE_KEYS[key]
        # bool is a subclass of int, so reject it explicitly for integer keys
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise OpcodeTableError(
                f"'{key}' must be {'a boolean' if expected is bool else 'an integer'}",
                mnemonic, source,
            )
        fields[field_name] = value

    try:
        return OpcodeDef(**fields)
    except ValueError as e:
        raise OpcodeTableError(str(e), mnemonic, source) from e


def parse_opcode_table(text: str, source: Optional[str] = None) -> OpcodeTable:
    """
    Parse an instruction table from TOML text.

    Raises:
        OpcodeTableError: If the text is not valid TOML or an entry is malformed
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise OpcodeTableError(f"invalid TOML: {e}", source=source) from e
    return OpcodeTable.from_dict(data, source=source)


def load_opcode_table(path: str | Path) -> OpcodeTable:
    """
    Load an instruction table from a TOML file.

    Raises:
        FileNotFoundError: If the file does not exist
        OpcodeTableError: If the file content is invalid
    """
    path = Path(path)
    return parse_opcode_table(path.read_text(), source=str(path))
