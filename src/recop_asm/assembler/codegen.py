"""
ReCOP Code Generator
====================

This module holds the final encoding stage of the assembler: the
InstructionRecord that packs resolved fields into a 32-bit word, and the
CodeGenerator that renders a parsed program in the supported output formats.

Instruction Word
----------------
```
Bits   Field      Width
-----  ---------  -----
31-30  addr_mode  2
29-24  opcode     6
23-20  reg_z      4
19-16  reg_x      4
15-0   operand    16
```
Words are stored big-endian, most significant field first.

Output Formats
--------------
- Hex dump: one 8-digit hex word per line
- MIF: FPGA memory initialization file (Quartus format)
- Listing: address, word and source line per instruction, then labels
- Symbols: label name and address per line
"""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from recop_asm.cpu import (
    ADDR_MODE_BITS,
    MAX_OPCODE,
    MAX_OPERAND,
    MAX_REGISTER,
    OPCODE_BITS,
    OPERAND_BITS,
    REGISTER_BITS,
    AddrMode,
)
from recop_asm.errors import OutputError

if TYPE_CHECKING:
    from recop_asm.assembler.parser import Instruction

logger = logging.getLogger(__name__)

# Bit offsets of each field in the instruction word
OPERAND_SHIFT = 0
REG_X_SHIFT = OPERAND_SHIFT + OPERAND_BITS           # 16
REG_Z_SHIFT = REG_X_SHIFT + REGISTER_BITS            # 20
OPCODE_SHIFT = REG_Z_SHIFT + REGISTER_BITS           # 24
ADDR_MODE_SHIFT = OPCODE_SHIFT + OPCODE_BITS         # 30

WORD_BITS = ADDR_MODE_SHIFT + ADDR_MODE_BITS         # 32
WORD_MASK = (1 << WORD_BITS) - 1

# Default memory depth of the MIF output, in words
DEFAULT_MIF_DEPTH = 32768


# =============================================================================
# Instruction Record
# =============================================================================

@dataclass(frozen=True)
class InstructionRecord:
    """
    One encoded ReCOP instruction.

    Every field is checked against its bit width on construction, so a
    record can always be packed without truncation.

    Attributes:
        addr_mode: Addressing mode (2 bits)
        opcode: Opcode number (6 bits)
        reg_z: First register slot (4 bits)
        reg_x: Second register slot (4 bits)
        operand: Operand value (16 bits, unsigned)
    """
    addr_mode: AddrMode
    opcode: int
    reg_z: int = 0
    reg_x: int = 0
    operand: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "addr_mode", AddrMode(self.addr_mode))
        _check_field("opcode", self.opcode, MAX_OPCODE)
        _check_field("reg_z", self.reg_z, MAX_REGISTER)
        _check_field("reg_x", self.reg_x, MAX_REGISTER)
        _check_field("operand", self.operand, MAX_OPERAND)

    def to_word(self) -> int:
        """Pack the fields into a 32-bit integer."""
        return (
            (int(self.addr_mode) << ADDR_MODE_SHIFT)
            | (self.opcode << OPCODE_SHIFT)
            | (self.reg_z << REG_Z_SHIFT)
            | (self.reg_x << REG_X_SHIFT)
            | (self.operand << OPERAND_SHIFT)
        )

    def to_bytes(self) -> bytes:
        """Pack the fields into 4 big-endian bytes."""
        return struct.pack(">I", self.to_word())

    @classmethod
    def from_word(cls, word: int) -> "InstructionRecord":
        """
        Unpack a 32-bit instruction word.

        Raises:
            ValueError: If word is negative or wider than 32 bits
        """
        if not 0 <= word <= WORD_MASK:
            raise ValueError(f"instruction word {word:#x} does not fit in {WORD_BITS} bits")
        return cls(
            addr_mode=AddrMode(word >> ADDR_MODE_SHIFT),
            opcode=(word >> OPCODE_SHIFT) & MAX_OPCODE,
            reg_z=(word >> REG_Z_SHIFT) & MAX_REGISTER,
            reg_x=(word >> REG_X_SHIFT) & MAX_REGISTER,
            operand=word & MAX_OPERAND,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "InstructionRecord":
        """Unpack 4 big-endian bytes."""
        if len(data) != 4:
            raise ValueError(f"expected 4 bytes, got {len(data)}")
        (word,) = struct.unpack(">I", data)
        return cls.from_word(word)

    def __str__(self) -> str:
        return f"{self.to_word():08x}"


def _check_field(name: str, value: int, maximum: int) -> None:
    if not 0 <= value <= maximum:
        raise ValueError(f"{name} value {value} out of range 0-{maximum}")


# =============================================================================
# Output Formatting
# =============================================================================

def format_hex(records: Iterable[InstructionRecord]) -> str:
    """Render records as a hex dump, one 8-digit word per line."""
    return "".join(f"{record.to_word():08x}\n" for record in records)


def format_mif(records: Sequence[InstructionRecord], depth: int = DEFAULT_MIF_DEPTH) -> str:
    """
    Render records as a memory initialization file.

    Raises:
        OutputError: If the program does not fit in depth words
    """
    if len(records) > depth:
        raise OutputError(
            f"program has {len(records)} instructions but MIF depth is {depth} words"
        )

    lines = [
        f"DEPTH = {depth};",
        "WIDTH = 32;",
        "ADDRESS_RADIX = HEX;",
        "DATA_RADIX = HEX;",
        "CONTENT BEGIN",
    ]
    for address, record in enumerate(records):
        lines.append(f"{address:04x}: {record.to_word():08x};")
    lines.append("END;")
    return "\n".join(lines) + "\n"


def format_symbols(labels: dict[str, int]) -> str:
    """Render the label table as 'name address' lines sorted by name."""
    lines = ["# Symbol table", "# Generated by recasm"]
    for name, address in sorted(labels.items()):
        lines.append(f"{name} {address:04x}")
    return "\n".join(lines) + "\n"


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Holds an assembled program and renders it in every output format.

    Usage:
        codegen = CodeGenerator()
        codegen.generate(instructions, labels)
        codegen.write_hex("prog.hex")
        codegen.write_mif("prog.mif")
    """

    def __init__(self, mif_depth: int = DEFAULT_MIF_DEPTH):
        self.mif_depth = mif_depth
        self._instructions: list["Instruction"] = []
        self._labels: dict[str, int] = {}
        self._source_lines: tuple[str, ...] = ()

    def generate(
        self,
        instructions: Sequence["Instruction"],
        labels: Optional[dict[str, int]] = None,
        source_lines: Sequence[str] = (),
    ) -> list[InstructionRecord]:
        """
        Take ownership of a parsed program.

        Args:
            instructions: Parsed instructions in address order
            labels: Label table from the lexer
            source_lines: Original source lines, for the listing

        Returns:
            The instruction records in address order
        """
        for expected, inst in enumerate(instructions):
            if inst.address != expected:
                raise ValueError(
                    f"instruction at index {expected} has address {inst.address}; "
                    f"program must be gap-free from 0"
                )
        self._instructions = list(instructions)
        self._labels = dict(labels or {})
        self._source_lines = tuple(source_lines)
        return self.get_records()

    # =========================================================================
    # Accessors
    # =========================================================================

    def get_records(self) -> list[InstructionRecord]:
        """Return the instruction records in address order."""
        return [inst.record for inst in self._instructions]

    def get_words(self) -> list[int]:
        """Return the packed 32-bit instruction words."""
        return [inst.record.to_word() for inst in self._instructions]

    def get_code(self) -> bytes:
        """Return the program as raw big-endian bytes."""
        return b"".join(inst.record.to_bytes() for inst in self._instructions)

    def get_symbols(self) -> dict[str, int]:
        """Return a dictionary of label names to addresses."""
        return dict(self._labels)

    def get_hex(self) -> str:
        return format_hex(self.get_records())

    def get_mif(self) -> str:
        return format_mif(self.get_records(), self.mif_depth)

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            The listing showing addresses, words, and source lines.
        """
        lines = []
        lines.append("ReCOP Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr  Word      Line  Source")
        lines.append("-" * 60)
        for inst in self._instructions:
            line = inst.location.line
            source = ""
            if 1 <= line <= len(self._source_lines):
                source = self._source_lines[line - 1].strip()
            lines.append(f"{inst.address:04x}  {inst.record.to_word():08x}  {line:4d}  {source}")
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for name, address in sorted(self._labels.items()):
            lines.append(f"{name:20s} = {address:04x}")
        return "\n".join(lines) + "\n"

    # =========================================================================
    # Output File Writing
    # =========================================================================

    def write_hex(self, filepath: str | Path) -> None:
        """Write the hex dump file."""
        self._write(filepath, self.get_hex())

    def write_mif(self, filepath: str | Path) -> None:
        """Write the memory initialization file."""
        self._write(filepath, self.get_mif())

    def write_listing(self, filepath: str | Path) -> None:
        """Write the assembly listing file."""
        self._write(filepath, self.get_listing())

    def write_symbols(self, filepath: str | Path) -> None:
        """Write the symbol table file."""
        self._write(filepath, format_symbols(self._labels))

    def _write(self, filepath: str | Path, content: str) -> None:
        with open(filepath, "w") as f:
            f.write(content)
        logger.debug(f"Wrote {filepath}")
