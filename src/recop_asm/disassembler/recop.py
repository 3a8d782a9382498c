"""
ReCOP Disassembler
==================

Decodes 32-bit ReCOP instruction words back into assembly text. This is the
inverse of the assembler's encoding and uses the same opcode table, so the
output can be fed back to the assembler.

Register slots are mapped back the way the parser fills them: the explicit
register arguments occupy reg_z then reg_x, and in register mode the
trailing register comes from the ``operand_as_reg`` slot or, without one,
the slot after the explicit registers.

Usage:
    disasm = RecopDisassembler(load_opcode_table("recop.toml"))
    for instr in disasm.disassemble(words):
        print(instr)
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from recop_asm.assembler.codegen import InstructionRecord
from recop_asm.cpu import MAX_ARGS, AddrMode, OpcodeDef, OpcodeTable

logger = logging.getLogger(__name__)


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    A single decoded ReCOP instruction.

    Attributes:
        address: Instruction index
        word: The raw 32-bit word
        record: The unpacked fields
        mnemonic: Mnemonic from the opcode table, or ".word" if unknown
        operands: Operand tokens in source syntax (e.g. ["r1", "#5"])
        comment: Optional note (e.g. "unknown opcode")
    """
    address: int
    word: int
    record: InstructionRecord
    mnemonic: str
    operands: list[str]
    comment: str = ""

    @property
    def text(self) -> str:
        """The instruction as assembly source."""
        return " ".join([self.mnemonic, *self.operands])

    def __str__(self) -> str:
        line = f"{self.address:04x}: {self.word:08x}  {self.text}"
        if self.comment:
            line = f"{line:<40} ; {self.comment}"
        return line


# =============================================================================
# Disassembler
# =============================================================================

class RecopDisassembler:
    """
    Disassembler for ReCOP instruction words.

    Attributes:
        _opcodes: The instruction table
        _reverse_table: Maps opcode number to mnemonic
        _labels: Optional address -> label name map for immediate operands
    """

    def __init__(self, opcodes: OpcodeTable, labels: Optional[dict[int, str]] = None):
        self._opcodes = opcodes
        self._reverse_table = opcodes.by_opcode()
        self._labels = labels or {}

    def disassemble_one(self, word: int, address: int = 0) -> DisassembledInstruction:
        """
        Decode a single instruction word.

        Raises:
            ValueError: If word does not fit in 32 bits
        """
        record = InstructionRecord.from_word(word)
        mnemonic = self._reverse_table.get(record.opcode)

        if mnemonic is None:
            return DisassembledInstruction(
                address=address,
                word=word,
                record=record,
                mnemonic=".word",
                operands=[f"0x{word:08x}"],
                comment="unknown opcode",
            )

        definition = self._opcodes[mnemonic]
        comment = ""
        if not definition.supports(record.addr_mode):
            comment = f"{mnemonic} does not support {str(record.addr_mode)} mode"

        return DisassembledInstruction(
            address=address,
            word=word,
            record=record,
            mnemonic=mnemonic,
            operands=self._format_operands(record, definition),
            comment=comment,
        )

    def disassemble(self, words: Iterable[int], start_address: int = 0) -> list[DisassembledInstruction]:
        """Decode a sequence of words starting at start_address."""
        result = [
            self.disassemble_one(word, address)
            for address, word in enumerate(words, start=start_address)
        ]
        logger.debug(f"Disassembled {len(result)} instructions")
        return result

    def _format_operands(self, record: InstructionRecord, definition: OpcodeDef) -> list[str]:
        """Rebuild the operand tokens for one instruction."""
        if definition.args == 0:
            return []

        slots = [record.reg_z, record.reg_x]
        registers = [f"r{value}" for value in slots[:definition.args - 1]]

        mode = record.addr_mode
        if mode is AddrMode.REGISTER:
            if definition.args < MAX_ARGS:
                slot = definition.operand_as_reg
                if slot is None:
                    slot = definition.args - 1
                trailing = f"r{slots[slot]}"
            else:
                trailing = f"r{record.operand}"
        elif mode is AddrMode.IMMEDIATE:
            label = self._labels.get(record.operand)
            trailing = f"'{label}" if label else f"#{record.operand}"
        elif mode is AddrMode.DIRECT:
            trailing = f"${record.operand}"
        else:
            # Inherent mode with declared arguments cannot be assembled;
            # show the raw operand so nothing is hidden.
            trailing = f"#{record.operand}"

        return registers + [trailing]


# =============================================================================
# Input Parsing
# =============================================================================

def parse_hex_dump(text: str) -> list[int]:
    """
    Read a hex dump (one word per line) back into instruction words.

    Blank lines and ``;``/``#`` comment lines are ignored.

    Raises:
        ValueError: If a line is not a 32-bit hex word
    """
    words = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line[0] in ";#":
            continue
        try:
            word = int(line, 16)
        except ValueError:
            raise ValueError(f"line {line_number}: '{line}' is not a hex word") from None
        if not 0 <= word <= 0xFFFFFFFF:
            raise ValueError(f"line {line_number}: '{line}' does not fit in 32 bits")
        words.append(word)
    return words
