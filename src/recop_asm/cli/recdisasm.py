"""
recdisasm - ReCOP Disassembler Command-Line Interface
=====================================================

Disassembles a hex dump produced by recasm back into assembly source.

Usage Examples
--------------
Disassemble to stdout:
    $ recdisasm prog.hex -i recop.toml

Source only, ready to reassemble:
    $ recdisasm prog.hex -i recop.toml --no-words -o prog.asm
"""

import logging
from pathlib import Path
from typing import Optional

import click

from recop_asm import __version__
from recop_asm.cli.errors import handle_cli_exception
from recop_asm.cpu import load_opcode_table
from recop_asm.disassembler import RecopDisassembler, parse_hex_dump


@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-i", "--instructions",
    required=True,
    envvar="RECOP_INSTRUCTIONS",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Instruction table (TOML). Also read from $RECOP_INSTRUCTIONS",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "--words/--no-words",
    default=True,
    help="Show address and raw word before each instruction (default: enabled)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="recdisasm")
def main(
    input_file: Path,
    instructions: Path,
    output: Optional[Path],
    words: bool,
    verbose: bool,
) -> None:
    """
    Disassemble a ReCOP hex dump.

    INPUT_FILE holds one 8-digit hex instruction word per line.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        opcodes = load_opcode_table(instructions)
        try:
            program = parse_hex_dump(input_file.read_text())
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="INPUT_FILE") from e

        disasm = RecopDisassembler(opcodes)
        lines = [
            str(instr) if words else instr.text
            for instr in disasm.disassemble(program)
        ]
        text = "\n".join(lines) + ("\n" if lines else "")

        if output:
            output.write_text(text)
            if verbose:
                click.echo(f"Wrote {len(lines)} instructions to {output}")
        else:
            click.echo(text, nl=False)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Disassembly")


if __name__ == "__main__":
    main()
