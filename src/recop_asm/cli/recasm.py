"""
recasm - ReCOP Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the ReCOP assembler.

Usage Examples
--------------
Basic assembly (writes prog.hex):
    $ recasm prog.asm -i recop.toml

Memory initialization file for the FPGA:
    $ recasm prog.asm -i recop.toml --format mif

Both outputs plus a listing:
    $ recasm prog.asm -i recop.toml -o prog.hex -m rom.mif -l prog.lst

The instruction table can also come from the environment:
    $ export RECOP_INSTRUCTIONS=recop.toml
    $ recasm prog.asm
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from recop_asm import __version__
from recop_asm.assembler import DEFAULT_MIF_DEPTH, Assembler, format_symbols
from recop_asm.cli.errors import ExitCode, handle_cli_exception
from recop_asm.cpu import load_opcode_table


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

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
    help="Output file (default: input with .hex or .mif suffix)",
)
@click.option(
    "-f", "--format", "output_format",
    type=click.Choice(["hex", "mif"], case_sensitive=False),
    default="hex",
    show_default=True,
    help="Format of the primary output file",
)
@click.option(
    "-m", "--mif",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write a memory initialization file",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--depth",
    type=click.IntRange(min=1),
    default=DEFAULT_MIF_DEPTH,
    show_default=True,
    help="Memory depth in words for MIF output",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="recasm")
def main(
    input_file: Path,
    instructions: Path,
    output: Optional[Path],
    output_format: str,
    mif: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    depth: int,
    verbose: bool,
) -> None:
    """
    Assemble ReCOP source code.

    INPUT_FILE is the assembly source file to assemble.

    \b
    Examples:
        recasm prog.asm -i recop.toml              # Outputs prog.hex
        recasm prog.asm -i recop.toml -f mif       # Outputs prog.mif
        recasm prog.asm -i recop.toml -o out.hex -m rom.mif
    """
    setup_logging(verbose)

    output_format = output_format.lower()
    output_file = output if output is not None else input_file.with_suffix(f".{output_format}")

    if mif is not None and output_format == "mif":
        click.echo("Error: -m/--mif cannot be combined with --format mif", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    try:
        opcodes = load_opcode_table(instructions)
        if verbose:
            click.echo(f"Loaded {len(opcodes)} opcodes from {instructions}")

        asm = Assembler(opcodes, mif_depth=depth)

        if verbose:
            click.echo(f"Assembling {input_file}...")

        records = asm.assemble_file(input_file)

        # Render everything before touching the filesystem so that a
        # failing format leaves no output behind
        outputs = [(output_file, asm.get_mif() if output_format == "mif" else asm.get_hex())]
        if mif:
            outputs.append((mif, asm.get_mif()))
        if listing:
            outputs.append((listing, asm.get_listing()))
        if symbols:
            outputs.append((symbols, format_symbols(asm.get_symbols())))

        for path, content in outputs:
            path.write_text(content)
            if verbose:
                click.echo(f"Wrote {path}")

        if verbose:
            click.echo(f"Assembly complete: {len(records)} instructions")
            click.echo(f"Defined {len(asm.get_symbols())} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
