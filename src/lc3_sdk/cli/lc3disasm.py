"""
lc3disasm - LC-3 Disassembler Command-Line Interface
====================================================

Disassembles a text object file into assembly source that lc3asm
accepts.

Usage Examples
--------------
Disassemble to prog.dis.asm:
    $ lc3disasm prog.obj

Write data words as hex:
    $ lc3disasm prog.obj -x

Print to stdout instead:
    $ lc3disasm prog.obj --stdout
"""

from pathlib import Path
from typing import Optional

import click

from lc3_sdk import __version__
from lc3_sdk.cli.errors import handle_cli_exception
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.disassembler import LC3Disassembler
from lc3_sdk.objfile import ObjectModule, parse_object, write_text


def disassembly_path(obj_path: Path, config: ToolchainConfig) -> Path:
    """prog.obj -> prog.dis.asm"""
    base = obj_path.with_suffix("") if obj_path.suffix == config.object_suffix else obj_path
    return base.with_name(base.name + config.disassembly_suffix)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: <base>.dis.asm)",
)
@click.option(
    "-x", "--hex", "hex_fills",
    is_flag=True,
    help="Write undecodable words as .FILL xNNNN instead of decimal",
)
@click.option(
    "--stdout",
    "to_stdout",
    is_flag=True,
    help="Print the listing instead of writing a file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="lc3disasm")
def main(
    input_file: Path,
    output: Optional[Path],
    hex_fills: bool,
    to_stdout: bool,
    verbose: bool,
) -> None:
    """
    Disassemble an LC-3 text object file.

    INPUT_FILE is a text object file (.obj) as written by lc3asm or lc3link.

    \b
    Examples:
        lc3disasm prog.obj
        lc3disasm prog.obj -x -o listing.asm
    """
    config = ToolchainConfig.from_env()

    try:
        blocks = parse_object(input_file.read_text(encoding="utf-8"), str(input_file))
        module = ObjectModule(blocks=blocks, name=input_file.stem)

        listing = LC3Disassembler(hex_fills=hex_fills).disassemble_module(module)

        if to_stdout:
            click.echo(listing, nl=False)
            return

        out_path = output or disassembly_path(input_file, config)
        write_text(out_path, listing, config.atomic_writes)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Disassembly")

    if verbose:
        click.echo(f"Disassembled {module.size} word(s) in {len(blocks)} block(s)")
    click.echo(f"Wrote {out_path}")


if __name__ == "__main__":
    main()
