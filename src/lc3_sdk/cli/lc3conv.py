"""
lc3conv - LC3Tools Object File Converter
========================================

Converts between the toolchain's text object files and the binary object
files loaded by the LC3Tools simulator.

Usage Examples
--------------
Text to LC3Tools (reads prog.obj and prog.dbgsym):
    $ lc3conv prog.obj                  # -> prog.lc3tools.obj

LC3Tools to text:
    $ lc3conv -v prog.lc3tools.obj      # -> prog.obj, prog.dbgsym
    $ lc3conv -v sim.obj                # -> sim.text.obj, sim.text.dbgsym

The LC3Tools file carries the source line of each word; the reverse
conversion turns those lines back into a debug symbol file. A binary
input that does not end in .lc3tools.obj is written to <stem>.text.obj so
it is never overwritten by its own conversion.
"""

from pathlib import Path

import click

from lc3_sdk import __version__
from lc3_sdk.cli.errors import handle_cli_exception
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.objfile import (
    ObjectModule,
    decode_lc3tools,
    encode_lc3tools,
    format_debug_symbols,
    format_object,
    parse_debug_symbols,
    parse_object,
    write_bytes,
    write_text,
)


REVERSE_FALLBACK_SUFFIX = ".text"


# =============================================================================
# Conversions
# =============================================================================

def to_lc3tools(input_file: Path, config: ToolchainConfig) -> Path:
    """
    Convert <base>.obj (and <base>.dbgsym, if present) to <base>.lc3tools.obj.

    Raises:
        click.BadParameter: Input does not end in the object suffix
        ObjectFormatError: Malformed input
    """
    if input_file.suffix != config.object_suffix:
        raise click.BadParameter(
            f"'{input_file}' is not a text object file ({config.object_suffix})"
        )

    base = input_file.with_suffix("")
    module = ObjectModule(
        blocks=parse_object(input_file.read_text(encoding="utf-8"), str(input_file)),
        name=base.name,
    )

    dbg_path = base.with_name(base.name + config.debug_symbol_suffix)
    if dbg_path.exists():
        module.debug_map.update(
            parse_debug_symbols(dbg_path.read_text(encoding="utf-8"), str(dbg_path))
        )

    out_path = base.with_name(base.name + config.lc3tools_suffix)
    return write_bytes(out_path, encode_lc3tools(module), config.atomic_writes)


def from_lc3tools(input_file: Path, config: ToolchainConfig) -> list[Path]:
    """
    Convert an LC3Tools object file to a text object and debug symbol file.

    Raises:
        click.BadParameter: Input does not end in the object suffix
        ObjectFormatError: Malformed input
    """
    name = input_file.name
    if name.endswith(config.lc3tools_suffix):
        base = input_file.with_name(name[:-len(config.lc3tools_suffix)])
    elif input_file.suffix == config.object_suffix:
        base = input_file.with_name(input_file.stem + REVERSE_FALLBACK_SUFFIX)
    else:
        raise click.BadParameter(
            f"'{input_file}' is not an object file ({config.object_suffix})"
        )

    module = decode_lc3tools(input_file.read_bytes(), str(input_file))

    return [
        write_text(
            base.with_name(base.name + config.object_suffix),
            format_object(module.blocks),
            config.atomic_writes,
        ),
        write_text(
            base.with_name(base.name + config.debug_symbol_suffix),
            format_debug_symbols(sorted(module.debug_map.items())),
            config.atomic_writes,
        ),
    ]


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-v", "--reverse",
    is_flag=True,
    help="Convert an LC3Tools object file back to a text object file",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="lc3conv")
def main(input_file: Path, reverse: bool, verbose: bool) -> None:
    """
    Convert between text object files and LC3Tools object files.

    INPUT_FILE is a text object file, or with -v an LC3Tools object file.

    \b
    Examples:
        lc3conv prog.obj
        lc3conv -v prog.lc3tools.obj
    """
    config = ToolchainConfig.from_env()

    try:
        if reverse:
            paths = from_lc3tools(input_file, config)
        else:
            paths = [to_lc3tools(input_file, config)]

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Conversion")

    for path in paths:
        click.echo(f"Wrote {path}")


if __name__ == "__main__":
    main()
