"""
lc3link - LC-3 Linker Command-Line Interface
============================================

Links assembled LC-3 modules. Each argument is a basename: the linker
reads <base>.obj and <base>.sym, plus <base>.dbgsym when it exists.

Usage Examples
--------------
Link two modules into linked.obj / linked.sym / linked.dbgsym:
    $ lc3link main lib

Choose the output basename:
    $ lc3link main lib -o program

Basenames may carry the .obj suffix:
    $ lc3link main.obj lib.obj
"""

import logging
from pathlib import Path
from typing import Optional

import click

from lc3_sdk import __version__
from lc3_sdk.cli.errors import handle_cli_exception
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.linker import Linker


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument("bases", nargs=-1, required=True)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output basename (default: 'linked', or $LC3_LINK_OUTPUT)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Show relocations as they are applied",
)
@click.version_option(version=__version__, prog_name="lc3link")
def main(bases: tuple[str, ...], output: Optional[Path], verbose: bool) -> None:
    """
    Link LC-3 object modules.

    BASES are module basenames; each needs <base>.obj and <base>.sym.

    \b
    Examples:
        lc3link main lib
        lc3link main lib -o program
    """
    config = ToolchainConfig.from_env()

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
    )

    output_base = output if output is not None else Path(config.link_output)

    try:
        linker = Linker(config)
        for base in bases:
            linker.add_file(base)

        result = linker.link()
        paths = linker.write_outputs(output_base)

        if verbose:
            for entry in result.relocations:
                click.echo(
                    f"  x{entry.patch_address:04X} <- x{entry.resolved_value:04X}"
                )
            for path in paths:
                click.echo(f"Wrote {path}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Link")

    click.echo(
        f"Linked {len(bases)} module(s) into "
        f"{output_base.with_name(output_base.name + config.object_suffix)}"
    )


if __name__ == "__main__":
    main()
