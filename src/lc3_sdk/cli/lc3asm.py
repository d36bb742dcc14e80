"""
lc3asm - LC-3 Assembler Command-Line Interface
==============================================

This module implements the command-line interface for the LC-3 assembler.
It assembles one source file into a text object file, a symbol file and a
debug symbol file, and keeps a log of the run beside them.

Usage Examples
--------------
Basic assembly:
    $ lc3asm prog.asm

Choose the output basename:
    $ lc3asm prog.asm -o build/prog

Verbose console output:
    $ lc3asm prog.asm -v

Output Files
------------
For 'prog.asm':
    prog.obj      text object file
    prog.sym      symbol file for the linker
    prog.dbgsym   address to source line map
    prog.debug    run log; its last line is the success marker

The object, symbol and debug symbol files are only written when assembly
succeeds. The run log is always written and ends without the success
marker when assembly fails.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from lc3_sdk import __version__
from lc3_sdk.assembler import Assembler
from lc3_sdk.cli.errors import handle_cli_exception
from lc3_sdk.config import ToolchainConfig


logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "lc3_sdk"


# =============================================================================
# Run Log
# =============================================================================

def open_run_log(path: Path, level: int) -> logging.FileHandler:
    """
    Attach a file handler for the run log to the package logger.

    Levels above INFO are capped at INFO so the success marker is always
    recorded.
    """
    handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    handler.setLevel(min(level, logging.INFO))
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.addHandler(handler)
    return handler


def close_run_log(handler: logging.FileHandler) -> None:
    logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)
    handler.close()


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output basename (default: input file without its extension)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="lc3asm")
def main(
    input_file: Path,
    output: Optional[Path],
    verbose: bool,
) -> None:
    """
    Assemble an LC-3 source file.

    INPUT_FILE is the assembly source (.asm). Writes <base>.obj, <base>.sym,
    <base>.dbgsym and the <base>.debug run log.

    \b
    Examples:
        lc3asm prog.asm
        lc3asm prog.asm -o build/prog
    """
    config = ToolchainConfig.from_env()

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    base = output if output is not None else input_file.with_suffix("")
    log_path = base.with_name(base.name + config.log_suffix)

    try:
        handler = open_run_log(log_path, config.log_level)
    except OSError as e:
        handle_cli_exception(e, verbose=verbose)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    previous_level = package_logger.level
    package_logger.setLevel(logging.DEBUG if verbose else handler.level)

    try:
        assembler = Assembler(config)
        module = assembler.assemble_file(input_file)
        paths = assembler.write_outputs(base)

        logger.info(config.success_marker)

    except Exception as e:
        logger.error(str(e))
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")

    finally:
        close_run_log(handler)
        package_logger.setLevel(previous_level)

    if verbose:
        click.echo(f"Assembled {input_file}: {module.size} word(s)")
        for path in paths:
            click.echo(f"  {path}")

    click.echo(config.success_marker)


if __name__ == "__main__":
    main()
