"""
LC-3 SDK Command-Line Interface Tools
=====================================

This package contains the command-line tools for the LC-3 toolchain:

- lc3asm: Assembler (source -> .obj / .sym / .dbgsym)
- lc3link: Linker (several modules -> one linked module)
- lc3disasm: Disassembler (.obj -> assembly source)
- lc3conv: LC3Tools object file converter

All tools are installed as console scripts and use click. Errors are
reported through lc3_sdk.cli.errors with consistent exit codes.
"""

__all__ = ["lc3asm", "lc3link", "lc3disasm", "lc3conv"]
