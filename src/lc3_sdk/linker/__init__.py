"""
LC-3 SDK Linker Package
=======================

Resolves external symbols across object modules and patches their
fill sites.

Usage:
    from lc3_sdk.linker import Linker

    linker = Linker()
    linker.add_file("main")
    linker.add_file("lib")
    linker.link()
    linker.write_outputs("linked")
"""

from lc3_sdk.linker.linker import LinkResult, Linker, link_files

__all__ = ["LinkResult", "Linker", "link_files"]
