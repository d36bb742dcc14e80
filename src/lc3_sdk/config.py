"""
LC-3 SDK - Toolchain Configuration
==================================

Settings shared by the assembler, linker, disassembler and transcoder
command-line tools. Configuration can come from:
- Default values (defined here)
- Environment variables (ToolchainConfig.from_env)
- Command-line options (applied by the CLI on top of the above)

Output files all share the source basename; only the suffix differs:

    prog.asm  ->  prog.obj  prog.sym  prog.dbgsym  prog.debug
"""

from dataclasses import dataclass
import logging
import os


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ToolchainConfig:
    """
    Configuration for an LC-3 toolchain run.

    Attributes:
        object_suffix: Suffix of text object files (default: ".obj")
        symbol_suffix: Suffix of symbol files (default: ".sym")
        debug_symbol_suffix: Suffix of debug symbol files (default: ".dbgsym")
        log_suffix: Suffix of the assembler's run log (default: ".debug")
        disassembly_suffix: Suffix of disassembler output (default: ".dis.asm")
        lc3tools_suffix: Suffix of LC3Tools binary objects (default: ".lc3tools.obj")
        success_marker: Final line logged by a successful assembly
        atomic_writes: Write outputs through a temp file and rename
        log_level: Level for the assembler's run log
        link_output: Basename of the linker's output files
    """

    # ═══════════════════════════════════════════════════════════════════════════
    # FILE NAMING
    # ═══════════════════════════════════════════════════════════════════════════

    object_suffix: str = ".obj"
    symbol_suffix: str = ".sym"
    debug_symbol_suffix: str = ".dbgsym"
    log_suffix: str = ".debug"
    disassembly_suffix: str = ".dis.asm"
    lc3tools_suffix: str = ".lc3tools.obj"

    # ═══════════════════════════════════════════════════════════════════════════
    # OUTPUT BEHAVIOUR
    # ═══════════════════════════════════════════════════════════════════════════

    success_marker: str = "Success!!"
    atomic_writes: bool = True  # temp file + os.replace
    log_level: int = logging.DEBUG
    link_output: str = "linked"

    # ═══════════════════════════════════════════════════════════════════════════
    # FACTORY METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @classmethod
    def from_env(cls) -> "ToolchainConfig":
        """
        Create ToolchainConfig from environment variables.

        Environment variables (all optional):
            LC3_ATOMIC_WRITES: "0"/"false"/"no"/"off" disables atomic writes
            LC3_LOG_LEVEL: Level name for the run log (e.g. "INFO")
            LC3_LINK_OUTPUT: Default basename for linked output

        Unrecognised values leave the default in place.

        Returns:
            ToolchainConfig with values from environment variables
        """
        config = cls()

        if atomic := os.environ.get("LC3_ATOMIC_WRITES"):
            value = atomic.strip().lower()
            if value in _TRUE_VALUES:
                config.atomic_writes = True
            elif value in _FALSE_VALUES:
                config.atomic_writes = False

        if level_name := os.environ.get("LC3_LOG_LEVEL"):
            level = logging.getLevelName(level_name.strip().upper())
            if isinstance(level, int):
                config.log_level = level

        if link_output := os.environ.get("LC3_LINK_OUTPUT"):
            config.link_output = link_output.strip()

        return config
