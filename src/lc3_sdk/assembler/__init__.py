"""
LC-3 SDK Assembler Package
==========================

Two-pass assembler producing relocatable text object modules.

Modules:
    lexer: Splits one source line into tokens
    operands: Structural operand classification
    parser: ParsedLine records, produced once per source
    symbols: Symbol table and '.FILL' alias resolution
    encoder: Table-driven instruction encoding
    codegen: Pass 1, pass 2 and the assembly context
    assembler: Assembler facade and output writing

Usage:
    from lc3_sdk.assembler import Assembler

    asm = Assembler()
    asm.assemble_file("prog.asm")
    asm.write_outputs("prog")
"""

from lc3_sdk.assembler.assembler import Assembler, assemble, assemble_file
from lc3_sdk.assembler.codegen import AssemblyContext, AssemblyState, CodeGenerator
from lc3_sdk.assembler.encoder import InstructionEncoder
from lc3_sdk.assembler.lexer import Lexer, Token, TokenType
from lc3_sdk.assembler.operands import (
    Immediate,
    LabelRef,
    Operand,
    Register,
    StringLiteral,
    classify_operand,
    parse_number,
)
from lc3_sdk.assembler.parser import LineKind, ParsedLine, Parser, parse_source
from lc3_sdk.assembler.symbols import Symbol, SymbolTable

__all__ = [
    "Assembler",
    "assemble",
    "assemble_file",
    "AssemblyContext",
    "AssemblyState",
    "CodeGenerator",
    "InstructionEncoder",
    "Lexer",
    "Token",
    "TokenType",
    "Immediate",
    "LabelRef",
    "Operand",
    "Register",
    "StringLiteral",
    "classify_operand",
    "parse_number",
    "LineKind",
    "ParsedLine",
    "Parser",
    "parse_source",
    "Symbol",
    "SymbolTable",
]
