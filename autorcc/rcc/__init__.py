"""Bridges to the external rcc tool: listing, compiling, wrapping."""

from autorcc.rcc.compiler import RccCompiler
from autorcc.rcc.lister import RccLister, parse_list_output
from autorcc.rcc.wrapper import WrapperEmitter, wrapper_content

__all__ = [
    "RccCompiler",
    "RccLister",
    "WrapperEmitter",
    "parse_list_output",
    "wrapper_content",
]
