"""JavaScript/TypeScript static analysis: CommonJS detection and export enumeration."""

from .analyzer import EMPTY_EXPORTS, ModuleExports, SourceAnalyzer, read_source
from .parser import grammar_for, parse_source

__all__ = [
    "EMPTY_EXPORTS",
    "ModuleExports",
    "SourceAnalyzer",
    "read_source",
    "grammar_for",
    "parse_source",
]
