"""
Source Analyzer.

Given one module's source text and the build's usage reading for it,
determines whether the module is CommonJS, which names it exports, and
which of those exports the build left unused.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ...config import MAX_SOURCE_BYTES
from ...core.usage import UsedExports
from ..base import ExtractionContext, ExtractorRegistry
from .extractors.commonjs import CommonJsExportExtractor, has_commonjs_syntax
from .extractors.exports import EsModuleExportExtractor
from .parser import parse_source

logger = logging.getLogger(__name__)

# Emitted by transpilers into ES modules compiled down to CommonJS.
ESM_INTEROP_MARKER = "__esModule"


@dataclass(frozen=True)
class ModuleExports:
    """Static facts about one module."""
    is_commonjs: bool = False
    exports: List[str] = field(default_factory=list)
    dead_exports: List[str] = field(default_factory=list)


EMPTY_EXPORTS = ModuleExports()


def create_default_registry() -> ExtractorRegistry:
    registry = ExtractorRegistry()
    registry.register(EsModuleExportExtractor())
    registry.register(CommonJsExportExtractor())
    return registry


class SourceAnalyzer:
    """
    Runs the export extractors over a parsed module.

    Export names from every extractor are merged into one ordered, unique
    list; the ES module pass runs first.
    """

    def __init__(self, registry: Optional[ExtractorRegistry] = None):
        self._registry = registry or create_default_registry()

    def analyze(
        self,
        source: str,
        used_exports: UsedExports,
        file_path: Optional[Path] = None,
    ) -> ModuleExports:
        tree = parse_source(source, file_path)
        ctx = ExtractionContext(text=source, tree=tree, file_path=file_path)

        is_commonjs = ESM_INTEROP_MARKER not in source and has_commonjs_syntax(ctx)

        exports = list(dict.fromkeys(self._registry.extract_all(ctx)))

        return ModuleExports(
            is_commonjs=is_commonjs,
            exports=exports,
            dead_exports=used_exports.dead_exports(exports),
        )

    def analyze_file(
        self,
        file_path: Path,
        used_exports: UsedExports,
        max_bytes: int = MAX_SOURCE_BYTES,
    ) -> ModuleExports:
        """
        Read and analyze a source file.

        Missing, unreadable, non UTF-8 or oversized files yield
        ``EMPTY_EXPORTS`` instead of failing.
        """
        source = read_source(file_path, max_bytes)
        if source is None:
            return EMPTY_EXPORTS
        return self.analyze(source, used_exports, file_path)


def read_source(file_path: Path, max_bytes: int = MAX_SOURCE_BYTES) -> Optional[str]:
    try:
        size = file_path.stat().st_size
    except OSError as e:
        logger.warning(f"Source not readable, skipping analysis: {file_path} ({e})")
        return None

    if max_bytes and size > max_bytes:
        logger.warning(f"Source larger than {max_bytes} bytes, skipping analysis: {file_path}")
        return None

    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read {file_path}: {e}")
        return None
