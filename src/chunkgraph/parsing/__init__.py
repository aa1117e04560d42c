"""
Parsing package for chunkgraph.

Provides the extractor infrastructure and the JavaScript/TypeScript
source analyzer.
"""

from .base import ExtractionContext, Extractor, ExtractorRegistry, walk

__all__ = ["ExtractionContext", "Extractor", "ExtractorRegistry", "walk"]
