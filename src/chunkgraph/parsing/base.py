"""
Base Parser Infrastructure.

Defines the extractor pattern used by the source analyzer: each extractor is
an independent predicate + collector pass over a shared, immutable
ExtractionContext, and the registry runs them in priority order.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generator, Iterator, List, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionContext:
    """
    Everything extractors may look at for one module.

    ``tree`` is a tree-sitter Tree; extractors must not mutate it.
    """

    text: str
    tree: Any
    file_path: Optional[Path] = None

    @property
    def root(self) -> Any:
        return self.tree.root_node

    @property
    def label(self) -> str:
        return str(self.file_path) if self.file_path else "<source>"


def walk(root: Any) -> Iterator[Any]:
    """
    Pre-order walk over a tree-sitter node and all its descendants.

    Uses an explicit stack so deeply nested sources cannot exhaust the
    interpreter's recursion limit.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def node_text(node: Any) -> str:
    return node.text.decode("utf-8", errors="replace") if node is not None else ""


class Extractor(Protocol):
    """
    Universal extractor interface.

    Yields export names found in the context.
    """

    @property
    def name(self) -> str:
        """Unique name for debugging."""
        ...

    @property
    def priority(self) -> int:
        """Execution priority. Higher numbers run first."""
        ...

    def can_extract(self, ctx: ExtractionContext) -> bool:
        """Quick check to see if this extractor applies to the context."""
        ...

    def extract(self, ctx: ExtractionContext) -> Generator[str, None, None]:
        ...


class ExtractorRegistry:
    """
    Manages and orchestrates extractors for the analyzer.
    """

    def __init__(self):
        self._extractors: List[Extractor] = []

    def register(self, extractor: Extractor) -> None:
        """Register a new extractor and sort by priority."""
        self._extractors.append(extractor)
        # Sort descending by priority (100 -> 0)
        self._extractors.sort(key=lambda e: -e.priority)

    @property
    def extractors(self) -> List[Extractor]:
        return list(self._extractors)

    def extract_all(self, ctx: ExtractionContext) -> Generator[str, None, None]:
        """Run all registered extractors against the context."""
        for extractor in self._extractors:
            if extractor.can_extract(ctx):
                yield from extractor.extract(ctx)
