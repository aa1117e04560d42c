"""
Tree-sitter front end for JavaScript and TypeScript sources.

Grammar choice follows the file extension:
- .js / .jsx / .mjs / .cjs -> javascript (JSX included)
- .ts / .mts / .cts        -> typescript
- .tsx, or no path at all  -> tsx
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Query, QueryCursor, Tree

logger = logging.getLogger(__name__)

JAVASCRIPT_EXTENSIONS = frozenset({".js", ".jsx", ".mjs", ".cjs"})
TYPESCRIPT_EXTENSIONS = frozenset({".ts", ".mts", ".cts"})
TSX_EXTENSIONS = frozenset({".tsx"})


def grammar_for(file_path: Optional[Path]) -> str:
    """Grammar name for a path."""
    if file_path is None:
        return "tsx"
    ext = file_path.suffix.lower()
    if ext in JAVASCRIPT_EXTENSIONS:
        return "javascript"
    if ext in TYPESCRIPT_EXTENSIONS:
        return "typescript"
    return "tsx"


@lru_cache(maxsize=None)
def get_language(grammar: str) -> Language:
    if grammar == "javascript":
        return Language(tree_sitter_javascript.language())
    if grammar == "typescript":
        return Language(tree_sitter_typescript.language_typescript())
    if grammar == "tsx":
        return Language(tree_sitter_typescript.language_tsx())
    raise ValueError(f"Unknown grammar: {grammar}")


def parse_source(text: str, file_path: Optional[Path] = None) -> Tree:
    """
    Parse ``text`` into a tree-sitter Tree.

    Tree-sitter is error tolerant: syntax errors produce ERROR nodes, not
    exceptions, so partially valid sources still yield usable trees.
    """
    grammar = grammar_for(file_path)
    parser = Parser(get_language(grammar))
    tree = parser.parse(text.encode("utf-8"))
    if tree.root_node.has_error:
        logger.debug(f"{file_path or '<source>'} parsed with syntax errors ({grammar})")
    return tree


@lru_cache(maxsize=None)
def compile_query(grammar: str, source: str) -> Query:
    return Query(get_language(grammar), source)


def run_query(
    source: str,
    root: Node,
    file_path: Optional[Path] = None,
) -> List[Dict[str, List[Node]]]:
    """
    Run a query over ``root`` and return the captures of each match.

    Matches come back in document order. Compiled queries are cached per
    grammar, so a query string is checked against every grammar it runs on.
    """
    cursor = QueryCursor(compile_query(grammar_for(file_path), source))
    return [captures for _, captures in cursor.matches(root)]
