"""
CommonJS detection and CommonJS export extraction.

Detection is syntactic: a module counts as CommonJS when its tree contains
any of these shapes (and the text carries no ``__esModule`` interop flag,
checked by the analyzer):

- require(...)
- module.exports = ... / module.exports.x = ...
- exports.x = ... / exports["x"] = ...
- Object.assign(exports, ...) / Object.defineProperty(exports, ...)

Export names come from a tree-sitter query over the same tree, so text
inside strings, comments and regular expressions never counts.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generator, List, Tuple

from tree_sitter import QueryError

from ...base import ExtractionContext, node_text, walk
from ..parser import run_query

logger = logging.getLogger(__name__)

ASSIGNMENTS = frozenset({"assignment_expression", "augmented_assignment_expression"})
PROPERTY_ACCESS = frozenset({"member_expression", "subscript_expression"})
OBJECT_EXPORT_METHODS = frozenset({"assign", "defineProperty", "defineProperties"})
EXPORT_TARGETS = frozenset({"exports", "module.exports"})


def _is_identifier(node: Any, name: str) -> bool:
    return node is not None and node.type == "identifier" and node_text(node) == name


def _is_module_exports(node: Any) -> bool:
    return (
        node is not None
        and node.type == "member_expression"
        and _is_identifier(node.child_by_field_name("object"), "module")
        and node_text(node.child_by_field_name("property")) == "exports"
    )


def _assignment_target(node: Any) -> Any:
    if node.type not in ASSIGNMENTS:
        return None
    return node.child_by_field_name("left")


def is_require_call(node: Any) -> bool:
    return node.type == "call_expression" and _is_identifier(
        node.child_by_field_name("function"), "require"
    )


def is_module_exports_assignment(node: Any) -> bool:
    left = _assignment_target(node)
    if left is None:
        return False
    if _is_module_exports(left):
        return True
    return left.type in PROPERTY_ACCESS and _is_module_exports(left.child_by_field_name("object"))


def is_exports_property_assignment(node: Any) -> bool:
    left = _assignment_target(node)
    return (
        left is not None
        and left.type in PROPERTY_ACCESS
        and _is_identifier(left.child_by_field_name("object"), "exports")
    )


def is_object_exports_call(node: Any) -> bool:
    if node.type != "call_expression":
        return False
    function = node.child_by_field_name("function")
    if function is None or function.type != "member_expression":
        return False
    if not _is_identifier(function.child_by_field_name("object"), "Object"):
        return False
    if node_text(function.child_by_field_name("property")) not in OBJECT_EXPORT_METHODS:
        return False
    arguments = node.child_by_field_name("arguments")
    if arguments is None:
        return False
    args = [arg for arg in arguments.named_children if arg.type != "comment"]
    return bool(args) and node_text(args[0]) in EXPORT_TARGETS


COMMONJS_PATTERNS: Tuple[Callable[[Any], bool], ...] = (
    is_require_call,
    is_module_exports_assignment,
    is_exports_property_assignment,
    is_object_exports_call,
)


def has_commonjs_syntax(ctx: ExtractionContext) -> bool:
    """True if any node in the tree matches one of the CommonJS shapes."""
    for node in walk(ctx.root):
        for pattern in COMMONJS_PATTERNS:
            if pattern(node):
                logger.debug(f"{ctx.label}: CommonJS shape {pattern.__name__} at {node.start_point}")
                return True
    return False


# Export shapes. Each match captures an @export_name, a @reexport_source or
# an @export_object whose keys become exports.
COMMONJS_EXPORT_QUERY = """
; exports.name = ...
(assignment_expression
  left: (member_expression
    object: (identifier) @_exports
    property: (property_identifier) @export_name)
  (#eq? @_exports "exports"))

; exports["name"] = ...
(assignment_expression
  left: (subscript_expression
    object: (identifier) @_exports
    index: (string) @export_name)
  (#eq? @_exports "exports"))

; module.exports.name = ...
(assignment_expression
  left: (member_expression
    object: (member_expression
      object: (identifier) @_module
      property: (property_identifier) @_exports)
    property: (property_identifier) @export_name)
  (#eq? @_module "module")
  (#eq? @_exports "exports"))

; module.exports["name"] = ...
(assignment_expression
  left: (subscript_expression
    object: (member_expression
      object: (identifier) @_module
      property: (property_identifier) @_exports)
    index: (string) @export_name)
  (#eq? @_module "module")
  (#eq? @_exports "exports"))

; Object.defineProperty(exports, "name", ...)
(call_expression
  function: (member_expression
    object: (identifier) @_object
    property: (property_identifier) @_method)
  arguments: (arguments
    .
    (identifier) @_exports
    .
    (string) @export_name)
  (#eq? @_object "Object")
  (#eq? @_method "defineProperty")
  (#eq? @_exports "exports"))

; Object.defineProperty(module.exports, "name", ...)
(call_expression
  function: (member_expression
    object: (identifier) @_object
    property: (property_identifier) @_method)
  arguments: (arguments
    .
    (member_expression
      object: (identifier) @_module
      property: (property_identifier) @_exports)
    .
    (string) @export_name)
  (#eq? @_object "Object")
  (#eq? @_method "defineProperty")
  (#eq? @_module "module")
  (#eq? @_exports "exports"))

; module.exports = { ... }
(assignment_expression
  left: (member_expression
    object: (identifier) @_module
    property: (property_identifier) @_exports)
  right: (object) @export_object
  (#eq? @_module "module")
  (#eq? @_exports "exports"))

; module.exports = require("m")
(assignment_expression
  left: (member_expression
    object: (identifier) @_module
    property: (property_identifier) @_exports)
  right: (call_expression
    function: (identifier) @_require
    arguments: (arguments . (string) @reexport_source))
  (#eq? @_module "module")
  (#eq? @_exports "exports")
  (#eq? @_require "require"))

; Transpiler helpers: __exportStar(require("m"), exports) / __export(require("m"))
(call_expression
  function: (identifier) @_helper
  arguments: (arguments
    .
    (call_expression
      function: (identifier) @_require
      arguments: (arguments . (string) @reexport_source)))
  (#any-of? @_helper "__exportStar" "__export")
  (#eq? @_require "require"))
"""

PROPERTY_KEYS = frozenset({"property_identifier", "string", "number"})


@dataclass
class CommonJsExports:
    """Export names and re-exported specifiers, each unique, in source order."""
    exports: List[str] = field(default_factory=list)
    reexports: List[str] = field(default_factory=list)

    def add_export(self, name: str) -> None:
        if name and name not in self.exports:
            self.exports.append(name)

    def add_reexport(self, specifier: str) -> None:
        if specifier and specifier not in self.reexports:
            self.reexports.append(specifier)


def _string_value(node: Any) -> str:
    return node_text(node).strip("'\"")


def _require_source(call: Any) -> str:
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return ""
    args = [arg for arg in arguments.named_children if arg.type != "comment"]
    if args and args[0].type == "string":
        return _string_value(args[0])
    return ""


def _object_exports(obj: Any, result: CommonJsExports) -> None:
    """Keys of a ``module.exports = {...}`` literal; spread requires are re-exports."""
    for entry in obj.named_children:
        if entry.type == "shorthand_property_identifier":
            result.add_export(node_text(entry))
        elif entry.type in ("pair", "method_definition"):
            key = entry.child_by_field_name("key" if entry.type == "pair" else "name")
            # Computed keys have no static name
            if key is not None and key.type in PROPERTY_KEYS:
                result.add_export(_string_value(key))
        elif entry.type == "spread_element" and entry.named_children:
            argument = entry.named_children[0]
            if is_require_call(argument):
                result.add_reexport(_require_source(argument))


def collect_commonjs_exports(ctx: ExtractionContext) -> CommonJsExports:
    """
    Run the CommonJS export query over the parsed tree.

    Raises:
        QueryError: If the query does not compile for the file's grammar.
    """
    result = CommonJsExports()
    for captures in run_query(COMMONJS_EXPORT_QUERY, ctx.root, ctx.file_path):
        for node in captures.get("export_name", []):
            result.add_export(_string_value(node))
        for node in captures.get("reexport_source", []):
            result.add_reexport(_string_value(node))
        for node in captures.get("export_object", []):
            _object_exports(node, result)
    return result


class CommonJsExportExtractor:
    """
    Export names and re-export specifiers from CommonJS assignment shapes.

    A failing query contributes nothing and never aborts the analysis.
    """

    @property
    def name(self) -> str:
        return "commonjs_exports"

    @property
    def priority(self) -> int:
        return 50

    def can_extract(self, ctx: ExtractionContext) -> bool:
        return bool(ctx.text)

    def extract(self, ctx: ExtractionContext) -> Generator[str, None, None]:
        try:
            result = collect_commonjs_exports(ctx)
        except QueryError as e:
            logger.debug(f"CommonJS export query failed on {ctx.label}: {e}")
            return
        yield from result.exports
        yield from result.reexports
