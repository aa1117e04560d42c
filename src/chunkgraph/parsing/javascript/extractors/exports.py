"""
ES module export extraction.

Walks every ``export_statement`` in the tree and records the names the
module exposes:

- export { a, b as c }           -> a, c
- export { x } from './m'        -> x
- export default <expr>          -> default
- export default function f() {} -> default (f is not exported by name)
- export default interface Foo {} -> Foo (type-only, no runtime default)
- export function/class/interface/type/enum Name -> Name
- export const a = 1, b = 2      -> a, b
- export = x (TypeScript)        -> nothing
"""

from typing import Any, Generator

from ...base import ExtractionContext, node_text, walk

NAMED_DECLARATIONS = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "function_signature",
    "class_declaration",
    "abstract_class_declaration",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
})

VARIABLE_DECLARATIONS = frozenset({"lexical_declaration", "variable_declaration"})

# Declarations that create a runtime default binding when default-exported
DEFAULT_VALUE_DECLARATIONS = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "abstract_class_declaration",
})


def _unquote(name: str) -> str:
    if len(name) >= 2 and name[0] == name[-1] and name[0] in "'\"":
        return name[1:-1]
    return name


class EsModuleExportExtractor:
    """Collects export names from ES module syntax."""

    @property
    def name(self) -> str:
        return "esm_exports"

    @property
    def priority(self) -> int:
        return 100

    def can_extract(self, ctx: ExtractionContext) -> bool:
        return "export" in ctx.text

    def extract(self, ctx: ExtractionContext) -> Generator[str, None, None]:
        for node in walk(ctx.root):
            if node.type == "export_statement":
                yield from self._statement_exports(node)

    def _statement_exports(self, stmt: Any) -> Generator[str, None, None]:
        direct = {child.type for child in stmt.children if not child.is_named}
        if "=" in direct:
            return

        declaration = stmt.child_by_field_name("declaration")
        if "default" in direct:
            if declaration is not None and declaration.type not in DEFAULT_VALUE_DECLARATIONS:
                yield from self._declared_names(declaration)
            else:
                yield "default"
            return

        if declaration is not None:
            yield from self._declared_names(declaration)
            return

        for child in stmt.named_children:
            if child.type != "export_clause":
                continue
            for specifier in child.named_children:
                if specifier.type != "export_specifier":
                    continue
                exported = specifier.child_by_field_name("alias")
                if exported is None:
                    exported = specifier.child_by_field_name("name")
                if exported is not None:
                    yield _unquote(node_text(exported))

    def _declared_names(self, declaration: Any) -> Generator[str, None, None]:
        if declaration.type == "ambient_declaration":
            # export declare const x: T
            for child in declaration.named_children:
                yield from self._declared_names(child)
            return

        if declaration.type in NAMED_DECLARATIONS:
            name = declaration.child_by_field_name("name")
            if name is not None:
                yield node_text(name)
            return

        if declaration.type in VARIABLE_DECLARATIONS:
            for declarator in declaration.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = declarator.child_by_field_name("name")
                # Destructuring patterns are not recorded
                if name is not None and name.type == "identifier":
                    yield node_text(name)
