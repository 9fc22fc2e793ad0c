import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import tree_sitter_typescript as tstypescript
from pydantic import BaseModel, ConfigDict, PrivateAttr
from tree_sitter import Language, Node as TSNode, Parser, Tree

from dts_critic.models.base import SourcePosition
from dts_critic.models.shape import DeclaredProperty, DeclaredShape
from dts_critic.services.names import dt_to_npm_name
from dts_critic.services.shape.consts import (
    AMBIENT_MODULE_PATTERN,
    CLASS_DECLARATION_TYPES,
    CLASS_MEMBER_TYPES,
    COMBINED_TYPE_TYPES,
    EXPORT_DEFAULT_PATTERN,
    EXPORT_EQUALS_PATTERN,
    FUNCTION_DECLARATION_TYPES,
    INTEROP_KEYS,
    MAX_TYPE_DEPTH,
    MODULE_STATEMENT_TYPES,
    NAMESPACE_DECLARATION_TYPES,
    OBJECT_MEMBER_TYPES,
    PROPERTY_NAME_TYPES,
    TYPE_REFERENCE_TYPES,
    VARIABLE_DECLARATION_TYPES,
)
from dts_critic.utils.treesitter_helpers import (
    first_named_child_of_type,
    has_token,
    node_text,
    span_of,
    unquote,
)

logger = logging.getLogger(__name__)

TYPESCRIPT_LANGUAGE = Language(tstypescript.language_typescript())


class BindingKind(StrEnum):
    VARIABLE = "variable"
    FUNCTION = "function"
    CLASS = "class"
    NAMESPACE = "namespace"
    ENUM = "enum"
    # Interfaces, type aliases, const enums and namespaces without values.
    TYPE = "type"


@dataclass(frozen=True)
class Binding:
    name: str
    kind: BindingKind
    node: TSNode
    span: TSNode
    exported: bool

    @property
    def is_value(self) -> bool:
        return self.kind != BindingKind.TYPE


@dataclass
class ValueSurface:
    """Accumulates what a declared value exposes: members and signatures."""

    properties: list[DeclaredProperty] = field(default_factory=list)
    is_callable: bool = False
    is_constructible: bool = False

    def add_property(self, name: str | None, span: TSNode) -> None:
        if not name or name in INTEROP_KEYS:
            return
        if any(prop.name == name for prop in self.properties):
            return
        self.properties.append(DeclaredProperty(name=name, position=span_of(span)))

    def add_members(self, body: TSNode) -> None:
        for member in body.named_children:
            if member.has_error:
                logger.debug("Skipping malformed member at byte %d", member.start_byte)
                continue
            if member.type == "call_signature":
                self.is_callable = True
            elif member.type == "construct_signature":
                self.is_constructible = True
            elif member.type in OBJECT_MEMBER_TYPES:
                self.add_property(_property_name(member.child_by_field_name("name")), member)

    def add_class_statics(self, class_node: TSNode) -> None:
        body = class_node.child_by_field_name("body")
        if body is None:
            return
        for member in body.named_children:
            if member.type not in CLASS_MEMBER_TYPES or member.has_error:
                continue
            if has_token(member, "static"):
                self.add_property(_property_name(member.child_by_field_name("name")), member)

    def add_enum_members(self, enum_node: TSNode) -> None:
        body = enum_node.child_by_field_name("body")
        if body is None:
            return
        for member in body.named_children:
            name_node = (
                member.child_by_field_name("name")
                if member.type == "enum_assignment"
                else member
            )
            self.add_property(_property_name(name_node), member)

    def merge(self, other: "ValueSurface") -> None:
        for prop in other.properties:
            if prop.name not in {existing.name for existing in self.properties}:
                self.properties.append(prop)
        self.is_callable = self.is_callable or other.is_callable
        self.is_constructible = self.is_constructible or other.is_constructible


def _property_name(node: TSNode | None) -> str | None:
    if node is None or node.is_missing or node.type not in PROPERTY_NAME_TYPES:
        return None
    return unquote(node_text(node))


def _unwrap_declaration(node: TSNode) -> TSNode | None:
    """Strip ``declare`` and expression wrappers off a top-level statement."""

    if node.type == "ambient_declaration":
        inner = next(iter(node.named_children), None)
        if inner is None or inner.type == "statement_block":
            # ``declare global { ... }`` augments the global scope, not the module.
            return None
        return _unwrap_declaration(inner)
    if node.type == "expression_statement":
        return first_named_child_of_type(node, "internal_module")
    return node


def _is_instantiated(namespace: TSNode) -> bool:
    body = namespace.child_by_field_name("body")
    if body is None:
        return False
    scope = DeclarationScope(body.named_children, implicit_exports=True)
    return any(binding.is_value for binding in scope.all_bindings())


def _bindings_for(declaration: TSNode, span: TSNode, exported: bool) -> Iterator[Binding]:
    if declaration.type in VARIABLE_DECLARATION_TYPES:
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier" or name_node.is_missing:
                continue
            yield Binding(
                node_text(name_node), BindingKind.VARIABLE, declarator, declarator, exported
            )
        return

    name_node = declaration.child_by_field_name("name")
    if name_node is None or name_node.is_missing:
        logger.debug("Skipping unnamed %s at byte %d", declaration.type, declaration.start_byte)
        return

    if declaration.type in FUNCTION_DECLARATION_TYPES:
        kind = BindingKind.FUNCTION
    elif declaration.type in CLASS_DECLARATION_TYPES:
        kind = BindingKind.CLASS
    elif declaration.type in NAMESPACE_DECLARATION_TYPES:
        if name_node.type == "string":
            return
        kind = BindingKind.NAMESPACE if _is_instantiated(declaration) else BindingKind.TYPE
        yield Binding(node_text(name_node).split(".")[0], kind, declaration, span, exported)
        return
    elif declaration.type == "enum_declaration":
        kind = BindingKind.TYPE if has_token(declaration, "const") else BindingKind.ENUM
    elif declaration.type in {"interface_declaration", "type_alias_declaration"}:
        kind = BindingKind.TYPE
    else:
        return
    yield Binding(node_text(name_node), kind, declaration, span, exported)


def _is_empty_export(statement: TSNode) -> bool:
    if statement.type != "export_statement":
        return False
    clause = first_named_child_of_type(statement, "export_clause")
    return (
        clause is not None
        and first_named_child_of_type(clause, "export_specifier") is None
        and first_named_child_of_type(statement, "string") is None
    )


class DeclarationScope:
    """Declarations and exports of one module body (file, ambient module or namespace)."""

    def __init__(self, statements: Sequence[TSNode], implicit_exports: bool) -> None:
        self.bindings: dict[str, list[Binding]] = {}
        self.specifiers: list[tuple[str, str, TSNode]] = []
        self.export_equals: TSNode | None = None
        self.default_exports: list[TSNode] = []
        # ``export {}`` inside an ambient body switches implicit exports off.
        self.implicit_exports: bool = implicit_exports and not any(
            _is_empty_export(statement) for statement in statements
        )
        for statement in statements:
            self.__visit(statement)

    def __bind(self, binding: Binding) -> None:
        self.bindings.setdefault(binding.name, []).append(binding)

    def __visit(self, statement: TSNode) -> None:
        if statement.type == "ERROR":
            logger.debug("Skipping unparsable construct at byte %d", statement.start_byte)
            return
        if statement.type == "export_statement":
            self.__visit_export(statement)
            return
        declaration = _unwrap_declaration(statement)
        if declaration is None:
            return
        for binding in _bindings_for(declaration, statement, self.implicit_exports):
            self.__bind(binding)

    def __visit_export(self, statement: TSNode) -> None:
        if has_token(statement, "="):
            self.export_equals = next(iter(statement.named_children), None)
            return
        if has_token(statement, "default"):
            self.default_exports.append(statement)
            return
        if has_token(statement, "type") or has_token(statement, "namespace"):
            return

        declaration = statement.child_by_field_name("declaration")
        if declaration is not None:
            unwrapped = _unwrap_declaration(declaration)
            if unwrapped is not None:
                for binding in _bindings_for(unwrapped, statement, exported=True):
                    self.__bind(binding)
            return

        clause = first_named_child_of_type(statement, "export_clause")
        if clause is None:
            return
        for specifier in clause.named_children:
            if specifier.type != "export_specifier" or has_token(specifier, "type"):
                continue
            name_node = specifier.child_by_field_name("name")
            if name_node is None or name_node.is_missing:
                continue
            alias_node = specifier.child_by_field_name("alias")
            local_name = unquote(node_text(name_node))
            exported_name = unquote(node_text(alias_node)) if alias_node else local_name
            self.specifiers.append((exported_name, local_name, specifier))

    def lookup(self, name: str) -> list[Binding]:
        return self.bindings.get(name, [])

    def all_bindings(self) -> Iterator[Binding]:
        for bindings in self.bindings.values():
            yield from bindings

    def exported_values(self) -> list[tuple[str, TSNode]]:
        """Exported value names with the node declaring them, in source order."""

        entries: list[tuple[int, str, TSNode]] = [
            (binding.span.start_byte, binding.name, binding.span)
            for binding in self.all_bindings()
            if binding.exported and binding.is_value
        ]
        for exported_name, local_name, specifier in self.specifiers:
            local = self.lookup(local_name)
            if local and not any(binding.is_value for binding in local):
                continue
            entries.append((specifier.start_byte, exported_name, specifier))
        entries.sort(key=lambda entry: entry[0])
        return [(name, node) for _, name, node in entries]


class DeclaredShapeExtractor(BaseModel):
    """Derive the declared shape of a module from its declaration text.

    The text is parsed with the error-tolerant tree-sitter TypeScript grammar.
    Export-style flags are detected on the raw text as well, so a construct the
    parser could not make sense of still counts.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    source: str
    __parser: Parser = PrivateAttr(default_factory=lambda: Parser(TYPESCRIPT_LANGUAGE))
    __source_bytes: bytes = PrivateAttr()
    __tree: Tree = PrivateAttr()

    def model_post_init(self, context: Any) -> None:
        self.__source_bytes = self.source.encode("utf-8")
        self.__tree = self.__parser.parse(self.__source_bytes)
        return super().model_post_init(context)

    def extract(self) -> DeclaredShape:
        root: TSNode = self.__tree.root_node
        if root.has_error:
            logger.debug("Declaration of %s has syntax errors, extracting what parses", self.name)

        top_scope = DeclarationScope(root.named_children, implicit_exports=False)
        wrapper_body = self.__find_ambient_module(root)
        scope = (
            DeclarationScope(wrapper_body.named_children, implicit_exports=True)
            if wrapper_body is not None
            else top_scope
        )
        scopes = (scope, top_scope)

        if scope.export_equals is not None:
            surface = self.__export_equals_surface(scope.export_equals, scopes)
        else:
            surface = ValueSurface()
            for name, node in scope.exported_values():
                surface.add_property(name, node)

        uses_export_equals = (
            scope.export_equals is not None
            or top_scope.export_equals is not None
            or EXPORT_EQUALS_PATTERN.search(self.source) is not None
        )
        has_wrapper = AMBIENT_MODULE_PATTERN.search(self.source) is not None
        has_default = EXPORT_DEFAULT_PATTERN.search(self.source) is not None and not has_wrapper

        shape = DeclaredShape(
            name=self.name,
            properties=tuple(surface.properties),
            is_callable=surface.is_callable,
            is_constructible=surface.is_constructible,
            uses_export_equals=uses_export_equals,
            has_default_export_marker=has_default,
            default_export_position=(
                self.__default_export_position(top_scope) if has_default else None
            ),
        )
        logger.debug(
            "Declared shape of %s: %d properties, callable=%s, constructible=%s",
            self.name,
            len(shape.properties),
            shape.is_callable,
            shape.is_constructible,
        )
        return shape

    def __find_ambient_module(self, root: TSNode) -> TSNode | None:
        """Body of the ``declare module "name" { ... }`` wrapper for this package, if any."""

        candidates: list[tuple[str, TSNode]] = []
        for statement in root.named_children:
            if statement.type != "ambient_declaration":
                continue
            module = first_named_child_of_type(statement, "module")
            if module is None:
                continue
            name_node = module.child_by_field_name("name")
            body = module.child_by_field_name("body")
            if name_node is None or name_node.type != "string" or body is None:
                continue
            candidates.append((unquote(node_text(name_node)), body))

        wanted: set[str] = {self.name, dt_to_npm_name(self.name)}
        for module_name, body in candidates:
            if module_name in wanted:
                return body
        # A lone wrapper in a module file is an augmentation of another module.
        is_module_file = any(
            statement.type in MODULE_STATEMENT_TYPES for statement in root.named_children
        )
        if len(candidates) == 1 and not is_module_file:
            return candidates[0][1]
        return None

    def __export_equals_surface(
        self, expression: TSNode, scopes: tuple[DeclarationScope, ...]
    ) -> ValueSurface:
        if expression.type != "identifier":
            logger.debug("Unsupported 'export =' target %r", node_text(expression))
            return ValueSurface()
        return self.__surface_of_name(node_text(expression), scopes, depth=0)

    def __lookup(self, name: str, scopes: tuple[DeclarationScope, ...]) -> list[Binding]:
        for scope in scopes:
            bindings = scope.lookup(name)
            if bindings:
                return bindings
        return []

    def __surface_of_name(
        self, name: str, scopes: tuple[DeclarationScope, ...], depth: int
    ) -> ValueSurface:
        surface = ValueSurface()
        bindings = self.__lookup(name, scopes)
        if not bindings:
            logger.debug("Could not resolve exported value %r", name)
        for binding in bindings:
            if binding.kind == BindingKind.FUNCTION:
                surface.is_callable = True
            elif binding.kind == BindingKind.CLASS:
                surface.is_constructible = True
                surface.add_class_statics(binding.node)
            elif binding.kind == BindingKind.NAMESPACE:
                body = binding.node.child_by_field_name("body")
                if body is not None:
                    members = DeclarationScope(body.named_children, implicit_exports=True)
                    for member_name, node in members.exported_values():
                        surface.add_property(member_name, node)
            elif binding.kind == BindingKind.ENUM:
                surface.add_enum_members(binding.node)
            elif binding.kind == BindingKind.VARIABLE:
                annotation = binding.node.child_by_field_name("type")
                if annotation is not None:
                    surface.merge(self.__surface_of_type(annotation, scopes, depth))
        return surface

    def __surface_of_type(
        self, node: TSNode, scopes: tuple[DeclarationScope, ...], depth: int
    ) -> ValueSurface:
        surface = ValueSurface()
        if depth > MAX_TYPE_DEPTH:
            return surface

        if node.type == "type_annotation":
            inner = next(iter(node.named_children), None)
            if inner is not None:
                surface.merge(self.__surface_of_type(inner, scopes, depth))
        elif node.type == "function_type":
            surface.is_callable = True
        elif node.type == "constructor_type":
            surface.is_constructible = True
        elif node.type in {"object_type", "interface_body"}:
            surface.add_members(node)
        elif node.type in COMBINED_TYPE_TYPES:
            for part in node.named_children:
                surface.merge(self.__surface_of_type(part, scopes, depth + 1))
        elif node.type in TYPE_REFERENCE_TYPES:
            name_node = node.child_by_field_name("name") if node.type == "generic_type" else node
            if name_node is not None and name_node.type == "type_identifier":
                for binding in self.__lookup(node_text(name_node), scopes):
                    if binding.node.type == "interface_declaration":
                        body = binding.node.child_by_field_name("body")
                        if body is not None:
                            surface.add_members(body)
                    elif binding.node.type == "type_alias_declaration":
                        value = binding.node.child_by_field_name("value")
                        if value is not None:
                            surface.merge(self.__surface_of_type(value, scopes, depth + 1))
        elif node.type == "type_query":
            target = next(iter(node.named_children), None)
            if target is not None and target.type == "identifier":
                surface.merge(self.__surface_of_name(node_text(target), scopes, depth + 1))
        return surface

    def __default_export_position(self, top_scope: DeclarationScope) -> SourcePosition | None:
        for statement in top_scope.default_exports:
            if not statement.has_error:
                return span_of(statement)

        # The statement did not parse cleanly: span from 'export' to the first ';'
        # or the end of the line.
        match = EXPORT_DEFAULT_PATTERN.search(self.source)
        if match is None:
            return None
        end_of_line = self.source.find("\n", match.start())
        if end_of_line == -1:
            end_of_line = len(self.source)
        semicolon = self.source.find(";", match.start(), end_of_line)
        end = semicolon + 1 if semicolon != -1 else len(self.source[:end_of_line].rstrip())
        start_byte = len(self.source[: match.start()].encode("utf-8"))
        end_byte = len(self.source[:end].encode("utf-8"))
        return SourcePosition(start=start_byte, length=end_byte - start_byte)


def extract_declared_shape(name: str, declaration: str) -> DeclaredShape:
    return DeclaredShapeExtractor(name=name, source=declaration).extract()
