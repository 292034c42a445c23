"""Tree-sitter powered scanner for marker-tagged C# declarations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ..errors import SchemaError
from ..logging import get_logger
from ..models import DeclarationDescriptor, DeclarationKind, MemberDescriptor
from .base import DeclarationSource
from .symbols import (
    SYMBOL_CLASS,
    SYMBOL_ENUM,
    SYMBOL_INTERFACE,
    SYMBOL_STRUCT,
    Scope,
    Symbol,
    SymbolTable,
)
from .type_expr import TypeRef, parse_type_expression

try:  # pragma: no cover - optional dependency
    from tree_sitter import Parser
    from tree_sitter_languages import get_language

    TREE_SITTER_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    Parser = None  # type: ignore[assignment]
    get_language = None  # type: ignore[assignment]
    TREE_SITTER_AVAILABLE = False

DEFAULT_CLASS_MARKER = "ITypescriptClassExportable"
DEFAULT_INTERFACE_MARKER = "ITypescriptInterfaceExportable"

_LANGUAGE_KEY = "c_sharp"

_TYPE_NODES = {
    "class_declaration": SYMBOL_CLASS,
    "record_declaration": SYMBOL_CLASS,
    "interface_declaration": SYMBOL_INTERFACE,
    "struct_declaration": SYMBOL_STRUCT,
    "record_struct_declaration": SYMBOL_STRUCT,
    "enum_declaration": SYMBOL_ENUM,
}
_RECORD_NODES = {"record_declaration", "record_struct_declaration"}
_MEMBER_KINDS = {SYMBOL_CLASS, SYMBOL_INTERFACE, SYMBOL_STRUCT}
_NAMESPACE_NODES = {"namespace_declaration", "file_scoped_namespace_declaration"}
_NAMING_ATTRIBUTES = {"JsonProperty", "JsonPropertyAttribute", "JsonPropertyName", "JsonPropertyNameAttribute"}

_USING_PATTERN = re.compile(r"^(?:global\s+)?using\s+(?P<static>static\s+)?(?P<name>[\w.]+)\s*;")
_STRING_LITERAL = re.compile(r'"((?:[^"\\]|\\.)*)"')
_BASE_NAME = re.compile(r"[A-Za-z_][\w.]*")


@dataclass
class _ParsedProperty:
    name: str
    type_ref: TypeRef
    override_name: Optional[str]


@dataclass
class _ParsedType:
    name: str
    namespace: Optional[str]
    kind: str
    scope: Scope
    bases: Tuple[str, ...] = ()
    is_generic: bool = False
    properties: List[_ParsedProperty] = field(default_factory=list)

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name


class CSharpSource(DeclarationSource):
    """Finds class-like types and interfaces tagged with the export marker interfaces.

    Records and structs carrying the class marker are exported as classes;
    positional record parameters count as properties.
    """

    name = "csharp"

    def __init__(
        self,
        *,
        class_marker: str = DEFAULT_CLASS_MARKER,
        interface_marker: str = DEFAULT_INTERFACE_MARKER,
        enabled: Optional[bool] = None,
    ) -> None:
        self.class_marker = class_marker
        self.interface_marker = interface_marker
        self._enabled = TREE_SITTER_AVAILABLE if enabled is None else enabled
        self._parser: Optional[Parser] = None
        self._types: Dict[str, _ParsedType] = {}
        self.logger = get_logger("discovery.csharp")

    def matches(self, path: Path) -> bool:
        return self._enabled and path.suffix.lower() == ".cs"

    def index(self, path: Path, symbols: SymbolTable) -> None:
        parser = self._get_parser()
        if parser is None:
            return
        try:
            source = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.warning("Skipping unreadable C# file %s: %s", path, exc)
            return
        source_bytes = source.encode("utf-8")
        tree = parser.parse(source_bytes)
        for parsed in self._collect_types(tree.root_node, source_bytes, str(path)):
            symbol = Symbol(
                name=parsed.name,
                namespace=parsed.namespace,
                kind=parsed.kind,
                source=str(path),
            )
            # Partial declarations are not merged; the first one wins.
            if symbols.add(symbol):
                self._types[parsed.qualified_name] = parsed

    def declarations(self, symbols: SymbolTable) -> Iterable[DeclarationDescriptor]:
        types, self._types = self._types, {}
        for parsed in types.values():
            if parsed.name in {self.class_marker, self.interface_marker}:
                continue
            if parsed.kind in {SYMBOL_CLASS, SYMBOL_STRUCT}:
                marker, kind = self.class_marker, DeclarationKind.CLASS
            elif parsed.kind == SYMBOL_INTERFACE:
                marker, kind = self.interface_marker, DeclarationKind.INTERFACE
            else:
                continue
            if not self._inherits_marker(parsed, marker, types, symbols, set()):
                continue
            if parsed.is_generic:
                self.logger.warning(
                    "Skipping generic declaration %s; open type parameters are not exported",
                    parsed.qualified_name,
                )
                continue
            properties = list(parsed.properties)
            if kind is DeclarationKind.CLASS:
                properties.extend(self._inherited_properties(parsed, types, symbols))
            members = tuple(
                MemberDescriptor(
                    name=prop.name,
                    type=symbols.resolve(prop.type_ref, parsed.scope),
                    override_name=prop.override_name,
                )
                for prop in properties
            )
            yield DeclarationDescriptor(
                name=parsed.name,
                namespace=parsed.namespace,
                kind=kind,
                members=members,
                source=parsed.scope.source,
            )

    def _base_types(
        self, parsed: _ParsedType, types: Dict[str, _ParsedType], symbols: SymbolTable
    ) -> Iterator[_ParsedType]:
        for base in parsed.bases:
            symbol = symbols.lookup(base, parsed.scope)
            if symbol is None:
                continue
            base_type = types.get(symbol.qualified_name)
            if base_type is not None:
                yield base_type

    def _inherits_marker(
        self,
        parsed: _ParsedType,
        marker: str,
        types: Dict[str, _ParsedType],
        symbols: SymbolTable,
        seen: Set[str],
    ) -> bool:
        if parsed.qualified_name in seen:
            return False
        seen.add(parsed.qualified_name)
        if any(base.rsplit(".", 1)[-1] == marker for base in parsed.bases):
            return True
        return any(
            self._inherits_marker(base, marker, types, symbols, seen)
            for base in self._base_types(parsed, types, symbols)
        )

    def _inherited_properties(
        self, parsed: _ParsedType, types: Dict[str, _ParsedType], symbols: SymbolTable
    ) -> List[_ParsedProperty]:
        inherited: List[_ParsedProperty] = []
        seen_names = {prop.name for prop in parsed.properties}
        visited = {parsed.qualified_name}
        current: Optional[_ParsedType] = parsed
        while current is not None:
            base_class = next(
                (
                    base
                    for base in self._base_types(current, types, symbols)
                    if base.kind == SYMBOL_CLASS and base.qualified_name not in visited
                ),
                None,
            )
            if base_class is None:
                break
            visited.add(base_class.qualified_name)
            for prop in base_class.properties:
                if prop.name in seen_names:
                    continue
                seen_names.add(prop.name)
                inherited.append(
                    _ParsedProperty(
                        name=prop.name,
                        # Base members resolve their types in the base's own scope.
                        type_ref=_qualify(prop.type_ref, base_class, symbols),
                        override_name=prop.override_name,
                    )
                )
            current = base_class
        return inherited

    def _get_parser(self) -> Optional[Parser]:
        if self._parser is not None:
            return self._parser
        if not self._enabled or not TREE_SITTER_AVAILABLE:
            return None
        language = get_language(_LANGUAGE_KEY)
        parser = Parser()
        parser.set_language(language)
        self._parser = parser
        return parser

    @staticmethod
    def _body(node):  # type: ignore[no-untyped-def]
        body = node.child_by_field_name("body")
        if body is not None:
            return body
        return next((child for child in node.children if child.type == "declaration_list"), None)

    @staticmethod
    def _node_text(node, source_bytes) -> str:  # type: ignore[no-untyped-def]
        return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def _collect_types(self, root, source_bytes, source: str) -> Iterable[_ParsedType]:  # type: ignore[no-untyped-def]
        usings: List[str] = []
        yield from self._walk(root, source_bytes, source, None, usings)

    def _walk(self, node, source_bytes, source, namespace, usings) -> Iterable[_ParsedType]:  # type: ignore[no-untyped-def]
        usings = list(usings)
        current_namespace = namespace
        for child in node.children:
            if child.type == "using_directive":
                match = _USING_PATTERN.match(self._node_text(child, source_bytes).strip())
                if match and not match.group("static"):
                    usings.append(match.group("name"))
            elif child.type in _NAMESPACE_NODES:
                name_node = child.child_by_field_name("name")
                name = self._node_text(name_node, source_bytes) if name_node else ""
                nested = f"{current_namespace}.{name}" if current_namespace else name
                if child.type == "file_scoped_namespace_declaration":
                    # Following siblings belong to the file-scoped namespace.
                    current_namespace = nested
                yield from self._walk(child, source_bytes, source, nested, usings)
            elif child.type == "declaration_list":
                yield from self._walk(child, source_bytes, source, current_namespace, usings)
            elif child.type in _TYPE_NODES:
                parsed = self._parse_type(child, source_bytes, source, current_namespace, usings)
                if parsed is not None:
                    yield parsed
                    body = self._body(child)
                    if body is not None:
                        # Nested types share the namespace of their container.
                        yield from self._walk(body, source_bytes, source, current_namespace, usings)

    def _parse_type(self, node, source_bytes, source, namespace, usings) -> Optional[_ParsedType]:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        kind = _TYPE_NODES[node.type]
        parsed = _ParsedType(
            name=self._node_text(name_node, source_bytes),
            namespace=namespace,
            kind=kind,
            scope=Scope(namespace=namespace, usings=tuple(usings), source=source),
            bases=self._base_names(node, source_bytes),
            is_generic=any(child.type == "type_parameter_list" for child in node.children),
        )
        if kind in _MEMBER_KINDS:
            properties: List[_ParsedProperty] = []
            if node.type in _RECORD_NODES:
                properties.extend(self._collect_record_parameters(node, source_bytes, parsed))
            body = self._body(node)
            if body is not None:
                positional = {prop.name for prop in properties}
                properties.extend(
                    prop
                    for prop in self._collect_properties(body, source_bytes, kind == SYMBOL_INTERFACE, parsed)
                    if prop.name not in positional
                )
            parsed.properties = properties
        return parsed

    def _base_names(self, node, source_bytes) -> Tuple[str, ...]:  # type: ignore[no-untyped-def]
        names: List[str] = []
        for child in node.children:
            if child.type not in {"base_list", "record_base"}:
                continue
            text = self._node_text(child, source_bytes).lstrip(":")
            depth = 0
            current = []
            for char in text:
                if char in "<(":
                    depth += 1
                elif char in ">)":
                    depth -= 1
                elif depth == 0:
                    current.append(char)
            for part in "".join(current).split(","):
                match = _BASE_NAME.search(part)
                if match:
                    names.append(match.group(0))
        return tuple(names)

    def _collect_properties(self, body, source_bytes, is_interface, parsed) -> Iterable[_ParsedProperty]:  # type: ignore[no-untyped-def]
        for child in body.children:
            if child.type != "property_declaration":
                continue
            modifiers = {
                self._node_text(modifier, source_bytes)
                for modifier in child.children
                if modifier.type == "modifier"
            }
            if "static" in modifiers:
                continue
            if not is_interface and "public" not in modifiers:
                continue
            prop = self._typed_property(child, source_bytes, parsed)
            if prop is not None:
                yield prop

    def _collect_record_parameters(self, node, source_bytes, parsed) -> Iterable[_ParsedProperty]:  # type: ignore[no-untyped-def]
        """Positional record parameters become public properties of the record."""
        for parameters in node.children:
            if parameters.type != "parameter_list":
                continue
            for parameter in parameters.children:
                if parameter.type != "parameter":
                    continue
                prop = self._typed_property(parameter, source_bytes, parsed)
                if prop is not None:
                    yield prop

    def _typed_property(self, node, source_bytes, parsed) -> Optional[_ParsedProperty]:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        type_node = node.child_by_field_name("type")
        if name_node is None or type_node is None:
            return None
        name = self._node_text(name_node, source_bytes)
        try:
            type_ref = parse_type_expression(self._node_text(type_node, source_bytes))
        except SchemaError as exc:
            self.logger.warning(
                "Skipping %s.%s in %s: %s", parsed.qualified_name, name, parsed.scope.source, exc
            )
            return None
        return _ParsedProperty(
            name=name,
            type_ref=type_ref,
            override_name=self._naming_override(node, source_bytes),
        )

    def _naming_override(self, node, source_bytes) -> Optional[str]:  # type: ignore[no-untyped-def]
        for attribute_list in node.children:
            if attribute_list.type != "attribute_list":
                continue
            for attribute in attribute_list.children:
                if attribute.type != "attribute":
                    continue
                name_node = attribute.child_by_field_name("name")
                if name_node is None:
                    continue
                name = self._node_text(name_node, source_bytes).rsplit(".", 1)[-1]
                if name not in _NAMING_ATTRIBUTES:
                    continue
                match = _STRING_LITERAL.search(self._node_text(attribute, source_bytes))
                if match:
                    return match.group(1)
        return None


def _qualify(ref: TypeRef, owner: _ParsedType, symbols: SymbolTable) -> TypeRef:
    """Rewrite ``ref`` with names resolved in ``owner``'s scope."""
    arguments = tuple(_qualify(arg, owner, symbols) for arg in ref.arguments)
    symbol = symbols.lookup(ref.name, owner.scope)
    name = symbol.qualified_name if symbol is not None else ref.name
    return TypeRef(name=name, arguments=arguments, suffixes=ref.suffixes)


__all__ = [
    "CSharpSource",
    "DEFAULT_CLASS_MARKER",
    "DEFAULT_INTERFACE_MARKER",
    "TREE_SITTER_AVAILABLE",
]
