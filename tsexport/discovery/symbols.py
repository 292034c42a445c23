"""Symbol table used to resolve type references across declaration sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Sequence, Tuple

from ..catalog import (
    COLLECTIONS_NAMESPACE,
    KEYWORD_ALIASES,
    KNOWN_SYSTEM_TYPES,
    NULLABLE_QUALIFIED_NAME,
    SYSTEM_NAMESPACE,
    array_of,
    is_subpath,
    lookup_system_type,
    nullable_of,
    system_type,
)
from ..logging import get_logger
from ..models import TypeDescriptor, split_namespace
from .type_expr import ARRAY_SUFFIX, NULLABLE_SUFFIX, TypeRef

SYMBOL_CLASS = "class"
SYMBOL_INTERFACE = "interface"
SYMBOL_STRUCT = "struct"
SYMBOL_ENUM = "enum"

_VALUE_KINDS = {SYMBOL_STRUCT, SYMBOL_ENUM}

# Base-library types that are reference types; `T?` on them is only an annotation.
_REFERENCE_SYSTEM_TYPES = {
    "System.String",
    "System.Object",
    "System.Uri",
    "System.Version",
    "System.Text.StringBuilder",
}

_ALL_SYSTEM_NAMESPACES: Tuple[str, ...] = tuple(
    sorted({name.rsplit(".", 1)[0] for name in KNOWN_SYSTEM_TYPES})
)


@dataclass(frozen=True)
class Symbol:
    """A type declared by one of the scanned sources."""

    name: str
    namespace: Optional[str]
    kind: str
    source: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name


@dataclass(frozen=True)
class Scope:
    """Name-resolution context of a declaration: its namespace and usings."""

    namespace: Optional[str] = None
    usings: Tuple[str, ...] = ()
    source: Optional[str] = None

    def enclosing_namespaces(self) -> Iterator[str]:
        parts = split_namespace(self.namespace)
        for length in range(len(parts), 0, -1):
            yield ".".join(parts[:length])


class SymbolTable:
    """Index of declared types keyed by qualified name."""

    def __init__(self) -> None:
        self._symbols: Dict[str, Symbol] = {}
        self.logger = get_logger("discovery.symbols")

    def __contains__(self, qualified_name: object) -> bool:
        return qualified_name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def get(self, qualified_name: str) -> Optional[Symbol]:
        return self._symbols.get(qualified_name)

    def add(self, symbol: Symbol) -> bool:
        """Register ``symbol``; returns False when the name is already taken."""
        existing = self._symbols.get(symbol.qualified_name)
        if existing is not None:
            self.logger.warning(
                "Duplicate declaration of %s in %s (first seen in %s); keeping the first",
                symbol.qualified_name,
                symbol.source or "<unknown>",
                existing.source or "<unknown>",
            )
            return False
        self._symbols[symbol.qualified_name] = symbol
        return True

    def lookup(self, name: str, scope: Scope) -> Optional[Symbol]:
        """Find a declared symbol the way the C# compiler would see ``name``."""
        for namespace in scope.enclosing_namespaces():
            symbol = self._symbols.get(f"{namespace}.{name}")
            if symbol is not None:
                return symbol
        symbol = self._symbols.get(name)
        if symbol is not None:
            return symbol
        if "." not in name:
            for using in scope.usings:
                symbol = self._symbols.get(f"{using}.{name}")
                if symbol is not None:
                    return symbol
        return None

    def resolve(self, ref: TypeRef, scope: Scope) -> TypeDescriptor:
        """Turn a parsed reference into a fully populated descriptor."""
        descriptor = self._resolve_base(ref, scope)
        for suffix in ref.suffixes:
            if suffix == NULLABLE_SUFFIX:
                if self._is_value_type(descriptor):
                    descriptor = nullable_of(descriptor)
            elif suffix == ARRAY_SUFFIX:
                descriptor = array_of(descriptor)
        return descriptor

    def resolve_many(self, refs: Sequence[TypeRef], scope: Scope) -> Tuple[TypeDescriptor, ...]:
        return tuple(self.resolve(ref, scope) for ref in refs)

    def _resolve_base(self, ref: TypeRef, scope: Scope) -> TypeDescriptor:
        arguments = self.resolve_many(ref.arguments, scope)

        if ref.name in KEYWORD_ALIASES:
            return system_type(KEYWORD_ALIASES[ref.name], arguments)

        symbol = self.lookup(ref.name, scope)
        if symbol is not None:
            return self._symbol_descriptor(symbol, arguments)

        qualified = self._system_name(ref, scope)
        if qualified is not None:
            if qualified == NULLABLE_QUALIFIED_NAME:
                return nullable_of(arguments[0] if arguments else None)
            return system_type(qualified, arguments)

        if ref.is_qualified:
            namespace, _, name = ref.name.rpartition(".")
            return TypeDescriptor(name=name, namespace=namespace, generic_arguments=arguments)

        library_namespace = _base_library_namespace(scope.usings)
        if library_namespace is not None:
            # An unindexed name visible through a System using belongs to the base library.
            self.logger.debug(
                "Treating unknown type %s referenced from %s as a member of %s",
                ref.name,
                scope.source or "<unknown>",
                library_namespace,
            )
            return TypeDescriptor(name=ref.name, namespace=library_namespace, generic_arguments=arguments)

        self.logger.warning(
            "Unknown type %s referenced from %s; assuming namespace %s",
            ref.name,
            scope.source or "<unknown>",
            scope.namespace or "<global>",
        )
        return TypeDescriptor(name=ref.name, namespace=scope.namespace, generic_arguments=arguments)

    @staticmethod
    def _system_name(ref: TypeRef, scope: Scope) -> Optional[str]:
        if ref.is_qualified:
            if ref.name.split(".", 1)[0] == "System":
                return ref.name
            return None
        visible = lookup_system_type(ref.name, scope.usings)
        if visible is not None:
            return visible
        # Hand-written schemas often omit usings; accept any well-known simple name.
        return lookup_system_type(ref.name, _ALL_SYSTEM_NAMESPACES)

    @staticmethod
    def _symbol_descriptor(symbol: Symbol, arguments: Tuple[TypeDescriptor, ...]) -> TypeDescriptor:
        return TypeDescriptor(
            name=symbol.name,
            namespace=symbol.namespace,
            is_enum=symbol.kind == SYMBOL_ENUM,
            generic_arguments=arguments,
        )

    def _is_value_type(self, descriptor: TypeDescriptor) -> bool:
        if descriptor.is_nullable or descriptor.is_array:
            return False
        if descriptor.is_primitive or descriptor.is_enum:
            return True
        symbol = self._symbols.get(descriptor.qualified_name)
        if symbol is not None:
            return symbol.kind in _VALUE_KINDS
        qualified = descriptor.qualified_name
        if qualified in _REFERENCE_SYSTEM_TYPES:
            return False
        if is_subpath(descriptor.namespace_path, COLLECTIONS_NAMESPACE):
            return False
        return qualified in KNOWN_SYSTEM_TYPES


def _base_library_namespace(usings: Sequence[str]) -> Optional[str]:
    """Return the last non-collection System using, ``System`` if only collections are imported."""
    paths = (split_namespace(using) for using in usings)
    system_usings = [path for path in paths if is_subpath(path, SYSTEM_NAMESPACE)]
    if not system_usings:
        return None
    for path in reversed(system_usings):
        if not is_subpath(path, COLLECTIONS_NAMESPACE):
            return ".".join(path)
    return ".".join(SYSTEM_NAMESPACE)


__all__ = [
    "SYMBOL_CLASS",
    "SYMBOL_ENUM",
    "SYMBOL_INTERFACE",
    "SYMBOL_STRUCT",
    "Scope",
    "Symbol",
    "SymbolTable",
]
