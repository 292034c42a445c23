"""Core data models shared across tsexport components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional, Tuple


def split_namespace(namespace: Optional[str]) -> Tuple[str, ...]:
    """Return the dotted namespace as a tuple of segments."""
    if not namespace:
        return ()
    return tuple(part for part in namespace.split(".") if part)


@dataclass(frozen=True)
class TypeDescriptor:
    """Structural metadata about a declared type in the host type system."""

    name: str
    namespace: Optional[str] = None
    is_primitive: bool = False
    is_enum: bool = False
    generic_arguments: Tuple["TypeDescriptor", ...] = ()
    is_nullable: bool = False
    underlying: Optional["TypeDescriptor"] = None
    is_array: bool = False

    @property
    def qualified_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}.{self.name}"
        return self.name

    @property
    def namespace_path(self) -> Tuple[str, ...]:
        return split_namespace(self.namespace)

    @property
    def is_generic(self) -> bool:
        return bool(self.generic_arguments)

    def __str__(self) -> str:
        if self.is_array and self.generic_arguments:
            return f"{self.generic_arguments[0]}[]"
        if self.generic_arguments:
            args = ", ".join(str(arg) for arg in self.generic_arguments)
            return f"{self.qualified_name}<{args}>"
        return self.qualified_name


@dataclass(frozen=True)
class MemberDescriptor:
    """One exportable property of a declaration."""

    name: str
    type: TypeDescriptor
    override_name: Optional[str] = None

    @property
    def emitted_name(self) -> str:
        return self.override_name or self.name


class DeclarationKind(str, Enum):
    CLASS = "class"
    INTERFACE = "interface"


@dataclass(frozen=True)
class DeclarationDescriptor:
    """An export-eligible class or interface with its ordered members."""

    name: str
    namespace: Optional[str]
    kind: DeclarationKind
    members: Tuple[MemberDescriptor, ...] = ()
    source: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}.{self.name}"
        return self.name

    @property
    def namespace_path(self) -> Tuple[str, ...]:
        return split_namespace(self.namespace)

    def as_type(self) -> TypeDescriptor:
        """Return the descriptor used when this declaration owns a reference."""
        return TypeDescriptor(name=self.name, namespace=self.namespace)


@dataclass(frozen=True)
class ImportDirective:
    """A symbol imported from a relative module path."""

    symbol: str
    module_path: str

    def render(self) -> str:
        return f'import {{ {self.symbol} }} from "{self.module_path}";'


@dataclass
class OutputUnit:
    """The rendered TypeScript artifact for one declaration."""

    declaration: DeclarationDescriptor
    imports: Tuple[ImportDirective, ...]
    text: str
    relative_path: PurePosixPath
