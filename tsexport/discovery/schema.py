"""Declaration source backed by YAML/JSON schema files (``*.tsexport.yml``)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

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

SCHEMA_SUFFIXES = (".tsexport.yml", ".tsexport.yaml", ".tsexport.json")

_DECLARATION_KINDS = {kind.value: kind for kind in DeclarationKind}
_TYPE_KINDS = {SYMBOL_CLASS, SYMBOL_INTERFACE, SYMBOL_STRUCT, SYMBOL_ENUM}


@dataclass
class _SchemaMember:
    name: str
    type_ref: TypeRef
    json_name: Optional[str] = None


@dataclass
class _SchemaDeclaration:
    name: str
    namespace: Optional[str]
    kind: DeclarationKind
    scope: Scope
    members: List[_SchemaMember] = field(default_factory=list)


class SchemaFileSource(DeclarationSource):
    """Reads declarations listed explicitly in schema files.

    Example::

        namespace: Shop.Models
        using: [System, System.Collections.Generic]
        enums: [OrderStatus]
        types:
          - name: Money
            kind: struct
        declarations:
          - name: Order
            kind: class
            members:
              - {name: Id, type: int}
              - {name: Lines, type: List<OrderLine>, json_name: lines}
    """

    name = "schema"

    def __init__(self) -> None:
        self._pending: List[_SchemaDeclaration] = []
        self.logger = get_logger("discovery.schema")

    def matches(self, path: Path) -> bool:
        # A bare ".tsexport.yml" is the project config file, not a schema.
        name = path.name.lower()
        return any(name.endswith(suffix) and len(name) > len(suffix) for suffix in SCHEMA_SUFFIXES)

    def index(self, path: Path, symbols: SymbolTable) -> None:
        data = _read_schema(path)
        source = str(path)
        file_namespace = _as_namespace(data.get("namespace"), path, "namespace")
        usings = tuple(_as_str_list(data.get("using"), path, "using"))

        for entry in _as_list(data.get("enums"), path, "enums"):
            name, namespace, _ = _type_entry(entry, file_namespace, path, default_kind=SYMBOL_ENUM)
            symbols.add(Symbol(name=name, namespace=namespace, kind=SYMBOL_ENUM, source=source))

        for entry in _as_list(data.get("types"), path, "types"):
            name, namespace, kind = _type_entry(entry, file_namespace, path, default_kind=SYMBOL_CLASS)
            symbols.add(Symbol(name=name, namespace=namespace, kind=kind, source=source))

        declared = 0
        for entry in _as_list(data.get("declarations"), path, "declarations"):
            declaration = _declaration_entry(entry, file_namespace, usings, path)
            symbol = Symbol(
                name=declaration.name,
                namespace=declaration.namespace,
                kind=declaration.kind.value,
                source=source,
            )
            if symbols.add(symbol):
                self._pending.append(declaration)
                declared += 1
        self.logger.debug("Indexed %d declarations from %s", declared, path)

    def declarations(self, symbols: SymbolTable) -> Iterable[DeclarationDescriptor]:
        pending, self._pending = self._pending, []
        for declaration in pending:
            members = tuple(
                MemberDescriptor(
                    name=member.name,
                    type=symbols.resolve(member.type_ref, declaration.scope),
                    override_name=member.json_name,
                )
                for member in declaration.members
            )
            yield DeclarationDescriptor(
                name=declaration.name,
                namespace=declaration.namespace,
                kind=declaration.kind,
                members=members,
                source=declaration.scope.source,
            )


def _read_schema(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaError(f"Cannot read schema file {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        if path.name.lower().endswith(".json"):
            loaded = json.loads(text)
        else:
            loaded = yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise SchemaError(f"Failed to parse {path}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise SchemaError(f"{path} must contain a mapping at the root")
    return loaded


def _type_entry(
    entry: Any, file_namespace: Optional[str], path: Path, *, default_kind: str
) -> Tuple[str, Optional[str], str]:
    if isinstance(entry, str):
        return _split_name(entry, file_namespace) + (default_kind,)
    if not isinstance(entry, dict):
        raise SchemaError(f"{path}: type entries must be names or mappings")
    name = _required_str(entry, "name", path)
    kind = str(entry.get("kind") or default_kind).lower()
    if kind not in _TYPE_KINDS:
        raise SchemaError(f"{path}: unsupported kind {kind!r} for type {name}")
    namespace = _as_namespace(entry.get("namespace"), path, "namespace")
    if namespace is not None:
        return name, namespace, kind
    return _split_name(name, file_namespace) + (kind,)


def _declaration_entry(
    entry: Any, file_namespace: Optional[str], usings: Tuple[str, ...], path: Path
) -> _SchemaDeclaration:
    if not isinstance(entry, dict):
        raise SchemaError(f"{path}: declarations must be mappings")
    name = _required_str(entry, "name", path)
    kind_name = str(entry.get("kind") or DeclarationKind.CLASS.value).lower()
    kind = _DECLARATION_KINDS.get(kind_name)
    if kind is None:
        raise SchemaError(f"{path}: declaration {name} has unsupported kind {kind_name!r}")
    namespace = _as_namespace(entry.get("namespace"), path, "namespace")
    if namespace is None:
        name, namespace = _split_name(name, file_namespace)
    declaration_usings = usings + tuple(_as_str_list(entry.get("using"), path, "using"))

    members: List[_SchemaMember] = []
    for raw_member in _as_list(entry.get("members"), path, f"{name}.members"):
        if not isinstance(raw_member, dict):
            raise SchemaError(f"{path}: members of {name} must be mappings")
        member_name = _required_str(raw_member, "name", path)
        type_text = raw_member.get("type")
        if not isinstance(type_text, str) or not type_text.strip():
            raise SchemaError(f"{path}: member {name}.{member_name} is missing a type")
        try:
            type_ref = parse_type_expression(type_text)
        except SchemaError as exc:
            raise SchemaError(f"{path}: member {name}.{member_name}: {exc}") from exc
        json_name = raw_member.get("json_name")
        members.append(
            _SchemaMember(
                name=member_name,
                type_ref=type_ref,
                json_name=str(json_name) if json_name is not None else None,
            )
        )

    return _SchemaDeclaration(
        name=name,
        namespace=namespace,
        kind=kind,
        scope=Scope(namespace=namespace, usings=declaration_usings, source=str(path)),
        members=members,
    )


def _split_name(name: str, file_namespace: Optional[str]) -> Tuple[str, Optional[str]]:
    if "." in name:
        namespace, _, simple = name.rpartition(".")
        return simple, namespace
    return name, file_namespace


def _required_str(mapping: Dict[str, Any], key: str, path: Path) -> str:
    value = mapping.get(key)
    if not isinstance(value, str) or not value.strip():
        raise SchemaError(f"{path}: entry is missing a '{key}'")
    return value.strip()


def _as_namespace(value: Any, path: Path, key: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise SchemaError(f"{path}: '{key}' must be a string")
    return value.strip() or None


def _as_list(value: Any, path: Path, key: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SchemaError(f"{path}: '{key}' must be a list")
    return value


def _as_str_list(value: Any, path: Path, key: str) -> List[str]:
    if isinstance(value, str):
        return [value]
    return [str(item) for item in _as_list(value, path, key)]


__all__ = ["SCHEMA_SUFFIXES", "SchemaFileSource"]
