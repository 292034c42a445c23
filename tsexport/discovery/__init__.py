"""Declaration sources and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence, Set

from ..logging import get_logger
from ..models import DeclarationDescriptor
from .base import DeclarationSource
from .csharp import (
    DEFAULT_CLASS_MARKER,
    DEFAULT_INTERFACE_MARKER,
    TREE_SITTER_AVAILABLE,
    CSharpSource,
)
from .scanner import SourceFilter, iter_project_files
from .schema import SchemaFileSource
from .symbols import SymbolTable

_ENTRY_POINT_GROUP = "tsexport.sources"

_logger = get_logger("discovery")


def discover_sources(
    enabled: Sequence[str] | None = None,
    *,
    class_marker: str = DEFAULT_CLASS_MARKER,
    interface_marker: str = DEFAULT_INTERFACE_MARKER,
) -> List[DeclarationSource]:
    """Return instantiated declaration sources, honoring optional enabled names."""

    builtin_factories: Dict[str, Callable[[], DeclarationSource]] = {
        "schema": SchemaFileSource,
        "csharp": lambda: CSharpSource(
            class_marker=class_marker, interface_marker=interface_marker
        ),
    }

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    sources: List[DeclarationSource] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], DeclarationSource]) -> None:
        nonlocal enabled_set
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, DeclarationSource):
            raise TypeError(f"Source factory for '{name}' did not return a DeclarationSource instance")
        sources.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in builtin_factories.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise RuntimeError(f"Failed to load source entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> DeclarationSource:
            return _coerce_source(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown declaration sources requested: {missing}")

    if enabled is not None and "csharp" in seen and not TREE_SITTER_AVAILABLE:
        _logger.warning("C# scanning requested but tree-sitter is not installed; .cs files are ignored")

    return sources


def collect_declarations(
    root: Path,
    sources: Sequence[DeclarationSource],
    source_filter: SourceFilter | None = None,
) -> List[DeclarationDescriptor]:
    """Index every admitted file, then gather declarations sorted by qualified name."""
    symbols = SymbolTable()
    indexed = 0
    for path in iter_project_files(root, source_filter):
        for source in sources:
            if source.matches(path):
                _logger.debug("Indexing %s with %s source", path, source.name)
                source.index(path, symbols)
                indexed += 1
    _logger.debug("Indexed %d files; %d symbols known", indexed, len(symbols))

    declarations: List[DeclarationDescriptor] = []
    for source in sources:
        declarations.extend(source.declarations(symbols))
    declarations.sort(key=lambda declaration: declaration.qualified_name)
    return declarations


def _coerce_source(obj: object) -> DeclarationSource:
    if isinstance(obj, DeclarationSource):
        return obj
    if isinstance(obj, type) and issubclass(obj, DeclarationSource):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, DeclarationSource):
            return instance
    raise TypeError("Source entry point must be a DeclarationSource subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    try:
        entry_points = metadata.entry_points()
    except Exception:  # pragma: no cover - defensive guard
        return []

    if hasattr(entry_points, "select"):
        return entry_points.select(group=_ENTRY_POINT_GROUP)  # type: ignore[return-value]

    return entry_points.get(_ENTRY_POINT_GROUP, [])  # type: ignore[return-value]


__all__ = [
    "CSharpSource",
    "DeclarationSource",
    "SchemaFileSource",
    "SourceFilter",
    "SymbolTable",
    "collect_declarations",
    "discover_sources",
]
