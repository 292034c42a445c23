"""Base classes for declaration source plugins."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable

from ..models import DeclarationDescriptor
from .symbols import SymbolTable


class DeclarationSource(ABC):
    """Contract for sources that describe exportable declarations.

    Discovery runs in two passes so references can cross files and sources:
    every matching file is first indexed into the shared symbol table, then
    each source yields its declarations with types resolved against it.
    """

    name: str = "source"

    @abstractmethod
    def matches(self, path: Path) -> bool:
        """Return True when this source understands the given file."""

    @abstractmethod
    def index(self, path: Path, symbols: SymbolTable) -> None:
        """Parse ``path`` and register the types it declares."""

    @abstractmethod
    def declarations(self, symbols: SymbolTable) -> Iterable[DeclarationDescriptor]:
        """Yield export-eligible declarations from every indexed file."""
