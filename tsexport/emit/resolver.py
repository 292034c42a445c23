"""Resolves cross-declaration references into relative import directives."""

from __future__ import annotations

from typing import Iterator, Optional, Tuple

from ..catalog import SYSTEM_NAMESPACE, is_subpath
from ..models import ImportDirective, TypeDescriptor

PARENT_DIRECTORY = ".."
CURRENT_DIRECTORY = "."


def common_prefix_length(left: Tuple[str, ...], right: Tuple[str, ...]) -> int:
    length = 0
    for left_part, right_part in zip(left, right):
        if left_part != right_part:
            break
        length += 1
    return length


def relative_module_dir(owner_path: Tuple[str, ...], target_path: Tuple[str, ...]) -> str:
    """Return the directory of ``target_path`` as seen from ``owner_path``.

    >>> relative_module_dir(("A", "B", "C"), ("A", "B", "D", "E"))
    '../D/E'
    >>> relative_module_dir(("A", "B"), ("A", "B"))
    '.'
    >>> relative_module_dir(("A",), ("A", "B"))
    'B'
    """
    shared = common_prefix_length(owner_path, target_path)
    segments = [PARENT_DIRECTORY] * (len(owner_path) - shared)
    segments.extend(target_path[shared:])
    if not segments:
        return CURRENT_DIRECTORY
    return "/".join(segments)


class ReferenceResolver:
    """Decides which references need an import and where it points."""

    def resolve(
        self, referenced: TypeDescriptor, owner: TypeDescriptor
    ) -> Optional[ImportDirective]:
        if not referenced.namespace:
            return None
        if is_subpath(referenced.namespace_path, SYSTEM_NAMESPACE):
            return None
        if referenced.is_enum:
            return None

        directory = relative_module_dir(owner.namespace_path, referenced.namespace_path)
        return ImportDirective(
            symbol=referenced.name,
            module_path=f"{directory}/{referenced.name}",
        )

    def imports_for(
        self, referenced: TypeDescriptor, owner: TypeDescriptor
    ) -> Iterator[ImportDirective]:
        """Yield directives for ``referenced`` and every type argument nested in it."""
        directive = self.resolve(referenced, owner)
        if directive is not None:
            yield directive
        for argument in referenced.generic_arguments:
            yield from self.imports_for(argument, owner)


__all__ = [
    "CURRENT_DIRECTORY",
    "PARENT_DIRECTORY",
    "ReferenceResolver",
    "common_prefix_length",
    "relative_module_dir",
]
