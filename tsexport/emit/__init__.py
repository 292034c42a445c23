"""Type mapping, reference resolution and declaration rendering."""

from .emitter import DeclarationEmitter, RenderedProperty
from .resolver import ReferenceResolver, relative_module_dir
from .type_mapper import TypeMapper

__all__ = [
    "DeclarationEmitter",
    "ReferenceResolver",
    "RenderedProperty",
    "TypeMapper",
    "relative_module_dir",
]
