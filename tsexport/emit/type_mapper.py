"""Maps host type descriptors onto TypeScript type expressions."""

from __future__ import annotations

from ..catalog import (
    DATE_TYPES,
    NUMERIC_PRIMITIVES,
    NUMERIC_WRAPPERS,
    TEXT_TYPES,
    is_collection_type,
    is_dictionary_type,
    is_system_type,
)
from ..errors import UnsupportedTypeError
from ..models import TypeDescriptor

TS_STRING = "string"
TS_NUMBER = "number"
TS_BOOLEAN = "boolean"
TS_DATE = "Date"


class TypeMapper:
    """Collapses the host type lattice onto TypeScript primitives.

    User-declared types pass through by bare name; linking them to their
    generated files is left to :class:`ReferenceResolver`. Unknown base-library
    types degrade to ``string`` instead of failing.
    """

    def map(self, descriptor: TypeDescriptor) -> str:
        if descriptor.is_nullable:
            if descriptor.underlying is None:
                raise UnsupportedTypeError(
                    f"nullable type {descriptor} has no underlying type to unwrap"
                )
            # No `| null` union: the wrapped type renders exactly like the bare one.
            return self.map(descriptor.underlying)

        if descriptor.is_enum:
            return TS_STRING

        if descriptor.is_array or is_collection_type(descriptor):
            return self._map_collection(descriptor)

        if is_system_type(descriptor) and not descriptor.is_primitive:
            return self._map_system_type(descriptor)

        return self._map_plain_type(descriptor)

    def _map_collection(self, descriptor: TypeDescriptor) -> str:
        if is_dictionary_type(descriptor):
            key_type = self.map(descriptor.generic_arguments[0])
            value_type = self.map(descriptor.generic_arguments[1])
            return f"{{ [key: {key_type}]: {value_type} }}"
        if descriptor.generic_arguments:
            return f"[{self.map(descriptor.generic_arguments[0])}]"
        return "[]"

    @staticmethod
    def _map_system_type(descriptor: TypeDescriptor) -> str:
        qualified = descriptor.qualified_name
        if qualified in DATE_TYPES:
            return TS_DATE
        if qualified in TEXT_TYPES:
            return TS_STRING
        if qualified in NUMERIC_WRAPPERS:
            return TS_NUMBER
        return TS_STRING

    @staticmethod
    def _map_plain_type(descriptor: TypeDescriptor) -> str:
        qualified = descriptor.qualified_name
        if qualified in NUMERIC_PRIMITIVES:
            return TS_NUMBER
        if qualified in {"System.String", "System.Char"}:
            return TS_STRING
        if qualified == "System.Boolean":
            return TS_BOOLEAN
        return descriptor.name


__all__ = ["TypeMapper", "TS_BOOLEAN", "TS_DATE", "TS_NUMBER", "TS_STRING"]
