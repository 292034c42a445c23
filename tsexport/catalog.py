"""Facts about the .NET base library that drive type mapping and resolution."""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional, Tuple

from .models import TypeDescriptor, split_namespace

SYSTEM_NAMESPACE: Tuple[str, ...] = ("System",)
COLLECTIONS_NAMESPACE: Tuple[str, ...] = ("System", "Collections")

NULLABLE_QUALIFIED_NAME = "System.Nullable"

# Types the runtime reports as primitive (Type.IsPrimitive).
PRIMITIVE_TYPES: FrozenSet[str] = frozenset(
    {
        "System.Boolean",
        "System.Byte",
        "System.SByte",
        "System.Int16",
        "System.UInt16",
        "System.Int32",
        "System.UInt32",
        "System.Int64",
        "System.UInt64",
        "System.IntPtr",
        "System.UIntPtr",
        "System.Char",
        "System.Double",
        "System.Single",
    }
)

NUMERIC_PRIMITIVES: FrozenSet[str] = PRIMITIVE_TYPES - {"System.Boolean", "System.Char"}

# Non-primitive base-library types that still carry a number.
NUMERIC_WRAPPERS: FrozenSet[str] = frozenset(
    {
        "System.Decimal",
        "System.Int32",
        "System.Single",
        "System.Double",
        "System.Half",
        "System.Int128",
        "System.UInt128",
        "System.Numerics.BigInteger",
    }
)

DATE_TYPES: FrozenSet[str] = frozenset(
    {"System.DateTime", "System.DateTimeOffset", "System.DateOnly"}
)

TEXT_TYPES: FrozenSet[str] = frozenset(
    {"System.String", "System.Text.StringBuilder", "System.Drawing.Color"}
)

DICTIONARY_TYPES: FrozenSet[str] = frozenset(
    {
        "System.Collections.Generic.Dictionary",
        "System.Collections.Generic.IDictionary",
        "System.Collections.Generic.IReadOnlyDictionary",
        "System.Collections.Generic.SortedDictionary",
        "System.Collections.Generic.SortedList",
        "System.Collections.Concurrent.ConcurrentDictionary",
        "System.Collections.Immutable.ImmutableDictionary",
    }
)

# C# keyword aliases for base-library types.
KEYWORD_ALIASES: Dict[str, str] = {
    "bool": "System.Boolean",
    "byte": "System.Byte",
    "sbyte": "System.SByte",
    "short": "System.Int16",
    "ushort": "System.UInt16",
    "int": "System.Int32",
    "uint": "System.UInt32",
    "long": "System.Int64",
    "ulong": "System.UInt64",
    "nint": "System.IntPtr",
    "nuint": "System.UIntPtr",
    "char": "System.Char",
    "float": "System.Single",
    "double": "System.Double",
    "decimal": "System.Decimal",
    "string": "System.String",
    "object": "System.Object",
    "dynamic": "System.Object",
}

# Well-known base-library types addressable by simple name after a `using`.
KNOWN_SYSTEM_TYPES: FrozenSet[str] = frozenset(
    PRIMITIVE_TYPES
    | NUMERIC_WRAPPERS
    | DATE_TYPES
    | TEXT_TYPES
    | DICTIONARY_TYPES
    | {
        NULLABLE_QUALIFIED_NAME,
        "System.Object",
        "System.Guid",
        "System.TimeSpan",
        "System.TimeOnly",
        "System.Uri",
        "System.Version",
        "System.ValueTuple",
        "System.Collections.ArrayList",
        "System.Collections.Hashtable",
        "System.Collections.Generic.List",
        "System.Collections.Generic.IList",
        "System.Collections.Generic.IReadOnlyList",
        "System.Collections.Generic.ICollection",
        "System.Collections.Generic.IReadOnlyCollection",
        "System.Collections.Generic.IEnumerable",
        "System.Collections.Generic.HashSet",
        "System.Collections.Generic.ISet",
        "System.Collections.Generic.Queue",
        "System.Collections.Generic.Stack",
        "System.Collections.Generic.LinkedList",
        "System.Collections.Concurrent.ConcurrentBag",
        "System.Collections.Concurrent.ConcurrentQueue",
        "System.Collections.ObjectModel.Collection",
        "System.Collections.ObjectModel.ObservableCollection",
        "System.Collections.ObjectModel.ReadOnlyCollection",
        "System.Collections.Immutable.ImmutableArray",
        "System.Collections.Immutable.ImmutableList",
    }
)

_SIMPLE_NAME_INDEX: Dict[str, Tuple[str, ...]] = {}
for _qualified in sorted(KNOWN_SYSTEM_TYPES):
    _simple = _qualified.rsplit(".", 1)[1]
    _SIMPLE_NAME_INDEX[_simple] = _SIMPLE_NAME_INDEX.get(_simple, ()) + (_qualified,)


def is_subpath(path: Tuple[str, ...], prefix: Tuple[str, ...]) -> bool:
    """Return True when ``path`` starts with every segment of ``prefix``."""
    return len(path) >= len(prefix) and path[: len(prefix)] == prefix


def is_system_type(descriptor: TypeDescriptor) -> bool:
    return is_subpath(descriptor.namespace_path, SYSTEM_NAMESPACE)


def is_collection_type(descriptor: TypeDescriptor) -> bool:
    return is_subpath(descriptor.namespace_path, COLLECTIONS_NAMESPACE)


def is_dictionary_type(descriptor: TypeDescriptor) -> bool:
    return descriptor.qualified_name in DICTIONARY_TYPES and len(descriptor.generic_arguments) == 2


def lookup_system_type(simple_name: str, namespaces: Tuple[str, ...]) -> Optional[str]:
    """Return the qualified base-library name visible through ``namespaces``."""
    for qualified in _SIMPLE_NAME_INDEX.get(simple_name, ()):
        namespace = qualified.rsplit(".", 1)[0]
        if namespace in namespaces:
            return qualified
    return None


def system_type(qualified_name: str, arguments: Tuple[TypeDescriptor, ...] = ()) -> TypeDescriptor:
    """Build a descriptor for a base-library type from its qualified name."""
    namespace, _, name = qualified_name.rpartition(".")
    return TypeDescriptor(
        name=name,
        namespace=namespace or None,
        is_primitive=qualified_name in PRIMITIVE_TYPES,
        generic_arguments=arguments,
    )


def nullable_of(underlying: Optional[TypeDescriptor]) -> TypeDescriptor:
    """Build a ``System.Nullable`` wrapper around ``underlying``."""
    namespace_path = split_namespace(NULLABLE_QUALIFIED_NAME)
    return TypeDescriptor(
        name=namespace_path[-1],
        namespace=".".join(namespace_path[:-1]),
        generic_arguments=(underlying,) if underlying is not None else (),
        is_nullable=True,
        underlying=underlying,
    )


def array_of(element: TypeDescriptor) -> TypeDescriptor:
    """Build a descriptor for a single-dimension array of ``element``."""
    return TypeDescriptor(
        name="Array",
        namespace="System",
        generic_arguments=(element,),
        is_array=True,
    )
