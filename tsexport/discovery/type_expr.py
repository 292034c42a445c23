"""Parser for C# type references such as ``Dictionary<string, List<Address>>?``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

from ..errors import SchemaError

_TOKEN_PATTERN = re.compile(r"\s*(?:(?P<ident>@?[A-Za-z_][A-Za-z0-9_]*)|(?P<symbol>::|[<>,.?()\[\]]))")

NULLABLE_SUFFIX = "?"
TUPLE_TYPE_NAME = "System.ValueTuple"
ARRAY_SUFFIX = "[]"


@dataclass(frozen=True)
class TypeRef:
    """An unresolved type reference: a dotted name, arguments and suffixes.

    Suffixes apply left to right, so ``int?[]`` is an array of nullable ints
    and ``int[]?`` is a nullable array.
    """

    name: str
    arguments: Tuple["TypeRef", ...] = ()
    suffixes: Tuple[str, ...] = ()

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def is_qualified(self) -> bool:
        return "." in self.name

    def __str__(self) -> str:
        text = self.name
        if self.arguments:
            text += "<" + ", ".join(str(arg) for arg in self.arguments) + ">"
        return text + "".join(self.suffixes)


def _tokenize(text: str) -> List[str]:
    tokens: List[str] = []
    position = 0
    stripped = text.rstrip()
    while position < len(stripped):
        match = _TOKEN_PATTERN.match(stripped, position)
        if match is None or match.end() == position:
            raise SchemaError(f"Unexpected character in type expression {text!r} at offset {position}")
        token = match.group("ident") or match.group("symbol")
        tokens.append(token.lstrip("@"))
        position = match.end()
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.index = 0

    def parse(self) -> TypeRef:
        if not self.tokens:
            raise SchemaError("Empty type expression")
        ref = self._parse_type()
        if self.index != len(self.tokens):
            raise SchemaError(
                f"Unexpected token {self.tokens[self.index]!r} in type expression {self.text!r}"
            )
        return ref

    def _peek(self) -> str | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _take(self, expected: str | None = None) -> str:
        token = self._peek()
        if token is None:
            raise SchemaError(f"Unexpected end of type expression {self.text!r}")
        if expected is not None and token != expected:
            raise SchemaError(f"Expected {expected!r} but found {token!r} in {self.text!r}")
        self.index += 1
        return token

    def _take_identifier(self) -> str:
        token = self._take()
        if not re.match(r"[A-Za-z_]", token):
            raise SchemaError(f"Expected a type name but found {token!r} in {self.text!r}")
        return token

    def _parse_type(self) -> TypeRef:
        if self._peek() == "(":
            name, arguments = TUPLE_TYPE_NAME, self._parse_tuple_elements()
        else:
            name, arguments = self._parse_named_type()
        return TypeRef(name=name, arguments=tuple(arguments), suffixes=self._parse_suffixes())

    def _parse_named_type(self) -> Tuple[str, List[TypeRef]]:
        parts = [self._take_identifier()]
        if parts[0] == "global" and self._peek() == "::":
            self._take("::")
            parts = [self._take_identifier()]
        while self._peek() == ".":
            self._take(".")
            parts.append(self._take_identifier())

        arguments: List[TypeRef] = []
        if self._peek() == "<":
            self._take("<")
            arguments.append(self._parse_type())
            while self._peek() == ",":
                self._take(",")
                arguments.append(self._parse_type())
            self._take(">")
        return ".".join(parts), arguments

    def _parse_tuple_elements(self) -> List[TypeRef]:
        """Parse ``(int, string)`` or ``(int Id, string Name)``; element names are dropped."""
        self._take("(")
        elements: List[TypeRef] = []
        while True:
            elements.append(self._parse_type())
            token = self._peek()
            if token is not None and token not in {",", ")"}:
                self._take_identifier()
            if self._peek() != ",":
                break
            self._take(",")
        self._take(")")
        if len(elements) < 2:
            raise SchemaError(f"Tuple types need at least two elements in {self.text!r}")
        return elements

    def _parse_suffixes(self) -> Tuple[str, ...]:
        suffixes: List[str] = []
        while self._peek() in {"?", "["}:
            if self._take() == "?":
                suffixes.append(NULLABLE_SUFFIX)
                continue
            # Multi-dimensional ranks such as [,] collapse onto a plain array.
            while self._peek() == ",":
                self._take(",")
            self._take("]")
            suffixes.append(ARRAY_SUFFIX)
        return tuple(suffixes)


def parse_type_expression(text: str) -> TypeRef:
    """Parse a C# type reference into a :class:`TypeRef`."""
    return _Parser(text).parse()


__all__ = [
    "ARRAY_SUFFIX",
    "NULLABLE_SUFFIX",
    "TUPLE_TYPE_NAME",
    "TypeRef",
    "parse_type_expression",
]
