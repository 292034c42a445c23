"""Renders one declaration into a complete TypeScript output unit."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..errors import DeclarationError, UnsupportedTypeError
from ..logging import get_logger
from ..models import (
    DeclarationDescriptor,
    DeclarationKind,
    ImportDirective,
    MemberDescriptor,
    OutputUnit,
)
from .resolver import CURRENT_DIRECTORY, ReferenceResolver
from .type_mapper import TypeMapper

DEFAULT_TEMPLATE = "declaration.ts.j2"
NULLABLE_MARKER = "?"
DEFINITE_MARKER = "!"


@dataclass(frozen=True)
class RenderedProperty:
    """A member as it appears inside the emitted type body."""

    name: str
    marker: str
    type: str


class DeclarationEmitter:
    """Combines type mapping and import resolution for a single declaration."""

    def __init__(
        self,
        type_mapper: TypeMapper | None = None,
        resolver: ReferenceResolver | None = None,
        *,
        indent: str = "  ",
        file_extension: str = ".ts",
        templates_dir: Path | None = None,
    ) -> None:
        self.type_mapper = type_mapper or TypeMapper()
        self.resolver = resolver or ReferenceResolver()
        self.indent = indent
        self.file_extension = file_extension if file_extension.startswith(".") else f".{file_extension}"
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.logger = get_logger("emitter")

    def emit(self, declaration: DeclarationDescriptor) -> Optional[OutputUnit]:
        """Return the output unit for ``declaration``, or None when nothing renders."""
        imports = self.collect_imports(declaration)
        properties = [self.render_member(declaration, member) for member in declaration.members]
        text = self._render(declaration, imports, properties)
        if not text.strip():
            return None
        self.logger.debug(
            "Rendered %s with %d members and %d imports",
            declaration.qualified_name,
            len(properties),
            len(imports),
        )
        return OutputUnit(
            declaration=declaration,
            imports=imports,
            text=text,
            relative_path=self.output_path(declaration),
        )

    def collect_imports(self, declaration: DeclarationDescriptor) -> Tuple[ImportDirective, ...]:
        owner = declaration.as_type()
        self_import = ImportDirective(
            symbol=declaration.name,
            module_path=f"{CURRENT_DIRECTORY}/{declaration.name}",
        )
        ordered: Dict[ImportDirective, None] = {}
        for member in declaration.members:
            for directive in self.resolver.imports_for(member.type, owner):
                if directive == self_import:
                    continue
                ordered.setdefault(directive, None)
        return tuple(ordered)

    def render_member(
        self, declaration: DeclarationDescriptor, member: MemberDescriptor
    ) -> RenderedProperty:
        try:
            rendered_type = self.type_mapper.map(member.type)
        except UnsupportedTypeError as exc:
            raise DeclarationError(declaration.qualified_name, member.name, str(exc)) from exc

        if rendered_type.endswith(NULLABLE_MARKER):
            marker = NULLABLE_MARKER
        elif declaration.kind is DeclarationKind.CLASS:
            marker = DEFINITE_MARKER
        else:
            marker = ""
        return RenderedProperty(name=member.emitted_name, marker=marker, type=rendered_type)

    def output_path(self, declaration: DeclarationDescriptor) -> PurePosixPath:
        return PurePosixPath(*declaration.namespace_path, f"{declaration.name}{self.file_extension}")

    def _render(
        self,
        declaration: DeclarationDescriptor,
        imports: Tuple[ImportDirective, ...],
        properties: List[RenderedProperty],
    ) -> str:
        template = self._env.get_template(DEFAULT_TEMPLATE)
        return template.render(
            imports=imports,
            kind=declaration.kind.value,
            name=declaration.name,
            properties=properties,
            indent=self.indent,
        )


__all__ = ["DeclarationEmitter", "RenderedProperty"]
