"""Exception hierarchy for the export pipeline."""

from __future__ import annotations


class TsExportError(Exception):
    """Base class for errors raised while exporting declarations."""


class UnsupportedTypeError(TsExportError):
    """Raised when a declared type cannot be mapped to a TypeScript type."""


class SchemaError(TsExportError):
    """Raised when a declaration source contains malformed input."""


class DeclarationError(TsExportError):
    """Raised when a single declaration cannot be emitted.

    Carries the offending declaration and member so callers can report the
    failure without aborting the rest of the run.
    """

    def __init__(self, declaration: str, member: str | None, reason: str) -> None:
        self.declaration = declaration
        self.member = member
        self.reason = reason
        location = f"{declaration}.{member}" if member else declaration
        super().__init__(f"Cannot export {location}: {reason}")


__all__ = [
    "DeclarationError",
    "SchemaError",
    "TsExportError",
    "UnsupportedTypeError",
]
