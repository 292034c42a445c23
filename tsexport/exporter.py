"""Export pipeline: discover declarations, render them, write the results."""

from __future__ import annotations

import difflib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import TsExportConfig, load_config
from .discovery import DeclarationSource, SourceFilter, collect_declarations, discover_sources
from .emit import DeclarationEmitter
from .errors import DeclarationError
from .logging import get_logger
from .models import DeclarationDescriptor, OutputUnit
from .writer import OutputWriter


@dataclass
class ExportReport:
    """Outcome of an export run."""

    output_root: Path
    dry_run: bool = False
    written: List[Path] = field(default_factory=list)
    unchanged: List[Path] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failures: List[DeclarationError] = field(default_factory=list)
    diffs: Dict[Path, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class Exporter:
    """Coordinates discovery, emission and writing for a project."""

    def __init__(
        self,
        sources: Optional[Sequence[DeclarationSource]] = None,
        emitter: DeclarationEmitter | None = None,
    ) -> None:
        self._sources = list(sources) if sources is not None else None
        self._emitter = emitter
        self.logger = get_logger("exporter")

    def discover(
        self, path: str, *, allow: Optional[Sequence[str]] = None
    ) -> List[DeclarationDescriptor]:
        """Return the export-eligible declarations found under ``path``."""
        project_path = self._resolve_project(path)
        config = load_config(project_path)
        return self._discover(project_path, config, allow)

    def run(
        self,
        path: str,
        *,
        output: Optional[str] = None,
        allow: Optional[Sequence[str]] = None,
        dry_run: bool = False,
        fail_fast: bool = False,
    ) -> ExportReport:
        """Export every declaration under ``path``; one failure never stops the rest."""
        project_path = self._resolve_project(path)
        config = load_config(project_path)
        output_root = Path(output).expanduser().resolve() if output else config.output_root
        self.logger.info("Starting export of %s into %s", project_path, output_root)

        declarations = self._discover(project_path, config, allow)
        emitter = self._emitter or DeclarationEmitter(
            indent=config.indent, file_extension=config.file_extension
        )
        writer = OutputWriter(output_root)
        report = ExportReport(output_root=output_root, dry_run=dry_run)

        for declaration in declarations:
            try:
                unit = emitter.emit(declaration)
            except DeclarationError as exc:
                self._log_exception(f"Failed to export {declaration.qualified_name}", exc)
                report.failures.append(exc)
                if fail_fast:
                    raise
                continue
            if unit is None:
                self.logger.debug("Nothing rendered for %s; skipping", declaration.qualified_name)
                report.skipped.append(declaration.qualified_name)
                continue
            self._deliver(unit, writer, report)

        self.logger.info(
            "Export finished: %d written, %d unchanged, %d skipped, %d failed%s",
            len(report.written),
            len(report.unchanged),
            len(report.skipped),
            len(report.failures),
            " (dry-run)" if dry_run else "",
        )
        return report

    def _deliver(self, unit: OutputUnit, writer: OutputWriter, report: ExportReport) -> None:
        target = writer.target_path(unit)
        existing = writer.read_existing(unit)
        if existing == unit.text:
            report.unchanged.append(target)
        if report.dry_run:
            if existing != unit.text:
                report.diffs[target] = self._render_diff(existing or "", unit.text, unit)
            return
        writer.write(unit)
        if existing != unit.text:
            report.written.append(target)

    def _discover(
        self,
        project_path: Path,
        config: TsExportConfig,
        allow: Optional[Sequence[str]],
    ) -> List[DeclarationDescriptor]:
        sources = self._sources
        if sources is None:
            sources = discover_sources(
                config.discovery.enabled,
                class_marker=config.markers.class_marker,
                interface_marker=config.markers.interface_marker,
            )
        self.logger.debug("Selected %d declaration sources", len(sources))
        source_filter = SourceFilter(
            allow=list(allow) if allow else list(config.sources),
            exclude=list(config.discovery.exclude_paths),
        )
        declarations = collect_declarations(project_path, sources, source_filter)
        self.logger.debug("Discovered %d exportable declarations", len(declarations))
        return declarations

    @staticmethod
    def _resolve_project(path: str) -> Path:
        project_path = Path(path).expanduser().resolve()
        if not project_path.exists():
            raise FileNotFoundError(f"Project path not found: {path}")
        if not project_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {path}")
        return project_path

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)

    @staticmethod
    def _render_diff(original: str, updated: str, unit: OutputUnit) -> str:
        name = unit.relative_path.as_posix()
        diff = difflib.unified_diff(
            original.splitlines(keepends=True),
            updated.splitlines(keepends=True),
            fromfile=f"{name} (existing)",
            tofile=f"{name} (generated)",
        )
        return "".join(diff)


__all__ = ["ExportReport", "Exporter"]
