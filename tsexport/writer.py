"""Writes rendered output units beneath the output root."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .logging import get_logger
from .models import OutputUnit


class OutputWriter:
    """Creates directories as needed and always overwrites existing files."""

    def __init__(self, output_root: Path) -> None:
        self.output_root = output_root
        self.logger = get_logger("writer")

    def target_path(self, unit: OutputUnit) -> Path:
        return self.output_root.joinpath(*unit.relative_path.parts)

    def read_existing(self, unit: OutputUnit) -> Optional[str]:
        path = self.target_path(unit)
        try:
            return path.read_bytes().decode("utf-8")
        except FileNotFoundError:
            return None

    def write(self, unit: OutputUnit) -> Path:
        path = self.target_path(unit)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Bytes avoid platform newline translation so reruns stay byte-identical.
        path.write_bytes(unit.text.encode("utf-8"))
        self.logger.debug("Wrote %s", path)
        return path


__all__ = ["OutputWriter"]
