"""Configuration loading for tsexport (.tsexport.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .discovery.csharp import DEFAULT_CLASS_MARKER, DEFAULT_INTERFACE_MARKER

CONFIG_FILENAME = ".tsexport.yml"
DEFAULT_OUTPUT_DIR = "generated"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class DiscoveryConfig:
    """Declaration source enablement and exclusions."""

    enabled: Optional[List[str]] = None
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class MarkerConfig:
    """Marker interface names that tag exportable C# declarations."""

    class_marker: str = DEFAULT_CLASS_MARKER
    interface_marker: str = DEFAULT_INTERFACE_MARKER


@dataclass
class TsExportConfig:
    """Represents the settings defined in .tsexport.yml."""

    root: Path
    output_root: Path
    sources: List[str] = field(default_factory=list)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    markers: MarkerConfig = field(default_factory=MarkerConfig)
    file_extension: str = ".ts"
    indent: str = "  "


def load_config(config_path: Path) -> TsExportConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TsExportConfig(root=root, output_root=root / DEFAULT_OUTPUT_DIR)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    output_str = _as_str(data.get("output_root")) or DEFAULT_OUTPUT_DIR
    output_root = Path(output_str).expanduser()
    if not output_root.is_absolute():
        output_root = root / output_root

    discovery_data = _as_dict(data.get("discovery"))
    discovery = DiscoveryConfig()
    if discovery_data:
        if discovery_data.get("enabled") is not None:
            discovery.enabled = _as_str_list(discovery_data.get("enabled"))
        discovery.exclude_paths = _as_str_list(discovery_data.get("exclude_paths"))

    markers_data = _as_dict(data.get("markers"))
    markers = MarkerConfig(
        class_marker=_as_str(markers_data.get("class")) or DEFAULT_CLASS_MARKER,
        interface_marker=_as_str(markers_data.get("interface")) or DEFAULT_INTERFACE_MARKER,
    )

    extension = _as_str(data.get("file_extension")) or ".ts"
    if not extension.startswith("."):
        extension = f".{extension}"

    indent = data.get("indent")
    if isinstance(indent, int) and not isinstance(indent, bool):
        indent_str = " " * indent
    else:
        indent_str = _as_str(indent) or "  "

    return TsExportConfig(
        root=root,
        output_root=output_root,
        sources=_as_str_list(data.get("sources")),
        discovery=discovery,
        markers=markers,
        file_extension=extension,
        indent=indent_str,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DiscoveryConfig",
    "MarkerConfig",
    "TsExportConfig",
    "load_config",
]
