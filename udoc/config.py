"""Configuration loading for udoc (.udoc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

CONFIG_FILENAME = ".udoc.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class UdocConfig:
    """Project defaults read from .udoc.yml; command-line flags override them."""

    root: Path
    backend: Optional[str] = None
    output_dir: Optional[Path] = None
    title: Optional[str] = None
    index_name: Optional[str] = None
    coqlib_url: Optional[str] = None
    assets_dir: Optional[Path] = None
    mappings: List[Tuple[str, str]] = field(default_factory=list)
    externals: Dict[str, str] = field(default_factory=dict)


def load_config(config_path: Path) -> UdocConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return UdocConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    backend = _as_str(data.get("backend"))
    if backend is not None and backend not in {"html", "jscoq", "debug"}:
        raise ConfigError(f"Unknown backend in {CONFIG_FILENAME}: {backend}")

    output_dir_str = _as_str(data.get("output_dir"))
    assets_dir_str = _as_str(data.get("assets_dir"))

    mappings: List[Tuple[str, str]] = []
    for entry in _as_list(data.get("mappings")):
        if not isinstance(entry, dict) or "path" not in entry:
            raise ConfigError("Each entry in 'mappings' needs a 'path' and a 'name'")
        path = _as_str(entry.get("path")) or ""
        name = _as_str(entry.get("name")) or ""
        mappings.append((str(root / path), name))

    externals: Dict[str, str] = {}
    for logical_name, url in _as_dict(data.get("externals")).items():
        url_str = _as_str(url)
        if url_str:
            externals[str(logical_name)] = url_str

    return UdocConfig(
        root=root,
        backend=backend,
        output_dir=root / output_dir_str if output_dir_str else None,
        title=_as_str(data.get("title")),
        index_name=_as_str(data.get("index_name")),
        coqlib_url=_as_str(data.get("coqlib")),
        assets_dir=root / assets_dir_str if assets_dir_str else None,
        mappings=mappings,
        externals=externals,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> Sequence[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    raise ConfigError("Expected a list")


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


__all__ = ["CONFIG_FILENAME", "ConfigError", "UdocConfig", "load_config"]
