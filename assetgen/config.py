"""Configuration loading for assetgen (.assetgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

CONFIG_FILENAME = ".assetgen.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LoaderReference:
    """Data slot pointing at another loader declared by name."""

    name: str


@dataclass
class LoaderConfig:
    """One loader entry from the ``loaders`` list."""

    type: str
    input: str
    name: Optional[str] = None
    output: Dict[str, str] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)
    top_level: bool = True


@dataclass
class WatchConfig:
    """File watching settings."""

    paths: List[str] = field(default_factory=list)
    ignore: List[str] = field(default_factory=list)
    debounce: float = 0.0


@dataclass
class BuildConfig:
    """Build pass behaviour."""

    fail_fast: bool = False
    skip_unchanged_writes: bool = False


@dataclass
class AssetgenConfig:
    """Represents the settings defined in .assetgen.yml."""

    root: Path
    loaders: List[LoaderConfig] = field(default_factory=list)
    watch: WatchConfig = field(default_factory=WatchConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    log_file: Optional[Path] = None


DataValue = Union[LoaderReference, LoaderConfig, Any]


def load_config(config_path: Path) -> AssetgenConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent

    if not config_file.exists():
        return AssetgenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    build_data = _as_dict(data.get("build"))
    build = BuildConfig(
        fail_fast=_as_bool(build_data.get("fail_fast")) or False,
        skip_unchanged_writes=_as_bool(build_data.get("skip_unchanged_writes")) or False,
    )

    watch_data = _as_dict(data.get("watch"))
    debounce = _as_float(watch_data.get("debounce"))
    if debounce is not None and debounce < 0:
        raise ConfigError("watch.debounce must not be negative")
    watch = WatchConfig(
        paths=_as_str_list(watch_data.get("paths")),
        ignore=_as_str_list(watch_data.get("ignore")),
        debounce=debounce or 0.0,
    )

    raw_loaders = data.get("loaders") or []
    if not isinstance(raw_loaders, list):
        raise ConfigError("loaders must be a list of loader definitions")
    loaders = [_parse_loader(raw, f"loaders[{index}]") for index, raw in enumerate(raw_loaders)]

    names = [loader.name for loader in loaders if loader.name]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate loader names: {', '.join(duplicates)}")

    log_file_str = _as_str(data.get("log_file"))

    return AssetgenConfig(
        root=root,
        loaders=loaders,
        watch=watch,
        build=build,
        log_file=root / log_file_str if log_file_str else None,
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
    return loaded or {}


def _parse_loader(raw: Any, where: str, *, top_level: bool = True) -> LoaderConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"{where} must be a mapping")
    loader_type = _as_str(raw.get("type"))
    if not loader_type:
        raise ConfigError(f"{where} is missing 'type'")
    input_pattern = _as_str(raw.get("input"))
    if not input_pattern:
        raise ConfigError(f"{where} is missing 'input'")

    output = raw.get("output")
    if isinstance(output, str):
        raise ConfigError(f"{where}.output must map formats to paths, e.g. {{css: dist/app.css}}")
    outputs = {str(key): str(value) for key, value in _as_dict(output).items() if value}

    data = {
        str(key): _parse_data_value(value, f"{where}.data.{key}")
        for key, value in _as_dict(raw.get("data")).items()
    }

    declared_top_level = _as_bool(raw.get("top_level"))
    return LoaderConfig(
        type=loader_type.lower(),
        input=input_pattern,
        name=_as_str(raw.get("name")),
        output=outputs,
        data=data,
        options=dict(_as_dict(raw.get("options"))),
        top_level=top_level if declared_top_level is None else declared_top_level,
    )


def _parse_data_value(value: Any, where: str) -> DataValue:
    if isinstance(value, dict) and set(value) == {"loader"}:
        target = value["loader"]
        if isinstance(target, str):
            return LoaderReference(name=target)
        return _parse_loader(target, f"{where}.loader", top_level=False)
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "AssetgenConfig",
    "BuildConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "LoaderConfig",
    "LoaderReference",
    "WatchConfig",
    "load_config",
]
