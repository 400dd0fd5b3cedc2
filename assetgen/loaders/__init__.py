"""Loader implementations and construction from configuration."""

from __future__ import annotations

from importlib import metadata
from typing import Any, Dict, Iterable, List, Type

from ..config import AssetgenConfig, ConfigError, LoaderConfig, LoaderReference
from ..fs import Hasher
from ..matching import GlobMatcher, PathMatcher
from .base import Loader
from .fonts import FontLoader
from .images import ImageLoader, ImageManifest
from .styles import StyleLoader
from .templates import LiteralValue, LoaderValue, TemplateLoader

_ENTRY_POINT_GROUP = "assetgen.loaders"

_BUILTIN_LOADERS: Dict[str, Type[Loader]] = {
    "fonts": FontLoader,
    "images": ImageLoader,
    "styles": StyleLoader,
    "template": TemplateLoader,
}

_OUTPUT_FORMATS: Dict[Type[Loader], tuple[str, ...]] = {
    FontLoader: ("scss",),
    ImageLoader: ("scss", "ts"),
    StyleLoader: ("css",),
    TemplateLoader: ("html",),
}


def available_loaders() -> Dict[str, Type[Loader]]:
    """Return built-in loader types plus those registered as entry points."""
    registry = dict(_BUILTIN_LOADERS)
    for entry in _iter_entry_points():
        name = entry.name.lower()
        if name in registry:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - broken plugin install
            raise RuntimeError(f"Failed to load loader entry point '{entry.name}': {exc}") from exc
        if not (isinstance(loaded, type) and issubclass(loaded, Loader)):
            raise TypeError(f"Loader entry point '{entry.name}' must be a Loader subclass")
        registry[name] = loaded
    return registry


def build_loaders(
    config: AssetgenConfig,
    *,
    matcher: PathMatcher | None = None,
    hasher: Hasher | None = None,
) -> List[Loader]:
    """Instantiate the configured loaders and wire their compositions.

    Returns the top-level loaders in declaration order. Loaders declared with
    ``top_level: false`` are only reachable through composition.
    """
    registry = available_loaders()
    common: Dict[str, Any] = {
        "matcher": matcher or GlobMatcher(config.root),
        "hasher": hasher,
        "skip_unchanged_writes": config.build.skip_unchanged_writes,
    }

    built: List[tuple[LoaderConfig, Loader]] = []
    named: Dict[str, Loader] = {}
    for loader_config in config.loaders:
        loader = _instantiate(loader_config, registry, common)
        built.append((loader_config, loader))
        if loader_config.name:
            named[loader_config.name] = loader

    for loader_config, loader in built:
        _attach_data(loader_config, loader, named, registry, common)

    return [loader for loader_config, loader in built if loader_config.top_level]


def _instantiate(
    loader_config: LoaderConfig, registry: Dict[str, Type[Loader]], common: Dict[str, Any]
) -> Loader:
    loader_cls = registry.get(loader_config.type)
    if loader_cls is None:
        known = ", ".join(sorted(registry))
        raise ConfigError(f"Unknown loader type '{loader_config.type}' (expected one of: {known})")

    formats = _OUTPUT_FORMATS.get(loader_cls)
    if formats is not None:
        unknown = sorted(set(loader_config.output) - set(formats))
        if unknown:
            raise ConfigError(
                f"Loader '{loader_config.name or loader_config.type}' does not produce: {', '.join(unknown)}"
            )

    kwargs: Dict[str, Any] = dict(common)
    kwargs.update(loader_config.options)
    kwargs.update({f"output_{fmt}": path for fmt, path in loader_config.output.items()})
    try:
        return loader_cls(loader_config.input, name=loader_config.name, **kwargs)
    except TypeError as exc:
        raise ConfigError(f"Invalid options for loader '{loader_config.type}': {exc}") from exc


def _attach_data(
    loader_config: LoaderConfig,
    loader: Loader,
    named: Dict[str, Loader],
    registry: Dict[str, Type[Loader]],
    common: Dict[str, Any],
) -> None:
    if not loader_config.data:
        return
    if not isinstance(loader, TemplateLoader):
        raise ConfigError(f"Loader type '{loader_config.type}' does not accept data")
    for key, value in loader_config.data.items():
        if isinstance(value, LoaderReference):
            target = named.get(value.name)
            if target is None:
                raise ConfigError(f"Data '{key}' references unknown loader '{value.name}'")
            loader.data(key, target)
        elif isinstance(value, LoaderConfig):
            child = _instantiate(value, registry, common)
            _attach_data(value, child, named, registry, common)
            loader.data(key, child)
        else:
            loader.data(key, value)


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points(group=_ENTRY_POINT_GROUP)


__all__ = [
    "FontLoader",
    "ImageLoader",
    "ImageManifest",
    "LiteralValue",
    "Loader",
    "LoaderValue",
    "StyleLoader",
    "TemplateLoader",
    "available_loaders",
    "build_loaders",
]
