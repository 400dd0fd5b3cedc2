"""Incremental asset bundling with cached loaders and watch-driven rebuilds."""

from .loaders import FontLoader, ImageLoader, Loader, StyleLoader, TemplateLoader
from .models import ChangeDescriptor
from .orchestrator import BuildReport, Orchestrator

__all__ = [
    "BuildReport",
    "ChangeDescriptor",
    "FontLoader",
    "ImageLoader",
    "Loader",
    "Orchestrator",
    "StyleLoader",
    "TemplateLoader",
]
