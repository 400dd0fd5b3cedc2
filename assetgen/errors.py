"""Exception types raised while building assets."""

from __future__ import annotations


class AssetgenError(RuntimeError):
    """Base class for failures reported by loaders and the orchestrator."""


class FileAccessError(AssetgenError):
    """Raised when an input file is missing or cannot be read."""


class CompileError(AssetgenError):
    """Raised when an external transform rejects its input."""


class WriteError(AssetgenError):
    """Raised when a build artifact cannot be written to its destination."""


class CompositionError(AssetgenError):
    """Raised when a loader graph is misconfigured, e.g. contains a cycle."""


__all__ = [
    "AssetgenError",
    "CompileError",
    "CompositionError",
    "FileAccessError",
    "WriteError",
]
