"""In-memory stores backing loader caches."""

from .result_cache import ResultCache

__all__ = ["ResultCache"]
