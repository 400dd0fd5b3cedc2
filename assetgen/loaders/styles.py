"""Stylesheet loader delegating to the libsass compiler."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

import sass

from ..errors import CompileError
from .base import Loader

StyleCompiler = Callable[[str], str]

# An entry stylesheet usually imports partials, fonts and generated image
# variables that live outside its own path.
RELATED_PATTERNS: tuple[str, ...] = ("**/*.{scss,sass,woff2,woff,ttf}",)


def compile_scss(path: str, *, output_style: str = "compressed") -> str:
    """Compile the stylesheet at ``path`` with libsass."""
    try:
        return sass.compile(filename=path, output_style=output_style)
    except sass.CompileError as exc:
        raise CompileError(f"Failed to compile {path}: {exc}") from exc


class StyleLoader(Loader):
    """Compiles one entry stylesheet into CSS.

    Any change to a related file type counts as relevant because the entry's
    imports are not known up front. Only the entry's fingerprint is recorded,
    so re-saving an unchanged entry is served from cache while an edited
    partial always forces a recompile.
    """

    kind = "styles"

    def __init__(
        self,
        entry: str,
        *,
        output_css: Optional[str] = None,
        compiler: StyleCompiler | None = None,
        related_patterns: Sequence[str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.entry = entry
        self.output_css = output_css
        self.compiler: StyleCompiler = compiler or compile_scss
        self.related_patterns = list(related_patterns) if related_patterns else list(RELATED_PATTERNS)

    def output(self, css: str) -> "StyleLoader":
        self.output_css = css
        return self

    @property
    def input_paths(self) -> List[str]:
        return [self.entry]

    @property
    def watch_patterns(self) -> List[str]:
        return list(self.related_patterns)

    @property
    def outputs(self) -> Dict[str, Optional[str]]:
        return {"css": self.output_css}

    def compute(self) -> Optional[str]:
        files = self.collect(self.entry)
        if not files:
            return None
        entry = files[0]
        self.read(entry)
        css = self.compiler(entry)
        self.write(self.output_css, css, skip_empty=False)
        return css


__all__ = ["RELATED_PATTERNS", "StyleCompiler", "StyleLoader", "compile_scss"]
