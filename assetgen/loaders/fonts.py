"""Font family loader producing SCSS mixins with embedded font data."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional

from .base import Loader
from .utils import MIMETYPES, asset_name, data_url, extension

# Highest priority first.
FONT_FORMATS: tuple[tuple[str, str], ...] = (
    ("woff2", "woff2"),
    ("woff", "woff"),
    ("ttf", "truetype"),
)
_CSS_FORMAT = dict(FONT_FORMATS)


class FontLoader(Loader):
    """Emits one ``@mixin`` per font family, embedding its best available format."""

    kind = "fonts"

    def __init__(self, input_glob: str, *, output_scss: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.input_glob = input_glob
        self.output_scss = output_scss

    def output(self, scss: str) -> "FontLoader":
        self.output_scss = scss
        return self

    @property
    def input_paths(self) -> List[str]:
        return [self.input_glob]

    @property
    def outputs(self) -> Dict[str, Optional[str]]:
        return {"scss": self.output_scss}

    def compute(self) -> Optional[str]:
        files = self.collect(self.input_glob)
        if not files:
            return None

        families: Dict[str, Dict[str, str]] = {}
        for path in files:
            ext = extension(path)
            if ext not in _CSS_FORMAT:
                self.logger.debug("Skipping %s: not a font format", path)
                continue
            content = self.read(path)
            family = asset_name(PurePosixPath(path).stem)
            families.setdefault(family, {})[ext] = data_url(content, MIMETYPES[ext])

        mixins = [block for block in (_mixin(name, fmts) for name, fmts in families.items()) if block]
        result = "\n".join(mixins)
        self.write(self.output_scss, result)
        return result


def _mixin(family: str, available: Dict[str, str]) -> Optional[str]:
    for ext, css_format in FONT_FORMATS:
        url = available.get(ext)
        if url:
            return (
                f"@mixin {family} {{\n"
                f"\tfont-family: '{family}';\n"
                f"\tsrc: url({url}) format('{css_format}');\n"
                "}\n"
            )
    return None


__all__ = ["FONT_FORMATS", "FontLoader"]
