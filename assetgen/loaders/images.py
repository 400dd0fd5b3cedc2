"""Image loader that inlines files as data URLs for SCSS and TypeScript."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import Loader
from .utils import asset_name, common_path, data_url, mimetype_for, relative_to


@dataclass
class ImageManifest:
    """Embedded images in every representation the loader produces."""

    typescript: str
    scss: str
    mapping: Dict[str, str] = field(default_factory=dict)

    def __getitem__(self, identifier: str) -> str:
        return self.mapping[identifier]


class ImageLoader(Loader):
    """Maps every matched image to an identifier and an embedded data URL.

    Identifiers are derived from the path relative to the deepest directory
    shared by all matched files, so ``img/sub/b.png`` under ``img/`` becomes
    ``sub_b_png``. Files with an unknown extension are dropped.
    """

    kind = "images"

    def __init__(
        self,
        input_glob: str,
        *,
        output_scss: Optional[str] = None,
        output_ts: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.input_glob = input_glob
        self.output_scss = output_scss
        self.output_ts = output_ts

    def output(self, *, scss: Optional[str] = None, ts: Optional[str] = None) -> "ImageLoader":
        if scss is not None:
            self.output_scss = scss
        if ts is not None:
            self.output_ts = ts
        return self

    @property
    def input_paths(self) -> List[str]:
        return [self.input_glob]

    @property
    def outputs(self) -> Dict[str, Optional[str]]:
        return {"scss": self.output_scss, "ts": self.output_ts}

    def compute(self) -> Optional[ImageManifest]:
        files = self.collect(self.input_glob)
        if not files:
            return None

        ancestor = common_path(files)
        mapping: Dict[str, str] = {}
        for path in files:
            mimetype = mimetype_for(path)
            if mimetype is None:
                self.logger.debug("Skipping %s: unrecognised image type", path)
                continue
            identifier = asset_name(relative_to(path, ancestor))
            if identifier in mapping:
                self.logger.warning(
                    "%s and an earlier image both map to %s; keeping %s", path, identifier, path
                )
            mapping[identifier] = data_url(self.read(path), mimetype)

        manifest = ImageManifest(
            typescript="\n".join(f"export const {name} = '{url}';" for name, url in mapping.items()),
            scss="\n".join(f"${name}: '{url}';" for name, url in mapping.items()),
            mapping=mapping,
        )
        self.write(self.output_ts, manifest.typescript)
        self.write(self.output_scss, manifest.scss)
        return manifest


__all__ = ["ImageLoader", "ImageManifest"]
