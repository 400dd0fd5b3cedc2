"""Template loader rendering Jinja2 pages from literal and loader-provided data."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound

from ..errors import CompileError, CompositionError, FileAccessError
from ..models import ChangeDescriptor
from .base import Loader, flatten_paths


@dataclass(frozen=True)
class LiteralValue:
    """A data slot passed to the template unchanged."""

    value: Any


@dataclass(frozen=True)
class LoaderValue:
    """A data slot filled with the output of another loader."""

    loader: Loader


DataSlot = Union[LiteralValue, LoaderValue]


class TemplateLoader(Loader):
    """Renders one template, resolving composed loaders first.

    Child loaders are invoked with the same change as the template so that
    each decides on its own whether to serve its cache. The template itself
    is rendered on every load because its output depends on those values.
    """

    kind = "template"

    def __init__(
        self,
        entry: str,
        *,
        output_html: Optional[str] = None,
        environment: Environment | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.entry = entry
        self.output_html = output_html
        self._environment = environment
        self._slots: Dict[str, DataSlot] = {}

    def output(self, html: str) -> "TemplateLoader":
        self.output_html = html
        return self

    def data(self, key: str, value: Any) -> "TemplateLoader":
        """Register a named value; loaders are resolved at load time."""
        if isinstance(value, (LiteralValue, LoaderValue)):
            slot: DataSlot = value
        elif isinstance(value, Loader):
            slot = LoaderValue(value)
        else:
            slot = LiteralValue(value)
        if isinstance(slot, LoaderValue):
            _ensure_acyclic(self, slot.loader)
        self._slots[key] = slot
        return self

    @property
    def slots(self) -> Dict[str, DataSlot]:
        return dict(self._slots)

    def dependencies(self) -> List[Loader]:
        return [slot.loader for slot in self._slots.values() if isinstance(slot, LoaderValue)]

    @property
    def input_paths(self) -> List[str]:
        return flatten_paths([[self.entry], *(child.input_paths for child in self.dependencies())])

    @property
    def watch_patterns(self) -> List[str]:
        return flatten_paths([[self.entry], *(child.watch_patterns for child in self.dependencies())])

    @property
    def outputs(self) -> Dict[str, Optional[str]]:
        return {"html": self.output_html}

    def load(self, change: ChangeDescriptor | None = None) -> Optional[str]:
        values = self.resolve(change)
        self.cache.reset()
        self.logger.info("Rendering %s", self.name)
        result = self._compute_or_reset(lambda: self.render(values))
        self.cache.result = result
        return result

    def resolve(self, change: ChangeDescriptor | None = None) -> Dict[str, Any]:
        """Load every composed loader and collect the template variables.

        A loader that produced nothing leaves its key undefined, which Jinja2
        renders as an empty string.
        """
        values: Dict[str, Any] = {}
        for key, slot in self._slots.items():
            if isinstance(slot, LoaderValue):
                result = slot.loader.load(change)
                if result is not None:
                    values[key] = result
            else:
                values[key] = slot.value
        return values

    def compute(self) -> Optional[str]:
        return self.render(self.resolve(None))

    def render(self, values: Dict[str, Any]) -> Optional[str]:
        files = self.collect(self.entry)
        if not files:
            return None
        entry = files[0]
        # Render the exact bytes that were fingerprinted.
        content = self.read(entry)
        environment = self._environment or self._default_environment(entry)
        try:
            source = content.decode("utf-8")
            html = environment.from_string(source).render(**values)
        except TemplateNotFound as exc:
            raise FileAccessError(f"Template not found while rendering {entry}: {exc}") from exc
        except (TemplateError, UnicodeDecodeError) as exc:
            raise CompileError(f"Failed to render {entry}: {exc}") from exc
        self.write(self.output_html, html, skip_empty=False)
        return html

    def _default_environment(self, entry: str) -> Environment:
        self._environment = Environment(
            loader=FileSystemLoader(posixpath.dirname(entry)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        return self._environment


def _ensure_acyclic(parent: Loader, child: Loader) -> None:
    if child is parent or _reaches(child, parent):
        raise CompositionError(
            f"Composing {child.name} into {parent.name} would create a cycle"
        )


def _reaches(start: Loader, target: Loader) -> bool:
    stack = [start]
    visited: set[int] = set()
    while stack:
        current = stack.pop()
        if current is target:
            return True
        if id(current) in visited:
            continue
        visited.add(id(current))
        stack.extend(current.dependencies())
    return False


__all__ = ["DataSlot", "LiteralValue", "LoaderValue", "TemplateLoader"]
