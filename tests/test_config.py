"""Tests for assetgen.config and loader construction."""

from __future__ import annotations

from pathlib import Path

import pytest

from assetgen.config import (
    AssetgenConfig,
    ConfigError,
    LoaderConfig,
    LoaderReference,
    load_config,
)
from assetgen.errors import CompositionError
from assetgen.loaders import FontLoader, StyleLoader, TemplateLoader, build_loaders
from assetgen.loaders.templates import LiteralValue, LoaderValue


def _write_config(root: Path, text: str) -> Path:
    config_file = root / ".assetgen.yml"
    config_file.write_text(text, encoding="utf-8")
    return config_file


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, AssetgenConfig)
    assert config.root == tmp_path.resolve()
    assert config.loaders == []
    assert config.watch.paths == []
    assert config.watch.ignore == []
    assert config.watch.debounce == 0.0
    assert config.build.fail_fast is False
    assert config.build.skip_unchanged_writes is False
    assert config.log_file is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = _write_config(
        tmp_path,
        """
build:
  fail_fast: true
  skip_unchanged_writes: yes
watch:
  paths: ["src/**"]
  ignore:
    - "dist/**"
  debounce: 0.2
log_file: logs/assetgen.log
loaders:
  - name: fonts
    type: fonts
    input: "src/fonts/*.{woff2,ttf}"
    output:
      scss: dist/fonts.scss
  - type: Template
    input: src/index.html
    output:
      html: dist/index.html
    data:
      title: CV
      fonts: {loader: fonts}
      styles:
        loader:
          type: styles
          input: src/cv.scss
""",
    )

    config = load_config(config_file)

    assert config.root == tmp_path.resolve()
    assert config.build.fail_fast is True
    assert config.build.skip_unchanged_writes is True
    assert config.watch.paths == ["src/**"]
    assert config.watch.ignore == ["dist/**"]
    assert config.watch.debounce == pytest.approx(0.2)
    assert config.log_file == tmp_path.resolve() / "logs/assetgen.log"

    fonts, template = config.loaders
    assert fonts == LoaderConfig(
        type="fonts",
        input="src/fonts/*.{woff2,ttf}",
        name="fonts",
        output={"scss": "dist/fonts.scss"},
    )
    assert template.type == "template"
    assert template.data["title"] == "CV"
    assert template.data["fonts"] == LoaderReference(name="fonts")
    inline = template.data["styles"]
    assert isinstance(inline, LoaderConfig)
    assert inline.type == "styles"
    assert inline.top_level is False


@pytest.mark.parametrize(
    "text, message",
    [
        ("loaders: fonts\n", "must be a list"),
        ("loaders:\n  - input: a\n", "missing 'type'"),
        ("loaders:\n  - type: fonts\n", "missing 'input'"),
        ("loaders:\n  - {type: styles, input: a.scss, output: a.css}\n", "must map formats"),
        (
            "loaders:\n  - {name: x, type: fonts, input: a}\n  - {name: x, type: fonts, input: b}\n",
            "Duplicate loader names: x",
        ),
        ("watch:\n  debounce: -1\n", "must not be negative"),
        ("loaders: [\n", "Failed to parse"),
        ("- just\n- a list\n", "mapping at the root"),
    ],
)
def test_load_config_rejects_invalid_files(tmp_path: Path, text: str, message: str) -> None:
    _write_config(tmp_path, text)

    with pytest.raises(ConfigError, match=message):
        load_config(tmp_path)


def test_build_loaders_wires_named_and_inline_children(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
loaders:
  - name: fonts
    type: fonts
    input: "fonts/*.ttf"
    top_level: false
  - name: page
    type: template
    input: index.html
    output: {html: dist/index.html}
    data:
      title: CV
      fonts: {loader: fonts}
      styles:
        loader: {type: styles, input: cv.scss, output: {css: dist/cv.css}}
""",
    )
    config = load_config(tmp_path)

    loaders = build_loaders(config)

    assert [loader.name for loader in loaders] == ["page"]
    (page,) = loaders
    assert isinstance(page, TemplateLoader)
    slots = page.slots
    assert slots["title"] == LiteralValue("CV")
    assert isinstance(slots["fonts"], LoaderValue)
    assert isinstance(slots["fonts"].loader, FontLoader)
    styles = slots["styles"].loader
    assert isinstance(styles, StyleLoader)
    assert styles.outputs == {"css": "dist/cv.css"}
    assert page.outputs == {"html": "dist/index.html"}


def test_build_loaders_shares_named_loader_between_templates(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
loaders:
  - {name: fonts, type: fonts, input: "fonts/*.ttf"}
  - {type: template, input: a.html, data: {fonts: {loader: fonts}}}
  - {type: template, input: b.html, data: {fonts: {loader: fonts}}}
""",
    )

    fonts, first, second = build_loaders(load_config(tmp_path))

    assert first.dependencies() == [fonts]
    assert second.dependencies() == [fonts]


@pytest.mark.parametrize(
    "text, message",
    [
        ("loaders:\n  - {type: sprites, input: a}\n", "Unknown loader type 'sprites'"),
        ("loaders:\n  - {type: fonts, input: a, output: {css: a.css}}\n", "does not produce: css"),
        ("loaders:\n  - {type: fonts, input: a, options: {colour: red}}\n", "Invalid options"),
        ("loaders:\n  - {type: fonts, input: a, data: {x: 1}}\n", "does not accept data"),
        (
            "loaders:\n  - {type: template, input: a.html, data: {x: {loader: missing}}}\n",
            "unknown loader 'missing'",
        ),
    ],
)
def test_build_loaders_rejects_invalid_wiring(tmp_path: Path, text: str, message: str) -> None:
    _write_config(tmp_path, text)

    with pytest.raises(ConfigError, match=message):
        build_loaders(load_config(tmp_path))


def test_build_loaders_rejects_cycles(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
loaders:
  - {name: a, type: template, input: a.html, data: {b: {loader: b}}}
  - {name: b, type: template, input: b.html, data: {a: {loader: a}}}
""",
    )

    with pytest.raises(CompositionError, match="cycle"):
        build_loaders(load_config(tmp_path))
