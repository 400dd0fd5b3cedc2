from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List

import pytest

import assetgen.loaders.base as loader_base
from tests._fixtures.asset_tree import AssetTree


@pytest.fixture
def asset_tree(tmp_path: Path) -> AssetTree:
    """Provide a project tree rooted under the pytest tmp_path."""
    return AssetTree(tmp_path)


@pytest.fixture
def read_log(monkeypatch: pytest.MonkeyPatch) -> List[str]:
    """Record every source file a loader reads."""
    reads: List[str] = []
    original = loader_base.read_source

    def _recording_read(path):
        reads.append(str(path))
        return original(path)

    monkeypatch.setattr(loader_base, "read_source", _recording_read)
    return reads


@pytest.fixture
def assetgen_log(caplog: pytest.LogCaptureFixture) -> Iterator[pytest.LogCaptureFixture]:
    """Capture assetgen records even after configure_logging disabled propagation."""
    logger = logging.getLogger("assetgen")
    caplog.set_level(logging.DEBUG, logger="assetgen")
    logger.addHandler(caplog.handler)
    yield caplog
    logger.removeHandler(caplog.handler)
