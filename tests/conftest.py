"""Pytest configuration and archive-building fixtures for gcode_looper tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping
from zipfile import ZIP_DEFLATED, ZipFile

import pytest

from helpers import MODEL_XML


@pytest.fixture
def make_3mf(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing a ``.gcode.3mf`` archive into *tmp_path*.

    ``make_3mf("A.gcode.3mf", {"metadata/plate_1.gcode": "..."})`` adds the
    given members plus a model file, in insertion order.
    """

    def _make(name: str, members: Mapping[str, str | bytes], *, with_model: bool = True) -> Path:
        path = tmp_path / name
        with ZipFile(path, "w", compression=ZIP_DEFLATED) as zf:
            if with_model:
                zf.writestr("3D/3dmodel.model", MODEL_XML)
            for member, data in members.items():
                zf.writestr(member, data)
        return path

    return _make


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    """Isolated parent directory for per-run working directories."""
    root = tmp_path / "work"
    root.mkdir()
    return root
