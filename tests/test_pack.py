from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

import pytest

from gcode_looper.pipelines import pack
from gcode_looper.pipelines.pack import build_archive
from gcode_looper.utils.errors import IOFailure


def _tree(root: Path) -> Path:
    (root / "metadata").mkdir(parents=True)
    (root / "3D").mkdir()
    (root / "metadata" / "plate_1.gcode").write_text("G1 X1\n" * 100)
    (root / "3D" / "3dmodel.model").write_bytes(b"<model/>")
    (root / "[Content_Types].xml").write_bytes(b"<Types/>")
    return root


def test_archive_has_relative_sorted_deflated_members(tmp_path: Path):
    src = _tree(tmp_path / "input-1")
    dest = build_archive(src, tmp_path / "out.gcode.3mf")

    with ZipFile(dest) as zf:
        names = zf.namelist()
        assert names == ["[Content_Types].xml", "3D/3dmodel.model", "metadata/plate_1.gcode"]
        assert all(i.compress_type == ZIP_DEFLATED for i in zf.infolist())
        assert zf.read("metadata/plate_1.gcode") == b"G1 X1\n" * 100
        assert zf.testzip() is None


def test_existing_destination_is_replaced(tmp_path: Path):
    src = _tree(tmp_path / "input-1")
    dest = tmp_path / "out.gcode.3mf"
    dest.write_bytes(b"stale")
    build_archive(src, dest)
    with ZipFile(dest) as zf:
        assert "3D/3dmodel.model" in zf.namelist()


def test_missing_source_dir_raises(tmp_path: Path):
    with pytest.raises(IOFailure):
        build_archive(tmp_path / "nope", tmp_path / "out.3mf")
    assert not (tmp_path / "out.3mf").exists()


def test_file_vanishing_during_walk_is_skipped(tmp_path: Path, monkeypatch, caplog):
    src = tmp_path / "input-1"
    (src / "metadata").mkdir(parents=True)
    (src / "metadata" / "a.gcode").write_text("G1 X1\n")
    gone = src / "gone.png"
    gone.write_bytes(b"\x89PNG")

    walk = pack._iter_files

    def vanishing(root):
        for path in walk(root):
            if path == gone:
                path.unlink()
            yield path

    monkeypatch.setattr(pack, "_iter_files", vanishing)
    dest = build_archive(src, tmp_path / "out.gcode.3mf")

    with ZipFile(dest) as zf:
        assert zf.namelist() == ["metadata/a.gcode"]
    warnings = [r for r in caplog.records if r.levelname == "WARNING"]
    assert any("gone.png" in r.getMessage() for r in warnings)
