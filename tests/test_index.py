from pathlib import Path

import pytest

from gcode_looper.pipelines.index import (
    find_metadata_directory,
    list_top_level_toolpaths,
    normalize_entry_path,
    open_archive,
    scan_toolpaths,
    sizes_of,
)
from gcode_looper.utils.errors import IOFailure, NoToolpathFound


def test_scan_keeps_archive_order_and_top_level_only(make_3mf):
    """Only direct children of metadata/ ending in .gcode qualify."""
    archive = make_3mf(
        "A.gcode.3mf",
        {
            "metadata/plate_2.gcode": "G1\n",
            "metadata/plate_1.gcode": "G1 X1\n",
            "metadata/sub/plate_9.gcode": "G1\n",
            "plate_3.gcode": "G1\n",
            "metadata/plate_1.png": b"png",
            "metadata/notes.gcode.md5": "abc",
        },
    )
    names = [c.name for c in scan_toolpaths(archive)]
    assert names == ["plate_2.gcode", "plate_1.gcode"]


def test_directory_and_suffix_match_case_insensitively(make_3mf):
    archive = make_3mf("A.3mf", {"Metadata/Plate_1.GCODE": "G1\n"})
    assert list_top_level_toolpaths(archive) == ["Plate_1.GCODE"]


def test_sizes_are_reported(make_3mf):
    body = "G1 X1 Y1\n" * 200
    archive = make_3mf("A.3mf", {"metadata/plate_1.gcode": body})
    sizes = sizes_of(archive)["plate_1.gcode"]
    assert sizes.uncompressed_size == len(body)
    assert 0 < sizes.compressed_size < len(body)


def test_no_toolpath_raises(make_3mf):
    archive = make_3mf("A.3mf", {"metadata/plate_1.png": b"png"})
    assert scan_toolpaths(archive) == []
    with pytest.raises(NoToolpathFound):
        list_top_level_toolpaths(archive)


def test_entries_are_lazy_and_complete(make_3mf):
    archive = make_3mf("A.3mf", {"metadata/plate_1.gcode": "G1\n"})
    with open_archive(archive) as handle:
        entries = handle.entries()
        first = next(entries)
        rest = list(entries)
    assert first.name == "3D/3dmodel.model"
    assert [e.name for e in rest] == ["metadata/plate_1.gcode"]
    assert all(e.is_file for e in rest)


def test_not_a_zip_raises_io_failure(tmp_path: Path):
    bogus = tmp_path / "bogus.3mf"
    bogus.write_text("not a zip")
    with pytest.raises(IOFailure):
        scan_toolpaths(bogus)


@pytest.mark.parametrize(
    "raw,norm",
    [("metadata/a.gcode", "metadata/a.gcode"), ("./metadata/a.gcode", "metadata/a.gcode"),
     ("/metadata/a.gcode", "metadata/a.gcode"), ("metadata\\a.gcode", "metadata/a.gcode")],
)
def test_normalize_entry_path(raw, norm):
    assert normalize_entry_path(raw) == norm


def test_find_metadata_directory(tmp_path: Path):
    """Exact case wins, otherwise a case-insensitive match, else None."""
    root = tmp_path / "x"
    root.mkdir()
    assert find_metadata_directory(root) is None

    (root / "Metadata").mkdir()
    assert find_metadata_directory(root) == root / "Metadata"

    (root / "metadata").mkdir(exist_ok=True)
    found = find_metadata_directory(root)
    assert found is not None and found.name.lower() == "metadata"
