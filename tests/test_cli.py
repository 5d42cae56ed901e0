import importlib
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from gcode_looper import __version__
from gcode_looper.cli import main
from gcode_looper.config.loader import ENV_VAR
from gcode_looper.pipelines.types import InputSelection, ToolpathCandidate
from gcode_looper.utils.logging import LOG_DIR_ENV
from helpers import gcode_text

cli_mod = importlib.import_module("gcode_looper.cli")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    monkeypatch.delenv(ENV_VAR, raising=False)
    monkeypatch.delenv(LOG_DIR_ENV, raising=False)
    yield
    # drop handlers bound to CliRunner's streams
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)


@pytest.fixture
def single(make_3mf):
    return make_3mf("Benchy.gcode.3mf", {"metadata/plate_1.gcode": gcode_text(30, (1, 1, 0, 0))})


@pytest.fixture
def multi(make_3mf):
    return make_3mf(
        "Multi.gcode.3mf",
        {
            "metadata/plate_1.gcode": gcode_text(10, (1, 0, 0, 0)),
            "metadata/plate_2.gcode": gcode_text(20, (1, 0, 0, 0)),
        },
    )


def test_count_run_reports_done(single, tmp_path: Path):
    res = CliRunner().invoke(main, ["3", str(single)])
    assert res.exit_code == 0, res.output
    assert "Done: Loop X 3 - 1h30m - 6g - Benchy.gcode.3mf" in res.output
    assert "Estimate:" in res.output
    assert (tmp_path / "Loop X 3 - 1h30m - 6g - Benchy.gcode.3mf").exists()
    assert "Hint:" not in res.output


def test_mass_run(single, tmp_path: Path):
    res = CliRunner().invoke(main, ["7g", str(single)])
    assert res.exit_code == 0, res.output
    assert (tmp_path / "Loop X 3 - 1h30m - 6g - Benchy.gcode.3mf").exists()


def test_invalid_spec_is_a_usage_error(single):
    res = CliRunner().invoke(main, ["lots", str(single)])
    assert res.exit_code == 2
    assert "Invalid loop specifier" in res.output


def test_conflicting_selection_flags(single):
    res = CliRunner().invoke(main, ["2", "--all-gcodes", "--first-gcode", str(single)])
    assert res.exit_code == 2
    assert "only one of" in res.output


def test_ambiguous_archive_needs_a_flag(multi, tmp_path: Path):
    res = CliRunner().invoke(main, ["2", str(multi)])
    assert res.exit_code == 1
    assert "--first-gcode" in res.output
    assert not list(tmp_path.glob("Loop X *"))

    res = CliRunner().invoke(main, ["2", "--first-gcode", str(multi)])
    assert res.exit_code == 0, res.output
    assert (tmp_path / "Loop X 2 - 20m - 2g - Multi.gcode.3mf").exists()


def test_zero_loops_exit_code(single):
    res = CliRunner().invoke(main, ["10m", str(single)])
    assert res.exit_code == 1
    assert "Target yields 0 loops" in res.output


def test_missing_input(tmp_path: Path):
    res = CliRunner().invoke(main, ["2", str(tmp_path / "absent.3mf")])
    assert res.exit_code == 1
    assert "does not exist" in res.output


def test_no_inputs():
    res = CliRunner().invoke(main, ["2"])
    assert res.exit_code == 1
    assert "Missing input archives" in res.output


def test_invalid_config_file(single, tmp_path: Path):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("streaming:\n  chunk_size: 0\n")
    res = CliRunner().invoke(main, ["--config", str(cfg), "2", str(single)])
    assert res.exit_code == 1
    assert "Invalid configuration" in res.output


def test_version_and_help():
    res = CliRunner().invoke(main, ["--version"])
    assert res.exit_code == 0
    assert __version__ in res.output
    res = CliRunner().invoke(main, ["-h"])
    assert res.exit_code == 0
    assert "--all-gcodes" in res.output


def test_interactive_selection_and_hint(multi, tmp_path: Path, monkeypatch):
    """Picking every plate interactively suggests --all-gcodes."""
    monkeypatch.setattr(cli_mod, "_is_interactive", lambda: True)
    res = CliRunner().invoke(main, ["1h", str(multi)], input="all\n")
    assert res.exit_code == 0, res.output
    assert "[2] plate_2.gcode" in res.output
    assert "Hint:" in res.output
    assert f'3mf-gcode-looper 2 --all-gcodes "{multi.resolve()}"' in res.output


def test_interactive_single_pick_has_no_flag(multi, tmp_path: Path, monkeypatch):
    monkeypatch.setattr(cli_mod, "_is_interactive", lambda: True)
    res = CliRunner().invoke(main, ["2", str(multi)], input="9\n2\n")
    assert res.exit_code == 0, res.output
    assert "Enter 'all' or numbers" in res.output
    assert f'3mf-gcode-looper 2 "{multi.resolve()}"' in res.output


def test_interactive_large_output_cancel(single, tmp_path: Path, monkeypatch):
    """Declining the size prompt is a clean exit."""
    cfg = tmp_path / "tiny.yaml"
    cfg.write_text("limits:\n  large_output_bytes: 1\n")
    monkeypatch.setattr(cli_mod, "_is_interactive", lambda: True)
    res = CliRunner().invoke(main, ["--config", str(cfg), "2", str(single)], input="maybe\nn\n")
    assert res.exit_code == 0, res.output
    assert "Please answer Y or N." in res.output
    assert "Cancelled" in res.output
    assert not list(tmp_path.glob("Loop X *"))


def test_yes_skips_large_output_prompt(single, tmp_path: Path, monkeypatch):
    cfg = tmp_path / "tiny.yaml"
    cfg.write_text("limits:\n  large_output_bytes: 1\n")
    monkeypatch.setattr(cli_mod, "_is_interactive", lambda: True)
    res = CliRunner().invoke(main, ["--config", str(cfg), "--yes", "2", str(single)])
    assert res.exit_code == 0, res.output
    assert list(tmp_path.glob("Loop X 2 *"))


def _selection(names, selected):
    cands = [ToolpathCandidate(name=n) for n in names]
    return InputSelection(archive=Path("x.3mf"), candidates=cands, selected=selected)


def test_selection_flag_reconstruction():
    flag = cli_mod._selection_flag
    assert flag([_selection(["a"], ["a"])]) is None
    assert flag([_selection(["a", "b"], ["a", "b"]), _selection(["c"], ["c"])]) == "--all-gcodes"
    assert flag([_selection(["a", "b"], ["a"]), _selection(["c", "d"], ["c"])]) == "--first-gcode"
    assert flag([_selection(["a", "b"], ["b"])]) is None


def test_eof_at_selection_prompt_cancels(multi, tmp_path: Path, monkeypatch):
    # Ctrl-D / Ctrl-C while choosing plates takes the cancel path, not "Aborted!"
    monkeypatch.setattr(cli_mod, "_is_interactive", lambda: True)
    res = CliRunner().invoke(main, ["2", str(multi)], input="")
    assert res.exit_code == 0, res.output
    assert "[all] every toolpath" in res.output
    assert "Cancelled" in res.output
    assert "Aborted!" not in res.output
    assert not list(tmp_path.glob("Loop X *"))


def test_eof_at_size_prompt_cancels(single, tmp_path: Path, monkeypatch):
    cfg = tmp_path / "tiny.yaml"
    cfg.write_text("limits:\n  large_output_bytes: 1\n")
    monkeypatch.setattr(cli_mod, "_is_interactive", lambda: True)
    res = CliRunner().invoke(main, ["--config", str(cfg), "2", str(single)], input="")
    assert res.exit_code == 0, res.output
    assert "exceeds 1 bytes. Continue? [Y/N]" in res.output
    assert "Cancelled" in res.output
    assert "Aborted!" not in res.output
    assert not list(tmp_path.glob("Loop X *"))
