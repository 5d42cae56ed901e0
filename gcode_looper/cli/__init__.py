"""Expose the Click command behind the ``3mf-gcode-looper`` script.

The module:

* declares a single Click *command* called :pyfunc:`main`;
* parses the loop target and selection flags before any file is touched;
* loads the YAML configuration and sets up logging via
  :pyfunc:`gcode_looper.utils.logging.setup_logging`;
* decides whether a human can answer prompts and builds the matching
  :class:`gcode_looper.pipelines.orchestrator.RunContext`;
* runs the loop job and prints the console summary.

Exit codes: ``0`` on success or when the user cancels, ``1`` for any other
looping failure, ``2`` for usage errors.
"""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, Sequence

import click
import structlog

from gcode_looper import __version__
from gcode_looper.config import load_config
from gcode_looper.pipelines.loopspec import parse_loop_specifier
from gcode_looper.pipelines.orchestrator import LoopJob, RunContext
from gcode_looper.pipelines.types import InputSelection, LoopResult, SelectionMode
from gcode_looper.utils.display import (
    echo_banner,
    echo_command_hint,
    echo_item,
    echo_section,
    echo_success,
    format_mb,
)
from gcode_looper.utils.errors import InvalidLoopSpecifier, LooperError, UserCancelled
from gcode_looper.utils.logging import setup_logging
from gcode_looper.utils.naming import format_duration, format_mass
from .prompts import accept_large_output, confirm_large_output, prompt_selection

log = structlog.get_logger()

PROG_NAME = "3mf-gcode-looper"

# ─────────────────────────────────────────────────────────────────────────────
# Context settings: “-h/--help” and default values in the automatic help text.
# ─────────────────────────────────────────────────────────────────────────────
_CTX: Dict[str, Any] = dict(
    help_option_names=["-h", "--help"],
    show_default=True,
    max_content_width=120,
)


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------
def _parse_spec(ctx: click.Context, param: click.Parameter, value: str):
    """Click callback turning LOOP_SPEC into a loop specifier."""
    try:
        return parse_loop_specifier(value)
    except InvalidLoopSpecifier as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc


def _is_interactive() -> bool:
    """Return ``True`` when both stdin and stdout are attached to a TTY."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _selection_flag(selections: Sequence[InputSelection]) -> str | None:
    """Return the flag that reproduces *selections* non-interactively, if any."""
    multi = [s for s in selections if len(s.candidates) > 1]
    if not multi:
        return None
    if all(len(s.selected) == len(s.candidates) for s in multi):
        return "--all-gcodes"
    if all(s.selected == [s.candidates[0].name] for s in multi):
        return "--first-gcode"
    return None


def _echo_result(res: LoopResult) -> None:
    """Print the closing summary for a successful run."""
    plan = res.plan
    echo_section("Result")
    echo_item(f"Repetitions: {plan.repetitions}")
    echo_item(
        f"Per loop: {format_duration(plan.per_loop_minutes)}, "
        f"{plan.per_loop_grams:.2f} g"
    )
    echo_item(
        f"Total: {format_duration(plan.total_minutes)}, {format_mass(plan.total_grams)}"
    )

    done = f"Done: {res.output_path.name}  (Size: {format_mb(res.actual_bytes, ceil=True)})"
    if res.estimated_bytes is not None:
        done += f" (Estimate: {format_mb(res.estimated_bytes, ceil=True)})"
    click.echo("")
    echo_success(done)
    click.echo(f'File: "{res.output_path}"')


# ─────────────────────────────────────────────────────────────────────────────
# Click command
# ─────────────────────────────────────────────────────────────────────────────
@click.command(
    name=PROG_NAME,
    context_settings=_CTX,
    help="""\b
3mf-gcode-looper – repeat the toolpath of sliced .3mf projects.

\b
LOOP_SPEC is a repetition count (5), a print-time budget (90m, 2h, 1.5d)
or a filament budget (100g, 2.5kg). The output archive is written next to
the first input as "Loop X <n> - <time> - <mass> - <name>.gcode.3mf".
""",
)
@click.version_option(__version__, prog_name=PROG_NAME)
@click.argument("loop_spec", metavar="LOOP_SPEC", callback=_parse_spec)
@click.argument("paths", type=click.Path(path_type=Path), nargs=-1)
# ------------ selection -----------------------------------------------------
@click.option("--all-gcodes", "all_gcodes", is_flag=True,
              help="Loop every toolpath of each input.")
@click.option("--first-gcode", "first_gcode", is_flag=True,
              help="Loop only the first toolpath of each input.")
@click.option("--yes", is_flag=True,
              help="Skip the large-output confirmation prompt.")
# ------------ global --------------------------------------------------------
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    help="YAML configuration overriding the packaged defaults.",
)
@click.option("-v", "--verbose", is_flag=True, help="INFO-level rich console output.")
@click.option("--debug", is_flag=True, help="DEBUG-level console output.")
@click.option(
    "--save-logfile",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Mirror console output into this plain-text file.",
)
@click.pass_context
def main(  # noqa: D401 – Click callback naming rule
    ctx: click.Context,
    loop_spec,
    paths: tuple[Path, ...],
    all_gcodes: bool,
    first_gcode: bool,
    yes: bool,
    config_path: Path | None,
    verbose: bool,
    debug: bool,
    save_logfile: Path | None,
) -> None:
    """Entry-point for ``3mf-gcode-looper``.

    Args:
        ctx:          Click runtime context.
        loop_spec:    Parsed loop specifier.
        paths:        Input archives; the first one names the output.
        all_gcodes:   Loop every toolpath of each input.
        first_gcode:  Loop only the first toolpath of each input.
        yes:          Accept the large-output confirmation.
        config_path:  Explicit YAML configuration.
        verbose:      Emit INFO-level messages through rich.
        debug:        Emit DEBUG-level messages.
        save_logfile: Optional plain-text mirror of console output.

    Raises:
        click.UsageError: When both selection flags are given.
        click.ClickException: For any looping failure other than a
            cancellation.
    """
    if all_gcodes and first_gcode:
        raise click.UsageError("Use only one of --all-gcodes or --first-gcode.", ctx=ctx)
    mode = (
        SelectionMode.ALL if all_gcodes
        else SelectionMode.FIRST if first_gcode
        else SelectionMode.ASK
    )

    try:
        cfg = load_config(config_path=config_path)
    except RuntimeError as exc:
        raise click.ClickException(str(exc)) from exc

    # Logging must be configured before any output is produced ----------------
    setup_logging(
        verbose=verbose,
        debug=debug,
        force_info=not (verbose or debug),
        extra_text_log=save_logfile,
        log_dir=cfg.log_dir,
    )

    interactive = _is_interactive()
    if interactive:
        run_ctx = RunContext(
            config=cfg,
            temp_root=Path(tempfile.gettempdir()),
            selector=prompt_selection,
            confirm=accept_large_output if yes else confirm_large_output,
        )
    else:
        run_ctx = RunContext.unattended(cfg)

    echo_banner("3MF gcode looper")
    echo_item(f"Target: {loop_spec.describe()}")
    for i, p in enumerate(paths, start=1):
        size = f" ({format_mb(p.stat().st_size)})" if p.is_file() else ""
        echo_item(f"Input {i}: {p.name}{size}")

    try:
        res = LoopJob(run_ctx, logger=log).run(loop_spec, list(paths), mode=mode)
    except UserCancelled as exc:
        click.echo(str(exc))
        return
    except LooperError as exc:
        raise click.ClickException(str(exc)) from exc

    _echo_result(res)

    if interactive:
        command = f"{PROG_NAME} {res.plan.repetitions}"
        flag = _selection_flag(res.selections)
        if flag:
            command += f" {flag}"
        echo_command_hint(command, [s.archive for s in res.selections])


# Alias for callers that import ``cli`` rather than ``main``.
cli = main
__all__: list[str] = ["main"]
