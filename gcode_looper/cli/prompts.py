"""Terminal-backed selector and confirmer used when a human is at the keyboard."""

from __future__ import annotations

from pathlib import Path

import click

from gcode_looper.utils.errors import UserCancelled


def _ask(text: str, **kwargs) -> str:
    """:func:`click.prompt` where Ctrl-C or end of input cancels the run."""
    try:
        return click.prompt(text, **kwargs)
    except (click.Abort, EOFError, KeyboardInterrupt) as exc:
        raise UserCancelled("Cancelled.") from exc


# ---------------------------------------------------------------------------
# helper – confirmation prompt
# ---------------------------------------------------------------------------
def ask_yes_no(msg: str) -> bool:
    """Interactive *Y/N* prompt.

    Args:
        msg: Prompt displayed before the ``[Y/N]`` suffix.

    Returns:
        ``True`` for an affirmative answer; ``False`` otherwise.
    """
    while True:
        ans = _ask(f"{msg} [Y/N]", default="", show_default=False).strip().lower()
        if ans in {"y", "yes"}:
            return True
        if ans in {"n", "no"}:
            return False
        click.echo("Please answer Y or N.", err=True)


def _parse_choice(answer: str, candidates: list[str]) -> list[str] | None:
    """Return the names picked by *answer* or ``None`` when it is malformed.

    Accepts ``all``, ``a`` or comma/space separated 1-based indices.
    """
    answer = answer.strip().lower()
    if answer in {"all", "a"}:
        return list(candidates)
    picked: set[int] = set()
    for tok in answer.replace(",", " ").split():
        if not tok.isdigit():
            return None
        idx = int(tok)
        if not 1 <= idx <= len(candidates):
            return None
        picked.add(idx - 1)
    if not picked:
        return None
    return [candidates[i] for i in sorted(picked)]


def prompt_selection(archive: Path, candidates: list[str]) -> list[str]:
    """Ask which toolpaths of *archive* to loop; returns them in archive order."""
    click.echo(f"\n{archive.name} contains {len(candidates)} toolpaths:")
    for i, name in enumerate(candidates, start=1):
        click.echo(f"  [{i}] {name}")
    click.echo("  [all] every toolpath")
    while True:
        ans = _ask("Select toolpath(s)", default="all", show_default=True)
        chosen = _parse_choice(ans, candidates)
        if chosen:
            return chosen
        click.echo(f"Enter 'all' or numbers between 1 and {len(candidates)}.", err=True)


def confirm_large_output(message: str) -> bool:
    """Confirmer that always asks."""
    return ask_yes_no(message)


def accept_large_output(message: str) -> bool:
    """Confirmer for ``--yes``: echo the question and proceed."""
    click.echo(f"{message} (--yes)", err=True)
    return True


__all__ = [
    "ask_yes_no",
    "prompt_selection",
    "confirm_large_output",
    "accept_large_output",
]
