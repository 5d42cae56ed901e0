"""
Drive one looping run from input archives to the output archive.

Stages, in order::

    validate inputs → discover toolpaths → select per input → extract all
    → resolve metadata dirs → analyse → compute repetitions → estimate
    → confirm large output → rewrite + rename → build archive → cleanup

Any exception aborts the remaining stages. The per-run working directory is
removed on every exit path (:func:`gcode_looper.utils.cleanup.work_directory`).

Everything that depends on the process environment (temp root, whether a
human is at the terminal, how to ask them) is carried by :class:`RunContext`
so the pipeline itself never prompts or inspects TTYs.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from gcode_looper.config.schema import ConfigSchema
from gcode_looper.utils.archive import looks_like_project_archive
from gcode_looper.utils.cleanup import work_directory
from gcode_looper.utils.errors import (
    AmbiguousSelectionNonInteractive,
    IOFailure,
    InputNotAFile,
    InputNotFound,
    MissingInputFiles,
    MissingMetadataDirectory,
    UserCancelled,
)
from gcode_looper.utils.naming import format_duration, format_mass, output_path_for
from .analyze import analyze_toolpath
from .compute import per_loop_totals, plan_loops
from .estimate import estimate_output_size
from .index import find_metadata_directory, list_top_level_toolpaths, sizes_of
from .loop import write_loops
from .pack import build_archive
from .types import (
    InputSelection,
    LoopPlan,
    LoopResult,
    LoopSpecifier,
    SelectionMode,
    ToolpathCandidate,
    ToolpathSource,
)
from .unzip import extract_archive

log = logging.getLogger(__name__)

#: ``selector(archive, candidate_names) -> chosen_names``
Selector = Callable[[Path, list[str]], list[str]]
#: ``confirm(message) -> proceed?``
Confirmer = Callable[[str], bool]


# ---------------------------------------------------------------------------
# 0 – non-interactive capabilities
# ---------------------------------------------------------------------------


def refuse_selection(archive: Path, candidates: list[str]) -> list[str]:
    """Selector for unattended runs: several candidates are a hard error."""
    raise AmbiguousSelectionNonInteractive(
        f"{archive.name} has {len(candidates)} toolpaths ({', '.join(candidates)}). "
        "Re-run interactively or pass --all-gcodes or --first-gcode."
    )


def auto_confirm(message: str) -> bool:
    """Confirmer for unattended runs: log the question and proceed."""
    log.warning("%s Proceeding without confirmation (non-interactive).", message)
    return True


def _format_limit(n_bytes: int) -> str:
    """Render a size threshold in the largest unit it reaches (GB, MB or bytes)."""
    for unit, scale in (("GB", 1024 ** 3), ("MB", 1024 ** 2)):
        if n_bytes >= scale:
            return f"{n_bytes / scale:g} {unit}"
    return f"{n_bytes} bytes"


@dataclass(frozen=True)
class RunContext:
    """Process-level collaborators handed to :class:`LoopJob`.

    Attributes:
        config:      Validated configuration.
        temp_root:   Parent of the per-run working directory; ``None`` means
                     the OS temp root.
        selector:    Picks toolpaths when an input offers several.
        confirm:     Answers yes/no questions such as the large-output check.
    """

    config: ConfigSchema = field(default_factory=ConfigSchema)
    temp_root: Path | None = None
    selector: Selector = refuse_selection
    confirm: Confirmer = auto_confirm

    @classmethod
    def unattended(cls, config: ConfigSchema | None = None, temp_root: Path | None = None) -> "RunContext":
        """Return a context that never prompts."""
        return cls(
            config=config or ConfigSchema(),
            temp_root=Path(temp_root) if temp_root else Path(tempfile.gettempdir()),
        )


# ---------------------------------------------------------------------------
# 1 – selection rule
# ---------------------------------------------------------------------------


def select_toolpaths(
    archive: Path,
    candidates: Sequence[str],
    mode: SelectionMode,
    selector: Selector,
) -> list[str]:
    """Return the toolpaths to loop for one input, in archive order.

    Raises:
        AmbiguousSelectionNonInteractive: Propagated from an unattended
            *selector*.
        UserCancelled: When the selector returns nothing.
        ValueError: When the selector returns unknown names.
    """
    names = list(candidates)
    if len(names) == 1 or mode is SelectionMode.ALL:
        return names
    if mode is SelectionMode.FIRST:
        return names[:1]

    chosen = set(selector(archive, list(names)))
    unknown = chosen - set(names)
    if unknown:
        raise ValueError(f"Selector returned unknown toolpath(s): {sorted(unknown)}")
    final = [n for n in names if n in chosen]
    if not final:
        raise UserCancelled(f"No toolpath selected for {archive.name}.")
    return final


# ---------------------------------------------------------------------------
# 2 – orchestrator
# ---------------------------------------------------------------------------


class LoopJob:
    """One looping run over one or more input archives."""

    def __init__(self, context: RunContext, logger=None) -> None:
        self.context = context
        self.config = context.config
        self.log = logger or log

    # ----------------------------------------------------------- validation
    def validate_inputs(self, inputs: Sequence[Path]) -> list[Path]:
        """Resolve *inputs* and check each is an existing regular file.

        Large inputs and unexpected suffixes only produce warnings.
        """
        if not inputs:
            raise MissingInputFiles("Missing input archives.")
        limits = self.config.limits
        suffix = self.config.layout.project_suffix

        resolved: list[Path] = []
        for i, raw in enumerate(inputs, start=1):
            p = Path(raw).expanduser().resolve()
            if not p.exists():
                raise InputNotFound(f"Input path does not exist: {p}")
            if not p.is_file():
                raise InputNotAFile(f"Input path is not a file: {p}")
            if not looks_like_project_archive(p, suffix):
                self.log.warning("Input %d does not have a %s extension; proceeding anyway.", i, suffix)
            size = p.stat().st_size
            if size > limits.large_input_bytes:
                self.log.warning(
                    "Input %d is %.1f MB (> %.0f MB). Proceeding...",
                    i,
                    size / (1024 * 1024),
                    limits.large_input_bytes / (1024 * 1024),
                )
            resolved.append(p)
        return resolved

    # ------------------------------------------------------------ discovery
    def discover(self, archive: Path) -> list[ToolpathCandidate]:
        """Return toolpath candidates of *archive*; none is a hard error."""
        layout = self.config.layout
        where = dict(metadata_dir=layout.metadata_dir, suffix=layout.toolpath_suffix)
        names = list_top_level_toolpaths(archive, **where)
        sizes = sizes_of(archive, **where)
        return [ToolpathCandidate(name=n, **sizes[n].model_dump()) for n in names]

    def select_all(
        self, archives: Sequence[Path], mode: SelectionMode
    ) -> list[InputSelection]:
        """Discover and select toolpaths for every input, in input order."""
        selections: list[InputSelection] = []
        for i, archive in enumerate(archives, start=1):
            candidates = self.discover(archive)
            names = [c.name for c in candidates]
            self.log.info("Input %d toolpath candidates: %s", i, ", ".join(names))
            chosen = select_toolpaths(archive, names, mode, self.context.selector)
            selections.append(
                InputSelection(archive=archive, candidates=candidates, selected=chosen)
            )
        return selections

    # ------------------------------------------------------------ on-disk
    def extract_all(self, selections: Sequence[InputSelection], work_root: Path) -> list[Path]:
        """Extract each input into ``<work_root>/input-<i>``."""
        dirs: list[Path] = []
        for i, sel in enumerate(selections, start=1):
            subdir = work_root / f"input-{i}"
            extract_archive(
                sel.archive, subdir, self.log, chunk_size=self.config.streaming.chunk_size
            )
            dirs.append(subdir)
        return dirs

    def resolve_sources(
        self, selections: Sequence[InputSelection], extracted: Sequence[Path]
    ) -> list[ToolpathSource]:
        """Pair every selected toolpath with its extracted path.

        Order: input order, then selection order within each input.
        """
        sources: list[ToolpathSource] = []
        for i, (sel, root) in enumerate(zip(selections, extracted), start=1):
            md = find_metadata_directory(root, self.config.layout.metadata_dir)
            if md is None:
                raise MissingMetadataDirectory(
                    f"Could not find a {self.config.layout.metadata_dir} directory "
                    f"in input {i} ({sel.archive.name})."
                )
            self.log.debug("Input %d metadata: %s", i, md)
            for name in sel.selected:
                path = md / name
                if not path.is_file():
                    raise IOFailure(f"Extracted toolpath missing: {path}")
                sources.append(ToolpathSource(path=path, display_name=name))
        return sources

    # ------------------------------------------------------------- analysis
    def analyse(self, sources: Sequence[ToolpathSource]) -> tuple[int, float]:
        """Return per-loop ``(minutes, grams)`` summed over *sources*."""
        analyses = []
        for src in sources:
            a = analyze_toolpath(src.path)
            self.log.info("  %s: %d min, %.2f g", src.display_name, a.minutes, a.grams)
            analyses.append(a)
        minutes, grams = per_loop_totals(analyses)
        if minutes <= 0:
            self.log.warning("Per-loop time is 0; time-based targets will fail.")
        if grams <= 0:
            self.log.warning("Per-loop filament is 0; mass-based targets will fail.")
        return minutes, grams

    def estimate(
        self, first_archive: Path, selections: Sequence[InputSelection], plan: LoopPlan
    ) -> int | None:
        """Return the advisory output size for *plan*, or ``None``."""
        first = selections[0].selected_candidates()[0]
        per_loop = [c.sizes for sel in selections for c in sel.selected_candidates()]
        return estimate_output_size(
            first_archive.stat().st_size,
            first.sizes,
            per_loop,
            plan.repetitions,
            fallback_ratio=self.config.estimate.fallback_ratio,
        )

    def confirm_large_output(self, estimated: int | None) -> None:
        """Ask before producing an archive above the configured threshold.

        Raises:
            UserCancelled: When the confirmer declines.
        """
        limit = self.config.limits.large_output_bytes
        if estimated is None or estimated <= limit:
            return
        message = (
            f"Estimated size ~ {-(-estimated // (1024 * 1024))} MB exceeds "
            f"{_format_limit(limit)}. Continue?"
        )
        if not self.context.confirm(message):
            raise UserCancelled("Cancelled: estimated output too large.")

    # ------------------------------------------------------------ main entry
    def run(
        self,
        spec: LoopSpecifier,
        inputs: Sequence[Path],
        *,
        mode: SelectionMode = SelectionMode.ASK,
    ) -> LoopResult:
        """Loop the selected toolpaths of *inputs* according to *spec*.

        Returns:
            :class:`LoopResult` describing the written archive.

        Raises:
            LooperError: Any subclass; the working directory is still removed.
        """
        archives = self.validate_inputs(inputs)
        selections = self.select_all(archives, mode)

        with work_directory(self.context.temp_root, prefix=self.config.temp_prefix) as work_root:
            extracted = self.extract_all(selections, work_root)
            sources = self.resolve_sources(selections, extracted)

            self.log.info("Analysing print times and filament usage...")
            minutes, grams = self.analyse(sources)
            plan = plan_loops(spec, minutes, grams)
            self.log.info(
                "Repetitions: %d (per loop %d min, %.2f g; total %s, %s)",
                plan.repetitions,
                minutes,
                grams,
                format_duration(plan.total_minutes),
                format_mass(plan.total_grams),
            )

            estimated = self.estimate(archives[0], selections, plan)
            self.confirm_large_output(estimated)

            write_loops(
                sources,
                sources[0].path,
                plan.repetitions,
                identity=self.config.tool_identity,
                chunk_size=self.config.streaming.chunk_size,
            )

            output = output_path_for(plan, archives[0])
            if output in archives:
                raise IOFailure(f"Refusing to overwrite input archive {output}")
            build_archive(
                extracted[0],
                output,
                self.log,
                compress_level=self.config.streaming.compress_level,
            )
            actual = output.stat().st_size

        return LoopResult(
            output_path=output,
            plan=plan,
            selections=selections,
            estimated_bytes=estimated,
            actual_bytes=actual,
        )


__all__ = [
    "Selector",
    "Confirmer",
    "RunContext",
    "LoopJob",
    "select_toolpaths",
    "refuse_selection",
    "auto_confirm",
]
