"""
Public façade for the *pipelines* sub-package.

Stages in the order a run uses them:

* **Parse**    :func:`parse_loop_specifier`
* **Index**    :func:`scan_toolpaths`
* **Unpack**   :func:`extract_archive`
* **Analyse**  :func:`analyze_toolpath`, :func:`plan_loops`
* **Loop**     :func:`write_loops`
* **Estimate** :func:`estimate_output_size`
* **Repack**   :func:`build_archive`

:class:`LoopJob` strings them together.
"""

from __future__ import annotations

from .types import LoopPlan, LoopResult, SelectionMode
from .loopspec import parse_loop_specifier
from .index import scan_toolpaths
from .unzip import extract_archive
from .analyze import analyze_toolpath
from .compute import plan_loops
from .loop import write_loops
from .estimate import estimate_output_size
from .pack import build_archive
from .orchestrator import LoopJob, RunContext

__all__: list[str] = [
    "LoopPlan",
    "LoopResult",
    "SelectionMode",
    "parse_loop_specifier",
    "scan_toolpaths",
    "extract_archive",
    "analyze_toolpath",
    "plan_loops",
    "write_loops",
    "estimate_output_size",
    "build_archive",
    "LoopJob",
    "RunContext",
]
