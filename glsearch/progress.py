# glsearch/progress.py
"""
Progress observers for the search stage.

The orchestrator never prints. It reports to a SearchObserver from the
thread that drains finished units, so observers need no locking:

- search_started(projects): once, before any unit is submitted;
- project_searched(result): once per unit, in completion order;
- search_finished(results): once, with the aggregated results.

VerboseReport renders the column-aligned table behind the CLI's --verbose
flag; ProgressBar is the quiet default.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TextIO

from tqdm import tqdm

from glsearch.models import Project, SearchResult
from glsearch.utils import terminal_utils


class SearchObserver:
    """No-op base; override what you need."""

    def search_started(self, projects: Sequence[Project]) -> None:
        pass

    def project_searched(self, result: SearchResult) -> None:
        pass

    def search_finished(self, results: Sequence[SearchResult]) -> None:
        pass


class CompositeObserver(SearchObserver):
    """Forward every event to several observers, in order."""

    def __init__(self, *observers: SearchObserver) -> None:
        self.observers = list(observers)

    def search_started(self, projects: Sequence[Project]) -> None:
        for o in self.observers:
            o.search_started(projects)

    def project_searched(self, result: SearchResult) -> None:
        for o in self.observers:
            o.project_searched(result)

    def search_finished(self, results: Sequence[SearchResult]) -> None:
        for o in self.observers:
            o.search_finished(results)


class VerboseReport(SearchObserver):
    """
    Column-aligned per-project report.

    The project column is as wide as the longest project name (at least 30).
    Each finished unit prints: id, name, elapsed ms, match count, error.
    """

    def __init__(self, file: TextIO | None = None) -> None:
        self.file = file
        self.name_w = terminal_utils.MIN_NAME_WIDTH

    def _write(self, line: str) -> None:
        tqdm.write(line, file=self.file or sys.stdout)

    def search_started(self, projects: Sequence[Project]) -> None:
        self.name_w = terminal_utils.name_column_width(p.name for p in projects)
        self._write(f"Searching in {len(projects)} project(s) ...")
        self._write(terminal_utils.format_row(("id", "project", "took (ms)", "result", "error"), self.name_w))
        self._write(terminal_utils.format_row(("--", "-------", "---------", "----", "-----"), self.name_w))

    def project_searched(self, result: SearchResult) -> None:
        self._write(
            terminal_utils.format_row(
                (result.id, result.name, result.elapsed_ms, len(result.blob_matches), result.error),
                self.name_w,
            )
        )


class ProgressBar(SearchObserver):
    """tqdm bar over searched projects with a running hit count."""

    def __init__(self, file: TextIO | None = None, position: int = 0) -> None:
        self.file = file
        self.position = position
        self.hits = 0
        self._pbar: tqdm | None = None
        self._lay: terminal_utils.TqdmLayout | None = None

    def search_started(self, projects: Sequence[Project]) -> None:
        self.hits = 0
        self._lay = terminal_utils.layout()
        self._pbar = terminal_utils.mk_tqdm(
            total=len(projects),
            position=self.position,
            leave=False,
            layout_=self._lay,
            unit="projects",
            file=self.file or sys.stderr,
        )
        terminal_utils.set_desc(self._pbar, "Searching projects", self._lay)

    def project_searched(self, result: SearchResult) -> None:
        if self._pbar is None or self._lay is None:
            return
        if not result.failed:
            self.hits += result.count

        desc = terminal_utils.animate_desc(result.name, terminal_utils.SEARCH_ANIM_FRAMES, self._pbar.n)
        terminal_utils.set_desc(self._pbar, desc, self._lay)
        terminal_utils.set_postfix(self._pbar, f"hits: {self.hits}", self._lay)
        self._pbar.update(1)

    def search_finished(self, results: Sequence[SearchResult]) -> None:
        if self._pbar is not None:
            self._pbar.close()
            self._pbar = None
