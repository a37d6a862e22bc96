# glsearch/modes.py
"""
Mode dispatcher for gl-search.

This module maps CLI arguments to concrete workflows:
- search: resolve projects, search their blobs, print deep links
- projects: resolve projects and print them without searching

The dispatcher is intentionally thin; core logic lives in GitlabSearcher.
"""

from __future__ import annotations

import json
import sys
import time
from collections.abc import Sequence
from pathlib import Path
from typing import IO, Any, TextIO

from glsearch.aggregator import total_matches
from glsearch.cli import CliArgs
from glsearch.config import SearchConfig
from glsearch.models import Project, SearchResult
from glsearch.progress import ProgressBar, SearchObserver, VerboseReport
from glsearch.searcher import GitlabSearcher


def _write_jsonl_line(fp: IO[str], record: dict[str, Any]) -> None:
    """Write a JSONL record to an open file."""
    fp.write(json.dumps(record, ensure_ascii=False) + "\n")


def _mk_observer(config: SearchConfig) -> SearchObserver:
    """Verbose report on stdout, or a progress bar on stderr."""
    if config.verbose:
        return VerboseReport(file=sys.stdout)
    return ProgressBar(file=sys.stderr)


def run_mode(args: CliArgs) -> None:
    """Dispatch execution based on args.mode."""
    config = args.to_config()

    match args.mode:
        case "search":
            _run_search(config)
        case "projects":
            _run_projects(config)
        case _:
            raise SystemExit(f"Unknown mode: {args.mode}")


def print_results(results: Sequence[SearchResult], out: TextIO) -> None:
    """Print every deep-linked match as a Project/URL/Data block."""
    for sr in results:
        for r in sr.result_list:
            out.write(f"Project: {r.name}\n")
            out.write(f"URL: {r.url}\n")
            out.write(f"Data: {r.data}\n")
            out.write("-------\n")


def print_projects(projects: Sequence[Project], out: TextIO) -> None:
    for p in projects:
        out.write(f"{p.id:<15}{p.name:<30} {p.web_url}\n")


def write_results(results: Sequence[SearchResult], path: Path) -> None:
    """Write one JSONL record per project result."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fp:
        for sr in results:
            _write_jsonl_line(fp, sr.to_dict())


def _run_search(config: SearchConfig) -> None:
    """Resolve, search, then print results and a short summary."""
    start = time.perf_counter()
    gls = GitlabSearcher.from_config(config, observer=_mk_observer(config))

    results = gls.run(config)

    print_results(results, sys.stdout)

    failed = [sr for sr in results if sr.failed]
    print(f"search result(s) = {total_matches(results)}")
    if failed:
        print(f"failed project(s) = {len(failed)}")
    print(f"total time used = {time.perf_counter() - start:.2f}s")

    if config.output:
        write_results(results, Path(config.output))
        print(f"Results saved to: {config.output}")


def _run_projects(config: SearchConfig) -> None:
    """Resolve projects only."""
    gls = GitlabSearcher.from_config(config)
    projects = gls.resolve(config.selector, config.resolution_policy)

    print_projects(projects, sys.stdout)
    print(f"project(s) = {len(projects)}")

    if config.output:
        path = Path(config.output)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fp:
            for p in projects:
                _write_jsonl_line(fp, p.to_dict())
        print(f"Projects saved to: {config.output}")
