from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from glsearch.models import BlobMatch, Project, ReturnResult, SearchResult


def blob_url(project: Project, blob: BlobMatch) -> str:
    """Deep link to a matched file in the web UI."""
    return f"{project.web_url}/-/blob/{blob.ref}/{blob.filename}"


def build_result_list(project: Project, blobs: Iterable[BlobMatch]) -> tuple[ReturnResult, ...]:
    return tuple(ReturnResult(name=project.name, url=blob_url(project, b), data=b.data) for b in blobs)


def aggregate(projects: Iterable[Project], results: Iterable[SearchResult]) -> list[SearchResult]:
    """
    Attach deep-linked ReturnResults to every search result.

    Results are matched to projects by ID and keep the order they were
    gathered in. The inputs are not modified; updated copies are returned.
    A result whose project is unknown keeps an empty result list.
    """
    projects_by_id = {p.id: p for p in projects}
    out: list[SearchResult] = []

    for sr in results:
        project = projects_by_id.get(sr.id)
        if project is None:
            out.append(replace(sr, result_list=()))
            continue
        out.append(replace(sr, result_list=build_result_list(project, sr.blob_matches)))

    return out


def total_matches(results: Iterable[SearchResult]) -> int:
    """Sum of match counts, ignoring failed searches."""
    return sum(sr.count for sr in results if not sr.failed)
