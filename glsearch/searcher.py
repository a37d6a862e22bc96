# glsearch/searcher.py
from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence

from glsearch.aggregator import aggregate, total_matches
from glsearch.config import DEFAULT_MAX_WORKERS, DEFAULT_PER_PAGE, DEFAULT_TIMEOUT, FailurePolicy, ProjectSelector, SearchConfig
from glsearch.exceptions import ConstructionError, PaginationError
from glsearch.models import BlobMatch, Project, SearchResult
from glsearch.paginator import JsonGetter, PageTermination, paginate
from glsearch.progress import SearchObserver, VerboseReport
from glsearch.resolver import ProjectResolver
from glsearch.session import HttpSession
from glsearch.utils import logging_utils
from glsearch.utils.concurrency import fan_out


class GitlabSearcher:
    """Concurrent blob search across GitLab projects.

    The searcher manages:
    - the shared HTTP session
    - project resolution (by IDs, group IDs or name)
    - one search unit per project on a bounded worker pool
    - aggregation of matches into deep-linked results
    """

    def __init__(
            self,
            url: str | None = None,
            token: str | None = None,
            *,
            timeout: float = DEFAULT_TIMEOUT,
            ssl_verify: bool = True,
            proxy: str | None = None,
            per_page: int = DEFAULT_PER_PAGE,
            max_workers: int = DEFAULT_MAX_WORKERS,
            termination: PageTermination = PageTermination.LITERAL,
            observer: SearchObserver | None = None,
            log_level: int | str = logging.WARNING,
            log_file: str | None = None,
            session: JsonGetter | None = None,
    ) -> None:
        if max_workers < 1:
            raise ConstructionError(f"max_workers must be at least 1, got {max_workers}")

        self.log_level: int = logging_utils.coerce_log_level(log_level)
        self.logger = logging_utils.build_logger(level=self.log_level, log_file=log_file)

        self.per_page = per_page
        self.max_workers = max_workers
        self.termination = termination
        self.observer: SearchObserver = observer or SearchObserver()

        self.session: JsonGetter = session or HttpSession(
            url or "",
            token or "",
            timeout=timeout,
            ssl_verify=ssl_verify,
            proxy=proxy,
            pool_size=max_workers,
            logger=self.logger,
        )
        self.resolver = ProjectResolver(
            self.session,
            per_page=per_page,
            termination=termination,
            max_workers=max_workers,
            logger=self.logger,
        )

    @classmethod
    def from_config(
            cls,
            config: SearchConfig,
            observer: SearchObserver | None = None,
            session: JsonGetter | None = None,
    ) -> GitlabSearcher:
        """Build a searcher from a validated SearchConfig; verbose mode installs a VerboseReport."""
        config.validate()
        if observer is None and config.verbose:
            observer = VerboseReport()

        return cls(
            config.url,
            config.token,
            timeout=config.timeout,
            ssl_verify=config.ssl_verify,
            proxy=config.proxy,
            per_page=config.per_page,
            max_workers=config.max_workers,
            termination=config.termination,
            observer=observer,
            log_level=config.log_level,
            log_file=config.log_file,
            session=session,
        )

    def run(self, config: SearchConfig) -> list[SearchResult]:
        """Resolve projects from `config.selector` and search them for `config.keyword`."""
        projects = self.resolve(config.selector, config.resolution_policy)
        return self.search(projects, config.keyword)

    def resolve(self, selector: ProjectSelector, policy: FailurePolicy | None = None) -> list[Project]:
        return self.resolver.resolve(selector, policy)

    def search_by_ids(self, ids: Iterable[int], keyword: str) -> list[SearchResult]:
        return self.search(self.resolver.by_ids(ids), keyword)

    def search_by_group_ids(self, group_ids: Iterable[int], keyword: str) -> list[SearchResult]:
        return self.search(self.resolver.by_group_ids(group_ids), keyword)

    def search_by_name(self, project_name: str, keyword: str) -> list[SearchResult]:
        return self.search(self.resolver.by_name(project_name), keyword)

    def search(self, projects: Sequence[Project], keyword: str) -> list[SearchResult]:
        """
        Search every project's blobs for `keyword`, concurrently.

        One unit runs per project, duplicates included. A failing unit is
        recorded with count -1 and its error; it never affects the others.
        Results come back in completion order, not input order.

        Args:
            projects: Projects to search.
            keyword: Search text, forwarded verbatim (may be empty).

        Returns:
            One SearchResult per project with `result_list` filled in.
        """
        projects = list(projects)
        self.logger.info("Searching %s project(s) for %r.", len(projects), keyword)
        self.observer.search_started(projects)

        start = time.perf_counter()
        gathered: list[SearchResult] = []

        def unit(project: Project) -> SearchResult:
            return self.search_project(project, keyword)

        for _, fut in fan_out(unit, projects, max_workers=self.max_workers):
            sr = fut.result()
            gathered.append(sr)
            self.observer.project_searched(sr)

        results = aggregate(projects, gathered)
        self.observer.search_finished(results)

        failed = sum(1 for sr in results if sr.failed)
        self.logger.info(
            "Search finished in %s seconds: %s match(es), %s failed project(s).",
            round(time.perf_counter() - start, 2),
            total_matches(results),
            failed,
        )
        return results

    def search_project(self, project: Project, keyword: str) -> SearchResult:
        """
        Search one project's blobs. Never raises for API failures.

        The returned SearchResult is owned by the caller from here on.
        """
        start = time.perf_counter()
        sr = SearchResult(id=project.id, name=project.name)

        try:
            matches = paginate(
                self.session,
                f"/projects/{project.id}/search",
                {"scope": "blobs", "search": keyword},
                decode=BlobMatch.from_json,
                per_page=self.per_page,
                termination=self.termination,
            )
        except PaginationError as e:
            sr.mark_failed(str(e))
            self.logger.error("Search failed for project %s (%s): %s", project.id, project.name, e)
        else:
            sr.set_matches(matches)
            for m in matches:
                self.logger.debug("[+] Hit in %s: %s@%s", project.name, m.filename, m.ref)

        sr.elapsed_ms = int((time.perf_counter() - start) * 1000)
        return sr
