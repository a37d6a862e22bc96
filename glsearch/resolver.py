# glsearch/resolver.py
"""
Project resolution strategies.

A search run starts from one of three selectors and turns it into a list of
Project descriptors:

- by IDs: one GET /projects/{id} per ID, run concurrently;
- by group IDs: one paginated GET /groups/{id}/projects per group, run concurrently;
- by name: a single paginated GET /search?scope=projects.

How failures are handled is a FailurePolicy, not a property of the strategy.
The defaults (DEFAULT_POLICIES) make ID resolution fail-fast and the other
two best-effort.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from glsearch.config import DEFAULT_MAX_WORKERS, DEFAULT_POLICIES, FailurePolicy, ProjectSelector
from glsearch.exceptions import DecodeError, PaginationError, ResolutionError, TransportError
from glsearch.models import Project
from glsearch.paginator import MAX_PER_PAGE, JsonGetter, PageTermination, paginate
from glsearch.utils.concurrency import fan_out


class ProjectResolver:
    """Turn a ProjectSelector into Project descriptors."""

    def __init__(
            self,
            session: JsonGetter,
            *,
            per_page: int = MAX_PER_PAGE,
            termination: PageTermination = PageTermination.LITERAL,
            max_workers: int = DEFAULT_MAX_WORKERS,
            logger: logging.Logger | None = None,
    ) -> None:
        self.session = session
        self.per_page = per_page
        self.termination = termination
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, selector: ProjectSelector, policy: FailurePolicy | None = None) -> list[Project]:
        """
        Resolve projects for a selector.

        Args:
            selector: Which projects to resolve.
            policy: Failure policy; None uses the strategy default.

        Raises:
            ResolutionError: A unit failed under FAIL_FAST.
        """
        policy = policy or DEFAULT_POLICIES[selector.strategy]

        match selector.strategy:
            case "ids":
                projects = self.by_ids(selector.project_ids, policy=policy)
            case "groups":
                projects = self.by_group_ids(selector.group_ids, policy=policy)
            case _:
                projects = self.by_name(selector.project_name or "", policy=policy)

        self.logger.info("Resolved %s project(s) by %s.", len(projects), selector.strategy)
        return projects

    def fetch_project(self, project_id: int) -> Project:
        """Fetch a single project. Not paginated."""
        return Project.from_json(self.session.get(f"/projects/{project_id}"))

    def fetch_group_projects(self, group_id: int) -> list[Project]:
        """List every project of a group, page by page."""
        return paginate(
            self.session,
            f"/groups/{group_id}/projects",
            decode=Project.from_json,
            per_page=self.per_page,
            termination=self.termination,
        )

    def by_ids(self, ids: Iterable[int], *, policy: FailurePolicy = FailurePolicy.FAIL_FAST) -> list[Project]:
        """
        Fetch projects by explicit ID, concurrently.

        Under FAIL_FAST the first failed fetch aborts the whole resolution and
        nothing is returned.
        """
        projects: list[Project] = []

        for project_id, fut in fan_out(self.fetch_project, list(ids), max_workers=self.max_workers):
            try:
                projects.append(fut.result())
            except (TransportError, DecodeError) as e:
                self._on_failure(policy, f"project {project_id}", e)

        return projects

    def by_group_ids(
            self,
            group_ids: Iterable[int],
            *,
            policy: FailurePolicy = FailurePolicy.BEST_EFFORT,
    ) -> list[Project]:
        """
        List projects of each group, concurrently.

        Projects shared between groups appear once per group. Under
        BEST_EFFORT a failing group contributes nothing, not even the pages
        fetched before the failure.
        """
        projects: list[Project] = []

        for group_id, fut in fan_out(self.fetch_group_projects, list(group_ids), max_workers=self.max_workers):
            try:
                projects.extend(fut.result())
            except PaginationError as e:
                self._on_failure(policy, f"group {group_id} (page {e.page})", e)

        return projects

    def by_name(self, name: str, *, policy: FailurePolicy = FailurePolicy.BEST_EFFORT) -> list[Project]:
        """Search projects by name. The name is sent verbatim, even when empty."""
        try:
            return paginate(
                self.session,
                "/search",
                {"scope": "projects", "search": name},
                decode=Project.from_json,
                per_page=self.per_page,
                termination=self.termination,
            )
        except PaginationError as e:
            self._on_failure(policy, f"project search {name!r} (page {e.page})", e)
            return []

    def _on_failure(self, policy: FailurePolicy, unit: str, error: Exception) -> None:
        if policy is FailurePolicy.FAIL_FAST:
            self.logger.error("Project resolution aborted: %s failed: %s", unit, error)
            raise ResolutionError(f"{unit}: {error}") from error
        self.logger.error("Skipping %s: %s", unit, error)
