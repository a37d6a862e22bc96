from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from glsearch.exceptions import ConstructionError
from glsearch.paginator import MAX_PER_PAGE, PageTermination

DEFAULT_TIMEOUT: int = 30
DEFAULT_PER_PAGE: int = 100
DEFAULT_MAX_WORKERS: int = 10


class FailurePolicy(str, Enum):
    """
    How a fan-out stage reacts to a failed unit.

    - FAIL_FAST: the first failure aborts the whole stage.
    - BEST_EFFORT: failures are logged and the unit contributes nothing.
    """
    FAIL_FAST = "fail-fast"
    BEST_EFFORT = "best-effort"


DEFAULT_POLICIES: dict[str, FailurePolicy] = {
    "ids": FailurePolicy.FAIL_FAST,
    "groups": FailurePolicy.BEST_EFFORT,
    "name": FailurePolicy.BEST_EFFORT,
}


@dataclass(frozen=True, slots=True)
class ProjectSelector:
    """
    Which projects to search. Exactly one of the fields must be set.

    Attributes:
        project_ids: Explicit project IDs.
        group_ids: IDs of groups whose projects are searched.
        project_name: Free-text project name passed to the project search.
    """
    project_ids: tuple[int, ...] = ()
    group_ids: tuple[int, ...] = ()
    project_name: str | None = None

    def __post_init__(self) -> None:
        chosen = sum((bool(self.project_ids), bool(self.group_ids), self.project_name is not None))
        if chosen != 1:
            raise ConstructionError(
                "Exactly one project selector is required: project IDs, group IDs or a project name."
            )

    @property
    def strategy(self) -> str:
        if self.project_ids:
            return "ids"
        if self.group_ids:
            return "groups"
        return "name"


@dataclass(frozen=True, slots=True)
class SearchConfig:
    """
    Everything a search run needs, as handed over by the CLI (or any other caller).

    `ssl_verify` defaults to True; disabling certificate checks is opt-in.
    `resolution_policy` of None means the selector strategy's default
    (see DEFAULT_POLICIES).
    """
    url: str
    token: str
    keyword: str
    selector: ProjectSelector
    timeout: float = DEFAULT_TIMEOUT
    ssl_verify: bool = True
    verbose: bool = False
    proxy: str | None = None
    per_page: int = DEFAULT_PER_PAGE
    max_workers: int = DEFAULT_MAX_WORKERS
    termination: PageTermination = PageTermination.LITERAL
    resolution_policy: FailurePolicy | None = None
    log_level: int | str = "WARNING"
    log_file: str | None = None
    output: str | None = None

    def validate(self) -> SearchConfig:
        """Raise ConstructionError for unusable settings; return self for chaining."""
        if not self.url or not self.url.strip():
            raise ConstructionError("url cannot be empty")
        if not self.token or not self.token.strip():
            raise ConstructionError("token cannot be empty")
        if self.timeout <= 0:
            raise ConstructionError(f"timeout must be positive, got {self.timeout}")
        if not 1 <= self.per_page <= MAX_PER_PAGE:
            raise ConstructionError(f"per_page must be between 1 and {MAX_PER_PAGE}, got {self.per_page}")
        if self.max_workers < 1:
            raise ConstructionError(f"max_workers must be at least 1, got {self.max_workers}")
        return self

    @property
    def effective_policy(self) -> FailurePolicy:
        return self.resolution_policy or DEFAULT_POLICIES[self.selector.strategy]
