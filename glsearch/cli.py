from __future__ import annotations

import argparse
import os
from dataclasses import dataclass

from glsearch import __version__
from glsearch.config import DEFAULT_MAX_WORKERS, DEFAULT_PER_PAGE, DEFAULT_TIMEOUT, FailurePolicy, ProjectSelector, SearchConfig
from glsearch.paginator import MAX_PER_PAGE, PageTermination

MODES: tuple[str, ...] = ("search", "projects")


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    v = value.strip()
    if v.isdigit() and int(v) > 0:
        return int(v)
    raise argparse.ArgumentTypeError(f"Expected a positive integer, got {value!r}.")


def page_size(value: str) -> int:
    n = positive_int(value)
    if n > MAX_PER_PAGE:
        raise argparse.ArgumentTypeError(f"Page size cannot exceed {MAX_PER_PAGE}.")
    return n


def get_banner() -> str:
    return f"gl-search {__version__} :: concurrent GitLab blob search"


@dataclass(frozen=True, slots=True)
class CliArgs:
    mode: str

    url: str | None
    token: str | None
    timeout: int
    insecure: bool
    proxy: str | None

    project_ids: tuple[int, ...]
    group_ids: tuple[int, ...]
    project_name: str | None
    query: str | None

    per_page: int
    workers: int
    all_pages: bool
    policy: str | None

    verbose: bool
    log_level: str
    log_file: str | None
    output: str | None

    def selector(self) -> ProjectSelector:
        return ProjectSelector(
            project_ids=self.project_ids,
            group_ids=self.group_ids,
            project_name=self.project_name,
        )

    def to_config(self) -> SearchConfig:
        """Turn parsed arguments into the SearchConfig handed to the core."""
        return SearchConfig(
            url=self.url or "",
            token=self.token or "",
            keyword=self.query or "",
            selector=self.selector(),
            timeout=self.timeout,
            ssl_verify=not self.insecure,
            verbose=self.verbose,
            proxy=self.proxy,
            per_page=self.per_page,
            max_workers=self.workers,
            termination=PageTermination.FULL_PAGES if self.all_pages else PageTermination.LITERAL,
            resolution_policy=FailurePolicy(self.policy) if self.policy else None,
            log_level=self.log_level,
            log_file=self.log_file,
            output=self.output,
        ).validate()


class CliParser:
    """Argument parser builder for the gl-search CLI."""

    @staticmethod
    def build() -> argparse.ArgumentParser:
        """
        Construct and configure the argument parser for the gl-search CLI.

        The parser defines options for:
            - GitLab connectivity (URL, token, timeout, TLS, proxy).
            - Selecting projects (IDs, group IDs or a name search).
            - The search keyword.
            - Concurrency and pagination.
            - Logging, verbose report and JSONL output.

        Returns:
            A fully configured ArgumentParser instance ready to parse CLI arguments.
        """
        parser = argparse.ArgumentParser(
            prog="gl-search",
            description="Search blobs of GitLab projects concurrently and print deep links to the matches.",
        )
        parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")

        parser.add_argument(
            "-m",
            "--mode",
            choices=MODES,
            default="search",
            help="search: search blobs (default); projects: only list the resolved projects.",
        )

        # Core connectivity
        parser.add_argument(
            "-u",
            "--url",
            default=os.environ.get("GITLAB_URL"),
            help="GitLab base URL, e.g. https://gitlab.example.com (env: GITLAB_URL).",
        )
        parser.add_argument(
            "-t",
            "--token",
            default=os.environ.get("GITLAB_TOKEN"),
            help="Access token sent as a bearer token (env: GITLAB_TOKEN).",
        )
        parser.add_argument(
            "-o",
            "--time-out",
            dest="timeout",
            type=positive_int,
            default=DEFAULT_TIMEOUT,
            help=f"Per-request timeout in seconds (default: {DEFAULT_TIMEOUT}).",
        )
        parser.add_argument(
            "-k",
            "--insecure",
            action="store_true",
            help="Do not verify TLS certificates. Use only against hosts you trust.",
        )
        parser.add_argument(
            "--proxy",
            default=None,
            help="HTTP(S) proxy URL for GitLab API traffic (e.g., http://127.0.0.1:8080).",
        )

        # Project selection: exactly one
        sel = parser.add_mutually_exclusive_group()
        sel.add_argument(
            "-p",
            "--project-ids",
            dest="project_ids",
            type=int,
            nargs="+",
            action="extend",
            default=None,
            metavar="ID",
            help="Project IDs to search (repeatable).",
        )
        sel.add_argument(
            "-g",
            "--group-ids",
            dest="group_ids",
            type=int,
            nargs="+",
            action="extend",
            default=None,
            metavar="ID",
            help="Group IDs whose projects are searched (repeatable).",
        )
        sel.add_argument("-n", "--project-name", default=None, help="Search projects by name.")

        parser.add_argument("-q", "--query", default=None, help="Text to search for in blobs.")

        # Concurrency and pagination
        parser.add_argument(
            "-w",
            "--workers",
            type=positive_int,
            default=DEFAULT_MAX_WORKERS,
            help=f"Maximum number of concurrent requests (default: {DEFAULT_MAX_WORKERS}).",
        )
        parser.add_argument(
            "--per-page",
            type=page_size,
            default=DEFAULT_PER_PAGE,
            help=f"Items per page for GitLab API requests (default: {DEFAULT_PER_PAGE}).",
        )
        parser.add_argument(
            "--all-pages",
            action="store_true",
            help="Keep fetching while pages come back full. By default only the first page is read.",
        )

        pol = parser.add_mutually_exclusive_group()
        pol.add_argument(
            "--fail-fast",
            dest="policy",
            action="store_const",
            const=FailurePolicy.FAIL_FAST.value,
            help="Abort when any project or group cannot be resolved.",
        )
        pol.add_argument(
            "--best-effort",
            dest="policy",
            action="store_const",
            const=FailurePolicy.BEST_EFFORT.value,
            help="Log and skip projects or groups that cannot be resolved.",
        )

        # Output
        parser.add_argument("-v", "--verbose", action="store_true", help="Print a per-project timing report.")
        parser.add_argument(
            "--log-level",
            default="WARNING",
            choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
            help="Log level (default: WARNING).",
        )
        parser.add_argument("--log-file", default=None, help="Also write log records to this file.")
        parser.add_argument("--output", default=None, help="Write one JSONL record per project to this file.")

        return parser

    @classmethod
    def parse(cls, argv: list[str] | None = None) -> CliArgs:
        """
        Parse CLI arguments and check interdependent options.

        argparse already enforces that at most one selector is given; this
        method additionally requires one, and a query in search mode.

        Args:
            argv: Optional list of command-line arguments. If None, sys.argv is used.

        Returns:
            CliArgs dataclass instance.
        """
        parser = cls.build()
        ns = parser.parse_args(argv)

        if not ns.project_ids and not ns.group_ids and ns.project_name is None:
            parser.error("one of -p/--project-ids, -g/--group-ids, -n/--project-name is required")

        if ns.mode == "search" and ns.query is None:
            parser.error("-q/--query is required in search mode")

        return CliArgs(
            mode=ns.mode,

            url=ns.url,
            token=ns.token,
            timeout=ns.timeout,
            insecure=ns.insecure,
            proxy=ns.proxy,

            project_ids=tuple(ns.project_ids or ()),
            group_ids=tuple(ns.group_ids or ()),
            project_name=ns.project_name,
            query=ns.query,

            per_page=ns.per_page,
            workers=ns.workers,
            all_pages=ns.all_pages,
            policy=ns.policy,

            verbose=ns.verbose,
            log_level=ns.log_level,
            log_file=ns.log_file,
            output=ns.output,
        )
