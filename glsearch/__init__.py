"""
glsearch — concurrent GitLab blob search
========================================

Resolves a set of GitLab projects and searches their blobs concurrently,
returning matches with deep links into the GitLab web UI.

The package provides:

- Project resolution by explicit IDs, by group IDs or by name search.
- One concurrent search unit per project on a bounded worker pool.
- Per-project failure isolation (count -1 plus an error message).
- Deep links of the form `{web_url}/-/blob/{ref}/{filename}`.
- A CLI with a verbose per-project timing report.

Modules
-------

session
    Authenticated GET access to the GitLab v4 API.

paginator
    Page walker and its stop rule.

resolver
    Project resolution strategies and their failure policies.

searcher
    GitlabSearcher: resolution + concurrent blob search + aggregation.

aggregator
    Turns blob matches into deep-linked results.

progress
    Observer interface for search progress (verbose report, progress bar).

cli / modes
    Argument parser and workflow dispatcher.

Typical usage
-------------

As a library:

    from glsearch import GitlabSearcher

    gls = GitlabSearcher(url="https://gitlab.example.com", token="...")
    results = gls.search_by_group_ids([10, 20], "password")

As a CLI:

    gl-search -u https://gitlab.example.com -t XXX -g 10 -g 20 -q password -v

"""

__version__ = "1.0.0"

from .searcher import GitlabSearcher
from .cli import CliParser

__all__ = [
    "GitlabSearcher",
    "CliParser",
    "__version__",
]
