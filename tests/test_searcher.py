"""Tests for the concurrent search orchestration."""

import threading

import pytest

from glsearch.config import ProjectSelector, SearchConfig
from glsearch.exceptions import ConstructionError, ResolutionError, TransportError
from glsearch.models import Project
from glsearch.paginator import PageTermination
from glsearch.progress import SearchObserver, VerboseReport
from glsearch.searcher import GitlabSearcher
from tests.helpers import FakeSession, blob_json, paged, project_json


def mk_project(pid, name):
    return Project.from_json(project_json(pid, name))


class RecordingObserver(SearchObserver):
    def __init__(self):
        self.started = None
        self.searched = []
        self.finished = None
        self.threads = set()

    def search_started(self, projects):
        self.started = list(projects)

    def project_searched(self, result):
        self.searched.append(result)
        self.threads.add(threading.get_ident())

    def search_finished(self, results):
        self.finished = list(results)


@pytest.fixture
def session():
    return FakeSession({
        "/projects/1/search": [blob_json(1, "app/settings.py"), blob_json(1, "README.md", ref="dev")],
        "/projects/2/search": [],
        "/projects/3/search": TransportError("GET /projects/3/search: 500: 500 Internal Server Error"),
    })


@pytest.fixture
def searcher(session):
    return GitlabSearcher(session=session, max_workers=4)


class TestSearch:
    def test_one_result_per_project(self, searcher):
        projects = [mk_project(1, "api"), mk_project(2, "web"), mk_project(3, "ops")]

        results = searcher.search(projects, "password")

        assert sorted(sr.id for sr in results) == [1, 2, 3]

    def test_count_and_error_invariant(self, searcher):
        projects = [mk_project(1, "api"), mk_project(2, "web"), mk_project(3, "ops")]

        for sr in searcher.search(projects, "password"):
            assert (sr.count == -1) == bool(sr.error)
            if not sr.failed:
                assert sr.count == len(sr.blob_matches)

    def test_failure_is_isolated(self, searcher):
        projects = [mk_project(1, "api"), mk_project(3, "ops")]

        by_id = {sr.id: sr for sr in searcher.search(projects, "password")}

        assert by_id[3].count == -1
        assert "500 Internal Server Error" in by_id[3].error
        assert by_id[3].blob_matches == ()
        assert by_id[3].result_list == ()
        assert by_id[1].count == 2
        assert by_id[1].error == ""

    def test_no_matches_is_zero_not_failure(self, searcher):
        (sr,) = searcher.search([mk_project(2, "web")], "password")
        assert sr.count == 0
        assert not sr.failed

    def test_deep_links(self, searcher):
        (sr,) = searcher.search([mk_project(1, "api")], "password")

        assert len(sr.result_list) == len(sr.blob_matches) == 2
        for blob, rr in zip(sr.blob_matches, sr.result_list):
            assert rr.url == f"https://gitlab.example.com/grp/api/-/blob/{blob.ref}/{blob.filename}"
            assert rr.name == "api"
            assert rr.data == blob.data
        assert sr.result_list[1].url == "https://gitlab.example.com/grp/api/-/blob/dev/README.md"

    def test_blob_search_query(self, searcher, session):
        searcher.search([mk_project(2, "web")], "secret key")

        assert session.calls_to("/projects/2/search") == [
            {"scope": "blobs", "search": "secret key", "per_page": 100, "page": 1}
        ]

    def test_empty_keyword_is_sent(self, searcher, session):
        searcher.search([mk_project(2, "web")], "")

        (query,) = session.calls_to("/projects/2/search")
        assert "search" in query
        assert query["search"] == ""

    def test_duplicate_projects_searched_independently(self, searcher, session):
        projects = [mk_project(1, "api"), mk_project(1, "api")]

        results = searcher.search(projects, "password")

        assert len(results) == 2
        assert len(session.calls_to("/projects/1/search")) == 2
        assert all(len(sr.result_list) == 2 for sr in results)

    def test_no_projects(self, searcher, session):
        assert searcher.search([], "password") == []
        assert session.calls == []

    def test_elapsed_is_recorded(self, searcher):
        (sr,) = searcher.search([mk_project(1, "api")], "password")
        assert sr.elapsed_ms >= 0

    def test_pagination_rule_is_applied(self, session):
        session.routes["/projects/5/search"] = paged([blob_json(5, f"f{i}.py") for i in range(150)])

        literal = GitlabSearcher(session=session).search([mk_project(5, "big")], "x")
        assert literal[0].count == 100

        full = GitlabSearcher(session=session, termination=PageTermination.FULL_PAGES).search(
            [mk_project(5, "big")], "x"
        )
        assert full[0].count == 150

    def test_runs_concurrently(self):
        """Two units must be in flight at the same time with two workers."""
        barrier = threading.Barrier(2, timeout=5)

        def handler(_query):
            barrier.wait()
            return []

        session = FakeSession({"/projects/1/search": handler, "/projects/2/search": handler})
        results = GitlabSearcher(session=session, max_workers=2).search(
            [mk_project(1, "a"), mk_project(2, "b")], "x"
        )

        assert all(sr.count == 0 for sr in results)


class TestObserver:
    def test_events(self, session):
        observer = RecordingObserver()
        projects = [mk_project(1, "api"), mk_project(2, "web"), mk_project(3, "ops")]

        results = GitlabSearcher(session=session, observer=observer).search(projects, "password")

        assert observer.started == projects
        assert sorted(sr.id for sr in observer.searched) == [1, 2, 3]
        assert observer.finished == results
        # events are delivered from the draining thread only
        assert observer.threads == {threading.get_ident()}


class TestResolveAndSearch:
    def test_search_by_ids(self, session):
        session.routes["/projects/1"] = project_json(1, "api")
        session.routes["/projects/2"] = project_json(2, "web")

        results = GitlabSearcher(session=session).search_by_ids([1, 2], "password")

        assert sorted(sr.id for sr in results) == [1, 2]

    def test_search_by_ids_fails_fast(self, session):
        session.routes["/projects/1"] = project_json(1, "api")

        with pytest.raises(ResolutionError):
            GitlabSearcher(session=session).search_by_ids([1, 2], "password")

        assert session.calls_to("/projects/1/search") == []

    def test_search_by_group_ids(self, session):
        session.routes["/groups/10/projects"] = [project_json(1, "api"), project_json(2, "web")]
        session.routes["/groups/20/projects"] = [project_json(2, "web")]

        results = GitlabSearcher(session=session).search_by_group_ids([10, 20], "password")

        assert sorted(sr.id for sr in results) == [1, 2, 2]

    def test_search_by_name(self, session):
        session.routes["/search"] = [project_json(1, "api")]

        (sr,) = GitlabSearcher(session=session).search_by_name("api", "password")

        assert sr.count == 2

    def test_run_from_config(self, session):
        session.routes["/search"] = [project_json(1, "api"), project_json(3, "ops")]
        config = SearchConfig(
            url="https://gitlab.example.com",
            token="t0ken",
            keyword="password",
            selector=ProjectSelector(project_name="a"),
        )

        searcher = GitlabSearcher.from_config(config, session=session)
        results = searcher.run(config)

        assert sorted((sr.id, sr.count) for sr in results) == [(1, 2), (3, -1)]


class TestConstruction:
    def test_verbose_config_installs_report(self, session):
        config = SearchConfig(
            url="https://gitlab.example.com",
            token="t0ken",
            keyword="x",
            selector=ProjectSelector(project_ids=(1,)),
            verbose=True,
        )

        searcher = GitlabSearcher.from_config(config, session=session)

        assert isinstance(searcher.observer, VerboseReport)

    def test_empty_token_rejected(self):
        with pytest.raises(ConstructionError):
            GitlabSearcher(url="https://gitlab.example.com", token="")

    def test_zero_workers_rejected(self, session):
        with pytest.raises(ConstructionError):
            GitlabSearcher(session=session, max_workers=0)
