import io
import json
from unittest import mock

import pytest

from glsearch.cli import CliParser
from glsearch.exceptions import ResolutionError
from glsearch.models import BlobMatch, ReturnResult, SearchResult
from glsearch.modes import print_results, run_mode, write_results
from tests.helpers import FakeSession, blob_json, project_json

BASE = ["-u", "https://gitlab.example.com", "-t", "t0ken"]


def finished_result():
    sr = SearchResult(id=1, name="api")
    sr.set_matches([BlobMatch(project_id=1, data="pass = 1", ref="main", filename="a.py")])
    sr.result_list = (ReturnResult(name="api", url="https://gl/grp/api/-/blob/main/a.py", data="pass = 1"),)
    return sr


def test_print_results():
    out = io.StringIO()
    print_results([finished_result()], out)

    assert out.getvalue().splitlines() == [
        "Project: api",
        "URL: https://gl/grp/api/-/blob/main/a.py",
        "Data: pass = 1",
        "-------",
    ]


def test_write_results(tmp_path):
    path = tmp_path / "out" / "results.jsonl"
    write_results([finished_result()], path)

    (line,) = path.read_text(encoding="utf-8").splitlines()
    rec = json.loads(line)
    assert rec["id"] == 1
    assert rec["result_list"][0]["url"].endswith("/-/blob/main/a.py")


@pytest.fixture
def patched_session():
    session = FakeSession({
        "/projects/1": project_json(1, "api"),
        "/projects/1/search": [blob_json(1, "a.py")],
    })
    with mock.patch("glsearch.searcher.HttpSession", return_value=session):
        yield session


def test_search_mode(patched_session, capsys, tmp_path):
    out_file = tmp_path / "r.jsonl"
    args = CliParser.parse([*BASE, "-p", "1", "-q", "password", "--output", str(out_file)])

    run_mode(args)

    stdout = capsys.readouterr().out
    assert "URL: https://gitlab.example.com/grp/api/-/blob/main/a.py" in stdout
    assert "search result(s) = 1" in stdout
    assert out_file.exists()


def test_projects_mode(patched_session, capsys):
    args = CliParser.parse([*BASE, "-p", "1", "--mode", "projects"])

    run_mode(args)

    stdout = capsys.readouterr().out
    assert "https://gitlab.example.com/grp/api" in stdout
    assert "project(s) = 1" in stdout
    assert patched_session.calls_to("/projects/1/search") == []


def test_fail_fast_propagates(patched_session):
    args = CliParser.parse([*BASE, "-p", "1", "2", "-q", "password"])

    with pytest.raises(ResolutionError):
        run_mode(args)
