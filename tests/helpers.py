from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Any

from glsearch.exceptions import TransportError


def project_json(pid: int, name: str) -> dict[str, Any]:
    return {
        "id": pid,
        "name": name,
        "web_url": f"https://gitlab.example.com/grp/{name}",
        "path_with_namespace": f"grp/{name}",
    }


def blob_json(pid: int, filename: str, ref: str = "main", data: str = "password = 1") -> dict[str, Any]:
    return {
        "project_id": pid,
        "data": data,
        "ref": ref,
        "filename": filename,
        "path": filename,
        "startline": 1,
    }


def paged(items: list[Any]) -> Callable[[dict[str, Any]], list[Any]]:
    """Route handler serving `items` honoring per_page/page, like the real API."""

    def handler(query: dict[str, Any]) -> list[Any]:
        per_page = int(query.get("per_page", 20))
        page = int(query.get("page", 1))
        return items[(page - 1) * per_page: page * per_page]

    return handler


class FakeSession:
    """
    In-memory stand-in for HttpSession.

    Routes map an API path to a value, an exception instance, or a callable
    taking the query dict. Every call is recorded as (path, query).
    """

    def __init__(self, routes: Mapping[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._lock = threading.Lock()

    def get(self, path: str, query: Mapping[str, Any] | None = None) -> Any:
        q = dict(query or {})
        with self._lock:
            self.calls.append((path, q))

        if path not in self.routes:
            raise TransportError(f"GET {path}: 404: 404 Not Found")

        route = self.routes[path]
        if callable(route):
            route = route(q)
        if isinstance(route, Exception):
            raise route
        return route

    def calls_to(self, path: str) -> list[dict[str, Any]]:
        return [q for p, q in self.calls if p == path]
