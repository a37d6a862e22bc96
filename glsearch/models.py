from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from glsearch.exceptions import DecodeError

FAILED_COUNT: int = -1


def _field(payload: Any, key: str, kind: type) -> Any:
    """Pull a required, typed field out of a decoded API object."""
    if not isinstance(payload, dict):
        raise DecodeError(f"Expected a JSON object, got {type(payload).__name__}.")
    if key not in payload:
        raise DecodeError(f"Missing field '{key}' in API object.")

    value = payload[key]
    # bool is an int subclass; an id of `true` is still garbage
    if (kind is int and isinstance(value, bool)) or not isinstance(value, kind):
        raise DecodeError(f"Field '{key}' has type {type(value).__name__}, expected {kind.__name__}.")
    return value


@dataclass(frozen=True, slots=True)
class Project:
    """Minimal project descriptor used to drive a blob search."""
    id: int
    name: str
    web_url: str

    @classmethod
    def from_json(cls, payload: Any) -> Project:
        return cls(
            id=_field(payload, "id", int),
            name=_field(payload, "name", str),
            web_url=_field(payload, "web_url", str),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class BlobMatch:
    """
    One hit returned by the project blob search endpoint.

    Attributes:
        project_id: Project the blob belongs to.
        data: Content snippet around the match.
        ref: Revision the blob was found at.
        filename: Path of the file inside the repository.
    """
    project_id: int
    data: str
    ref: str
    filename: str

    @classmethod
    def from_json(cls, payload: Any) -> BlobMatch:
        return cls(
            project_id=_field(payload, "project_id", int),
            data=_field(payload, "data", str),
            ref=_field(payload, "ref", str),
            filename=_field(payload, "filename", str),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ReturnResult:
    """A deep-linked match ready for presentation."""
    name: str
    url: str
    data: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class SearchResult:
    """
    Outcome of searching a single project.

    A search unit creates and fills exactly one instance, then hands it off.
    From then on it is treated as read-only; later stages derive copies.

    `count` is FAILED_COUNT (-1) exactly when `error` is set; otherwise it
    equals the number of blob matches.
    """
    id: int
    name: str
    count: int = 0
    error: str = ""
    blob_matches: tuple[BlobMatch, ...] = ()
    result_list: tuple[ReturnResult, ...] = ()
    elapsed_ms: int = 0

    @property
    def failed(self) -> bool:
        return self.count == FAILED_COUNT

    def mark_failed(self, error: str) -> None:
        """Record a failed search: sentinel count, no matches."""
        self.count = FAILED_COUNT
        self.error = error or "unknown error"
        self.blob_matches = ()

    def set_matches(self, matches: list[BlobMatch] | tuple[BlobMatch, ...]) -> None:
        self.blob_matches = tuple(matches)
        self.count = len(self.blob_matches)
        self.error = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "count": self.count,
            "error": self.error,
            "elapsed_ms": self.elapsed_ms,
            "blob_matches": [b.to_dict() for b in self.blob_matches],
            "result_list": [r.to_dict() for r in self.result_list],
        }
