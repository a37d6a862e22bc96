from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

import gitlab.exceptions
import requests.exceptions
import urllib3
from gitlab import Gitlab
from requests import Session
from requests.adapters import HTTPAdapter

from glsearch.exceptions import ConstructionError, DecodeError, TransportError

DEFAULT_TIMEOUT: int = 30
DEFAULT_POOL_SIZE: int = 10


def normalize_proxy(proxy: str) -> str:
    """
    Normalize a proxy URL, adding an http:// scheme when it is missing.

    Raises:
        ConstructionError: If the value cannot be parsed as a proxy URL.
    """
    p = proxy.strip()
    if not p:
        return p
    if "://" not in p:
        p = f"http://{p}"
    parsed = urlparse(p)
    if not parsed.scheme or not parsed.netloc:
        raise ConstructionError(f"Invalid proxy URL: {proxy!r}. Example: http://127.0.0.1:8080")
    return p


class HttpSession:
    """
    Authenticated, read-only GET access to a GitLab-compatible API (v4).

    Requests go through a python-gitlab client with an OAuth-style bearer token,
    so every call carries `Authorization: Bearer <token>`. The underlying
    requests.Session is shared by all worker threads; its connection pool is
    sized to `pool_size` so concurrent units do not queue on connections.

    python-gitlab retries 429 responses by default. That is switched off per
    request: a failure is reported once and never retried.
    """

    def __init__(
            self,
            url: str,
            token: str,
            *,
            timeout: float = DEFAULT_TIMEOUT,
            ssl_verify: bool = True,
            proxy: str | None = None,
            pool_size: int = DEFAULT_POOL_SIZE,
            logger: logging.Logger | None = None,
    ) -> None:
        if not url or not url.strip():
            raise ConstructionError("url cannot be empty")
        if not token or not token.strip():
            raise ConstructionError("token cannot be empty")

        self.logger = logger or logging.getLogger(__name__)
        self.url: str = url.strip().rstrip("/")
        self.timeout = timeout
        self.ssl_verify = ssl_verify

        session = Session()
        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        if proxy:
            proxy = normalize_proxy(proxy)
            session.proxies.update({"http": proxy, "https": proxy})
        self.proxy = proxy or None

        if not ssl_verify:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            self.logger.warning("TLS certificate verification is DISABLED for %s", self.url)

        self.logger.debug("Connecting to GitLab: %s", self.url)
        self._gl = Gitlab(
            url=self.url,
            oauth_token=token,
            timeout=timeout,
            ssl_verify=ssl_verify,
            session=session,
            retry_transient_errors=False,
        )

    @property
    def api_url(self) -> str:
        return f"{self.url}/api/v4"

    def get(self, path: str, query: Mapping[str, Any] | None = None) -> Any:
        """
        Issue `GET {base}/api/v4{path}` and return the decoded JSON body.

        Query values are sent as given; an empty string is sent as `key=`.

        Raises:
            TransportError: Connection problems, timeouts and non-2xx statuses.
            DecodeError: The body was not JSON.
        """
        try:
            body = self._gl.http_get(
                path,
                query_data=dict(query or {}),
                obey_rate_limit=False,
                retry_transient_errors=False,
            )
        except gitlab.exceptions.GitlabParsingError as e:
            raise DecodeError(f"GET {path}: {e}") from e
        except (gitlab.exceptions.GitlabError, requests.exceptions.RequestException) as e:
            raise TransportError(f"GET {path}: {e}") from e

        # http_get hands back the raw response for non-JSON content types
        if not isinstance(body, (dict, list)):
            raise DecodeError(f"GET {path}: response is not JSON")
        return body
