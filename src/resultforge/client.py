"""Authenticated API client for uploading serialized results.

Every outgoing request is signed with the key/secret pair:

- ``X-API-Key``: the public key
- ``X-API-Microtime``: UNIX timestamp of the request
- ``X-API-Hash``: hex HMAC-SHA1 over path, query string and timestamp, keyed
  with the secret

Key and secret are taken from the constructor, from ``RESULTFORGE_API_KEY`` /
``RESULTFORGE_API_SECRET``, or from an INI config file whose sections are the
API host names::

    [results.example.com]
    key = foo
    secret = bar

The config file is the first readable one of ``$RESULTFORGE_CLIENT_CONFIG``,
``~/.config/resultforge/client.conf`` and ``/etc/resultforge/client.conf``.
"""

from __future__ import annotations

import configparser
import hashlib
import hmac
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from resultforge.config import Settings, get_settings
from resultforge.core.exceptions import APIClientError
from resultforge.logging import get_logger

if TYPE_CHECKING:
    from resultforge.parsers import Parser

logger = get_logger(__name__)

CONFIG_LOCATIONS = (
    "~/.config/resultforge/client.conf",
    "/etc/resultforge/client.conf",
)

CONTENT_TYPES = {
    "native": "application/octet-stream",
    "text": "application/json",
}


def path_query(url: httpx.URL) -> str:
    """Return the encoded path plus ``?query`` when the URL has one."""
    return url.raw_path.decode("ascii")


def compute_hash(secret: str, request_path: str, timestamp: int | str) -> str:
    """Compute the request signature."""
    message = f"{request_path}{timestamp}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha1).hexdigest()


class APIClient:
    """HTTP client that signs every request with API key and secret.

    Usage:
        with APIClient("https://results.example.com", api="results.example.com") as client:
            client.upload_parser("/api/v1/results", parser)
    """

    def __init__(
        self,
        base_url: str,
        key: str | None = None,
        secret: str | None = None,
        api: str | None = None,
        *,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
        timeout: float | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the client.

        Args:
            base_url: Root URL of the API.
            key: API key; overrides settings and config file.
            secret: API secret; overrides settings and config file.
            api: Host name whose config file section supplies missing credentials.
            settings: Settings to use instead of the environment.
            transport: Custom httpx transport (tests, proxies).
            timeout: Request timeout in seconds; defaults to ``settings.api_timeout``.
            clock: Time source for the signature timestamp.
        """
        settings = settings or get_settings()
        self._settings = settings
        self.key = key or settings.api_key
        self.secret = secret or settings.api_secret
        self._clock = clock

        if api and not (self.key and self.secret):
            self._read_config(api)

        self._client = httpx.Client(
            base_url=base_url,
            transport=transport,
            timeout=timeout if timeout is not None else settings.api_timeout,
            event_hooks={"request": [self._add_auth_headers]},
        )

    def _config_candidates(self) -> list[Path]:
        candidates = []
        if self._settings.client_config:
            candidates.append(Path(self._settings.client_config).expanduser())
        candidates.extend(Path(location).expanduser() for location in CONFIG_LOCATIONS)
        return candidates

    def _read_config(self, api: str) -> None:
        """Fill missing key/secret from the first readable config file."""
        for path in self._config_candidates():
            if not path.is_file():
                continue
            config = configparser.ConfigParser()
            try:
                config.read(path, encoding="utf-8")
            except (OSError, configparser.Error) as e:
                logger.warning("client_config_unreadable", path=str(path), error=str(e))
                return
            if not config.has_section(api):
                return
            self.key = self.key or config.get(api, "key", fallback=None)
            self.secret = self.secret or config.get(api, "secret", fallback=None)
            return

    def _add_auth_headers(self, request: httpx.Request) -> None:
        if not (self.key and self.secret):
            logger.warning("api_credentials_missing", url=str(request.url))
            return

        timestamp = int(self._clock())
        request.headers["Accept"] = "application/json"
        request.headers["X-API-Key"] = self.key
        request.headers["X-API-Microtime"] = str(timestamp)
        request.headers["X-API-Hash"] = compute_hash(
            self.secret, path_query(request.url), timestamp
        )

    def request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """Make a signed request to the API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint relative to the base URL.
            **kwargs: Passed through to ``httpx.Client.request``.

        Returns:
            The HTTP response.

        Raises:
            APIClientError: On transport failures and error status codes.
        """
        try:
            response = self._client.request(method, endpoint, **kwargs)
        except httpx.RequestError as e:
            raise APIClientError(f"Request failed: {e}") from e

        logger.debug("api_request", method=method, endpoint=endpoint, status=response.status_code)
        if response.status_code >= 400:
            raise APIClientError(
                f"Request failed: {response.text}",
                status_code=response.status_code,
            )
        return response

    def upload(
        self,
        endpoint: str,
        payload: bytes,
        content_type: str = CONTENT_TYPES["native"],
    ) -> httpx.Response:
        """POST a raw byte payload."""
        return self.request(
            "POST", endpoint, content=payload, headers={"Content-Type": content_type}
        )

    def upload_parser(self, endpoint: str, parser: Parser, wire: str = "native") -> httpx.Response:
        """Serialize a parser in the given wire format and upload it.

        Args:
            endpoint: API endpoint.
            parser: Parser whose state is uploaded.
            wire: ``"native"`` or ``"text"``.
        """
        if wire not in CONTENT_TYPES:
            raise ValueError(f"Unknown wire format: {wire}")
        payload = parser.serialize() if wire == "native" else parser.to_text().encode("utf-8")
        return self.upload(endpoint, payload, content_type=CONTENT_TYPES[wire])

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> APIClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
