"""
Shared HTTP gateway.

One pooled httpx client carries every outbound request: platform API
calls, manifest fetches and device commands. Non-2xx responses are
returned to the caller as ordinary results; only transport failures raise.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import httpx

from airtwitch.exceptions import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    """
    Status and body of a completed HTTP exchange.

    Attributes:
        status_code: HTTP status code
        body: Raw response body
        encoding: Character encoding declared by the server (None if absent)
        headers: Response headers
        url: Final request URL
    """

    status_code: int
    body: bytes
    encoding: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        """True for any 2xx status."""
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        """Body decoded with the declared encoding (UTF-8 if none)."""
        return self.body.decode(self.encoding or "utf-8", errors="replace")


class HttpGateway:
    """
    Executes HTTP requests over a single reusable connection pool.

    Args:
        timeout: Transport timeout in seconds (httpx default when None)
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        client_kwargs: dict[str, Any] = {"follow_redirects": True}
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        content: Optional[Union[str, bytes]] = None,
    ) -> HttpResponse:
        """
        Send a request and return its status and body.

        Raises:
            TransportError: Connection, protocol or timeout failure, or the
                gateway has already been closed
        """
        if self._closed:
            raise TransportError(f"HTTP gateway is closed; cannot {method} {url}")

        logger.debug(f"{method} {url}")
        try:
            response = self._client.request(
                method,
                url,
                params=params,
                headers=headers,
                content=content,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}", original_error=e) from e

        if not response.is_success:
            logger.debug(f"{method} {url} -> {response.status_code}")

        return HttpResponse(
            status_code=response.status_code,
            body=response.content,
            encoding=response.charset_encoding,
            headers=dict(response.headers),
            url=str(response.url),
        )

    def get(self, url: str, **kwargs: Any) -> HttpResponse:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> HttpResponse:
        return self.request("POST", url, **kwargs)

    def close(self) -> None:
        """Release pooled connections. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._client.close()

    def __enter__(self) -> "HttpGateway":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
