import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from types import TracebackType
from typing import Protocol, runtime_checkable

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from caption_scribe.config import DEFAULT_RETRIES, DEFAULT_TIMEOUT
from caption_scribe.errors import RequestFailedError, TransportError
from caption_scribe.types import Response

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)


@runtime_checkable
class Transport(Protocol):
    def send(self, method: str, url: str, headers: Mapping[str, str]) -> Response: ...


@contextmanager
def handle_transport_errors() -> Iterator[None]:
    try:
        yield
    except httpx.HTTPError as e:
        raise TransportError(str(e) or type(e).__name__) from e


class HttpxTransport:
    """Default transport backed by a pooled ``httpx.Client``.

    Transient network failures are retried with exponential backoff; HTTP error
    statuses are returned as-is for the caller to judge.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        client: httpx.Client | None = None,
    ) -> None:
        self.retries = max(retries, 1)
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def send(self, method: str, url: str, headers: Mapping[str, str]) -> Response:
        with handle_transport_errors():
            response = self._send_with_retry(method, url, dict(headers))
        return Response(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            body=response.content,
        )

    def _send_with_retry(self, method: str, url: str, headers: dict[str, str]) -> httpx.Response:
        sender = retry(
            stop=stop_after_attempt(self.retries),
            wait=wait_exponential(multiplier=1, min=1, max=4),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        )(self._client.request)
        return sender(method, url, headers=headers)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def send_request(
    transport: Transport,
    video_id: str,
    url: str,
    headers: Mapping[str, str],
) -> Response:
    """GET ``url`` and return the response, or raise ``RequestFailedError``.

    Any exception the transport raises and any status of 400 or above are
    reported as the same error kind.
    """
    logger.debug("GET %s", url, extra={"video_id": video_id})
    try:
        response = transport.send("GET", url, headers)
    except Exception as e:
        raise RequestFailedError(video_id, str(e) or type(e).__name__) from e

    if response.status_code >= 400:
        logger.debug(
            "Request rejected",
            extra={"video_id": video_id, "status_code": response.status_code},
        )
        raise RequestFailedError(video_id, response.reason_phrase or str(response.status_code))
    return response
