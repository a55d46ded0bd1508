"""HTTP+JSON adapter for the archiver REST API."""

import logging
from urllib.parse import quote

import httpx

from archiver_client.core.errors import (
    AlreadyClosed,
    ConnectionFailure,
    DecodeFailure,
    NonSuccessStatus,
    RequestTimeout,
)
from archiver_client.core.types import ArchiverStatus, Transaction
from archiver_client.transports import http_schema
from archiver_client.transports.base import check_tick_number, check_tx_id

logger = logging.getLogger(__name__)


class HttpAdapter:
    """Blocking REST client; each fetch is one GET whose body is read in full.

    An injected ``client`` stays owned by the caller and is not closed by ``close()``.
    """

    def __init__(self, base_url: str, client: httpx.Client | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client()
        self._closed = False

    def fetch_status(self, timeout_s: float | None = None) -> ArchiverStatus:
        return http_schema.decode_status(self._get("/v1/status", timeout_s))

    def fetch_tick_transactions(
        self, tick_number: int, timeout_s: float | None = None
    ) -> tuple[Transaction, ...]:
        path = f"/v1/ticks/{check_tick_number(tick_number)}/transactions"
        return http_schema.decode_tick_transactions(self._get(path, timeout_s))

    def fetch_transaction(self, tx_id: str, timeout_s: float | None = None) -> Transaction:
        path = f"/v1/transactions/{quote(check_tx_id(tx_id), safe='')}"
        return http_schema.decode_transaction(self._get(path, timeout_s))

    def fetch_latest_tick(self, timeout_s: float | None = None) -> int:
        return http_schema.decode_latest_tick(self._get("/v1/latestTick", timeout_s))

    def close(self) -> None:
        """Release pooled connections if this adapter created the HTTP client."""

        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            self._client.close()
        logger.debug("archiver_http_client_closed", extra={"base_url": self.base_url})

    def __enter__(self) -> "HttpAdapter":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def _get(self, path: str, timeout_s: float | None) -> bytes:
        if self._closed:
            raise AlreadyClosed(f"HTTP adapter for {self.base_url} is closed")
        url = f"{self.base_url}{path}"
        timeout = httpx.USE_CLIENT_DEFAULT if timeout_s is None else timeout_s
        try:
            with self._client.stream("GET", url, timeout=timeout) as response:
                logger.debug(
                    "archiver_http_request",
                    extra={"url": url, "status_code": response.status_code},
                )
                # Non-200 bodies have no guaranteed schema and are left unread.
                if response.status_code != httpx.codes.OK:
                    raise NonSuccessStatus(response.status_code, url=url)
                return response.read()
        except httpx.TimeoutException as exc:
            raise RequestTimeout(f"GET {url} timed out") from exc
        except httpx.TransportError as exc:
            raise ConnectionFailure(f"GET {url} failed: {exc}") from exc
        except httpx.DecodingError as exc:
            raise DecodeFailure(f"GET {url}: undecodable response body: {exc}") from exc
