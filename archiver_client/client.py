"""Query façade owning one archiver transport for its whole lifetime."""

import logging

from archiver_client.core.config import Settings, get_settings
from archiver_client.core.errors import AlreadyClosed
from archiver_client.core.types import ArchiverStatus, Transaction
from archiver_client.transports.base import ArchiverTransport
from archiver_client.transports.http import HttpAdapter
from archiver_client.transports.rpc import RpcAdapter

logger = logging.getLogger(__name__)


def build_transport(settings: Settings) -> ArchiverTransport:
    """Create the adapter selected by ARCHIVER_TRANSPORT."""

    if settings.archiver_transport() == "rpc":
        return RpcAdapter(settings.archiver_target(), secure=settings.ARCHIVER_RPC_SECURE)
    return HttpAdapter(settings.archiver_base_url())


class ArchiverClient:
    """Issues exactly one transport exchange per query; no retries, no caching.

    ``timeout_s`` is the default per-call deadline, overridable on every query.
    ``None`` leaves the transport's own default in place. Closing twice is a no-op;
    querying after close raises ``AlreadyClosed``.
    """

    def __init__(self, transport: ArchiverTransport, timeout_s: float | None = None) -> None:
        self._transport = transport
        self._timeout_s = timeout_s
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ArchiverClient":
        settings = settings if settings is not None else get_settings()
        return cls(build_transport(settings), timeout_s=settings.archiver_timeout_s())

    @property
    def closed(self) -> bool:
        return self._closed

    def get_status(self, timeout_s: float | None = None) -> ArchiverStatus:
        return self._open_transport().fetch_status(self._deadline(timeout_s))

    def get_tick_transactions(
        self, tick_number: int, timeout_s: float | None = None
    ) -> tuple[Transaction, ...]:
        return self._open_transport().fetch_tick_transactions(
            tick_number, self._deadline(timeout_s)
        )

    def get_transaction(self, tx_id: str, timeout_s: float | None = None) -> Transaction:
        return self._open_transport().fetch_transaction(tx_id, self._deadline(timeout_s))

    def get_latest_tick(self, timeout_s: float | None = None) -> int:
        return self._open_transport().fetch_latest_tick(self._deadline(timeout_s))

    def close(self) -> None:
        """Release the transport connection; later calls are no-ops."""

        if self._closed:
            logger.debug("archiver_client_already_closed")
            return
        self._closed = True
        self._transport.close()
        logger.debug("archiver_client_closed", extra={"transport": type(self._transport).__name__})

    def __enter__(self) -> "ArchiverClient":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def _open_transport(self) -> ArchiverTransport:
        if self._closed:
            raise AlreadyClosed("archiver client is closed")
        return self._transport

    def _deadline(self, timeout_s: float | None) -> float | None:
        return self._timeout_s if timeout_s is None else timeout_s
