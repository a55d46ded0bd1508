"""Capability shared by the RPC and HTTP archiver adapters."""

from typing import Protocol

from archiver_client.core.types import UINT32_MAX, ArchiverStatus, Transaction, require_int


class ArchiverTransport(Protocol):
    """One request per call, decoded into canonical values or a typed failure."""

    def fetch_status(self, timeout_s: float | None = None) -> ArchiverStatus: ...

    def fetch_tick_transactions(
        self, tick_number: int, timeout_s: float | None = None
    ) -> tuple[Transaction, ...]: ...

    def fetch_transaction(self, tx_id: str, timeout_s: float | None = None) -> Transaction: ...

    def fetch_latest_tick(self, timeout_s: float | None = None) -> int: ...

    def close(self) -> None: ...


def check_tick_number(tick_number: int) -> int:
    """Reject tick numbers that cannot be encoded as uint32."""

    return require_int("tick_number", tick_number, UINT32_MAX)


def check_tx_id(tx_id: str) -> str:
    """Reject transaction identifiers that cannot address a transaction."""

    if not isinstance(tx_id, str) or not tx_id.strip():
        raise ValueError("tx_id must be a non-empty string")
    return tx_id.strip()
