"""gRPC adapter translating ArchiveService responses into the canonical model."""

import logging
from collections.abc import Callable
from typing import Any

import grpc
from google.protobuf import empty_pb2
from google.protobuf.message import DecodeError

from archiver_client.core.errors import (
    AlreadyClosed,
    ConnectionFailure,
    DecodeFailure,
    RequestTimeout,
    RpcStatusError,
)
from archiver_client.core.types import (
    ArchiverStatus,
    EpochIntervals,
    ProcessedInterval,
    SkippedInterval,
    TickReference,
    Transaction,
)
from archiver_client.transports import archive_pb
from archiver_client.transports.base import check_tick_number, check_tx_id

logger = logging.getLogger(__name__)

_CONNECTION_CODES = (grpc.StatusCode.UNAVAILABLE, grpc.StatusCode.CANCELLED)


def _serialize(message: Any) -> bytes:
    return message.SerializeToString()


def _parse(message_class: Any, raw: bytes, method: str) -> Any:
    try:
        return message_class.FromString(raw)
    except DecodeError as exc:
        raise DecodeFailure(f"{method}: malformed response message: {exc}") from exc


def _to_transaction(message: Any) -> Transaction:
    return Transaction(
        id=message.tx_id,
        source_id=message.source_id,
        dest_id=message.dest_id,
        amount=message.amount,
        tick_number=message.tick_number,
        input_type=message.input_type,
        input_size=message.input_size,
        input_hex=message.input_hex,
        signature_hex=message.signature_hex,
    )


def _to_status(message: Any) -> ArchiverStatus:
    if not message.HasField("last_processed_tick"):
        raise ValueError("status response has no last_processed_tick")

    return ArchiverStatus(
        last_processed_tick=TickReference(
            tick_number=message.last_processed_tick.tick_number,
            epoch=message.last_processed_tick.epoch,
        ),
        last_processed_tick_per_epoch=dict(message.last_processed_ticks_per_epoch),
        skipped_ticks=[
            SkippedInterval(start_tick=item.start_tick, end_tick=item.end_tick)
            for item in message.skipped_ticks
        ],
        processed_intervals_per_epoch=[
            EpochIntervals(
                epoch=epoch.epoch,
                intervals=[
                    ProcessedInterval(
                        first_tick=interval.initial_processed_tick,
                        last_tick=interval.last_processed_tick,
                    )
                    for interval in epoch.intervals
                ],
            )
            for epoch in message.processed_tick_intervals_per_epoch
        ],
        empty_ticks_per_epoch=dict(message.empty_ticks_per_epoch),
    )


def _canonical(method: str, build: Callable[[], Any]) -> Any:
    try:
        return build()
    except ValueError as exc:
        raise DecodeFailure(f"{method}: response does not fit the canonical model: {exc}") from exc


class RpcAdapter:
    """Blocking ArchiveService client over a single gRPC channel.

    The channel is plaintext unless ``secure`` is set, in which case default TLS
    channel credentials are used. Calls are not multiplexed: issue one at a time.
    """

    def __init__(
        self,
        target: str,
        secure: bool = False,
        channel: grpc.Channel | None = None,
    ) -> None:
        self.target = target
        self._owns_channel = channel is None
        if channel is None:
            if secure:
                channel = grpc.secure_channel(target, grpc.ssl_channel_credentials())
            else:
                channel = grpc.insecure_channel(target)
        self._channel = channel
        self._closed = False

    def fetch_status(self, timeout_s: float | None = None) -> ArchiverStatus:
        raw = self._invoke("GetStatus", empty_pb2.Empty(), timeout_s)
        message = _parse(archive_pb.GetStatusResponse, raw, "GetStatus")
        return _canonical("GetStatus", lambda: _to_status(message))

    def fetch_tick_transactions(
        self, tick_number: int, timeout_s: float | None = None
    ) -> tuple[Transaction, ...]:
        request = archive_pb.GetTickTransactionsRequest(tick_number=check_tick_number(tick_number))
        raw = self._invoke("GetTickTransactions", request, timeout_s)
        message = _parse(archive_pb.GetTickTransactionsResponse, raw, "GetTickTransactions")
        return _canonical(
            "GetTickTransactions",
            lambda: tuple(_to_transaction(item) for item in message.transactions),
        )

    def fetch_transaction(self, tx_id: str, timeout_s: float | None = None) -> Transaction:
        request = archive_pb.GetTransactionRequest(tx_id=check_tx_id(tx_id))
        raw = self._invoke("GetTransaction", request, timeout_s)
        message = _parse(archive_pb.GetTransactionResponse, raw, "GetTransaction")
        if not message.HasField("transaction"):
            raise DecodeFailure("GetTransaction: response has no transaction")
        return _canonical("GetTransaction", lambda: _to_transaction(message.transaction))

    def fetch_latest_tick(self, timeout_s: float | None = None) -> int:
        raw = self._invoke("GetLatestTick", empty_pb2.Empty(), timeout_s)
        return _parse(archive_pb.GetLatestTickResponse, raw, "GetLatestTick").latest_tick

    def close(self) -> None:
        """Close the channel if this adapter opened it."""

        if self._closed:
            return
        self._closed = True
        if self._owns_channel:
            self._channel.close()
        logger.debug("archiver_rpc_channel_closed", extra={"target": self.target})

    def __enter__(self) -> "RpcAdapter":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def _invoke(self, method: str, request: Any, timeout_s: float | None) -> bytes:
        if self._closed:
            raise AlreadyClosed(f"RPC adapter for {self.target} is closed")
        # Responses stay raw so that malformed payloads surface as DecodeFailure.
        call = self._channel.unary_unary(
            f"/{archive_pb.SERVICE_NAME}/{method}",
            request_serializer=_serialize,
            response_deserializer=None,
        )
        logger.debug("archiver_rpc_call", extra={"target": self.target, "method": method})
        try:
            return call(request, timeout=timeout_s)
        except grpc.RpcError as exc:
            raise _translate_rpc_error(method, exc) from exc


def _translate_rpc_error(method: str, exc: grpc.RpcError) -> Exception:
    code = exc.code() if hasattr(exc, "code") else grpc.StatusCode.UNKNOWN
    details = exc.details() if hasattr(exc, "details") else ""
    if code == grpc.StatusCode.DEADLINE_EXCEEDED:
        return RequestTimeout(f"{method}: deadline exceeded")
    if code in _CONNECTION_CODES:
        return ConnectionFailure(f"{method}: {code.name}: {details}")
    return RpcStatusError(code.name, details or "")
