"""Strict JSON records of the archiver REST API and their canonical mapping.

Every record is validated in pydantic strict mode: a missing or mistyped field is
a validation error, never a silently zeroed value.
"""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from archiver_client.core.errors import DecodeFailure
from archiver_client.core.types import (
    UINT32_MAX,
    ArchiverStatus,
    EpochIntervals,
    ProcessedInterval,
    SkippedInterval,
    TickReference,
    Transaction,
    require_int,
)

_DECIMAL = re.compile(r"-?[0-9]+")
_UNSIGNED_DECIMAL = re.compile(r"[0-9]+")


class _WireModel(BaseModel):
    model_config = ConfigDict(
        strict=True,
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class TickJson(_WireModel):
    tick_number: int
    epoch: int


class SkippedIntervalJson(_WireModel):
    start_tick: int
    end_tick: int


class ProcessedIntervalJson(_WireModel):
    initial_processed_tick: int
    last_processed_tick: int


class EpochIntervalsJson(_WireModel):
    epoch: int
    intervals: list[ProcessedIntervalJson] = Field(default_factory=list)


class StatusJson(_WireModel):
    """Body of ``GET /v1/status``; absent collections decode as empty."""

    last_processed_tick: TickJson
    last_processed_ticks_per_epoch: dict[str, int] = Field(default_factory=dict)
    skipped_ticks: list[SkippedIntervalJson] = Field(default_factory=list)
    processed_tick_intervals_per_epoch: list[EpochIntervalsJson] = Field(default_factory=list)
    empty_ticks_per_epoch: dict[str, int] = Field(default_factory=dict)


class TransactionJson(_WireModel):
    source_id: str
    dest_id: str
    amount: int
    tick_number: int
    input_type: int
    input_size: int
    input_hex: str
    signature_hex: str
    tx_id: str

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_from_decimal_string(cls, value: Any) -> Any:
        # int64 travels as a decimal string under the proto3 JSON mapping.
        if isinstance(value, str):
            if not _DECIMAL.fullmatch(value):
                raise ValueError(f"amount is not a decimal integer: {value!r}")
            return int(value)
        return value


class TickTransactionsJson(_WireModel):
    transactions: list[TransactionJson]


class TransactionEnvelopeJson(_WireModel):
    transaction: TransactionJson


class LatestTickJson(_WireModel):
    latest_tick: int


def _epoch_key(key: str) -> int:
    if not _UNSIGNED_DECIMAL.fullmatch(key):
        raise ValueError(f"epoch key is not a decimal integer: {key!r}")
    return int(key)


def _to_transaction(record: TransactionJson) -> Transaction:
    return Transaction(
        id=record.tx_id,
        source_id=record.source_id,
        dest_id=record.dest_id,
        amount=record.amount,
        tick_number=record.tick_number,
        input_type=record.input_type,
        input_size=record.input_size,
        input_hex=record.input_hex,
        signature_hex=record.signature_hex,
    )


def _to_status(record: StatusJson) -> ArchiverStatus:
    return ArchiverStatus(
        last_processed_tick=TickReference(
            tick_number=record.last_processed_tick.tick_number,
            epoch=record.last_processed_tick.epoch,
        ),
        last_processed_tick_per_epoch={
            _epoch_key(key): tick for key, tick in record.last_processed_ticks_per_epoch.items()
        },
        skipped_ticks=[
            SkippedInterval(start_tick=item.start_tick, end_tick=item.end_tick)
            for item in record.skipped_ticks
        ],
        processed_intervals_per_epoch=[
            EpochIntervals(
                epoch=item.epoch,
                intervals=[
                    ProcessedInterval(
                        first_tick=interval.initial_processed_tick,
                        last_tick=interval.last_processed_tick,
                    )
                    for interval in item.intervals
                ],
            )
            for item in record.processed_tick_intervals_per_epoch
        ],
        empty_ticks_per_epoch={
            _epoch_key(key): count for key, count in record.empty_ticks_per_epoch.items()
        },
    )


def decode_status(body: bytes) -> ArchiverStatus:
    """Decode a ``/v1/status`` body into an ArchiverStatus."""

    try:
        return _to_status(StatusJson.model_validate_json(body))
    except ValueError as exc:
        raise DecodeFailure(f"invalid status body: {exc}") from exc


def decode_tick_transactions(body: bytes) -> tuple[Transaction, ...]:
    """Decode a ``/v1/ticks/{tick}/transactions`` body, keeping server order."""

    try:
        record = TickTransactionsJson.model_validate_json(body)
        return tuple(_to_transaction(item) for item in record.transactions)
    except ValueError as exc:
        raise DecodeFailure(f"invalid tick transactions body: {exc}") from exc


def decode_transaction(body: bytes) -> Transaction:
    """Decode a ``/v1/transactions/{txId}`` body."""

    try:
        return _to_transaction(TransactionEnvelopeJson.model_validate_json(body).transaction)
    except ValueError as exc:
        raise DecodeFailure(f"invalid transaction body: {exc}") from exc


def decode_latest_tick(body: bytes) -> int:
    """Decode a ``/v1/latestTick`` body."""

    try:
        latest_tick = LatestTickJson.model_validate_json(body).latest_tick
        return require_int("latest_tick", latest_tick, UINT32_MAX)
    except ValueError as exc:
        raise DecodeFailure(f"invalid latest tick body: {exc}") from exc


def transaction_to_json(transaction: Transaction) -> dict[str, Any]:
    """Render a canonical transaction in the REST API's JSON shape."""

    return TransactionJson(
        source_id=transaction.source_id,
        dest_id=transaction.dest_id,
        amount=transaction.amount,
        tick_number=transaction.tick_number,
        input_type=transaction.input_type,
        input_size=transaction.input_size,
        input_hex=transaction.input_hex,
        signature_hex=transaction.signature_hex,
        tx_id=transaction.id,
    ).model_dump(by_alias=True)


def status_to_json(status: ArchiverStatus) -> dict[str, Any]:
    """Render a canonical status in the REST API's JSON shape."""

    return StatusJson(
        last_processed_tick=TickJson(
            tick_number=status.last_processed_tick.tick_number,
            epoch=status.last_processed_tick.epoch,
        ),
        last_processed_ticks_per_epoch={
            str(epoch): tick for epoch, tick in status.last_processed_tick_per_epoch.items()
        },
        skipped_ticks=[
            SkippedIntervalJson(start_tick=item.start_tick, end_tick=item.end_tick)
            for item in status.skipped_ticks
        ],
        processed_tick_intervals_per_epoch=[
            EpochIntervalsJson(
                epoch=item.epoch,
                intervals=[
                    ProcessedIntervalJson(
                        initial_processed_tick=interval.first_tick,
                        last_processed_tick=interval.last_tick,
                    )
                    for interval in item.intervals
                ],
            )
            for item in status.processed_intervals_per_epoch
        ],
        empty_ticks_per_epoch={
            str(epoch): count for epoch, count in status.empty_ticks_per_epoch.items()
        },
    ).model_dump(by_alias=True)
