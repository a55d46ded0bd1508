"""Transport-agnostic value types shared by every archiver adapter."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFFFFFF
INT64_MAX = 0x7FFFFFFFFFFFFFFF


def require_int(name: str, value: object, upper: int) -> int:
    """Return value when it is a plain int within [0, upper], else raise ValueError."""

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > upper:
        raise ValueError(f"{name} must be within [0, {upper}], got {value}")
    return value


def _require_str(name: str, value: object) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {type(value).__name__}")
    return value


def _frozen_counts(name: str, values: Mapping[int, int]) -> Mapping[int, int]:
    frozen: dict[int, int] = {}
    for key, count in values.items():
        frozen[require_int(f"{name} key", key, UINT32_MAX)] = require_int(
            f"{name}[{key}]", count, UINT32_MAX
        )
    return MappingProxyType(frozen)


@dataclass(frozen=True, slots=True)
class TickReference:
    """A point in ledger history."""

    tick_number: int
    epoch: int

    def __post_init__(self) -> None:
        require_int("tick_number", self.tick_number, UINT32_MAX)
        require_int("epoch", self.epoch, UINT32_MAX)


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single archived transaction as recorded for its tick."""

    id: str
    source_id: str
    dest_id: str
    amount: int
    tick_number: int
    input_type: int
    input_size: int
    input_hex: str
    signature_hex: str

    def __post_init__(self) -> None:
        for name in ("id", "source_id", "dest_id", "input_hex", "signature_hex"):
            _require_str(name, getattr(self, name))
        require_int("amount", self.amount, INT64_MAX)
        require_int("tick_number", self.tick_number, UINT32_MAX)
        require_int("input_type", self.input_type, UINT16_MAX)
        require_int("input_size", self.input_size, UINT16_MAX)


@dataclass(frozen=True, slots=True)
class ProcessedInterval:
    """Contiguous tick range the archiver has processed."""

    first_tick: int
    last_tick: int

    def __post_init__(self) -> None:
        require_int("first_tick", self.first_tick, UINT32_MAX)
        require_int("last_tick", self.last_tick, UINT32_MAX)
        if self.first_tick > self.last_tick:
            raise ValueError(
                f"interval first_tick {self.first_tick} is after last_tick {self.last_tick}"
            )


@dataclass(frozen=True, slots=True)
class EpochIntervals:
    """Processed intervals of one epoch, ascending and non-overlapping."""

    epoch: int
    intervals: Sequence[ProcessedInterval]

    def __post_init__(self) -> None:
        require_int("epoch", self.epoch, UINT32_MAX)
        intervals = tuple(self.intervals)
        for previous, current in zip(intervals, intervals[1:]):
            if current.first_tick <= previous.last_tick:
                raise ValueError(
                    f"epoch {self.epoch} intervals overlap or are unordered: "
                    f"{previous.first_tick}-{previous.last_tick} then "
                    f"{current.first_tick}-{current.last_tick}"
                )
        object.__setattr__(self, "intervals", intervals)


@dataclass(frozen=True, slots=True)
class SkippedInterval:
    """Tick range for which the network recorded no data."""

    start_tick: int
    end_tick: int

    def __post_init__(self) -> None:
        require_int("start_tick", self.start_tick, UINT32_MAX)
        require_int("end_tick", self.end_tick, UINT32_MAX)


@dataclass(frozen=True, slots=True)
class ArchiverStatus:
    """Snapshot of the archiver's processing progress."""

    last_processed_tick: TickReference
    last_processed_tick_per_epoch: Mapping[int, int]
    skipped_ticks: Sequence[SkippedInterval]
    processed_intervals_per_epoch: Sequence[EpochIntervals]
    empty_ticks_per_epoch: Mapping[int, int]

    def __post_init__(self) -> None:
        if not isinstance(self.last_processed_tick, TickReference):
            raise ValueError("last_processed_tick must be a TickReference")
        object.__setattr__(
            self,
            "last_processed_tick_per_epoch",
            _frozen_counts("last_processed_tick_per_epoch", self.last_processed_tick_per_epoch),
        )
        object.__setattr__(self, "skipped_ticks", tuple(self.skipped_ticks))
        object.__setattr__(
            self, "processed_intervals_per_epoch", tuple(self.processed_intervals_per_epoch)
        )
        object.__setattr__(
            self,
            "empty_ticks_per_epoch",
            _frozen_counts("empty_ticks_per_epoch", self.empty_ticks_per_epoch),
        )
