"""Protobuf messages of the archiver's ArchiveService, built from a file descriptor.

Field numbers and types mirror the service's ``archive.proto``; only the messages
used by the RPC adapter are declared.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "qubic.archiver.archive.pb"
SERVICE_NAME = f"{PACKAGE}.ArchiveService"

_Field = descriptor_pb2.FieldDescriptorProto


def _field(
    name: str,
    number: int,
    field_type: int,
    *,
    repeated: bool = False,
    type_name: str = "",
) -> descriptor_pb2.FieldDescriptorProto:
    field = _Field(
        name=name,
        number=number,
        type=field_type,
        label=_Field.LABEL_REPEATED if repeated else _Field.LABEL_OPTIONAL,
    )
    if type_name:
        field.type_name = f".{PACKAGE}.{type_name}"
    return field


def _message(
    name: str,
    *fields: descriptor_pb2.FieldDescriptorProto,
    nested: tuple[descriptor_pb2.DescriptorProto, ...] = (),
) -> descriptor_pb2.DescriptorProto:
    message = descriptor_pb2.DescriptorProto(name=name)
    message.field.extend(fields)
    message.nested_type.extend(nested)
    return message


def _uint32_map_entry(name: str) -> descriptor_pb2.DescriptorProto:
    entry = _message(
        name,
        _field("key", 1, _Field.TYPE_UINT32),
        _field("value", 2, _Field.TYPE_UINT32),
    )
    entry.options.map_entry = True
    return entry


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="archiver_client/archive.proto",
        package=PACKAGE,
        syntax="proto3",
    )
    file_proto.message_type.extend(
        [
            _message(
                "Transaction",
                _field("source_id", 1, _Field.TYPE_STRING),
                _field("dest_id", 2, _Field.TYPE_STRING),
                _field("amount", 3, _Field.TYPE_INT64),
                _field("tick_number", 4, _Field.TYPE_UINT32),
                _field("input_type", 5, _Field.TYPE_UINT32),
                _field("input_size", 6, _Field.TYPE_UINT32),
                _field("input_hex", 7, _Field.TYPE_STRING),
                _field("signature_hex", 8, _Field.TYPE_STRING),
                _field("tx_id", 9, _Field.TYPE_STRING),
            ),
            _message("GetTickTransactionsRequest", _field("tick_number", 1, _Field.TYPE_UINT32)),
            _message(
                "GetTickTransactionsResponse",
                _field(
                    "transactions", 1, _Field.TYPE_MESSAGE, repeated=True, type_name="Transaction"
                ),
            ),
            _message("GetTransactionRequest", _field("tx_id", 1, _Field.TYPE_STRING)),
            _message(
                "GetTransactionResponse",
                _field("transaction", 1, _Field.TYPE_MESSAGE, type_name="Transaction"),
            ),
            _message("GetLatestTickResponse", _field("latest_tick", 1, _Field.TYPE_UINT32)),
            _message(
                "ProcessedTick",
                _field("tick_number", 1, _Field.TYPE_UINT32),
                _field("epoch", 2, _Field.TYPE_UINT32),
            ),
            _message(
                "SkippedTicksInterval",
                _field("start_tick", 1, _Field.TYPE_UINT32),
                _field("end_tick", 2, _Field.TYPE_UINT32),
            ),
            _message(
                "ProcessedTickInterval",
                _field("initial_processed_tick", 1, _Field.TYPE_UINT32),
                _field("last_processed_tick", 2, _Field.TYPE_UINT32),
            ),
            _message(
                "ProcessedTickIntervalsPerEpoch",
                _field("epoch", 1, _Field.TYPE_UINT32),
                _field(
                    "intervals",
                    2,
                    _Field.TYPE_MESSAGE,
                    repeated=True,
                    type_name="ProcessedTickInterval",
                ),
            ),
            _message(
                "GetStatusResponse",
                _field("last_processed_tick", 1, _Field.TYPE_MESSAGE, type_name="ProcessedTick"),
                _field(
                    "last_processed_ticks_per_epoch",
                    2,
                    _Field.TYPE_MESSAGE,
                    repeated=True,
                    type_name="GetStatusResponse.LastProcessedTicksPerEpochEntry",
                ),
                _field(
                    "skipped_ticks",
                    3,
                    _Field.TYPE_MESSAGE,
                    repeated=True,
                    type_name="SkippedTicksInterval",
                ),
                _field(
                    "processed_tick_intervals_per_epoch",
                    4,
                    _Field.TYPE_MESSAGE,
                    repeated=True,
                    type_name="ProcessedTickIntervalsPerEpoch",
                ),
                _field(
                    "empty_ticks_per_epoch",
                    5,
                    _Field.TYPE_MESSAGE,
                    repeated=True,
                    type_name="GetStatusResponse.EmptyTicksPerEpochEntry",
                ),
                nested=(
                    _uint32_map_entry("LastProcessedTicksPerEpochEntry"),
                    _uint32_map_entry("EmptyTicksPerEpochEntry"),
                ),
            ),
        ]
    )
    return file_proto


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(_build_file().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(f"{PACKAGE}.{name}"))


Transaction = _message_class("Transaction")
GetTickTransactionsRequest = _message_class("GetTickTransactionsRequest")
GetTickTransactionsResponse = _message_class("GetTickTransactionsResponse")
GetTransactionRequest = _message_class("GetTransactionRequest")
GetTransactionResponse = _message_class("GetTransactionResponse")
GetLatestTickResponse = _message_class("GetLatestTickResponse")
ProcessedTick = _message_class("ProcessedTick")
SkippedTicksInterval = _message_class("SkippedTicksInterval")
ProcessedTickInterval = _message_class("ProcessedTickInterval")
ProcessedTickIntervalsPerEpoch = _message_class("ProcessedTickIntervalsPerEpoch")
GetStatusResponse = _message_class("GetStatusResponse")
