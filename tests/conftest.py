"""Shared archiver fixtures: one server state served over both REST and gRPC."""

from collections.abc import Iterator
from concurrent import futures
from dataclasses import dataclass, field
from typing import Any

import grpc
import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from google.protobuf import empty_pb2

from archiver_client.transports import archive_pb
from archiver_client.transports.http import HttpAdapter
from archiver_client.transports.rpc import RpcAdapter

BASE_URL = "http://archiver.test"
LATEST_TICK = 15000000

SOURCE_A = "BZBQFLLBNCXEMGLOBHUVFTLUPLVCPQUASSILFABOFFBCADQSSUPNWLZBQEXK"
DEST_B = "EWZBYQNTMDRFOPVZVWMIQGTRHSHJVXGWJHQBPVJYFDWPKMBLHUIERQXIQKYD"


def _transaction(tx_id: str, tick: int, amount: int, **overrides: Any) -> dict[str, Any]:
    record = {
        "sourceId": SOURCE_A,
        "destId": DEST_B,
        "amount": amount,
        "tickNumber": tick,
        "inputType": 0,
        "inputSize": 0,
        "inputHex": "",
        "signatureHex": "a1" * 64,
        "txId": tx_id,
    }
    record.update(overrides)
    return record


def status_body() -> dict[str, Any]:
    return {
        "lastProcessedTick": {"tickNumber": LATEST_TICK, "epoch": 120},
        "lastProcessedTicksPerEpoch": {"119": 14890000, "120": LATEST_TICK},
        "skippedTicks": [
            {"startTick": 1, "endTick": 14000000},
            {"startTick": 14890001, "endTick": 14909999},
        ],
        "processedTickIntervalsPerEpoch": [
            {
                "epoch": 119,
                "intervals": [{"initialProcessedTick": 14000001, "lastProcessedTick": 14890000}],
            },
            {
                "epoch": 120,
                "intervals": [
                    {"initialProcessedTick": 14910000, "lastProcessedTick": 14950000},
                    {"initialProcessedTick": 14950010, "lastProcessedTick": LATEST_TICK},
                ],
            },
        ],
        "emptyTicksPerEpoch": {"119": 812, "120": 57},
    }


@dataclass
class ArchiverState:
    """Server-side data both fake transports render from."""

    status: dict[str, Any] = field(default_factory=status_body)
    transactions: dict[int, list[dict[str, Any]]] = field(
        default_factory=lambda: {
            LATEST_TICK: [
                _transaction(
                    "abc123", LATEST_TICK, 100, sourceId="AAAA", destId="BBBB", signatureHex=""
                )
            ],
            LATEST_TICK - 1: [
                _transaction("zqvkbqjbkzqtxid", LATEST_TICK - 1, 2500000),
                _transaction(
                    "mnrtlvkcazfpxid",
                    LATEST_TICK - 1,
                    0,
                    inputType=2,
                    inputSize=32,
                    inputHex="0f" * 32,
                ),
            ],
        }
    )

    def find_transaction(self, tx_id: str) -> dict[str, Any] | None:
        for records in self.transactions.values():
            for record in records:
                if record["txId"] == tx_id:
                    return record
        return None


@pytest.fixture
def archiver_state() -> ArchiverState:
    return ArchiverState()


def build_mock_archiver(state: ArchiverState) -> FastAPI:
    app = FastAPI()

    @app.get("/v1/status")
    def status() -> dict[str, Any]:
        return state.status

    @app.get("/v1/latestTick")
    def latest_tick() -> dict[str, Any]:
        return {"latestTick": state.status["lastProcessedTick"]["tickNumber"]}

    @app.get("/v1/ticks/{tick_number}/transactions")
    def tick_transactions(tick_number: int) -> dict[str, Any]:
        return {"transactions": state.transactions.get(tick_number, [])}

    @app.get("/v1/transactions/{tx_id}")
    def transaction(tx_id: str) -> dict[str, Any]:
        record = state.find_transaction(tx_id)
        if record is None:
            raise HTTPException(status_code=404, detail="transaction not found")
        return {"transaction": record}

    return app


@pytest.fixture
def http_client(archiver_state: ArchiverState) -> Iterator[TestClient]:
    with TestClient(build_mock_archiver(archiver_state), base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def http_adapter(http_client: TestClient) -> Iterator[HttpAdapter]:
    adapter = HttpAdapter(BASE_URL, client=http_client)
    yield adapter
    adapter.close()


def _transaction_message(record: dict[str, Any]) -> Any:
    return archive_pb.Transaction(
        source_id=record["sourceId"],
        dest_id=record["destId"],
        amount=int(record["amount"]),
        tick_number=record["tickNumber"],
        input_type=record["inputType"],
        input_size=record["inputSize"],
        input_hex=record["inputHex"],
        signature_hex=record["signatureHex"],
        tx_id=record["txId"],
    )


def _status_message(status: dict[str, Any]) -> Any:
    message = archive_pb.GetStatusResponse()
    message.last_processed_tick.tick_number = status["lastProcessedTick"]["tickNumber"]
    message.last_processed_tick.epoch = status["lastProcessedTick"]["epoch"]
    for epoch, tick in status["lastProcessedTicksPerEpoch"].items():
        message.last_processed_ticks_per_epoch[int(epoch)] = tick
    for item in status["skippedTicks"]:
        message.skipped_ticks.add(start_tick=item["startTick"], end_tick=item["endTick"])
    for item in status["processedTickIntervalsPerEpoch"]:
        epoch_message = message.processed_tick_intervals_per_epoch.add(epoch=item["epoch"])
        for interval in item["intervals"]:
            epoch_message.intervals.add(
                initial_processed_tick=interval["initialProcessedTick"],
                last_processed_tick=interval["lastProcessedTick"],
            )
    for epoch, count in status["emptyTicksPerEpoch"].items():
        message.empty_ticks_per_epoch[int(epoch)] = count
    return message


class FakeArchiveService:
    """Generic-handler ArchiveService; ``raw_responses`` replaces a method's reply bytes."""

    def __init__(self, state: ArchiverState) -> None:
        self.state = state
        self.raw_responses: dict[str, bytes] = {}
        self.tick_requests: list[int] = []

    def handler(self) -> grpc.GenericRpcHandler:
        def serialize(message: Any) -> bytes:
            return message if isinstance(message, bytes) else message.SerializeToString()

        def method(behavior: Any, request_class: Any) -> grpc.RpcMethodHandler:
            return grpc.unary_unary_rpc_method_handler(
                behavior,
                request_deserializer=request_class.FromString,
                response_serializer=serialize,
            )

        return grpc.method_handlers_generic_handler(
            archive_pb.SERVICE_NAME,
            {
                "GetStatus": method(self.get_status, empty_pb2.Empty),
                "GetLatestTick": method(self.get_latest_tick, empty_pb2.Empty),
                "GetTickTransactions": method(
                    self.get_tick_transactions, archive_pb.GetTickTransactionsRequest
                ),
                "GetTransaction": method(self.get_transaction, archive_pb.GetTransactionRequest),
            },
        )

    def get_status(self, request: Any, context: grpc.ServicerContext) -> Any:
        if "GetStatus" in self.raw_responses:
            return self.raw_responses["GetStatus"]
        return _status_message(self.state.status)

    def get_latest_tick(self, request: Any, context: grpc.ServicerContext) -> Any:
        return archive_pb.GetLatestTickResponse(
            latest_tick=self.state.status["lastProcessedTick"]["tickNumber"]
        )

    def get_tick_transactions(self, request: Any, context: grpc.ServicerContext) -> Any:
        self.tick_requests.append(request.tick_number)
        if "GetTickTransactions" in self.raw_responses:
            return self.raw_responses["GetTickTransactions"]
        records = self.state.transactions.get(request.tick_number, [])
        return archive_pb.GetTickTransactionsResponse(
            transactions=[_transaction_message(record) for record in records]
        )

    def get_transaction(self, request: Any, context: grpc.ServicerContext) -> Any:
        record = self.state.find_transaction(request.tx_id)
        if record is None:
            context.abort(grpc.StatusCode.NOT_FOUND, "transaction not found")
        return archive_pb.GetTransactionResponse(transaction=_transaction_message(record))


@pytest.fixture
def archive_service(archiver_state: ArchiverState) -> FakeArchiveService:
    return FakeArchiveService(archiver_state)


@pytest.fixture
def rpc_target(archive_service: FakeArchiveService) -> Iterator[str]:
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=2))
    server.add_generic_rpc_handlers((archive_service.handler(),))
    port = server.add_insecure_port("127.0.0.1:0")
    server.start()
    yield f"127.0.0.1:{port}"
    server.stop(None)


@pytest.fixture
def rpc_adapter(rpc_target: str) -> Iterator[RpcAdapter]:
    adapter = RpcAdapter(rpc_target)
    yield adapter
    adapter.close()
