import asyncio
import gc
import socket
from datetime import datetime, timezone

import grpc
import pytest
from google.protobuf import empty_pb2, wrappers_pb2
from grpc_health.v1 import health_pb2, health_pb2_grpc

from domain.common.exceptions import StorageConnectionException, TaskNotFoundException
from grpc_app.generated import SERVICE_NAME, provider_pb2, provider_pb2_grpc
from grpc_app.interceptors.exceptions import describe_error
from grpc_app.mappers import list_to_proto, task_to_proto
from grpc_app.services.provider_service import ProviderService
from shared.codes import BusinessCode


def _id(value: str) -> wrappers_pb2.StringValue:
    return wrappers_pb2.StringValue(value=value)


async def _drain(call):
    return [msg async for msg in call]


async def test_metadata_getters(provider_stub):
    assert (await provider_stub.GetId(empty_pb2.Empty())).value == "local"
    assert (await provider_stub.GetName(empty_pb2.Empty())).value == "Local"
    assert (await provider_stub.GetDescription(empty_pb2.Empty())).value == "Tasks stored on this machine"
    assert (await provider_stub.GetIconName(empty_pb2.Empty())).value == "user-home-symbolic"


async def test_list_then_task_scenario_without_cascade(provider_stub):
    created_list = await provider_stub.CreateList(provider_pb2.List(id="L1", name="Home"))
    assert created_list.successful
    assert created_list.code == BusinessCode.SUCCESS
    assert not created_list.HasField("list")

    task = provider_pb2.Task(id="T1", parent="L1", title="Buy milk")
    created_task = await provider_stub.CreateTask(task)
    assert created_task.successful
    assert created_task.message == "Task added successfully."
    assert created_task.task == task

    streamed = await _drain(provider_stub.ReadTasksFromList(_id("L1")))
    assert len(streamed) == 1
    assert streamed[0].successful
    assert streamed[0].task.id == "T1"

    deleted = await provider_stub.DeleteList(_id("L1"))
    assert deleted.successful
    assert not (await provider_stub.ReadList(_id("L1"))).successful

    still_there = await provider_stub.ReadTask(_id("T1"))
    assert still_there.successful
    assert still_there.task == task


async def test_read_task_round_trips_all_fields(provider_stub, task_factory):
    task = task_to_proto(task_factory())
    assert (await provider_stub.CreateTask(task)).successful
    read = await provider_stub.ReadTask(_id(task.id))
    assert read.successful
    assert read.message == "Task fetched successfully."
    assert read.task == task


async def test_missing_task_is_reported_in_the_envelope(provider_stub):
    response = await provider_stub.ReadTask(_id("missing"))
    assert not response.successful
    assert response.code == BusinessCode.NOT_FOUND
    assert "missing" in response.message
    assert not response.HasField("task")


async def test_update_replaces_the_task(provider_stub, task_factory):
    await provider_stub.CreateTask(task_to_proto(task_factory()))
    replacement = task_to_proto(task_factory(
        title="Buy bread",
        body="Sourdough",
        due_date=None,
        reminder_date=None,
        is_reminder_on=False,
        favorite=False,
        importance=1,
        status=1,
        completed_on=datetime(2024, 5, 3, tzinfo=timezone.utc),
    ))
    updated = await provider_stub.UpdateTask(replacement)
    assert updated.successful
    assert not updated.HasField("task")
    assert (await provider_stub.ReadTask(_id("T1"))).task == replacement


async def test_delete_then_read_fails(provider_stub, task_factory):
    await provider_stub.CreateTask(task_to_proto(task_factory()))
    deleted = await provider_stub.DeleteTask(_id("T1"))
    assert deleted.successful
    assert deleted.message == "Task removed successfully."
    assert not (await provider_stub.ReadTask(_id("T1"))).successful
    # deleting nothing is still a success
    assert (await provider_stub.DeleteTask(_id("T1"))).successful


async def test_streams_and_id_projections(provider_stub, task_factory):
    for task_id, parent in (("T1", "L1"), ("T2", "L2"), ("T3", "L1")):
        await provider_stub.CreateTask(task_to_proto(task_factory(task_id, parent)))

    all_tasks = await _drain(provider_stub.ReadAllTasks(empty_pb2.Empty()))
    assert [m.task.id for m in all_tasks] == ["T1", "T2", "T3"]
    assert all(m.successful for m in all_tasks)

    in_l1 = await _drain(provider_stub.ReadTasksFromList(_id("L1")))
    assert [m.task.id for m in in_l1] == ["T1", "T3"]

    ids = await provider_stub.ReadTaskIdsFromList(_id("L1"))
    assert ids.successful
    assert list(ids.ids) == ["T1", "T3"]


async def test_count_uses_task_id(provider_stub, task_factory):
    await provider_stub.CreateTask(task_to_proto(task_factory("T1", "L1")))
    await provider_stub.CreateTask(task_to_proto(task_factory("T2", "L1")))
    by_id = await provider_stub.ReadTaskCountFromList(_id("T1"))
    assert by_id.successful
    assert by_id.count == 1
    assert (await provider_stub.ReadTaskCountFromList(_id("L1"))).count == 0


async def test_empty_streams_close_without_messages(provider_stub):
    assert await _drain(provider_stub.ReadAllTasks(empty_pb2.Empty())) == []
    assert await _drain(provider_stub.ReadTasksFromList(_id("L1"))) == []
    assert await _drain(provider_stub.ReadAllLists(empty_pb2.Empty())) == []


async def test_client_cancel_stops_the_stream_cleanly(provider_stub, task_factory):
    for i in range(40):
        await provider_stub.CreateTask(task_to_proto(task_factory(f"T{i:02d}", "L1")))

    loop = asyncio.get_running_loop()
    errors = []
    previous = loop.get_exception_handler()
    loop.set_exception_handler(lambda _loop, ctx: errors.append(ctx))
    try:
        call = provider_stub.ReadAllTasks(empty_pb2.Empty())
        first = await call.read()
        assert first.successful
        call.cancel()
        await asyncio.sleep(0.3)
        gc.collect()
        await asyncio.sleep(0.05)
    finally:
        loop.set_exception_handler(previous)

    pending = [t for t in asyncio.all_tasks() if t.get_name().startswith("stream-producer:")]
    assert pending == []
    assert errors == []


async def test_list_operations(provider_stub, list_factory):
    await provider_stub.CreateList(list_to_proto(list_factory("L1")))
    await provider_stub.CreateList(list_to_proto(list_factory("L2", name="Work", icon_name=None)))

    ids = await provider_stub.ReadAllListIds(empty_pb2.Empty())
    assert ids.successful
    assert list(ids.ids) == ["L1", "L2"]

    lists = await _drain(provider_stub.ReadAllLists(empty_pb2.Empty()))
    assert [m.list.name for m in lists] == ["Home", "Work"]
    assert not lists[1].list.HasField("icon_name")

    renamed = provider_pb2.List(id="L1", name="House", is_owner=False, provider="other")
    updated = await provider_stub.UpdateList(renamed)
    assert updated.successful
    assert not updated.HasField("list")
    read = await provider_stub.ReadList(_id("L1"))
    assert read.successful
    assert read.list == renamed


async def test_duplicate_list_is_a_business_failure(provider_stub):
    assert (await provider_stub.CreateList(provider_pb2.List(id="L1"))).successful
    again = await provider_stub.CreateList(provider_pb2.List(id="L1"))
    assert not again.successful
    assert again.code == BusinessCode.DATABASE_ERROR
    assert again.message.startswith("Failed to add list")


async def test_connection_failure_never_faults_the_rpc(broken_provider_stub):
    stub = broken_provider_stub

    unary = [
        await stub.ReadTask(_id("T1")),
        await stub.CreateTask(provider_pb2.Task(id="T1")),
        await stub.UpdateTask(provider_pb2.Task(id="T1")),
        await stub.DeleteTask(_id("T1")),
        await stub.ReadTaskCountFromList(_id("T1")),
        await stub.ReadTaskIdsFromList(_id("L1")),
        await stub.ReadList(_id("L1")),
        await stub.CreateList(provider_pb2.List(id="L1")),
        await stub.UpdateList(provider_pb2.List(id="L1")),
        await stub.DeleteList(_id("L1")),
        await stub.ReadAllListIds(empty_pb2.Empty()),
    ]
    for response in unary:
        assert not response.successful
        assert response.message
        assert response.code == BusinessCode.SERVICE_UNAVAILABLE

    assert unary[0].HasField("task") is False
    assert unary[5].message.startswith("Failed to fetch list of tasks:")

    for call in (
        stub.ReadAllTasks(empty_pb2.Empty()),
        stub.ReadTasksFromList(_id("L1")),
        stub.ReadAllLists(empty_pb2.Empty()),
    ):
        messages = await _drain(call)
        assert len(messages) == 1
        assert not messages[0].successful
        assert messages[0].code == BusinessCode.SERVICE_UNAVAILABLE
        assert messages[0].message

    # metadata does not touch the store
    assert (await stub.GetId(empty_pb2.Empty())).value == "local"


async def test_unexpected_errors_map_to_internal(serve_provider, task_service, list_service):
    class Broken(ProviderService):
        async def GetId(self, request, context):  # type: ignore[override]
            raise RuntimeError("boom")

        async def ReadAllLists(self, request, context):  # type: ignore[override]
            yield provider_pb2.ListResponse(successful=True)
            raise RuntimeError("boom")

    target = await serve_provider(Broken(task_service, list_service))
    async with grpc.aio.insecure_channel(target) as channel:
        stub = provider_pb2_grpc.ProviderStub(channel)
        with pytest.raises(grpc.aio.AioRpcError) as ei:
            await stub.GetId(empty_pb2.Empty())
        assert ei.value.code() == grpc.StatusCode.INTERNAL

        with pytest.raises(grpc.aio.AioRpcError) as ei:
            await _drain(stub.ReadAllLists(empty_pb2.Empty()))
        assert ei.value.code() == grpc.StatusCode.INTERNAL


async def test_request_id_is_echoed_in_trailing_metadata(provider_stub):
    call = provider_stub.GetName(empty_pb2.Empty(), metadata=(("x-request-id", "req-42"),))
    await call
    trailing = dict(await call.trailing_metadata())
    assert trailing["x-request-id"] == "req-42"


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


async def test_create_server_registers_health(task_service, list_service):
    from grpc_app.server import create_server

    address = f"127.0.0.1:{_free_port()}"
    server = await create_server(ProviderService(task_service, list_service), address=address)
    await server.start()
    try:
        async with grpc.aio.insecure_channel(address) as channel:
            health = health_pb2_grpc.HealthStub(channel)
            reply = await health.Check(health_pb2.HealthCheckRequest(service=SERVICE_NAME))
            assert reply.status == health_pb2.HealthCheckResponse.SERVING
            assert (await provider_pb2_grpc.ProviderStub(channel).GetId(empty_pb2.Empty())).value == "local"
    finally:
        await server.stop(grace=None)


def test_describe_error_keeps_business_details():
    error = describe_error(StorageConnectionException("disk unplugged"))
    assert error["status"] == grpc.StatusCode.UNAVAILABLE
    assert error["code"] == str(BusinessCode.SERVICE_UNAVAILABLE.value)
    assert error["details"] == {"reason": "disk unplugged"}
    assert error["public_message"] == "Failed to connect to the database: disk unplugged"

    missing = describe_error(TaskNotFoundException("T9"))
    assert missing["status"] == grpc.StatusCode.NOT_FOUND
    assert missing["details"] == {"id_task": "T9"}


def test_describe_error_hides_unexpected_messages():
    error = describe_error(RuntimeError("secret stack detail"))
    assert error["status"] == grpc.StatusCode.INTERNAL
    assert error["message"] == "secret stack detail"
    assert error["public_message"] == "Internal server error"
    assert error["details"] is None
