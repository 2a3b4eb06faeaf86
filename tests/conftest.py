"""Pytest bootstrap configuration.

Environment variables are set before any application module is imported so
``core.config.settings`` and the module-level engine pick them up.
"""
import os

os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEBUG", "false")

import functools
from datetime import datetime, timezone
from typing import AsyncIterator, Tuple

import grpc
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from application.services.list_service import ListApplicationService
from application.services.task_service import TaskApplicationService
from core.config import ProviderSettings
from domain.task import Task, TaskImportance, TaskStatus
from domain.task_list import TaskList
from grpc_app.generated import provider_pb2_grpc
from grpc_app.server import build_interceptors
from grpc_app.services.provider_service import ProviderService
from grpc_app.streaming import StreamingEmitter
from infrastructure.database import create_tables
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


TEST_IDENTITY = ProviderSettings(
    id="local",
    name="Local",
    description="Tasks stored on this machine",
    icon_name="user-home-symbolic",
)


def make_task(id_task: str = "T1", parent_list: str = "L1", **overrides) -> Task:
    fields = dict(
        id_task=id_task,
        parent_list=parent_list,
        title="Buy milk",
        body="Two litres",
        completed_on=None,
        due_date=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
        importance=TaskImportance.HIGH,
        favorite=True,
        is_reminder_on=True,
        reminder_date=datetime(2024, 5, 1, 8, 0, 0, 123456, tzinfo=timezone.utc),
        status=TaskStatus.NOT_STARTED,
        created_date_time=datetime(2024, 4, 1, 12, 0, tzinfo=timezone.utc),
        last_modified_date_time=datetime(2024, 4, 2, 12, 0, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return Task(**fields)


def make_list(id_list: str = "L1", **overrides) -> TaskList:
    fields = dict(id_list=id_list, name="Home", is_owner=True, icon_name="go-home", provider="local")
    fields.update(overrides)
    return TaskList(**fields)


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite engine; NullPool so every operation opens its own connection."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'provider.db'}", poolclass=NullPool)
    await create_tables(eng)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def uow_factory(engine):
    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    return functools.partial(SQLAlchemyUnitOfWork, session_factory)


@pytest.fixture
async def broken_uow_factory(tmp_path):
    """Unit of work whose database file can never be opened."""
    eng = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nested' / 'provider.db'}",
        poolclass=NullPool,
    )
    try:
        yield functools.partial(SQLAlchemyUnitOfWork, async_sessionmaker(bind=eng, expire_on_commit=False))
    finally:
        await eng.dispose()


@pytest.fixture
def task_service(uow_factory) -> TaskApplicationService:
    return TaskApplicationService(uow_factory, count_tasks_by="id_task")


@pytest.fixture
def list_service(uow_factory) -> ListApplicationService:
    return ListApplicationService(uow_factory)


async def _serve(servicer: ProviderService) -> Tuple[grpc.aio.Server, str]:
    server = grpc.aio.server(interceptors=build_interceptors())
    provider_pb2_grpc.add_ProviderServicer_to_server(servicer, server)
    port = server.add_insecure_port("127.0.0.1:0")
    await server.start()
    return server, f"127.0.0.1:{port}"


@pytest.fixture
async def serve_provider():
    """Start in-process servers for the given servicers; stopped at teardown."""
    servers = []

    async def _start(servicer: ProviderService) -> str:
        server, target = await _serve(servicer)
        servers.append(server)
        return target

    try:
        yield _start
    finally:
        for server in servers:
            await server.stop(grace=None)


@pytest.fixture
async def provider_stub(serve_provider, task_service, list_service) -> AsyncIterator[provider_pb2_grpc.ProviderStub]:
    servicer = ProviderService(
        task_service,
        list_service,
        identity=TEST_IDENTITY,
        emitter=StreamingEmitter(buffer_size=2),
    )
    target = await serve_provider(servicer)
    async with grpc.aio.insecure_channel(target) as channel:
        yield provider_pb2_grpc.ProviderStub(channel)


@pytest.fixture
async def broken_provider_stub(serve_provider, broken_uow_factory) -> AsyncIterator[provider_pb2_grpc.ProviderStub]:
    servicer = ProviderService(
        TaskApplicationService(broken_uow_factory),
        ListApplicationService(broken_uow_factory),
        identity=TEST_IDENTITY,
    )
    target = await serve_provider(servicer)
    async with grpc.aio.insecure_channel(target) as channel:
        yield provider_pb2_grpc.ProviderStub(channel)


@pytest.fixture
def task_factory():
    return make_task


@pytest.fixture
def list_factory():
    return make_list
