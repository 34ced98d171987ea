"""Shared fixtures: a fake Memos backend, a client bound to it and host/repository doubles."""

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from memos_wox.services.client_slot import ClientSlot
from memos_wox.services.image_proxy import ImageProxyService
from memos_wox.services.memos_api import MemosApiClient
from tests.fakes import FakeMemosBackend, FakeMemosRepository, FakePublicAPI


@pytest_asyncio.fixture
async def memos_backend():
    backend = FakeMemosBackend()
    server = TestServer(backend.make_app(), host="127.0.0.1")
    await server.start_server()
    backend.base_url = f"http://127.0.0.1:{server.port}"
    yield backend
    await server.close()


@pytest_asyncio.fixture
async def api_client(memos_backend):
    # 带末尾斜杠，验证 host 会被规范化
    client = MemosApiClient(memos_backend.base_url + "/", memos_backend.token)
    yield client
    await client.close()


@pytest.fixture
def fake_api():
    return FakePublicAPI()


@pytest.fixture
def repository():
    return FakeMemosRepository()


@pytest.fixture
def client_slot(repository):
    return ClientSlot(repository)


@pytest_asyncio.fixture
async def proxy(client_slot):
    service = ImageProxyService(client_slot.get)
    yield service
    await service.stop()
