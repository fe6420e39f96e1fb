import httpx
import pytest
import respx
from httpx import ASGITransport


@pytest.fixture(autouse=True)
def _isolate_global_respx_routes():
    respx.mock.snapshot()
    yield
    respx.mock.rollback()


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("ELEVENLABS_API_KEY", "test-el-key")
    monkeypatch.delenv("ELEVENLABS_API_BASE", raising=False)
    monkeypatch.delenv("ELEVENLABS_CALL_PROVIDER", raising=False)


@pytest.fixture
def missing_key_env(monkeypatch):
    monkeypatch.setenv("ELEVENLABS_API_KEY", "")


async def _app_client():
    from app.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c


@pytest.fixture
async def client(mock_env):
    async for c in _app_client():
        yield c


@pytest.fixture
async def unconfigured_client(missing_key_env):
    async for c in _app_client():
        yield c
