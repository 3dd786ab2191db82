import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from searxng_bridge.config import AppSettings
from searxng_bridge.main import create_app
from tests.fakes import FakeSearxngClient


def make_settings(**overrides) -> AppSettings:
    settings = AppSettings(
        searxng_url="http://searx.test",
        log_level="debug",
        request_timeout_s=1.0,
        delivery_attempts=3,
        delivery_retry_delay_ms=10,
        keepalive_s=5.0,
    )
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings


@pytest.fixture
def app_factory():
    def _factory(*, fake_backend: FakeSearxngClient | None = None, **settings_overrides):
        settings = make_settings(**settings_overrides)
        backend = fake_backend or FakeSearxngClient()
        app = create_app(settings, backend=backend)
        return app, backend

    return _factory


@pytest.fixture
async def client(app_factory):
    app, backend = app_factory()
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as http_client:
            http_client.app = app  # type: ignore[attr-defined]
            http_client.fake_backend = backend  # type: ignore[attr-defined]
            yield http_client
