import httpx
import pytest
import pytest_asyncio

from meshy_relay.ai_clients.meshy_client import MeshyClient
from meshy_relay.api import create_app
from meshy_relay.config import Settings

from .test_helpers import FakeMeshy, MESHY_BASE_URL, TEST_API_KEY


@pytest.fixture
def fake_meshy() -> FakeMeshy:
    return FakeMeshy()


@pytest.fixture
def test_settings() -> Settings:
    # Small chunk size so downloads go through several chunks
    return Settings(meshy_api_key=TEST_API_KEY, meshy_api_base_url=MESHY_BASE_URL, public_dir=None, DOWNLOAD_CHUNK_SIZE=4)


@pytest_asyncio.fixture
async def relay_client(fake_meshy, test_settings):
    """HTTP client talking to the relay app, with Meshy replaced by fake_meshy."""
    meshy_client = MeshyClient(
        api_key=TEST_API_KEY,
        base_url=MESHY_BASE_URL,
        transport=httpx.MockTransport(fake_meshy.handler),
    )
    app = create_app(test_settings, meshy_client=meshy_client)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client
    await meshy_client.aclose()
