"""
Shared fixtures: in-memory collaborators and request signing.
"""

import pytest
from fastapi.testclient import TestClient
from nacl.signing import SigningKey

from app.config import Settings, get_settings
from app.dependencies import get_discord_client, get_job_invoker, get_record_store
from app.main import app
from tests.fakes import FakeDiscordClient, FakeJobInvoker, FakeRecordStore


@pytest.fixture
def signing_key() -> SigningKey:
    return SigningKey.generate()


@pytest.fixture
def settings(signing_key: SigningKey) -> Settings:
    return Settings(
        _env_file=None,
        supabase_url="https://store.test",
        supabase_service_role_key="service-key",
        discord_bot_token="bot-token",
        discord_channel_id="channel-1",
        discord_application_id="app-1",
        discord_public_key=signing_key.verify_key.encode().hex(),
        functions_base_url="https://functions.test/functions/v1",
        function_invoke_key="invoke-key",
        project_name="Test Project",
    )


@pytest.fixture
def fake_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def fake_chat() -> FakeDiscordClient:
    return FakeDiscordClient()


@pytest.fixture
def fake_invoker() -> FakeJobInvoker:
    return FakeJobInvoker()


@pytest.fixture
def client(settings, fake_store, fake_chat, fake_invoker):
    """Test client with every external collaborator replaced."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_record_store] = lambda: fake_store
    app.dependency_overrides[get_discord_client] = lambda: fake_chat
    app.dependency_overrides[get_job_invoker] = lambda: fake_invoker
    yield TestClient(app)
    app.dependency_overrides.clear()
