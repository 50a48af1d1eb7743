"""
Unit Tests for the Supabase connection manager
"""

import pytest
from unittest.mock import MagicMock, patch

from wirebazaar.core import supabase_client
from wirebazaar.core.config import settings


@pytest.fixture(autouse=True)
def _fresh_client():
    supabase_client.reset_supabase()
    yield
    supabase_client.reset_supabase()


def _configure(service_role_key=None):
    return patch.multiple(
        settings,
        SUPABASE_URL="https://demo.supabase.co",
        SUPABASE_ANON_KEY="anon-key",
        SUPABASE_SERVICE_ROLE_KEY=service_role_key,
    )


class TestConfiguration:

    def test_unconfigured(self):
        assert supabase_client.is_supabase_configured() is False
        assert supabase_client.get_supabase() is None
        assert supabase_client.new_auth_client() is None
        assert supabase_client.supabase_health() == {
            "configured": False, "client_initialized": False, "service_role": False,
        }

    @pytest.mark.asyncio
    async def test_unconfigured_async_client(self):
        assert await supabase_client.new_async_client() is None


class TestClients:

    def test_shared_client_is_created_once_with_anon_key(self):
        with _configure(), patch.object(supabase_client, "create_client", return_value=MagicMock()) as create:
            first = supabase_client.get_supabase()
            second = supabase_client.get_supabase()

        assert first is second
        create.assert_called_once_with("https://demo.supabase.co", "anon-key")

    def test_service_role_key_preferred(self):
        with _configure("service-key"), patch.object(supabase_client, "create_client") as create:
            supabase_client.get_supabase()
            health = supabase_client.supabase_health()

        create.assert_called_once_with("https://demo.supabase.co", "service-key")
        assert health["service_role"] is True
        assert health["client_initialized"] is True

    def test_auth_client_is_fresh_and_stateless(self):
        with _configure("service-key"), patch.object(supabase_client, "create_client") as create:
            supabase_client.new_auth_client()
            supabase_client.new_auth_client()

        assert create.call_count == 2
        url, key = create.call_args.args
        assert key == "anon-key"
        options = create.call_args.kwargs["options"]
        assert options.persist_session is False
        assert options.auto_refresh_token is False

    def test_reset_drops_shared_client(self):
        with _configure(), patch.object(supabase_client, "create_client", side_effect=[MagicMock(), MagicMock()]):
            first = supabase_client.get_supabase()
            supabase_client.reset_supabase()
            second = supabase_client.get_supabase()

        assert first is not second
