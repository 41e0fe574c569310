"""Integration tests for the composition root.

These tests verify that configuration loads and validates, and that
the adapter is wired to a ServiceNow connector correctly.
"""

import os
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from changebridge.adapters.connector.servicenow import ServiceNowConnector
from changebridge.config import Settings, load_settings
from changebridge.core.adapter import ChangeRequestAdapter
from changebridge.core.models import MissingBodyPolicy, ResponseEnvelope
from changebridge.main import bootstrap, build_adapter, build_adapter_from_settings
from changebridge.tests.fakes import RecordingCallback


class TestConfigurationLoading:
    """Test configuration loading and validation."""

    def test_load_settings_with_defaults(self) -> None:
        """Load settings with default values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings()
        assert settings.adapter_id == "servicenow"
        assert settings.servicenow_table == "change_request"
        assert settings.missing_body_policy == "drop"
        assert settings.run_mode == "daemon"
        assert settings.healthcheck_interval_seconds == 60
        assert settings.log_level == "INFO"

    def test_load_settings_from_env(self) -> None:
        """Load settings from environment variables."""
        with patch.dict(
            os.environ,
            {
                "ADAPTER_ID": "snow-prod",
                "SERVICENOW_URL": "https://dev00000.service-now.com/",
                "SERVICENOW_USERNAME": "admin",
                "SERVICENOW_PASSWORD": "secret",
                "MISSING_BODY_POLICY": "error",
                "RUN_MODE": "once",
                "LOG_LEVEL": "DEBUG",
            },
        ):
            settings = load_settings()
            assert settings.adapter_id == "snow-prod"
            assert settings.servicenow_url == "https://dev00000.service-now.com"
            assert settings.servicenow_password.get_secret_value() == "secret"
            assert settings.body_policy() is MissingBodyPolicy.ERROR
            assert settings.run_mode == "once"
            assert settings.log_level == "DEBUG"

    def test_password_is_not_exposed_in_repr(self) -> None:
        settings = Settings(servicenow_password="hunter2")
        assert "hunter2" not in repr(settings)

    def test_load_settings_from_env_file(self, tmp_path) -> None:
        env_file = tmp_path / "test.env"
        env_file.write_text("ADAPTER_ID=from-file\nSERVICENOW_TABLE=incident\n")

        settings = load_settings(str(env_file))

        assert settings.adapter_id == "from-file"
        assert settings.servicenow_table == "incident"

    @pytest.mark.parametrize(
        "env",
        [
            {"HEALTHCHECK_INTERVAL_SECONDS": "0"},
            {"REQUEST_TIMEOUT_SECONDS": "-1"},
            {"OFFLINE_ALERT_THRESHOLD": "0"},
            {"SERVICENOW_URL": "ftp://example.com"},
            {"SERVICENOW_TABLE": "  "},
            {"MISSING_BODY_POLICY": "ignore"},
        ],
    )
    def test_invalid_values_rejected(self, env) -> None:
        with patch.dict(os.environ, env):
            with pytest.raises(Exception):  # ValidationError
                load_settings()

    def test_adapter_properties(self) -> None:
        settings = Settings(
            servicenow_url="https://dev00000.service-now.com",
            servicenow_username="admin",
            servicenow_password="secret",
            servicenow_table="change_request",
        )

        props = settings.adapter_properties()

        assert props.url == "https://dev00000.service-now.com"
        assert props.auth.username == "admin"
        assert props.auth.password == "secret"
        assert props.target_resource_name == "change_request"


class TestAdapterWiring:
    """Test that the adapter is built around a ServiceNow connector."""

    @pytest.mark.asyncio
    async def test_build_adapter_from_host_mapping(self) -> None:
        adapter = build_adapter(
            "snow-1",
            {
                "url": "https://dev00000.service-now.com",
                "auth": {"username": "admin", "password": "secret"},
                "targetResourceName": "change_request",
            },
            timeout_seconds=5.0,
        )
        try:
            assert adapter.id == "snow-1"
            assert isinstance(adapter.connector, ServiceNowConnector)
            assert adapter.connector.table == "change_request"
            assert adapter.connector.client.timeout.read == 5.0
        finally:
            await adapter.close()

    @pytest.mark.asyncio
    async def test_build_adapter_from_settings(self) -> None:
        settings = Settings(
            adapter_id="snow-2",
            servicenow_url="https://dev00000.service-now.com",
            missing_body_policy="error",
        )

        adapter = build_adapter_from_settings(settings)
        try:
            assert adapter.id == "snow-2"
            assert adapter.missing_body_policy is MissingBodyPolicy.ERROR
            assert adapter.logger.name == "changebridge.adapter.snow-2"
        finally:
            await adapter.close()

    @pytest.mark.asyncio
    async def test_end_to_end_get_record(self) -> None:
        """Adapter and connector together normalize a live-shaped response."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                200,
                json={"result": [{"number": "CHG01", "sys_id": "abc", "active": "true"}]},
            )
        )
        adapter = ChangeRequestAdapter(
            "snow-3",
            {
                "url": "https://dev00000.service-now.com",
                "auth": {"username": "admin", "password": "secret"},
            },
            connector_factory=lambda props: ServiceNowConnector(props, transport=transport),
        )
        callback = RecordingCallback()
        try:
            await adapter.get_record(callback)
        finally:
            await adapter.close()

        assert callback.call_count == 1
        assert callback.error is None
        assert callback.result[0].change_ticket_number == "CHG01"
        assert callback.result[0].change_ticket_key == "abc"


class TestBootstrap:
    """Test run mode selection."""

    @pytest.mark.asyncio
    async def test_once_mode_runs_one_healthcheck(self) -> None:
        settings = Settings(run_mode="once")

        with patch.object(
            ServiceNowConnector,
            "get",
            AsyncMock(return_value=ResponseEnvelope(body='{"result": []}', status_code=200)),
        ) as mock_get:
            await bootstrap(settings)

        mock_get.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_daemon_mode_starts_scheduler(self) -> None:
        settings = Settings(run_mode="daemon", healthcheck_interval_seconds=5)

        with patch(
            "changebridge.main.HealthcheckScheduler.start", new_callable=AsyncMock
        ) as mock_start:
            await bootstrap(settings)

        mock_start.assert_awaited_once()
