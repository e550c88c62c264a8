"""
配置与服务工厂单元测试
"""
import pytest
from unittest.mock import AsyncMock, patch
from dify_sdk import (
    AppService, ChatService, CompletionService, DifyConfigError,
    DifyServiceFactory, WorkflowService, create_dify_service, load_settings,
)


@pytest.mark.unit
class TestSettings:

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DIFY_BASE_URL", "http://dify.internal/v1")
        monkeypatch.setenv("DIFY_API_KEY", "app-from-env")
        monkeypatch.setenv("DIFY_STREAM_TIMEOUT", "30")

        settings = load_settings()

        assert settings.DIFY_BASE_URL == "http://dify.internal/v1"
        assert settings.DIFY_API_KEY == "app-from-env"
        assert settings.DIFY_STREAM_TIMEOUT == 30.0


@pytest.mark.unit
class TestServiceFactory:

    def test_services_share_client(self, test_base_url):
        factory = DifyServiceFactory(api_key="key", base_url=test_base_url)

        assert isinstance(factory.app, AppService)
        assert isinstance(factory.completion, CompletionService)
        assert isinstance(factory.chat, ChatService)
        assert isinstance(factory.workflow, WorkflowService)
        assert factory.workflow is factory.workflow
        assert factory.chat._client is factory.client
        assert factory.workflow._client is factory.client

    def test_create_from_env(self, monkeypatch):
        monkeypatch.setenv("DIFY_BASE_URL", "http://dify.internal/v1")
        monkeypatch.setenv("DIFY_API_KEY", "app-from-env")
        monkeypatch.setenv("DIFY_STREAM_TIMEOUT", "5")

        factory = create_dify_service()

        assert factory.client.base_url == "http://dify.internal/v1"
        assert factory.client.api_key == "app-from-env"
        assert factory.workflow._stream_timeout == 5.0

    def test_arguments_win_over_env(self, monkeypatch):
        monkeypatch.setenv("DIFY_BASE_URL", "http://dify.internal/v1")
        factory = create_dify_service(base_url="http://other/v1", api_key="app-arg")

        assert factory.client.base_url == "http://other/v1"
        assert factory.client.api_key == "app-arg"

    def test_missing_base_url(self, monkeypatch):
        monkeypatch.setenv("DIFY_BASE_URL", "")
        with pytest.raises(DifyConfigError):
            create_dify_service()

    @pytest.mark.asyncio
    async def test_user_from_env(self, monkeypatch):
        monkeypatch.setenv("DIFY_BASE_URL", "http://dify.internal/v1")
        monkeypatch.setenv("DIFY_USER", "scheduler-bot")
        factory = create_dify_service()

        with patch.object(factory.workflow._client, "call", new_callable=AsyncMock) as mock_call:
            mock_call.return_value = {"data": {"outputs": {"text": "ok"}}, "task_id": "t1"}
            result = await factory.workflow.get_workflow_result({}, stream=False)

            assert result.text == "ok"
            assert mock_call.call_args[1]["body"]["user"] == "scheduler-bot"

    def test_user_argument_wins_over_env(self, monkeypatch):
        monkeypatch.setenv("DIFY_BASE_URL", "http://dify.internal/v1")
        monkeypatch.setenv("DIFY_USER", "scheduler-bot")
        factory = create_dify_service(user="cli-user")
        assert factory.workflow._user == "cli-user"
