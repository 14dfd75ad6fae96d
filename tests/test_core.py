"""
設定・ログ・例外のテスト
"""

import json
import logging
import sys

import pytest

from messaging_api.adapters.platforms.line import LineClient
from messaging_api.adapters.platforms.messenger import MessengerClient
from messaging_api.adapters.platforms.telegram import TelegramClient
from messaging_api.core.config import (
    MessagingSettings,
    get_settings,
    reload_settings,
    require,
)
from messaging_api.core.exceptions import (
    ConfigurationError,
    MessagingApiException,
    PlatformAPIError,
    ValidationError,
)
from messaging_api.core.logging import StructuredFormatter, get_logger


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """.env や既存の環境変数の影響を受けないようにする"""
    monkeypatch.chdir(tmp_path)
    for prefix in ("TELEGRAM_", "SLACK_", "LINE_", "MESSENGER_", "MESSAGING_API_"):
        for name in ("ACCESS_TOKEN", "CHANNEL_SECRET", "APP_SECRET", "ORIGIN", "VERSION",
                     "LOG_LEVEL", "TIMEOUT"):
            monkeypatch.delenv(f"{prefix}{name}", raising=False)
    return monkeypatch


class TestSettings:
    """設定"""

    def test_defaults(self, clean_env):
        settings = MessagingSettings.load()
        assert settings.log_level == "INFO"
        assert settings.request_timeout == 30
        assert settings.telegram.origin == "https://api.telegram.org"
        assert settings.messenger.version == "6.0"
        assert not settings.telegram.is_configured
        assert not settings.line.is_configured

    def test_from_environment(self, clean_env):
        clean_env.setenv("TELEGRAM_ACCESS_TOKEN", "tg-token")
        clean_env.setenv("LINE_ACCESS_TOKEN", "line-token")
        clean_env.setenv("LINE_CHANNEL_SECRET", "line-secret")
        clean_env.setenv("MESSENGER_VERSION", "v7.0")
        clean_env.setenv("MESSAGING_API_TIMEOUT", "5")

        settings = MessagingSettings.load()

        assert settings.telegram.access_token == "tg-token"
        assert settings.line.is_configured
        assert settings.messenger.version == "7.0"
        assert settings.request_timeout == 5

    def test_from_dotenv(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("SLACK_ACCESS_TOKEN=xoxb-from-file\nUNRELATED=1\n")

        settings = MessagingSettings.load()

        assert settings.slack.access_token == "xoxb-from-file"

    def test_client_from_settings(self, clean_env):
        clean_env.setenv("TELEGRAM_ACCESS_TOKEN", "tg-token")
        clean_env.setenv("MESSENGER_ACCESS_TOKEN", "fb-token")
        clean_env.setenv("MESSENGER_VERSION", "7.0")
        settings = MessagingSettings.load()

        telegram = TelegramClient.from_settings(settings)
        messenger = MessengerClient.from_settings(settings)

        assert telegram.base_url == "https://api.telegram.org/bottg-token/"
        assert messenger.base_url == "https://graph.facebook.com/v7.0/"
        assert messenger.app_secret is None

    def test_missing_credentials(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            LineClient.from_settings(MessagingSettings.load())
        assert exc_info.value.details == {"setting": "LINE_ACCESS_TOKEN"}

    def test_log_level_reaches_logger(self, clean_env):
        clean_env.setenv("MESSAGING_API_LOG_LEVEL", "DEBUG")
        root_logger = logging.getLogger("messaging_api")
        original_level = root_logger.level
        try:
            settings = reload_settings()

            assert settings.log_level == "DEBUG"
            assert root_logger.level == logging.DEBUG
            assert get_logger("adapters.test").isEnabledFor(logging.DEBUG)
        finally:
            get_settings.cache_clear()
            root_logger.setLevel(original_level)

    def test_require(self):
        assert require("value", "NAME") == "value"
        with pytest.raises(ConfigurationError, match="NAME is required"):
            require("", "NAME")


class TestExceptions:
    """例外階層"""

    def test_base_exception(self):
        error = MessagingApiException("boom")
        assert error.error_code == "MessagingApiException"
        assert error.details == {}

    def test_validation_error(self):
        error = ValidationError("bad kind", field="kind", value="hologram")
        assert isinstance(error, MessagingApiException)
        assert error.details == {"field": "kind", "value": "hologram"}

    def test_platform_api_error(self):
        error = PlatformAPIError("LINE API - Not found", platform="line", status_code=404,
                                 response={"message": "Not found"})
        assert str(error) == "LINE API - Not found"
        assert error.error_code == "PlatformAPIError"
        assert error.details == {"platform": "line", "status_code": 404}
        assert error.response == {"message": "Not found"}


class TestStructuredFormatter:
    """構造化ログ"""

    def test_extra_fields(self):
        record = logging.LogRecord(
            "messaging_api.test", logging.INFO, __file__, 10, "Request sent", None, None
        )
        record.platform = "slack"

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "messaging_api.test"
        assert entry["message"] == "Request sent"
        assert entry["extra"]["platform"] == "slack"

    def test_exception_details(self):
        try:
            raise PlatformAPIError("Slack API - invalid_auth", platform="slack")
        except PlatformAPIError:
            record = logging.LogRecord(
                "messaging_api.test", logging.ERROR, __file__, 10, "failed", None, sys.exc_info()
            )

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["exception"]["type"] == "PlatformAPIError"
        assert entry["exception"]["error_code"] == "PlatformAPIError"
        assert entry["exception"]["details"] == {"platform": "slack"}

    def test_get_logger_namespace(self):
        assert get_logger("adapters.test").name == "messaging_api.adapters.test"
        assert get_logger("messaging_api.other").name == "messaging_api.other"
