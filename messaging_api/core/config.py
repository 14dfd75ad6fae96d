"""
統合設定管理

pydantic-settings を使用した型安全な設定管理
- 環境変数から自動読み込み
- プラットフォームごとに env_prefix を分離
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .logging import MessagingLogger


class TelegramSettings(BaseSettings):
    """Telegram Bot API 設定"""

    model_config = SettingsConfigDict(
        env_prefix="TELEGRAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    access_token: str = Field(default="", description="Bot トークン")
    origin: str = Field(default="https://api.telegram.org", description="API オリジン")

    @property
    def is_configured(self) -> bool:
        """Telegram が設定済みか"""
        return bool(self.access_token)


class SlackSettings(BaseSettings):
    """Slack Web API 設定"""

    model_config = SettingsConfigDict(
        env_prefix="SLACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    access_token: str = Field(default="", description="Bot User OAuth アクセストークン")
    origin: str = Field(default="https://slack.com", description="API オリジン")

    @property
    def is_configured(self) -> bool:
        """Slack が設定済みか"""
        return bool(self.access_token)


class LineSettings(BaseSettings):
    """LINE Messaging API 設定"""

    model_config = SettingsConfigDict(
        env_prefix="LINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    access_token: str = Field(default="", description="チャネルアクセストークン")
    channel_secret: str = Field(default="", description="チャネルシークレット")
    origin: str = Field(default="https://api.line.me", description="API オリジン")

    @property
    def is_configured(self) -> bool:
        """LINE が設定済みか"""
        return bool(self.access_token and self.channel_secret)


class MessengerSettings(BaseSettings):
    """Messenger Platform (Graph API) 設定"""

    model_config = SettingsConfigDict(
        env_prefix="MESSENGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    access_token: str = Field(default="", description="ページアクセストークン")
    app_secret: str = Field(default="", description="アプリシークレット")
    origin: str = Field(default="https://graph.facebook.com", description="Graph API オリジン")
    version: str = Field(default="6.0", description="Graph API バージョン")

    @field_validator("version")
    @classmethod
    def strip_version_prefix(cls, v: str) -> str:
        """"v6.0" のような指定も受け付ける"""
        return v[1:] if v.startswith("v") else v

    @property
    def is_configured(self) -> bool:
        """Messenger が設定済みか"""
        return bool(self.access_token)


class MessagingSettings(BaseSettings):
    """messaging_api 全体設定"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", alias="MESSAGING_API_LOG_LEVEL", description="ログレベル")
    request_timeout: int = Field(default=30, alias="MESSAGING_API_TIMEOUT", description="HTTPタイムアウト(秒)")

    # サブ設定
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    slack: SlackSettings = Field(default_factory=SlackSettings)
    line: LineSettings = Field(default_factory=LineSettings)
    messenger: MessengerSettings = Field(default_factory=MessengerSettings)

    @classmethod
    def load(cls) -> "MessagingSettings":
        """設定をロード（サブ設定も含む）"""
        return cls(
            telegram=TelegramSettings(),
            slack=SlackSettings(),
            line=LineSettings(),
            messenger=MessengerSettings(),
        )


@lru_cache()
def get_settings() -> MessagingSettings:
    """
    設定を取得（キャッシュ付き）

    使用例:
        settings = get_settings()
        client = TelegramClient.from_settings(settings)

    log_level はここで messaging_api ロガーに反映される。
    """
    settings = MessagingSettings.load()
    MessagingLogger.configure(settings.log_level)
    return settings


def reload_settings() -> MessagingSettings:
    """設定を再読み込み"""
    get_settings.cache_clear()
    return get_settings()


def require(value: Optional[str], name: str) -> str:
    """必須設定値のチェック"""
    if not value:
        raise ConfigurationError(f"{name} is required", details={"setting": name})
    return value
