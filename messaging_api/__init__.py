"""
messaging_api - チャットボット向けメッセージングプラットフォームAPIクライアント

対応プラットフォーム:
- Telegram Bot API
- Slack Web API
- LINE Messaging API
- Messenger Platform (Graph API)

全クライアント共通で、キーケース変換（snake_case ⇔ camelCase）と
統一例外 PlatformAPIError を提供する。
"""

__version__ = "0.1.0"

# ===== Core =====
from .core.casing import (
    CaseConvention,
    Opaque,
    camel_to_snake,
    camelcase_keys_deep,
    convert_keys,
    snake_to_camel,
    snakecase_keys_deep,
)
from .core.config import MessagingSettings, get_settings
from .core.exceptions import (
    ConfigurationError,
    MessagingApiException,
    PlatformAPIError,
    ValidationError,
)

# ===== Domain =====
from .domain.models import (
    BatchOutcome,
    BatchRequestItem,
    BatchResultItem,
    ClassifiedError,
    ClassifiedResult,
)
from .domain.services import BatchErrorClassifier, get_error_message, is_error_613

# ===== Platform Clients =====
from .adapters.platforms import (
    LineClient,
    MessengerClient,
    SlackOAuthClient,
    TelegramClient,
)

__all__ = [
    # Version
    "__version__",
    # Core - キーケース変換
    "CaseConvention",
    "Opaque",
    "snake_to_camel",
    "camel_to_snake",
    "convert_keys",
    "camelcase_keys_deep",
    "snakecase_keys_deep",
    # Core - 設定
    "MessagingSettings",
    "get_settings",
    # Core - 例外
    "MessagingApiException",
    "ConfigurationError",
    "ValidationError",
    "PlatformAPIError",
    # Domain - バッチ
    "BatchOutcome",
    "BatchRequestItem",
    "BatchResultItem",
    "ClassifiedError",
    "ClassifiedResult",
    "BatchErrorClassifier",
    "get_error_message",
    "is_error_613",
    # Clients
    "TelegramClient",
    "SlackOAuthClient",
    "LineClient",
    "MessengerClient",
]
