"""
カスタム例外クラス
プラットフォームクライアント共通のエラー階層
"""

from typing import Any


class MessagingApiException(Exception):
    """messaging_apiのベース例外クラス"""

    def __init__(self, message: str, error_code: str | None = None,
                 details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(MessagingApiException):
    """設定関連のエラー"""


class ValidationError(MessagingApiException):
    """バリデーションエラー"""

    def __init__(self, message: str, field: str | None = None,
                 value: Any | None = None, **kwargs):
        super().__init__(message, **kwargs)
        if field:
            self.details['field'] = field
        if value is not None:
            self.details['value'] = value


class PlatformAPIError(MessagingApiException):
    """
    プラットフォームAPIが返したエラー

    HTTPステータスが2xx以外、または ok: false を含む応答を統一的に表す。
    request / response で元のHTTPコンテキストを参照できる。
    """

    def __init__(self, message: str, platform: str = "unknown",
                 status_code: int | None = None,
                 request: Any | None = None,
                 response: Any | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.platform = platform
        self.status_code = status_code
        self.request = request
        self.response = response
        self.details['platform'] = platform
        if status_code:
            self.details['status_code'] = status_code
