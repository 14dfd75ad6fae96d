"""
統一ログシステム
構造化ログによる一貫したログ出力
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .exceptions import MessagingApiException

_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName',
])


class StructuredFormatter(logging.Formatter):
    """構造化ログフォーマッター"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        # カスタム属性の追加
        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None
            }

            if isinstance(record.exc_info[1], MessagingApiException):
                log_entry["exception"]["error_code"] = record.exc_info[1].error_code
                log_entry["exception"]["details"] = record.exc_info[1].details

        return json.dumps(log_entry, ensure_ascii=False, separators=(',', ':'), default=str)


class MessagingLogger:
    """統一ログシステム"""

    _loggers: Dict[str, logging.Logger] = {}
    _configured = False

    @classmethod
    def configure(cls, log_level: str = "INFO"):
        """
        ログシステムを設定

        レベルは呼び出すたびに反映する。ハンドラーの追加は初回のみ。
        """
        root_logger = logging.getLogger("messaging_api")
        root_logger.setLevel(getattr(logging, log_level.upper()))

        if cls._configured:
            return

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(console_handler)

        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """ログインスタンスを取得"""
        if not cls._configured:
            cls.configure()

        if name not in cls._loggers:
            logger_name = name if name.startswith("messaging_api") else f"messaging_api.{name}"
            cls._loggers[name] = logging.getLogger(logger_name)

        return cls._loggers[name]


def get_logger(name: str) -> logging.Logger:
    """ロガーを取得"""
    return MessagingLogger.get_logger(name)


def log_request(logger: logging.Logger, platform: str, url: str,
                method: str = "POST", **kwargs):
    """リクエストログ"""
    logger.debug(f"Request sent: {method} {url}", extra={
        "event_type": "request",
        "platform": platform,
        "url": url,
        "method": method,
        **kwargs
    })


def log_response(logger: logging.Logger, platform: str, url: str,
                 status_code: int, duration_ms: float, **kwargs):
    """レスポンスログ"""
    logger.debug(f"Response received: {status_code}", extra={
        "event_type": "response",
        "platform": platform,
        "url": url,
        "status_code": status_code,
        "duration_ms": duration_ms,
        **kwargs
    })


def log_error(logger: logging.Logger, error: Exception, context: Optional[Dict[str, Any]] = None):
    """エラーログ"""
    extra_info = {"event_type": "error"}
    if context:
        extra_info.update(context)

    logger.error(f"Error occurred: {str(error)}", exc_info=True, extra=extra_info)
