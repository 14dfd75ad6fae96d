"""
Platform Clients
各メッセージングプラットフォームのHTTP APIクライアント
"""

from .base import BasePlatformClient
from .line import LineClient
from .messenger import MessengerClient
from .slack import SlackOAuthClient
from .telegram import TelegramClient

__all__ = [
    "BasePlatformClient",
    "LineClient",
    "MessengerClient",
    "SlackOAuthClient",
    "TelegramClient",
]
