"""
プラットフォームクライアントポート
各プラットフォーム（Telegram, Slack, LINE, Messenger）のHTTP APIクライアントを抽象化
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass
class RequestInfo:
    """送信するHTTPリクエストの情報"""
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any | None = None


OnRequest = Callable[[RequestInfo], None]


class IPlatformClient(ABC):
    """
    プラットフォームクライアントインターフェース

    各プラットフォームのHTTP APIを薄くラップする。
    """

    @abstractmethod
    async def close(self) -> None:
        """HTTPセッションを閉じる"""

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """
        プラットフォーム名

        Returns:
            str: "telegram", "slack", "line", "messenger" 等
        """

    @property
    @abstractmethod
    def access_token(self) -> str:
        """クライアントのアクセストークン"""
