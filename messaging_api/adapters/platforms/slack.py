"""
Slack Web API Client
Slack Web API (https://api.slack.com/web) の OAuth トークン用クライアント
"""

import json
import warnings
from typing import Any
from urllib.parse import urlencode

from ...core.casing import camelcase_keys_deep, snakecase_keys_deep
from ...core.config import MessagingSettings, require
from ...domain.ports.platform_port import RequestInfo
from .base import BasePlatformClient

# 文字列化して送るフィールド
PAYLOAD_FIELDS_TO_STRINGIFY = ("attachments", "blocks")


def stringify_payload_fields(payload: dict[str, Any],
                             fields: tuple[str, ...] = PAYLOAD_FIELDS_TO_STRINGIFY) -> dict[str, Any]:
    """attachments / blocks を snake_case 化した JSON 文字列に変換"""
    result = dict(payload)
    for name in fields:
        if result.get(name) and not isinstance(result[name], str):
            result[name] = json.dumps(snakecase_keys_deep(result[name]), ensure_ascii=False)
    return result


def encode_form(body: dict[str, Any]) -> str:
    """フォームエンコード（None は送らない）"""
    fields = {}
    for key, value in body.items():
        if value is None:
            continue
        if isinstance(value, bool):
            fields[key] = "true" if value else "false"
        elif isinstance(value, (dict, list)):
            fields[key] = json.dumps(value, ensure_ascii=False)
        else:
            fields[key] = value
    return urlencode(fields)


def _normalize_message(message: str | dict[str, Any]) -> dict[str, Any]:
    return {"text": message} if isinstance(message, str) else dict(message)


class SlackScheduledMessagesAPI:
    """chat.scheduledMessages.* """

    def __init__(self, client: "SlackOAuthClient"):
        self._client = client

    async def list(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/chat.scheduledMessages.list"""
        return await self._client.call_method("chat.scheduledMessages.list", options)


class SlackChatAPI:
    """chat.* メソッド群"""

    def __init__(self, client: "SlackOAuthClient"):
        self._client = client
        self.scheduled_messages = SlackScheduledMessagesAPI(client)

    async def post_message(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/chat.postMessage"""
        return await self._client.call_method("chat.postMessage", stringify_payload_fields(options))

    async def post_ephemeral(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/chat.postEphemeral"""
        return await self._client.call_method(
            "chat.postEphemeral", stringify_payload_fields(options)
        )

    async def update(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/chat.update"""
        return await self._client.call_method("chat.update", stringify_payload_fields(options))

    async def delete(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/chat.delete"""
        return await self._client.call_method("chat.delete", options)

    async def me_message(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/chat.meMessage"""
        return await self._client.call_method("chat.meMessage", options)

    async def get_permalink(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/chat.getPermalink"""
        return await self._client.call_method("chat.getPermalink", options)

    async def schedule_message(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/chat.scheduleMessage"""
        return await self._client.call_method(
            "chat.scheduleMessage", stringify_payload_fields(options)
        )

    async def delete_scheduled_message(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/chat.deleteScheduledMessage"""
        return await self._client.call_method("chat.deleteScheduledMessage", options)

    async def unfurl(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/chat.unfurl"""
        return await self._client.call_method("chat.unfurl", options)


class SlackOAuthClient(BasePlatformClient):
    """
    Slackクライアント

    リクエストは snake_case のフォームエンコード、応答は camelCase に変換する。
    ok: false の応答は PlatformAPIError になる。
    """

    def __init__(self, access_token: str, origin: str = "https://slack.com", **kwargs):
        super().__init__(
            access_token,
            f"{origin.rstrip('/')}/api/",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            **kwargs,
        )
        self.chat = SlackChatAPI(self)

    @classmethod
    def from_settings(cls, settings: MessagingSettings, **kwargs) -> "SlackOAuthClient":
        """設定から生成"""
        return cls(
            require(settings.slack.access_token, "SLACK_ACCESS_TOKEN"),
            origin=settings.slack.origin,
            request_timeout=settings.request_timeout,
            **kwargs,
        )

    @property
    def platform_name(self) -> str:
        return "slack"

    async def call_method(self, method: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Web API メソッドを呼び出す

        body 内の token / access_token / accessToken は呼び出し単位のトークン上書きとして扱う。

        Args:
            method: メソッド名（例: "chat.postMessage"）
            body: リクエストボディ

        Returns:
            dict: camelCase に変換した応答
        """
        body = dict(body or {})
        token = (
            body.pop("access_token", None)
            or body.pop("accessToken", None)
            or body.pop("token", None)
            or self.access_token
        )
        body.pop("token", None)
        body.pop("accessToken", None)
        body["token"] = token

        data, info = await self._send(
            "POST", method, data=encode_form(snakecase_keys_deep(body))
        )
        data = camelcase_keys_deep(data)

        if not isinstance(data, dict) or not data.get("ok"):
            error = data.get("error") if isinstance(data, dict) else None
            raise self._api_error(f"Slack API - {error}", 200, data, info)

        return data

    def _handle_error(self, status: int, payload: Any, info: RequestInfo) -> None:
        error = payload.get("error") if isinstance(payload, dict) else payload
        raise self._api_error(f"Slack API - {error or f'HTTP {status}'}", status, payload, info)

    @staticmethod
    def _next_cursor(data: dict[str, Any]) -> str | None:
        metadata = data.get("responseMetadata") or {}
        return metadata.get("nextCursor") or None

    # ===== チャンネル / 会話 =====

    async def get_channel_info(self, channel_id: str, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/channels.info"""
        data = await self.call_method("channels.info", {"channel": channel_id, **options})
        return data["channel"]

    async def get_conversation_info(self, channel_id: str, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/conversations.info"""
        data = await self.call_method("conversations.info", {"channel": channel_id, **options})
        return data["channel"]

    async def get_conversation_members(self, channel_id: str, **options) -> dict[str, Any]:
        """
        https://api.slack.com/methods/conversations.members

        Returns:
            dict: {"members": [...], "next": 次のカーソル or None}
        """
        data = await self.call_method("conversations.members", {"channel": channel_id, **options})
        return {"members": data["members"], "next": self._next_cursor(data)}

    async def get_all_conversation_members(self, channel_id: str, **options) -> list[str]:
        """全メンバーをページングして取得"""
        members: list[str] = []
        cursor = None
        while True:
            page = await self.get_conversation_members(channel_id, cursor=cursor, **options)
            members.extend(page["members"])
            cursor = page["next"]
            if not cursor:
                return members

    async def get_conversation_list(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/conversations.list"""
        data = await self.call_method("conversations.list", options)
        return {"channels": data["channels"], "next": self._next_cursor(data)}

    async def get_all_conversation_list(self, **options) -> list[dict[str, Any]]:
        """全チャンネルをページングして取得"""
        channels: list[dict[str, Any]] = []
        cursor = None
        while True:
            page = await self.get_conversation_list(cursor=cursor, **options)
            channels.extend(page["channels"])
            cursor = page["next"]
            if not cursor:
                return channels

    # ===== ユーザー =====

    async def get_user_info(self, user_id: str, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/users.info"""
        data = await self.call_method("users.info", {"user": user_id, **options})
        return data["user"]

    async def get_user_list(self, **options) -> dict[str, Any]:
        """https://api.slack.com/methods/users.list"""
        data = await self.call_method("users.list", options)
        return {"members": data["members"], "next": self._next_cursor(data)}

    async def get_all_user_list(self, **options) -> list[dict[str, Any]]:
        """全ユーザーをページングして取得"""
        users: list[dict[str, Any]] = []
        cursor = None
        while True:
            page = await self.get_user_list(cursor=cursor, **options)
            users.extend(page["members"])
            cursor = page["next"]
            if not cursor:
                return users

    # ===== 非推奨 =====

    async def post_message(self, channel: str, message: str | dict[str, Any],
                           **options) -> dict[str, Any]:
        """非推奨: chat.post_message を使用"""
        warnings.warn(
            "`post_message` is deprecated. Use `chat.post_message` instead.",
            DeprecationWarning,
            stacklevel=2,
        )
        return await self.chat.post_message(channel=channel, **_normalize_message(message), **options)

    async def post_ephemeral(self, channel: str, user: str, message: str | dict[str, Any],
                             **options) -> dict[str, Any]:
        """非推奨: chat.post_ephemeral を使用"""
        warnings.warn(
            "`post_ephemeral` is deprecated. Use `chat.post_ephemeral` instead.",
            DeprecationWarning,
            stacklevel=2,
        )
        return await self.chat.post_ephemeral(
            channel=channel, user=user, **_normalize_message(message), **options
        )
