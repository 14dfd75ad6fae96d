"""
Messenger Platform Client
Graph API の Send API / User Profile API / バッチリクエストのクライアント
"""

import json
from typing import Any

import aiohttp

from ...core.casing import camelcase_keys_deep, snakecase_keys_deep
from ...core.config import MessagingSettings, require
from ...core.exceptions import ValidationError
from ...domain.messages import messenger as messenger_messages
from ...domain.models.batch import (
    BatchOutcome,
    BatchRequestItem,
    BatchResultItem,
    ClassifiedResult,
)
from ...domain.ports.platform_port import RequestInfo
from ...domain.services.batch_classifier import BatchErrorClassifier
from .base import BasePlatformClient

MAX_BATCH_SIZE = 50
DEFAULT_PROFILE_FIELDS = ("id", "name", "first_name", "last_name", "profile_pic")


class MessengerClient(BasePlatformClient):
    """
    Messengerクライアント

    ボディは snake_case、応答は camelCase に変換する。
    アクセストークンはクエリパラメーターで渡す。
    """

    def __init__(self, access_token: str, app_secret: str | None = None,
                 origin: str = "https://graph.facebook.com", version: str = "6.0",
                 classifier: BatchErrorClassifier | None = None, **kwargs):
        super().__init__(access_token, f"{origin.rstrip('/')}/v{version}/", **kwargs)
        self.app_secret = app_secret
        self.version = version
        self.classifier = classifier or BatchErrorClassifier()

    @classmethod
    def from_settings(cls, settings: MessagingSettings, **kwargs) -> "MessengerClient":
        """設定から生成"""
        return cls(
            require(settings.messenger.access_token, "MESSENGER_ACCESS_TOKEN"),
            app_secret=settings.messenger.app_secret or None,
            origin=settings.messenger.origin,
            version=settings.messenger.version,
            request_timeout=settings.request_timeout,
            **kwargs,
        )

    @property
    def platform_name(self) -> str:
        return "messenger"

    def _handle_error(self, status: int, payload: Any, info: RequestInfo) -> None:
        """Graph API のエラー本文 {"error": {...}} を整形"""
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict):
            message = f"Messenger API - {error.get('code')} {error.get('type')} {error.get('message')}"
        else:
            message = f"Messenger API - HTTP {status}"
        raise self._api_error(message, status, payload, info)

    def _token_params(self, access_token: str | None) -> dict[str, str]:
        return {"access_token": access_token or self.access_token}

    # ===== Send API =====

    async def send_raw_body(self, body: dict[str, Any] | aiohttp.FormData,
                            access_token: str | None = None) -> dict[str, Any]:
        """
        me/messages にボディをそのまま送信

        Args:
            body: dict（snake_case に変換して JSON 送信）または FormData
            access_token: トークン上書き

        Returns:
            dict: {"recipientId": ..., "messageId": ...}
        """
        if isinstance(body, aiohttp.FormData):
            data = await self._request(
                "POST", "me/messages", data=body, params=self._token_params(access_token)
            )
        else:
            data = await self._request(
                "POST", "me/messages",
                json=snakecase_keys_deep(body),
                params=self._token_params(access_token),
            )
        return camelcase_keys_deep(data)

    async def send_message(self, recipient: str | dict[str, Any],
                           message: dict[str, Any] | aiohttp.FormData,
                           messaging_type: str = "UPDATE", tag: str | None = None,
                           access_token: str | None = None) -> dict[str, Any]:
        """
        メッセージを送信

        recipient に文字列を渡すと PSID として扱う。
        tag を指定すると messaging_type は MESSAGE_TAG になる。
        """
        recipient = {"id": recipient} if isinstance(recipient, str) else recipient
        messaging_type = "MESSAGE_TAG" if tag else messaging_type

        if isinstance(message, aiohttp.FormData):
            message.add_field("recipient", json.dumps(snakecase_keys_deep(recipient)))
            message.add_field("messaging_type", messaging_type)
            if tag:
                message.add_field("tag", tag)
            return await self.send_raw_body(message, access_token)

        body: dict[str, Any] = {
            "messaging_type": messaging_type,
            "recipient": recipient,
            "message": message,
        }
        if tag:
            body["tag"] = tag
        return await self.send_raw_body(body, access_token)

    async def send_text(self, recipient: str | dict[str, Any], text: str,
                        **options) -> dict[str, Any]:
        send_options, message_options = _split_options(options)
        return await self.send_message(
            recipient, messenger_messages.create_text(text, **message_options), **send_options
        )

    async def send_attachment(self, recipient: str | dict[str, Any],
                              attachment: dict[str, Any], **options) -> dict[str, Any]:
        send_options, message_options = _split_options(options)
        return await self.send_message(
            recipient,
            messenger_messages.create_attachment(attachment, **message_options),
            **send_options,
        )

    async def send_audio(self, recipient: str | dict[str, Any], audio: Any,
                         **options) -> dict[str, Any]:
        send_options, message_options = _split_options(options)
        return await self.send_message(
            recipient, messenger_messages.create_audio(audio, **message_options), **send_options
        )

    async def send_image(self, recipient: str | dict[str, Any], image: Any,
                         **options) -> dict[str, Any]:
        send_options, message_options = _split_options(options)
        return await self.send_message(
            recipient, messenger_messages.create_image(image, **message_options), **send_options
        )

    async def send_video(self, recipient: str | dict[str, Any], video: Any,
                         **options) -> dict[str, Any]:
        send_options, message_options = _split_options(options)
        return await self.send_message(
            recipient, messenger_messages.create_video(video, **message_options), **send_options
        )

    async def send_file(self, recipient: str | dict[str, Any], file: Any,
                        **options) -> dict[str, Any]:
        send_options, message_options = _split_options(options)
        return await self.send_message(
            recipient, messenger_messages.create_file(file, **message_options), **send_options
        )

    async def send_template(self, recipient: str | dict[str, Any],
                            payload: dict[str, Any], **options) -> dict[str, Any]:
        send_options, message_options = _split_options(options)
        return await self.send_message(
            recipient,
            messenger_messages.create_template(payload, **message_options),
            **send_options,
        )

    async def send_button_template(self, recipient: str | dict[str, Any], text: str,
                                   buttons: list[dict[str, Any]], **options) -> dict[str, Any]:
        send_options, message_options = _split_options(options)
        return await self.send_message(
            recipient,
            messenger_messages.create_button_template(text, buttons, **message_options),
            **send_options,
        )

    async def send_generic_template(self, recipient: str | dict[str, Any],
                                    elements: list[dict[str, Any]], **options) -> dict[str, Any]:
        send_options, message_options = _split_options(options)
        return await self.send_message(
            recipient,
            messenger_messages.create_generic_template(elements, **message_options),
            **send_options,
        )

    # ===== User Profile API =====

    async def get_user_profile(self, user_id: str, fields: list[str] | None = None,
                               access_token: str | None = None) -> dict[str, Any]:
        """https://developers.facebook.com/docs/messenger-platform/identity/user-profile"""
        params = {
            "fields": ",".join(fields or DEFAULT_PROFILE_FIELDS),
            **self._token_params(access_token),
        }
        data = await self._request("GET", user_id, params=params)
        return camelcase_keys_deep(data)

    # ===== バッチ =====

    async def send_batch(self, items: list[BatchRequestItem],
                         access_token: str | None = None) -> list[ClassifiedResult]:
        """
        バッチリクエストを送信して各項目を分類

        Args:
            items: バッチ項目（最大50件）
            access_token: トークン上書き

        Returns:
            list[ClassifiedResult]: リクエスト順に並んだ分類済み結果

        Raises:
            ValidationError: 件数が上限を超えた場合
        """
        if not items:
            return []
        if len(items) > MAX_BATCH_SIZE:
            raise ValidationError(
                f"limit the number of requests to {MAX_BATCH_SIZE} in a batch",
                field="items",
                value=len(items),
            )

        data, info = await self._send("POST", "", json={
            "access_token": access_token or self.access_token,
            "batch": json.dumps([item.to_dict() for item in items], ensure_ascii=False),
        })
        if not isinstance(data, list):
            raise self._api_error(
                "Messenger API - batch response is not a list", 200, data, info
            )

        results = []
        for index, item in enumerate(items):
            if index < len(data):
                result = BatchResultItem.from_dict(data[index], request=item, index=index)
            else:
                result = BatchResultItem.missing(request=item, index=index)
            classified = self.classifier.classify(result)
            outcome = self.classifier.outcome(result, classified)
            if outcome is not BatchOutcome.SUCCESS:
                self.logger.warning(
                    f"Batch item {index} failed: {classified.message or result.code}",
                    extra={
                        "event_type": "batch_item_failure",
                        "platform": self.platform_name,
                        "outcome": outcome.value,
                        "relative_url": item.relative_url,
                    },
                )
            results.append(ClassifiedResult(result=result, error=classified, outcome=outcome))
        return results


_SEND_OPTION_KEYS = ("messaging_type", "tag", "access_token")


def _split_options(options: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """送信オプションとメッセージ生成オプションに分ける"""
    send_options = {key: options[key] for key in _SEND_OPTION_KEYS if key in options}
    message_options = {key: value for key, value in options.items() if key not in send_options}
    return send_options, message_options
