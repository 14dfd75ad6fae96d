"""
Telegram Bot API Client
Telegram Bot API (https://core.telegram.org/bots/api) のクライアント
"""

from typing import Any

from ...core.casing import camelcase_keys_deep, snakecase_keys_deep
from ...core.config import MessagingSettings, require
from ...core.exceptions import ValidationError
from ...domain.ports.platform_port import RequestInfo
from .base import BasePlatformClient

CHAT_ACTIONS = (
    "typing",
    "upload_photo",
    "record_video",
    "upload_video",
    "record_audio",
    "upload_audio",
    "upload_document",
    "find_location",
    "record_video_note",
    "upload_video_note",
)


class TelegramClient(BasePlatformClient):
    """
    Telegramクライアント

    リクエストボディは snake_case、戻り値は result を camelCase に変換したもの。
    オプションは camelCase / snake_case どちらで渡しても同じボディになる。
    """

    def __init__(self, access_token: str, origin: str = "https://api.telegram.org", **kwargs):
        super().__init__(
            access_token,
            f"{origin.rstrip('/')}/bot{access_token}/",
            headers={"Content-Type": "application/json"},
            **kwargs,
        )

    @classmethod
    def from_settings(cls, settings: MessagingSettings, **kwargs) -> "TelegramClient":
        """設定から生成"""
        return cls(
            require(settings.telegram.access_token, "TELEGRAM_ACCESS_TOKEN"),
            origin=settings.telegram.origin,
            request_timeout=settings.request_timeout,
            **kwargs,
        )

    @property
    def platform_name(self) -> str:
        return "telegram"

    async def call_method(self, method: str, body: dict[str, Any] | None = None) -> Any:
        """
        Bot API メソッドを呼び出す

        Args:
            method: メソッド名（例: "sendMessage"）
            body: リクエストボディ（キーはどちらの命名規則でも可）

        Returns:
            Any: camelCase に変換した result
        """
        data, info = await self._send("POST", method, json=snakecase_keys_deep(body or {}))
        if not isinstance(data, dict) or not data.get("ok"):
            self._handle_error(200, data, info)
        return camelcase_keys_deep(data.get("result"))

    def _handle_error(self, status: int, payload: Any, info: RequestInfo) -> None:
        description = payload.get("description") if isinstance(payload, dict) else None
        raise self._api_error(
            f"Telegram API - {description or f'HTTP {status}'}",
            status,
            payload,
            info,
        )

    # ===== Webhook =====

    async def get_webhook_info(self) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#getwebhookinfo"""
        return await self.call_method("getWebhookInfo")

    async def set_webhook(self, url: str, **options) -> bool:
        """https://core.telegram.org/bots/api#setwebhook"""
        return await self.call_method("setWebhook", {"url": url, **options})

    async def delete_webhook(self) -> bool:
        """https://core.telegram.org/bots/api#deletewebhook"""
        return await self.call_method("deleteWebhook")

    # ===== Bot / メッセージ送信 =====

    async def get_me(self) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#getme"""
        return await self.call_method("getMe")

    async def send_message(self, chat_id: int | str, text: str, **options) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#sendmessage"""
        return await self.call_method("sendMessage", {"chat_id": chat_id, "text": text, **options})

    async def send_photo(self, chat_id: int | str, photo: str, **options) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#sendphoto"""
        return await self.call_method("sendPhoto", {"chat_id": chat_id, "photo": photo, **options})

    async def send_audio(self, chat_id: int | str, audio: str, **options) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#sendaudio"""
        return await self.call_method("sendAudio", {"chat_id": chat_id, "audio": audio, **options})

    async def send_document(self, chat_id: int | str, document: str, **options) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#senddocument"""
        return await self.call_method(
            "sendDocument", {"chat_id": chat_id, "document": document, **options}
        )

    async def send_sticker(self, chat_id: int | str, sticker: str, **options) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#sendsticker"""
        return await self.call_method(
            "sendSticker", {"chat_id": chat_id, "sticker": sticker, **options}
        )

    async def send_video(self, chat_id: int | str, video: str, **options) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#sendvideo"""
        return await self.call_method("sendVideo", {"chat_id": chat_id, "video": video, **options})

    async def send_voice(self, chat_id: int | str, voice: str, **options) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#sendvoice"""
        return await self.call_method("sendVoice", {"chat_id": chat_id, "voice": voice, **options})

    async def send_video_note(self, chat_id: int | str, video_note: str, **options) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#sendvideonote"""
        return await self.call_method(
            "sendVideoNote", {"chat_id": chat_id, "video_note": video_note, **options}
        )

    async def send_location(self, chat_id: int | str, latitude: float, longitude: float,
                            **options) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#sendlocation"""
        return await self.call_method("sendLocation", {
            "chat_id": chat_id,
            "latitude": latitude,
            "longitude": longitude,
            **options,
        })

    async def send_venue(self, chat_id: int | str, latitude: float, longitude: float,
                         title: str, address: str, **options) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#sendvenue"""
        return await self.call_method("sendVenue", {
            "chat_id": chat_id,
            "latitude": latitude,
            "longitude": longitude,
            "title": title,
            "address": address,
            **options,
        })

    async def send_contact(self, chat_id: int | str, phone_number: str, first_name: str,
                           **options) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#sendcontact"""
        return await self.call_method("sendContact", {
            "chat_id": chat_id,
            "phone_number": phone_number,
            "first_name": first_name,
            **options,
        })

    async def send_chat_action(self, chat_id: int | str, action: str) -> bool:
        """https://core.telegram.org/bots/api#sendchataction"""
        if action not in CHAT_ACTIONS:
            raise ValidationError(f"Unknown chat action: {action}", field="action", value=action)
        return await self.call_method("sendChatAction", {"chat_id": chat_id, "action": action})

    # ===== ステッカーセット =====

    async def get_sticker_set(self, name: str) -> dict[str, Any]:
        """https://core.telegram.org/bots/api#getstickerset"""
        return await self.call_method("getStickerSet", {"name": name})

    async def create_new_sticker_set(self, user_id: int, name: str, title: str,
                                     png_sticker: str, emojis: str, **options) -> bool:
        """https://core.telegram.org/bots/api#createnewstickerset"""
        return await self.call_method("createNewStickerSet", {
            "user_id": user_id,
            "name": name,
            "title": title,
            "png_sticker": png_sticker,
            "emojis": emojis,
            **options,
        })

    async def add_sticker_to_set(self, user_id: int, name: str, png_sticker: str,
                                 emojis: str, **options) -> bool:
        """https://core.telegram.org/bots/api#addstickertoset"""
        return await self.call_method("addStickerToSet", {
            "user_id": user_id,
            "name": name,
            "png_sticker": png_sticker,
            "emojis": emojis,
            **options,
        })

    async def set_sticker_position_in_set(self, sticker: str, position: int) -> bool:
        """https://core.telegram.org/bots/api#setstickerpositioninset"""
        return await self.call_method(
            "setStickerPositionInSet", {"sticker": sticker, "position": position}
        )

    async def delete_sticker_from_set(self, sticker: str) -> bool:
        """https://core.telegram.org/bots/api#deletestickerfromset"""
        return await self.call_method("deleteStickerFromSet", {"sticker": sticker})
