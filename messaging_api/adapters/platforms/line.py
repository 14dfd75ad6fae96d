"""
LINE Messaging API Client
LINE Messaging API (https://developers.line.biz/en/reference/messaging-api/) のクライアント

LINE のワイヤー形式は camelCase のため、ボディのキー変換は行わない。
"""

from typing import Any

from ...core.config import MessagingSettings, require
from ...core.exceptions import PlatformAPIError, ValidationError
from ...domain.messages import line as line_messages
from ...domain.ports.platform_port import RequestInfo
from .base import BasePlatformClient

SEND_TYPES = ("reply", "push", "multicast")


class LineClient(BasePlatformClient):
    """
    LINEクライアント

    送信系は {reply, push, multicast} × メッセージ種別の明示的なテーブルで構成する。
    各メソッドの access_token は呼び出し単位のトークン上書き。
    """

    def __init__(self, access_token: str, channel_secret: str,
                 origin: str = "https://api.line.me", **kwargs):
        super().__init__(
            access_token,
            f"{origin.rstrip('/')}/",
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            **kwargs,
        )
        self.channel_secret = channel_secret

    @classmethod
    def from_settings(cls, settings: MessagingSettings, **kwargs) -> "LineClient":
        """設定から生成"""
        return cls(
            require(settings.line.access_token, "LINE_ACCESS_TOKEN"),
            require(settings.line.channel_secret, "LINE_CHANNEL_SECRET"),
            origin=settings.line.origin,
            request_timeout=settings.request_timeout,
            **kwargs,
        )

    @property
    def platform_name(self) -> str:
        return "line"

    def _handle_error(self, status: int, payload: Any, info: RequestInfo) -> None:
        """
        LINE のエラー本文を整形

        "LINE API - <message>" の後に details を1行ずつ付け加える。
        """
        if isinstance(payload, dict) and payload.get("message"):
            message = f"LINE API - {payload['message']}"
            for detail in payload.get("details") or []:
                if isinstance(detail, dict):
                    message += f"\n- {detail.get('property')}: {detail.get('message')}"
                else:
                    message += f"\n- {detail}"
        else:
            message = f"LINE API - HTTP {status}"
        raise self._api_error(message, status, payload, info)

    @staticmethod
    def _auth(access_token: str | None) -> dict[str, str] | None:
        if access_token is None:
            return None
        return {"Authorization": f"Bearer {access_token}"}

    async def _call(self, method: str, path: str, body: Any | None = None,
                    access_token: str | None = None, **kwargs) -> Any:
        return await self._request(
            method, path, json=body, headers=self._auth(access_token), **kwargs
        )

    async def _call_or_none(self, method: str, path: str,
                            access_token: str | None = None, **kwargs) -> Any:
        """404 を None として扱う"""
        try:
            return await self._call(method, path, access_token=access_token, **kwargs)
        except PlatformAPIError as e:
            if e.status_code == 404:
                return None
            raise

    # ===== 送信 =====

    async def reply_raw_body(self, body: dict[str, Any],
                             access_token: str | None = None) -> dict[str, Any]:
        """https://developers.line.biz/en/reference/messaging-api/#send-reply-message"""
        return await self._call("POST", "v2/bot/message/reply", body, access_token)

    async def reply(self, reply_token: str, messages: list[dict[str, Any]],
                    access_token: str | None = None) -> dict[str, Any]:
        return await self.reply_raw_body(
            {"replyToken": reply_token, "messages": messages}, access_token
        )

    async def push_raw_body(self, body: dict[str, Any],
                            access_token: str | None = None) -> dict[str, Any]:
        """https://developers.line.biz/en/reference/messaging-api/#send-push-message"""
        return await self._call("POST", "v2/bot/message/push", body, access_token)

    async def push(self, to: str, messages: list[dict[str, Any]],
                   access_token: str | None = None) -> dict[str, Any]:
        return await self.push_raw_body({"to": to, "messages": messages}, access_token)

    async def multicast_raw_body(self, body: dict[str, Any],
                                 access_token: str | None = None) -> dict[str, Any]:
        """https://developers.line.biz/en/reference/messaging-api/#send-multicast-message"""
        return await self._call("POST", "v2/bot/message/multicast", body, access_token)

    async def multicast(self, to: list[str], messages: list[dict[str, Any]],
                        access_token: str | None = None) -> dict[str, Any]:
        return await self.multicast_raw_body({"to": to, "messages": messages}, access_token)

    async def send(self, send_type: str, target: str | list[str], kind: str, *args,
                   access_token: str | None = None, **options) -> dict[str, Any]:
        """
        種別を指定してメッセージを生成・送信

        Args:
            send_type: "reply" / "push" / "multicast"
            target: リプライトークン、ユーザーID、またはユーザーIDのリスト
            kind: メッセージ種別（"text", "button_template" 等。旧名も可）
            *args: メッセージビルダーへの引数
            access_token: トークン上書き
            **options: メッセージビルダーへのオプション（quick_reply 等）
        """
        kind = line_messages.MESSAGE_KIND_ALIASES.get(kind, kind)
        builder = line_messages.MESSAGE_BUILDERS.get(kind)
        if builder is None:
            raise ValidationError(f"Unknown message kind: {kind}", field="kind", value=kind)
        if send_type not in SEND_TYPES:
            raise ValidationError(
                f"Unknown send type: {send_type}", field="send_type", value=send_type
            )
        sender = {
            "reply": self.reply,
            "push": self.push,
            "multicast": self.multicast,
        }[send_type]
        return await sender(target, [builder(*args, **options)], access_token=access_token)

    # ===== コンテンツ =====

    async def retrieve_message_content(self, message_id: str,
                                       access_token: str | None = None) -> bytes:
        """https://developers.line.biz/en/reference/messaging-api/#get-content"""
        return await self._call(
            "GET", f"v2/bot/message/{message_id}/content", access_token=access_token, raw=True
        )

    # ===== プロファイル / グループ / トークルーム =====

    async def get_user_profile(self, user_id: str,
                               access_token: str | None = None) -> dict[str, Any] | None:
        """https://developers.line.biz/en/reference/messaging-api/#get-profile"""
        return await self._call_or_none("GET", f"v2/bot/profile/{user_id}", access_token)

    async def get_group_member_profile(self, group_id: str, user_id: str,
                                       access_token: str | None = None) -> dict[str, Any]:
        return await self._call(
            "GET", f"v2/bot/group/{group_id}/member/{user_id}", access_token=access_token
        )

    async def get_room_member_profile(self, room_id: str, user_id: str,
                                      access_token: str | None = None) -> dict[str, Any]:
        return await self._call(
            "GET", f"v2/bot/room/{room_id}/member/{user_id}", access_token=access_token
        )

    async def get_group_member_ids(self, group_id: str, start: str | None = None,
                                   access_token: str | None = None) -> dict[str, Any]:
        """
        グループメンバーIDを1ページ取得

        Returns:
            dict: {"memberIds": [...], "next": 続きのトークン（あれば）}
        """
        return await self._call(
            "GET", f"v2/bot/group/{group_id}/members/ids",
            access_token=access_token,
            params={"start": start} if start else None,
        )

    async def get_all_group_member_ids(self, group_id: str,
                                       access_token: str | None = None) -> list[str]:
        member_ids: list[str] = []
        start = None
        while True:
            page = await self.get_group_member_ids(group_id, start, access_token)
            member_ids.extend(page["memberIds"])
            start = page.get("next")
            if not start:
                return member_ids

    async def get_room_member_ids(self, room_id: str, start: str | None = None,
                                  access_token: str | None = None) -> dict[str, Any]:
        return await self._call(
            "GET", f"v2/bot/room/{room_id}/members/ids",
            access_token=access_token,
            params={"start": start} if start else None,
        )

    async def get_all_room_member_ids(self, room_id: str,
                                      access_token: str | None = None) -> list[str]:
        member_ids: list[str] = []
        start = None
        while True:
            page = await self.get_room_member_ids(room_id, start, access_token)
            member_ids.extend(page["memberIds"])
            start = page.get("next")
            if not start:
                return member_ids

    async def leave_group(self, group_id: str, access_token: str | None = None) -> dict[str, Any]:
        return await self._call("POST", f"v2/bot/group/{group_id}/leave", access_token=access_token)

    async def leave_room(self, room_id: str, access_token: str | None = None) -> dict[str, Any]:
        return await self._call("POST", f"v2/bot/room/{room_id}/leave", access_token=access_token)

    # ===== リッチメニュー =====

    async def get_rich_menu_list(self, access_token: str | None = None) -> list[dict[str, Any]]:
        """https://developers.line.biz/en/reference/messaging-api/#rich-menu"""
        data = await self._call("GET", "v2/bot/richmenu/list", access_token=access_token)
        return data["richmenus"]

    async def get_rich_menu(self, rich_menu_id: str,
                            access_token: str | None = None) -> dict[str, Any] | None:
        return await self._call_or_none("GET", f"v2/bot/richmenu/{rich_menu_id}", access_token)

    async def create_rich_menu(self, rich_menu: dict[str, Any],
                               access_token: str | None = None) -> dict[str, Any]:
        return await self._call("POST", "v2/bot/richmenu", rich_menu, access_token)

    async def delete_rich_menu(self, rich_menu_id: str,
                               access_token: str | None = None) -> dict[str, Any]:
        return await self._call("DELETE", f"v2/bot/richmenu/{rich_menu_id}", access_token=access_token)

    async def get_linked_rich_menu(self, user_id: str,
                                   access_token: str | None = None) -> dict[str, Any] | None:
        return await self._call_or_none("GET", f"v2/bot/user/{user_id}/richmenu", access_token)

    async def link_rich_menu(self, user_id: str, rich_menu_id: str,
                             access_token: str | None = None) -> dict[str, Any]:
        return await self._call(
            "POST", f"v2/bot/user/{user_id}/richmenu/{rich_menu_id}", access_token=access_token
        )

    async def unlink_rich_menu(self, user_id: str,
                               access_token: str | None = None) -> dict[str, Any]:
        return await self._call("DELETE", f"v2/bot/user/{user_id}/richmenu", access_token=access_token)

    async def get_default_rich_menu(self, access_token: str | None = None) -> dict[str, Any] | None:
        return await self._call_or_none("GET", "v2/bot/user/all/richmenu", access_token)

    async def set_default_rich_menu(self, rich_menu_id: str,
                                    access_token: str | None = None) -> dict[str, Any]:
        return await self._call(
            "POST", f"v2/bot/user/all/richmenu/{rich_menu_id}", access_token=access_token
        )

    async def delete_default_rich_menu(self, access_token: str | None = None) -> dict[str, Any]:
        return await self._call("DELETE", "v2/bot/user/all/richmenu", access_token=access_token)

    async def download_rich_menu_image(self, rich_menu_id: str,
                                       access_token: str | None = None) -> bytes | None:
        return await self._call_or_none(
            "GET", f"v2/bot/richmenu/{rich_menu_id}/content", access_token, raw=True
        )

    # ===== アカウント連携 =====

    async def issue_link_token(self, user_id: str,
                               access_token: str | None = None) -> dict[str, Any]:
        """https://developers.line.biz/en/reference/messaging-api/#account-link"""
        return await self._call("POST", f"v2/bot/user/{user_id}/linkToken", access_token=access_token)

    # ===== LIFF =====

    async def get_liff_app_list(self, access_token: str | None = None) -> list[dict[str, Any]]:
        """https://developers.line.biz/en/reference/liff-server/"""
        data = await self._call("GET", "liff/v1/apps", access_token=access_token)
        return data["apps"]

    async def create_liff_app(self, view: dict[str, Any],
                              access_token: str | None = None) -> dict[str, Any]:
        return await self._call("POST", "liff/v1/apps", view, access_token)

    async def update_liff_app(self, liff_id: str, view: dict[str, Any],
                              access_token: str | None = None) -> Any:
        return await self._call("PUT", f"liff/v1/apps/{liff_id}/view", view, access_token)

    async def delete_liff_app(self, liff_id: str, access_token: str | None = None) -> Any:
        return await self._call("DELETE", f"liff/v1/apps/{liff_id}", access_token=access_token)

    # ===== 送信ショートカット =====
    # {reply, push, multicast} × メッセージ種別

    async def reply_text(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "text", *args, **options)

    async def push_text(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "text", *args, **options)

    async def multicast_text(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "text", *args, **options)

    async def reply_image(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "image", *args, **options)

    async def push_image(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "image", *args, **options)

    async def multicast_image(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "image", *args, **options)

    async def reply_video(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "video", *args, **options)

    async def push_video(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "video", *args, **options)

    async def multicast_video(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "video", *args, **options)

    async def reply_audio(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "audio", *args, **options)

    async def push_audio(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "audio", *args, **options)

    async def multicast_audio(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "audio", *args, **options)

    async def reply_location(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "location", *args, **options)

    async def push_location(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "location", *args, **options)

    async def multicast_location(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "location", *args, **options)

    async def reply_sticker(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "sticker", *args, **options)

    async def push_sticker(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "sticker", *args, **options)

    async def multicast_sticker(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "sticker", *args, **options)

    async def reply_imagemap(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "imagemap", *args, **options)

    async def push_imagemap(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "imagemap", *args, **options)

    async def multicast_imagemap(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "imagemap", *args, **options)

    async def reply_flex(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "flex", *args, **options)

    async def push_flex(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "flex", *args, **options)

    async def multicast_flex(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "flex", *args, **options)

    async def reply_template(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "template", *args, **options)

    async def push_template(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "template", *args, **options)

    async def multicast_template(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "template", *args, **options)

    async def reply_button_template(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "button_template", *args, **options)

    async def push_button_template(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "button_template", *args, **options)

    async def multicast_button_template(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "button_template", *args, **options)

    async def reply_confirm_template(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "confirm_template", *args, **options)

    async def push_confirm_template(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "confirm_template", *args, **options)

    async def multicast_confirm_template(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "confirm_template", *args, **options)

    async def reply_carousel_template(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "carousel_template", *args, **options)

    async def push_carousel_template(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "carousel_template", *args, **options)

    async def multicast_carousel_template(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "carousel_template", *args, **options)

    async def reply_image_carousel_template(self, reply_token: str, *args, **options) -> dict[str, Any]:
        return await self.send("reply", reply_token, "image_carousel_template", *args, **options)

    async def push_image_carousel_template(self, to: str, *args, **options) -> dict[str, Any]:
        return await self.send("push", to, "image_carousel_template", *args, **options)

    async def multicast_image_carousel_template(self, to: list[str], *args, **options) -> dict[str, Any]:
        return await self.send("multicast", to, "image_carousel_template", *args, **options)
