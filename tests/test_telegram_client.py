"""
Tests for TelegramClient
"""

from unittest.mock import MagicMock

import aiohttp
import pytest

from conftest import make_session, sent_kwargs
from messaging_api.adapters.platforms.telegram import TelegramClient
from messaging_api.core.exceptions import PlatformAPIError, ValidationError

ACCESS_TOKEN = "123456:ABC-DEF1234ghIkl-zyx57W2v1u123ew11"


def create_client(*responses):
    session = make_session(*responses)
    return TelegramClient(ACCESS_TOKEN, session=session), session


class TestTelegramClient:
    """TelegramClientのテスト"""

    def test_base_url(self):
        client = TelegramClient(ACCESS_TOKEN)
        assert client.base_url == f"https://api.telegram.org/bot{ACCESS_TOKEN}/"
        assert client.access_token == ACCESS_TOKEN
        assert client.platform_name == "telegram"

    @pytest.mark.asyncio
    async def test_get_me(self):
        client, session = create_client((200, {
            "ok": True,
            "result": {"id": 313534466, "first_name": "first", "username": "a_bot"},
        }))

        res = await client.get_me()

        assert res == {"id": 313534466, "firstName": "first", "username": "a_bot"}
        sent = sent_kwargs(session)
        assert sent["method"] == "POST"
        assert sent["url"].endswith("/getMe")
        assert sent["json"] == {}

    @pytest.mark.asyncio
    async def test_get_sticker_set_camelcases_result(self):
        client, session = create_client((200, {
            "ok": True,
            "result": {
                "name": "sticker set name",
                "title": "sticker set title",
                "is_animated": False,
                "contains_masks": False,
                "stickers": [{
                    "width": 512,
                    "height": 512,
                    "emoji": "💛",
                    "set_name": "sticker set name",
                    "is_animated": False,
                    "thumb": {"file_id": "AAQE", "file_size": 5706, "width": 128, "height": 128},
                    "file_id": "CAAD",
                    "file_size": 36424,
                }],
            },
        }))

        res = await client.get_sticker_set("sticker set name")

        assert res == {
            "name": "sticker set name",
            "title": "sticker set title",
            "isAnimated": False,
            "containsMasks": False,
            "stickers": [{
                "width": 512,
                "height": 512,
                "emoji": "💛",
                "setName": "sticker set name",
                "isAnimated": False,
                "thumb": {"fileId": "AAQE", "fileSize": 5706, "width": 128, "height": 128},
                "fileId": "CAAD",
                "fileSize": 36424,
            }],
        }
        assert sent_kwargs(session)["json"] == {"name": "sticker set name"}

    EXPECTED_STICKER_BODY = {
        "user_id": 1,
        "name": "sticker_set_name",
        "title": "title",
        "png_sticker": "https://example.com/sticker.png",
        "emojis": "💛",
        "contains_masks": True,
        "mask_position": {"point": "eyes", "x_shift": 10, "y_shift": 10, "scale": 1},
    }

    @pytest.mark.asyncio
    async def test_create_new_sticker_set_with_snakecase(self):
        client, session = create_client((200, {"ok": True, "result": True}))

        res = await client.create_new_sticker_set(
            1, "sticker_set_name", "title", "https://example.com/sticker.png", "💛",
            contains_masks=True,
            mask_position={"point": "eyes", "x_shift": 10, "y_shift": 10, "scale": 1},
        )

        assert res is True
        assert sent_kwargs(session)["json"] == self.EXPECTED_STICKER_BODY

    @pytest.mark.asyncio
    async def test_create_new_sticker_set_with_camelcase(self):
        client, session = create_client((200, {"ok": True, "result": True}))

        res = await client.create_new_sticker_set(
            1, "sticker_set_name", "title", "https://example.com/sticker.png", "💛",
            containsMasks=True,
            maskPosition={"point": "eyes", "xShift": 10, "yShift": 10, "scale": 1},
        )

        assert res is True
        assert sent_kwargs(session)["json"] == self.EXPECTED_STICKER_BODY

    @pytest.mark.asyncio
    async def test_send_message_with_options(self):
        client, session = create_client((200, {
            "ok": True,
            "result": {"message_id": 1, "chat": {"id": 427770117}, "text": "hi"},
        }))

        res = await client.send_message(427770117, "hi", disableWebPagePreview=True)

        assert res["messageId"] == 1
        assert sent_kwargs(session)["json"] == {
            "chat_id": 427770117,
            "text": "hi",
            "disable_web_page_preview": True,
        }

    @pytest.mark.asyncio
    async def test_send_contact(self):
        client, session = create_client((200, {"ok": True, "result": {"message_id": 2}}))

        await client.send_contact(1, "886123456789", "first")

        assert sent_kwargs(session)["json"] == {
            "chat_id": 1,
            "phone_number": "886123456789",
            "first_name": "first",
        }

    @pytest.mark.asyncio
    async def test_send_chat_action_validates_action(self):
        client, session = create_client()

        with pytest.raises(ValidationError):
            await client.send_chat_action(1, "dancing")
        session.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_error_description_is_raised(self):
        client, _ = create_client((400, {
            "ok": False,
            "error_code": 400,
            "description": "Bad Request: chat not found",
        }))

        with pytest.raises(PlatformAPIError) as exc_info:
            await client.send_message(1, "hi")

        error = exc_info.value
        assert str(error) == "Telegram API - Bad Request: chat not found"
        assert error.status_code == 400
        assert error.platform == "telegram"
        assert error.request.url.endswith("/sendMessage")
        assert error.response["error_code"] == 400

    @pytest.mark.asyncio
    async def test_ok_false_with_200(self):
        client, _ = create_client((200, {"ok": False, "description": "Unauthorized"}))

        with pytest.raises(PlatformAPIError, match="Telegram API - Unauthorized") as exc_info:
            await client.get_webhook_info()

        error = exc_info.value
        assert error.status_code == 200
        assert error.request is not None
        assert error.request.method == "POST"
        assert error.request.url == f"https://api.telegram.org/bot{ACCESS_TOKEN}/getWebhookInfo"

    @pytest.mark.asyncio
    async def test_ok_without_result(self):
        client, _ = create_client((200, {"ok": True}))

        assert await client.delete_webhook() is None

    @pytest.mark.asyncio
    async def test_transport_error_is_not_wrapped(self):
        session = make_session()
        session.request = MagicMock(side_effect=aiohttp.ClientConnectionError("boom"))
        client = TelegramClient(ACCESS_TOKEN, session=session)

        with pytest.raises(aiohttp.ClientConnectionError):
            await client.get_me()

    @pytest.mark.asyncio
    async def test_on_request_hook(self):
        seen = []
        session = make_session((200, {"ok": True, "result": True}))
        client = TelegramClient(ACCESS_TOKEN, session=session, on_request=seen.append)

        await client.set_webhook("https://example.com/webhook")

        assert len(seen) == 1
        assert seen[0].method == "POST"
        assert seen[0].body == {"url": "https://example.com/webhook"}

    @pytest.mark.asyncio
    async def test_injected_session_is_not_closed(self):
        client, session = create_client()
        async with client:
            pass
        session.close.assert_not_called()
