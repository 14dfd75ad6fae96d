"""
Tests for LineClient
"""

import pytest

from conftest import make_session, sent_kwargs
from messaging_api.adapters.platforms.line import LineClient
from messaging_api.core.exceptions import PlatformAPIError, ValidationError

ACCESS_TOKEN = "1234567890"
CHANNEL_SECRET = "so-secret"
REPLY_TOKEN = "nHuyWiB7yP5Zw52FIkcQobQuGDXCTA"
RECIPIENT_ID = "1QAZ2WSX"


def create_client(*responses):
    session = make_session(*responses)
    return LineClient(ACCESS_TOKEN, CHANNEL_SECRET, session=session), session


class TestLineClient:
    """LineClientのテスト"""

    def test_base_url_and_headers(self):
        client = LineClient(ACCESS_TOKEN, CHANNEL_SECRET)
        assert client.base_url == "https://api.line.me/"
        assert client.headers["Authorization"] == f"Bearer {ACCESS_TOKEN}"
        assert client.channel_secret == CHANNEL_SECRET
        assert client.platform_name == "line"

    @pytest.mark.asyncio
    async def test_reply_raw_body(self):
        client, session = create_client((200, {}))
        body = {"replyToken": REPLY_TOKEN, "messages": [{"type": "text", "text": "Hello!"}]}

        res = await client.reply_raw_body(body)

        assert res == {}
        sent = sent_kwargs(session)
        assert sent["method"] == "POST"
        assert sent["url"] == "https://api.line.me/v2/bot/message/reply"
        assert sent["json"] == body
        assert sent["headers"]["Authorization"] == f"Bearer {ACCESS_TOKEN}"

    @pytest.mark.asyncio
    async def test_push_with_custom_access_token(self):
        client, session = create_client((200, {}))

        await client.push(RECIPIENT_ID, [{"type": "text", "text": "Hello!"}],
                          access_token="custom-token")

        sent = sent_kwargs(session)
        assert sent["url"].endswith("/v2/bot/message/push")
        assert sent["headers"]["Authorization"] == "Bearer custom-token"
        assert sent["json"] == {"to": RECIPIENT_ID, "messages": [{"type": "text", "text": "Hello!"}]}

    @pytest.mark.asyncio
    async def test_reply_text_with_quick_reply(self):
        client, session = create_client((200, {}))
        quick_reply = {"items": [{"type": "action", "action": {"type": "cameraRoll", "label": "Send photo"}}]}

        await client.reply_text(REPLY_TOKEN, "Hello!", quick_reply=quick_reply)

        assert sent_kwargs(session)["json"] == {
            "replyToken": REPLY_TOKEN,
            "messages": [{"type": "text", "text": "Hello!", "quickReply": quick_reply}],
        }

    @pytest.mark.asyncio
    async def test_multicast_sticker(self):
        client, session = create_client((200, {}))

        await client.multicast_sticker([RECIPIENT_ID], "1", "1")

        sent = sent_kwargs(session)
        assert sent["url"].endswith("/v2/bot/message/multicast")
        assert sent["json"] == {
            "to": [RECIPIENT_ID],
            "messages": [{"type": "sticker", "packageId": "1", "stickerId": "1"}],
        }

    @pytest.mark.asyncio
    async def test_push_image_defaults_preview(self):
        client, session = create_client((200, {}))

        await client.push_image(RECIPIENT_ID, "https://example.com/original.jpg")

        assert sent_kwargs(session)["json"]["messages"] == [{
            "type": "image",
            "originalContentUrl": "https://example.com/original.jpg",
            "previewImageUrl": "https://example.com/original.jpg",
        }]

    @pytest.mark.asyncio
    async def test_send_with_legacy_kind_alias(self):
        client, session = create_client((200, {}))
        actions = [{"type": "postback", "label": "Buy", "data": "action=buy"}]

        await client.send("push", RECIPIENT_ID, "buttons_template", "alt", "Please select", actions,
                          title="Menu")

        message = sent_kwargs(session)["json"]["messages"][0]
        assert message == {
            "type": "template",
            "altText": "alt",
            "template": {"type": "buttons", "title": "Menu", "text": "Please select", "actions": actions},
        }

    @pytest.mark.asyncio
    async def test_send_rejects_unknown_kind_and_type(self):
        client, session = create_client()

        with pytest.raises(ValidationError):
            await client.send("push", RECIPIENT_ID, "hologram", "x")
        with pytest.raises(ValidationError):
            await client.send("broadcast", RECIPIENT_ID, "text", "x")
        session.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_error_message_includes_details(self):
        client, _ = create_client((400, {
            "message": "The request body has 2 error(s)",
            "details": [
                {"message": "May not be empty", "property": "messages[0].text"},
                {"message": "Must be one of the following values: [text, image]",
                 "property": "messages[1].type"},
            ],
        }))

        with pytest.raises(PlatformAPIError) as exc_info:
            await client.push_text(RECIPIENT_ID, "")

        assert str(exc_info.value) == (
            "LINE API - The request body has 2 error(s)\n"
            "- messages[0].text: May not be empty\n"
            "- messages[1].type: Must be one of the following values: [text, image]"
        )
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_error_details_that_are_not_objects(self):
        client, _ = create_client((400, {
            "message": "The request body has 1 error(s)",
            "details": ["messages[0].text: May not be empty"],
        }))

        with pytest.raises(PlatformAPIError) as exc_info:
            await client.push_text(RECIPIENT_ID, "")

        assert str(exc_info.value) == (
            "LINE API - The request body has 1 error(s)\n"
            "- messages[0].text: May not be empty"
        )

    @pytest.mark.asyncio
    async def test_error_without_message(self):
        client, _ = create_client((500, "Internal Server Error"))

        with pytest.raises(PlatformAPIError, match="LINE API - HTTP 500"):
            await client.leave_group("G1")

    @pytest.mark.asyncio
    async def test_get_user_profile(self):
        profile = {"displayName": "LINE taro", "userId": RECIPIENT_ID}
        client, session = create_client((200, profile))

        assert await client.get_user_profile(RECIPIENT_ID) == profile
        assert sent_kwargs(session)["url"].endswith(f"/v2/bot/profile/{RECIPIENT_ID}")

    @pytest.mark.asyncio
    async def test_get_user_profile_not_found(self):
        client, _ = create_client((404, {"message": "Not found"}))

        assert await client.get_user_profile(RECIPIENT_ID) is None

    @pytest.mark.asyncio
    async def test_retrieve_message_content(self):
        client, session = create_client((200, b"\x89PNG\r\n"))

        content = await client.retrieve_message_content("1234")

        assert content == b"\x89PNG\r\n"
        assert sent_kwargs(session)["url"].endswith("/v2/bot/message/1234/content")

    @pytest.mark.asyncio
    async def test_get_all_group_member_ids(self):
        client, session = create_client(
            (200, {"memberIds": ["U1", "U2"], "next": "jxEWCEEP"}),
            (200, {"memberIds": ["U3"]}),
        )

        assert await client.get_all_group_member_ids("G1") == ["U1", "U2", "U3"]
        assert sent_kwargs(session, 0)["params"] is None
        assert sent_kwargs(session, 1)["params"] == {"start": "jxEWCEEP"}

    @pytest.mark.asyncio
    async def test_rich_menu_list(self):
        client, session = create_client((200, {"richmenus": [{"richMenuId": "r1"}]}))

        assert await client.get_rich_menu_list() == [{"richMenuId": "r1"}]
        assert sent_kwargs(session)["url"].endswith("/v2/bot/richmenu/list")

    @pytest.mark.asyncio
    async def test_download_missing_rich_menu_image(self):
        client, _ = create_client((404, {"message": "Not found"}))

        assert await client.download_rich_menu_image("r1") is None

    @pytest.mark.asyncio
    async def test_issue_link_token(self):
        client, session = create_client((200, {"linkToken": "NMZTNuVrPTqlr2IF8Bnymkb7rXfYv5EY"}))

        res = await client.issue_link_token(RECIPIENT_ID)

        assert res == {"linkToken": "NMZTNuVrPTqlr2IF8Bnymkb7rXfYv5EY"}
        assert sent_kwargs(session)["url"].endswith(f"/v2/bot/user/{RECIPIENT_ID}/linkToken")

    @pytest.mark.asyncio
    async def test_liff_apps(self):
        client, session = create_client(
            (200, {"apps": [{"liffId": "l1"}]}),
            (200, {"liffId": "l2"}),
        )

        assert await client.get_liff_app_list() == [{"liffId": "l1"}]
        view = {"view": {"type": "full", "url": "https://example.com"}}
        assert await client.create_liff_app(view) == {"liffId": "l2"}
        assert sent_kwargs(session)["json"] == view
        assert sent_kwargs(session)["url"].endswith("/liff/v1/apps")
