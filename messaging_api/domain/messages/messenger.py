"""
Messenger メッセージオブジェクト生成
https://developers.facebook.com/docs/messenger-platform/reference/send-api/

メディアに文字列を渡すとURL、dict を渡すとペイロード、それ以外はファイルデータとして
multipart の FormData を返す。
"""

import functools
import json
import warnings
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp

from ...core.casing import snakecase_keys_deep
from ...core.exceptions import ValidationError

MAX_QUICK_REPLIES = 11
MAX_QUICK_REPLY_TITLE = 20
MAX_QUICK_REPLY_PAYLOAD = 1000

Message = dict[str, Any]


def validate_quick_replies(quick_replies: list[dict[str, Any]]) -> None:
    """
    クイックリプライの制約をチェック

    Raises:
        ValidationError: 件数・タイトル長・ペイロード長の上限を超えた場合
    """
    if not isinstance(quick_replies, list) or len(quick_replies) > MAX_QUICK_REPLIES:
        raise ValidationError(
            f"quick_replies is an array and limited to {MAX_QUICK_REPLIES}",
            field="quick_replies",
        )

    for quick_reply in snakecase_keys_deep(quick_replies):
        if quick_reply.get("content_type") != "text":
            continue
        title = quick_reply.get("title")
        if not title or len(title.strip()) > MAX_QUICK_REPLY_TITLE:
            raise ValidationError(
                f"title of quick reply has a {MAX_QUICK_REPLY_TITLE} character limit, "
                "after that it gets truncated",
                field="title",
                value=title,
            )
        payload = quick_reply.get("payload")
        if not payload or len(payload) > MAX_QUICK_REPLY_PAYLOAD:
            raise ValidationError(
                f"payload of quick reply has a {MAX_QUICK_REPLY_PAYLOAD} character limit",
                field="payload",
            )


def _quick_replies(options: dict[str, Any]) -> list[dict[str, Any]] | None:
    return options.get("quick_replies") or options.get("quickReplies")


def create_message(msg: Message, **options) -> Message:
    """クイックリプライを付与したメッセージ"""
    message = dict(msg)
    quick_replies = _quick_replies(options)
    if quick_replies:
        validate_quick_replies(quick_replies)
        message["quick_replies"] = quick_replies
    return message


def create_text(text: str, **options) -> Message:
    return create_message({"text": text}, **options)


def create_attachment(attachment: dict[str, Any], **options) -> Message:
    return create_message({"attachment": attachment}, **options)


def create_message_form_data(payload: Message, filedata: Any, **options) -> aiohttp.FormData:
    """
    ファイル添付用の multipart ボディを作成

    Args:
        payload: message フィールドに入れるメッセージ
        filedata: ファイルデータ（bytes / ファイルオブジェクト）
        **options: quick_replies, filename, content_type
    """
    message = dict(payload)
    quick_replies = _quick_replies(options)
    if quick_replies:
        validate_quick_replies(quick_replies)
        message["quick_replies"] = quick_replies

    form = aiohttp.FormData()
    form.add_field("message", json.dumps(snakecase_keys_deep(message), ensure_ascii=False))
    form.add_field(
        "filedata",
        filedata,
        filename=options.get("filename") or "filedata",
        content_type=options.get("content_type") or options.get("contentType"),
    )
    return form


def _create_media(media_type: str, media: Any, **options) -> Message | aiohttp.FormData:
    reusable = {"is_reusable": True} if options.get("is_reusable") else {}

    if isinstance(media, str):
        return create_attachment(
            {"type": media_type, "payload": {"url": media, **reusable}}, **options
        )

    if isinstance(media, Mapping):
        return create_attachment({"type": media_type, "payload": dict(media)}, **options)

    payload = reusable
    return create_message_form_data(
        {"attachment": {"type": media_type, "payload": payload}}, media, **options
    )


def create_audio(audio: Any, **options) -> Message | aiohttp.FormData:
    return _create_media("audio", audio, **options)


def create_image(image: Any, **options) -> Message | aiohttp.FormData:
    return _create_media("image", image, **options)


def create_video(video: Any, **options) -> Message | aiohttp.FormData:
    return _create_media("video", video, **options)


def create_file(file: Any, **options) -> Message | aiohttp.FormData:
    return _create_media("file", file, **options)


# ===== テンプレート =====

def create_template(payload: dict[str, Any], **options) -> Message:
    return create_attachment({"type": "template", "payload": payload}, **options)


def create_button_template(text: str, buttons: list[dict[str, Any]], **options) -> Message:
    return create_template({
        "template_type": "button",
        "text": text,
        "buttons": buttons,
    }, **options)


def create_generic_template(elements: list[dict[str, Any]],
                            image_aspect_ratio: str = "horizontal", **options) -> Message:
    return create_template({
        "template_type": "generic",
        "elements": elements,
        "image_aspect_ratio": image_aspect_ratio,
    }, **options)


def _create_list_template(elements: list[dict[str, Any]], buttons: list[dict[str, Any]],
                          top_element_style: str = "large", **options) -> Message:
    return create_template({
        "template_type": "list",
        "elements": elements,
        "buttons": buttons,
        "top_element_style": top_element_style,
    }, **options)


def _create_open_graph_template(elements: list[dict[str, Any]], **options) -> Message:
    return create_template({
        "template_type": "open_graph",
        "elements": elements,
    }, **options)


def create_media_template(elements: list[dict[str, Any]], **options) -> Message:
    return create_template({
        "template_type": "media",
        "elements": elements,
    }, **options)


def create_receipt_template(attrs: dict[str, Any], **options) -> Message:
    return create_template({"template_type": "receipt", **attrs}, **options)


def create_airline_boarding_pass_template(attrs: dict[str, Any], **options) -> Message:
    return create_template({"template_type": "airline_boardingpass", **attrs}, **options)


def create_airline_checkin_template(attrs: dict[str, Any], **options) -> Message:
    return create_template({"template_type": "airline_checkin", **attrs}, **options)


def create_airline_itinerary_template(attrs: dict[str, Any], **options) -> Message:
    return create_template({"template_type": "airline_itinerary", **attrs}, **options)


def create_airline_update_template(attrs: dict[str, Any], **options) -> Message:
    return create_template({"template_type": "airline_update", **attrs}, **options)


# ===== 非推奨 =====

# 非推奨名 → 実装
DEPRECATED_ALIASES: dict[str, Callable[..., Message]] = {
    "create_list_template": _create_list_template,
    "create_open_graph_template": _create_open_graph_template,
}


def deprecated(name: str) -> Callable[..., Message]:
    """DeprecationWarning を出してから実装を呼ぶ関数を返す"""
    fn = DEPRECATED_ALIASES[name]

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        warnings.warn(
            f"`{name}` is deprecated. Messenger no longer supports this template.",
            DeprecationWarning,
            stacklevel=2,
        )
        return fn(*args, **kwargs)

    wrapper.__name__ = name
    return wrapper


create_list_template = deprecated("create_list_template")
create_open_graph_template = deprecated("create_open_graph_template")
