"""
LINE メッセージオブジェクト生成
https://developers.line.biz/en/reference/messaging-api/#message-objects
"""

from typing import Any


def _with_options(message: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
    """quickReply / sender を付与"""
    quick_reply = options.get("quick_reply") or options.get("quickReply")
    if quick_reply:
        message["quickReply"] = quick_reply
    sender = options.get("sender")
    if sender:
        message["sender"] = sender
    return message


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """None のフィールドを除去"""
    return {key: value for key, value in data.items() if value is not None}


def create_text(text: str, **options) -> dict[str, Any]:
    return _with_options({"type": "text", "text": text}, options)


def create_image(original_content_url: str | dict[str, Any],
                 preview_image_url: str | None = None, **options) -> dict[str, Any]:
    """プレビューURL省略時は元画像URLを使う"""
    if isinstance(original_content_url, dict):
        image = original_content_url
        original_content_url = image["originalContentUrl"]
        preview_image_url = image.get("previewImageUrl")
    return _with_options({
        "type": "image",
        "originalContentUrl": original_content_url,
        "previewImageUrl": preview_image_url or original_content_url,
    }, options)


def create_video(original_content_url: str, preview_image_url: str, **options) -> dict[str, Any]:
    return _with_options({
        "type": "video",
        "originalContentUrl": original_content_url,
        "previewImageUrl": preview_image_url,
    }, options)


def create_audio(original_content_url: str, duration: int, **options) -> dict[str, Any]:
    return _with_options({
        "type": "audio",
        "originalContentUrl": original_content_url,
        "duration": duration,
    }, options)


def create_location(title: str, address: str, latitude: float, longitude: float,
                    **options) -> dict[str, Any]:
    return _with_options({
        "type": "location",
        "title": title,
        "address": address,
        "latitude": latitude,
        "longitude": longitude,
    }, options)


def create_sticker(package_id: str, sticker_id: str, **options) -> dict[str, Any]:
    return _with_options({
        "type": "sticker",
        "packageId": package_id,
        "stickerId": sticker_id,
    }, options)


def create_imagemap(alt_text: str, base_url: str, base_size: dict[str, int],
                    actions: list[dict[str, Any]], video: dict[str, Any] | None = None,
                    **options) -> dict[str, Any]:
    """
    Imagemap メッセージ

    Args:
        alt_text: 代替テキスト
        base_url: 画像のベースURL
        base_size: {"width": ..., "height": ...}
        actions: タップ領域のアクション
        video: 動画（オプション）
    """
    return _with_options(_compact({
        "type": "imagemap",
        "baseUrl": base_url,
        "altText": alt_text,
        "baseSize": base_size,
        "video": video,
        "actions": actions,
    }), options)


def create_flex(alt_text: str, contents: dict[str, Any], **options) -> dict[str, Any]:
    return _with_options({
        "type": "flex",
        "altText": alt_text,
        "contents": contents,
    }, options)


def create_template(alt_text: str, template: dict[str, Any], **options) -> dict[str, Any]:
    return _with_options({
        "type": "template",
        "altText": alt_text,
        "template": template,
    }, options)


def create_button_template(alt_text: str, text: str, actions: list[dict[str, Any]],
                           thumbnail_image_url: str | None = None,
                           image_aspect_ratio: str | None = None,
                           image_size: str | None = None,
                           image_background_color: str | None = None,
                           title: str | None = None,
                           default_action: dict[str, Any] | None = None,
                           **options) -> dict[str, Any]:
    return create_template(alt_text, _compact({
        "type": "buttons",
        "thumbnailImageUrl": thumbnail_image_url,
        "imageAspectRatio": image_aspect_ratio,
        "imageSize": image_size,
        "imageBackgroundColor": image_background_color,
        "title": title,
        "text": text,
        "defaultAction": default_action,
        "actions": actions,
    }), **options)


def create_confirm_template(alt_text: str, text: str, actions: list[dict[str, Any]],
                            **options) -> dict[str, Any]:
    return create_template(alt_text, {
        "type": "confirm",
        "text": text,
        "actions": actions,
    }, **options)


def create_carousel_template(alt_text: str, columns: list[dict[str, Any]],
                             image_aspect_ratio: str | None = None,
                             image_size: str | None = None,
                             **options) -> dict[str, Any]:
    return create_template(alt_text, _compact({
        "type": "carousel",
        "columns": columns,
        "imageAspectRatio": image_aspect_ratio,
        "imageSize": image_size,
    }), **options)


def create_image_carousel_template(alt_text: str, columns: list[dict[str, Any]],
                                   **options) -> dict[str, Any]:
    return create_template(alt_text, {
        "type": "image_carousel",
        "columns": columns,
    }, **options)


# メッセージ種別 → ビルダー
MESSAGE_BUILDERS = {
    "text": create_text,
    "image": create_image,
    "video": create_video,
    "audio": create_audio,
    "location": create_location,
    "sticker": create_sticker,
    "imagemap": create_imagemap,
    "flex": create_flex,
    "template": create_template,
    "button_template": create_button_template,
    "confirm_template": create_confirm_template,
    "carousel_template": create_carousel_template,
    "image_carousel_template": create_image_carousel_template,
}

# 旧名 → 正式名
MESSAGE_KIND_ALIASES = {
    "buttons_template": "button_template",
}
