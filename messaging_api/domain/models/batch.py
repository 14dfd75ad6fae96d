"""
バッチリクエストモデル
Graph API のバッチ（多重化）リクエストとその結果
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlencode

from ...core.casing import camelcase_keys_deep, snakecase_keys_deep


class BatchOutcome(Enum):
    """バッチ項目の結果分類"""

    SUCCESS = "success"
    SOFT_FAILURE = "soft_failure"  # 既知のエラーコード（レート制限等）
    HARD_FAILURE = "hard_failure"


@dataclass
class BatchRequestItem:
    """バッチ内の1操作"""

    method: str
    relative_url: str
    body: dict[str, Any] | None = None
    name: str | None = None
    depends_on: str | None = None
    omit_response_on_success: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """
        Graph API のバッチ形式に変換

        body はキーを snake_case にし、ネストした値は JSON 文字列として
        URL エンコードする。
        """
        data: dict[str, Any] = {
            "method": self.method,
            "relative_url": self.relative_url,
        }
        if self.body:
            encoded = {
                key: value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
                for key, value in snakecase_keys_deep(self.body).items()
            }
            data["body"] = urlencode(encoded)
        if self.name is not None:
            data["name"] = self.name
        if self.depends_on is not None:
            data["depends_on"] = self.depends_on
        if self.omit_response_on_success is not None:
            data["omit_response_on_success"] = self.omit_response_on_success
        return data


@dataclass
class BatchResultItem:
    """バッチ内の1操作の結果"""

    code: int
    body: str | None
    headers: list[dict[str, str]] = field(default_factory=list)
    request: BatchRequestItem | None = None
    index: int | None = None

    @property
    def is_success(self) -> bool:
        """2xx かどうか"""
        return 200 <= self.code < 300

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None, request: BatchRequestItem | None = None,
                  index: int | None = None) -> "BatchResultItem":
        """API応答の1要素から生成（omit された要素は None で届く）"""
        if data is None:
            omitted = request is not None and request.omit_response_on_success is not False
            return cls(code=200 if omitted else 0, body=None, request=request, index=index)
        return cls(
            code=int(data.get("code", 0)),
            body=data.get("body"),
            headers=data.get("headers") or [],
            request=request,
            index=index,
        )

    @classmethod
    def missing(cls, request: BatchRequestItem | None = None,
                index: int | None = None) -> "BatchResultItem":
        """応答配列に要素自体が無い項目（失敗扱い）"""
        return cls(code=0, body=None, request=request, index=index)


@dataclass
class ClassifiedError:
    """バッチ項目エラーの分類結果"""

    message: str
    matches: dict[str, bool] = field(default_factory=dict)

    def matches_code(self, code: str) -> bool:
        """指定コードのシグネチャに一致したか"""
        return self.matches.get(code, False)

    @property
    def has_message(self) -> bool:
        return bool(self.message)


@dataclass
class ClassifiedResult:
    """分類済みのバッチ項目結果"""

    result: BatchResultItem
    error: ClassifiedError
    outcome: BatchOutcome

    @property
    def data(self) -> Any:
        """成功時の応答本文（camelCase）。本文がJSONでなければ None"""
        if self.outcome is not BatchOutcome.SUCCESS or not self.result.body:
            return None
        try:
            return camelcase_keys_deep(json.loads(self.result.body))
        except ValueError:
            return None


# ===== バッチリクエストビルダー =====

def send_request(body: dict[str, Any], *, name: str | None = None,
                 depends_on: str | None = None) -> BatchRequestItem:
    """me/messages への送信リクエスト"""
    return BatchRequestItem(
        method="POST",
        relative_url="me/messages",
        body=body,
        name=name,
        depends_on=depends_on,
    )


def send_message_request(recipient: str | dict[str, Any], message: dict[str, Any],
                         messaging_type: str = "UPDATE", tag: str | None = None,
                         **kwargs) -> BatchRequestItem:
    """メッセージ送信リクエスト"""
    body: dict[str, Any] = {
        "messaging_type": "MESSAGE_TAG" if tag else messaging_type,
        "recipient": {"id": recipient} if isinstance(recipient, str) else recipient,
        "message": message,
    }
    if tag:
        body["tag"] = tag
    return send_request(body, **kwargs)


def send_text_request(recipient: str | dict[str, Any], text: str,
                      **kwargs) -> BatchRequestItem:
    """テキスト送信リクエスト"""
    return send_message_request(recipient, {"text": text}, **kwargs)


def get_user_profile_request(user_id: str, fields: list[str] | None = None,
                             *, name: str | None = None) -> BatchRequestItem:
    """ユーザープロファイル取得リクエスト"""
    fields = fields or ["id", "name", "first_name", "last_name", "profile_pic"]
    return BatchRequestItem(
        method="GET",
        relative_url=f"{user_id}?fields={','.join(fields)}",
        name=name,
    )
