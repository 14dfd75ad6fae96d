"""
バッチエラー分類サービス
バッチ項目の応答本文からエラーメッセージを取り出し、既知のコードと照合する

リトライ判断は呼び出し側の責務。ここでは分類のみ行う。
"""

import json
import re

from ..models.batch import BatchOutcome, BatchResultItem, ClassifiedError

# 既知のエラーコードシグネチャ
DEFAULT_SIGNATURES: dict[str, str] = {
    "613": r"#613",
}


def get_error_message(result: BatchResultItem) -> str:
    """
    body.error.message を取り出す

    JSONとして解釈できない場合や形が想定と異なる場合は空文字を返す。
    例外は送出しない。
    """
    try:
        payload = json.loads(result.body)
        message = payload["error"]["message"]
    except (TypeError, ValueError, KeyError, IndexError):
        return ""
    return message if isinstance(message, str) else ""


def is_error_613(result: BatchResultItem) -> bool:
    """レート制限 (#613) によるエラーか"""
    return re.search(DEFAULT_SIGNATURES["613"], get_error_message(result)) is not None


class BatchErrorClassifier:
    """
    バッチ項目エラー分類器

    コードは register() でシグネチャを追加して拡張する。
    抽出ロジックは変更しない。
    """

    def __init__(self, signatures: dict[str, str] | None = None):
        self._signatures: dict[str, re.Pattern[str]] = {}
        for code, pattern in (signatures if signatures is not None else DEFAULT_SIGNATURES).items():
            self.register(code, pattern)

    def register(self, code: str, pattern: str) -> None:
        """エラーコードのシグネチャを登録"""
        self._signatures[code] = re.compile(pattern)

    @property
    def codes(self) -> list[str]:
        """登録済みコード一覧"""
        return list(self._signatures)

    def classify(self, result: BatchResultItem) -> ClassifiedError:
        """
        バッチ項目を分類

        Args:
            result: バッチ項目の結果

        Returns:
            ClassifiedError: メッセージとコードごとの一致判定
        """
        message = get_error_message(result)
        return ClassifiedError(
            message=message,
            matches={
                code: bool(message) and pattern.search(message) is not None
                for code, pattern in self._signatures.items()
            },
        )

    def outcome(self, result: BatchResultItem,
                classified: ClassifiedError | None = None) -> BatchOutcome:
        """成功 / 既知コードによる失敗 / その他の失敗を判定"""
        if result.is_success:
            return BatchOutcome.SUCCESS
        classified = classified or self.classify(result)
        if any(classified.matches.values()):
            return BatchOutcome.SOFT_FAILURE
        return BatchOutcome.HARD_FAILURE
