"""
キーケース変換
snake_case（各プラットフォームのワイヤー形式）と camelCase（公開API）の相互変換

変換ルール:
- snake → camel: 非アンダースコア文字に挟まれた単独の "_" だけを区切りとみなし、
  直後の文字を大文字化する。連続した "__" や先頭/末尾の "_" はそのまま残す。
  キーの先頭文字は小文字化し、先頭セグメントの残りは変更しない（"User_id" → "userId"）。
- camel → snake: 大文字の直前に "_" を挿入して全体を小文字化する。
  先頭文字と直前が "_" の場合は挿入しない。略語は1文字ずつ区切る
  （"URLPath" → "u_r_l_path"）。
"""

import re
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any

import aiohttp

_SNAKE_BOUNDARY = re.compile(r"(?<=[^_])_([^_])")
_CAMEL_BOUNDARY = re.compile(r"(?<=[^_])([A-Z])")


class CaseConvention(Enum):
    """キーの命名規則"""

    SNAKE = "snake"
    CAMEL = "camel"


class Opaque:
    """
    変換対象外のペイロードを示すラッパー

    中身は走査されず、ラッパー自体が同一オブジェクトのまま返される。
    """

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"Opaque({self.value!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Opaque) and other.value == self.value

    __hash__ = None


def is_opaque(value: Any) -> bool:
    """走査してはいけない値か"""
    if isinstance(value, (Opaque, bytes, bytearray, memoryview, aiohttp.FormData)):
        return True
    # ファイルライクオブジェクト
    return not isinstance(value, (str, Mapping)) and callable(getattr(value, "read", None))


def snake_to_camel(key: str) -> str:
    """snake_case を camelCase に変換"""
    camel = _SNAKE_BOUNDARY.sub(lambda m: m.group(1).upper(), key)
    return camel[:1].lower() + camel[1:]


def camel_to_snake(key: str) -> str:
    """camelCase を snake_case に変換"""
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


_KEY_CONVERTERS = {
    CaseConvention.SNAKE: camel_to_snake,
    CaseConvention.CAMEL: snake_to_camel,
}


def convert_keys(value: Any, convention: CaseConvention) -> Any:
    """
    ネストした値のキーを再帰的に変換

    入力は変更せず新しい値を返す。スカラーと不透明ペイロードはそのまま返す。
    循環参照を含む入力はサポートしない。

    Args:
        value: 変換対象（dict / list / tuple / dataclass / スカラー）
        convention: 変換後の命名規則

    Returns:
        Any: キー変換後の値
    """
    if is_opaque(value):
        return value

    if isinstance(value, Mapping):
        convert_key = _KEY_CONVERTERS[convention]
        return {
            (convert_key(key) if isinstance(key, str) else key): convert_keys(item, convention)
            for key, item in value.items()
        }

    if isinstance(value, list):
        return [convert_keys(item, convention) for item in value]

    if isinstance(value, tuple):
        return tuple(convert_keys(item, convention) for item in value)

    if is_dataclass(value) and not isinstance(value, type):
        return convert_keys(asdict(value), convention)

    return value


def camelcase_keys_deep(value: Any) -> Any:
    """全キーを camelCase に変換"""
    return convert_keys(value, CaseConvention.CAMEL)


def snakecase_keys_deep(value: Any) -> Any:
    """全キーを snake_case に変換"""
    return convert_keys(value, CaseConvention.SNAKE)
