"""
テスト共通ヘルパー
aiohttp セッションを MagicMock で差し替える
"""

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock


def make_response(status: int = 200, body: Any = None) -> MagicMock:
    """aiohttp のレスポンスを模したモック"""
    if body is None:
        content = b""
    elif isinstance(body, bytes):
        content = body
    elif isinstance(body, str):
        content = body.encode("utf-8")
    else:
        content = json.dumps(body).encode("utf-8")

    response = MagicMock()
    response.status = status
    response.read = AsyncMock(return_value=content)
    return response


def make_session(*responses: tuple[int, Any]) -> MagicMock:
    """
    順番に応答を返すセッションを作成

    Args:
        *responses: (ステータス, 本文) のタプル
    """
    contexts = []
    for status, body in responses:
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=make_response(status, body))
        context.__aexit__ = AsyncMock(return_value=False)
        contexts.append(context)

    session = MagicMock()
    session.request = MagicMock(side_effect=contexts)
    session.close = AsyncMock()
    return session


def sent_kwargs(session: MagicMock, index: int = -1) -> dict[str, Any]:
    """index 番目のリクエストの method / url / kwargs を取得"""
    call = session.request.call_args_list[index]
    method, url = call.args
    return {"method": method, "url": url, **call.kwargs}
