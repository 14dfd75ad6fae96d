"""
プラットフォームクライアント基底クラス
aiohttp セッション管理・リクエスト送信・エラー変換の共通機能を提供
"""

import asyncio
import json
import time
from abc import ABC
from typing import Any

import aiohttp

from ...core.exceptions import PlatformAPIError
from ...core.logging import get_logger, log_error, log_request, log_response
from ...domain.ports.platform_port import IPlatformClient, OnRequest, RequestInfo

DEFAULT_TIMEOUT = 30


class BasePlatformClient(IPlatformClient, ABC):
    """
    プラットフォームクライアント基底クラス

    共通のHTTP処理を提供。
    URL・ヘッダー・エラー本文の解釈はサブクラスで行う。
    """

    def __init__(
        self,
        access_token: str,
        base_url: str,
        headers: dict[str, str] | None = None,
        on_request: OnRequest | None = None,
        session: aiohttp.ClientSession | None = None,
        request_timeout: int = DEFAULT_TIMEOUT,
    ):
        self._access_token = access_token
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.headers = headers or {}
        self.request_timeout = request_timeout
        self.session = session
        self._owns_session = session is None
        self._on_request = on_request or self._log_request
        self.logger = get_logger(f"adapters.platforms.{self.platform_name}")

    async def __aenter__(self):
        """非同期コンテキストマネージャー開始"""
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """非同期コンテキストマネージャー終了"""
        await self.close()

    async def close(self) -> None:
        """自前で作成したセッションのみ閉じる"""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    @property
    def access_token(self) -> str:
        return self._access_token

    def _get_session(self) -> aiohttp.ClientSession:
        """セッションを取得（未作成なら作成）"""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.request_timeout)
            )
            self._owns_session = True
        return self.session

    def _log_request(self, info: RequestInfo) -> None:
        log_request(self.logger, self.platform_name, info.url, info.method)

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        data: Any | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        raw: bool = False,
    ) -> Any:
        """
        APIリクエストを送信

        Returns:
            Any: パース済みの応答（JSONでなければ文字列）
        """
        payload, _ = await self._send(
            method, path, json=json, data=data, params=params, headers=headers, raw=raw
        )
        return payload

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        data: Any | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        raw: bool = False,
    ) -> tuple[Any, RequestInfo]:
        """
        APIリクエストを送信し、応答と送信したリクエスト情報を返す

        HTTP 200 でも本文でエラーを示すプラットフォームは、
        このリクエスト情報を添えて PlatformAPIError を送出する。

        Args:
            method: HTTPメソッド
            path: base_url からの相対パス
            json: JSONボディ
            data: フォーム/バイナリボディ
            params: クエリパラメーター
            headers: 追加ヘッダー（クライアント既定ヘッダーを上書き）
            raw: True なら応答本文を bytes のまま返す

        Returns:
            tuple: (パース済みの応答, RequestInfo)

        Raises:
            PlatformAPIError: プラットフォームがエラーを返した場合
        """
        url = self._url(path)
        request_headers = {**self.headers, **(headers or {})}
        info = RequestInfo(
            method=method.upper(),
            url=url,
            headers=request_headers,
            body=json if json is not None else data,
        )
        self._on_request(info)

        started = time.monotonic()
        try:
            async with self._get_session().request(
                info.method,
                url,
                json=json,
                data=data,
                params=params,
                headers=request_headers,
            ) as response:
                content = await response.read()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log_error(self.logger, e, {"platform": self.platform_name, "url": url})
            raise

        log_response(
            self.logger, self.platform_name, url, status,
            round((time.monotonic() - started) * 1000, 2),
        )

        if 200 <= status < 300 and raw:
            return content, info

        payload = self._parse_body(content)
        if not 200 <= status < 300:
            self._handle_error(status, payload, info)
        return payload, info

    @staticmethod
    def _parse_body(content: bytes) -> Any:
        """応答本文をJSONとして解釈（失敗したら文字列のまま）"""
        if not content:
            return None
        text = content.decode("utf-8", errors="replace")
        try:
            return json.loads(text)
        except ValueError:
            return text

    def _handle_error(self, status: int, payload: Any, info: RequestInfo) -> None:
        """エラー応答を PlatformAPIError に変換（サブクラスで上書き）"""
        raise PlatformAPIError(
            f"{self.platform_name} API - HTTP {status}",
            platform=self.platform_name,
            status_code=status,
            request=info,
            response=payload,
        )

    def _api_error(self, message: str, status: int | None, payload: Any,
                   info: RequestInfo | None) -> PlatformAPIError:
        return PlatformAPIError(
            message,
            platform=self.platform_name,
            status_code=status,
            request=info,
            response=payload,
        )
