import json
import logging
from typing import Any, AsyncGenerator, Dict, Optional, Union

import httpx

from .exceptions import (
    DifyConfigError, DifyConnectionError, DifyHTTPError,
    DifyStreamError, DifyTimeoutError
)
from .routes import JsonBody, MultipartBody, RequestBody, Route
from .sse import SSEReassembler, iter_events

DEFAULT_BASE_URL = "https://api.dify.ai/v1"


class DifyClient:
    """
    Dify HTTP 客户端。
    - Bearer Token 鉴权，api_key 可在运行时轮换
    - JSON / multipart 两种请求体
    - stream=True 时直接返回未缓冲的响应，交由上层解析 SSE
    - 不做重试
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 120,
        logger: Optional[logging.Logger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self._base_url = (base_url or "").rstrip("/")
        if not self._base_url:
            raise DifyConfigError()
        if not self._base_url.endswith("/v1"):
            self.logger.warning(
                "建议 DIFY_BASE_URL 以 /v1 结尾，例如 https://api.dify.ai/v1，当前为 %s",
                self._base_url,
            )
        self._api_key = api_key
        self._timeout = timeout
        self._client = httpx.AsyncClient(
            timeout=timeout, transport=transport, follow_redirects=True
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def api_key(self) -> str:
        return self._api_key

    @api_key.setter
    def api_key(self, value: str) -> None:
        """
        轮换 API Key，只影响之后发出的请求。

        赋值没有加锁：与赋值同时发出的请求可能带旧 key 也可能带新 key，
        两者都是合法 key，属于良性竞争。
        """
        self._api_key = value

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        body: Union[RequestBody, Dict[str, Any], None] = None,
        params: Optional[Dict[str, Any]] = None,
        stream: bool = False,
        headers: Optional[Dict[str, str]] = None,
    ) -> Union[Dict[str, Any], httpx.Response]:
        method = method.upper()
        url = f"{self._base_url}{path}"
        if body is not None and not isinstance(body, (JsonBody, MultipartBody)):
            body = JsonBody(body)

        content_headers: Dict[str, str] = {}
        kwargs: Dict[str, Any] = {}
        # GET 一律不带请求体
        if method != "GET" and body is not None:
            if isinstance(body, MultipartBody):
                kwargs["data"] = body.data
                kwargs["files"] = body.files
            elif body.data is not None:
                content_headers["Content-Type"] = "application/json"
                kwargs["json"] = body.data

        query = {k: v for k, v in (params or {}).items() if v is not None}
        request = self._client.build_request(
            method,
            url,
            headers=self._headers({**content_headers, **(headers or {})}),
            params=query or None,
            **kwargs,
        )

        try:
            resp = await self._client.send(request, stream=stream)
        except httpx.TimeoutException as e:
            raise DifyTimeoutError(
                f"{method} {request.url.path} 请求超时: {e}", timeout=self._timeout
            ) from e
        except httpx.RequestError as e:
            raise DifyConnectionError(f"{method} {request.url.path} 连接失败: {e}") from e

        if not resp.is_success:
            await self._raise_for_status(resp, method, request.url.path)

        if stream:
            return resp

        try:
            data = resp.json()
        except ValueError:
            self.logger.debug("%s %s 响应不是合法 JSON，按空对象处理", method, request.url.path)
            return {}
        if not isinstance(data, dict):
            self.logger.debug("%s %s 响应不是 JSON 对象，按空对象处理", method, request.url.path)
            return {}
        return data

    async def _raise_for_status(self, resp: httpx.Response, method: str, path: str):
        try:
            await resp.aread()
            text = resp.text
        except (httpx.HTTPError, httpx.StreamError, ValueError):
            text = ""
        finally:
            await resp.aclose()

        code = "http_error"
        raw = None
        try:
            parsed = json.loads(text) if text else None
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            raw = parsed
            if parsed.get("code"):
                code = str(parsed["code"])

        raise DifyHTTPError(
            method,
            path,
            resp.status_code,
            reason=resp.reason_phrase,
            body=text,
            code=code,
            raw_response=raw,
        )

    async def get(self, path: str, **kwargs):
        return await self._request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs):
        return await self._request("POST", path, **kwargs)

    async def delete(self, path: str, **kwargs):
        return await self._request("DELETE", path, **kwargs)

    async def call(self, route: Route, path_params: Optional[Dict[str, Any]] = None, **kwargs):
        """按路由表发起请求"""
        return await self._request(route.method, route.path(**(path_params or {})), **kwargs)

    async def stream_events(
        self,
        route: Route,
        path_params: Optional[Dict[str, Any]] = None,
        *,
        reassembler: Optional[SSEReassembler] = None,
        **kwargs,
    ) -> AsyncGenerator[Dict[str, Any], None]:
        """以 SSE 方式请求，逐个 yield 解析后的事件；响应在生成器结束时关闭"""
        headers = {"Accept": "text/event-stream", **(kwargs.pop("headers", None) or {})}
        reassembler = reassembler or SSEReassembler(logger=self.logger)
        resp = await self.call(route, path_params, stream=True, headers=headers, **kwargs)
        try:
            async for event in iter_events(resp.aiter_bytes(), reassembler):
                yield event
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise DifyStreamError(f"{route.method} {route.template} 读取 SSE 流失败: {e}") from e
        finally:
            await resp.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "DifyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
