from __future__ import annotations

from typing import Any, AsyncGenerator, Dict, List, Optional

from .client import DifyClient
from .routes import Route


class CompletionService:
    def __init__(self, client: DifyClient):
        self._client = client

    @staticmethod
    def _body(
        inputs: Dict[str, Any], user: str, response_mode: str, files: Optional[List[dict]]
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "inputs": inputs,
            "response_mode": response_mode,
            "user": user,
        }
        if files:
            body["files"] = files
        return body

    async def create_completion_message(
        self,
        *,
        inputs: Dict[str, Any],
        user: str,
        files: Optional[List[dict]] = None,
    ) -> Dict[str, Any]:
        """文本生成（阻塞模式）"""
        body = self._body(inputs, user, "blocking", files)
        return await self._client.call(Route.COMPLETION, body=body)

    async def stream_completion_message(
        self,
        *,
        inputs: Dict[str, Any],
        user: str,
        files: Optional[List[dict]] = None,
    ) -> AsyncGenerator[Dict[str, Any], None]:
        """文本生成（流式模式），先逐段 yield message 事件，最后是 message_end"""
        body = self._body(inputs, user, "streaming", files)
        async for event in self._client.stream_events(Route.COMPLETION, body=body):
            yield event
