from __future__ import annotations

from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

from .client import DifyClient
from .routes import MultipartBody, Route


class ChatService:
    def __init__(self, client: DifyClient):
        self._client = client

    @staticmethod
    def _body(
        *,
        query: str,
        user: str,
        response_mode: str,
        conversation_id: Optional[str],
        inputs: Optional[Dict[str, Any]],
        files: Optional[List[dict]],
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "query": query,
            "response_mode": response_mode,
            "user": user,
            "inputs": inputs or {},
        }
        if conversation_id:
            body["conversation_id"] = conversation_id
        if files:
            body["files"] = files
        return body

    async def create_chat_message(
        self,
        *,
        query: str,
        user: str,
        conversation_id: Optional[str] = None,
        inputs: Optional[Dict[str, Any]] = None,
        files: Optional[List[dict]] = None,
    ) -> Dict[str, Any]:
        """发送对话消息（阻塞模式）"""
        body = self._body(
            query=query,
            user=user,
            response_mode="blocking",
            conversation_id=conversation_id,
            inputs=inputs,
            files=files,
        )
        return await self._client.call(Route.CHAT, body=body)

    async def stream_chat_message(
        self,
        *,
        query: str,
        user: str,
        conversation_id: Optional[str] = None,
        inputs: Optional[Dict[str, Any]] = None,
        files: Optional[List[dict]] = None,
    ) -> AsyncGenerator[Dict[str, Any], None]:
        """
        发送对话消息（流式模式），逐个 yield SSE 事件。

        message / agent_message 事件携带增量 answer，
        任一事件中的 task_id 可用于 stop_message 提前终止。
        """
        body = self._body(
            query=query,
            user=user,
            response_mode="streaming",
            conversation_id=conversation_id,
            inputs=inputs,
            files=files,
        )
        async for event in self._client.stream_events(Route.CHAT, body=body):
            yield event

    async def collect_chat_message(
        self,
        *,
        query: str,
        user: str,
        conversation_id: Optional[str] = None,
        inputs: Optional[Dict[str, Any]] = None,
    ) -> Tuple[str, Optional[str]]:
        """
        流式发送对话消息并拼接完整回答

        Returns:
            (answer, conversation_id)，流中出现新的 conversation_id 时以其为准
        """
        answer = ""
        latest_conversation = conversation_id

        async for event in self.stream_chat_message(
            query=query,
            user=user,
            conversation_id=conversation_id,
            inputs=inputs,
        ):
            kind = event.get("event")
            if kind not in ("message", "agent_message", "message_end"):
                continue
            if kind != "message_end" and isinstance(event.get("answer"), str):
                answer += event["answer"]
            if isinstance(event.get("conversation_id"), str):
                latest_conversation = event["conversation_id"]

        return answer, latest_conversation

    async def stop_message(self, *, task_id: str, user: str) -> Dict[str, Any]:
        """停止流式响应"""
        return await self._client.call(
            Route.STOP_CHAT, {"task_id": task_id}, body={"user": user}
        )

    async def get_suggested_questions(self, *, message_id: str, user: str) -> Dict[str, Any]:
        return await self._client.call(
            Route.SUGGESTED, {"message_id": message_id}, params={"user": user}
        )

    async def list_conversations(
        self,
        *,
        user: str,
        last_id: Optional[str] = None,
        limit: int = 20,
        pinned: Optional[bool] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "user": user,
            "last_id": last_id,
            "limit": limit,
            "pinned": pinned,
        }
        return await self._client.call(Route.CONVERSATIONS, params=params)

    async def list_messages(
        self,
        *,
        conversation_id: str,
        user: str,
        first_id: Optional[str] = None,
        limit: int = 20,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "conversation_id": conversation_id,
            "user": user,
            "first_id": first_id,
            "limit": limit,
        }
        return await self._client.call(Route.CONVERSATION_MESSAGES, params=params)

    async def rename_conversation(
        self,
        *,
        conversation_id: str,
        user: str,
        name: Optional[str] = None,
        auto_generate: bool = False,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"user": user, "auto_generate": auto_generate}
        if name:
            body["name"] = name
        return await self._client.call(
            Route.RENAME_CONVERSATION, {"conversation_id": conversation_id}, body=body
        )

    async def delete_conversation(self, *, conversation_id: str, user: str) -> Dict[str, Any]:
        return await self._client.call(
            Route.DELETE_CONVERSATION, {"conversation_id": conversation_id}, body={"user": user}
        )

    async def audio_to_text(
        self,
        *,
        file_bytes: bytes,
        filename: str,
        content_type: str = "audio/mp3",
        user: str,
    ) -> Dict[str, Any]:
        """语音转文字"""
        body = MultipartBody(
            data={"user": user},
            files={"file": (filename, file_bytes, content_type)},
        )
        return await self._client.call(Route.AUDIO_TO_TEXT, body=body)
