from __future__ import annotations

from typing import Any, Dict, Literal, Optional

import httpx

from .client import DifyClient
from .routes import MultipartBody, Route

Rating = Optional[Literal["like", "dislike"]]


class AppService:
    """各类应用（文本生成 / 对话 / 工作流）通用的接口"""

    def __init__(self, client: DifyClient):
        self._client = client

    async def message_feedback(
        self,
        *,
        message_id: str,
        rating: Rating,
        user: str,
        content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """消息反馈（点赞/点踩），rating 为 None 表示撤销"""
        body: Dict[str, Any] = {"rating": rating, "user": user}
        if content:
            body["content"] = content
        return await self._client.call(Route.FEEDBACK, {"message_id": message_id}, body=body)

    async def get_parameters(self, *, user: str) -> Dict[str, Any]:
        """获取应用参数：功能开关、输入参数名称、类型及默认值"""
        return await self._client.call(Route.PARAMETERS, params={"user": user})

    async def get_meta(self, *, user: str) -> Dict[str, Any]:
        """获取应用 Meta 信息（工具图标等）"""
        return await self._client.call(Route.META, params={"user": user})

    async def upload_file(
        self,
        *,
        file_bytes: bytes,
        filename: str,
        content_type: str = "application/octet-stream",
        user: str,
    ) -> Dict[str, Any]:
        """上传文件，供发送消息 / 运行工作流时引用（返回值中的 id 即 upload_file_id）"""
        body = MultipartBody(
            data={"user": user},
            files={"file": (filename, file_bytes, content_type)},
        )
        return await self._client.call(Route.FILE_UPLOAD, body=body)

    async def text_to_audio(
        self,
        *,
        user: str,
        text: Optional[str] = None,
        message_id: Optional[str] = None,
        streaming: bool = False,
    ) -> httpx.Response:
        """
        文字转语音。

        返回的是音频流响应，调用方读取后需自行关闭：
            resp = await app.text_to_audio(text="你好", user="u1")
            audio = await resp.aread()
            await resp.aclose()
        """
        body: Dict[str, Any] = {"user": user, "streaming": streaming}
        if text is not None:
            body["text"] = text
        if message_id is not None:
            body["message_id"] = message_id
        return await self._client.call(Route.TEXT_TO_AUDIO, body=body, stream=True)
