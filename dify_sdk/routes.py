"""
Dify Service API 路由表与请求体类型

每个 Route 成员携带 HTTP 方法和路径模板，进程启动时即固定。
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class Route(Enum):
    # 通用
    FEEDBACK = ("POST", "/messages/{message_id}/feedbacks")
    PARAMETERS = ("GET", "/parameters")
    FILE_UPLOAD = ("POST", "/files/upload")
    TEXT_TO_AUDIO = ("POST", "/text-to-audio")
    META = ("GET", "/meta")

    # 文本生成
    COMPLETION = ("POST", "/completion-messages")

    # 对话
    CHAT = ("POST", "/chat-messages")
    SUGGESTED = ("GET", "/messages/{message_id}/suggested")
    STOP_CHAT = ("POST", "/chat-messages/{task_id}/stop")
    CONVERSATIONS = ("GET", "/conversations")
    CONVERSATION_MESSAGES = ("GET", "/messages")
    RENAME_CONVERSATION = ("POST", "/conversations/{conversation_id}/name")
    DELETE_CONVERSATION = ("DELETE", "/conversations/{conversation_id}")
    AUDIO_TO_TEXT = ("POST", "/audio-to-text")

    # 工作流
    WORKFLOW_INFO = ("GET", "/info")
    RUN_WORKFLOW = ("POST", "/workflows/run")
    STOP_WORKFLOW = ("POST", "/workflows/{task_id}/stop")
    WORKFLOW_RESULT = ("GET", "/workflows/run/{task_id}")

    def __init__(self, method: str, template: str):
        self.method = method
        self.template = template

    def path(self, **params: Any) -> str:
        """渲染路径模板，缺少占位参数时抛出 KeyError"""
        return self.template.format(**params)


@dataclass(frozen=True)
class JsonBody:
    """JSON 请求体，以 application/json 发送"""
    data: Any = None


@dataclass(frozen=True)
class MultipartBody:
    """multipart/form-data 请求体，Content-Type 及 boundary 交由 httpx 生成"""
    data: Dict[str, Any] = field(default_factory=dict)
    files: Optional[Dict[str, Any]] = None


RequestBody = Union[JsonBody, MultipartBody]
