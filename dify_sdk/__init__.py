"""
Dify Service API 客户端

提供 Dify 平台的 Python 异步客户端封装，包括：
- 通用接口（反馈、参数、文件上传、文字转语音、Meta）
- Completion API（文本生成）
- Chat API（对话、会话管理、语音转文字）
- Workflow API（工作流执行，SSE 流式读取后回查最终结果）
"""

from .app import AppService
from .chat import ChatService
from .client import DifyClient
from .completion import CompletionService
from .config import DifySettings, load_settings
from .exceptions import (
    DifyError,
    DifyConfigError,
    DifyHTTPError,
    DifyConnectionError,
    DifyTimeoutError,
    DifyStreamError,
    DifyWorkflowError,
)
from .factory import DifyServiceFactory, create_dify_service
from .routes import JsonBody, MultipartBody, Route
from .sse import EventKind, SSEReassembler, classify_event, iter_events
from .workflow import WorkflowResult, WorkflowService, parse_outputs

__all__ = [
    "AppService",
    "ChatService",
    "CompletionService",
    "DifyClient",
    "DifySettings",
    "load_settings",
    "DifyError",
    "DifyConfigError",
    "DifyHTTPError",
    "DifyConnectionError",
    "DifyTimeoutError",
    "DifyStreamError",
    "DifyWorkflowError",
    "DifyServiceFactory",
    "create_dify_service",
    "JsonBody",
    "MultipartBody",
    "Route",
    "EventKind",
    "SSEReassembler",
    "classify_event",
    "iter_events",
    "WorkflowResult",
    "WorkflowService",
    "parse_outputs",
]
