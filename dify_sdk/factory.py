"""
Dify服务工厂
用于创建和管理Dify服务实例
"""
import logging
from typing import Optional

from .app import AppService
from .chat import ChatService
from .client import DifyClient
from .completion import CompletionService
from .config import load_settings
from .exceptions import DifyConfigError
from .workflow import WorkflowService


class DifyServiceFactory:
    """Dify服务工厂类，所有服务共用同一个 DifyClient"""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 120,
        stream_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
        user: Optional[str] = None,
    ):
        """
        初始化Dify服务工厂

        Args:
            api_key: 应用 API Key
            base_url: Dify API基础URL
            timeout: 请求超时时间(秒)
            stream_timeout: SSE 兜底超时(秒)，None 表示只以流结束为准
            logger: 注入的日志器
            user: 工作流默认的终端用户标识
        """
        self._client = DifyClient(api_key, base_url, timeout=timeout, logger=logger)
        self._stream_timeout = stream_timeout
        self._user = user
        self._app_service: Optional[AppService] = None
        self._completion_service: Optional[CompletionService] = None
        self._chat_service: Optional[ChatService] = None
        self._workflow_service: Optional[WorkflowService] = None

    @property
    def client(self) -> DifyClient:
        return self._client

    @property
    def app(self) -> AppService:
        """获取通用接口服务实例"""
        if self._app_service is None:
            self._app_service = AppService(self._client)
        return self._app_service

    @property
    def completion(self) -> CompletionService:
        """获取文本生成服务实例"""
        if self._completion_service is None:
            self._completion_service = CompletionService(self._client)
        return self._completion_service

    @property
    def chat(self) -> ChatService:
        """获取聊天服务实例"""
        if self._chat_service is None:
            self._chat_service = ChatService(self._client)
        return self._chat_service

    @property
    def workflow(self) -> WorkflowService:
        """获取工作流服务实例"""
        if self._workflow_service is None:
            self._workflow_service = WorkflowService(
                self._client, stream_timeout=self._stream_timeout, user=self._user
            )
        return self._workflow_service

    async def aclose(self) -> None:
        await self._client.aclose()


def create_dify_service(
    base_url: str = "",
    api_key: str = "",
    timeout: Optional[float] = None,
    stream_timeout: Optional[float] = None,
    logger: Optional[logging.Logger] = None,
    user: str = "",
) -> DifyServiceFactory:
    """
    创建Dify服务工厂实例

    Args:
        base_url: Dify API基础URL（留空则从 DIFY_BASE_URL 读取）
        api_key: 应用 API Key（留空则从 DIFY_API_KEY 读取）
        timeout: 请求超时时间(秒)（留空则从 DIFY_TIMEOUT 读取）
        stream_timeout: SSE 兜底超时(秒)（留空则从 DIFY_STREAM_TIMEOUT 读取）
        user: 默认终端用户标识（留空则从 DIFY_USER 读取）

    Returns:
        DifyServiceFactory实例
    """
    settings = load_settings()
    url = base_url or settings.DIFY_BASE_URL
    if not url:
        raise DifyConfigError(
            "Dify base_url 未配置！请设置环境变量 DIFY_BASE_URL 或传入 base_url 参数"
        )
    return DifyServiceFactory(
        api_key=api_key or settings.DIFY_API_KEY,
        base_url=url,
        timeout=timeout if timeout is not None else settings.DIFY_TIMEOUT,
        stream_timeout=stream_timeout if stream_timeout is not None else settings.DIFY_STREAM_TIMEOUT,
        logger=logger,
        user=user or settings.DIFY_USER,
    )
