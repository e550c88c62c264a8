from typing import Optional


class DifyError(Exception):
    """Dify SDK 调用基础异常"""

    def __init__(
        self,
        message: str,
        code: str = "dify_error",
        status_code: int = 500,
        raw_response: Optional[dict] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.raw_response = raw_response
        super().__init__(self.message)


class DifyConfigError(DifyError):
    """客户端配置错误（如 base_url 为空）"""
    def __init__(self, message: str = "DIFY_BASE_URL 为空"):
        super().__init__(message, code="config_error", status_code=0)


class DifyHTTPError(DifyError):
    """非 2xx 响应，消息中包含请求方法、路径、状态码与状态描述"""

    def __init__(
        self,
        method: str,
        path: str,
        status_code: int,
        reason: str = "",
        body: str = "",
        code: str = "http_error",
        raw_response: Optional[dict] = None,
    ):
        self.method = method
        self.path = path
        self.reason = reason
        self.body = body
        message = f"{method} {path} 失败：{status_code} {reason}\n{body}"
        super().__init__(message, code=code, status_code=status_code, raw_response=raw_response)


class DifyConnectionError(DifyError):
    """网络连接异常"""
    def __init__(self, message: str = "Dify 服务连接失败"):
        super().__init__(message, code="connection_error")


class DifyTimeoutError(DifyError):
    """请求超时"""
    def __init__(self, message: str = "Dify 请求超时", timeout: float = 0):
        self.timeout = timeout
        super().__init__(message, code="timeout")


class DifyWorkflowError(DifyError):
    """Workflow 执行异常（响应体内嵌的业务错误码）"""
    def __init__(self, message: str, code: str = "workflow_error", task_id: str = ""):
        self.task_id = task_id
        super().__init__(message, code=code, status_code=200)


class DifyStreamError(DifyError):
    """SSE 流异常中断"""
    def __init__(self, message: str = "Dify SSE 流异常中断"):
        super().__init__(message, code="stream_error")
