"""
Pytest 配置文件
提供测试fixtures和配置
"""
import sys
import os
from pathlib import Path

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import httpx
import pytest
from dotenv import load_dotenv

from dify_sdk import DifyClient

# 加载环境变量
load_dotenv()


@pytest.fixture
def mock_api_key():
    """Mock API Key"""
    return "app-test-key"


@pytest.fixture
def test_base_url():
    """测试基础URL"""
    return "http://test-dify.local/v1"


@pytest.fixture
def make_client(mock_api_key, test_base_url):
    """用 httpx.MockTransport 创建客户端，handler 接收 httpx.Request 返回 httpx.Response"""
    def _create_client(handler, **kwargs):
        return DifyClient(
            mock_api_key,
            test_base_url,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
    return _create_client


@pytest.fixture
def sse_stream():
    """把若干 chunk 包装成异步字节流，用作 SSE 响应体"""
    def _create_stream(chunks):
        async def _generator():
            for chunk in chunks:
                yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk
        return _generator()
    return _create_stream


@pytest.fixture
def sample_workflow_events():
    """示例工作流 SSE 事件（按行）"""
    return [
        ": ping\n",
        'data: {"event": "workflow_started", "task_id": "task-1", "workflow_run_id": "run-1"}\n\n',
        'data: {"event": "node_started", "task_id": "task-1", "workflow_run_id": "run-1"}\n\n',
        'data: {"event": "node_finished", "task_id": "task-1", "workflow_run_id": "run-1"}\n\n',
        'data: {"event": "workflow_finished", "task_id": "task-1", "workflow_run_id": "run-1"}\n\n',
        "data: [DONE]\n\n",
    ]


@pytest.fixture
def sample_workflow_response():
    """示例工作流阻塞响应"""
    return {
        "workflow_run_id": "wfr-d290f1ee-6c54",
        "task_id": "task-a8c6c36f-9f5d",
        "data": {
            "id": "wfr-d290f1ee-6c54",
            "workflow_id": "wf-123",
            "status": "succeeded",
            "outputs": {
                "text": "关于加强数据安全管理的通知...",
            },
            "error": None,
            "elapsed_time": 12.5,
            "total_tokens": 1500,
            "total_steps": 3,
            "created_at": 1695636173,
            "finished_at": 1695636185
        }
    }


@pytest.fixture
def real_settings():
    """真实配置 (用于集成测试)"""
    return {
        "base_url": os.getenv("DIFY_BASE_URL", "https://api.dify.ai/v1"),
        "api_key": os.getenv("DIFY_API_KEY"),
    }


def pytest_configure(config):
    """Pytest配置"""
    config.addinivalue_line(
        "markers", "integration: 标记为集成测试 (需要真实API Key)"
    )
    config.addinivalue_line(
        "markers", "unit: 标记为单元测试 (使用Mock)"
    )
