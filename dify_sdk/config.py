"""
Dify SDK 配置

加载优先级（高 → 低）：
  1. 系统环境变量
  2. 当前工作目录下的 .env 文件
  3. 下方 DifySettings 中的默认值
"""

import logging
from typing import Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class DifySettings(BaseSettings):
    DIFY_BASE_URL: str = "https://api.dify.ai/v1"
    DIFY_API_KEY: str = ""
    DIFY_TIMEOUT: float = 120
    # SSE 兜底超时，未设置时只以流结束作为读取终点
    DIFY_STREAM_TIMEOUT: Optional[float] = None
    DIFY_USER: str = "dify-schedule"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


def _mask(val: str, show: int = 10) -> str:
    """对敏感值脱敏"""
    if not val:
        return "(未设置)"
    return val[:show] + "***" if len(val) > show else val


def load_settings() -> DifySettings:
    settings = DifySettings()
    logger.debug(
        "Dify 配置加载完毕  DIFY_BASE_URL=%s  DIFY_API_KEY=%s",
        settings.DIFY_BASE_URL or "(未设置)",
        _mask(settings.DIFY_API_KEY),
    )
    return settings
