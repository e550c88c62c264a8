from __future__ import annotations

import asyncio
import json
import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import httpx

from .client import DifyClient
from .exceptions import DifyError, DifyWorkflowError
from .routes import Route
from .sse import EventObserver, SSEReassembler

DEFAULT_USER = "dify-schedule"
DEFAULT_WORKFLOW_NAME = "Dify Workflow"


@dataclass
class WorkflowResult:
    """工作流最终结果"""
    text: Any = ""
    task_id: str = ""
    outputs: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "task_id": self.task_id}


def parse_outputs(raw: Any, logger: Optional[logging.Logger] = None) -> Dict[str, Any]:
    """
    规范化 outputs 字段。

    Dify 可能直接返回对象，也可能返回序列化后的 JSON 字符串；
    解析失败只记日志，按字段缺失处理。
    """
    if not raw:
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError as e:
            (logger or logging.getLogger(__name__)).warning(f"获取工作流执行结果, 解析失败: {e}")
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


class WorkflowService:
    def __init__(
        self,
        client: DifyClient,
        *,
        stream_timeout: Optional[float] = None,
        user: Optional[str] = None,
    ):
        self._client = client
        self._stream_timeout = stream_timeout
        # 调用方未传 user 时使用的终端用户标识
        self._user = user or DEFAULT_USER

    @property
    def logger(self) -> logging.Logger:
        return self._client.logger

    async def info(self, user: Optional[str] = None) -> Dict[str, Any]:
        """
        获取应用基本信息。

        有些部署未开放 /info，失败时返回占位名称。
        """
        try:
            resp = await self._client.call(Route.WORKFLOW_INFO, params={"user": user or self._user})
        except DifyError as e:
            self.logger.warning(f"获取工作流信息失败，使用默认名称: {e.message}")
            return {"data": {"name": DEFAULT_WORKFLOW_NAME}}
        if not isinstance(resp, dict):
            resp = {}
        data = resp.get("data") if isinstance(resp.get("data"), dict) else {}
        name = resp.get("name") or data.get("name") or DEFAULT_WORKFLOW_NAME
        return {"data": {"name": name}}

    async def run(
        self,
        inputs: Dict[str, Any],
        user: Optional[str] = None,
        stream: bool = False,
    ) -> Union[Dict[str, Any], httpx.Response]:
        """触发运行；stream=True 时返回未读取的 SSE 响应，调用方负责关闭"""
        body = {
            "inputs": inputs,
            "response_mode": "streaming" if stream else "blocking",
            "user": user or self._user,
        }
        headers = {"Accept": "text/event-stream"} if stream else None
        return await self._client.call(
            Route.RUN_WORKFLOW, body=body, stream=stream, headers=headers
        )

    async def result(self, task_id: str) -> Dict[str, Any]:
        """获取运行结果"""
        return await self._client.call(Route.WORKFLOW_RESULT, {"task_id": task_id})

    async def stop(self, task_id: str, user: Optional[str] = None) -> Dict[str, Any]:
        """停止正在运行的工作流任务"""
        return await self._client.call(
            Route.STOP_WORKFLOW, {"task_id": task_id}, body={"user": user or self._user}
        )

    async def get_workflow_result(
        self,
        inputs: Optional[Dict[str, Any]] = None,
        user: Optional[str] = None,
        stream: bool = True,
        *,
        on_event: Optional[EventObserver] = None,
    ) -> WorkflowResult:
        """
        运行工作流并返回最终结果。

        流式模式下先把 SSE 读到结束、记下 workflow_run_id，
        再用它单独请求一次权威结果；阻塞模式直接解析响应。
        """
        inputs = inputs or {}
        user = user or self._user
        if not stream:
            return await self._run_blocking(inputs, user)

        self.logger.info("进入 Dify 工作流，请耐心等待...")
        reassembler = SSEReassembler(logger=self.logger, on_event=on_event)
        await self._read_stream(inputs, user, reassembler)
        task_id = reassembler.run_id

        data = await self.result(task_id) if task_id else {"outputs": ""}
        self.logger.info(
            "获取工作流执行结果 %s %s", task_id, json.dumps(data.get("outputs"), ensure_ascii=False)
        )
        outputs = parse_outputs(data.get("outputs"), self.logger)
        return WorkflowResult(text=outputs.get("text") or "", task_id=task_id, outputs=outputs)

    async def _run_blocking(self, inputs: Dict[str, Any], user: str) -> WorkflowResult:
        response = await self.run(inputs, user, stream=False)
        if response.get("code"):
            self.logger.error(
                "Dify 工作流执行失败 %s %s", response.get("code"), response.get("message")
            )
            raise DifyWorkflowError(
                str(response.get("message") or ""),
                code=str(response["code"]),
                task_id=response.get("task_id") or "",
            )
        data = response.get("data") if isinstance(response.get("data"), dict) else {}
        outputs = parse_outputs(data.get("outputs"), self.logger)
        return WorkflowResult(
            text=outputs.get("text") or "",
            task_id=response.get("task_id") or "",
            outputs=outputs,
        )

    async def _read_stream(
        self, inputs: Dict[str, Any], user: str, reassembler: SSEReassembler
    ) -> None:
        body = {"inputs": inputs, "response_mode": "streaming", "user": user}

        async def _drain():
            events = self._client.stream_events(
                Route.RUN_WORKFLOW, body=body, reassembler=reassembler
            )
            async with aclosing(events):
                async for _ in events:
                    pass

        if self._stream_timeout is None:
            await _drain()
            return
        try:
            await asyncio.wait_for(_drain(), self._stream_timeout)
        except asyncio.TimeoutError:
            self.logger.warning(
                f"SSE 流 {self._stream_timeout}s 内未结束，停止读取，run_id={reassembler.run_id!r}"
            )
