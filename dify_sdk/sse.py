"""
SSE 流重组

把字节流按 `\\n` 切成行，过滤心跳/注释行，解析 `data:` 负载为 JSON 事件，
并记录事件中出现的 workflow_run_id。读取只在底层流结束时停止，
`data: [DONE]` 不会提前结束读取。
"""
import codecs
import json
import logging
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, List, Optional


class EventKind(str, Enum):
    """事件分类，仅用于日志/进度观测，不影响控制流"""
    ERROR = "error"
    STARTED = "started"
    PROGRESS = "progress"
    FINISHED = "finished"
    OTHER = "other"


EventObserver = Callable[[Dict[str, Any], EventKind], None]

DONE_SENTINEL = "[DONE]"

_STARTED_EVENTS = {"workflow_started", "tts_message"}
_PROGRESS_EVENTS = {"node_started", "node_finished"}
_FINISHED_EVENTS = {"workflow_finished", "tts_message_end"}


def classify_event(event: Dict[str, Any]) -> EventKind:
    name = event.get("event")
    if not name or name == "error" or event.get("status") == 400:
        return EventKind.ERROR
    if name in _STARTED_EVENTS:
        return EventKind.STARTED
    if name in _PROGRESS_EVENTS:
        return EventKind.PROGRESS
    if name in _FINISHED_EVENTS:
        return EventKind.FINISHED
    return EventKind.OTHER


class SSEReassembler:
    """
    增量解析 text/event-stream。

    每次调用（每个请求）使用独立实例：缓冲区、解码器状态和 run_id 都属于实例本身。

    Args:
        logger: 进度与诊断日志输出
        on_event: 每个成功解析的事件都会以 (event, kind) 回调一次
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        on_event: Optional[EventObserver] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self._on_event = on_event
        # 多字节字符可能被拆在两个 chunk 里，必须使用增量解码器
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.run_id = ""
        self.done = False

    def feed(self, chunk: bytes) -> List[Dict[str, Any]]:
        """处理一个 chunk，返回其中完整行解析出的事件"""
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")

        events = []
        for line in lines:
            event = self._handle_line(line.rstrip())
            if event is not None:
                events.append(event)
        return events

    def finish(self) -> None:
        """底层流结束：冲刷解码器，丢弃没有换行结尾的残行"""
        self._buffer += self._decoder.decode(b"", final=True)
        if self._buffer.strip():
            self.logger.debug("流结束时丢弃未完成的行: %s", self._buffer[:200])
        self._buffer = ""
        self.done = True

    async def consume(self, chunks: AsyncIterator[bytes]) -> str:
        """读到流结束为止，返回捕获到的 run_id（可能为空串）"""
        async for chunk in chunks:
            self.feed(chunk)
        self.finish()
        return self.run_id

    def _handle_line(self, line: str) -> Optional[Dict[str, Any]]:
        if not line or line.startswith(":"):
            return None
        if not line.startswith("data:"):
            return None

        payload = line[5:].strip()
        if payload == DONE_SENTINEL:
            # 等底层流真正结束再停止读取
            return None

        try:
            event = json.loads(payload)
        except ValueError:
            self.logger.debug("忽略非 JSON 的 SSE 数据: %s", payload[:200])
            return None
        if not isinstance(event, dict):
            return None

        run_id = event.get("workflow_run_id")
        if run_id:
            self.run_id = str(run_id)

        kind = classify_event(event)
        self._report(event, kind)
        return event

    def _report(self, event: Dict[str, Any], kind: EventKind) -> None:
        if kind is EventKind.ERROR:
            self.logger.warning(
                "工作流输出错误 code=%s message=%s", event.get("code"), event.get("message")
            )
        elif kind is EventKind.STARTED:
            self.logger.info("工作流开始执行")
        elif kind is EventKind.PROGRESS:
            self.logger.info("工作流节点执行中: %s", event.get("event"))
        elif kind is EventKind.FINISHED:
            self.logger.info("工作流执行完毕，正在获取最终结果")

        if self._on_event is not None:
            self._on_event(event, kind)


async def iter_events(
    chunks: AsyncIterator[bytes],
    reassembler: Optional[SSEReassembler] = None,
) -> AsyncIterator[Dict[str, Any]]:
    """逐个 yield 解析出的事件，流结束后 reassembler 进入 done 状态"""
    reassembler = reassembler or SSEReassembler()
    async for chunk in chunks:
        for event in reassembler.feed(chunk):
            yield event
    reassembler.finish()
