"""流式响应解码与拼接。

上游以 SSE 风格返回：每行一个分片，形如 ``data: {...}``，
以 ``data: [DONE]`` 结束（或直接结束连接）。

- iter_sse_payloads: 行 → JSON 对象。无 data: 前缀的行、空行直接丢弃；
  遇到 [DONE] 立即结束；JSON 解析失败的分片记录告警后跳过，不中断整个流。
- iter_text_deltas: 分片 → 非空的增量文本，按到达顺序同步回调 on_chunk。
- accumulate_deltas: 把全部增量拼成完整字符串，无论成功与否都会关闭上游迭代器。
"""

import json
import logging
import warnings
from typing import Any, AsyncIterable, AsyncIterator, Callable, Dict, Optional

from aquanet_core.domain.exceptions import StreamDecodeWarning
from aquanet_core.domain.models import ChatStreamChunk
from aquanet_core.infrastructure.logging.logger import log_event


DATA_MARKER = "data:"
DONE_SENTINEL = "[DONE]"

ChunkCallback = Callable[[str], Any]


def _skip_segment(segment: str, reason: str, log_ctx: Optional[Dict[str, Any]]) -> None:
    warnings.warn(f"Failed to parse stream chunk ({reason}): {segment[:200]}", StreamDecodeWarning, stacklevel=3)
    log_event(logging.WARNING, "Failed to parse stream chunk", log_ctx or {}, reason=reason, segment=segment[:200])


async def iter_sse_payloads(
    lines: AsyncIterable[str],
    log_ctx: Optional[Dict[str, Any]] = None,
) -> AsyncIterator[Dict[str, Any]]:
    """逐行解码 SSE 文本，产出每个分片的 JSON 对象。"""

    async for item in lines:
        for raw in item.splitlines():
            line = raw.strip()
            if not line.startswith(DATA_MARKER):
                continue
            data_str = line[len(DATA_MARKER):].strip()
            if not data_str:
                continue
            if data_str == DONE_SENTINEL:
                return
            try:
                payload = json.loads(data_str)
            except json.JSONDecodeError as exc:
                _skip_segment(data_str, str(exc), log_ctx)
                continue
            if not isinstance(payload, dict):
                _skip_segment(data_str, "payload is not an object", log_ctx)
                continue
            yield payload


async def iter_text_deltas(
    chunks: AsyncIterable[ChatStreamChunk],
    on_chunk: Optional[ChunkCallback] = None,
) -> AsyncIterator[str]:
    async for chunk in chunks:
        text = chunk.delta_text
        if not text:
            continue
        if on_chunk is not None:
            on_chunk(text)
        yield text


async def _aclose(iterable: Any) -> None:
    close = getattr(iterable, "aclose", None)
    if close is not None:
        await close()


async def accumulate_deltas(
    chunks: AsyncIterable[ChatStreamChunk],
    on_chunk: Optional[ChunkCallback] = None,
) -> str:
    """拼接全部增量文本。

    中途出错时异常原样抛出，已累积的部分内容随之丢弃。
    """

    parts = []
    deltas = iter_text_deltas(chunks, on_chunk)
    try:
        async for text in deltas:
            parts.append(text)
    finally:
        await _aclose(deltas)
        await _aclose(chunks)
    return "".join(parts)
