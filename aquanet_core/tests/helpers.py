"""测试共用的假响应与 MockTransport 工具。"""

import json

import httpx

from aquanet_core.providers.deepseek_client import DeepSeekProvider
from aquanet_core.providers.registry import ProviderRegistry


def sse_body(*payloads, done=True) -> bytes:
    """把若干 JSON 对象或原始字符串拼成 SSE 响应体。"""

    lines = []
    for p in payloads:
        data = p if isinstance(p, str) else json.dumps(p)
        lines.append(f"data: {data}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def delta(text, finish_reason=None):
    return {"id": "c1", "choices": [{"index": 0, "delta": {"content": text}, "finish_reason": finish_reason}]}


def completion(text="ok"):
    return {
        "id": "resp-1",
        "model": "deepseek-chat",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 3, "completion_tokens": 1, "total_tokens": 4},
    }


class TrackingStream(httpx.AsyncByteStream):
    """按给定分块产出响应体，并记录是否被关闭。"""

    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.closed = False

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk

    async def aclose(self):
        self.closed = True


class RecordingHandler:
    """MockTransport 的 handler，记录请求体并返回预设响应。"""

    def __init__(self, respond):
        self._respond = respond
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def last_payload(self):
        return json.loads(self.requests[-1].content)


def mock_registry(handler) -> ProviderRegistry:
    transport = httpx.MockTransport(handler)
    return ProviderRegistry(factories={"deepseek": lambda: DeepSeekProvider(transport=transport)})
