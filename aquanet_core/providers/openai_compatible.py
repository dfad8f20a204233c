"""OpenAI 兼容协议的 Provider 适配器。

DeepSeek、OpenAI 等厂商均使用 chat/completions 端点：
- URL: {base_url}/chat/completions
- 认证: Authorization: Bearer <api_key>

本模块负责：
1. 将 ChatRequest 转换为请求 JSON 并通过 httpx 发送。
2. 把网络失败、非 2xx 状态统一包装为 TransportError 子类，
   上游 body 里带 error 描述时优先使用它。
3. 将响应 JSON（或 SSE 分片）解析为 ChatResult / ChatStreamChunk。
"""

import json
import logging
import time
from abc import abstractmethod
from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from aquanet_core.config.settings import settings
from aquanet_core.domain.exceptions import ApiError, NetworkError, RateLimitError
from aquanet_core.domain.models import (
    ROLES,
    ChatChoice,
    ChatMessage,
    ChatRequest,
    ChatResult,
    ChatStreamChoice,
    ChatStreamChunk,
    ChatUsage,
)
from aquanet_core.infrastructure.logging.logger import log_event
from aquanet_core.providers.base import BaseProvider
from aquanet_core.providers.streaming import iter_sse_payloads


def upstream_error_detail(resp: httpx.Response) -> Optional[str]:
    """从错误响应 body 中提取上游的 error 描述，没有时返回 None。"""

    try:
        data = resp.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("message") or json.dumps(error, ensure_ascii=False)
    if error:
        return str(error)
    return None


class OpenAICompatibleProvider(BaseProvider):
    """chat/completions 协议的通用实现，子类只需给出 name 与默认 base_url。"""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        super().__init__()
        # 测试中注入 httpx.MockTransport
        self._transport = transport

    @property
    @abstractmethod
    def default_base_url(self) -> str:
        """未配置 base_url 时使用的厂商默认地址。"""

    # ---- 非流式 ----

    async def chat(self, req: ChatRequest) -> ChatResult:
        self.check_initialized()
        payload = self.build_request_body(req, stream=False)
        log_ctx = self._log_ctx(stream=False)
        start = time.monotonic()
        try:
            async with self._client() as client:
                resp = await client.post(self._endpoint(), json=payload, headers=self.build_headers())
        except httpx.RequestError as e:
            raise self._network_error(e) from e
        self._raise_for_status(resp)
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(
                code="API_ERROR",
                message="API request failed: response is not valid JSON",
                http_status=resp.status_code,
                provider=self.name,
            ) from e
        if not isinstance(data, dict):
            raise ApiError(
                code="API_ERROR",
                message="API request failed: response is not a JSON object",
                http_status=resp.status_code,
                provider=self.name,
            )
        log_event(logging.INFO, "Chat completed", log_ctx, duration_ms=int((time.monotonic() - start) * 1000))
        return self._parse_response(data)

    # ---- 流式 ----

    async def chat_stream(self, req: ChatRequest) -> AsyncIterator[ChatStreamChunk]:
        self.check_initialized()
        payload = self.build_request_body(req, stream=True)
        log_ctx = self._log_ctx(stream=True)
        start = time.monotonic()
        try:
            async with self._client() as client:
                async with client.stream(
                    "POST",
                    self._endpoint(),
                    json=payload,
                    headers=self.build_headers(),
                ) as resp:
                    if resp.status_code >= 400:
                        await resp.aread()
                        self._raise_for_status(resp)
                    async with aclosing(iter_sse_payloads(resp.aiter_lines(), log_ctx)) as payloads:
                        async for data in payloads:
                            yield self._parse_stream_chunk(data)
        except httpx.RequestError as e:
            raise self._network_error(e) from e
        log_event(logging.INFO, "Stream completed", log_ctx, duration_ms=int((time.monotonic() - start) * 1000))

    # ---- 辅助方法 ----

    def _client(self) -> httpx.AsyncClient:
        timeout = self.config.timeout or settings.http_timeout
        return httpx.AsyncClient(timeout=timeout, trust_env=False, transport=self._transport)

    def _endpoint(self) -> str:
        base = self.config.base_url or self.default_base_url
        return f"{base.rstrip('/')}/chat/completions"

    def _log_ctx(self, stream: bool) -> Dict[str, Any]:
        return {"provider": self.name, "model": self.config.model, "stream": stream}

    def _network_error(self, e: httpx.RequestError) -> NetworkError:
        detail = str(e) or type(e).__name__
        return NetworkError(code="NETWORK_ERROR", message=f"Request failed: {detail}", provider=self.name)

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return
        detail = upstream_error_detail(resp) or f"HTTP error! status: {resp.status_code}"
        message = f"API request failed: {detail}"
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message=message, http_status=429, provider=self.name)
        raise ApiError(code="API_ERROR", message=message, http_status=resp.status_code, provider=self.name)

    @staticmethod
    def _build_chat_message(payload: Dict[str, Any], default_role: str = "assistant") -> ChatMessage:
        role = payload.get("role")
        return ChatMessage(
            role=role if role in ROLES else default_role,
            content=payload.get("content") or "",
        )

    def _parse_response(self, data: Dict[str, Any]) -> ChatResult:
        choices = []
        for i, ch in enumerate(data.get("choices") or []):
            msg = ch.get("message") or {}
            choices.append(
                ChatChoice(
                    index=ch.get("index", i),
                    message=self._build_chat_message(msg),
                    finish_reason=ch.get("finish_reason"),
                )
            )
        return ChatResult(
            id=data.get("id") or "",
            provider=self.name,
            model=data.get("model") or self.config.model,
            choices=choices,
            usage=ChatUsage.from_payload(data.get("usage")),
            raw=data,
        )

    def _parse_stream_chunk(self, data: Dict[str, Any]) -> ChatStreamChunk:
        choices = []
        raw_choices = data.get("choices")
        for i, ch in enumerate(raw_choices if isinstance(raw_choices, list) else []):
            if not isinstance(ch, dict):
                continue
            delta = ch.get("delta")
            choices.append(
                ChatStreamChoice(
                    index=ch.get("index", i),
                    delta=self._build_chat_message(delta if isinstance(delta, dict) else {}),
                    finish_reason=ch.get("finish_reason"),
                )
            )
        usage_raw = data.get("usage")
        return ChatStreamChunk(
            id=data.get("id") or "",
            provider=self.name,
            model=data.get("model") or self.config.model,
            choices=choices,
            usage=ChatUsage.from_payload(usage_raw) if usage_raw else None,
            raw=data,
        )
