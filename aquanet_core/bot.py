"""AquanetBot：对外的聊天入口。

构造时完成全部配置校验（失败即抛 ConfigurationError，不会发起任何网络请求），
并根据领域配置生成默认 system prompt。

- chat(messages, system_prompt=None):
  非流式模式返回上游的 ChatResult；流式模式逐片回调 on_stream，
  最终返回拼接好的完整文本。
- chat_stream(messages, system_prompt=None): 拉取式接口，按到达顺序产出增量文本。
- query(prompt): 单条用户消息的便捷封装，直接返回文本。
"""

import logging
from typing import Any, AsyncIterator, Mapping, Optional, Sequence, Union

from aquanet_core.config.schema import BotConfig, validate_config
from aquanet_core.domain.exceptions import BusinessError, UnsupportedOperationError
from aquanet_core.domain.models import ChatMessage, ChatRequest, ChatResult, MessageLike, coerce_message
from aquanet_core.infrastructure.logging.logger import log_event
from aquanet_core.prompts import build_system_prompt
from aquanet_core.providers.base import LLMProvider
from aquanet_core.providers.registry import ProviderRegistry
from aquanet_core.providers.streaming import accumulate_deltas, iter_text_deltas


class AquanetBot:
    def __init__(
        self,
        config: Union[BotConfig, Mapping[str, Any]],
        registry: Optional[ProviderRegistry] = None,
    ) -> None:
        self._config = validate_config(config)
        self._registry = registry if registry is not None else ProviderRegistry()
        if not self._registry.is_supported(self._config.provider):
            raise UnsupportedOperationError(
                code="UNSUPPORTED_PROVIDER",
                message=f"Unsupported LLM provider: {self._config.provider}",
            )
        self._provider_config = self._config.provider_config()
        self._system_prompt = build_system_prompt(self._config)

    @property
    def config(self) -> BotConfig:
        return self._config

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def build_request(self, messages: Sequence[MessageLike], system_prompt: Optional[str] = None) -> ChatRequest:
        """system prompt（调用方覆盖优先）在前，其后是调用方的消息。"""

        return ChatRequest(
            messages=[
                ChatMessage(role="system", content=system_prompt or self._system_prompt),
                *(coerce_message(m) for m in messages),
            ],
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

    async def _provider(self) -> LLMProvider:
        return await self._registry.get_or_create(self._provider_config)

    async def chat(
        self,
        messages: Sequence[MessageLike],
        system_prompt: Optional[str] = None,
    ) -> Union[ChatResult, str]:
        req = self.build_request(messages, system_prompt)
        log_ctx = {"provider": self._config.provider, "model": self._config.model}
        try:
            provider = await self._provider()
            if self._config.is_streaming:
                return await accumulate_deltas(provider.chat_stream(req), self._config.on_stream)
            return await provider.chat(req)
        except BusinessError as e:
            log_event(logging.ERROR, f"Chat failed: {e}", log_ctx, code=e.code)
            raise

    async def chat_stream(
        self,
        messages: Sequence[MessageLike],
        system_prompt: Optional[str] = None,
    ) -> AsyncIterator[str]:
        req = self.build_request(messages, system_prompt)
        provider = await self._provider()
        chunks = provider.chat_stream(req)
        try:
            async for text in iter_text_deltas(chunks, self._config.on_stream):
                yield text
        finally:
            await chunks.aclose()

    async def query(self, prompt: str) -> str:
        response = await self.chat([ChatMessage(role="user", content=prompt)])
        if isinstance(response, str):
            return response
        return response.content
