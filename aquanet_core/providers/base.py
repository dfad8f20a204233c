"""Provider 抽象接口。

上层（AquanetBot、AquacultureService）不直接依赖具体厂商的 HTTP 细节，而是依赖此协议：

- initialize(config): 校验配置并标记可用，只执行一次。
- validate_config(config): 检查凭证、模型 ID、Provider 名是否匹配。
- chat / chat_stream: 多轮消息的非流式 / 流式调用。
- query / stream_query: 单轮问答的便捷接口，基于 chat / chat_stream 实现。

新增厂商只需实现一个新的 BaseProvider 子类，ProviderRegistry 与提示词模块无需改动。
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional, Protocol, Union, cast

from aquanet_core.domain.exceptions import ConfigurationError, UninitializedProviderError
from aquanet_core.domain.llm import LLMInput, LLMMetadata, LLMOutput, LLMStreamChunk, ProviderConfig
from aquanet_core.domain.models import ChatMessage, ChatRequest, ChatResult, ChatStreamChunk
from aquanet_core.infrastructure.logging.logger import log_event
from aquanet_core.providers.streaming import accumulate_deltas


DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000


class LLMProvider(Protocol):
    """LLM Provider 能力协议。"""

    name: str

    async def initialize(self, config: ProviderConfig) -> None:
        ...

    def validate_config(self, config: ProviderConfig) -> bool:
        ...

    async def chat(self, req: ChatRequest) -> ChatResult:
        ...

    def chat_stream(self, req: ChatRequest) -> AsyncIterator[ChatStreamChunk]:
        ...

    async def query(self, llm_input: LLMInput) -> LLMOutput:
        ...

    async def stream_query(self, llm_input: LLMInput, on_chunk: Callable[[LLMStreamChunk], Any]) -> str:
        ...


class BaseProvider(ABC):
    """Provider 公共逻辑：初始化状态、参数合并、单轮问答封装。"""

    name: str = ""

    def __init__(self) -> None:
        self._config: Optional[ProviderConfig] = None
        self._initialized = False

    # ---- 生命周期 ----

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def config(self) -> ProviderConfig:
        self.check_initialized()
        return cast(ProviderConfig, self._config)

    async def initialize(self, config: Union[ProviderConfig, Mapping[str, Any]]) -> None:
        cfg = ProviderConfig.parse(config)
        problems = self.config_problems(cfg)
        if problems:
            code = "MISSING_API_KEY" if not cfg.api_key else "INVALID_CONFIG"
            raise ConfigurationError(
                f"Invalid configuration for provider {self.name!r}: {'; '.join(problems)}",
                code=code,
                fields=("provider", "apiKey", "model"),
            )
        self._config = cfg
        self._initialized = True
        log_event(logging.INFO, "Provider initialized", {"provider": self.name, "model": cfg.model})

    def config_problems(self, config: ProviderConfig) -> List[str]:
        """返回配置中的问题列表，子类可追加厂商特有的检查。"""

        problems = []
        if config.provider != self.name:
            problems.append(f"provider mismatch ({config.provider!r})")
        if not config.api_key:
            problems.append("api key is required")
        if not config.model:
            problems.append("model is required")
        return problems

    def validate_config(self, config: ProviderConfig) -> bool:
        return not self.config_problems(config)

    def check_initialized(self) -> None:
        if not self._initialized:
            raise UninitializedProviderError(
                code="PROVIDER_NOT_INITIALIZED",
                message=f"Provider {self.name!r} not initialized",
            )

    # ---- 请求构造 ----

    def build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def build_request_body(self, req: ChatRequest, stream: bool) -> Dict[str, Any]:
        """默认参数 < 单次调用参数 < extra_params。"""

        cfg = self.config
        params = cfg.default_params.to_payload() if cfg.default_params else {}
        body: Dict[str, Any] = {
            "model": cfg.model,
            "messages": [m.to_payload() for m in req.messages],
        }
        body.update(params)
        body["temperature"] = (
            req.temperature if req.temperature is not None else params.get("temperature", DEFAULT_TEMPERATURE)
        )
        body["max_tokens"] = (
            req.max_tokens if req.max_tokens is not None else params.get("max_tokens", DEFAULT_MAX_TOKENS)
        )
        body["stream"] = stream
        body.update(req.extra_params)
        return body

    @staticmethod
    def validate_input(llm_input: LLMInput) -> None:
        if not llm_input.prompt:
            raise ConfigurationError("Prompt is required", code="INVALID_INPUT", fields=("prompt",))

    @staticmethod
    def _request_from_input(llm_input: LLMInput) -> ChatRequest:
        messages = []
        if llm_input.system_prompt:
            messages.append(ChatMessage(role="system", content=llm_input.system_prompt))
        messages.append(ChatMessage(role="user", content=llm_input.prompt))
        return ChatRequest(
            messages=messages,
            temperature=llm_input.temperature,
            max_tokens=llm_input.max_tokens,
            extra_params=dict(llm_input.extra_params),
        )

    def _metadata(self, result: Optional[ChatResult] = None) -> LLMMetadata:
        return LLMMetadata(
            provider=self.name,
            model=self.config.model,
            usage=result.usage if result is not None else None,
        )

    # ---- 厂商实现 ----

    @abstractmethod
    async def chat(self, req: ChatRequest) -> ChatResult:
        """执行一次非流式调用。"""

    @abstractmethod
    def chat_stream(self, req: ChatRequest) -> AsyncIterator[ChatStreamChunk]:
        """执行一次流式调用，按到达顺序产出分片。"""

    # ---- 单轮问答 ----

    async def query(self, llm_input: LLMInput) -> LLMOutput:
        self.check_initialized()
        self.validate_input(llm_input)
        result = await self.chat(self._request_from_input(llm_input))
        return LLMOutput(content=result.content, metadata=self._metadata(result))

    async def stream_query(self, llm_input: LLMInput, on_chunk: Callable[[LLMStreamChunk], Any]) -> str:
        """流式单轮问答：每个非空增量回调一次，结束时再回调一个 done=True 的空分片。"""

        self.check_initialized()
        self.validate_input(llm_input)
        metadata = self._metadata()

        def forward(text: str) -> None:
            on_chunk(LLMStreamChunk(content=text, done=False, metadata=metadata))

        content = await accumulate_deltas(self.chat_stream(self._request_from_input(llm_input)), forward)
        on_chunk(LLMStreamChunk(content="", done=True, metadata=metadata))
        return content
