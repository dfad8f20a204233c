"""Provider 注册表。

按 (provider, model) 缓存已初始化的 Provider 实例：

- get_or_create(config): 同一键只创建并初始化一次；并发请求同一个未初始化的键时，
  由该键的 asyncio.Lock 串行化“检查-创建”过程，不会出现两个实例。
  不同键之间互不阻塞。命中缓存时，若请求的凭证、base_url 或超时与缓存实例
  不一致，抛出 ConfigurationError，而不是悄悄复用别人的凭证。
- remove(config) / clear(): 显式淘汰，条目不会自动过期。

注册表是普通对象，由调用方持有并决定生命周期（Bot、Service 可以共享同一个）。
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from aquanet_core.domain.exceptions import ConfigurationError, UnsupportedOperationError
from aquanet_core.domain.llm import ProviderConfig
from aquanet_core.infrastructure.logging.logger import log_event
from aquanet_core.providers.base import LLMProvider
from aquanet_core.providers.deepseek_client import DeepSeekProvider
from aquanet_core.providers.openai_client import OpenAIProvider


ProviderFactory = Callable[[], LLMProvider]
ProviderKey = Tuple[str, str]

# provider 名 → 构造函数；新增厂商在这里登记
PROVIDER_FACTORIES: Mapping[str, ProviderFactory] = {
    "deepseek": DeepSeekProvider,
    "openai": OpenAIProvider,
}

# 同一缓存键下必须一致的连接参数
_CONNECTION_FIELDS = ("api_key", "base_url", "timeout")


class ProviderRegistry:
    def __init__(self, factories: Optional[Mapping[str, ProviderFactory]] = None) -> None:
        self._factories: Dict[str, ProviderFactory] = dict(PROVIDER_FACTORIES if factories is None else factories)
        self._providers: Dict[ProviderKey, LLMProvider] = {}
        self._configs: Dict[ProviderKey, ProviderConfig] = {}
        self._locks: Dict[ProviderKey, asyncio.Lock] = {}

    def is_supported(self, name: str) -> bool:
        return name in self._factories

    def create_provider(self, name: str) -> LLMProvider:
        """创建一个未初始化的 Provider 实例。"""

        factory = self._factories.get(name)
        if factory is None:
            raise UnsupportedOperationError(
                code="UNSUPPORTED_PROVIDER",
                message=f"Unsupported LLM provider: {name}",
            )
        return factory()

    def _check_compatible(self, cfg: ProviderConfig) -> None:
        cached = self._configs[cfg.key]
        conflicts = [name for name in _CONNECTION_FIELDS if getattr(cached, name) != getattr(cfg, name)]
        if conflicts:
            raise ConfigurationError(
                f"Provider {cfg.provider}/{cfg.model} is already registered with different settings: "
                + ", ".join(conflicts),
                code="CONFLICTING_PROVIDER_CONFIG",
                fields=tuple(conflicts),
            )

    async def get_or_create(self, config: Union[ProviderConfig, Mapping[str, Any]]) -> LLMProvider:
        cfg = ProviderConfig.parse(config)
        key = cfg.key
        provider = self._providers.get(key)
        if provider is not None:
            self._check_compatible(cfg)
            return provider

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            provider = self._providers.get(key)
            if provider is None:
                provider = self.create_provider(cfg.provider)
                await provider.initialize(cfg)
                self._providers[key] = provider
                self._configs[key] = cfg
                log_event(logging.INFO, "Provider cached", {"provider": cfg.provider, "model": cfg.model})
            else:
                self._check_compatible(cfg)
        return provider

    def remove(self, config: Union[ProviderConfig, Mapping[str, Any]]) -> bool:
        """淘汰一个条目，返回该键此前是否存在。"""

        key = ProviderConfig.parse(config).key
        removed = self._providers.pop(key, None) is not None
        self._configs.pop(key, None)
        lock = self._locks.get(key)
        if lock is not None and not lock.locked():
            del self._locks[key]
        if removed:
            log_event(logging.INFO, "Provider evicted", {"provider": key[0], "model": key[1]})
        return removed

    def clear(self) -> None:
        self._providers.clear()
        self._configs.clear()
        # 正在初始化的键保留其锁
        for key in [k for k, lock in self._locks.items() if not lock.locked()]:
            del self._locks[key]

    def __contains__(self, key: object) -> bool:
        return key in self._providers

    def __len__(self) -> int:
        return len(self._providers)
