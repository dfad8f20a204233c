"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 解码流式响应 (streaming)。
- 提供各厂商的具体实现 (deepseek_client、openai_client)。
- 按 (provider, model) 缓存已初始化实例 (registry)。
"""

from aquanet_core.providers.base import BaseProvider, LLMProvider
from aquanet_core.providers.deepseek_client import DeepSeekProvider
from aquanet_core.providers.openai_client import OpenAIProvider
from aquanet_core.providers.registry import PROVIDER_FACTORIES, ProviderRegistry

__all__ = [
    "BaseProvider",
    "DeepSeekProvider",
    "LLMProvider",
    "OpenAIProvider",
    "PROVIDER_FACTORIES",
    "ProviderRegistry",
]
