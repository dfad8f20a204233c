"""Aquanet Core 顶层包。

为远程 LLM 聊天 API 提供养殖顾问场景的封装：
配置校验、system prompt 与任务提示词拼装、流式/非流式响应统一，
以及按 (provider, model) 复用已初始化 Provider 的注册表。
"""

from aquanet_core.bot import AquanetBot
from aquanet_core.config.schema import BotConfig, validate_config
from aquanet_core.domain.aquaculture import AquacultureData, TaskType
from aquanet_core.providers.registry import ProviderRegistry
from aquanet_core.services.aquaculture import AquacultureService

__all__ = [
    "AquacultureData",
    "AquacultureService",
    "AquanetBot",
    "BotConfig",
    "ProviderRegistry",
    "TaskType",
    "validate_config",
]
