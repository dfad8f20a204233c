"""OpenAI Provider，与 DeepSeek 共用 chat/completions 协议。"""

from aquanet_core.config.settings import settings
from aquanet_core.providers.openai_compatible import OpenAICompatibleProvider


class OpenAIProvider(OpenAICompatibleProvider):
    name = "openai"

    @property
    def default_base_url(self) -> str:
        return settings.openai_base_url
