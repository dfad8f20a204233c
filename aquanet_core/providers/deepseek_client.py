"""DeepSeek Provider。"""

from aquanet_core.config.settings import settings
from aquanet_core.providers.openai_compatible import OpenAICompatibleProvider


class DeepSeekProvider(OpenAICompatibleProvider):
    name = "deepseek"

    @property
    def default_base_url(self) -> str:
        return settings.deepseek_base_url
