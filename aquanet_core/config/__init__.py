"""配置层：运行时 settings 与 Bot 配置校验。"""

from aquanet_core.config.schema import BotConfig, ResponseMode, validate_config
from aquanet_core.config.settings import AquanetSettings, settings

__all__ = ["AquanetSettings", "BotConfig", "ResponseMode", "settings", "validate_config"]
