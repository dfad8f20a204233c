"""Bot 配置的结构校验（第一阶段）。

结构模型负责类型检查与默认值补齐；跨字段约束在第二阶段由
validators.aquaculture 中的规则依次检查。validate_config 串起两个阶段：
第一阶段失败时不会执行第二阶段，任一阶段失败都抛出 ConfigurationError，
不存在“领域配置无效时退化为无领域配置”的情况。

原始输入可以使用 camelCase（apiKey、knowledgeDomains）或 snake_case 键名。
"""

import inspect
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from aquanet_core.config.settings import settings
from aquanet_core.domain.aquaculture import DataSource, ExpertiseLevel, KnowledgeDomain, Language
from aquanet_core.domain.exceptions import ConfigurationError
from aquanet_core.domain.llm import ProviderConfig
from aquanet_core.validators.aquaculture import check_aquaculture_config


DEFAULT_BASE_URL = "https://api.deepseek.com/v1"


class ResponseMode(str, Enum):
    BUFFERED = "buffered"
    STREAMED = "streamed"


# 兼容旧的 responseFormat 取值
_LEGACY_RESPONSE_MODES = {"json": "buffered", "stream": "streamed"}


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
        use_enum_values=True,
        validate_default=True,
    )


class ToolsConfig(_ConfigModel):
    """集成工具开关。"""

    water_calculator: bool = False
    farming_calendar: bool = False
    alert_system: bool = False
    disease_identifier: bool = False
    feed_optimizer: bool = False


class ValidationConfig(_ConfigModel):
    """回答准确性相关的配置。"""

    require_source_citation: bool = True
    confidence_scoring: bool = True
    expert_review_threshold: float = Field(default=0.8, ge=0.5, le=1.0)
    fact_check_sources: Tuple[str, ...] = ()


class CustomizationConfig(_ConfigModel):
    species_specific: Tuple[str, ...] = ()
    farming_methods: Tuple[str, ...] = ()
    regional_guidelines: Tuple[str, ...] = ()
    custom_prompts: Mapping[str, str] = Field(default_factory=dict)

    @field_validator("custom_prompts", mode="after")
    @classmethod
    def _freeze_prompts(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_serializer("custom_prompts")
    def _dump_prompts(self, value: Mapping[str, str]) -> Dict[str, str]:
        return dict(value)


class AquacultureConfig(_ConfigModel):
    """养殖顾问人设配置（Domain Configuration）。"""

    knowledge_domains: Tuple[KnowledgeDomain, ...] = Field(
        default=(KnowledgeDomain.FARMING_TECHNIQUES,),
        min_length=1,
    )
    data_sources: Tuple[DataSource, ...] = (DataSource.INDUSTRY_STANDARDS,)
    expertise_level: ExpertiseLevel = ExpertiseLevel.INTERMEDIATE
    language: Language = Language.VI
    use_industry_terms: bool = True
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    customization: CustomizationConfig = Field(default_factory=CustomizationConfig)


class BotConfig(_ConfigModel):
    """AquanetBot 的完整配置。"""

    api_key: str = Field(min_length=1)
    base_url: str = DEFAULT_BASE_URL
    default_prompt: Optional[str] = None
    temperature: float = Field(default=0.7, ge=0, le=1)
    max_tokens: int = Field(default=1000, gt=0)
    response_mode: ResponseMode = ResponseMode.BUFFERED
    # 同步回调：每个非空增量文本调用一次，返回值被忽略
    on_stream: Optional[Callable[[str], None]] = None
    provider: str = Field(default_factory=lambda: settings.default_provider)
    model: str = Field(default_factory=lambda: settings.default_model)
    timeout: Optional[float] = Field(default=None, gt=0)
    aquaculture_config: Optional[AquacultureConfig] = None

    @field_validator("response_mode", mode="before")
    @classmethod
    def _map_legacy_mode(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _LEGACY_RESPONSE_MODES.get(value, value)
        return value

    @field_validator("on_stream", mode="after")
    @classmethod
    def _require_sync_callback(cls, value: Any) -> Any:
        if inspect.iscoroutinefunction(value) or inspect.iscoroutinefunction(getattr(value, "__call__", None)):
            raise ValueError("onStream must be a synchronous callable")
        return value

    @property
    def is_streaming(self) -> bool:
        return self.response_mode == ResponseMode.STREAMED.value

    def provider_config(self) -> ProviderConfig:
        """派生出 ProviderRegistry 使用的 ProviderConfig。"""

        return ProviderConfig(
            provider=self.provider,
            api_key=self.api_key,
            model=self.model,
            base_url=self.base_url,
            timeout=self.timeout,
        )


def _normalize_raw(raw: Mapping[str, Any]) -> Dict[str, Any]:
    data = dict(raw)
    # 旧字段名 responseFormat 视为 responseMode
    for legacy in ("responseFormat", "response_format"):
        if legacy in data and "responseMode" not in data and "response_mode" not in data:
            data["responseMode"] = data.pop(legacy)
    return data


def validate_config(raw: Union[BotConfig, Mapping[str, Any]]) -> BotConfig:
    """校验原始配置并返回不可变的 BotConfig。

    1. 结构校验：类型、枚举、范围，并补齐默认值。
    2. 若存在 aquacultureConfig，依次执行跨字段规则。
    """

    if isinstance(raw, BotConfig):
        config = raw
    else:
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(raw).__name__}")
        try:
            config = BotConfig.model_validate(_normalize_raw(raw))
        except ValidationError as exc:
            raise ConfigurationError.from_validation_error(exc) from exc

    if config.aquaculture_config is not None:
        check_aquaculture_config(config.aquaculture_config)
    return config
