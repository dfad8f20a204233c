"""Provider 级别的配置与输入/输出模型。

ProviderConfig 描述“用哪个厂商的哪个模型”，是 ProviderRegistry 的缓存键来源；
LLMInput / LLMOutput / LLMStreamChunk 是领域服务调用 Provider 的单轮问答接口。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from aquanet_core.domain.exceptions import ConfigurationError
from aquanet_core.domain.models import ChatUsage


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class GenerationParams(_FrozenModel):
    """Provider 级默认生成参数，会被单次调用的参数覆盖。"""

    temperature: Optional[float] = Field(default=None, ge=0, le=1)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    top_p: Optional[float] = Field(default=None, ge=0, le=1)
    top_k: Optional[int] = Field(default=None, gt=0)
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ProviderConfig(_FrozenModel):
    """单个 Provider 实例的配置。

    provider 保持为普通字符串：未知厂商在 ProviderRegistry 中以
    UnsupportedOperationError 拒绝，而不是在这里被当作格式错误。
    """

    provider: str
    api_key: str
    model: str
    base_url: Optional[str] = None
    default_params: Optional[GenerationParams] = None
    timeout: Optional[float] = Field(default=None, gt=0)

    @property
    def key(self) -> Tuple[str, str]:
        """ProviderRegistry 的缓存键。"""

        return (self.provider, self.model)

    @classmethod
    def parse(cls, raw: Union["ProviderConfig", Mapping[str, Any]]) -> "ProviderConfig":
        if isinstance(raw, cls):
            return raw
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise ConfigurationError.from_validation_error(exc) from exc


@dataclass
class LLMInput:
    """单轮问答输入。"""

    prompt: str
    system_prompt: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    extra_params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMMetadata:
    provider: str
    model: str
    usage: Optional[ChatUsage] = None


@dataclass
class LLMOutput:
    content: str
    metadata: Optional[LLMMetadata] = None


@dataclass
class LLMStreamChunk:
    """stream_query 回调收到的分片；done=True 的最后一片 content 为空。"""

    content: str
    done: bool
    metadata: Optional[LLMMetadata] = None
