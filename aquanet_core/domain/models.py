"""统一的对话与结果数据模型。

本模块定义了 Bot、Service 与各 Provider 之间共享的标准数据结构：

- ChatMessage: 一条对话消息（system/user/assistant）。
- ChatRequest: 发给底层 Provider 的完整请求。
- ChatResult: 非流式调用的统一响应（id、choices、usage）。
- ChatStreamChunk: 流式调用中的单个增量分片。

所有 Provider 适配器都只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Union, get_args

from aquanet_core.domain.exceptions import ConfigurationError


# 与 OpenAI / DeepSeek 的 role 字段对应
Role = Literal["system", "user", "assistant"]
ROLES = frozenset(get_args(Role))


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息，既可用于请求，也可用于响应。"""

    role: Role
    content: str

    def to_payload(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}


MessageLike = Union[ChatMessage, Mapping[str, Any]]


def coerce_message(message: MessageLike) -> ChatMessage:
    """把 {"role": ..., "content": ...} 形式的字典转换为 ChatMessage。"""

    if isinstance(message, ChatMessage):
        return message
    role = message.get("role")
    if role not in ROLES:
        raise ConfigurationError(
            f"Invalid message role: {role!r}",
            code="INVALID_INPUT",
            fields=("role",),
        )
    content = message.get("content")
    if not isinstance(content, str):
        raise ConfigurationError(
            "Message content must be a string",
            code="INVALID_INPUT",
            fields=("content",),
        )
    return ChatMessage(role=role, content=content)


@dataclass
class ChatRequest:
    """一次完整的聊天请求。

    temperature / max_tokens 为 None 时由 Provider 使用默认参数补齐；
    extra_params 原样合并进请求体（最后合并，优先级最高）。
    """

    messages: List[ChatMessage]
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    extra_params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ChatUsage:
    """Provider 返回的 token 统计信息（统一格式）。"""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "ChatUsage":
        payload = payload or {}
        return cls(
            prompt_tokens=payload.get("prompt_tokens") or 0,
            completion_tokens=payload.get("completion_tokens") or 0,
            total_tokens=payload.get("total_tokens") or 0,
        )


@dataclass
class ChatChoice:
    """单个候选回答（通常只用 index=0 的一条）。"""

    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


@dataclass
class ChatResult:
    """一次非流式对话调用的结果。

    - id: 上游返回的响应 ID。
    - choices: 一个或多个候选回答。
    - usage: token 使用统计。
    - raw: 原始响应 JSON，用于调试。
    """

    id: str
    provider: str
    model: str
    choices: List[ChatChoice]
    usage: ChatUsage = field(default_factory=ChatUsage)
    raw: Optional[dict] = None

    @property
    def content(self) -> str:
        """第一条候选回答的文本，没有候选时返回空串。"""

        if not self.choices:
            return ""
        return self.choices[0].message.content or ""


@dataclass
class ChatStreamChoice:
    """流式返回中的单个候选增量。"""

    index: int
    delta: ChatMessage
    finish_reason: Optional[str] = None


@dataclass
class ChatStreamChunk:
    """流式对话的增量结果。

    每个分片由若干 choice 组成，choice.delta 代表本次增量内容。
    """

    id: str
    provider: str
    model: str
    choices: List[ChatStreamChoice]
    usage: Optional[ChatUsage] = None
    raw: Optional[dict] = None

    @property
    def delta_text(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].delta.content or ""
