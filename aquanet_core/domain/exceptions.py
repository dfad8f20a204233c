"""统一业务异常模型。

所有跨模块抛出的业务级错误都继承自 BusinessError，
便于 Bot / Service 调用方做统一捕获与用户提示。

- ConfigurationError: 配置或输入校验失败（构造阶段即失败）。
- UnsupportedOperationError: 未知的 Provider 或任务类型。
- UninitializedProviderError: Provider 尚未成功 initialize。
- TransportError 及其子类: 网络失败或上游返回非 2xx。
- StreamDecodeWarning: 流式分片无法解析，仅告警不终止。
"""

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from pydantic import ValidationError as PydanticValidationError


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "INVALID_CONFIG"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 rule、provider 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ConfigurationError(BusinessError):
    """配置校验失败。

    rule 为失败的跨字段规则名（结构校验失败时为 None），
    fields 为涉及的字段路径，例如 ("aquacultureConfig", "dataSources")。
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_CONFIG",
        rule: Optional[str] = None,
        fields: Sequence[str] = (),
        **extra,
    ):
        super().__init__(code=code, message=message, rule=rule, fields=tuple(fields), **extra)
        self.rule = rule
        self.fields = tuple(fields)

    @classmethod
    def from_validation_error(cls, exc: "PydanticValidationError", prefix: str = "") -> "ConfigurationError":
        """把 pydantic 的结构校验错误转换为 ConfigurationError。

        消息中逐条列出字段路径与原因，fields 保存所有出错字段路径。
        """

        fields = []
        reasons = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ()))
            if prefix:
                loc = f"{prefix}.{loc}" if loc else prefix
            fields.append(loc)
            reasons.append(f"{loc or '<root>'}: {err.get('msg')}")
        return cls("Invalid configuration: " + "; ".join(reasons), fields=fields)


class UnsupportedOperationError(BusinessError):
    """不支持的 Provider 或任务类型。"""


class UninitializedProviderError(BusinessError):
    """Provider 未初始化就被调用。"""


class TransportError(BusinessError):
    """传输层错误基类：网络失败或上游返回错误状态码。"""


class NetworkError(TransportError):
    """网络层错误，例如连接失败、超时等。"""


class ApiError(TransportError):
    """上游 API 返回非 2xx 状态时抛出。"""


class RateLimitError(ApiError):
    """Provider 限流错误（HTTP 429），不做自动重试。"""


class StreamDecodeWarning(UserWarning):
    """流式响应中的单个分片无法解析，已被跳过。"""
