"""SDK 侧异常与服务端错误码。

- `ErrorCodes`：与服务端约定的整型错误码（需与服务端 error.go 保持一致）；
- `SkyClientError`：所有异常基类，携带 code/message/status 以及原始 error 载荷；
- 其余子类对应请求、会话与 SSO 流程中的失败分类。
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCodes(int, Enum):
    NotAuthenticated = 101
    PermissionDenied = 102
    AccessKeyNotAccepted = 103
    AccessTokenNotAccepted = 104
    InvalidCredentials = 105
    InvalidSignature = 106
    BadRequest = 107
    InvalidArgument = 108
    Duplicated = 109
    ResourceNotFound = 110
    NotSupported = 111
    NotImplemented = 112
    ConstraintViolated = 113
    IncompatibleSchema = 114
    AtomicOperationFailure = 115
    PartialOperationFailure = 116
    UndefinedOperation = 117
    PluginUnavailable = 118
    PluginTimeout = 119
    RecordQueryInvalid = 120
    PluginInitializing = 121
    ResponseTimeout = 122
    DeniedArgument = 123
    RecordQueryDenied = 124
    NotConfigured = 125
    PasswordPolicyViolated = 126
    UserDisabled = 127
    VerificationRequired = 128
    UnexpectedError = 10000


def parse_error_code(value: Any) -> Optional[ErrorCodes]:
    """把服务端返回的 code（int 或数字字符串）转换为 ErrorCodes；未知值返回 None。"""

    try:
        return ErrorCodes(int(value))
    except (TypeError, ValueError):
        return None


class SkyClientError(Exception):
    """Base class for SDK 异常，携带错误码。"""

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[ErrorCodes] = None,
        status: Optional[int] = None,
        error: Any = None,
    ) -> None:
        super().__init__(message or (code.name if code is not None else ""))
        self.message = message
        self.code = code
        self.status = status
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "error": self.error}


class ConfigurationError(SkyClientError):
    """调用方未完成配置（例如缺少 API key），属于编程错误，不应重试。"""

    def __init__(self, message: str = "Please config ApiKey") -> None:
        super().__init__(message, code=ErrorCodes.NotConfigured)


class NetworkError(SkyClientError):
    """传输层失败：连接失败、超时，或非 2xx 响应中没有结构化 error。"""


class ServerError(SkyClientError):
    """服务端返回的结构化错误 {code, message}。"""


class AccessTokenNotAccepted(ServerError):
    """access token 被服务端拒绝；容器在抛出前会清理本地会话。"""


class UserCancelled(SkyClientError):
    def __init__(self, message: str = "User cancel the login flow") -> None:
        super().__init__(message)


class UnauthorizedCallbackDomain(SkyClientError):
    def __init__(self, url: Optional[str]) -> None:
        super().__init__(
            "The domain is not authorized. Add it to the authorized callback "
            f"urls list in portal. Domain: {url}"
        )
        self.url = url


class LoginResultMissing(SkyClientError):
    def __init__(self, message: str = "Fail to retrieve login result") -> None:
        super().__init__(message)


class InvalidRelation(SkyClientError, ValueError):
    pass


__all__ = [
    "ErrorCodes",
    "parse_error_code",
    "SkyClientError",
    "ConfigurationError",
    "NetworkError",
    "ServerError",
    "AccessTokenNotAccepted",
    "UserCancelled",
    "UnauthorizedCallbackDomain",
    "LoginResultMissing",
    "InvalidRelation",
]
