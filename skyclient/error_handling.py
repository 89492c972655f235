"""服务端错误码到 SDK 本地动作的映射。

容器在分类出错误后调用这里决定是否需要清理本地会话；
目前只有 AccessTokenNotAccepted 需要隐式登出，其余错误原样抛给调用方。
"""

from __future__ import annotations

from enum import Enum
from typing import Awaitable, Callable, Optional

from .errors import ErrorCodes


class ErrorAction(str, Enum):
    LOGOUT = "logout"
    NOOP = "noop"


def map_error_to_action(code: Optional[ErrorCodes]) -> ErrorAction:
    if code == ErrorCodes.AccessTokenNotAccepted:
        return ErrorAction.LOGOUT
    return ErrorAction.NOOP


async def handle_error_action(
    action: ErrorAction,
    *,
    logout: Callable[[], Awaitable[None]],
) -> None:
    """根据动作执行 SDK 侧统一处理。

    - logout: 清理本地会话的协程函数，调用方应确保幂等（并发请求可能同时触发）。
    """

    if action == ErrorAction.LOGOUT:
        await logout()
    else:
        return


__all__ = ["ErrorAction", "map_error_to_action", "handle_error_action"]
