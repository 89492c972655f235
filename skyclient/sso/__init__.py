"""OAuth 单点登录（弹窗 / 重定向 / 回跳处理）。

SSOAuth 通过构造参数持有容器引用并组合三个协调器，不修改容器或 AuthContainer 的类型。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from .callback import CallbackRedirectHandler
from .popup import DEFAULT_POLL_INTERVAL, PopupLoginCoordinator
from .redirect import RedirectLoginCoordinator
from .validator import is_allowed
from .window import HostWindow, MemoryTransientState, MessageEvent, TransientState

if TYPE_CHECKING:  # pragma: no cover
    from ..container import Container


class SSOAuth:
    def __init__(
        self,
        container: "Container",
        host: HostWindow,
        state: Optional[TransientState] = None,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        strict_popup_result: bool = False,
    ) -> None:
        self.container = container
        self.popup = PopupLoginCoordinator(container, host, poll_interval=poll_interval)
        self.redirect = RedirectLoginCoordinator(container, host)
        self.callback = CallbackRedirectHandler(
            container,
            host,
            state if state is not None else MemoryTransientState(),
            strict_popup_result=strict_popup_result,
        )

    async def login_with_popup(self, provider: str, options: Optional[Dict[str, Any]] = None):
        return await self.popup.login_with_popup(provider, options)

    async def login_with_redirect(self, provider: str, options: Optional[Dict[str, Any]] = None) -> None:
        await self.redirect.login_with_redirect(provider, options)

    async def handle_callback(self) -> None:
        await self.callback.handle_callback()


__all__ = [
    "SSOAuth",
    "PopupLoginCoordinator",
    "RedirectLoginCoordinator",
    "CallbackRedirectHandler",
    "MessageEvent",
    "MemoryTransientState",
    "is_allowed",
]
