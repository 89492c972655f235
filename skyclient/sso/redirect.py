from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from .popup import auth_url_from
from .window import HostWindow

if TYPE_CHECKING:  # pragma: no cover
    from ..container import Container


class RedirectLoginCoordinator:
    def __init__(self, container: "Container", host: HostWindow) -> None:
        self.container = container
        self.host = host

    async def login_with_redirect(self, provider: str, options: Optional[Dict[str, Any]] = None) -> None:
        """获取授权 url 后把当前窗口导航过去；不等待目标页加载，后续流程在新页面继续。"""

        data = await self.container.call(
            f"sso/{provider}/login_auth_url",
            {"ux_mode": "js_redirect", **(options or {})},
        )
        self.host.navigate(auth_url_from(data))


__all__ = ["RedirectLoginCoordinator"]
