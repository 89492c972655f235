"""用户认证相关 API：登录结果落地、whoami 与登出。"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from .session import Session

if TYPE_CHECKING:  # pragma: no cover
    from .container import Container


class AuthContainer:
    def __init__(self, container: "Container") -> None:
        self.container = container
        self._logger = logging.getLogger(__name__)

    @property
    def access_token(self) -> Optional[str]:
        return self.container.session.access_token

    @property
    def current_user(self) -> Optional[Dict[str, Any]]:
        return self.container.session.current_user

    @property
    def current_user_id(self) -> Optional[str]:
        return self.container.session.user_id

    async def auth_resolve(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """把登录结果写入会话，返回当前用户记录。

        payload 可以是 `{"result": {...}}`，也可以直接是 result 本身；
        result 中的 profile（若有）作为用户记录，否则使用 result 自身。
        """

        result = payload.get("result", payload) if isinstance(payload, dict) else None
        if not isinstance(result, dict):
            raise ValueError("login result must be an object")
        access_token = result.get("access_token")
        profile = result.get("profile")
        user = dict(profile) if isinstance(profile, dict) else dict(result)
        user.pop("access_token", None)
        if "user_id" in result and not (user.get("_id") or user.get("id")):
            user["user_id"] = result["user_id"]
        session: Session = await self.container.session.set(user, access_token)
        return session.user

    async def whoami(self) -> Optional[Dict[str, Any]]:
        body = await self.container.make_request("me", {})
        result = body.get("result") if isinstance(body, dict) else None
        if isinstance(result, dict) and result.get("access_token"):
            return await self.auth_resolve(result)
        return result

    async def logout(self) -> None:
        """主动退出：调用后端退出接口，清理本地会话与可清理缓存。"""

        try:
            await self.container.make_request("auth:logout", {})
        except Exception as exc:  # noqa: BLE001
            # 后端退出接口失败时仍需继续本地清理，避免残留本地会话。
            self._logger.warning("API logout failed, proceeding with local cleanup: %s", exc)
        finally:
            await self.container.session.clear()
            await self.container.clear_cache()


__all__ = ["AuthContainer"]
