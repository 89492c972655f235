"""会话状态：当前用户身份 + access token。

约束：
- 会话要么完整（user_id 与 access_token 均存在），要么为空，不存在只清了一半的状态；
- 内存中的会话以不可变对象整体替换，观察者永远不会读到中间态；
- clear() 幂等：清理已经为空的会话是 no-op；并发触发的清理只有第一次会写存储。
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .store import Store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    user_id: Optional[str] = None
    access_token: Optional[str] = None
    user: Optional[Dict[str, Any]] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if bool(self.user_id) != bool(self.access_token):
            raise ValueError("session requires both user_id and access_token, or neither")

    @property
    def is_empty(self) -> bool:
        return not self.user_id


EMPTY_SESSION = Session()


def user_id_from_record(user: Optional[Dict[str, Any]]) -> Optional[str]:
    """从用户记录中取出 id；兼容 `user/<id>` 形式的记录 id。"""

    if not user:
        return None
    raw = user.get("user_id") or user.get("_id") or user.get("id")
    if not raw:
        return None
    raw = str(raw)
    if raw.startswith("user/"):
        raw = raw[len("user/"):]
    return raw


class SessionState:
    def __init__(self, store: Store) -> None:
        self.store = store
        self._session = EMPTY_SESSION
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def user_id(self) -> Optional[str]:
        return self._session.user_id

    @property
    def access_token(self) -> Optional[str]:
        return self._session.access_token

    @property
    def current_user(self) -> Optional[Dict[str, Any]]:
        return self._session.user

    async def set(self, user: Dict[str, Any], access_token: str) -> Session:
        session = Session(
            user_id=user_id_from_record(user),
            access_token=access_token,
            user=dict(user),
        )
        self._session = session
        async with self._lock:
            await self.store.set_current_user(session.user)
            await self.store.set_access_token(session.access_token)
        return session

    async def clear(self) -> None:
        if self._session.is_empty:
            return
        self._session = EMPTY_SESSION
        async with self._lock:
            await self.store.set_access_token(None)
            await self.store.set_current_user(None)

    async def restore(self) -> Session:
        """从存储恢复会话；存储中的数据不完整时视为无会话，并删除残留的一半。"""

        user = await self.store.get_current_user()
        token = await self.store.get_access_token()
        user_id = user_id_from_record(user)
        if user_id and token:
            self._session = Session(user_id=user_id, access_token=token, user=user)
            return self._session

        self._session = EMPTY_SESSION
        if user or token:
            logger.warning("stored session is incomplete, discarding it")
            async with self._lock:
                await self.store.set_access_token(None)
                await self.store.set_current_user(None)
        return self._session


__all__ = ["Session", "EMPTY_SESSION", "SessionState", "user_id_from_record"]
