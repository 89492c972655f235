"""本地持久化存储。

- MemoryStore：进程内字典，适用于浏览器/测试宿主；
- FileStore：JSON 文件，写入采用临时文件 + os.replace 的原子替换，避免读到被截断的半截 JSON；
- 会话与设备相关的键不会被 clear_purgeable_items 清理，其余键都视为可清理缓存。
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "skygear-user"
ACCESS_TOKEN_KEY = "skygear-accesstoken"
DEVICE_ID_KEY = "skygear-deviceid"

NON_PURGEABLE_KEYS = frozenset({CURRENT_USER_KEY, ACCESS_TOKEN_KEY, DEVICE_ID_KEY})


class Store(Protocol):
    async def get_item(self, key: str) -> Optional[str]:
        ...

    async def set_item(self, key: str, value: str) -> None:
        ...

    async def remove_item(self, key: str) -> None:
        ...

    async def clear_purgeable_items(self) -> None:
        ...

    async def get_access_token(self) -> Optional[str]:
        ...

    async def set_access_token(self, token: Optional[str]) -> None:
        ...

    async def get_current_user(self) -> Optional[Dict[str, Any]]:
        ...

    async def set_current_user(self, user: Optional[Dict[str, Any]]) -> None:
        ...


class BaseStore:
    """在 get_item/set_item/remove_item 之上实现会话相关的便捷方法。"""

    async def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def remove_item(self, key: str) -> None:
        raise NotImplementedError

    async def keys(self) -> list[str]:
        raise NotImplementedError

    async def clear_purgeable_items(self) -> None:
        for key in await self.keys():
            if key not in NON_PURGEABLE_KEYS:
                await self.remove_item(key)

    async def get_access_token(self) -> Optional[str]:
        return await self.get_item(ACCESS_TOKEN_KEY)

    async def set_access_token(self, token: Optional[str]) -> None:
        if token:
            await self.set_item(ACCESS_TOKEN_KEY, token)
        else:
            await self.remove_item(ACCESS_TOKEN_KEY)

    async def get_current_user(self) -> Optional[Dict[str, Any]]:
        raw = await self.get_item(CURRENT_USER_KEY)
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except ValueError:
            logger.warning("stored user is not valid JSON, ignoring it")
            return None
        return user if isinstance(user, dict) else None

    async def set_current_user(self, user: Optional[Dict[str, Any]]) -> None:
        if user:
            await self.set_item(CURRENT_USER_KEY, json.dumps(user, ensure_ascii=False))
        else:
            await self.remove_item(CURRENT_USER_KEY)


class MemoryStore(BaseStore):
    def __init__(self, items: Optional[Dict[str, str]] = None) -> None:
        self.items: Dict[str, str] = dict(items or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    async def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    async def keys(self) -> list[str]:
        return list(self.items)


class FileStore(BaseStore):
    """以单个 JSON 文件保存所有键值。

    - 文件不存在 → 视为空存储；
    - 文件损坏（非 JSON 或非对象）→ 记录警告并视为空存储，下一次写入会覆盖。
    """

    def __init__(self, path: str) -> None:
        self.path = path
        # 文件读写在线程池中执行；读-改-写需要串行
        self._io_lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except ValueError as exc:
            logger.warning("store file %s is corrupted, treating as empty: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: Dict[str, str]) -> None:
        parent = os.path.dirname(self.path) or "."
        os.makedirs(parent, exist_ok=True)
        tmp_fd, tmp_path = tempfile.mkstemp(prefix=".skyclient_store_", suffix=".tmp", dir=parent)
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def _set(self, key: str, value: str) -> None:
        with self._io_lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def _remove(self, key: str) -> None:
        with self._io_lock:
            data = self._load()
            if key in data:
                del data[key]
                self._dump(data)

    def _purge(self) -> None:
        with self._io_lock:
            data = self._load()
            kept = {k: v for k, v in data.items() if k in NON_PURGEABLE_KEYS}
            if kept != data:
                self._dump(kept)

    async def get_item(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._load)
        return data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)

    async def keys(self) -> list[str]:
        return list(await asyncio.to_thread(self._load))

    async def clear_purgeable_items(self) -> None:
        await asyncio.to_thread(self._purge)


__all__ = [
    "CURRENT_USER_KEY",
    "ACCESS_TOKEN_KEY",
    "DEVICE_ID_KEY",
    "Store",
    "BaseStore",
    "MemoryStore",
    "FileStore",
]
