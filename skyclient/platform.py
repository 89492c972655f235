"""平台能力包：在配置时一次性选定 store 与 push 实现，之后每次调用不再按平台分支。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from .store import DEVICE_ID_KEY, FileStore, MemoryStore, Store


class PushRegistrar(Protocol):
    async def get_device_id(self) -> Optional[str]:
        ...


class StoredDevicePush:
    """读取宿主此前注册并保存在 store 中的设备 id；设备注册本身由宿主负责。"""

    def __init__(self, store: Store) -> None:
        self.store = store
        self.device_id: Optional[str] = None

    async def get_device_id(self) -> Optional[str]:
        self.device_id = await self.store.get_item(DEVICE_ID_KEY)
        return self.device_id


@dataclass(frozen=True)
class PlatformBundle:
    name: str
    store: Store
    push: PushRegistrar


def web_platform() -> PlatformBundle:
    store = MemoryStore()
    return PlatformBundle(name="web", store=store, push=StoredDevicePush(store))


def desktop_platform(path: str) -> PlatformBundle:
    store = FileStore(path)
    return PlatformBundle(name="desktop", store=store, push=StoredDevicePush(store))


__all__ = ["PushRegistrar", "StoredDevicePush", "PlatformBundle", "web_platform", "desktop_platform"]
