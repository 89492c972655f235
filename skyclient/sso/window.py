"""宿主窗口抽象（由宿主实现，例如内嵌 WebView 或浏览器桥接）。

SDK 只通过这些接口打开弹窗、导航、跨窗口 postMessage 以及读取一次性 cookie 状态。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol


@dataclass(frozen=True)
class MessageEvent:
    data: Any
    origin: str = ""


MessageListener = Callable[[MessageEvent], None]


class MessageChannel(Protocol):
    def add_listener(self, listener: MessageListener) -> None:
        ...

    def remove_listener(self, listener: MessageListener) -> None:
        ...


class WindowRef(Protocol):
    def post_message(self, data: Any, target_origin: str) -> None:
        ...


class PopupWindow(Protocol):
    @property
    def closed(self) -> bool:
        ...

    def navigate(self, url: str) -> None:
        ...

    def close(self) -> None:
        ...


class HostWindow(Protocol):
    @property
    def opener(self) -> Optional[WindowRef]:
        ...

    @property
    def messages(self) -> MessageChannel:
        ...

    def open_popup(self, features: str) -> PopupWindow:
        ...

    def navigate(self, url: str) -> None:
        ...

    def close(self) -> None:
        ...


class TransientState(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryTransientState:
    """以 dict 模拟一次性 cookie 通道，便于非浏览器宿主与测试使用。"""

    def __init__(self, values: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


def pop_transient(state: TransientState, key: str) -> Optional[str]:
    """读取后立即删除（write-once/read-once）。"""

    value = state.get(key)
    state.remove(key)
    return value


__all__ = [
    "MessageEvent",
    "MessageListener",
    "MessageChannel",
    "WindowRef",
    "PopupWindow",
    "HostWindow",
    "TransientState",
    "MemoryTransientState",
    "pop_transient",
]
