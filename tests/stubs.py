"""测试用桩：传输层、弹窗、宿主窗口与消息通道。"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

from skyclient.sso.window import MessageEvent
from skyclient.transport import TransportResponse, TransportResult

END_POINT = "http://skygear.dev/"


def ok(result: Any = None, **extra: Any) -> TransportResult:
    body = {"result": result, **extra}
    return TransportResult(response=TransportResponse(200, body, json.dumps(body)))


def fail(code: int, message: str = "", status: int = 400) -> TransportResult:
    body = {"error": {"code": code, "message": message, "name": "Error"}}
    return TransportResult(
        error=RuntimeError(f"HTTP {status}"),
        response=TransportResponse(status, body, json.dumps(body)),
    )


class StubTransport:
    """按 action 返回预置结果；记录每次调用，便于断言请求内容。"""

    def __init__(self, log: Optional[List[str]] = None) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.routes: Dict[str, Callable[[], TransportResult]] = {}
        self.log = log if log is not None else []

    def route(self, action: str, result: TransportResult) -> None:
        self.routes[action] = lambda: result

    def send(self, method, url, headers, body, timeout) -> TransportResult:
        self.calls.append({"method": method, "url": url, "headers": headers, "body": body, "timeout": timeout})
        self.log.append(f"send:{body.get('action')}")
        factory = self.routes.get(body.get("action"))
        if factory is None:
            return fail(110, "not found", status=404)
        return factory()


class FakeChannel:
    def __init__(self) -> None:
        self.listeners: List[Callable[[MessageEvent], None]] = []

    def add_listener(self, listener) -> None:
        self.listeners.append(listener)

    def remove_listener(self, listener) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    def emit(self, data: Any, origin: str = "https://app.example.com") -> None:
        for listener in list(self.listeners):
            listener(MessageEvent(data, origin))


class FakePopup:
    def __init__(self) -> None:
        self.closed = False
        self.url: Optional[str] = None

    def navigate(self, url: str) -> None:
        self.url = url

    def close(self) -> None:
        self.closed = True


class FakeOpener:
    def __init__(self) -> None:
        self.posted: List[Dict[str, Any]] = []

    def post_message(self, data: Any, target_origin: str) -> None:
        self.posted.append({"data": data, "origin": target_origin})


class FakeHost:
    def __init__(self, log: Optional[List[str]] = None, opener: Optional[FakeOpener] = None) -> None:
        self.log = log if log is not None else []
        self.messages = FakeChannel()
        self.opener = opener
        self.popups: List[FakePopup] = []
        self.navigated: List[str] = []
        self.closed = False

    def open_popup(self, features: str) -> FakePopup:
        self.log.append("open_popup")
        popup = FakePopup()
        self.popups.append(popup)
        return popup

    def navigate(self, url: str) -> None:
        self.navigated.append(url)

    def close(self) -> None:
        self.closed = True
