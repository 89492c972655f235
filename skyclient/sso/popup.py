"""弹窗登录：弹窗关闭轮询与 postMessage 监听两路竞争，先落定者胜。

约束：
- 弹窗必须在任何 await 之前打开，否则浏览器会当作非用户手势弹窗拦截；
- 任一观察者落定后，另一方在同一步内被取消（取消轮询 task / 移除监听），之后的事件一律忽略；
- 除“弹窗被关闭”外没有额外超时。
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..errors import ErrorCodes, ServerError, UserCancelled
from ..response import classify_error
from ..transport import TransportResult
from .window import HostWindow, MessageChannel, MessageEvent, PopupWindow

if TYPE_CHECKING:  # pragma: no cover
    from ..container import Container

logger = logging.getLogger(__name__)

POPUP_FEATURES = "height=700,width=500"
DEFAULT_POLL_INTERVAL = 3.0


class LoginRace:
    """先落定者胜的组合器；落定时同步取消全部观察者。"""

    def __init__(self) -> None:
        self._outcome: asyncio.Future = asyncio.get_running_loop().create_future()
        self._observers: List[Any] = []

    @property
    def settled(self) -> bool:
        return self._outcome.done()

    def watch(self, observer) -> None:
        self._observers.append(observer)
        observer.subscribe(self)

    def resolve(self, value: Any) -> bool:
        if self._outcome.done():
            return False
        self._outcome.set_result(value)
        self._cancel_observers()
        return True

    def reject(self, exc: BaseException) -> bool:
        if self._outcome.done():
            return False
        self._outcome.set_exception(exc)
        self._cancel_observers()
        return True

    def _cancel_observers(self) -> None:
        for observer in self._observers:
            observer.unsubscribe()

    async def wait(self) -> Any:
        try:
            return await self._outcome
        finally:
            # 等待方自身被取消时也不能遗留定时器/监听
            self._cancel_observers()


class WindowClosedObserver:
    def __init__(self, popup: PopupWindow, interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self.popup = popup
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None

    def subscribe(self, race: LoginRace) -> None:
        self._task = asyncio.ensure_future(self._poll(race))

    async def _poll(self, race: LoginRace) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self.popup.closed:
                race.reject(UserCancelled())
                return

    def unsubscribe(self) -> None:
        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()


class AuthResultObserver:
    def __init__(self, channel: MessageChannel) -> None:
        self.channel = channel
        self._listener = None

    @property
    def active(self) -> bool:
        return self._listener is not None

    def subscribe(self, race: LoginRace) -> None:
        def on_message(event: MessageEvent) -> None:
            race.resolve(event.data)

        self._listener = on_message
        self.channel.add_listener(on_message)

    def unsubscribe(self) -> None:
        listener, self._listener = self._listener, None
        if listener is not None:
            self.channel.remove_listener(listener)


def auth_url_from(data: Any) -> str:
    auth_url = data.get("auth_url") if isinstance(data, dict) else None
    if not auth_url or not isinstance(auth_url, str):
        raise ServerError(
            "login_auth_url response has no auth_url",
            code=ErrorCodes.UnexpectedError,
            error=data,
        )
    return auth_url


class PopupLoginCoordinator:
    def __init__(
        self,
        container: "Container",
        host: HostWindow,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.container = container
        self.host = host
        self.poll_interval = poll_interval

    async def login_with_popup(
        self, provider: str, options: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        popup = self.host.open_popup(POPUP_FEATURES)
        try:
            data = await self.container.call(
                f"sso/{provider}/login_auth_url",
                {"ux_mode": "js_popup", **(options or {})},
            )
            popup.navigate(auth_url_from(data))
        except BaseException:
            # 包括任务被取消：拿不到授权地址时弹窗不能遗留
            popup.close()
            raise

        race = LoginRace()
        race.watch(WindowClosedObserver(popup, self.poll_interval))
        race.watch(AuthResultObserver(self.host.messages))
        result = await race.wait()

        if isinstance(result, dict) and result.get("error"):
            logger.warning("popup login for %s returned an error", provider)
            raise classify_error(TransportResult(), result)
        return await self.container.auth.auth_resolve(result)


__all__ = [
    "POPUP_FEATURES",
    "DEFAULT_POLL_INTERVAL",
    "LoginRace",
    "WindowClosedObserver",
    "AuthResultObserver",
    "PopupLoginCoordinator",
    "auth_url_from",
]
