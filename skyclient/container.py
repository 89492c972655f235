"""请求容器：签名 → 传输 → 分类，并在 access token 被拒时隐式登出。

职责：
- 持有 API key / end point / 超时与平台能力包；
- 持有会话（SessionState），由 AuthContainer 与隐式登出逻辑修改；
- 提供 make_request（返回完整 body）与 call（调用 lambda，返回 result）。
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from .auth import AuthContainer
from .error_handling import handle_error_action, map_error_to_action
from .errors import SkyClientError
from .platform import PlatformBundle, web_platform
from .relation import RelationContainer
from .request import RequestAction, RequestSigner, SDK_VERSION
from .response import NormalizedResponse, classify
from .session import SessionState
from .transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)

DEFAULT_END_POINT = "http://skygear.dev/"
DEFAULT_TIMEOUT = 60.0


def normalize_end_point(end_point: str) -> str:
    return end_point if end_point.endswith("/") else end_point + "/"


class Container:
    VERSION = SDK_VERSION

    def __init__(
        self,
        *,
        transport: Optional[Transport] = None,
        platform: Optional[PlatformBundle] = None,
        signer: Optional[RequestSigner] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ) -> None:
        self.url = DEFAULT_END_POINT
        self.api_key: Optional[str] = None
        self.timeout = timeout
        self.transport: Transport = transport or RequestsTransport()
        self.signer = signer or RequestSigner(self.VERSION)
        self.platform = platform or web_platform()
        self.session = SessionState(self.platform.store)
        self.device_id: Optional[str] = None
        self._auth = AuthContainer(self)
        self._relation = RelationContainer(self)

    # --- Configuration ---

    @property
    def end_point(self) -> str:
        return self.url

    @end_point.setter
    def end_point(self, value: Optional[str]) -> None:
        if value:
            self.url = normalize_end_point(value)

    @property
    def store(self):
        return self.platform.store

    @property
    def auth(self) -> AuthContainer:
        return self._auth

    @property
    def relation(self) -> RelationContainer:
        return self._relation

    def config_api_key(self, api_key: str) -> None:
        self.api_key = api_key

    def config_end_point(self, end_point: str) -> None:
        self.end_point = end_point

    async def config(
        self,
        *,
        api_key: Optional[str] = None,
        end_point: Optional[str] = None,
        platform: Optional[PlatformBundle] = None,
        timeout: Optional[float] = None,
    ) -> "Container":
        """配置容器并从存储恢复用户、access token 与设备 id。

        恢复失败只记录日志，容器仍然返回，调用方可以继续以未登录状态使用。
        """

        if api_key:
            self.api_key = api_key
        if end_point:
            self.end_point = end_point
        if timeout is not None:
            self.timeout = timeout
        if platform is not None and platform is not self.platform:
            self.platform = platform
            self.session = SessionState(platform.store)

        try:
            await self.session.restore()
            self.device_id = await self.platform.push.get_device_id()
        except Exception as exc:  # noqa: BLE001
            logger.warning("failed to restore session from store: %s", exc)
        return self

    async def clear_cache(self) -> None:
        await self.store.clear_purgeable_items()

    # --- Requests ---

    async def make_request(self, action: str, data: Optional[Dict[str, Any]] = None) -> Any:
        request_action = RequestAction(action, data or {})
        signed = self.signer.sign(
            request_action,
            end_point=self.url,
            api_key=self.api_key,
            access_token=self.session.access_token,
            timeout=self.timeout,
        )
        logger.debug("sending action %s to %s", action, signed.url)
        outcome = await asyncio.to_thread(
            self.transport.send,
            signed.method,
            signed.url,
            signed.headers,
            signed.body,
            signed.timeout,
        )
        response = await self._handle_response(outcome)
        return response.body

    async def call(self, name: str, args: Optional[Any] = None) -> Any:
        """调用服务端 lambda，返回 body 中的 result。未传 args 时请求体不带 args 字段。"""

        body = await self.make_request(name, {"args": args} if args is not None else {})
        return body.get("result") if isinstance(body, dict) else None

    async def _handle_response(self, outcome) -> NormalizedResponse:
        try:
            return classify(outcome)
        except SkyClientError as err:
            action = map_error_to_action(err.code)
            # 隐式登出：必须在异常抛给调用方之前完成，调用方捕获时会话已为空
            await handle_error_action(action, logout=self._implicit_logout)
            raise

    async def _implicit_logout(self) -> None:
        if not self.session.session.is_empty:
            logger.info("access token not accepted, clearing local session")
        await self.session.clear()


__all__ = ["Container", "DEFAULT_END_POINT", "DEFAULT_TIMEOUT", "normalize_end_point"]
