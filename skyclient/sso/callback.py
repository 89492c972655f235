"""SSO 回跳落地页逻辑。

- 启动即读取并删除一次性状态 sso_callback_url / sso_result；
- 拉取服务端 allow-list（sso/config）；
- 弹窗场景：把解码后的登录结果逐个 postMessage 给 allow-list 中的 origin，然后关闭弹窗；
- 重定向场景：校验回跳 url，通过则导航，否则抛 UnauthorizedCallbackDomain。
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import TYPE_CHECKING, Any, List, Optional

from ..errors import LoginResultMissing, UnauthorizedCallbackDomain
from .validator import is_allowed
from .window import HostWindow, TransientState, WindowRef, pop_transient

if TYPE_CHECKING:  # pragma: no cover
    from ..container import Container

CALLBACK_URL_KEY = "sso_callback_url"
RESULT_KEY = "sso_result"


def decode_result(raw: Optional[str]) -> Any:
    """base64(JSON) → 对象；空值返回 None，格式错误抛 ValueError。"""

    if not raw:
        return None
    padded = raw + "=" * (-len(raw) % 4)
    try:
        decoded = base64.b64decode(padded)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("sso_result is not valid base64") from exc
    return json.loads(decoded.decode("utf-8"))


class CallbackRedirectHandler:
    def __init__(
        self,
        container: "Container",
        host: HostWindow,
        state: TransientState,
        *,
        strict_popup_result: bool = False,
    ) -> None:
        """
        strict_popup_result：弹窗场景下没有可用的登录结果时是否抛 LoginResultMissing。
        默认 False：仅记录警告并照常关闭弹窗，由打开方的关闭轮询判定为用户取消。
        """

        self.container = container
        self.host = host
        self.state = state
        self.strict_popup_result = strict_popup_result
        self._logger = logging.getLogger(__name__)

    async def handle_callback(self) -> None:
        callback_url = pop_transient(self.state, CALLBACK_URL_KEY)
        raw_result = pop_transient(self.state, RESULT_KEY)

        data = await self.container.call("sso/config")
        authorized_urls: List[str] = list((data or {}).get("authorized_urls") or [])

        opener = self.host.opener
        if opener is not None:
            self._post_result_to_opener(opener, raw_result, authorized_urls)
            self.host.close()
            return

        if not is_allowed(callback_url, authorized_urls):
            raise UnauthorizedCallbackDomain(callback_url)
        self.host.navigate(callback_url)

    def _post_result_to_opener(self, opener: WindowRef, raw_result: Optional[str], authorized_urls: List[str]) -> None:
        try:
            result = decode_result(raw_result)
        except ValueError as exc:
            self._logger.warning("failed to decode sso_result: %s", exc)
            result = None

        if not result:
            if self.strict_popup_result:
                # 严格模式下不关闭弹窗，保留现场
                raise LoginResultMissing()
            self._logger.warning("Fail to retrieve login result, closing popup without posting")
            return

        for origin in authorized_urls:
            opener.post_message(result, origin)


__all__ = ["CALLBACK_URL_KEY", "RESULT_KEY", "decode_result", "CallbackRedirectHandler"]
