"""请求签名：由 action 名、载荷、API key 与 access token 构造出站请求。"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigurationError

SDK_VERSION = "0.1.0"


def action_to_path(action: str) -> str:
    return action.replace(":", "/")


@dataclass(frozen=True)
class RequestAction:
    name: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # 冻结载荷，避免调用方在请求发出前修改
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    @property
    def path(self) -> str:
        return action_to_path(self.name)


@dataclass(frozen=True)
class SignedRequest:
    method: str
    url: str
    headers: Dict[str, str]
    body: Dict[str, Any]
    timeout: Optional[float]


class RequestSigner:
    def __init__(self, sdk_version: str = SDK_VERSION) -> None:
        self.sdk_version = sdk_version

    def headers(self, api_key: str, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Skygear-API-Key": api_key,
            "X-Skygear-SDK-Version": f"skygear-SDK-Python/{self.sdk_version}",
        }
        if access_token:
            headers["X-Skygear-Access-Token"] = access_token
        return headers

    def body(
        self, action: RequestAction, api_key: str, access_token: Optional[str] = None
    ) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if access_token:
            data["access_token"] = access_token
        data["action"] = action.name
        data["api_key"] = api_key
        data.update(action.payload)
        return data

    def sign(
        self,
        action: RequestAction,
        *,
        end_point: str,
        api_key: Optional[str],
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> SignedRequest:
        """构造 POST 请求；未配置 API key 时抛 ConfigurationError，不会触发任何网络 I/O。"""

        if not api_key:
            raise ConfigurationError()
        return SignedRequest(
            method="POST",
            url=f"{end_point}{action.path}",
            headers=self.headers(api_key, access_token),
            body=self.body(action, api_key, access_token),
            timeout=timeout,
        )


__all__ = ["SDK_VERSION", "action_to_path", "RequestAction", "SignedRequest", "RequestSigner"]
