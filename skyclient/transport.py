"""后端 HTTP 传输封装。

容器只依赖 `Transport.send` 的输入/输出形状：
- 成功或非 2xx 都返回 TransportResult，不抛异常；
- 非 2xx：error 为 requests.HTTPError，response 仍然保留，便于读取 body 中的 error；
- 连接失败/超时：error 为对应异常，response 为 None。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import requests


@dataclass
class TransportResponse:
    status_code: int
    body: Any = None  # 仅当服务端声明 JSON content-type 时才预先解析
    text: str = ""


@dataclass
class TransportResult:
    error: Optional[Exception] = None
    response: Optional[TransportResponse] = None

    @property
    def status(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None


class Transport(Protocol):
    def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Dict[str, Any],
        timeout: Optional[float],
    ) -> TransportResult:
        ...


def _is_json_content(resp: requests.Response) -> bool:
    content_type = resp.headers.get("Content-Type", "")
    return "json" in content_type.lower()


class RequestsTransport:
    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self._session = session

    def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Dict[str, Any],
        timeout: Optional[float],
    ) -> TransportResult:
        requester = self._session or requests
        try:
            resp = requester.request(method, url, headers=headers, json=body, timeout=timeout)
        except requests.exceptions.RequestException as exc:
            return TransportResult(error=exc)

        parsed = None
        if resp.content and _is_json_content(resp):
            try:
                parsed = resp.json()
            except ValueError:
                parsed = None
        response = TransportResponse(status_code=resp.status_code, body=parsed, text=resp.text)

        if resp.status_code >= 400:
            try:
                resp.raise_for_status()
            except requests.HTTPError as exc:
                return TransportResult(error=exc, response=response)
        return TransportResult(response=response)


__all__ = ["TransportResponse", "TransportResult", "Transport", "RequestsTransport"]
