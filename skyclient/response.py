"""响应分类：把传输层结果归一化为 NormalizedResponse，或分类为 SDK 异常。"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .errors import (
    AccessTokenNotAccepted,
    ErrorCodes,
    NetworkError,
    ServerError,
    SkyClientError,
    parse_error_code,
)
from .transport import TransportResponse, TransportResult

logger = logging.getLogger(__name__)


@dataclass
class NormalizedResponse:
    body: Any

    @property
    def result(self) -> Any:
        if isinstance(self.body, dict):
            return self.body.get("result")
        return None


def decode_body(response: Optional[TransportResponse]) -> Any:
    """尽力解码响应体。

    部分网关会剥掉 content-type，此时传输层不会替我们解析 JSON，
    需要从原始文本再解析一次；仍然失败时返回空 dict，而不是抛异常。
    """

    if response is not None and response.body:
        return response.body
    if response is not None and response.text:
        try:
            return json.loads(response.text)
        except ValueError as exc:
            logger.warning("failed to decode response body as JSON: %s", exc)
    return {}


def classify_error(result: TransportResult, body: Any) -> SkyClientError:
    payload = body.get("error") if isinstance(body, dict) else None
    status = result.status

    if isinstance(payload, dict):
        code = parse_error_code(payload.get("code"))
        message = str(payload.get("message") or "")
        if status is None and payload.get("status") is not None:
            status = payload.get("status")
        cls = AccessTokenNotAccepted if code == ErrorCodes.AccessTokenNotAccepted else ServerError
        return cls(message, code=code, status=status, error=payload)

    raw = payload or result.error
    return NetworkError(str(raw) if raw is not None else "", status=status, error=raw)


def classify(result: TransportResult) -> NormalizedResponse:
    """成功返回 NormalizedResponse；失败抛出分类后的异常（二者恰有其一）。"""

    body = decode_body(result.response)
    if result.error is not None:
        raise classify_error(result, body)
    return NormalizedResponse(body=body)


__all__ = ["NormalizedResponse", "decode_body", "classify_error", "classify"]
