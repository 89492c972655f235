"""极简 stub 后端：按 action 路径与 mode 返回约定的成功或错误响应。

仅用于本地集成测试，替代真实 Skygear 服务端。
"""

from __future__ import annotations

import json
from http.server import BaseHTTPRequestHandler, HTTPServer
from socketserver import ThreadingMixIn
from typing import Any, Dict, List


class StubState:
    def __init__(self) -> None:
        self.mode = "ok"  # ok / token_rejected / text_plain / garbage / bad_gateway
        self.requests: List[Dict[str, Any]] = []


state = StubState()


def _send(handler: BaseHTTPRequestHandler, code: int, body: bytes, content_type: str) -> None:
    handler.send_response(code)
    handler.send_header("Content-Type", content_type)
    handler.send_header("Content-Length", str(len(body)))
    handler.end_headers()
    handler.wfile.write(body)


def _send_json(handler: BaseHTTPRequestHandler, code: int, payload: Dict[str, Any]) -> None:
    _send(handler, code, json.dumps(payload).encode("utf-8"), "application/json")


class StubHandler(BaseHTTPRequestHandler):
    def do_POST(self):  # noqa: N802
        length = int(self.headers.get("Content-Length") or 0)
        body = json.loads(self.rfile.read(length) or b"{}")
        state.requests.append({"path": self.path, "headers": dict(self.headers), "body": body})

        if state.mode == "token_rejected":
            return _send_json(self, 401, {"error": {"code": 104, "name": "AccessTokenNotAccepted", "message": "token expired"}})
        if state.mode == "text_plain":
            return _send(self, 200, b'{"result":{"x":1}}', "text/plain")
        if state.mode == "garbage":
            return _send(self, 200, b"<html>maintenance</html>", "text/html")
        if state.mode == "bad_gateway":
            return _send(self, 502, b"Bad Gateway", "text/plain")

        if self.path == "/sso/google/login_auth_url":
            return _send_json(self, 200, {"result": {"auth_url": "https://accounts.example.com/auth"}})
        if self.path == "/me":
            return _send_json(self, 200, {"result": {"_id": "user/u1"}})
        _send_json(self, 404, {"error": {"code": 110, "message": f"unknown action {body.get('action')}"}})

    def log_message(self, format: str, *args):  # noqa: A003
        return  # silence


class ThreadingHTTPServer(ThreadingMixIn, HTTPServer):
    daemon_threads = True
    allow_reuse_address = True


def create_server(host: str = "127.0.0.1", port: int = 0) -> HTTPServer:
    """用于测试的 server 工厂，可在测试中调用 shutdown() 结束。"""

    return ThreadingHTTPServer((host, port), StubHandler)
