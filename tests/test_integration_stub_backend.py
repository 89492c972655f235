from __future__ import annotations

import threading
import unittest

from skyclient.container import Container
from skyclient.errors import AccessTokenNotAccepted, NetworkError, ServerError
from skyclient.transport import RequestsTransport

from tests.stub_backend import create_server, state


class IntegrationWithStubBackend(unittest.IsolatedAsyncioTestCase):
    @classmethod
    def setUpClass(cls) -> None:
        # 整个用例类共用一个 server，避免反复起停
        cls.server = create_server()
        cls.port = cls.server.server_address[1]
        cls.thread = threading.Thread(target=cls.server.serve_forever, daemon=True)
        cls.thread.start()

    @classmethod
    def tearDownClass(cls) -> None:
        cls.server.shutdown()
        cls.server.server_close()
        cls.thread.join(timeout=1)

    async def asyncSetUp(self) -> None:
        state.mode = "ok"
        state.requests.clear()
        self.container = Container(transport=RequestsTransport(), timeout=5)
        await self.container.config(api_key="correctApiKey", end_point=f"http://127.0.0.1:{self.port}")

    async def test_call_round_trip(self) -> None:
        await self.container.session.set({"_id": "user/u1"}, "T1")
        result = await self.container.call("sso/google/login_auth_url", {"ux_mode": "js_popup"})

        self.assertEqual(result, {"auth_url": "https://accounts.example.com/auth"})
        sent = state.requests[-1]
        self.assertEqual(sent["path"], "/sso/google/login_auth_url")
        self.assertEqual(sent["headers"]["X-Skygear-API-Key"], "correctApiKey")
        self.assertEqual(sent["headers"]["X-Skygear-Access-Token"], "T1")
        self.assertEqual(sent["body"]["args"], {"ux_mode": "js_popup"})
        self.assertEqual(sent["body"]["access_token"], "T1")

    async def test_colon_action_maps_to_path(self) -> None:
        with self.assertRaises(ServerError):
            await self.container.make_request("user:login", {})
        self.assertEqual(state.requests[-1]["path"], "/user/login")

    async def test_token_rejected_clears_session(self) -> None:
        await self.container.session.set({"_id": "user/u1"}, "T1")
        state.mode = "token_rejected"

        with self.assertRaises(AccessTokenNotAccepted) as ctx:
            await self.container.make_request("me")

        self.assertEqual(ctx.exception.status, 401)
        self.assertTrue(self.container.session.session.is_empty)

    async def test_text_plain_body_is_parsed(self) -> None:
        state.mode = "text_plain"
        self.assertEqual(await self.container.call("me"), {"x": 1})

    async def test_garbage_body_yields_empty(self) -> None:
        state.mode = "garbage"
        self.assertEqual(await self.container.make_request("me"), {})

    async def test_unstructured_http_error(self) -> None:
        state.mode = "bad_gateway"
        with self.assertRaises(NetworkError) as ctx:
            await self.container.make_request("me")
        self.assertEqual(ctx.exception.status, 502)

    async def test_unreachable_server(self) -> None:
        container = Container(transport=RequestsTransport(), timeout=2)
        await container.config(api_key="k", end_point="http://127.0.0.1:1")
        with self.assertRaises(NetworkError) as ctx:
            await container.make_request("me")
        self.assertIsNone(ctx.exception.status)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
