from __future__ import annotations

import unittest

from skyclient.container import Container
from skyclient.errors import InvalidRelation
from skyclient.relation import Following, Outward, Relation, RelationQuery, RelationResult

from tests.stubs import StubTransport, ok


def user(uid: str) -> dict:
    return {"_type": "record", "_id": f"user/{uid}", "_access": None, "username": uid}


class RelationTests(unittest.TestCase):
    def test_reject_invalid_identifier(self) -> None:
        with self.assertRaises(InvalidRelation) as ctx:
            Relation("", Outward)
        self.assertEqual(str(ctx.exception), "Relation identifier can only be [a-zA-Z]+")

    def test_reject_missing_direction(self) -> None:
        with self.assertRaises(InvalidRelation) as ctx:
            Relation("friendOfFriend")
        self.assertEqual(str(ctx.exception), "Relation direction not supported.")

    def test_targets_id(self) -> None:
        r = Relation("follow", Outward, [{"_id": "user/id1"}, {"_id": "user/id2"}])
        self.assertEqual(r.targets_id, ["id1", "id2"])

    def test_query_defaults_and_serialize(self) -> None:
        query = RelationQuery(Following)
        self.assertEqual((query.identifier, query.direction, query.limit, query.page), ("follow", "outward", 50, 0))
        query.limit = 10
        query.page = 2
        self.assertEqual(query.to_json(), {"name": "follow", "direction": "outward", "limit": 10, "page": 2})

    def test_result_all_success(self) -> None:
        result = RelationResult([
            {"id": "id1", "type": "user", "data": user("id1")},
            {"id": "id2", "type": "user", "data": user("id2")},
        ])
        self.assertFalse(result.partial_error)
        self.assertEqual(result.fails, [])

    def test_result_partial_error(self) -> None:
        failed = {"id": "id2", "type": "error", "data": {"_id": "id2"}}
        result = RelationResult([{"id": "id1", "type": "user", "data": user("id1")}, failed])
        self.assertEqual(result.success[0]["_id"], "user/id1")
        self.assertTrue(result.partial_error)
        self.assertEqual(result.fails, [failed])


class RelationContainerTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.transport = StubTransport()
        self.container = Container(transport=self.transport)
        await self.container.config(api_key="correctApiKey")
        self.relation = self.container.relation

    async def test_query_following(self) -> None:
        self.transport.route(
            "relation:query",
            ok([{"id": "following1", "type": "user", "data": user("following1")}], info={"count": 1}),
        )
        users = await self.relation.query_following()

        self.assertEqual(len(users), 1)
        self.assertEqual(users[0]["_id"], "user/following1")
        self.assertEqual(users.overall_count, 1)
        sent = self.transport.calls[0]
        self.assertEqual(sent["url"], "http://skygear.dev/relation/query")
        self.assertEqual(sent["body"]["direction"], "outward")

    async def test_add_and_remove(self) -> None:
        self.transport.route("relation:add", ok([{"id": "ben", "type": "user", "data": user("ben")}]))
        self.transport.route("relation:remove", ok([{"id": "ben"}]))
        following = self.relation.Following([{"_id": "user/ben"}])

        added = await self.relation.add(following)
        self.assertEqual(added.success[0]["_id"], "user/ben")
        self.assertEqual(self.transport.calls[0]["body"]["targets"], ["ben"])

        removed = await self.relation.remove(following)
        self.assertEqual(removed.success, ["ben"])
        self.assertEqual(removed.fails, [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
