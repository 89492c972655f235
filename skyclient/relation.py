"""用户关系（好友/关注）API。

用户记录对本模块是黑盒：只依赖 `_id` 形如 `user/<id>` 的记录 dict。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from .errors import InvalidRelation

if TYPE_CHECKING:  # pragma: no cover
    from .container import Container

Outward = "outward"
Inward = "inward"
Mutual = "mutual"

DIRECTIONS = (Outward, Inward, Mutual)
IDENTIFIER_RE = re.compile(r"^[a-zA-Z]+$")
DEFAULT_LIMIT = 50


def record_id(record: Dict[str, Any]) -> str:
    raw = str(record.get("_id") or record.get("id") or "")
    return raw.split("/", 1)[1] if "/" in raw else raw


class Relation:
    identifier: Optional[str] = None
    direction: Optional[str] = None

    def __init__(
        self,
        identifier: Optional[str] = None,
        direction: Optional[str] = None,
        targets: Optional[Iterable[Dict[str, Any]]] = None,
    ) -> None:
        _validate(identifier, direction)
        self.identifier = identifier
        self.direction = direction
        self.targets: List[Dict[str, Any]] = list(targets or [])

    @property
    def targets_id(self) -> List[str]:
        return [record_id(user) for user in self.targets]

    @classmethod
    def extend(cls, identifier: str, direction: str) -> type:
        """生成固定 identifier/direction 的子类，实例化时只需传入目标用户。"""

        _validate(identifier, direction)

        def __init__(self, targets: Optional[Iterable[Dict[str, Any]]] = None) -> None:
            cls.__init__(self, identifier, direction, targets)

        name = identifier.capitalize() + direction.capitalize() + "Relation"
        return type(name, (cls,), {"identifier": identifier, "direction": direction, "__init__": __init__})


def _validate(identifier: Optional[str], direction: Optional[str]) -> None:
    if not isinstance(identifier, str) or not IDENTIFIER_RE.match(identifier):
        raise InvalidRelation("Relation identifier can only be [a-zA-Z]+")
    if direction not in DIRECTIONS:
        raise InvalidRelation("Relation direction not supported.")


Friend = Relation.extend("friend", Mutual)
Follower = Relation.extend("follow", Inward)
Following = Relation.extend("follow", Outward)


@dataclass
class RelationQuery:
    relation_cls: type
    limit: int = DEFAULT_LIMIT
    page: int = 0

    @property
    def identifier(self) -> str:
        return self.relation_cls.identifier

    @property
    def direction(self) -> str:
        return self.relation_cls.direction

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.identifier,
            "direction": self.direction,
            "limit": self.limit,
            "page": self.page,
        }


class UserList(list):
    """查询结果列表，附带服务端返回的 overall_count。"""

    def __init__(self, users: Iterable[Dict[str, Any]] = (), overall_count: Optional[int] = None) -> None:
        super().__init__(users)
        self.overall_count = overall_count


@dataclass
class RelationResult:
    results: List[Dict[str, Any]]
    success: List[Any] = field(default_factory=list)
    fails: List[Dict[str, Any]] = field(default_factory=list)
    partial_error: bool = False

    def __post_init__(self) -> None:
        for item in self.results:
            if item.get("type") == "error":
                self.fails.append(item)
            elif item.get("type") == "user":
                self.success.append(item.get("data"))
            else:
                # remove 只回传 id
                self.success.append(item.get("id"))
        self.partial_error = bool(self.fails)


class RelationContainer:
    Friend = Friend
    Follower = Follower
    Following = Following

    def __init__(self, container: "Container") -> None:
        self.container = container

    async def query(self, query: RelationQuery) -> UserList:
        body = await self.container.make_request("relation:query", query.to_json())
        users = [item.get("data") for item in body.get("result") or [] if item.get("type") == "user"]
        info = body.get("info") or {}
        return UserList(users, overall_count=info.get("count"))

    async def query_friend(self, limit: int = DEFAULT_LIMIT, page: int = 0) -> UserList:
        return await self.query(RelationQuery(Friend, limit=limit, page=page))

    async def query_follower(self, limit: int = DEFAULT_LIMIT, page: int = 0) -> UserList:
        return await self.query(RelationQuery(Follower, limit=limit, page=page))

    async def query_following(self, limit: int = DEFAULT_LIMIT, page: int = 0) -> UserList:
        return await self.query(RelationQuery(Following, limit=limit, page=page))

    async def add(self, relation: Relation) -> RelationResult:
        body = await self.container.make_request(
            "relation:add",
            {"name": relation.identifier, "direction": relation.direction, "targets": relation.targets_id},
        )
        return RelationResult(body.get("result") or [])

    async def remove(self, relation: Relation) -> RelationResult:
        body = await self.container.make_request(
            "relation:remove",
            {"name": relation.identifier, "direction": relation.direction, "targets": relation.targets_id},
        )
        return RelationResult(body.get("result") or [])


__all__ = [
    "Outward",
    "Inward",
    "Mutual",
    "Relation",
    "Friend",
    "Follower",
    "Following",
    "RelationQuery",
    "RelationResult",
    "RelationContainer",
    "UserList",
]
