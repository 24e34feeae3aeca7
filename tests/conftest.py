"""Pytest configuration and fixtures."""

import asyncio
import copy
import os
import time
from collections.abc import Callable, Generator
from typing import Any

import jwt
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError, OperationFailure

# Set test environment variables before importing application modules
TEST_JWT_SECRET = "test-jwt-secret-for-unit-tests"
os.environ["JWT_SECRET"] = TEST_JWT_SECRET
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_DB", "devconnector_test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")


class FakeInsertOneResult:
    def __init__(self, inserted_id: ObjectId) -> None:
        self.inserted_id = inserted_id


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        return self._docs if length is None else self._docs[:length]


class FakeCollection:
    """In-memory stand-in for the subset of Motor's collection API the repos use.

    Every call yields to the event loop before touching data so concurrent
    coroutines interleave like they would against a real server. Unique
    indexes created with `create_index` are enforced on every write.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.unique_fields: list[str] = []
        self.index_names: list[str] = []
        self.failures: dict[str, Exception] = {}

    def fail_on(self, op: str, exc: Exception) -> None:
        self.failures[op] = exc

    async def _io(self, op: str) -> None:
        await asyncio.sleep(0)
        if op in self.failures:
            raise self.failures[op]

    @staticmethod
    def _matches(doc: dict[str, Any], flt: dict[str, Any]) -> bool:
        for key, cond in flt.items():
            if isinstance(cond, dict) and "$in" in cond:
                if doc.get(key) not in cond["$in"]:
                    return False
            elif doc.get(key) != cond:
                return False
        return True

    @staticmethod
    def _project(doc: dict[str, Any], projection: dict[str, int] | None) -> dict[str, Any]:
        if not projection:
            return copy.deepcopy(doc)
        out = {"_id": doc["_id"]}
        for key, flag in projection.items():
            if flag and key in doc:
                out[key] = copy.deepcopy(doc[key])
        return out

    def _check_unique(self, doc: dict[str, Any], skip_id: Any = None) -> None:
        for field in self.unique_fields:
            for other in self.docs:
                if other["_id"] != skip_id and field in doc and other.get(field) == doc.get(field):
                    raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: {field}")

    def _index_of(self, flt: dict[str, Any]) -> int | None:
        for i, doc in enumerate(self.docs):
            if self._matches(doc, flt):
                return i
        return None

    async def find_one(self, flt: dict[str, Any], projection: dict[str, int] | None = None):
        await self._io("find_one")
        i = self._index_of(flt)
        return None if i is None else self._project(self.docs[i], projection)

    def find(self, flt: dict[str, Any] | None = None, projection: dict[str, int] | None = None) -> FakeCursor:
        if "find" in self.failures:
            raise self.failures["find"]
        docs = [self._project(d, projection) for d in self.docs if self._matches(d, flt or {})]
        return FakeCursor(docs)

    async def insert_one(self, doc: dict[str, Any]) -> FakeInsertOneResult:
        await self._io("insert_one")
        data = copy.deepcopy(doc)
        data.setdefault("_id", ObjectId())
        self._check_unique(data)
        self.docs.append(data)
        return FakeInsertOneResult(data["_id"])

    async def find_one_and_replace(self, flt: dict[str, Any], replacement: dict[str, Any], return_document: bool = False):
        await self._io("find_one_and_replace")
        i = self._index_of(flt)
        if i is None:
            return None
        old = self.docs[i]
        new = copy.deepcopy(replacement)
        new["_id"] = old["_id"]
        self._check_unique(new, skip_id=old["_id"])
        self.docs[i] = new
        return copy.deepcopy(new if return_document else old)

    async def find_one_and_delete(self, flt: dict[str, Any]):
        await self._io("find_one_and_delete")
        i = self._index_of(flt)
        if i is None:
            return None
        return self.docs.pop(i)

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, name: str | None = None) -> str:
        await self._io("create_index")
        if unique:
            self.unique_fields.extend(k for k, _ in keys if k not in self.unique_fields)
        ix_name = name or "_".join(f"{k}_{d}" for k, d in keys)
        self.index_names.append(ix_name)
        return ix_name


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}
        self.validators: dict[str, Any] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    async def command(self, cmd: Any) -> dict[str, Any]:
        await asyncio.sleep(0)
        if cmd == "ping":
            return {"ok": 1}
        if isinstance(cmd, dict) and "collMod" in cmd:
            raise OperationFailure(f"ns does not exist: {cmd['collMod']}")
        raise OperationFailure(f"unsupported command {cmd!r}")

    async def list_collection_names(self) -> list[str]:
        return [n for n in self.collections if n in self.validators]

    async def create_collection(self, name: str, validator: Any = None) -> FakeCollection:
        self.validators[name] = validator
        return self[name]


@pytest.fixture
def fake_db(monkeypatch: pytest.MonkeyPatch) -> FakeDatabase:
    """Install an in-memory database behind `get_async_db()`."""
    from devconnector.infrastructure.db import mongo_async

    db = FakeDatabase()
    monkeypatch.setattr(mongo_async, "_adb", db)
    return db


@pytest.fixture
def unique_profiles(fake_db: FakeDatabase) -> FakeDatabase:
    """Fake database with the unique `profiles.user` index applied."""
    fake_db["profiles"].unique_fields.append("user")
    return fake_db


@pytest.fixture
def seed_account(fake_db: FakeDatabase) -> Callable[..., ObjectId]:
    """Insert an account document directly and return its id."""

    def _seed(name: str = "Jane Doe", avatar: str | None = "//gravatar/jane", email: str | None = None) -> ObjectId:
        oid = ObjectId()
        fake_db["accounts"].docs.append(
            {"_id": oid, "name": name, "email": email or f"{oid}@example.com", "avatar": avatar}
        )
        return oid

    return _seed


def create_test_token(
    sub: str | None,
    exp_offset: int = 3600,
    secret: str = TEST_JWT_SECRET,
    legacy: bool = False,
) -> str:
    """Create a test JWT token (`sub` claim, or the legacy `user.id` shape)."""
    now = int(time.time())
    payload: dict[str, Any] = {"iat": now, "exp": now + exp_offset}
    if legacy:
        payload["user"] = {"id": sub}
    elif sub is not None:
        payload["sub"] = sub
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def auth_headers() -> Callable[[Any], dict[str, str]]:
    def _headers(owner_id: Any) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_test_token(str(owner_id))}"}

    return _headers


@pytest.fixture
def client(fake_db: FakeDatabase) -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application.

    Startup runs against the fake database, so the bootstrap applies the
    unique `profiles.user` index there.
    """
    from devconnector.main import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
