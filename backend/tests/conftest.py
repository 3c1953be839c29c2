from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest
from bson import ObjectId

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT))

from backend.app.db import init  # noqa: E402
from backend.app.db.mongo import MongoConnectionManager  # noqa: E402
from backend.app.db.redis import RedisConnectionManager  # noqa: E402
from backend.app.services import llm as llm_service  # noqa: E402

_OPERATORS = {
    "$gte": lambda value, arg: value is not None and value >= arg,
    "$gt": lambda value, arg: value is not None and value > arg,
    "$lte": lambda value, arg: value is not None and value <= arg,
    "$lt": lambda value, arg: value is not None and value < arg,
    "$in": lambda value, arg: value in arg,
}


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    for key, condition in query.items():
        value = doc.get(key)
        if isinstance(condition, dict) and condition and all(op in _OPERATORS for op in condition):
            if not all(_OPERATORS[op](value, arg) for op, arg in condition.items()):
                return False
        elif value != condition:
            return False
    return True


class _InsertResult:
    def __init__(self, inserted_id: ObjectId) -> None:
        self.inserted_id = inserted_id


class _DummyCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "_DummyCursor":
        self._docs.sort(key=lambda doc: doc.get(key), reverse=direction < 0)
        return self

    def limit(self, count: int) -> "_DummyCursor":
        if count:
            self._docs = self._docs[:count]
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield dict(doc)


class _DummyCollection:
    """find/find_one/insert_one/update_one만 지원하는 메모리 컬렉션"""

    def __init__(self) -> None:
        self.docs: list[dict[str, Any]] = []

    async def create_index(self, *_args: Any, **_kwargs: Any) -> None:
        return None

    async def insert_one(self, doc: dict[str, Any]) -> _InsertResult:
        stored = dict(doc)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return _InsertResult(stored["_id"])

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        for doc in self.docs:
            if _matches(doc, query):
                return dict(doc)
        return None

    def find(self, query: dict[str, Any] | None = None) -> _DummyCursor:
        return _DummyCursor([doc for doc in self.docs if _matches(doc, query or {})])

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> None:
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(update.get("$set", {}))
                return None
        return None


class _DummyDatabase:
    def __init__(self) -> None:
        self._collections: dict[str, _DummyCollection] = {}

    def __getitem__(self, name: str) -> _DummyCollection:
        return self._collections.setdefault(name, _DummyCollection())


class _DummyMongoClient:
    def __init__(self) -> None:
        self._db = _DummyDatabase()

    def __getitem__(self, _name: str) -> _DummyDatabase:
        return self._db

    def close(self) -> None:
        return None


class _DummyRedisClient:
    """LLM 작업 해시와 업적 집합에 필요한 명령만 흉내냄"""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = {}
        self.sets: dict[str, set[str]] = {}

    async def hset(self, key: str, mapping: dict[str, str]) -> int:
        self.hashes.setdefault(key, {}).update(mapping)
        return len(mapping)

    async def hgetall(self, key: str) -> dict[str, str]:
        return dict(self.hashes.get(key, {}))

    async def expire(self, _key: str, _seconds: int) -> bool:
        return True

    async def smembers(self, key: str) -> set[str]:
        return set(self.sets.get(key, set()))

    async def sadd(self, key: str, *members: str) -> int:
        bucket = self.sets.setdefault(key, set())
        before = len(bucket)
        bucket.update(members)
        return len(bucket) - before

    async def aclose(self) -> None:
        return None


@pytest.fixture
def dummy_redis() -> _DummyRedisClient:
    return _DummyRedisClient()


@pytest.fixture
def dummy_mongo() -> _DummyMongoClient:
    return _DummyMongoClient()


@pytest.fixture(autouse=True)
def stub_infrastructure(
    monkeypatch: pytest.MonkeyPatch,
    dummy_mongo: _DummyMongoClient,
    dummy_redis: _DummyRedisClient,
) -> None:
    """
    MongoDB/Redis 커넥션을 메모리 stub으로 대체하는 fixture

    테스트마다 새 저장소를 사용하므로 테스트 간 데이터가 공유되지 않습니다.
    """

    async def _noop_ensure_indexes(_db: Any) -> None:
        return None

    async def _noop_close(cls: type) -> None:
        return None

    monkeypatch.setattr(MongoConnectionManager, "get_client", classmethod(lambda cls: dummy_mongo))
    monkeypatch.setattr(RedisConnectionManager, "get_client", classmethod(lambda cls: dummy_redis))
    monkeypatch.setattr(MongoConnectionManager, "close", classmethod(lambda cls: _noop_close(cls)))
    monkeypatch.setattr(RedisConnectionManager, "close", classmethod(lambda cls: _noop_close(cls)))
    monkeypatch.setattr(init, "ensure_indexes", _noop_ensure_indexes)


MOCK_ANALYSIS_JSON = """```json
{
  "overallHealth": {"score": 78, "trend": "up"},
  "strengthsAndChallenges": {
    "strengths": ["Boa comunicação"],
    "challenges": ["Pouco tempo de qualidade"]
  },
  "communicationSuggestions": ["Reservem 10 minutos por dia para conversar"],
  "actionItems": ["Planejar um encontro no fim de semana"]
}
```"""

MOCK_INSIGHT_TEXT = "Vocês estão se comunicando bem. Continuem reservando tempo um para o outro."


@pytest.fixture(autouse=True)
def mock_llm_service(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Gemini 호출을 mock하는 fixture
    JSON 전용 지시가 포함된 호출에는 분석 JSON을, 그 외에는 인사이트 텍스트를 반환합니다.
    """

    async def mock_invoke_gemini(system_prompt: str, _user_prompt: str, _temperature: float | None = None) -> str:
        if llm_service.JSON_ONLY_INSTRUCTION in system_prompt:
            return MOCK_ANALYSIS_JSON
        return MOCK_INSIGHT_TEXT

    monkeypatch.setattr(llm_service, "_invoke_gemini", mock_invoke_gemini)

