"""
커플 종합 분석처럼 오래 걸리는 LLM 호출을 백그라운드에서 실행하고
진행 상태를 Redis 해시(llm:task:<id>)에 기록합니다.

상태 전이: pending → running → completed | failed
"""
from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable
from uuid import uuid4

from fastapi import HTTPException, status

from ..db.mongo import MongoConnectionManager
from ..db.redis import RedisConnectionManager
from ..schemas.analysis import LLMSource
from ..schemas.assessments import DailyAssessment
from . import llm
from .analysis_history import save_analysis
from .analysis_normalizer import normalize_analysis

logger = logging.getLogger(__name__)

TASK_KEY_PREFIX = "llm:task:"
TASK_TTL_SECONDS = 60 * 60


class LLMTaskType(str, Enum):
    RELATIONSHIP_ANALYSIS = "relationship_analysis"


TaskRunner = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]

# 완료 전까지 실행 중인 작업 참조 보관
_background_tasks: set[asyncio.Task] = set()


def _task_key(task_id: str) -> str:
    return f"{TASK_KEY_PREFIX}{task_id}"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _update_task(task_id: str, **fields: Any) -> None:
    client = RedisConnectionManager.get_client()
    mapping = {
        key: json.dumps(value) if isinstance(value, (dict, list)) else str(value) for key, value in fields.items()
    }
    await client.hset(_task_key(task_id), mapping=mapping)
    await client.expire(_task_key(task_id), TASK_TTL_SECONDS)


async def run_relationship_analysis(payload: dict[str, Any]) -> dict[str, Any]:
    """두 사람의 오늘 평가로 종합 분석을 만들고 이력에 저장합니다."""
    content = await llm.generate_relationship_analysis(
        DailyAssessment(**payload["user_assessment"]),
        DailyAssessment(**payload["partner_assessment"]),
        payload.get("context"),
    )
    record = await save_analysis(
        MongoConnectionManager.get_database(),
        payload["user_id"],
        "collective",
        normalize_analysis(LLMSource(content=content)),
        partner_id=payload.get("partner_id"),
    )
    return record.model_dump(mode="json")


_RUNNERS: dict[LLMTaskType, TaskRunner] = {
    LLMTaskType.RELATIONSHIP_ANALYSIS: run_relationship_analysis,
}


async def _execute(task_id: str, task_type: LLMTaskType, payload: dict[str, Any]) -> None:
    await _update_task(task_id, status="running", started_at=_timestamp())
    try:
        result = await _RUNNERS[task_type](payload)
    except Exception as exc:
        logger.exception("LLM 작업 실패 (task=%s, type=%s)", task_id, task_type.value)
        await _update_task(task_id, status="failed", error=str(exc), finished_at=_timestamp())
        return
    await _update_task(task_id, status="completed", result=result, finished_at=_timestamp())


async def enqueue_llm_task(task_type: LLMTaskType, payload: dict[str, Any]) -> str:
    task_id = uuid4().hex
    await _update_task(
        task_id,
        status="pending",
        type=task_type.value,
        user_id=payload.get("user_id", ""),
        partner_id=payload.get("partner_id") or "",
        created_at=_timestamp(),
    )
    task = asyncio.create_task(_execute(task_id, task_type, payload))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    logger.info("LLM 작업 등록 (task=%s, type=%s)", task_id, task_type.value)
    return task_id


async def get_task_status(task_id: str, user_id: str | None = None) -> dict[str, Any]:
    """작업 상태 조회. user_id 가 주어지면 요청자나 그 파트너의 작업만 보여줍니다."""
    raw = await RedisConnectionManager.get_client().hgetall(_task_key(task_id))
    if not raw or (user_id is not None and user_id not in (raw.get("user_id"), raw.get("partner_id"))):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tarefa não encontrada.")

    state: dict[str, Any] = {"task_id": task_id}
    for key, value in raw.items():
        # result 외의 필드는 평문 문자열로 저장됨
        if key == "result":
            state[key] = json.loads(value)
        else:
            state[key] = value
    return state
