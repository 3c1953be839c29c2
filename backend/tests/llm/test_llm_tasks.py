from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi import HTTPException

from backend.app.schemas.assessments import CategoryRatings, DailyAssessment
from backend.app.services import llm_tasks
from backend.app.services.analysis_history import ANALYSIS_HISTORY_COL
from backend.app.services.llm_tasks import LLMTaskType


def _payload() -> dict[str, Any]:
    ratings = CategoryRatings(**{name: 7 for name in CategoryRatings.model_fields})
    when = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    return {
        "user_id": "u1",
        "partner_id": "u2",
        "user_assessment": DailyAssessment(user_id="u1", date=when, ratings=ratings).model_dump(mode="json"),
        "partner_assessment": DailyAssessment(user_id="u2", date=when, ratings=ratings).model_dump(mode="json"),
    }


async def _wait_for_finish(task_id: str) -> dict[str, Any]:
    state: dict[str, Any] = {}
    for _ in range(20):
        state = await llm_tasks.get_task_status(task_id)
        if state["status"] in ("completed", "failed"):
            break
        await asyncio.sleep(0)
    return state


def test_relationship_task_completes_and_saves(dummy_mongo) -> None:
    async def scenario() -> dict[str, Any]:
        task_id = await llm_tasks.enqueue_llm_task(LLMTaskType.RELATIONSHIP_ANALYSIS, _payload())
        return await _wait_for_finish(task_id)

    state = asyncio.run(scenario())

    assert state["status"] == "completed"
    assert state["type"] == "relationship_analysis"
    assert state["result"]["partner_id"] == "u2"
    assert state["result"]["analysis"]["action_items"] == ["Planejar um encontro no fim de semana"]
    saved = dummy_mongo["any"][ANALYSIS_HISTORY_COL].docs
    assert len(saved) == 1
    assert saved[0]["type"] == "collective"


def test_failed_task_records_error(monkeypatch: pytest.MonkeyPatch) -> None:
    async def broken_runner(_payload: dict[str, Any]) -> dict[str, Any]:
        raise RuntimeError("sem resposta do modelo")

    monkeypatch.setitem(llm_tasks._RUNNERS, LLMTaskType.RELATIONSHIP_ANALYSIS, broken_runner)

    async def scenario() -> dict[str, Any]:
        task_id = await llm_tasks.enqueue_llm_task(LLMTaskType.RELATIONSHIP_ANALYSIS, {})
        return await _wait_for_finish(task_id)

    state = asyncio.run(scenario())

    assert state["status"] == "failed"
    assert state["error"] == "sem resposta do modelo"
    assert "finished_at" in state


def test_unknown_task_is_not_found() -> None:
    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(llm_tasks.get_task_status("inexistente"))
    assert exc_info.value.status_code == 404


def test_running_task_is_tracked_until_done() -> None:
    before = set(llm_tasks._background_tasks)

    async def scenario() -> tuple[int, dict[str, Any]]:
        task_id = await llm_tasks.enqueue_llm_task(LLMTaskType.RELATIONSHIP_ANALYSIS, _payload())
        tracked = len(llm_tasks._background_tasks - before)
        state = await _wait_for_finish(task_id)
        for _ in range(3):
            await asyncio.sleep(0)
        return tracked, state

    tracked, state = asyncio.run(scenario())

    assert tracked == 1
    assert state["status"] == "completed"
    assert llm_tasks._background_tasks == before


def test_task_status_is_scoped_to_couple() -> None:
    async def scenario() -> tuple[dict[str, Any], dict[str, Any]]:
        task_id = await llm_tasks.enqueue_llm_task(LLMTaskType.RELATIONSHIP_ANALYSIS, _payload())
        await _wait_for_finish(task_id)
        own = await llm_tasks.get_task_status(task_id, "u1")
        partner = await llm_tasks.get_task_status(task_id, "u2")
        with pytest.raises(HTTPException) as exc_info:
            await llm_tasks.get_task_status(task_id, "u3")
        assert exc_info.value.status_code == 404
        return own, partner

    own, partner = asyncio.run(scenario())

    assert own["user_id"] == "u1"
    assert partner["status"] == "completed"
