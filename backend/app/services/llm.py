from __future__ import annotations

import asyncio
import json
import logging
from functools import lru_cache
from typing import Any

from google import genai
from google.genai import types

from ..core.config import settings
from ..schemas.assessments import CATEGORY_LABELS, DailyAssessment
from .analysis_normalizer import strip_code_fences

logger = logging.getLogger(__name__)

JSON_ONLY_INSTRUCTION = (
    "Responda APENAS com um objeto JSON válido, sem texto adicional, sem markdown e sem comentários."
)
INSIGHT_SYSTEM_PROMPT = (
    "Você é um terapeuta de casais experiente que fornece insights personalizados sobre relacionamentos."
)
ANALYSIS_SYSTEM_PROMPT = (
    "Você é um terapeuta de casais experiente que analisa a saúde dos relacionamentos "
    "com base em avaliações diárias e fornece insights valiosos."
)


class LLMError(Exception):
    """LLM 호출 실패 (상위 API 오류)"""


class LLMInvalidJSONError(LLMError):
    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


def _format_ratings(assessment: DailyAssessment) -> str:
    ratings = assessment.ratings.model_dump()
    return "\n".join(f"- {label}: {ratings[field]}" for field, label in CATEGORY_LABELS.items())


def _format_context(context: dict[str, Any] | None) -> str:
    if not context:
        return ""
    lines = ["Contexto do Relacionamento:"]
    for key, label in (
        ("duration", "Duração"),
        ("status", "Status"),
        ("type", "Tipo"),
        ("current_dynamics", "Dinâmica Atual"),
        ("strengths", "Pontos Fortes"),
        ("recurring_problems", "Problemas Recorrentes"),
        ("app_goals", "Objetivos com o Acompanhamento"),
    ):
        if context.get(key):
            lines.append(f"- {label}: {context[key]}")
    for key, label in (("goals", "Objetivos"), ("challenges", "Desafios"), ("values", "Valores")):
        if context.get(key):
            lines.append(f"- {label}: {', '.join(str(v) for v in context[key])}")
    return "\n".join(lines)


def _format_insight_prompt(assessment: DailyAssessment, context: dict[str, Any] | None) -> str:
    extras = []
    if assessment.comments:
        extras.append(f"Comentários: {assessment.comments}")
    if assessment.gratitude:
        extras.append(f"Gratidão: {assessment.gratitude}")
    return f"""
Analise a avaliação diária do relacionamento e forneça um insight personalizado.

Avaliação:
{_format_ratings(assessment)}

{chr(10).join(extras)}

{_format_context(context)}

Por favor, forneça um insight personalizado sobre o estado atual do relacionamento, destacando pontos positivos e
áreas que merecem atenção. O insight deve ser motivador e construtivo, oferecendo sugestões práticas quando apropriado.
"""


def _category_schema() -> str:
    entries = ",\n".join(
        f'    "{field}": {{"score": number, "trend": "up" | "down" | "stable", "insights": string[]}}'
        for field in CATEGORY_LABELS
    )
    return "{\n" + entries + "\n  }"


def _format_analysis_prompt(
    user_assessment: DailyAssessment,
    partner_assessment: DailyAssessment,
    context: dict[str, Any] | None,
) -> str:
    return f"""
Analise a saúde do relacionamento com base nas avaliações diárias do casal e no contexto do relacionamento.

Avaliação do Usuário:
{_format_ratings(user_assessment)}

Avaliação do Parceiro:
{_format_ratings(partner_assessment)}

{_format_context(context)}

Forneça uma análise detalhada do relacionamento no seguinte formato JSON:
{{
  "overallHealth": {{"score": number (0-100), "trend": "up" | "down" | "stable"}},
  "categories": {_category_schema()},
  "strengthsAndChallenges": {{"strengths": string[], "challenges": string[]}},
  "communicationSuggestions": string[],
  "actionItems": string[],
  "relationshipDynamics": {{
    "positivePatterns": string[],
    "concerningPatterns": string[],
    "growthAreas": string[]
  }}
}}
"""


@lru_cache
def get_gemini_client() -> genai.Client:
    if not settings.gemini_api_key:
        raise LLMError("GEMINI_API_KEY não configurada. Adicione GEMINI_API_KEY ao arquivo .env.")
    return genai.Client(api_key=settings.gemini_api_key)


async def _invoke_gemini(system_prompt: str, user_prompt: str, temperature: float | None = None) -> str:
    """Google Gemini API를 사용하여 프롬프트를 처리합니다."""
    client = get_gemini_client()
    config = types.GenerateContentConfig(
        system_instruction=system_prompt,
        temperature=settings.llm_temperature if temperature is None else temperature,
    )
    try:
        response = await asyncio.to_thread(
            client.models.generate_content,
            model=settings.gemini_model,
            contents=user_prompt,
            config=config,
        )
    except Exception as exc:
        logger.exception("Gemini API 호출 실패")
        raise LLMError(f"Falha na chamada ao modelo: {exc}") from exc

    text = getattr(response, "text", None)
    if not text:
        raise LLMError("O modelo retornou uma resposta vazia.")
    return text


async def generate_analysis(system_prompt: str, user_prompt: str, temperature: float | None = None) -> str:
    """
    JSON 응답을 강제하고 파싱으로 재검증한 뒤 정리된 JSON 문자열을 반환합니다.

    Raises:
        LLMError: 상위 호출 실패
        LLMInvalidJSONError: 응답이 JSON이 아님
    """
    raw = await _invoke_gemini(f"{system_prompt}\n\n{JSON_ONLY_INSTRUCTION}", user_prompt, temperature)
    cleaned = strip_code_fences(raw)
    try:
        json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning("LLM 응답이 JSON이 아님: %s", raw[:200])
        raise LLMInvalidJSONError(f"Resposta do modelo não é JSON válido: {exc}", raw) from exc
    return cleaned


async def generate_daily_insight(assessment: DailyAssessment, context: dict[str, Any] | None = None) -> str:
    insight = await _invoke_gemini(INSIGHT_SYSTEM_PROMPT, _format_insight_prompt(assessment, context))
    return insight.strip()


async def generate_relationship_analysis(
    user_assessment: DailyAssessment,
    partner_assessment: DailyAssessment,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    result = await generate_analysis(
        ANALYSIS_SYSTEM_PROMPT,
        _format_analysis_prompt(user_assessment, partner_assessment, context),
    )
    parsed = json.loads(result)
    if not isinstance(parsed, dict):
        raise LLMInvalidJSONError("Formato de resposta do modelo inesperado.", result)
    return parsed
