from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator


class CategoryRatings(BaseModel):
    """관계 영역별 1~10 자기평가 점수 (범위 검증은 호출 측 책임)"""

    comunicacao: int
    conexao_emocional: int
    apoio_mutuo: int
    transparencia_confianca: int
    intimidade_fisica: int
    saude_mental: int
    resolucao_conflitos: int
    seguranca_relacionamento: int
    alinhamento_objetivos: int
    satisfacao_geral: int
    autocuidado: int
    gratidao: int
    qualidade_tempo: int


CATEGORY_LABELS: dict[str, str] = {
    "comunicacao": "Comunicação",
    "conexao_emocional": "Conexão Emocional",
    "apoio_mutuo": "Apoio Mútuo",
    "transparencia_confianca": "Transparência e Confiança",
    "intimidade_fisica": "Intimidade Física",
    "saude_mental": "Saúde Mental",
    "resolucao_conflitos": "Resolução de Conflitos",
    "seguranca_relacionamento": "Segurança no Relacionamento",
    "alinhamento_objetivos": "Alinhamento em Objetivos",
    "satisfacao_geral": "Satisfação Geral",
    "autocuidado": "Autocuidado",
    "gratidao": "Gratidão",
    "qualidade_tempo": "Qualidade do Tempo",
}


class AssessmentCreate(BaseModel):
    ratings: CategoryRatings
    comments: str | None = None
    gratitude: str | None = None

    @model_validator(mode="after")
    def _check_rating_range(self) -> "AssessmentCreate":
        out_of_range = [name for name, value in self.ratings.model_dump().items() if not 1 <= value <= 10]
        if out_of_range:
            raise ValueError(f"Notas devem estar entre 1 e 10: {', '.join(out_of_range)}")
        return self


class DailyAssessment(BaseModel):
    id: str | None = None
    user_id: str
    partner_id: str | None = None
    date: datetime
    ratings: CategoryRatings
    comments: str | None = None
    gratitude: str | None = None
    created_at: datetime | None = None


class RadarPoint(BaseModel):
    subject: str
    user: float
    partner: float


class AssessmentStatistics(BaseModel):
    time_series: list[dict[str, Any]] = Field(default_factory=list)
    radar_chart: list[RadarPoint] = Field(default_factory=list)
    intimacy_balance: list[RadarPoint] = Field(default_factory=list)
    trends: dict[str, dict[str, str]] = Field(default_factory=dict)
