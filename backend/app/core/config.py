from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    project_name: str = "Relationship Wellness Tracker"
    api_prefix: str = "/api"

    mongodb_uri: str = Field(default="mongodb://mongo:27017")
    mongodb_db: str = Field(default="relationship_wellness")

    redis_url: str = Field(default="redis://redis:6379/0")

    jwt_secret_key: str = Field(default="change-me")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24)

    password_hash_scheme: str = Field(default="argon2")

    # 분석 엔드포인트는 브라우저 어디서든 호출 가능해야 함
    cors_origins: str = Field(default="*")

    # Google Gemini API 설정
    gemini_api_key: str = Field(default="", description="Google Gemini API 키 (환경 변수: GEMINI_API_KEY)")
    gemini_model: str = Field(default="gemini-2.5-flash")
    llm_temperature: float = Field(default=0.7)

    achievement_store: Literal["memory", "redis"] = Field(default="memory")
    pairing_window_hours: int = Field(default=24)

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()
