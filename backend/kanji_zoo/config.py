from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    QUESTION_TIME_LIMIT_MS: int = 10_000
    REVEAL_DURATION_MS: int = 3_500
    # 10 items x 2 rounds (symbol + phonetic) = 20 questions
    ITEMS_PER_GAME: int = 10
    MAX_NAME_LENGTH: int = 15
    CHOICE_COUNT: int = 4
    SCORE_CEILING: int = 1000
    SCORE_FLOOR: int = 100

    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    @property
    def total_questions(self) -> int:
        return self.ITEMS_PER_GAME * 2


@lru_cache
def get_settings() -> Settings:
    return Settings()


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
