"""
Settings for Guess Duel.

- Loads a .env file (python-dotenv), then GUESS_DUEL_* environment variables over the defaults.
- GameSettings is the validated settings object consumed by the game controller and the AI layer.
"""
import os
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "GUESS_DUEL_"
DEFAULT_NAMES_PATH = Path(__file__).parent / "game_data" / "names.json"


class Category(str, Enum):
    """Scope a secret name is drawn from."""
    ANY = "any"
    ANCIENT_EMPEROR = "ancient_emperor"
    ANCIENT_SCHOLAR = "ancient_scholar"
    CLASSIC_CHARACTER = "classic_character"
    ENTERTAINMENT_STAR = "entertainment_star"
    SPORTS_STAR = "sports_star"
    ENTREPRENEUR = "entrepreneur"
    JOURNEY_WEST = "journey_west"


CATEGORY_LABELS: Dict[Category, str] = {
    Category.ANY: "不限",
    Category.ANCIENT_EMPEROR: "中国古代皇帝",
    Category.ANCIENT_SCHOLAR: "中国古代文人",
    Category.CLASSIC_CHARACTER: "中国四大名著人物",
    Category.ENTERTAINMENT_STAR: "中国娱乐圈明星",
    Category.SPORTS_STAR: "中国体育明星",
    Category.ENTREPRENEUR: "中国知名企业家",
    Category.JOURNEY_WEST: "中国西游记主角",
}

AI_PROVIDERS: Dict[str, str] = {
    "zhipu": "智谱 AI (GLM)",
    "gemini": "Google Gemini",
}

MIN_QUESTIONS = 5
MAX_QUESTIONS = 30


class ProviderConfig(BaseModel):
    """Which text-generation provider to call and with what credentials."""
    provider: str
    api_key: str
    model: Optional[str] = None


class GameSettings(BaseModel):
    player1_name: str = "甜大官"
    player2_name: str = "万小布"
    category: Category = Category.ANY
    max_questions: int = Field(default=12, ge=MIN_QUESTIONS, le=MAX_QUESTIONS)
    ai_provider: str = "zhipu"
    api_key: str = ""

    @field_validator("ai_provider")
    @classmethod
    def _known_provider(cls, value: str) -> str:
        if value not in AI_PROVIDERS:
            raise ValueError(f"Unknown AI provider: {value}")
        return value

    @field_validator("api_key")
    @classmethod
    def _strip_key(cls, value: str) -> str:
        return value.strip()

    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def ensure_playable(self) -> None:
        """Raise ConfigError unless a judgment call could be made with these settings."""
        if not self.has_api_key():
            raise ConfigError("Configure an API key in the game settings first")

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(provider=self.ai_provider, api_key=self.api_key)


def _env(name: str) -> Optional[str]:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or value.strip() == "":
        return None
    return value


def load_settings() -> GameSettings:
    """Build GameSettings from .env and environment variables (env wins over defaults)."""
    load_dotenv()
    overrides: Dict[str, Any] = {}
    for field_name in GameSettings.model_fields:
        value = _env(field_name.upper())
        if value is not None:
            overrides[field_name] = value
    settings = GameSettings(**overrides)
    logger.info(
        f"Loaded settings: provider={settings.ai_provider} category={settings.category.value} "
        f"max_questions={settings.max_questions} api_key_set={settings.has_api_key()}"
    )
    return settings


def names_path() -> Path:
    """Location of the local name corpus."""
    load_dotenv()
    override = _env("NAMES_PATH")
    return Path(override) if override else DEFAULT_NAMES_PATH
