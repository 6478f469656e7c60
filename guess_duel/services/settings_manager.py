import logging
from typing import Any, Optional

from ..config import CATEGORY_LABELS, Category, GameSettings, load_settings

logger = logging.getLogger(__name__)


class SettingsManager:
    """
    Holds the live game settings in memory.

    Changes go through pydantic validation, so an invalid update leaves the
    current settings untouched.
    """

    def __init__(self, settings: Optional[GameSettings] = None):
        self._settings = settings if settings is not None else load_settings()

    def get(self) -> GameSettings:
        return self._settings

    def update(self, **changes: Any) -> GameSettings:
        """Apply a partial update and return the new settings."""
        unknown = set(changes) - set(GameSettings.model_fields)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        merged = self._settings.model_dump()
        merged.update(changes)
        self._settings = GameSettings(**merged)
        logger.info(f"Settings updated: {', '.join(sorted(changes))}")
        return self._settings

    def reset_to_defaults(self) -> GameSettings:
        """Restore the defaults but keep the provider and API key."""
        self._settings = GameSettings(
            ai_provider=self._settings.ai_provider,
            api_key=self._settings.api_key,
        )
        logger.info("Settings reset to defaults")
        return self._settings

    def has_api_key(self) -> bool:
        return self._settings.has_api_key()

    @staticmethod
    def category_label(value) -> str:
        return CATEGORY_LABELS[Category(value)]
