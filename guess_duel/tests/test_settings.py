import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from guess_duel.config import DEFAULT_NAMES_PATH, Category, GameSettings, load_settings, names_path
from guess_duel.exceptions import ConfigError
from guess_duel.services.settings_manager import SettingsManager


class GameSettingsTest(unittest.TestCase):

    def test_defaults(self):
        settings = GameSettings()
        self.assertEqual(settings.category, Category.ANY)
        self.assertEqual(settings.max_questions, 12)
        self.assertEqual(settings.ai_provider, "zhipu")
        self.assertFalse(settings.has_api_key())

    def test_question_budget_bounds(self):
        GameSettings(max_questions=5)
        GameSettings(max_questions=30)
        for value in (4, 31):
            with self.assertRaises(ValidationError):
                GameSettings(max_questions=value)

    def test_unknown_provider_rejected(self):
        with self.assertRaises(ValidationError):
            GameSettings(ai_provider="openai")

    def test_ensure_playable_needs_key(self):
        with self.assertRaises(ConfigError):
            GameSettings(api_key="  ").ensure_playable()
        GameSettings(api_key="k").ensure_playable()

    def test_provider_config(self):
        config = GameSettings(ai_provider="gemini", api_key=" k ").provider_config()
        self.assertEqual(config.provider, "gemini")
        self.assertEqual(config.api_key, "k")


@patch("guess_duel.config.load_dotenv")
class LoadSettingsTest(unittest.TestCase):

    def test_environment_overrides(self, _load_dotenv):
        env = {
            "GUESS_DUEL_AI_PROVIDER": "gemini",
            "GUESS_DUEL_API_KEY": "secret",
            "GUESS_DUEL_CATEGORY": "sports_star",
            "GUESS_DUEL_MAX_QUESTIONS": "8",
            "GUESS_DUEL_PLAYER1_NAME": "小明",
        }
        with patch.dict(os.environ, env):
            settings = load_settings()
        self.assertEqual(settings.ai_provider, "gemini")
        self.assertEqual(settings.api_key, "secret")
        self.assertEqual(settings.category, Category.SPORTS_STAR)
        self.assertEqual(settings.max_questions, 8)
        self.assertEqual(settings.player1_name, "小明")

    def test_invalid_environment_fails(self, _load_dotenv):
        with patch.dict(os.environ, {"GUESS_DUEL_MAX_QUESTIONS": "100"}):
            with self.assertRaises(ValidationError):
                load_settings()

    def test_names_path(self, _load_dotenv):
        with patch.dict(os.environ, {"GUESS_DUEL_NAMES_PATH": ""}):
            self.assertEqual(names_path(), DEFAULT_NAMES_PATH)
        with patch.dict(os.environ, {"GUESS_DUEL_NAMES_PATH": "/tmp/names.json"}):
            self.assertEqual(str(names_path()), "/tmp/names.json")


class SettingsManagerTest(unittest.TestCase):

    def setUp(self):
        self.manager = SettingsManager(GameSettings(api_key="k", ai_provider="gemini"))

    def test_update_is_validated(self):
        self.manager.update(max_questions=20, category="entrepreneur")
        self.assertEqual(self.manager.get().max_questions, 20)
        self.assertEqual(self.manager.get().category, Category.ENTREPRENEUR)

        with self.assertRaises(ValidationError):
            self.manager.update(max_questions=2)
        self.assertEqual(self.manager.get().max_questions, 20)

    def test_unknown_field(self):
        with self.assertRaises(ValueError):
            self.manager.update(difficulty="hard")

    def test_reset_keeps_provider_and_key(self):
        self.manager.update(max_questions=20, player1_name="小明")
        settings = self.manager.reset_to_defaults()
        self.assertEqual(settings.max_questions, 12)
        self.assertEqual(settings.player1_name, "甜大官")
        self.assertEqual(settings.ai_provider, "gemini")
        self.assertEqual(settings.api_key, "k")
        self.assertTrue(self.manager.has_api_key())

    def test_category_label(self):
        self.assertEqual(SettingsManager.category_label("journey_west"), "中国西游记主角")
        self.assertEqual(SettingsManager.category_label(Category.ANY), "不限")


if __name__ == "__main__":
    unittest.main()
