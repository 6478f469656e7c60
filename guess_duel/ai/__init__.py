"""
AI module for the Guess Duel game: name generation and judgment.
"""

from .utils.llm import LLMClient
from .utils.prompt_manager import PromptManager
from .name_generation.generator import NameGenerator
from .judge.evaluator import JudgmentService
