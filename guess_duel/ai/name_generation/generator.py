"""
Name Generator: picks the secret name each player has to discover.

Prefers the local name corpus and falls back to asking the LLM for a name
from the category description.
"""

import re
import random
import string
import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from ...config import Category, ProviderConfig
from ...exceptions import AuthFailure, GenerationFailed, JudgmentClientError, is_retryable_transport_error
from ...utils.name_corpus import NameCorpus
from ..utils.llm import LLMClient
from ..utils.retry import RetryPolicy, run_with_retry

logger = logging.getLogger(__name__)

CATEGORY_DESCRIPTIONS: Dict[Category, str] = {
    Category.ANY: "任何知名人物（真实或虚拟皆可），请广泛选择。",
    Category.ANCIENT_EMPEROR: "中国古代皇帝（请从不同朝代中随机选择）。",
    Category.ANCIENT_SCHOLAR: "中国古代文人（诗人、词人、文学家等）。",
    Category.CLASSIC_CHARACTER: "中国四大名著中的知名人物（红楼梦、三国演义、水浒传、西游记）。",
    Category.ENTERTAINMENT_STAR: "中国娱乐圈知名明星（演员、歌手等）。",
    Category.SPORTS_STAR: "中国知名体育明星（奥运冠军、职业运动员等）。",
    Category.ENTREPRENEUR: "中国知名企业家。",
    Category.JOURNEY_WEST: "西游记中的主要角色（师徒四人等）。",
}

LOCAL_CORPUS_PROBABILITY = 0.8
NAME_TEMPERATURE = 0.9
MAX_ATTEMPTS = 3
FAILURE_RETRY_DELAY = 1.0  # seconds, transport failures only
MAX_NAME_LENGTH = 10
SEED_LENGTH = 6
SEED_ALPHABET = string.ascii_lowercase + string.digits

# Quotes, brackets, whitespace and punctuation the model likes to wrap names in
NAME_NOISE_RE = re.compile(r"""["'“”‘’「」『』【】《》〈〉\[\](){}（）\s.。,，、!！?？:：;；\-—…~～*`]""")


class InvalidNameOutput(Exception):
    """The model replied, but not with a usable name."""


class NameGenerator:
    """
    Generates secret names for a game session.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        corpus: Optional[NameCorpus] = None,
        rng: Optional[random.Random] = None,
        sleep=asyncio.sleep,
    ):
        """
        Initialize the name generator.

        Args:
            llm_client: Client used for AI generation
            corpus: Optional local name corpus; without it every name comes from the AI
            rng: Random source (injectable for deterministic tests)
            sleep: Coroutine used for retry delays
        """
        self.llm_client = llm_client or LLMClient()
        self.corpus = corpus
        self.rng = rng or random.Random()
        self.retry_policy = RetryPolicy(
            max_attempts=MAX_ATTEMPTS,
            retryable=lambda e: isinstance(e, InvalidNameOutput) or is_retryable_transport_error(e),
            delays=(((JudgmentClientError,), FAILURE_RETRY_DELAY),),
            sleep=sleep,
            name="Name generation",
        )

    async def generate(
        self,
        category: Category,
        exclude: Optional[str],
        config: ProviderConfig,
    ) -> str:
        """
        Produce one secret name.

        Args:
            category: Scope the name is drawn from
            exclude: A name that must not be returned (e.g. the other player's)
            config: Provider selection and API key for the AI path

        Returns:
            The secret name

        Raises:
            GenerationFailed: All attempts produced invalid output or failed
            ConfigError, AuthFailure: Not retried
        """
        category = Category(category)

        if self.corpus is not None and self.rng.random() < LOCAL_CORPUS_PROBABILITY:
            name = self._pick_from_corpus(category, exclude)
            if name:
                logger.info(f"Using local name for category {category.value}")
                return name
            logger.info(f"No local candidates for category {category.value}, asking the AI")

        context = self.build_prompt_context(category, exclude)

        async def _attempt() -> str:
            raw = await self.llm_client.chat_with_template(
                "name_generation.j2", context, config, temperature=NAME_TEMPERATURE
            )
            name = self.clean_name(raw)
            if not self.is_valid_name(name, exclude):
                raise InvalidNameOutput(f"Unusable name from the AI: {raw!r}")
            return name

        try:
            name = await run_with_retry(self.retry_policy, _attempt)
        except AuthFailure:
            raise
        except (InvalidNameOutput, JudgmentClientError) as e:
            logger.error(f"Name generation failed after {MAX_ATTEMPTS} attempts: {e}")
            raise GenerationFailed("Could not pick a name, please try again") from e

        logger.info(f"AI generated a name for category {category.value}")
        return name

    async def generate_pair(self, category: Category, config: ProviderConfig) -> Tuple[str, str]:
        """Generate the two secret names of a session; the second never equals the first."""
        name1 = await self.generate(category, None, config)
        name2 = await self.generate(category, name1, config)
        return name1, name2

    def _pick_from_corpus(self, category: Category, exclude: Optional[str]) -> Optional[str]:
        candidates = self.corpus.candidates(category, exclude)
        if not candidates:
            return None
        return self.rng.choice(candidates)

    def build_prompt_context(self, category: Category, exclude: Optional[str]) -> Dict[str, Any]:
        """Template variables for the name generation prompt, with a fresh random seed."""
        seed = "".join(self.rng.choices(SEED_ALPHABET, k=SEED_LENGTH))
        return {
            "category_description": CATEGORY_DESCRIPTIONS.get(category, CATEGORY_DESCRIPTIONS[Category.ANY]),
            "exclude_name": exclude or "",
            "seed": seed,
        }

    @staticmethod
    def clean_name(raw: str) -> str:
        return NAME_NOISE_RE.sub("", raw or "").strip()

    @staticmethod
    def is_valid_name(name: str, exclude: Optional[str]) -> bool:
        if not 1 <= len(name) <= MAX_NAME_LENGTH:
            return False
        return not exclude or name != exclude
