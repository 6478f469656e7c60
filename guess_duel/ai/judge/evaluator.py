"""
Judgment of questions, guesses and hints for the guessing duel
"""

import re
import asyncio
import logging
from typing import Any, Dict, Optional

from ...config import ProviderConfig
from ...exceptions import JudgmentClientError, JudgmentUnparseable, is_retryable_transport_error
from ..utils.llm import LLMClient
from ..utils.retry import RetryPolicy, run_with_retry

logger = logging.getLogger(__name__)

CORRECT_TOKEN = "正确"
INCORRECT_TOKEN = "错误"

MAX_JUDGMENT_ATTEMPTS = 2
TRANSPORT_RETRY_DELAY = 0.5  # seconds
MAX_HINT_LENGTH = 15

HINT_QUOTES = "\"'“”‘’「」『』"


class UnparseableVerdict(JudgmentUnparseable):
    """One reply that contained neither or both verdict tokens."""


def parse_verdict(reply: str) -> Optional[bool]:
    """
    Map a model reply to a verdict.

    Returns True for the "correct" token, False for the "incorrect" token,
    and None when the reply contains neither or both.
    """
    cleaned = re.sub(r"\s", "", reply or "")
    has_correct = CORRECT_TOKEN in cleaned
    has_incorrect = INCORRECT_TOKEN in cleaned
    if has_correct == has_incorrect:
        return None
    return has_correct


class JudgmentService:
    """Turns free-text model replies into strict verdicts using the LLM"""

    def __init__(self, llm_client: Optional[LLMClient] = None, sleep=asyncio.sleep):
        """Initialize the judgment service"""
        self.llm_client = llm_client or LLMClient()
        self.retry_policy = RetryPolicy(
            max_attempts=MAX_JUDGMENT_ATTEMPTS,
            retryable=lambda e: isinstance(e, UnparseableVerdict) or is_retryable_transport_error(e),
            delays=(((JudgmentClientError,), TRANSPORT_RETRY_DELAY),),
            sleep=sleep,
            name="Judgment",
        )

    async def judge_question(self, secret_name: str, question: str, config: ProviderConfig) -> bool:
        """
        Decide whether a yes/no question is a true statement about the secret person.

        Args:
            secret_name: The hidden answer
            question: The player's question
            config: Provider selection and API key

        Returns:
            True if the statement holds for the secret person
        """
        logger.info(f"Judging question: '{question}'")
        return await self.judge_and_parse(
            "judge_question.j2",
            {"secret_name": secret_name, "question": question},
            config,
        )

    async def judge_guess(self, secret_name: str, guess: str, config: ProviderConfig) -> bool:
        """
        Decide whether a guess names the same person as the secret.

        Aliases, titles, partial names and translations all count as a match.
        """
        logger.info(f"Judging guess: '{guess}'")
        return await self.judge_and_parse(
            "judge_guess.j2",
            {"secret_name": secret_name, "guess": guess},
            config,
        )

    async def get_hint(self, secret_name: str, config: ProviderConfig) -> str:
        """Ask for one short, vague clue about the secret person."""
        reply = await self.llm_client.chat_with_template(
            "hint.j2",
            {"secret_name": secret_name, "max_length": MAX_HINT_LENGTH},
            config,
        )
        hint = reply.strip().strip(HINT_QUOTES).strip()
        if not hint:
            logger.error("AI returned an empty hint")
            raise JudgmentUnparseable("AI returned an empty hint, please try again")
        return hint

    async def judge_and_parse(
        self, template: str, context: Dict[str, Any], config: ProviderConfig
    ) -> bool:
        """
        Render the judgment prompt, call the model and parse its verdict.

        An unparseable reply is retried once straight away; a transport failure
        is retried once after a short delay. A final transport failure is
        re-raised unchanged.

        Raises:
            JudgmentUnparseable: No attempt produced a recognizable verdict
        """
        context = dict(context, correct_token=CORRECT_TOKEN, incorrect_token=INCORRECT_TOKEN)

        async def _attempt() -> bool:
            reply = await self.llm_client.chat_with_template(template, context, config)
            verdict = parse_verdict(reply)
            if verdict is None:
                logger.warning(f"Could not parse verdict from reply: {reply!r}")
                raise UnparseableVerdict("AI returned an unrecognizable result, please try again")
            return verdict

        verdict = await run_with_retry(self.retry_policy, _attempt)
        logger.info(f"LLM verdict: {'correct' if verdict else 'incorrect'}")
        return verdict
