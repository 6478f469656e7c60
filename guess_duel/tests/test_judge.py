import unittest
from unittest.mock import AsyncMock, MagicMock

from guess_duel.ai.judge.evaluator import (
    CORRECT_TOKEN,
    INCORRECT_TOKEN,
    TRANSPORT_RETRY_DELAY,
    JudgmentService,
    parse_verdict,
)
from guess_duel.config import ProviderConfig
from guess_duel.exceptions import AuthFailure, JudgmentUnparseable, RateLimited, RequestTimeout

CONFIG = ProviderConfig(provider="gemini", api_key="test-key")


class ParseVerdictTest(unittest.TestCase):

    def test_single_token(self):
        self.assertTrue(parse_verdict("正确"))
        self.assertFalse(parse_verdict("错误"))

    def test_whitespace_ignored(self):
        self.assertTrue(parse_verdict(" 正 确\n"))
        self.assertFalse(parse_verdict("错\t误。"))

    def test_both_or_neither_is_unparseable(self):
        self.assertIsNone(parse_verdict("正确还是错误"))
        self.assertIsNone(parse_verdict("我不知道"))
        self.assertIsNone(parse_verdict(""))


class JudgmentServiceTest(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.llm = MagicMock()
        self.llm.chat_with_template = AsyncMock()
        self.sleep = AsyncMock()
        self.service = JudgmentService(llm_client=self.llm, sleep=self.sleep)

    async def test_judge_question(self):
        self.llm.chat_with_template.return_value = CORRECT_TOKEN
        self.assertTrue(await self.service.judge_question("李白", "是诗人吗", CONFIG))

        template, context, config = self.llm.chat_with_template.call_args.args
        self.assertEqual(template, "judge_question.j2")
        self.assertEqual(context["secret_name"], "李白")
        self.assertEqual(context["question"], "是诗人吗")
        self.assertEqual(context["correct_token"], CORRECT_TOKEN)
        self.assertEqual(context["incorrect_token"], INCORRECT_TOKEN)

    async def test_judge_guess(self):
        self.llm.chat_with_template.return_value = INCORRECT_TOKEN
        self.assertFalse(await self.service.judge_guess("李白", "杜甫", CONFIG))
        self.assertEqual(self.llm.chat_with_template.call_args.args[0], "judge_guess.j2")

    async def test_unparseable_retried_once_without_delay(self):
        self.llm.chat_with_template.side_effect = ["正确还是错误", "正确"]
        self.assertTrue(await self.service.judge_question("李白", "是诗人吗", CONFIG))
        self.assertEqual(self.llm.chat_with_template.await_count, 2)
        self.sleep.assert_not_awaited()

    async def test_unparseable_twice_fails(self):
        self.llm.chat_with_template.side_effect = ["正确还是错误", "不知道"]
        with self.assertRaises(JudgmentUnparseable):
            await self.service.judge_guess("李白", "杜甫", CONFIG)
        self.assertEqual(self.llm.chat_with_template.await_count, 2)

    async def test_transport_failure_retried_after_delay(self):
        self.llm.chat_with_template.side_effect = [RateLimited("quota"), "错误"]
        self.assertFalse(await self.service.judge_question("李白", "是皇帝吗", CONFIG))
        self.sleep.assert_awaited_once_with(TRANSPORT_RETRY_DELAY)

    async def test_final_transport_failure_propagates_unchanged(self):
        self.llm.chat_with_template.side_effect = ["???", RequestTimeout("slow")]
        with self.assertRaises(RequestTimeout):
            await self.service.judge_question("李白", "是皇帝吗", CONFIG)

    async def test_auth_failure_not_retried(self):
        self.llm.chat_with_template.side_effect = AuthFailure("bad key")
        with self.assertRaises(AuthFailure):
            await self.service.judge_guess("李白", "杜甫", CONFIG)
        self.llm.chat_with_template.assert_awaited_once()

    async def test_hint_is_trimmed(self):
        self.llm.chat_with_template.return_value = ' "爱喝酒的浪漫诗人" \n'
        self.assertEqual(await self.service.get_hint("李白", CONFIG), "爱喝酒的浪漫诗人")
        template, context, _ = self.llm.chat_with_template.call_args.args
        self.assertEqual(template, "hint.j2")
        self.assertEqual(context["secret_name"], "李白")

    async def test_empty_hint_fails(self):
        self.llm.chat_with_template.return_value = "“”"
        with self.assertRaises(JudgmentUnparseable):
            await self.service.get_hint("李白", CONFIG)


if __name__ == "__main__":
    unittest.main()
