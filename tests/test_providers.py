import sys
import unittest
from dataclasses import replace
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
from google.genai import types as genai_types
from openai import APITimeoutError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_analyzer.ai.factory import get_completion_client  # noqa: E402
from resume_analyzer.ai.providers import gemini_provider, openai_provider  # noqa: E402
from resume_analyzer.ai.providers.gemini_provider import GeminiProvider  # noqa: E402
from resume_analyzer.ai.providers.openai_provider import OpenAIProvider  # noqa: E402
from resume_analyzer.ai.types import Candidate, Completion  # noqa: E402
from resume_analyzer.core.config import settings  # noqa: E402


def _gemini_response(*candidates):
    return SimpleNamespace(candidates=list(candidates))


def _gemini_candidate(texts, finish_reason=genai_types.FinishReason.STOP):
    parts = [SimpleNamespace(text=text, thought=None) for text in texts]
    return SimpleNamespace(content=SimpleNamespace(parts=parts), finish_reason=finish_reason)


class GeminiProviderTests(unittest.IsolatedAsyncioTestCase):
    def test_finish_reasons_are_mapped(self):
        completion = gemini_provider.to_completion(
            _gemini_response(
                _gemini_candidate(["{}"], genai_types.FinishReason.SAFETY),
                _gemini_candidate(["{}"], genai_types.FinishReason.MAX_TOKENS),
                _gemini_candidate(["{}"], genai_types.FinishReason.RECITATION),
            )
        )
        self.assertEqual(
            [c.finish_reason for c in completion.candidates],
            ["safety", "max_tokens", "other"],
        )

    def test_thought_parts_are_skipped(self):
        candidate = SimpleNamespace(
            content=SimpleNamespace(
                parts=[
                    SimpleNamespace(text="thinking...", thought=True),
                    SimpleNamespace(text='{"matchScore": 1}', thought=None),
                ]
            ),
            finish_reason=genai_types.FinishReason.STOP,
        )
        completion = gemini_provider.to_completion(_gemini_response(candidate))
        self.assertEqual(completion.candidates[0].parts, ('{"matchScore": 1}',))

    def test_missing_candidates_and_content(self):
        self.assertEqual(gemini_provider.to_completion(SimpleNamespace(candidates=None)), Completion())
        completion = gemini_provider.to_completion(
            _gemini_response(SimpleNamespace(content=None, finish_reason=None))
        )
        self.assertEqual(completion.candidates, (Candidate(),))

    async def test_complete_sends_prompt_to_model(self):
        generate = AsyncMock(return_value=_gemini_response(_gemini_candidate(["ok"])))
        client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate)))
        provider = GeminiProvider(model="gemini-2.5-flash", client=client)

        completion = await provider.complete("prompt text")

        generate.assert_awaited_once_with(model="gemini-2.5-flash", contents="prompt text")
        self.assertEqual(completion.candidates[0].parts, ("ok",))


class OpenAIProviderTests(unittest.IsolatedAsyncioTestCase):
    def _client(self, create: AsyncMock):
        return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))

    def test_content_filter_maps_to_safety(self):
        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=None), finish_reason="content_filter")]
        )
        completion = openai_provider.to_completion(response)
        self.assertEqual(completion.candidates, (Candidate(parts=(), finish_reason="safety"),))

    async def test_complete_returns_message_text(self):
        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content='{"matchScore": 3}'), finish_reason="stop")]
        )
        create = AsyncMock(return_value=response)
        provider = OpenAIProvider(model="gpt-4o-mini", client=self._client(create))

        completion = await provider.complete("prompt text")

        self.assertEqual(completion.candidates[0].parts, ('{"matchScore": 3}',))
        kwargs = create.await_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-4o-mini")
        self.assertEqual(kwargs["messages"], [{"role": "user", "content": "prompt text"}])

    async def test_sdk_timeout_becomes_timeout_error(self):
        create = AsyncMock(side_effect=APITimeoutError(request=httpx.Request("POST", "https://api.openai.com/v1")))
        provider = OpenAIProvider(model="gpt-4o-mini", client=self._client(create))

        with self.assertRaises(TimeoutError):
            await provider.complete("prompt text")

    def test_missing_key_is_rejected(self):
        with self.assertRaises(RuntimeError):
            OpenAIProvider(model="gpt-4o-mini", api_key=" ")


class CompletionClientFactoryTests(unittest.TestCase):
    def test_gemini_without_any_credential_aborts(self):
        config = replace(settings, ai_provider="gemini", gemini_api_key=None, google_application_credentials=None)
        with self.assertRaises(RuntimeError) as ctx:
            get_completion_client(config)
        self.assertIn("GEMINI_API_KEY", str(ctx.exception))

    def test_gemini_with_api_key(self):
        config = replace(settings, ai_provider="gemini", gemini_api_key="test-key")
        self.assertIsInstance(get_completion_client(config), GeminiProvider)

    def test_openai_provider(self):
        config = replace(settings, ai_provider="openai", ai_model="gpt-4o-mini", openai_api_key="sk-test")
        self.assertIsInstance(get_completion_client(config), OpenAIProvider)

    def test_unknown_provider(self):
        with self.assertRaises(ValueError):
            get_completion_client(replace(settings, ai_provider="claude"))


if __name__ == "__main__":
    unittest.main()
