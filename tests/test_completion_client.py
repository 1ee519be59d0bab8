"""
Unit tests for the completion client with the OpenAI SDK client mocked.
"""

import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai

from completion_client import CompletionClient
from errors import GenerationFailure


def completion_with(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class TestCompletionClient(unittest.TestCase):

    def setUp(self):
        self.sdk = MagicMock()
        self.client = CompletionClient("groq-key", client=self.sdk)

    def test_complete_returns_trimmed_text(self):
        """Test a successful completion is stripped and returned."""
        self.sdk.chat.completions.create.return_value = completion_with("  Two visionaries.  \n")

        text = self.client.complete("prompt", model="m", temperature=0.7, max_tokens=200)

        self.assertEqual(text, "Two visionaries.")
        kwargs = self.sdk.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "m")
        self.assertEqual(kwargs["temperature"], 0.7)
        self.assertEqual(kwargs["max_tokens"], 200)
        self.assertEqual(kwargs["messages"], [{"role": "user", "content": "prompt"}])

    def test_empty_content(self):
        """Test a completion with no content is a GenerationFailure."""
        for response in (completion_with(None), completion_with("   "), SimpleNamespace(choices=[])):
            self.sdk.chat.completions.create.return_value = response
            with self.assertRaises(GenerationFailure):
                self.client.complete("prompt", model="m", temperature=0.6, max_tokens=60)

    def test_connection_error(self):
        """Test an unreachable provider is a GenerationFailure."""
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        self.sdk.chat.completions.create.side_effect = openai.APIConnectionError(request=request)

        with self.assertRaises(GenerationFailure):
            self.client.complete("prompt", model="m", temperature=0.6, max_tokens=60)

    def test_timeout(self):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        self.sdk.chat.completions.create.side_effect = openai.APITimeoutError(request=request)

        with self.assertRaises(GenerationFailure):
            self.client.complete("prompt", model="m", temperature=0.6, max_tokens=60)

    def test_sdk_built_without_retries(self):
        """Test the real SDK client is configured with the Groq endpoint and no retries."""
        client = CompletionClient("groq-key", timeout=5.0)
        self.assertEqual(client._client.max_retries, 0)
        self.assertIn("api.groq.com", str(client._client.base_url))


if __name__ == '__main__':
    unittest.main()
