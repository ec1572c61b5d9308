"""Tests for vibeos.models.anthropic module."""
import unittest
from unittest.mock import patch, MagicMock

import httpx

from vibeos.models.anthropic import AnthropicClient, AnthropicResult


def _mock_client(mock_client_cls, response=None, side_effect=None):
    mock_client = MagicMock()
    mock_client.__enter__ = MagicMock(return_value=mock_client)
    mock_client.__exit__ = MagicMock(return_value=False)
    if side_effect is not None:
        mock_client.post.side_effect = side_effect
    else:
        mock_client.post.return_value = response
    mock_client_cls.return_value = mock_client
    return mock_client


class TestAnthropicClient(unittest.TestCase):
    def test_no_api_key_returns_error(self):
        with patch.dict("os.environ", {"ANTHROPIC_API_KEY": ""}):
            client = AnthropicClient(api_key="")
        result = client.complete("system", "Hello")
        self.assertFalse(result.ok)
        self.assertIn("ANTHROPIC_API_KEY", result.error)
        self.assertFalse(client.available)

    @patch("vibeos.models.anthropic.httpx.Client")
    def test_successful_completion(self, mock_client_cls):
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.return_value = {
            "content": [{"type": "text", "text": "Hello there!"}],
            "usage": {"input_tokens": 5, "output_tokens": 3},
        }
        mock_client = _mock_client(mock_client_cls, mock_response)

        client = AnthropicClient(api_key="test-key", model="claude-test")
        result = client.complete("Be brief.", "Say hello")

        self.assertTrue(result.ok)
        self.assertEqual(result.text, "Hello there!")
        self.assertEqual(result.usage["input_tokens"], 5)
        self.assertEqual(result.usage["output_tokens"], 3)
        url = mock_client.post.call_args.args[0]
        body = mock_client.post.call_args.kwargs["json"]
        headers = mock_client.post.call_args.kwargs["headers"]
        self.assertTrue(url.endswith("/messages"))
        self.assertEqual(body["model"], "claude-test")
        self.assertEqual(body["system"], "Be brief.")
        self.assertEqual(body["messages"], [{"role": "user", "content": "Say hello"}])
        self.assertEqual(headers["x-api-key"], "test-key")

    @patch("vibeos.models.anthropic.httpx.Client")
    def test_http_error(self, mock_client_cls):
        mock_response = MagicMock()
        mock_response.status_code = 401
        mock_response.text = "Unauthorized"
        _mock_client(mock_client_cls, mock_response)

        result = AnthropicClient(api_key="bad-key").complete("", "test")

        self.assertFalse(result.ok)
        self.assertIn("401", result.error)

    @patch("vibeos.models.anthropic.httpx.Client")
    def test_empty_content(self, mock_client_cls):
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.return_value = {"content": []}
        _mock_client(mock_client_cls, mock_response)

        result = AnthropicClient(api_key="test-key").complete("", "test")

        self.assertFalse(result.ok)
        self.assertIn("Empty response content", result.error)

    @patch("vibeos.models.anthropic.httpx.Client")
    def test_non_text_block(self, mock_client_cls):
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.return_value = {"content": [{"type": "tool_use", "id": "x"}]}
        _mock_client(mock_client_cls, mock_response)

        result = AnthropicClient(api_key="test-key").complete("", "test")

        self.assertFalse(result.ok)
        self.assertIn("Only text responses are supported", result.error)

    @patch("vibeos.models.anthropic.httpx.Client")
    def test_timeout(self, mock_client_cls):
        _mock_client(mock_client_cls, side_effect=httpx.ReadTimeout("slow"))

        result = AnthropicClient(api_key="test-key", timeout=5).complete("", "test")

        self.assertFalse(result.ok)
        self.assertIn("timeout", result.error)

    def test_from_config(self):
        client = AnthropicClient.from_config({"api_key": "k", "model": "m", "max_tokens": 10, "timeout_seconds": 3})
        self.assertEqual((client.api_key, client.model, client.max_tokens, client.timeout), ("k", "m", 10, 3.0))

    def test_result_defaults(self):
        result = AnthropicResult()
        self.assertEqual(result.text, "")
        self.assertTrue(result.ok)
        self.assertIsNone(result.error)


if __name__ == "__main__":
    unittest.main()
