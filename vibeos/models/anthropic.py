"""Anthropic Messages API client for VibeOS agents."""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
API_VERSION = "2023-06-01"


@dataclass
class AnthropicResult:
    """Result from an Anthropic API call."""
    text: str = ""
    ok: bool = True
    error: str | None = None
    duration_ms: float = 0.0
    usage: Dict[str, Any] | None = None


class AnthropicClient:
    """Messages API client using httpx. Transport errors come back as results, never raised."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = "https://api.anthropic.com/v1",
        model: str = DEFAULT_MODEL,
        max_tokens: int = 4096,
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "AnthropicClient":
        return cls(
            api_key=config.get("api_key"),
            base_url=str(config.get("base_url", "https://api.anthropic.com/v1")),
            model=str(config.get("model", DEFAULT_MODEL)),
            max_tokens=int(config.get("max_tokens", 4096)),
            timeout=float(config.get("timeout_seconds", 60)),
        )

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def complete(
        self,
        system: str,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> AnthropicResult:
        if not self.api_key:
            return AnthropicResult(ok=False, error="ANTHROPIC_API_KEY not set")

        body: Dict[str, Any] = {
            "model": model or self.model,
            "max_tokens": max_tokens or self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            body["system"] = system
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": API_VERSION,
            "content-type": "application/json",
        }

        start = time.perf_counter()
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(f"{self.base_url}/messages", json=body, headers=headers)

            duration_ms = (time.perf_counter() - start) * 1000

            if response.status_code != 200:
                return AnthropicResult(
                    ok=False,
                    error=f"HTTP {response.status_code}: {response.text[:500]}",
                    duration_ms=duration_ms,
                )

            data = response.json()
            content = data.get("content") or []
            if not content:
                return AnthropicResult(
                    ok=False,
                    error="Empty response content from Anthropic API",
                    duration_ms=duration_ms,
                )
            block = content[0]
            if block.get("type") != "text":
                return AnthropicResult(
                    ok=False,
                    error="Unexpected response type from Anthropic API. Only text responses are supported.",
                    duration_ms=duration_ms,
                )

            usage_meta = data.get("usage", {})
            usage = {
                "input_tokens": usage_meta.get("input_tokens", 0),
                "output_tokens": usage_meta.get("output_tokens", 0),
            }
            logger.debug(f"Anthropic call ok in {duration_ms:.0f}ms ({usage['output_tokens']} output tokens)")
            return AnthropicResult(
                text=block.get("text", ""),
                ok=True,
                duration_ms=duration_ms,
                usage=usage,
            )

        except httpx.TimeoutException:
            duration_ms = (time.perf_counter() - start) * 1000
            return AnthropicResult(
                ok=False,
                error=f"Anthropic API timeout after {self.timeout}s",
                duration_ms=duration_ms,
            )
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.warning(f"Anthropic call failed: {e}")
            return AnthropicResult(
                ok=False,
                error=str(e),
                duration_ms=duration_ms,
            )
