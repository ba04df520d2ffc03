"""
codetheater.llm.client - LLM backend abstraction using litellm.

Provides a unified interface for Ollama, LM Studio, Claude, and OpenAI
with retry logic.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from codetheater.exceptions import LLMError, LLMResponseError

logger = logging.getLogger(__name__)

Message = dict[str, str]


class LLMClient:
    """LLM client wrapper with retry logic and token accounting."""

    def __init__(
        self,
        backend: str = "ollama",
        model: str = "llama3.1:8b",
        timeout: int = 300,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ) -> None:
        self.backend = backend
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._token_usage = {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    def _get_model_string(self) -> str:
        """Get the model string for litellm based on backend."""
        if self.backend == "ollama":
            return f"ollama/{self.model}"
        elif self.backend == "lmstudio":
            return f"openai/{self.model}"
        elif self.backend == "claude":
            return f"anthropic/{self.model}"
        return self.model

    def _get_api_base(self) -> str | None:
        if self.backend == "ollama":
            return "http://localhost:11434"
        elif self.backend == "lmstudio":
            return "http://localhost:1234/v1"
        return None

    def chat(
        self,
        messages: list[Message],
        max_tokens: int = 2048,
        temperature: float = 0.8,
        console=None,
    ) -> str:
        """Send a conversation to the LLM and return the reply, with retries.

        Args:
            messages: Chat messages ({"role": ..., "content": ...})
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature
            console: Optional rich console for output

        Returns:
            LLM response text

        Raises:
            LLMResponseError: If the response is malformed
            LLMError: If the request fails after all retries
        """
        try:
            import litellm
        except ImportError as e:
            raise LLMError("litellm not installed. Install with: pip install litellm") from e

        litellm.telemetry = False

        model = self._get_model_string()
        api_base = self._get_api_base()
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            if console and attempt > 0:
                console.print(f"[yellow]  Retry {attempt + 1}/{self.max_retries}...[/yellow]")

            try:
                kwargs: dict[str, Any] = {
                    "model": model,
                    "messages": messages,
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                    "timeout": self.timeout,
                }
                if api_base:
                    kwargs["api_base"] = api_base

                response = litellm.completion(**kwargs)
                self._record_usage(response)
                return self._extract_content(response)

            except LLMResponseError:
                raise
            except Exception as e:
                last_error = e
                error_str = str(e).lower()
                logger.debug("LLM attempt %d failed: %s", attempt + 1, e)

                if "connection" in error_str or "refused" in error_str:
                    if console:
                        console.print(f"[red]  Connection error: {e}[/red]")
                elif "timeout" in error_str:
                    if console:
                        console.print("[yellow]  Timeout, retrying...[/yellow]")
                elif "rate limit" in error_str:
                    if console:
                        console.print("[yellow]  Rate limited, waiting...[/yellow]")
                    time.sleep(self.retry_delay * 2)
                    continue

                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_delay)

        raise LLMError(
            f"LLM request failed after {self.max_retries} retries: {last_error}"
        ) from last_error

    def complete(
        self,
        prompt: str,
        max_tokens: int = 2048,
        temperature: float = 0.8,
        console=None,
    ) -> str:
        """Single-prompt completion."""
        return self.chat(
            [{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
            console=console,
        )

    def _record_usage(self, response: Any) -> None:
        usage = getattr(response, "usage", None)
        if usage:
            self._token_usage["prompt_tokens"] += getattr(usage, "prompt_tokens", 0) or 0
            self._token_usage["completion_tokens"] += getattr(usage, "completion_tokens", 0) or 0
            self._token_usage["total_tokens"] += getattr(usage, "total_tokens", 0) or 0

    @staticmethod
    def _extract_content(response: Any) -> str:
        choices = getattr(response, "choices", None)
        if not choices:
            raise LLMResponseError("Empty response from LLM")

        message = getattr(choices[0], "message", None)
        if message is None:
            raise LLMResponseError("No message in LLM response")

        content = getattr(message, "content", None)
        if content is None:
            raise LLMResponseError("No content in LLM message")

        return content

    def get_token_usage(self) -> dict[str, int]:
        """Get cumulative token usage."""
        return self._token_usage.copy()


def create_client_from_config(config: Any) -> LLMClient:
    """Create LLM client from TheaterConfig.

    Args:
        config: TheaterConfig instance

    Returns:
        Configured LLMClient
    """
    return LLMClient(
        backend=config.llm_backend,
        model=config.llm_model,
        timeout=config.llm_timeout,
        max_retries=config.max_retries,
    )
