"""OpenAI chat-completions client."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from sqlgateway.core.config import DEFAULT_OPENAI_MODEL
from sqlgateway.exceptions import UpstreamMalformedError, UpstreamUnavailableError
from sqlgateway.generation.provider import GenerativeQueryClient

if TYPE_CHECKING:
    from openai import OpenAI


class OpenAIClient(GenerativeQueryClient):
    """OpenAI API client.

    Sends the prompt as a single user message; retries are disabled so each
    ``generate`` is exactly one request.
    """

    def __init__(
        self,
        model: str = DEFAULT_OPENAI_MODEL,
        api_key: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize OpenAI client.

        Args:
            model: Chat model name.
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            timeout: Request timeout in seconds.
        """
        try:
            from openai import OpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for the OpenAI provider. "
                "Install it with: pip install sqlgateway[openai]"
            ) from e

        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self._client: OpenAI = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._model = model

    @property
    def model_name(self) -> str:
        return self._model

    def close(self) -> None:
        self._client.close()

    def generate(self, prompt: str) -> str:
        from openai import APIError

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0,
            )
        except APIError as e:
            raise UpstreamUnavailableError(
                f"OpenAI API error: {e}", status_code=getattr(e, "status_code", None)
            ) from e

        if not response.choices or response.choices[0].message.content is None:
            raise UpstreamMalformedError("No message content in OpenAI response")
        return response.choices[0].message.content
