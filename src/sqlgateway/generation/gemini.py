"""Google Gemini client (generateContent REST API)."""

from __future__ import annotations

import logging
import os
from typing import Any

import requests

from sqlgateway.core.config import DEFAULT_GEMINI_API_URL
from sqlgateway.exceptions import UpstreamMalformedError, UpstreamUnavailableError
from sqlgateway.generation.provider import GenerativeQueryClient

logger = logging.getLogger(__name__)


class GeminiClient(GenerativeQueryClient):
    """Gemini ``generateContent`` client over plain HTTPS.

    Example:
        >>> client = GeminiClient()  # Uses GEMINI_API_KEY env var
        >>> client.generate("Return the SQL for: count users")
        'SELECT COUNT(*) FROM users'
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str = DEFAULT_GEMINI_API_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key. Falls back to GEMINI_API_KEY env var.
            api_url: generateContent endpoint URL.
            timeout: Request timeout in seconds.
            session: Optional requests session (connection reuse, testing).
        """
        self._api_key = api_key or os.environ.get("GEMINI_API_KEY")
        self._api_url = api_url
        self._timeout = timeout
        # Only a session created here is closed by close()
        self._owns_session = session is None
        self._session = session or requests.Session()

    @property
    def model_name(self) -> str:
        # .../models/gemini-pro:generateContent -> gemini-pro
        return self._api_url.rsplit("/", 1)[-1].split(":", 1)[0]

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def generate(self, prompt: str) -> str:
        if not self._api_key:
            raise UpstreamUnavailableError(
                "Gemini API key not configured. Set the GEMINI_API_KEY environment variable "
                "or pass api_key."
            )

        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        logger.info(f"Calling Gemini model {self.model_name}")

        try:
            resp = self._session.post(
                self._api_url,
                params={"key": self._api_key},
                json=payload,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise UpstreamUnavailableError(f"Gemini API unreachable: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise UpstreamUnavailableError(
                f"Gemini API error {resp.status_code}: {resp.text[:500]}",
                status_code=resp.status_code,
            )

        try:
            body = resp.json()
        except ValueError as e:
            raise UpstreamMalformedError(f"Gemini API returned non-JSON body: {e}") from e

        return extract_text(body)


def extract_text(body: Any) -> str:
    """Pull ``candidates[0].content.parts[0].text`` out of a Gemini reply.

    Raises:
        UpstreamMalformedError: If any level of the path is missing
    """
    if not isinstance(body, dict):
        raise UpstreamMalformedError("Gemini response is not a JSON object")

    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise UpstreamMalformedError("No candidates in Gemini response")

    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if not isinstance(content, dict):
        raise UpstreamMalformedError("No content section in Gemini response")

    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        raise UpstreamMalformedError("No parts in Gemini response")

    text = parts[0].get("text")
    if not isinstance(text, str):
        raise UpstreamMalformedError("No text in Gemini response")

    return text
