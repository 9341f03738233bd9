"""Generative text client interface."""

from abc import ABC, abstractmethod


class GenerativeQueryClient(ABC):
    """Interface for the external text-generation service.

    Implementations perform exactly one network call per ``generate`` and
    never retry.
    """

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Send a prompt and return the generated text.

        Args:
            prompt: Rendered prompt.

        Returns:
            Raw generated text (may still contain markdown fences).

        Raises:
            UpstreamUnavailableError: Service unreachable or non-success status.
            UpstreamMalformedError: Reply lacks the expected text payload.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier, for logging."""
        ...

    def close(self) -> None:
        """Release network resources held by the client. No-op by default."""
        return None
