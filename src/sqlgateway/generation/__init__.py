"""Generative text clients for natural-language to SQL translation.

Gemini is the default provider; OpenAI is available as an optional extra.

Example:
    >>> from sqlgateway.generation import get_client
    >>>
    >>> client = get_client("gemini", api_key="...")
    >>> sql = client.generate(prompt)
"""

from sqlgateway.generation.provider import GenerativeQueryClient

__all__ = [
    "GenerativeQueryClient",
    "get_client",
]


def get_client(
    provider: str | GenerativeQueryClient = "gemini",
    **kwargs: object,
) -> GenerativeQueryClient:
    """Get a generative client by name or return the client if already instantiated.

    Args:
        provider: Provider name ("gemini", "openai") or GenerativeQueryClient instance.
        **kwargs: Additional arguments passed to the client constructor.

    Returns:
        GenerativeQueryClient instance.

    Raises:
        ValueError: If provider name is unknown.
        ImportError: If required dependencies are not installed.
    """
    if isinstance(provider, GenerativeQueryClient):
        return provider

    if provider == "gemini":
        from sqlgateway.generation.gemini import GeminiClient

        return GeminiClient(**kwargs)  # type: ignore[arg-type]
    elif provider == "openai":
        from sqlgateway.generation.openai import OpenAIClient

        return OpenAIClient(**kwargs)  # type: ignore[arg-type]
    else:
        raise ValueError(f"Unknown generative provider: {provider}. Available: 'gemini', 'openai'")
