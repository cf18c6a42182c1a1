"""Shared OpenAI client for fit assessment calls."""

from openai import AsyncOpenAI

from portfolio_api.core.config import settings

# One connection pool per worker process, reused across all LLM calls.
_openai_client: AsyncOpenAI | None = None


def get_openai_client() -> AsyncOpenAI:
    """Return (or lazily create) the module-level AsyncOpenAI client."""
    global _openai_client
    if _openai_client is None:
        _openai_client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
    return _openai_client


async def close_openai_client() -> None:
    global _openai_client
    if _openai_client is not None:
        await _openai_client.close()
        _openai_client = None
