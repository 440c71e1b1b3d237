"""OpenAI SDK client provider.

Builds an ``AsyncOpenAI`` client bound to a single credential. Retries are
disabled so every vendor failure is terminal for that one request.
"""

import httpx
from openai import AsyncOpenAI


class ClientProvider:
    """Own the configuration of one authenticated OpenAI client."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create the client.

        Args:
            api_key: OpenAI API key used to authenticate every request.
            timeout: Per-request bound in seconds.
            http_client: Optional shared connection pool. The provider never
                closes a client it was given.

        Raises:
            ValueError: If the API key is empty.
        """
        if not api_key or not api_key.strip():
            raise ValueError("An OpenAI API key is required.")

        self._client = AsyncOpenAI(
            api_key=api_key.strip(),
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    def get_client(self) -> AsyncOpenAI:
        """Return the underlying OpenAI client."""
        return self._client
