"""OpenAI-compatible chat backend.

Works with any endpoint speaking the OpenAI chat-completions protocol
(DeepSeek, OpenAI, local gateways) by setting base_url.
"""

from core.config import EngineSettings
from dialogue.backends.base import Backend


class OpenAIBackend(Backend):
    """Backend calling an OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float = 10.0,
        temperature: float = 0.1,
        max_tokens: int = 10,
    ) -> None:
        """Initialize the client.

        Args:
            model: Model name
            api_key: API key (falls back to OPENAI_API_KEY)
            base_url: Endpoint base URL (None for api.openai.com)
            timeout_seconds: HTTP timeout per request
            temperature: Sampling temperature
            max_tokens: Completion token cap

        Raises:
            ImportError: If the openai package is not installed
        """
        try:
            from openai import OpenAI
        except ImportError as e:
            raise ImportError(
                "openai package required. Install with: pip install '.[llm]'"
            ) from e

        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout_seconds)

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> "OpenAIBackend":
        """Build a backend from engine settings."""
        return cls(
            model=settings.llm_model,
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url,
            timeout_seconds=settings.cross_check_timeout_seconds,
        )

    def complete(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        return (response.choices[0].message.content or "").strip()

    @property
    def model_id(self) -> str:
        return self._model
