"""Offline backend standing in for the LLM in cross-check tests."""

import time

from dialogue.backends.base import Backend


class MockBackend(Backend):
    """Answer rule cross-check prompts from a table of canned verdicts.

    The first key found inside the prompt picks the verdict; prompts matching
    no key get `default_response`. `delay_seconds` makes every answer slow
    (to trip the checker's timeout) and `error` makes every call fail.

    Example:
        backend = MockBackend({"诚实信用": "不准确"})
        backend.complete("法条原文：...\\n学生描述：诚实信用原则贯穿始终")
        # -> "不准确"
    """

    def __init__(
        self,
        responses: dict[str, str] | None = None,
        default_response: str = "准确",
        delay_seconds: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        """Initialize mock backend.

        Args:
            responses: Prompt substring -> verdict, checked in insertion order
            default_response: Verdict when no substring matches
            delay_seconds: Blocking sleep before each answer
            error: Raised from every call instead of answering
        """
        self._verdicts = dict(responses or {})
        self._default_response = default_response
        self._delay_seconds = delay_seconds
        self._error = error
        self._prompts: list[str] = []

    @property
    def model_id(self) -> str:
        return "mock"

    def complete(self, prompt: str) -> str:
        self._prompts.append(prompt)

        if self._delay_seconds:
            time.sleep(self._delay_seconds)
        if self._error is not None:
            raise self._error

        return next(
            (verdict for key, verdict in self._verdicts.items() if key in prompt),
            self._default_response,
        )

    @property
    def call_history(self) -> list[str]:
        """Prompts received so far, oldest first (a copy)."""
        return list(self._prompts)

    def clear_history(self) -> None:
        self._prompts.clear()
