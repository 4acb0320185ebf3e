"""Text-completion backend used by the optional rule cross-check."""

from abc import ABC, abstractmethod


class Backend(ABC):
    """A blocking prompt -> text call to some language model.

    The rule cross-checker runs `complete` in a worker thread under a
    timeout, so implementations may block and may raise; any failure is
    turned into a skipped check by the caller.

    Implementations:
    - MockBackend: canned verdicts, for tests
    - OpenAIBackend: any OpenAI-compatible chat-completions endpoint
    """

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Identifier of the answering model, used in log lines."""
        pass

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """Answer one prompt.

        Args:
            prompt: Fully rendered cross-check prompt

        Returns:
            The model's raw answer text
        """
        pass
