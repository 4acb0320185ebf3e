"""Challenge schema."""

from dataclasses import dataclass
from typing import Any

KIND_COUNTER = "counter"
KIND_HYPOTHETICAL = "hypothetical"
KIND_CLARIFICATION = "clarification"

VALID_KINDS = frozenset({KIND_COUNTER, KIND_HYPOTHETICAL, KIND_CLARIFICATION})


@dataclass(frozen=True)
class Challenge:
    """An adversarial follow-up prompt.

    Attributes:
        kind: "counter", "hypothetical" or "clarification"
        prompt: Learner-facing prompt text
        target_element: Element or dimension the challenge targets
        suggested_response: Hint on how to answer
    """

    kind: str
    prompt: str
    target_element: str | None = None
    suggested_response: str | None = None

    def __post_init__(self) -> None:
        """Validate kind is one of the allowed values."""
        if self.kind not in VALID_KINDS:
            raise ValueError(f"Invalid kind '{self.kind}'. Must be one of: {VALID_KINDS}")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind, "prompt": self.prompt}
        if self.target_element is not None:
            data["targetElement"] = self.target_element
        if self.suggested_response is not None:
            data["suggestedResponse"] = self.suggested_response
        return data
