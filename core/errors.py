"""Error taxonomy for the argumentation engine.

Only TurnValidationError and StateConflict abort an operation. The other
conditions degrade into lower scores or skipped checks.
"""


class TurnValidationError(ValueError):
    """A submitted Turn violates one or more schema constraints.

    Attributes:
        violations: Every violated constraint, in check order
    """

    def __init__(self, violations: list[str]) -> None:
        self.violations = list(violations)
        super().__init__("Invalid turn: " + "; ".join(self.violations))


class CitationLookupError(LookupError):
    """A cited fact or law id does not resolve in the lookup table."""

    def __init__(self, kind: str, ref_id: str) -> None:
        self.kind = kind
        self.ref_id = ref_id
        super().__init__(f"Unresolved {kind} citation: {ref_id}")


class ExternalCheckTimeout(TimeoutError):
    """The optional AI rule cross-check did not answer in time."""


class StateConflict(RuntimeError):
    """A session operation is not allowed in the session's current state."""
