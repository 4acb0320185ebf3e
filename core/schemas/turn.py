"""Turn schema and validator.

A Turn is one learner submission structured as IRAC (issue, rule,
application, conclusion) plus the fact and law ids it relies on.
Building a Turn does not validate it; validate_turn() is the gate every
submission must pass before any scorer sees it.
"""

from dataclasses import dataclass
from typing import Any, Mapping

from core.errors import TurnValidationError

STANCE_PRO = "pro"
STANCE_CON = "con"

VALID_STANCES = frozenset({STANCE_PRO, STANCE_CON})

# Minimum stripped length per IRAC field
MIN_FIELD_LENGTHS: dict[str, int] = {
    "issue": 10,
    "rule": 10,
    "application": 20,
    "conclusion": 5,
}

# Wire name -> attribute name
_FIELD_ALIASES = {
    "issueId": "issue_id",
    "citedFacts": "cited_facts",
    "citedLaws": "cited_laws",
}


@dataclass(frozen=True)
class Turn:
    """One learner submission.

    Attributes:
        issue_id: Id of the argued issue
        stance: "pro" or "con"
        issue: Issue statement
        rule: Governing rule as the learner states it
        application: Application of the rule to the facts
        conclusion: Conclusion
        cited_facts: Fact ids relied on
        cited_laws: Law ids relied on
        timestamp: Submission time (Unix seconds)
        duration: Seconds spent composing the turn
    """

    issue_id: str
    stance: str
    issue: str
    rule: str
    application: str
    conclusion: str
    cited_facts: tuple[str, ...] = ()
    cited_laws: tuple[str, ...] = ()
    timestamp: float | None = None
    duration: float | None = None

    @property
    def argument_text(self) -> str:
        """Issue, rule and application joined; the text searched for elements."""
        return self.issue + self.rule + self.application

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Turn":
        """Build a Turn from wire (camelCase) or snake_case keys without validating."""
        values = {_FIELD_ALIASES.get(key, key): value for key, value in data.items()}
        return cls(
            issue_id=values.get("issue_id", ""),
            stance=values.get("stance", ""),
            issue=values.get("issue", ""),
            rule=values.get("rule", ""),
            application=values.get("application", ""),
            conclusion=values.get("conclusion", ""),
            cited_facts=tuple(values.get("cited_facts") or ()),
            cited_laws=tuple(values.get("cited_laws") or ()),
            timestamp=values.get("timestamp"),
            duration=values.get("duration"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Wire form of the Turn."""
        data: dict[str, Any] = {
            "issueId": self.issue_id,
            "stance": self.stance,
            "issue": self.issue,
            "rule": self.rule,
            "application": self.application,
            "conclusion": self.conclusion,
            "citedFacts": list(self.cited_facts),
            "citedLaws": list(self.cited_laws),
        }
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        if self.duration is not None:
            data["duration"] = self.duration
        return data


def _text_violation(name: str, value: Any) -> str | None:
    minimum = MIN_FIELD_LENGTHS[name]
    if not isinstance(value, str):
        return f"{name}: must be a string"
    if len(value.strip()) < minimum:
        return f"{name}: must be at least {minimum} characters"
    return None


def _ids_violation(name: str, value: Any) -> str | None:
    if not isinstance(value, (list, tuple)):
        return f"{name}: must be a list of ids"
    if len(value) < 1:
        return f"{name}: must contain at least 1 id"
    if not all(isinstance(ref, str) and ref.strip() for ref in value):
        return f"{name}: ids must be non-empty strings"
    return None


def _number_violation(name: str, value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return f"{name}: must be a number"
    if value < 0:
        return f"{name}: must not be negative"
    return None


def _collect_violations(values: Mapping[str, Any]) -> list[str]:
    violations = []

    issue_id = values.get("issue_id")
    if not isinstance(issue_id, str) or not issue_id.strip():
        violations.append("issueId: must be a non-empty string")

    if values.get("stance") not in VALID_STANCES:
        violations.append(f"stance: must be one of {sorted(VALID_STANCES)}")

    for name in MIN_FIELD_LENGTHS:
        problem = _text_violation(name, values.get(name))
        if problem:
            violations.append(problem)

    for name, wire_name in (("cited_facts", "citedFacts"), ("cited_laws", "citedLaws")):
        problem = _ids_violation(wire_name, values.get(name))
        if problem:
            violations.append(problem)

    for name in ("timestamp", "duration"):
        problem = _number_violation(name, values.get(name))
        if problem:
            violations.append(problem)

    return violations


def turn_violations(turn: Turn) -> list[str]:
    """List every constraint a built Turn violates.

    Args:
        turn: Turn to check

    Returns:
        Violation messages, empty when the Turn is valid
    """
    return _collect_violations(
        {
            "issue_id": turn.issue_id,
            "stance": turn.stance,
            "issue": turn.issue,
            "rule": turn.rule,
            "application": turn.application,
            "conclusion": turn.conclusion,
            "cited_facts": turn.cited_facts,
            "cited_laws": turn.cited_laws,
            "timestamp": turn.timestamp,
            "duration": turn.duration,
        }
    )


def validate_turn(raw: Mapping[str, Any] | Turn) -> Turn:
    """Validate a submission and return it as a Turn.

    All constraints are checked; the error lists every violation, not just
    the first one.

    Args:
        raw: Submitted mapping (camelCase or snake_case keys) or a Turn

    Returns:
        The validated Turn

    Raises:
        TurnValidationError: If any constraint is violated
    """
    if isinstance(raw, Turn):
        violations = turn_violations(raw)
        if violations:
            raise TurnValidationError(violations)
        return raw

    if not isinstance(raw, Mapping):
        raise TurnValidationError(["turn: must be an object"])

    values = {_FIELD_ALIASES.get(key, key): value for key, value in raw.items()}
    violations = _collect_violations(values)
    if violations:
        raise TurnValidationError(violations)

    return Turn.from_dict(values)
