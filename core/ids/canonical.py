"""Canonical IDs and inline citation markers.

ID Schemes:
- Session: session::<case_id>::<token>
- Turn: turn::<session_id>::<index>
- Argument node: node::<turn_id>::<kind>::<n>

Inline citation markers follow the [Fx]/[Ly] convention: a fact id "3" or
"F3" is cited in prose as "[F3]", a law id "2" or "L2" as "[L2]".
"""

import uuid

FACT_PREFIX = "F"
LAW_PREFIX = "L"


def _marker(prefix: str, ref_id: str) -> str:
    ref = ref_id.strip().strip("[]")
    if ref[:1].upper() == prefix:
        ref = ref[1:]
    return f"[{prefix}{ref}]"


def fact_marker(fact_id: str) -> str:
    """Inline marker for a fact citation.

    Examples:
        >>> fact_marker("3")
        '[F3]'
        >>> fact_marker("F3")
        '[F3]'
    """
    return _marker(FACT_PREFIX, fact_id)


def law_marker(law_id: str) -> str:
    """Inline marker for a law citation.

    Examples:
        >>> law_marker("L2")
        '[L2]'
    """
    return _marker(LAW_PREFIX, law_id)


def session_id(case_id: str, token: str | None = None) -> str:
    """Generate a session ID.

    Args:
        case_id: Case the session argues about
        token: Optional fixed token (random hex when omitted)

    Examples:
        >>> session_id("contract-01", "abc")
        'session::contract-01::abc'
    """
    token = token or uuid.uuid4().hex[:12]
    return f"session::{case_id}::{token}"


def turn_id(session: str, index: int) -> str:
    """Generate the ID of the index-th Turn (0-based) of a session.

    Examples:
        >>> turn_id("session::c1::abc", 0)
        'turn::session::c1::abc::0'
    """
    return f"turn::{session}::{index}"


def node_id(turn: str, kind: str, n: int) -> str:
    """Generate an argument-tree node ID."""
    return f"node::{turn}::{kind}::{n}"
