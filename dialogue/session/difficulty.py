"""Adaptive difficulty.

Adjusts session hardness from recent totals with plain threshold rules:
- Escalate one level when the last `escalate_window` totals are all at or
  above `escalate_threshold`
- De-escalate one level when the mean of the last `deescalate_window` totals
  is below `deescalate_threshold`
- Otherwise keep the current level

Only totals recorded since the last adjustment count, so one strong run
raises the level once.
"""

import logging
from dataclasses import dataclass

from core.config import EngineSettings
from core.schemas.case import HARDNESS_LEVELS
from core.schemas.session import SocraticSession

logger = logging.getLogger(__name__)

DIRECTION_UP = "increase"
DIRECTION_DOWN = "decrease"


@dataclass(frozen=True)
class DifficultyAdjustment:
    """Result of a difficulty check."""

    should_adjust: bool
    direction: str | None
    reason: str
    new_hardness: str | None = None


def raise_hardness(current: str) -> str:
    index = HARDNESS_LEVELS.index(current)
    return HARDNESS_LEVELS[min(index + 1, len(HARDNESS_LEVELS) - 1)]


def lower_hardness(current: str) -> str:
    index = HARDNESS_LEVELS.index(current)
    return HARDNESS_LEVELS[max(index - 1, 0)]


class DifficultyAdapter:
    """Threshold and windowed-average rules over the performance history."""

    def __init__(
        self,
        history_window: int = 5,
        escalate_window: int = 3,
        escalate_threshold: int = 85,
        deescalate_window: int = 3,
        deescalate_threshold: int = 55,
    ) -> None:
        self.history_window = history_window
        self.escalate_window = escalate_window
        self.escalate_threshold = escalate_threshold
        self.deescalate_window = deescalate_window
        self.deescalate_threshold = deescalate_threshold

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> "DifficultyAdapter":
        return cls(
            history_window=settings.history_window,
            escalate_window=settings.escalate_window,
            escalate_threshold=settings.escalate_threshold,
            deescalate_window=settings.deescalate_window,
            deescalate_threshold=settings.deescalate_threshold,
        )

    def check_adjustment(self, current: str, recent_totals: list[int]) -> DifficultyAdjustment:
        """Check if hardness should change.

        Args:
            current: Current hardness
            recent_totals: Totals since the last adjustment, oldest first

        Returns:
            DifficultyAdjustment with recommendation
        """
        if len(recent_totals) >= self.escalate_window:
            window = recent_totals[-self.escalate_window:]
            if all(total >= self.escalate_threshold for total in window):
                new_hardness = raise_hardness(current)
                if new_hardness != current:
                    return DifficultyAdjustment(
                        should_adjust=True,
                        direction=DIRECTION_UP,
                        reason=f"last {len(window)} totals >= {self.escalate_threshold}",
                        new_hardness=new_hardness,
                    )

        if len(recent_totals) >= self.deescalate_window:
            window = recent_totals[-self.deescalate_window:]
            mean = sum(window) / len(window)
            if mean < self.deescalate_threshold:
                new_hardness = lower_hardness(current)
                if new_hardness != current:
                    return DifficultyAdjustment(
                        should_adjust=True,
                        direction=DIRECTION_DOWN,
                        reason=f"mean {mean:.1f} of last {len(window)} totals < {self.deescalate_threshold}",
                        new_hardness=new_hardness,
                    )

        return DifficultyAdjustment(
            should_adjust=False, direction=None, reason="performance within thresholds"
        )

    def recent_totals(self, session: SocraticSession) -> list[int]:
        """Totals recorded since the last adjustment."""
        if session.totals_since_adjustment is None:
            return list(session.performance_history)
        if session.totals_since_adjustment == 0:
            return []
        return session.performance_history[-session.totals_since_adjustment:]

    def adapt(self, session: SocraticSession) -> DifficultyAdjustment:
        """Apply the hardness rule to the session as it stands.

        An adjustment changes current_hardness and restarts the run.
        """
        adjustment = self.check_adjustment(session.current_hardness, self.recent_totals(session))
        if adjustment.should_adjust:
            logger.info(
                "Session %s hardness %s -> %s (%s)",
                session.id,
                session.current_hardness,
                adjustment.new_hardness,
                adjustment.reason,
            )
            session.current_hardness = adjustment.new_hardness
            session.totals_since_adjustment = 0
        return adjustment

    def record(self, session: SocraticSession, total: int) -> None:
        """Append a total to the bounded performance history."""
        session.performance_history.append(total)
        del session.performance_history[: -self.history_window]
        if session.totals_since_adjustment is not None:
            session.totals_since_adjustment += 1
