"""
Consecutive-day logging streaks with milestone progress.
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Protocol, Sequence

from health_engine.core.datetime_utils import Clock, LocalCalendar, utc_now
from health_engine.core.engine_config import EngineConfig
from health_engine.schemas.analytics import MilestoneBadge, StreakResult
from health_engine.services.scoring import round_half_up

logger = logging.getLogger(__name__)


class TimestampedEvent(Protocol):
    @property
    def timestamp(self) -> datetime: ...


class StreakTracker:
    """
    Reduces timestamped logs to a current and longest consecutive-day streak.

    A streak stays current for one day of grace: the most recent logged day
    may be today or yesterday.
    """

    def __init__(
        self,
        config: EngineConfig,
        calendar: Optional[LocalCalendar] = None,
        clock: Clock = utc_now,
    ):
        self._tables = config.streak
        self._calendar = calendar or LocalCalendar()
        self._clock = clock

    def calculate_streak(
        self,
        readings: Sequence[TimestampedEvent],
        now: Optional[datetime] = None,
    ) -> StreakResult:
        """
        Compute the streak for a set of logs.

        Args:
            readings: Any logs exposing ``timestamp`` (BP readings, diet, exercise).
            now: Reference instant. Defaults to the injected clock.

        Returns:
            StreakResult. Empty input yields zero streaks, no last log date,
            and the first milestone as the next goal.
        """
        milestones = self._tables.milestones
        if not readings:
            return StreakResult(
                current_streak=0,
                longest_streak=0,
                last_log_date=None,
                next_milestone=milestones[0],
                days_until_milestone=milestones[0],
                milestone_progress=0,
            )

        now = self._calendar.localize(now if now is not None else self._clock())
        timestamps = [self._calendar.localize(r.timestamp) for r in readings]
        days = sorted({self._calendar.day_of(ts) for ts in timestamps}, reverse=True)

        current_streak = self._current_run(days, self._calendar.day_of(now))
        longest_streak = max(self._longest_run(days), current_streak)

        next_milestone = next((m for m in milestones if m > current_streak), milestones[-1])
        previous_milestone = next((m for m in reversed(milestones) if m <= current_streak), 0)
        if previous_milestone == next_milestone:
            progress = 100
        else:
            progress = round_half_up(
                (current_streak - previous_milestone) / (next_milestone - previous_milestone) * 100
            )

        logger.debug(
            "Streak calculated",
            extra={"logged_days": len(days), "current": current_streak, "longest": longest_streak}
        )
        return StreakResult(
            current_streak=current_streak,
            longest_streak=longest_streak,
            last_log_date=max(timestamps),
            next_milestone=next_milestone,
            days_until_milestone=next_milestone - current_streak,
            milestone_progress=progress,
        )

    @staticmethod
    def _current_run(days_desc: List[date], today: date) -> int:
        """Length of the run ending at the most recent day, if that day is today or yesterday."""
        most_recent = days_desc[0]
        if most_recent not in (today, today - timedelta(days=1)):
            return 0

        streak = 1
        expected = most_recent - timedelta(days=1)
        for day in days_desc[1:]:
            if day != expected:
                break
            streak += 1
            expected -= timedelta(days=1)
        return streak

    @staticmethod
    def _longest_run(days_desc: List[date]) -> int:
        longest = run = 1
        for later, earlier in zip(days_desc, days_desc[1:]):
            run = run + 1 if (later - earlier).days == 1 else 1
            longest = max(longest, run)
        return longest

    def milestone_badge(self, streak: int) -> MilestoneBadge:
        """Badge for the highest threshold ``streak`` meets."""
        # badges are sorted highest first and end with a threshold-0 tier
        tier = next((b for b in self._tables.badges if streak >= b.threshold), self._tables.badges[-1])
        return MilestoneBadge(
            emoji=tier.emoji,
            title=tier.title,
            description=tier.description,
            color=tier.color,
        )

    def motivational_message(self, days_until_milestone: int) -> str:
        messages = self._tables.messages
        if days_until_milestone <= 0:
            return messages["reached"]
        if days_until_milestone == 1:
            return messages["one_day"]
        if days_until_milestone <= 3:
            return messages["within_three"]
        if days_until_milestone <= 7:
            return messages["within_week"]
        return messages["default"]
