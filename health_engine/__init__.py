"""
Health Engine - deterministic analytics for a personal blood-pressure tracker.

Schedules medication doses, tracks logging streaks, scores data quality,
ranks reminders and correlates BP with lifestyle factors. Every service is
pure: records in, derived values out.
"""

__version__ = "1.0.0"
