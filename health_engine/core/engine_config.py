"""
Engine tables - the fixed lookup data behind every analytics rule.

This module provides:
- YAML-based loading and validation of engine.yaml
- Immutable dataclasses for streak, quality, reminder and medication tables
- A cached default configuration, plus loading from any other file

The tables are plain data handed to each service at construction time, so
tests and callers can swap in their own without touching module state.
YAML access is encapsulated here - no other module reads engine.yaml directly.

Usage:
    from health_engine.core.engine_config import load_engine_config

    config = load_engine_config()
    config.streak.milestones        # (3, 7, 14, ...)
    config.quality.weights["bpLogging"]  # 30

    # Override a table in a test
    custom = dataclasses.replace(config, streak=StreakTables(...))
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from health_engine.core.exceptions import EngineConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "engine.yaml"

QUALITY_DIMENSIONS = (
    "bpLogging",
    "exerciseLogging",
    "dietLogging",
    "medicationAdherence",
    "bpContextNotes",
)
MESSAGE_KEYS = ("reached", "one_day", "within_three", "within_week", "default")
PRIORITIES = ("high", "medium", "low")
REMINDER_TYPES = ("medication", "bp", "exercise", "diet")


# =============================================================================
# TABLE DATACLASSES
# =============================================================================

@dataclass(frozen=True)
class BadgeTier:
    """One row of the streak badge table."""
    threshold: int
    emoji: str
    title: str
    description: str
    color: str


@dataclass(frozen=True)
class StreakTables:
    """
    Tables used by the streak tracker.

    Attributes:
        milestones: Strictly ascending streak lengths that count as milestones
        badges: Badge tiers sorted by threshold, highest first
        messages: Motivational messages keyed by MESSAGE_KEYS
    """
    milestones: Tuple[int, ...]
    badges: Tuple[BadgeTier, ...]
    messages: Mapping[str, str]


@dataclass(frozen=True)
class QualityThresholds:
    high_systolic: int = 140
    high_diastolic: int = 90
    min_note_length: int = 10
    meals_per_day: int = 3


@dataclass(frozen=True)
class SuggestionThresholds:
    """Cut-offs below (or above) which an improvement suggestion is emitted."""
    bp_logging_below: float = 70
    exercise_logging_below: float = 50
    diet_logging_below: float = 50
    adherence_below: float = 80
    context_gap_share_above: float = 0.3


@dataclass(frozen=True)
class QualityTables:
    weights: Mapping[str, float]
    thresholds: QualityThresholds
    suggestions: SuggestionThresholds


@dataclass(frozen=True)
class ReminderTables:
    priority_weights: Mapping[str, int]
    type_weights: Mapping[str, int]
    exercise_gap_days: int = 3


@dataclass(frozen=True)
class FrequencyDefinition:
    """Display label and expected dose rate for a medication frequency."""
    label: str
    doses: int
    every_days: int

    @property
    def doses_per_day(self) -> float:
        return self.doses / self.every_days


@dataclass(frozen=True)
class EngineConfig:
    """All engine tables in one immutable bundle."""
    streak: StreakTables
    quality: QualityTables
    reminders: ReminderTables
    frequencies: Mapping[str, FrequencyDefinition]


# =============================================================================
# YAML LOADING & VALIDATION
# =============================================================================

def _load_yaml(path: Path) -> Dict[str, Any]:
    """
    Load and parse a YAML tables file.

    Raises:
        EngineConfigError: If the file is missing or cannot be parsed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        logger.error("Engine tables file not found", extra={"path": str(path)})
        raise EngineConfigError("Engine tables file not found", path=str(path)) from e
    except yaml.YAMLError as e:
        logger.error("Failed to parse engine tables", extra={"path": str(path), "error": str(e)})
        raise EngineConfigError("Failed to parse engine tables", path=str(path)) from e

    if not isinstance(data, dict):
        raise EngineConfigError("Engine tables file must contain a mapping", path=str(path))
    return data


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key)
    if not isinstance(value, dict):
        raise EngineConfigError(f"Missing or invalid section: '{key}'")
    return value


def _require_keys(mapping: Mapping[str, Any], keys: Tuple[str, ...], where: str) -> None:
    missing = [k for k in keys if k not in mapping]
    if missing:
        raise EngineConfigError(f"{where} is missing keys: {', '.join(missing)}")


def _parse_streak(raw: Dict[str, Any]) -> StreakTables:
    milestones = tuple(int(m) for m in raw.get("milestones") or ())
    if not milestones:
        raise EngineConfigError("streak.milestones must not be empty")
    if any(m <= 0 for m in milestones):
        raise EngineConfigError("streak.milestones must be positive")
    if any(b <= a for a, b in zip(milestones, milestones[1:])):
        raise EngineConfigError("streak.milestones must be strictly ascending")

    badges = []
    for i, entry in enumerate(raw.get("badges") or ()):
        try:
            badges.append(BadgeTier(
                threshold=int(entry["threshold"]),
                emoji=str(entry.get("emoji", "")),
                title=str(entry["title"]),
                description=str(entry.get("description", "")),
                color=str(entry.get("color", "gray")),
            ))
        except (KeyError, TypeError, ValueError) as e:
            raise EngineConfigError(f"streak.badges[{i}] is invalid: {e}") from e
    badges.sort(key=lambda b: b.threshold, reverse=True)
    if not badges or badges[-1].threshold != 0:
        raise EngineConfigError("streak.badges needs a fallback tier with threshold 0")

    messages = raw.get("messages") or {}
    _require_keys(messages, MESSAGE_KEYS, "streak.messages")

    return StreakTables(
        milestones=milestones,
        badges=tuple(badges),
        messages={k: str(messages[k]) for k in MESSAGE_KEYS},
    )


def _parse_quality(raw: Dict[str, Any]) -> QualityTables:
    weights = raw.get("weights") or {}
    _require_keys(weights, QUALITY_DIMENSIONS, "quality.weights")
    parsed_weights = {k: float(weights[k]) for k in QUALITY_DIMENSIONS}
    total = sum(parsed_weights.values())
    if abs(total - 100) > 1e-9:
        raise EngineConfigError(f"quality.weights must sum to 100, got {total:g}")

    return QualityTables(
        weights=parsed_weights,
        thresholds=QualityThresholds(**(raw.get("thresholds") or {})),
        suggestions=SuggestionThresholds(**(raw.get("suggestions") or {})),
    )


def _parse_reminders(raw: Dict[str, Any]) -> ReminderTables:
    priority_weights = raw.get("priority_weights") or {}
    type_weights = raw.get("type_weights") or {}
    _require_keys(priority_weights, PRIORITIES, "reminders.priority_weights")
    _require_keys(type_weights, REMINDER_TYPES, "reminders.type_weights")
    return ReminderTables(
        priority_weights={k: int(priority_weights[k]) for k in PRIORITIES},
        type_weights={k: int(type_weights[k]) for k in REMINDER_TYPES},
        exercise_gap_days=int(raw.get("exercise_gap_days", 3)),
    )


def _parse_frequencies(raw: Dict[str, Any]) -> Dict[str, FrequencyDefinition]:
    frequencies = raw.get("frequencies") or {}
    parsed: Dict[str, FrequencyDefinition] = {}
    for name, entry in frequencies.items():
        try:
            definition = FrequencyDefinition(
                label=str(entry["label"]),
                doses=int(entry.get("doses", 1)),
                every_days=int(entry.get("every_days", 1)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise EngineConfigError(f"medications.frequencies.{name} is invalid: {e}") from e
        if definition.every_days <= 0:
            raise EngineConfigError(f"medications.frequencies.{name}.every_days must be positive")
        parsed[name] = definition
    return parsed


def parse_engine_config(raw: Dict[str, Any]) -> EngineConfig:
    """
    Validate a raw tables mapping and build an EngineConfig.

    Raises:
        EngineConfigError: If any table is missing or invalid
    """
    try:
        return EngineConfig(
            streak=_parse_streak(_section(raw, "streak")),
            quality=_parse_quality(_section(raw, "quality")),
            reminders=_parse_reminders(_section(raw, "reminders")),
            frequencies=_parse_frequencies(_section(raw, "medications")),
        )
    except TypeError as e:
        # Unknown keys in a thresholds block surface as dataclass TypeErrors
        raise EngineConfigError(f"Invalid engine tables: {e}") from e


@lru_cache(maxsize=8)
def load_engine_config(path: Optional[Path] = None) -> EngineConfig:
    """
    Load, validate and cache engine tables.

    Args:
        path: YAML file to load. Defaults to the bundled engine.yaml.

    Returns:
        The parsed EngineConfig. Repeated calls with the same path return
        the same instance.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = parse_engine_config(_load_yaml(config_path))
    logger.info(
        "Engine tables loaded",
        extra={"path": str(config_path), "milestones": len(config.streak.milestones)}
    )
    return config
