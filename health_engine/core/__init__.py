"""
Core module for configuration, logging, and shared building blocks.

This module provides:
- Settings: Application configuration via pydantic-settings
- Engine tables: Validated lookup data loaded from engine.yaml
- Exceptions: Domain-specific exception classes with HTTP status codes
- Datetime utilities: Clock helpers and the LocalCalendar

Dependency injection lives in core.dependencies and is imported from there
directly, since it depends on the services package.
"""
from health_engine.core.config import Settings, get_settings

from health_engine.core.engine_config import (
    EngineConfig,
    load_engine_config,
    parse_engine_config,
)

from health_engine.core.exceptions import (
    HealthEngineError,
    EngineConfigError,
    InvalidScheduleError,
    setup_exception_handlers,
)

from health_engine.core.datetime_utils import (
    Clock,
    LocalCalendar,
    utc_now,
    fixed_clock,
    to_utc,
    format_iso,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Engine tables
    "EngineConfig",
    "load_engine_config",
    "parse_engine_config",
    # Exceptions
    "HealthEngineError",
    "EngineConfigError",
    "InvalidScheduleError",
    "setup_exception_handlers",
    # Datetime utilities
    "Clock",
    "LocalCalendar",
    "utc_now",
    "fixed_clock",
    "to_utc",
    "format_iso",
]
