"""
Trace verbosity settings.

A plain value object holding the default trace level and per-logger
overrides. Levels map onto the stdlib ``logging`` levels that structlog
filters on.
"""

import logging
import os
from enum import IntEnum
from typing import Any, Dict, Optional

TRACE_VERBOSE_ENV = "PAGEDLOG_TRACE_VERBOSE"


class TraceLevel(IntEnum):
    """Trace verbosity, from silent to everything."""

    OFF = 0
    CRITICAL = 1
    ERROR = 2
    WARNING = 3
    INFO = 4
    VERBOSE = 5

    def to_logging_level(self) -> int:
        """Map to the equivalent stdlib logging level."""
        return _LOGGING_LEVELS.get(self, logging.INFO)

    @classmethod
    def parse(cls, value: Any) -> "TraceLevel":
        """
        Parse a level from its name (case-insensitive) or number.

        Raises:
            ValueError: If value names no level
        """
        if isinstance(value, TraceLevel):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown trace level: {value!r}") from None


_LOGGING_LEVELS = {
    TraceLevel.OFF: logging.CRITICAL + 10,
    TraceLevel.CRITICAL: logging.CRITICAL,
    TraceLevel.ERROR: logging.ERROR,
    TraceLevel.WARNING: logging.WARNING,
    TraceLevel.INFO: logging.INFO,
    TraceLevel.VERBOSE: logging.DEBUG,
}


class TraceSetting:
    """
    Default trace level plus per-logger overrides.

    Logger names in the override table are matched case-insensitively.

    Attributes:
        default_trace_level: Level used for loggers without an override
    """

    def __init__(self, default_trace_level: Optional[TraceLevel] = None):
        # an explicit or env-forced default overrides the configured logging level
        self.default_is_explicit = default_trace_level is not None
        if default_trace_level is None:
            default_trace_level = TraceLevel.INFO
            if os.getenv(TRACE_VERBOSE_ENV):
                default_trace_level = TraceLevel.VERBOSE
                self.default_is_explicit = True

        self.default_trace_level = default_trace_level
        self._detail_trace_setting: Dict[str, TraceLevel] = {}

    @property
    def detail_trace_setting(self) -> Dict[str, TraceLevel]:
        """Per-logger overrides keyed by lower-cased logger name."""
        return self._detail_trace_setting

    def set_level(self, name: str, level: TraceLevel) -> None:
        self._detail_trace_setting[name.lower()] = TraceLevel.parse(level)

    def level_for(self, name: str) -> TraceLevel:
        """Return the override for ``name`` or the default level."""
        return self._detail_trace_setting.get(name.lower(), self.default_trace_level)

    def apply(self, include_default: bool = True) -> None:
        """
        Push the configured levels onto the stdlib loggers.

        Args:
            include_default: Also set the root logger to the default level
        """
        if include_default:
            logging.getLogger().setLevel(self.default_trace_level.to_logging_level())
        for name, level in self._detail_trace_setting.items():
            logging.getLogger(name).setLevel(level.to_logging_level())

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TraceSetting":
        """
        Build settings from a configuration mapping.

        Args:
            data: Mapping with optional ``default_trace_level`` and
                ``detail_trace_setting`` keys

        Returns:
            TraceSetting instance
        """
        data = data or {}
        default = data.get("default_trace_level")
        setting = cls(TraceLevel.parse(default) if default is not None else None)
        for name, level in (data.get("detail_trace_setting") or {}).items():
            setting.set_level(name, level)
        return setting

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, omitting an empty override table."""
        data: Dict[str, Any] = {"default_trace_level": self.default_trace_level.name.capitalize()}
        if self._detail_trace_setting:
            data["detail_trace_setting"] = {
                name: level.name.capitalize()
                for name, level in self._detail_trace_setting.items()
            }
        return data

    def __repr__(self) -> str:
        return (
            f"TraceSetting(default={self.default_trace_level.name}, "
            f"overrides={len(self._detail_trace_setting)})"
        )
