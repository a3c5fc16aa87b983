"""Exception types raised by the usage tracker."""

from __future__ import annotations


class UsageTrackerError(Exception):
    """Base class for tracker errors."""


class ProbeError(UsageTrackerError):
    """The active-window probe failed or returned nothing usable."""


class PersistenceError(UsageTrackerError):
    """Reading or writing the usage history failed."""


class ConfigError(UsageTrackerError):
    """A configuration value or location could not be resolved."""
