"""Exception types for iowaittop."""


class IowaitTopError(Exception):
    """Base class for iowaittop errors."""


class EnumerationError(IowaitTopError):
    """The process table could not be listed at all."""


class ConfigError(IowaitTopError, ValueError):
    """Configuration file is unreadable or holds invalid values."""
