"""Domain-specific errors for adbmux."""


class AdbmuxError(Exception):
    """Base error for adbmux."""


class BridgeUnavailableError(AdbmuxError):
    """Raised when the adb binary cannot be invoked or a query call fails."""


class NoCandidatesError(AdbmuxError):
    """Raised when there is nothing to select from (no devices, no packages)."""


class NoMatchError(NoCandidatesError):
    """Raised when a keyword expression matches zero packages."""


class InvalidSelectionError(AdbmuxError):
    """Raised when interactive input is not a valid choice."""


class InvocationFailureError(AdbmuxError):
    """Raised when a single bridge invocation exits non-zero or hits an I/O error."""


class ConfigurationMissingError(AdbmuxError):
    """Raised when a required setting is absent from the configuration."""


class ConfigValidationError(AdbmuxError):
    """Raised when the configuration file cannot be read or does not match the schema."""


class KeywordSyntaxError(AdbmuxError):
    """Raised when a package keyword carries a single wildcard marker."""
