"""Exception and warning types raised while building depots."""


class DepotError(Exception):
    """Base class for depot build failures."""


class ConfigurationError(DepotError, ValueError):
    """Raised when a project descriptor or build configuration is unusable."""


class ResolutionError(DepotError, RuntimeError):
    """Raised when dependencies cannot be instantiated or linked into a depot."""


class VerificationWarning(UserWarning):
    """Emitted when a depot contains artifacts foreign to its target platform."""
