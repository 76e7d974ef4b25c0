"""Core exception hierarchy for crategate.

Only conditions that must stop an invocation outright are exceptions.
Git, registry, ownership and version-collision problems are not raised:
they become findings in the validation report and are resolved by the
verdict rule. All crategate exceptions inherit from CrateGateError and
carry the process exit code the CLI should use.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes used by the ``validate`` command.

    ``INPUT_ERROR`` is used for a bad manifest or configuration and for
    invalid command-line values.
    """

    OK = 0
    INPUT_ERROR = 1
    BLOCKED = 2
    DECLINED = 3
    PUBLISH_NOT_STARTED = 4


# ============================================================================
# Base Exception
# ============================================================================


class CrateGateError(Exception):
    """Base exception for all crategate errors.

    Catch this to handle every error the gate raises itself.
    """

    exit_code: ExitCode = ExitCode.INPUT_ERROR


# ============================================================================
# Manifest Errors
# ============================================================================


class ManifestError(CrateGateError):
    """Base class for errors reading the package manifest.

    Manifest errors are fatal: nothing can be validated without metadata.
    """

    exit_code = ExitCode.INPUT_ERROR


class ManifestNotFoundError(ManifestError):
    """Raised when the manifest file does not exist.

    Examples
    --------
    Example usage::

        raise ManifestNotFoundError(Path("Cargo.toml"))
    """

    def __init__(self, path: object) -> None:
        """Initialize manifest not found error.

        Args
        ----
            path: Location that was searched for the manifest
        """
        super().__init__(f"Manifest not found: {path}")
        self.path = path


class ManifestMalformedError(ManifestError):
    """Raised when the manifest cannot be parsed or lacks required fields.

    Examples
    --------
    Example usage::

        raise ManifestMalformedError(Path("Cargo.toml"), "missing [package] table")
    """

    def __init__(self, path: object, reason: str) -> None:
        """Initialize manifest malformed error.

        Args
        ----
            path: Manifest file that failed to parse
            reason: Explanation of what's wrong
        """
        super().__init__(f"Malformed manifest {path}: {reason}")
        self.path = path
        self.reason = reason


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(CrateGateError):
    """Raised when configuration is invalid or missing.

    Examples
    --------
    Example usage::

        raise ConfigurationError("registry.timeout", "must be positive")
    """

    exit_code = ExitCode.INPUT_ERROR

    def __init__(self, component: str, reason: str) -> None:
        """Initialize configuration error.

        Args
        ----
            component: Name of the setting or section with invalid configuration
            reason: Explanation of what's wrong
        """
        super().__init__(f"Configuration error in '{component}': {reason}")
        self.component = component
        self.reason = reason


# ============================================================================
# Driver Errors
# ============================================================================


class PublishCommandError(CrateGateError):
    """Raised when the underlying publish command cannot be started."""

    exit_code = ExitCode.PUBLISH_NOT_STARTED

    def __init__(self, command: list[str], reason: str) -> None:
        self.command = command
        self.reason = reason
        super().__init__(f"Could not run '{' '.join(command)}': {reason}")


__all__ = [
    "ConfigurationError",
    "CrateGateError",
    "ExitCode",
    "ManifestError",
    "ManifestMalformedError",
    "ManifestNotFoundError",
    "PublishCommandError",
]
