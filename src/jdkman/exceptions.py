"""
Custom exceptions for jdkman.

This module defines domain-specific exceptions that provide better error
categorization and more informative error messages for users and developers.
"""

from pathlib import Path
from typing import Optional, Union


class JdkManagerError(Exception):
    """
    Base exception for all jdkman errors.

    All custom exceptions in jdkman should inherit from this class
    to allow for easy catching of all application-specific errors.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(JdkManagerError):
    """
    Exception raised when configuration is invalid or missing.

    This includes:
    - Invalid configuration values
    - Configuration file parsing errors
    - Provider lists that yield no usable provider
    """

    pass


class ConfigFileError(ConfigurationError):
    """Exception raised when the configuration file cannot be read or parsed."""

    pass


class ProviderConfigurationError(ConfigurationError):
    """Exception raised when the set of providers handed to the manager is unusable."""

    pass


# =============================================================================
# Resolution Errors
# =============================================================================


class JdkNotFoundError(JdkManagerError):
    """
    Exception raised when no installed or available JDK matches a request.

    Attributes:
        requested: The version (as int) or id (as str) that was asked for, or
            None for an unconstrained request.
    """

    def __init__(
        self,
        message: str,
        requested: Union[int, str, None] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.requested = requested


class UnsupportedOperationError(JdkManagerError):
    """
    Exception raised when a provider is asked to do something it cannot do.

    Attributes:
        provider: Name of the provider that refused the operation.
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.provider = provider


class InvalidInputError(JdkManagerError):
    """Exception raised for malformed ids, paths or version tokens."""

    pass


class JdkStateError(JdkManagerError):
    """Exception raised when a JDK object is used in a way its state doesn't allow."""

    pass


# =============================================================================
# Lifecycle Errors
# =============================================================================


class InstallError(JdkManagerError):
    """
    Exception raised when downloading, unpacking or swapping in a JDK fails.

    The original failure is chained as ``__cause__``.

    Attributes:
        version: The major version whose installation failed.
    """

    def __init__(
        self,
        message: str,
        version: Optional[int] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.version = version


class ResourceBusyError(JdkManagerError):
    """
    Exception raised when a JDK folder is held open by another process.

    Attributes:
        path: The folder that could not be moved.
    """

    def __init__(
        self,
        message: str,
        path: Optional[Path] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


# =============================================================================
# Catalog Errors
# =============================================================================


class CatalogError(JdkManagerError):
    """
    Base exception for remote catalog access.

    Attributes:
        url: The URL that was being fetched when the error occurred.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url


class NetworkError(CatalogError):
    """
    Exception raised for network-related failures.

    This includes:
    - Connection timeouts
    - DNS resolution failures
    - Connection refused errors
    - SSL/TLS errors
    """

    pass


class HTTPError(CatalogError):
    """
    Exception raised for unexpected HTTP responses.

    Attributes:
        status_code: The HTTP status code returned by the server.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, url, details)
        self.status_code = status_code


# =============================================================================
# Archive Errors
# =============================================================================


class ArchiveError(JdkManagerError):
    """
    Base exception for archive-related errors.

    Attributes:
        archive_path: Path to the archive file.
    """

    def __init__(
        self,
        message: str,
        archive_path: Optional[Path] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.archive_path = archive_path


class ExtractionError(ArchiveError):
    """
    Exception raised when an archive member cannot be extracted safely.

    This includes members whose normalized path escapes the output directory.
    """

    pass
