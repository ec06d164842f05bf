"""Application-wide exception classes."""

from __future__ import annotations


class ApplicationError(Exception):
    """Base exception for all application errors."""
    pass


class ConfigurationError(ApplicationError):
    """Raised when configuration is invalid."""
    pass


class DatabaseError(ApplicationError):
    """Base exception for database-related errors."""
    pass


class RepositoryError(DatabaseError):
    """Raised when repository operation fails."""
    pass


class ServiceError(ApplicationError):
    """Base exception for service-level errors."""
    pass



class RemoteStoreError(ServiceError):
    """Raised when the hosted winner store is unreachable or returns bad data."""
    pass


class ValidationError(ApplicationError):
    """Raised when data validation fails."""
    pass


class DataIntegrityError(ValidationError):
    """Raised when a contestant dataset contains invalid records."""
    pass
