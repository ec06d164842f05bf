"""Core application components."""

from core.logger import setup_logger, get_logger
from core.constants import (
    DrawType,
    Department,
    RaffleDefaults,
    CacheDefaults,
    DatabaseDefaults,
    RemoteStoreDefaults,
    ExportDefaults,
)
from core.exceptions import (
    ApplicationError,
    ConfigurationError,
    DatabaseError,
    RepositoryError,
    ServiceError,
    RemoteStoreError,
    ValidationError,
    DataIntegrityError,
)

__all__ = [
    # Logging
    'setup_logger',
    'get_logger',
    # Constants
    'DrawType',
    'Department',
    'RaffleDefaults',
    'CacheDefaults',
    'DatabaseDefaults',
    'RemoteStoreDefaults',
    'ExportDefaults',
    # Exceptions
    'ApplicationError',
    'ConfigurationError',
    'DatabaseError',
    'RepositoryError',
    'ServiceError',
    'RemoteStoreError',
    'ValidationError',
    'DataIntegrityError',
]
