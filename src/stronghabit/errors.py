# SPDX-License-Identifier: MIT

import logging
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class StrongHabitError(Exception):
    """Base class for every error raised across the store's public boundary."""

    pass


class ValidationError(StrongHabitError):
    """Raised when input values or a restored document have the wrong shape."""

    pass


class InvalidFormatError(ValidationError):
    """Raised when a backup file is not a valid backup envelope."""

    pass


class NotFoundError(StrongHabitError):
    """Raised when a referenced habit or backup does not exist."""

    pass


class BackupFileNotFoundError(NotFoundError):
    """Raised when a named backup file is missing from its expected path."""

    pass


class StorageError(StrongHabitError):
    """Raised when the persistence or file adapter fails."""

    pass


class StorageReadError(StorageError):
    """Raised when the persisted document cannot be parsed."""

    pass


class NoDataError(StrongHabitError):
    """Raised when a backup is requested but no document has been stored."""

    pass


class CollaboratorError(StrongHabitError):
    pass


class SharingUnavailableError(CollaboratorError):
    pass


class CloudConnectionError(CollaboratorError):
    pass


@contextmanager
def storage_errors(message: str) -> Iterator[None]:
    """
    Re-raise adapter failures as a StorageError carrying `message`.

    Errors from this module pass through untouched.
    """
    try:
        yield
    except StrongHabitError:
        raise
    except (OSError, ValueError) as error:
        logger.error("%s: %s", message, error)
        raise StorageError(message) from error
