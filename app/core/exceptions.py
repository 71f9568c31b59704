"""
Custom Exceptions

This module defines custom exceptions for better error handling
and more specific error messages.

Only failures that cross a service boundary get their own type:
- DatabaseError: the log store could not be read
- OriginUnavailableError: a pass-through request could not reach its origin

Visitor writes never raise; they are logged and counted by the log store.
"""


class ParkedDomainTrackerException(Exception):
    """Base exception for the parked domain tracker."""
    pass


class DatabaseError(ParkedDomainTrackerException):
    """Raised when database operations fail."""

    def __init__(self, message: str, original_error: Exception = None):
        self.message = message
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


class OriginUnavailableError(ParkedDomainTrackerException):
    """Raised when a pass-through request cannot reach its origin."""

    def __init__(self, hostname: str, original_error: Exception = None):
        self.hostname = hostname
        self.original_error = original_error
        super().__init__(f"Origin for '{hostname}' is unavailable")
