"""Errors raised by the confirmation workflow.

These are independent of HTTP: routes translate them into status codes
for operator screens, or into outcome pages for the public link.
"""


class StaffingError(Exception):
    """Base class for staffing workflow errors."""


class ValidationError(StaffingError):
    """The caller supplied an impossible input (empty member list, negative guests)."""


class NotFound(StaffingError):
    """A referenced event, session, request or member does not exist."""


class Expired(StaffingError):
    """The confirmation session is past its expiry."""


class InvalidTransition(StaffingError):
    """A different decision was attempted on an already answered request.

    The decision recorded first is kept.
    """

    def __init__(self, message: str, current_status: str):
        super().__init__(message)
        self.current_status = current_status
