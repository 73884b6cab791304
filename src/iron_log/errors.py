"""Exceptions raised by the persistence and service layers."""


class IronLogError(Exception):
    """Base class for application errors."""


class ValidationError(IronLogError):
    """Input rejected before it reaches the database."""


class NotFoundError(IronLogError):
    """A workout, exercise, log or user does not exist."""


class ExportNotConfigured(IronLogError):
    """Email export requested without credentials or recipient."""
