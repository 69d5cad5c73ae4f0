"""Exceptions raised by the Shikkha catalog runtime."""


class ShikkhaError(Exception):
    """Base class for catalog errors."""


class AuthError(ShikkhaError):
    """Establishing an identity failed."""


class StoreError(ShikkhaError):
    """A read, write or subscription against the lesson store failed."""


class LessonValidationError(ShikkhaError, ValueError):
    """A submitted lesson was rejected before any store write."""
