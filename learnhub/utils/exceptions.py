from typing import Any


class LearnHubException(Exception):
    """Base exception for the learning core"""

    def __init__(self, message: str = "LearnHub error"):
        self.message = message
        super().__init__(self.message)


class ValidationException(LearnHubException):
    """Caller-correctable input problem (400). Raised before any write."""

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)


class ResourceNotFoundException(LearnHubException):
    """Referenced entity is absent (404)"""

    def __init__(self, message: str = "Resource Not Found"):
        super().__init__(message)


class PersistenceException(LearnHubException):
    """The store rejected a read or write (503). Never retried automatically."""

    def __init__(self, message: str = "Persistence failure"):
        super().__init__(message)


class AttemptPersistenceException(PersistenceException):
    """
    Writing a submitted attempt failed.

    ``state`` is the locally scored attempt so the caller can still show the
    learner their score and retry the write later.
    """

    def __init__(self, message: str, state: Any):
        self.state = state
        super().__init__(message)


class AccessDeniedException(LearnHubException):
    """Forbidden (403)"""

    def __init__(self, message: str = "Access Denied"):
        super().__init__(message)


class UnauthorizedException(LearnHubException):
    """Unauthorized (401)"""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)
