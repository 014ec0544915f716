"""Error kinds raised by the repository and auth services."""
from __future__ import annotations


class LandingError(Exception):
    """Base error."""
    pass


class ValidationError(LandingError):
    """Malformed or missing field. Carries field-level messages."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {message}" for field, message in self.errors.items()))


class InvalidCredentials(LandingError):
    """Unknown email or wrong password. Same message for both."""

    MESSAGE = "Invalid email or password"

    def __init__(self):
        super().__init__(self.MESSAGE)


class NotFound(LandingError):
    """Unknown configuration id."""
    pass


class StorageError(LandingError):
    """Connection or constraint failure. Never retried."""
    pass


class Unauthorized(LandingError):
    """Missing or invalid session on a protected operation."""

    def __init__(self, redirect_from: str = "/"):
        self.redirect_from = redirect_from
        super().__init__("Not authenticated")
