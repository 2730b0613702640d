"""Custom exception hierarchy for the wishlist domain core."""


class WishinError(Exception):
    """Base exception for all wishin errors."""


# --- Configuration ---
class ConfigError(WishinError):
    """Invalid or missing configuration."""


# --- Domain ---
class DomainError(WishinError):
    """A domain rule rejected the requested state or operation.

    ``field`` names the offending attribute when there is one.
    """

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class InvalidAttributeError(DomainError):
    """Structural or content rule violated, or a restricted field was touched."""


class InsufficientStockError(DomainError):
    """A reservation or purchase would exceed the available quantity."""


class InvalidTransitionError(DomainError):
    """The operation is not legal from the current state."""


class LimitExceededError(DomainError):
    """A per-aggregate ceiling (e.g. items per wishlist) would be exceeded."""


class InvalidOperationError(DomainError):
    """Target not found, duplicate add, or cross-aggregate ownership mismatch."""
