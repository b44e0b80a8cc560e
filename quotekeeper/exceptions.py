"""Exception types shared across the application."""


class QuoteKeeperError(Exception):
    """Base class for application errors."""


class ConfigurationError(QuoteKeeperError):
    """Required configuration is missing or invalid."""


class StoreUnavailableError(QuoteKeeperError):
    """The durable store could not be reached."""


class DuplicateRecordError(QuoteKeeperError):
    """A record violates a uniqueness rule (for example a second account for one email)."""
