class DownpourError(Exception):
    """Base class for everything raised by downpour."""


class ConfigError(DownpourError, ValueError):
    """Invalid endpoint configuration or request template."""


class TransportError(DownpourError):
    """A request never produced an HTTP response (refused, timed out, DNS...)."""

    def __init__(self, cause: str):
        super().__init__(cause)
        self.cause = cause


class EmptyResultsError(DownpourError):
    """Statistics were requested over zero outcomes."""
