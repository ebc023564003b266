"""Error types raised by the finance tracker."""


class FinanceError(Exception):
    """Base class for tracker errors."""


class InvalidInput(FinanceError, ValueError):
    """User input rejected before any write is attempted."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


class InvalidConfiguration(FinanceError, ValueError):
    """A configured value makes a computation undefined."""
