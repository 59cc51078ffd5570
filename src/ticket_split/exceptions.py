"""Custom exceptions for TicketSplit."""


class TicketSplitError(Exception):
    """Base exception for all TicketSplit errors."""

    pass


class ConfigurationError(TicketSplitError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidAmountError(TicketSplitError):
    """Raised when an amount to split is not a valid positive number."""

    def __init__(self, amount: object, message: str | None = None):
        self.amount = amount
        super().__init__(
            message or f"Amount must be a valid positive number, got {amount!r}"
        )


class TicketNotFoundError(TicketSplitError):
    """Raised when a ticket id does not exist in the store."""

    def __init__(self, ticket_id: int):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket #{ticket_id} not found")


class LinkIndexError(TicketSplitError, IndexError):
    """Raised when a link index is outside a ticket's list of parts."""

    def __init__(self, ticket_id: int, index: int, size: int):
        self.ticket_id = ticket_id
        self.index = index
        self.size = size
        super().__init__(
            f"Ticket #{ticket_id} has {size} parts; index {index} is out of range"
        )


class OperationValidationError(TicketSplitError):
    """Raised when an operation draft fails validation."""

    pass


class OperationNotFoundError(TicketSplitError):
    """Raised when an operation id does not exist in the store."""

    def __init__(self, operation_id: str):
        self.operation_id = operation_id
        super().__init__(f"Operation {operation_id} not found")


class ExportError(TicketSplitError):
    """Raised when a ticket document cannot be written."""

    pass
