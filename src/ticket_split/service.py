"""Service layer that composes splitting, operation logging and persistence.

The CLI talks to this module only; it owns the validation the operator's
input needs before anything reaches the splitter or the database.
"""

import logging
from datetime import datetime
from decimal import Decimal

from .db import Database
from .exceptions import (
    InvalidAmountError,
    LinkIndexError,
    OperationNotFoundError,
    TicketNotFoundError,
)
from .models import Operation, OperationDraft, OperationTotals, Ticket, TradingPair
from .money import format_brl, to_decimal
from .operations import (
    build_operation,
    compute_totals,
    filter_operations,
    validate_draft,
)
from .splitter import SPLIT_CEILING, RandomSource, split_amount

logger = logging.getLogger(__name__)

MAX_TRANSFERS = 1000
MAX_TICKET_TOTAL = Decimal(SPLIT_CEILING * MAX_TRANSFERS)


class TicketService:
    """Service for creating split tickets and logging operations against them."""

    def __init__(self, database: Database, rng: RandomSource | None = None):
        """Initialize the ticket service."""
        self.db = database
        self.rng = rng

    # ========================================================================
    # Tickets
    # ========================================================================

    def create_ticket(self, total: Decimal | int | float | str) -> Ticket:
        """
        Split a total into transfer parts and register them as a new ticket.

        Args:
            total: Amount in reais to split

        Returns:
            The saved ticket

        Raises:
            InvalidAmountError: If the total is not a positive number or would
                need more than MAX_TRANSFERS transfers
        """
        try:
            amount = to_decimal(total)
        except ValueError as e:
            raise InvalidAmountError(total) from e

        if amount <= 0:
            raise InvalidAmountError(total)

        if amount > MAX_TICKET_TOTAL:
            raise InvalidAmountError(
                total,
                f"Amount {total} exceeds the maximum of "
                f"{format_brl(MAX_TICKET_TOTAL)} ({MAX_TRANSFERS} transfers)",
            )

        amounts = split_amount(amount, rng=self.rng)
        if not amounts:
            # Positive but rounds to zero cents
            raise InvalidAmountError(total)

        ticket = Ticket(
            id=self.db.next_ticket_id(),
            created_at=datetime.now(),
            amounts=amounts,
        )
        self.db.save_ticket(ticket)

        logger.info(
            f"Created ticket #{ticket.id} with {len(amounts)} parts, "
            f"total: {ticket.total}"
        )
        return ticket

    def get_ticket(self, ticket_id: int) -> Ticket:
        """
        Get a ticket by id.

        Raises:
            TicketNotFoundError: If no such ticket exists
        """
        ticket = self.db.get_ticket(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    def list_tickets(self) -> list[Ticket]:
        """All tickets, newest first."""
        return self.db.list_tickets()

    def set_link(self, ticket_id: int, index: int, value: str) -> Ticket:
        """Set the transfer link of one part (0-based index)."""
        return self._set_ticket_link(ticket_id, index, value, receipt=False)

    def set_receipt_link(self, ticket_id: int, index: int, value: str) -> Ticket:
        """Set the receipt link of one part (0-based index)."""
        return self._set_ticket_link(ticket_id, index, value, receipt=True)

    def _set_ticket_link(
        self, ticket_id: int, index: int, value: str, receipt: bool
    ) -> Ticket:
        ticket = self.get_ticket(ticket_id)
        size = len(ticket.amounts)
        if not 0 <= index < size:
            raise LinkIndexError(ticket_id, index, size)

        target = ticket.receipt_links if receipt else ticket.links
        target[index] = value.strip()
        self.db.update_ticket_links(ticket.id, ticket.links, ticket.receipt_links)

        kind = "receipt link" if receipt else "link"
        logger.info(f"Updated {kind} {index + 1} of ticket #{ticket_id}")
        return ticket

    # ========================================================================
    # Operations
    # ========================================================================

    def add_operation(self, draft: OperationDraft) -> Operation:
        """
        Validate a draft, derive its totals and log it.

        Raises:
            TicketNotFoundError: If the referenced ticket does not exist
            OperationValidationError: If the draft values are invalid
        """
        if self.db.get_ticket(draft.ticket_id) is None:
            raise TicketNotFoundError(draft.ticket_id)

        validate_draft(draft)
        operation = build_operation(draft)
        self.db.save_operation(operation)

        logger.info(
            f"Logged {operation.pair} operation {operation.order_number} on "
            f"ticket #{operation.ticket_id} (final rate {operation.final_rate})"
        )
        return operation

    def delete_operation(self, operation_id: str) -> None:
        """
        Delete a logged operation.

        Raises:
            OperationNotFoundError: If no such operation exists
        """
        if not self.db.delete_operation(operation_id):
            raise OperationNotFoundError(operation_id)
        logger.info(f"Deleted operation {operation_id}")

    def list_operations(
        self, pair: TradingPair | None = None, ticket_id: int | None = None
    ) -> list[Operation]:
        """Operations matching the filters, most recent trade date first."""
        return filter_operations(self.db.list_operations(), pair, ticket_id)

    def operation_totals(
        self, pair: TradingPair | None = None, ticket_id: int | None = None
    ) -> OperationTotals:
        """Totals footer for the operations matching the filters."""
        return compute_totals(self.list_operations(pair, ticket_id))
