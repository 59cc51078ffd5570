"""Interactive UI components for picking tickets."""

import logging
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .models import Ticket
from .money import format_brl

logger = logging.getLogger(__name__)


def ticket_label(ticket: Ticket) -> str:
    """Label shown for a ticket in pickers: ``Ticket #3 (R$ 150.000,50)``."""
    return f"Ticket #{ticket.id} ({format_brl(ticket.total)})"


class TicketCompleter(Completer):
    """Completer over ticket numbers and totals."""

    def __init__(self, tickets: list[Ticket]):
        """Initialize the completer with available tickets."""
        self.tickets = tickets
        self.label_to_id = {ticket_label(ticket): ticket.id for ticket in tickets}

    def get_completions(self, document: Document, complete_event: Any):
        """Yield tickets whose label contains the typed text."""
        query = document.text.lower().lstrip("#")

        for label in self.label_to_id:
            if query in label.lower():
                yield Completion(
                    text=label,
                    start_position=-len(document.text),
                    display=label,
                )

    def resolve(self, text: str) -> int | None:
        """
        Map typed text back to a ticket id.

        Accepts a full label, ``#3`` or a bare ``3``.
        """
        text = text.strip()
        if text in self.label_to_id:
            return self.label_to_id[text]

        number = text.lstrip("#")
        if number.isdigit():
            ticket_id = int(number)
            if ticket_id in self.label_to_id.values():
                return ticket_id
        return None


def select_ticket_interactive(tickets: list[Ticket]) -> int | None:
    """
    Interactive ticket selection with completion.

    Args:
        tickets: Tickets the operation may reference

    Returns:
        Selected ticket id, or None to cancel
    """
    if not tickets:
        return None

    print("\n🎫 Select the ticket for this operation")
    print("   Type to search, press Enter to confirm, Ctrl+C to cancel\n")

    completer = TicketCompleter(tickets)
    session: PromptSession[str] = PromptSession(completer=completer)

    try:
        while True:
            result = session.prompt(
                "Ticket: ",
                default=ticket_label(tickets[0]),
                complete_while_typing=True,
            )

            if not result:
                return None

            ticket_id = completer.resolve(result)
            if ticket_id is not None:
                logger.info(f"User selected ticket #{ticket_id}")
                return ticket_id

            print(
                "❌ Unknown ticket. Pick one from the list or press Tab to complete."
            )

    except KeyboardInterrupt:
        print("\n⏭️  Cancelled")
        return None
    except EOFError:
        return None
