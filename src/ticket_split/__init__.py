"""TicketSplit - Split large BRL amounts into transfer tickets and log trades."""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .db import Database
from .models import Operation, OperationDraft, OperationTotals, Ticket
from .money import from_cents, to_cents
from .operations import build_operation, compute_final_rate, compute_totals
from .service import TicketService
from .splitter import SPLIT_CEILING, count_parts, split_amount

__all__ = [
    "Settings",
    "load_settings",
    "Database",
    "Operation",
    "OperationDraft",
    "OperationTotals",
    "Ticket",
    "from_cents",
    "to_cents",
    "build_operation",
    "compute_final_rate",
    "compute_totals",
    "TicketService",
    "SPLIT_CEILING",
    "count_parts",
    "split_amount",
]
