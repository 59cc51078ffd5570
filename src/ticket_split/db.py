"""SQLite database operations for TicketSplit."""

import json
import logging
import sqlite3
from datetime import date, datetime
from pathlib import Path

from .models import Operation, Ticket

logger = logging.getLogger(__name__)


class Database:
    """SQLite database manager."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        # Tickets table; list columns hold JSON arrays
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS tickets (
                id INTEGER PRIMARY KEY,
                created_at TIMESTAMP NOT NULL,
                amounts TEXT NOT NULL,
                links TEXT NOT NULL,
                receipt_links TEXT NOT NULL
            )
        """
        )

        # Operations table; decimals are stored as TEXT to keep them exact
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS operations (
                id TEXT PRIMARY KEY,
                ticket_id INTEGER NOT NULL,
                pair TEXT NOT NULL,
                order_number TEXT NOT NULL,
                quantity TEXT NOT NULL,
                price TEXT NOT NULL,
                fee TEXT NOT NULL,
                total_brl TEXT NOT NULL,
                final_rate TEXT NOT NULL,
                trade_date DATE NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ========================================================================
    # Ticket operations
    # ========================================================================

    def next_ticket_id(self) -> int:
        """Get the id the next ticket should use."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT MAX(id) AS max_id FROM tickets")
        row = cursor.fetchone()
        return (row["max_id"] or 0) + 1

    def save_ticket(self, ticket: Ticket) -> int:
        """Save a ticket record."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO tickets (id, created_at, amounts, links, receipt_links)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                ticket.id,
                ticket.created_at.isoformat(),
                json.dumps([str(amount) for amount in ticket.amounts]),
                json.dumps(ticket.links),
                json.dumps(ticket.receipt_links),
            ),
        )
        self.conn.commit()
        row_id = cursor.lastrowid
        if row_id is None:
            raise RuntimeError("Failed to insert ticket record")
        return row_id

    def update_ticket_links(
        self, ticket_id: int, links: list[str], receipt_links: list[str]
    ) -> bool:
        """Replace a ticket's transfer and receipt links."""
        cursor = self.conn.cursor()
        cursor.execute(
            "UPDATE tickets SET links = ?, receipt_links = ? WHERE id = ?",
            (json.dumps(links), json.dumps(receipt_links), ticket_id),
        )
        self.conn.commit()
        return cursor.rowcount > 0

    def get_ticket(self, ticket_id: int) -> Ticket | None:
        """Get a ticket by id."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, created_at, amounts, links, receipt_links
            FROM tickets
            WHERE id = ?
            """,
            (ticket_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None
        return _ticket_from_row(row)

    def list_tickets(self) -> list[Ticket]:
        """Get all readable tickets, newest first."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, created_at, amounts, links, receipt_links
            FROM tickets
            ORDER BY id DESC
            """
        )
        tickets = []
        for row in cursor.fetchall():
            ticket = _ticket_from_row(row)
            if ticket is not None:
                tickets.append(ticket)
        return tickets

    # ========================================================================
    # Operation operations
    # ========================================================================

    def save_operation(self, operation: Operation) -> str:
        """Save an operation record."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO operations (
                id, ticket_id, pair, order_number, quantity, price, fee,
                total_brl, final_rate, trade_date, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                operation.id,
                operation.ticket_id,
                operation.pair,
                operation.order_number,
                str(operation.quantity),
                str(operation.price),
                str(operation.fee),
                str(operation.total_brl),
                str(operation.final_rate),
                operation.trade_date.isoformat(),
                datetime.now().isoformat(),
            ),
        )
        self.conn.commit()
        return operation.id

    def get_operation(self, operation_id: str) -> Operation | None:
        """Get an operation by id."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, ticket_id, pair, order_number, quantity, price, fee,
                   total_brl, final_rate, trade_date
            FROM operations
            WHERE id = ?
            """,
            (operation_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None
        return _operation_from_row(row)

    def list_operations(self) -> list[Operation]:
        """Get all readable operations, most recently logged first."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, ticket_id, pair, order_number, quantity, price, fee,
                   total_brl, final_rate, trade_date
            FROM operations
            ORDER BY created_at DESC, rowid DESC
            """
        )
        operations = []
        for row in cursor.fetchall():
            operation = _operation_from_row(row)
            if operation is not None:
                operations.append(operation)
        return operations

    def delete_operation(self, operation_id: str) -> bool:
        """Delete an operation. Returns False if it did not exist."""
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM operations WHERE id = ?", (operation_id,))
        self.conn.commit()
        return cursor.rowcount > 0


def _ticket_from_row(row: sqlite3.Row) -> Ticket | None:
    """Build a Ticket from a row, or log and return None if it is malformed."""
    try:
        return Ticket(
            id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            amounts=json.loads(row["amounts"]),
            links=json.loads(row["links"]),
            receipt_links=json.loads(row["receipt_links"]),
        )
    except (ValueError, TypeError) as e:
        logger.warning(f"Skipping unreadable ticket #{row['id']}: {e}")
        return None


def _operation_from_row(row: sqlite3.Row) -> Operation | None:
    """Build an Operation from a row, or log and return None if it is malformed."""
    try:
        return Operation(
            id=row["id"],
            ticket_id=row["ticket_id"],
            pair=row["pair"],
            order_number=row["order_number"],
            quantity=row["quantity"],
            price=row["price"],
            fee=row["fee"],
            total_brl=row["total_brl"],
            final_rate=row["final_rate"],
            trade_date=date.fromisoformat(row["trade_date"]),
        )
    except (ValueError, TypeError) as e:
        logger.warning(f"Skipping unreadable operation {row['id']}: {e}")
        return None
