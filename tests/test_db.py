"""Tests for SQLite persistence of tickets and operations."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from ticket_split.db import Database
from ticket_split.models import OperationDraft, Ticket
from ticket_split.operations import build_operation


@pytest.fixture
def db(tmp_path):
    """Create a temporary database."""
    database = Database(tmp_path / "test.db")
    yield database
    database.close()


def make_ticket(ticket_id: int, amounts: list[str]) -> Ticket:
    return Ticket(
        id=ticket_id,
        created_at=datetime(2025, 3, 10, 14, 30),
        amounts=[Decimal(a) for a in amounts],
    )


class TestTickets:
    """Ticket storage."""

    def test_next_id_starts_at_one(self, db):
        assert db.next_ticket_id() == 1

    def test_next_id_follows_max(self, db):
        db.save_ticket(make_ticket(1, ["100.00"]))
        db.save_ticket(make_ticket(5, ["100.00"]))
        assert db.next_ticket_id() == 6

    def test_round_trip_keeps_exact_amounts(self, db):
        ticket = make_ticket(1, ["74990.25", "75010.25"])
        db.save_ticket(ticket)

        loaded = db.get_ticket(1)

        assert loaded is not None
        assert loaded.amounts == [Decimal("74990.25"), Decimal("75010.25")]
        assert loaded.links == ["", ""]
        assert loaded.receipt_links == ["", ""]
        assert loaded.created_at == datetime(2025, 3, 10, 14, 30)

    def test_get_missing_ticket(self, db):
        assert db.get_ticket(42) is None

    def test_list_newest_first(self, db):
        db.save_ticket(make_ticket(1, ["1.00"]))
        db.save_ticket(make_ticket(2, ["2.00"]))
        assert [t.id for t in db.list_tickets()] == [2, 1]

    def test_update_links(self, db):
        db.save_ticket(make_ticket(1, ["1.00", "2.00"]))

        assert db.update_ticket_links(1, ["https://pay/1", ""], ["", "https://r/2"])

        loaded = db.get_ticket(1)
        assert loaded.links == ["https://pay/1", ""]
        assert loaded.receipt_links == ["", "https://r/2"]

    def test_update_links_missing_ticket(self, db):
        assert db.update_ticket_links(9, [], []) is False

    def test_malformed_row_is_skipped(self, db, caplog):
        """Unreadable rows are logged and skipped rather than raised."""
        db.save_ticket(make_ticket(1, ["1.00"]))
        db.conn.execute(
            "INSERT INTO tickets (id, created_at, amounts, links, receipt_links) "
            "VALUES (2, '2025-03-10T00:00:00', 'not json', '[]', '[]')"
        )
        db.conn.commit()

        tickets = db.list_tickets()

        assert [t.id for t in tickets] == [1]
        assert db.get_ticket(2) is None
        assert "Skipping unreadable ticket #2" in caplog.text


class TestOperations:
    """Operation storage."""

    def make_operation(self, op_id: str, **overrides):
        values = {
            "ticket_id": 1,
            "order_number": f"ORD-{op_id}",
            "quantity": Decimal("1000.1234"),
            "price": Decimal("5.4321"),
            "fee": Decimal("1.5"),
            "trade_date": date(2025, 3, 10),
        }
        values.update(overrides)
        return build_operation(OperationDraft(**values), operation_id=op_id)

    def test_round_trip(self, db):
        op = self.make_operation("op-1")
        db.save_operation(op)

        loaded = db.get_operation("op-1")

        assert loaded.model_dump() == op.model_dump()

    def test_list_most_recent_first(self, db):
        db.save_operation(self.make_operation("op-1"))
        db.save_operation(self.make_operation("op-2"))
        assert [op.id for op in db.list_operations()] == ["op-2", "op-1"]

    def test_delete(self, db):
        db.save_operation(self.make_operation("op-1"))

        assert db.delete_operation("op-1") is True
        assert db.delete_operation("op-1") is False
        assert db.list_operations() == []

    def test_malformed_row_is_skipped(self, db, caplog):
        db.save_operation(self.make_operation("op-1"))
        db.conn.execute(
            "INSERT INTO operations (id, ticket_id, pair, order_number, quantity, "
            "price, fee, total_brl, final_rate, trade_date) "
            "VALUES ('bad', 1, 'USDT/BRL', 'X', 'abc', '1', '0', '1', '1', "
            "'2025-03-10')"
        )
        db.conn.commit()

        assert [op.id for op in db.list_operations()] == ["op-1"]
        assert "Skipping unreadable operation bad" in caplog.text
