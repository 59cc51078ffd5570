"""Tests for TicketService layer."""

import random
from datetime import date
from decimal import Decimal

import pytest

from ticket_split.db import Database
from ticket_split.exceptions import (
    InvalidAmountError,
    LinkIndexError,
    OperationNotFoundError,
    OperationValidationError,
    TicketNotFoundError,
)
from ticket_split.models import OperationDraft
from ticket_split.service import MAX_TICKET_TOTAL, MAX_TRANSFERS, TicketService


@pytest.fixture
def mock_db(tmp_path):
    """Create a temporary database."""
    db_path = tmp_path / "test.db"
    db = Database(db_path)
    yield db
    db.close()


@pytest.fixture
def service(mock_db):
    """Create a TicketService with a seeded random source."""
    return TicketService(mock_db, rng=random.Random(1234))


@pytest.fixture
def ticket(service):
    """A saved two-part ticket."""
    return service.create_ticket(Decimal("150000.50"))


def make_draft(ticket_id: int, **overrides) -> OperationDraft:
    values = {
        "ticket_id": ticket_id,
        "pair": "USDT/BRL",
        "order_number": "ORD-1",
        "quantity": Decimal("1000"),
        "price": Decimal("5.50"),
        "fee": Decimal("10"),
        "trade_date": date(2025, 3, 10),
    }
    values.update(overrides)
    return OperationDraft(**values)


class TestCreateTicket:
    """Ticket creation."""

    def test_single_part(self, service):
        ticket = service.create_ticket("50000")

        assert ticket.id == 1
        assert ticket.amounts == [Decimal("50000.00")]
        assert ticket.links == [""]
        assert ticket.receipt_links == [""]

    def test_multi_part_is_persisted(self, service, mock_db):
        ticket = service.create_ticket(Decimal("300000.00"))

        assert len(ticket.amounts) == 4
        assert ticket.total == Decimal("300000.00")
        assert len(ticket.links) == len(ticket.receipt_links) == 4
        assert mock_db.get_ticket(ticket.id).model_dump() == ticket.model_dump()

    def test_sequential_ids(self, service):
        first = service.create_ticket(100)
        second = service.create_ticket(200)
        assert (first.id, second.id) == (1, 2)

    @pytest.mark.parametrize("total", [0, -5, "abc", "0.001"])
    def test_invalid_totals(self, service, total):
        with pytest.raises(InvalidAmountError):
            service.create_ticket(total)

    @pytest.mark.parametrize("total", ["1e15", "1e27", "99999000.01"])
    def test_totals_above_maximum(self, service, mock_db, total):
        with pytest.raises(InvalidAmountError, match="exceeds the maximum"):
            service.create_ticket(total)
        assert mock_db.list_tickets() == []

    def test_total_at_maximum(self, service):
        ticket = service.create_ticket(MAX_TICKET_TOTAL)

        assert len(ticket.amounts) == MAX_TRANSFERS
        assert ticket.total == MAX_TICKET_TOTAL

    def test_get_missing_ticket(self, service):
        with pytest.raises(TicketNotFoundError):
            service.get_ticket(99)


class TestLinks:
    """Transfer and receipt links."""

    def test_set_link(self, service, ticket):
        service.set_link(ticket.id, 1, "  https://bank/transfer/2 ")

        stored = service.get_ticket(ticket.id)
        assert stored.links == ["", "https://bank/transfer/2"]
        assert stored.receipt_links == ["", ""]

    def test_set_receipt_link(self, service, ticket):
        service.set_receipt_link(ticket.id, 0, "https://bank/receipt/1")

        stored = service.get_ticket(ticket.id)
        assert stored.receipt_links == ["https://bank/receipt/1", ""]
        assert stored.links == ["", ""]

    @pytest.mark.parametrize("index", [-1, 2])
    def test_index_out_of_range(self, service, ticket, index):
        with pytest.raises(LinkIndexError):
            service.set_link(ticket.id, index, "x")

    def test_unknown_ticket(self, service):
        with pytest.raises(TicketNotFoundError):
            service.set_receipt_link(7, 0, "x")


class TestOperations:
    """Operation logging."""

    def test_add_operation(self, service, ticket):
        op = service.add_operation(make_draft(ticket.id))

        assert op.total_brl == Decimal("5500.00")
        assert op.final_rate == Decimal("5.51")
        assert service.list_operations() == [op]

    def test_add_operation_unknown_ticket(self, service):
        with pytest.raises(TicketNotFoundError):
            service.add_operation(make_draft(99))

    def test_add_operation_invalid(self, service, ticket):
        with pytest.raises(OperationValidationError):
            service.add_operation(make_draft(ticket.id, price=Decimal("0")))
        assert service.list_operations() == []

    def test_delete_operation(self, service, ticket):
        op = service.add_operation(make_draft(ticket.id))

        service.delete_operation(op.id)

        assert service.list_operations() == []
        with pytest.raises(OperationNotFoundError):
            service.delete_operation(op.id)

    def test_filters_and_totals(self, service, ticket):
        other = service.create_ticket(1000)
        service.add_operation(make_draft(ticket.id, order_number="A"))
        service.add_operation(
            make_draft(
                other.id,
                order_number="B",
                quantity=Decimal("500"),
                price=Decimal("5.70"),
                fee=Decimal("0"),
            )
        )
        service.add_operation(make_draft(ticket.id, order_number="C", pair="USDT/TRX"))

        brl = service.list_operations(pair="USDT/BRL")
        assert {op.order_number for op in brl} == {"A", "B"}

        totals = service.operation_totals(pair="USDT/BRL", ticket_id=other.id)
        assert totals.count == 1
        assert totals.sum_total_brl == Decimal("2850.00")

        assert service.operation_totals(pair="USDT/TRX", ticket_id=other.id).count == 0
