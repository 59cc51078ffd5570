"""CLI for TicketSplit using Typer."""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import cast

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import load_settings
from .db import Database
from .export import export_ticket
from .models import (
    TRADING_PAIRS,
    Operation,
    OperationDraft,
    OperationTotals,
    Ticket,
    TradingPair,
)
from .money import (
    format_brl,
    format_copy_value,
    format_number,
    to_decimal,
)
from .service import TicketService
from .splitter import SPLIT_CEILING
from .ui import select_ticket_interactive

app = typer.Typer(
    name="ticket-split",
    help=f"Split large BRL amounts into transfers below R$ {SPLIT_CEILING:,} "
    "and log trading operations against them",
)
op_app = typer.Typer(name="op", help="Log and review trading operations")
app.add_typer(op_app, name="op")

console = Console()


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def _fail(error: Exception, verbose: bool):
    """Report an error and exit with status 1."""
    console.print(f"\n[bold red]Error:[/bold red] {escape(str(error))}")
    if verbose:
        raise error
    sys.exit(1)


def _parse_pair(pair: str) -> TradingPair:
    """Validate a pair option, accepting lowercase input."""
    normalized = pair.strip().upper()
    if normalized not in TRADING_PAIRS:
        raise typer.BadParameter(
            f"Unknown pair {pair!r}; choose one of {', '.join(TRADING_PAIRS)}"
        )
    return cast(TradingPair, normalized)


# ============================================================================
# Display helpers
# ============================================================================


def display_ticket(ticket: Ticket):
    """Display one ticket's parts with their copy-ready values and links."""
    console.print(f"\n[bold]Ticket #{ticket.id}[/bold]")
    console.print(f"  Date: {ticket.created_at.strftime('%d/%m/%Y %H:%M')}")
    console.print(f"  Total: [green]{format_brl(ticket.total)}[/green]")
    console.print()

    table = Table(title="Transfers", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4, justify="center")
    table.add_column("Amount", justify="right")
    table.add_column("Copy", style="dim", justify="right")
    table.add_column("Link", style="cyan", no_wrap=False)
    table.add_column("Receipt", style="cyan", no_wrap=False)

    for index, amount in enumerate(ticket.amounts):
        table.add_row(
            str(index + 1),
            format_brl(amount),
            format_copy_value(amount),
            ticket.links[index] or "[dim]—[/dim]",
            ticket.receipt_links[index] or "[dim]—[/dim]",
        )

    console.print(table)

    over_ceiling = [a for a in ticket.amounts if a > SPLIT_CEILING]
    if over_ceiling:
        console.print(
            f"  [yellow]⚠️  {len(over_ceiling)} part(s) above "
            f"R$ {SPLIT_CEILING:,}[/yellow]"
        )


def display_tickets(tickets: list[Ticket]):
    """Display the ticket register."""
    table = Table(title="Ticket Orders", show_header=True, header_style="bold cyan")
    table.add_column("Ticket", style="bold", justify="center")
    table.add_column("Date", style="dim")
    table.add_column("Parts", justify="right")
    table.add_column("Links", justify="center")
    table.add_column("Receipts", justify="center")
    table.add_column("Total", justify="right", style="green")

    for ticket in tickets:
        size = len(ticket.amounts)
        table.add_row(
            str(ticket.id),
            ticket.created_at.strftime("%d/%m/%Y %H:%M"),
            str(size),
            f"{sum(1 for link in ticket.links if link)}/{size}",
            f"{sum(1 for link in ticket.receipt_links if link)}/{size}",
            format_brl(ticket.total),
        )

    console.print(table)


def display_operations(
    operations: list[Operation], totals: OperationTotals, title: str
):
    """Display operations with a totals footer."""
    table = Table(
        title=title, show_header=True, show_footer=True, header_style="bold magenta"
    )
    table.add_column("Ticket", justify="center", footer="Totals")
    table.add_column("Order", style="cyan")
    table.add_column(
        "Quantity", justify="right", footer=format_number(totals.sum_quantity, 4)
    )
    table.add_column(
        "Price", justify="right", footer=format_number(totals.avg_price, 4)
    )
    table.add_column("Fee", justify="right", footer=format_number(totals.sum_fee, 4))
    table.add_column(
        "Total BRL", justify="right", footer=format_brl(totals.sum_total_brl)
    )
    table.add_column(
        "Final Rate", justify="right", footer=format_number(totals.avg_final_rate, 8)
    )
    table.add_column("Date", justify="center")
    table.add_column("ID", style="dim")

    for op in operations:
        table.add_row(
            str(op.ticket_id),
            op.order_number,
            format_number(op.quantity, 4),
            format_number(op.price, 4),
            format_number(op.fee, 4),
            format_brl(op.total_brl),
            format_number(op.final_rate, 8),
            op.trade_date.strftime("%d/%m/%Y"),
            op.id[:8],
        )

    console.print(table)


# ============================================================================
# Ticket commands
# ============================================================================


@app.command()
def split(
    amount: str = typer.Argument(..., help="Total amount in BRL, e.g. 150000.50"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Split an amount into transfers and save them as a new ticket.
    """
    setup_logging(verbose)

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        service = TicketService(db)

        ticket = service.create_ticket(amount)
        display_ticket(ticket)

        console.print(
            f"\n[bold green]✓ Ticket #{ticket.id} created with "
            f"{len(ticket.amounts)} transfer(s)[/bold green]\n"
        )

    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@app.command()
def tickets(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    List all tickets, newest first.
    """
    setup_logging(verbose)

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        service = TicketService(db)

        all_tickets = service.list_tickets()
        if not all_tickets:
            console.print("[yellow]No tickets yet. Create one with 'split'.[/yellow]")
            return

        display_tickets(all_tickets)

    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@app.command()
def show(
    ticket_id: int = typer.Argument(..., help="Ticket number"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Show one ticket with copy-ready values and its links.
    """
    setup_logging(verbose)

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        service = TicketService(db)

        display_ticket(service.get_ticket(ticket_id))

    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@app.command()
def link(
    ticket_id: int = typer.Argument(..., help="Ticket number"),
    index: int = typer.Argument(..., help="Transfer number, starting at 1"),
    url: str = typer.Argument(..., help="Link to attach; empty string clears it"),
    receipt: bool = typer.Option(
        False,
        "--receipt",
        "-r",
        help="Set the receipt link instead of the transfer link",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Attach a transfer or receipt link to one part of a ticket.
    """
    setup_logging(verbose)

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        service = TicketService(db)

        if receipt:
            ticket = service.set_receipt_link(ticket_id, index - 1, url)
        else:
            ticket = service.set_link(ticket_id, index - 1, url)

        kind = "Receipt link" if receipt else "Link"
        console.print(
            f"[green]✓ {kind} {index} of ticket #{ticket.id} updated[/green]"
        )

    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@app.command()
def export(
    ticket_id: int = typer.Argument(..., help="Ticket number"),
    fmt: str = typer.Option(
        "html", "--format", "-f", help="Document format: html or text"
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory (defaults to the configured export dir)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Export a ticket as a printable document.
    """
    setup_logging(verbose)

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        service = TicketService(db)

        ticket = service.get_ticket(ticket_id)
        path = export_ticket(ticket, output or settings.export_dir, fmt)

        console.print(f"[green]✓ Document written to {path}[/green]")

    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


# ============================================================================
# Operation commands
# ============================================================================


@op_app.command("add")
def op_add(
    ticket_id: int | None = typer.Option(
        None, "--ticket", "-t", help="Ticket number (prompted when omitted)"
    ),
    pair: str | None = typer.Option(None, "--pair", "-p", help="USDT/BRL or USDT/TRX"),
    order_number: str = typer.Option(
        ..., "--order", "-o", help="Exchange order number"
    ),
    quantity: str = typer.Option(..., "--quantity", "-q", help="Quantity traded"),
    price: str = typer.Option(..., "--price", help="Unit price"),
    fee: str = typer.Option("0", "--fee", help="Fee charged, may be zero"),
    trade_date: str | None = typer.Option(
        None, "--date", "-d", help="Trade date as YYYY-MM-DD (defaults to today)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Log a trading operation against a ticket.
    """
    setup_logging(verbose)

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        service = TicketService(db)

        if ticket_id is None:
            all_tickets = service.list_tickets()
            if not all_tickets:
                console.print(
                    "[yellow]No tickets yet. Create one with 'split' first.[/yellow]"
                )
                return
            ticket_id = select_ticket_interactive(all_tickets)
            if ticket_id is None:
                console.print("[yellow]No ticket selected.[/yellow]")
                return

        try:
            draft = OperationDraft(
                ticket_id=ticket_id,
                pair=_parse_pair(pair or settings.default_pair),
                order_number=order_number,
                quantity=to_decimal(quantity),
                price=to_decimal(price),
                fee=to_decimal(fee),
                trade_date=(
                    date.fromisoformat(trade_date) if trade_date else date.today()
                ),
            )
        except ValueError as e:
            message = escape(str(e))
            console.print(
                f"\n[bold yellow]⚠️  Invalid input: {message}[/bold yellow]\n"
            )
            sys.exit(1)

        operation = service.add_operation(draft)

        console.print(
            f"\n[bold green]✓ Operation logged ({operation.id[:8]})[/bold green]"
        )
        console.print(f"  Total BRL:  {format_brl(operation.total_brl)}")
        console.print(f"  Final rate: {format_number(operation.final_rate, 8)}\n")

    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@op_app.command("list")
def op_list(
    pair: str | None = typer.Option(None, "--pair", "-p", help="USDT/BRL or USDT/TRX"),
    ticket_id: int | None = typer.Option(
        None, "--ticket", "-t", help="Only this ticket"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    List operations for a pair, optionally for a single ticket.
    """
    setup_logging(verbose)

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        service = TicketService(db)

        selected_pair = _parse_pair(pair or settings.default_pair)
        operations = service.list_operations(selected_pair, ticket_id)

        if not operations:
            scope = f" on ticket #{ticket_id}" if ticket_id is not None else ""
            console.print(
                f"[yellow]No operations logged for {selected_pair}{scope}.[/yellow]"
            )
            return

        display_operations(
            operations,
            service.operation_totals(selected_pair, ticket_id),
            title=f"Operations {selected_pair}",
        )

    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@op_app.command("delete")
def op_delete(
    operation_id: str = typer.Argument(
        ..., help="Operation id, or a unique prefix of it"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Delete a logged operation.
    """
    setup_logging(verbose)

    if not operation_id.strip():
        raise typer.BadParameter(
            "Operation id cannot be empty", param_hint="OPERATION_ID"
        )

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        service = TicketService(db)

        matches = [
            op for op in service.list_operations() if op.id.startswith(operation_id)
        ]
        if len(matches) > 1:
            console.print(
                f"[yellow]{len(matches)} operations match '{operation_id}'. "
                f"Please use a longer prefix.[/yellow]"
            )
            sys.exit(1)
        target_id = matches[0].id if matches else operation_id

        if not yes:
            confirm = input(f"Delete operation {target_id}? [y/N] ").strip().lower()
            if confirm not in ("y", "yes"):
                console.print("[yellow]Cancelled.[/yellow]")
                return

        service.delete_operation(target_id)
        console.print(f"[green]✓ Operation {target_id} deleted[/green]")

    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


if __name__ == "__main__":
    app()
