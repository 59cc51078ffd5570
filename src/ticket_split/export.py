"""Printable ticket documents rendered with Rich's recording console."""

import io
import logging
from pathlib import Path

from rich import box
from rich.console import Console
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from .exceptions import ExportError
from .models import Ticket
from .money import format_brl, format_number

logger = logging.getLogger(__name__)

DOCUMENT_WIDTH = 96
FOOTER_NOTICE = (
    "Este es un documento generado automáticamente. "
    "No es un comprobante de pago oficial."
)

_EXTENSIONS: dict[str, str] = {"html": "html", "text": "txt"}


def _build_parts_table(ticket: Ticket) -> Table:
    """Grid table with one row per transfer part."""
    table = Table(box=box.SQUARE, show_lines=True, header_style="bold white on grey23")
    table.add_column("#", justify="center", width=4)
    table.add_column("Valor Dividido (BRL)", justify="right")

    for index, amount in enumerate(ticket.amounts, start=1):
        table.add_row(str(index), format_number(amount))

    return table


def render_ticket_document(ticket: Ticket, fmt: str = "html") -> str:
    """
    Render a ticket as a printable document.

    Args:
        ticket: The ticket to render
        fmt: "html" for a standalone page with inline styles, "text" for plain text

    Returns:
        The document contents
    """
    if fmt not in _EXTENSIONS:
        raise ExportError(f"Unsupported document format: {fmt}")

    console = Console(
        record=True,
        file=io.StringIO(),
        width=DOCUMENT_WIDTH,
        color_system="truecolor" if fmt == "html" else None,
    )

    console.print(Text("Orden de Ticket", style="bold", justify="center"))
    console.print()

    header = Table.grid(expand=True)
    header.add_column(justify="left")
    header.add_column(justify="right")
    header.add_row(
        f"Ticket No: {ticket.id}",
        f"Fecha: {ticket.created_at.strftime('%d/%m/%y, %H:%M')}",
    )
    console.print(header)
    console.print(Rule(style="white"))

    summary = Table.grid(expand=True)
    summary.add_column(justify="left")
    summary.add_column(justify="right")
    summary.add_row(
        Text("Monto Total a Depositar:", style="bold"),
        Text(format_brl(ticket.total), style="bold"),
    )
    console.print(summary)
    console.print()

    console.print(_build_parts_table(ticket))
    console.print()
    console.print(Text(FOOTER_NOTICE, style="grey50", justify="center"))

    if fmt == "html":
        return console.export_html(inline_styles=True)
    return console.export_text()


def export_ticket(
    ticket: Ticket, directory: Path, fmt: str = "html"
) -> Path:
    """
    Write a ticket document to ``directory/orden-ticket-<id>.<ext>``.

    Returns:
        Path of the written file

    Raises:
        ExportError: If the format is unknown or the file cannot be written
    """
    content = render_ticket_document(ticket, fmt)
    path = directory / f"orden-ticket-{ticket.id}.{_EXTENSIONS[fmt]}"

    try:
        directory.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ExportError(f"Failed to write {path}: {e}") from e

    logger.info(f"Exported ticket #{ticket.id} to {path}")
    return path
