"""Main CLI application using Typer."""
import asyncio
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from ..chat import ChatRole, ChatSession
from ..config import LogLevel
from ..dashboard import DashboardService
from ..formatting import format_currency, format_date, render_reply
from ..invoicing import InvoiceForm, InvoiceService, InvoiceStatus, LineField, generate_invoice_number, search_invoices
from ..store.postgres import PostgresDataStore
from .providers import get_context, get_store, get_transport, make_debug_printer

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="vyapar",
    help="Small-business invoicing, inventory and AI assistant",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


def _parse_line(text: str) -> tuple[int, Decimal]:
    """Parse ``QTYxPRICE`` (e.g. ``2x100``)."""
    try:
        qty, price = text.lower().split("x", 1)
        return int(qty), Decimal(price)
    except (ValueError, InvalidOperation) as e:
        raise typer.BadParameter(f"Expected QTYxPRICE, got {text!r}") from e


@app.command(name="init-db")
def init_db(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Force re-initialization (WARNING: destroys existing data)"
    )
):
    """Create the Postgres tables and change-notification triggers."""
    async def _init():
        store = get_store("postgres")
        if not isinstance(store, PostgresDataStore):
            console.print("[red]Error: init-db requires the postgres store[/red]")
            raise typer.Exit(code=1)

        try:
            await store.connect()

            if force:
                console.print("[yellow]WARNING: Force re-initialization will destroy existing data![/yellow]")
                confirm = typer.confirm("Are you sure you want to continue?")
                if not confirm:
                    console.print("[dim]Aborted.[/dim]")
                    return
                await store.drop_schema()

            console.print("[dim]Initializing database...[/dim]")
            await store.initialize_schema()
            console.print("[green]Database initialized successfully![/green]")

        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

    asyncio.run(_init())


@app.command()
def chat(
    message: str | None = typer.Argument(
        None,
        help="Ask one question and exit (interactive when omitted)"
    ),
    context_type: str | None = typer.Option(
        None,
        "--context-type",
        "-t",
        help="Context type forwarded to the assistant (e.g. invoice, inventory)"
    ),
    context_file: Path | None = typer.Option(
        None,
        "--context-file",
        "-c",
        exists=True,
        dir_okay=False,
        help="JSON file forwarded to the assistant as context data"
    ),
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        "-l",
        help="Log level for diagnostics: debug, info, warning, error"
    )
):
    """Chat with the VYAPAR AI business assistant."""
    context_data = json.loads(context_file.read_text()) if context_file else None

    async def _ask(session: ChatSession, text: str) -> None:
        with Live(console=console, refresh_per_second=12) as live:
            async for transcript in session.submit(text):
                last = transcript[-1]
                if last.role == ChatRole.ASSISTANT:
                    live.update(Panel(
                        render_reply(last.content),
                        title="VYAPAR AI",
                        border_style="cyan"
                    ))

    async def _chat():
        async with get_transport(console) as transport:
            session = ChatSession(transport, get_context(context_type, context_data))
            session.set_debug_callback(make_debug_printer(console, LogLevel.from_string(log_level)))

            if message is not None:
                await _ask(session, message)
                return

            console.print(Panel(session.messages[0].content, title="VYAPAR AI", border_style="cyan"))
            console.print("[dim]Type 'exit', 'quit', or 'q' to leave[/dim]\n")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")

                    if not user_input.strip():
                        continue

                    if user_input.strip().lower() in ('exit', 'quit', 'q'):
                        console.print("[dim]Goodbye![/dim]")
                        break

                    await _ask(session, user_input)

                except KeyboardInterrupt:
                    console.print("\n[dim]Goodbye![/dim]")
                    break
                except EOFError:
                    console.print("\n[dim]Goodbye![/dim]")
                    break

    asyncio.run(_chat())


@app.command(name="invoice-number")
def invoice_number(
    count: int = typer.Option(
        1,
        "--count",
        "-n",
        min=1,
        help="How many numbers to generate"
    )
):
    """Generate invoice numbers for the current month."""
    for _ in range(count):
        console.print(generate_invoice_number())


@app.command()
def totals(
    lines: list[str] = typer.Argument(
        ...,
        help="Line items as QTYxPRICE, e.g. 2x100 1x50"
    ),
    tax_rate: float = typer.Option(
        18.0,
        "--tax-rate",
        "-t",
        min=0,
        max=100,
        help="Tax rate in percent"
    ),
    discount: float = typer.Option(
        0.0,
        "--discount",
        "-d",
        min=0,
        help="Flat discount amount"
    )
):
    """Compute invoice totals for a list of line items."""
    form = InvoiceForm()
    form.draft.tax_rate = Decimal(str(tax_rate))
    form.draft.discount_amount = Decimal(str(discount))

    for index, line in enumerate(lines):
        qty, price = _parse_line(line)
        if index > 0:
            form.add_line_item()
        form.set_line_field(index, LineField.DESCRIPTION, f"Item {index + 1}")
        form.set_line_field(index, LineField.QUANTITY, qty)
        form.set_line_field(index, LineField.UNIT_PRICE, price)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Qty", justify="right")
    table.add_column("Unit Price", justify="right")
    table.add_column("Total", style="green", justify="right")
    for i, item in enumerate(form.line_items, 1):
        table.add_row(str(i), str(item.quantity), str(item.unit_price), str(item.line_total))
    console.print(table)

    result = form.totals
    summary = Table(show_header=False, box=None)
    summary.add_column("Metric", style="bold cyan", width=18)
    summary.add_column("Value", justify="right")
    summary.add_row("Subtotal", str(result.subtotal))
    summary.add_row(f"Tax ({result.tax_rate}%)", str(result.tax_amount))
    summary.add_row("Discount", f"-{result.discount_amount}")
    summary.add_row("Total", f"[bold]{result.grand_total}[/bold]")
    console.print(summary)

    if result.grand_total < 0:
        console.print("[yellow]Warning: discount exceeds subtotal plus tax[/yellow]")


@app.command()
def invoices(
    search: str = typer.Option(
        "",
        "--search",
        "-s",
        help="Filter by invoice number or customer name"
    )
):
    """List invoices, newest first."""
    async def _invoices():
        store = get_store()
        try:
            await store.connect()
            service = InvoiceService(store)
            rows = search_invoices(await service.list_invoices(), search)

            if not rows:
                console.print("[yellow]No invoices found[/yellow]")
                return

            table = Table(show_header=True, header_style="bold cyan")
            table.add_column("Invoice", style="cyan")
            table.add_column("Customer")
            table.add_column("Issued")
            table.add_column("Status", style="yellow")
            table.add_column("Amount", style="green", justify="right")
            for row in rows:
                table.add_row(
                    row["invoice_number"],
                    row.get("customer_name") or "-",
                    format_date(row["issue_date"]),
                    row["status"],
                    format_currency(row["total_amount"]),
                )
            console.print(table)

        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

    asyncio.run(_invoices())


@app.command(name="invoice-status")
def invoice_status(
    invoice_id: str = typer.Argument(..., help="Invoice id"),
    status: InvoiceStatus = typer.Argument(..., help="New status")
):
    """Mark an invoice as draft, sent, paid, overdue or cancelled."""
    async def _status():
        store = get_store()
        try:
            await store.connect()
            updated = await InvoiceService(store).update_status(invoice_id, status)
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

        if updated is None:
            console.print(f"[yellow]Invoice not found: {invoice_id}[/yellow]")
            raise typer.Exit(code=1)
        console.print(f"[green]Invoice {updated['invoice_number']} marked as {status.value}[/green]")

    asyncio.run(_status())


@app.command()
def dashboard():
    """Show revenue, invoice and stock figures."""
    async def _dashboard():
        store = get_store()
        try:
            await store.connect()
            stats = await DashboardService(store).load()

            table = Table(show_header=False, box=None)
            table.add_column("Metric", style="bold cyan", width=18)
            table.add_column("Value")
            table.add_row("Total Revenue", format_currency(stats.total_revenue))
            table.add_row("Customers", str(stats.total_customers))
            table.add_row("Invoices", str(stats.total_invoices))
            table.add_row("Pending", str(stats.pending_invoices))
            table.add_row("Low Stock Items", str(stats.low_stock_items))
            status_str = ", ".join(f"{s.name}: {s.value}" for s in stats.invoice_status)
            table.add_row("By Status", status_str or "None")
            console.print(Panel(table, title="Dashboard", border_style="cyan"))

            revenue = Table(show_header=True, header_style="bold cyan")
            revenue.add_column("Month")
            revenue.add_column("Revenue", style="green", justify="right")
            for month in stats.monthly_revenue:
                revenue.add_row(f"{month.month} {month.year}", format_currency(month.revenue))
            console.print(revenue)

        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

    asyncio.run(_dashboard())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
