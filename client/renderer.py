"""
Terminal rendering for the registration clients
"""

from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.box import ROUNDED

from client.admin_dashboard import AdminDashboard


def _format_date(value: Optional[str]) -> str:
    if not value:
        return "-"
    # ISO-8601 from the API; date and minutes are enough for a table
    return value.replace("T", " ")[:16]


def registrations_table(records: List[Dict[str, Any]], title: str = "Registrations") -> Table:
    table = Table(title=title, box=ROUNDED, show_lines=False, expand=True)
    table.add_column("Name", style="bold")
    table.add_column("Email")
    table.add_column("Phone")
    table.add_column("Qualification", style="dim")
    table.add_column("Year", justify="right")
    table.add_column("Service", style="cyan")
    table.add_column("Course", style="magenta")
    table.add_column("Registered", style="dim")
    table.add_column("ID", style="dim", overflow="fold")

    for record in records:
        table.add_row(
            record.get("fullName", ""),
            record.get("email", ""),
            record.get("phone", ""),
            record.get("qualification", ""),
            str(record.get("passingYear") or "-"),
            record.get("service", ""),
            record.get("course", ""),
            _format_date(record.get("createdAt")),
            record.get("id", ""),
        )
    return table


def render_dashboard(console: Console, dashboard: AdminDashboard) -> None:
    filters = []
    if dashboard.search:
        filters.append(f"search '{dashboard.search}'")
    if dashboard.service_filter != "All":
        filters.append(f"service '{dashboard.service_filter}'")
    title = "Registrations" + (f" ({', '.join(filters)})" if filters else "")

    if dashboard.error:
        console.print(Panel(dashboard.error, title="Error", border_style="red"))

    if not dashboard.records:
        console.print("[dim]No registrations found[/dim]")
    else:
        console.print(registrations_table(dashboard.records, title=title))

    console.print(
        f"[dim]Page {dashboard.page} of {dashboard.total_pages} · {dashboard.total} total"
        f"{' · next page available' if dashboard.has_next_page else ''}[/dim]"
    )


def render_stats(console: Console, stats: Dict[str, Any]) -> None:
    table = Table(title="Services Statistics", box=ROUNDED)
    table.add_column("Service", style="cyan")
    table.add_column("Registrations", justify="right")
    for service, count in sorted((stats.get("services") or {}).items()):
        table.add_row(service, str(count))
    table.add_section()
    table.add_row("[bold]Total[/bold]", f"[bold]{stats.get('total', 0)}[/bold]")
    console.print(table)


def render_registration(console: Console, record: Dict[str, Any]) -> None:
    lines = [
        f"[bold]{record.get('fullName', '')}[/bold] <{record.get('email', '')}>",
        f"Phone: {record.get('phone', '')}",
        f"Service: {record.get('service', '')} / {record.get('course', '')}",
        f"Qualification: {record.get('qualification', '')} ({record.get('passingYear') or '-'})",
    ]
    if record.get("message"):
        lines.append(f"Message: {record['message']}")
    lines.append(f"[dim]{record.get('id', '')} · {_format_date(record.get('createdAt'))}[/dim]")
    console.print(Panel("\n".join(lines), title="Registration", border_style="green"))


def render_field_errors(console: Console, message: Optional[str], field_errors: Dict[str, str]) -> None:
    if message:
        console.print(f"[red]✗ {message}[/red]")
    for field, error in field_errors.items():
        console.print(f"  [yellow]{field}[/yellow]: {error}")
