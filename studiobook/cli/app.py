"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional, Sequence

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters import build_store
from ..config import AppConfig, get_default_config_path
from ..domain.calendar_builder import month_of, shift_month
from ..domain.exceptions import StudioBookError, ValidationError
from ..domain.models import AppointmentDraft, Service, ServiceBundle
from ..domain.pricing import effective_price
from ..services.backup import backup_filename, build_backup, write_backup
from ..services.messaging import build_message, format_money, service_names, whatsapp_url
from ..services.scheduler import SchedulerService

app = typer.Typer(
    name="studiobook",
    help="Agenda de atendimentos do estúdio: calendário, horários e faturamento",
    add_completion=False
)

console = Console()

MONTH_NAMES = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]

WEEKDAY_HEADERS = ["Dom", "Seg", "Ter", "Qua", "Qui", "Sex", "Sáb"]

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Agenda de atendimentos do estúdio.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path]) -> tuple[AppConfig, SchedulerService]:
    """Load the configuration and wire the scheduler to the configured store."""
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)

    scheduler = SchedulerService(
        store=build_store(config.store),
        time_options=config.schedule.time_options(),
        max_services=config.schedule.max_services,
    )
    return config, scheduler


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Erro:[/bold red] {error}")
    raise typer.Exit(1)


def _today(config: AppConfig) -> str:
    return pendulum.now(config.timezone).to_date_string()


def _parse_date(value: Optional[str], default: str) -> str:
    """Validate a YYYY-MM-DD option, falling back to a default."""
    if not value:
        return default
    try:
        return pendulum.from_format(value, "YYYY-MM-DD").to_date_string()
    except ValueError as e:
        console.print(f"[red]Erro ao interpretar a data {value!r}: {e}[/red]")
        raise typer.Exit(1)


def _resolve_services(identifiers: Sequence[str], services: Sequence[Service]) -> ServiceBundle:
    """
    Resolve service ids or names (case-insensitive) into a bundle.

    Raises:
        ValidationError: If an identifier matches no service
        BundleLimitError: If more than five services are given
    """
    bundle = ServiceBundle()
    for identifier in identifiers:
        match = next(
            (
                s for s in services
                if s.id == identifier or s.name.lower() == identifier.lower()
            ),
            None,
        )
        if match is None:
            raise ValidationError(f"Serviço desconhecido: {identifier!r}")
        if match.id not in bundle:
            bundle = bundle.toggle(match.id)
    return bundle


def _month_label(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} de {year}"


@app.command()
def calendar(
    month: Annotated[Optional[str], typer.Option("--month", "-m", help="Month to show (YYYY-MM). Defaults to the selected date's month.")] = None,
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Selected date (YYYY-MM-DD). Defaults to today.")] = None,
    delta: Annotated[int, typer.Option("--shift", help="Move the viewed month forward or back.")] = 0,
    config_file: ConfigOption = None,
):
    """
    Show the month grid with today, the selected day and busy days.
    """
    try:
        config, scheduler = _load(config_file)
        today = _today(config)
        selected = _parse_date(date, today)

        if month:
            try:
                parsed = pendulum.from_format(month, "YYYY-MM")
            except ValueError as e:
                console.print(f"[red]Erro ao interpretar o mês {month!r}: {e}[/red]")
                raise typer.Exit(1)
            year, month_number = parsed.year, parsed.month
        else:
            year, month_number = month_of(selected)

        year, month_number = shift_month(year, month_number, delta)

        days = scheduler.calendar(year, month_number, selected, today)
        busy_dates = {a.date for a in scheduler.appointments()}

        table = Table(
            title=_month_label(year, month_number).capitalize(),
            show_header=True,
            header_style="bold cyan"
        )
        for header in WEEKDAY_HEADERS:
            table.add_column(header, justify="center")

        cells: List[str] = []
        for day in days:
            text = f"{day.day_number:2d}"
            if day.date_str in busy_dates:
                text += "•"
            if not day.is_current_month:
                text = f"[dim]{text}[/dim]"
            if day.is_today:
                text = f"[bold green]{text}[/bold green]"
            if day.is_selected:
                text = f"[reverse]{text}[/reverse]"
            cells.append(text)

        for week in range(0, len(cells), 7):
            table.add_row(*cells[week:week + 7])

        console.print()
        console.print(table)
        console.print()

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def day(
    date: Annotated[Optional[str], typer.Argument(help="Date (YYYY-MM-DD). Defaults to today.")] = None,
    config_file: ConfigOption = None,
):
    """
    List the appointments of a day with the day and month totals.
    """
    try:
        config, scheduler = _load(config_file)
        selected = _parse_date(date, _today(config))
        view = scheduler.day_view(selected)
        services = scheduler.services()
        currency = config.messaging.currency_symbol

        if not view.appointments:
            console.print(f"\n[yellow]Nenhum agendamento em {selected}.[/yellow]")
        else:
            table = Table(
                title=f"Agendamentos de {selected}",
                show_header=True,
                header_style="bold cyan"
            )
            table.add_column("Horário", style="bold yellow")
            table.add_column("Cliente")
            table.add_column("Serviços")
            table.add_column("Valor", justify="right")
            table.add_column("Compareceu", justify="center")
            table.add_column("ID", style="dim")

            for appointment in view.appointments:
                table.add_row(
                    appointment.time,
                    appointment.client_name,
                    service_names(appointment, services),
                    format_money(effective_price(appointment, services), currency),
                    "✓" if appointment.attended else "",
                    appointment.id,
                )

            console.print()
            console.print(table)

        summary = view.summary
        console.print(Panel.fit(
            f"[bold]Agendamentos:[/bold] {summary.day_count}\n"
            f"[bold]Faturamento do dia:[/bold] {format_money(summary.day_total, currency)}\n"
            f"[bold]Faturamento do mês:[/bold] {format_money(summary.month_total, currency)}",
            title="Resumo"
        ))
        console.print()

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def slots(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    exclude: Annotated[Optional[str], typer.Option("--exclude", help="Appointment being edited; its own slot stays free.")] = None,
    config_file: ConfigOption = None,
):
    """
    Show the time grid of a day with booked slots blocked.
    """
    try:
        _, scheduler = _load(config_file)
        selected = _parse_date(date, date)

        console.print(f"\n[bold]Horários em {selected}:[/bold]\n")
        for option in scheduler.time_slots(selected, exclude_appointment_id=exclude):
            if option.available:
                console.print(f"  [green]{option.time}[/green]")
            else:
                console.print(f"  [red]{option.time} ocupado[/red]")
        console.print()

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def book(
    client: Annotated[Optional[str], typer.Option("--client", help="Client name")] = None,
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD)")] = None,
    time: Annotated[Optional[str], typer.Option("--time", "-t", help="Time (HH:MM)")] = None,
    service: Annotated[Optional[List[str]], typer.Option("--service", "-s", help="Service id or name; repeat for up to 5.")] = None,
    phone: Annotated[str, typer.Option("--phone", help="Client phone")] = "",
    payment: Annotated[str, typer.Option("--payment", help="Payment method")] = "",
    notes: Annotated[str, typer.Option("--notes", help="Notes")] = "",
    config_file: ConfigOption = None,
):
    """
    Book a new appointment. Missing fields are asked interactively.
    """
    try:
        config, scheduler = _load(config_file)
        services = scheduler.services()

        if not client:
            client = typer.prompt("→ Nome da cliente")
        if not date:
            date = typer.prompt("→ Data (YYYY-MM-DD)", default=_today(config))
        if not time:
            free = [o.time for o in scheduler.time_slots(date) if o.available]
            console.print(f"Horários livres: {', '.join(free) or 'nenhum'}")
            time = typer.prompt("→ Horário (HH:MM)")
        if not service:
            for idx, s in enumerate(services, 1):
                console.print(f"  {idx}. {s.name} ({format_money(s.price, config.messaging.currency_symbol)})")
            picked = typer.prompt("→ Serviços (números separados por espaço)")
            service = []
            for item in picked.split():
                if item.isdigit() and 0 < int(item) <= len(services):
                    service.append(services[int(item) - 1].id)
                else:
                    service.append(item)

        draft = AppointmentDraft(
            client_name=client,
            date=_parse_date(date, date),
            time=time,
            bundle=_resolve_services(service, services),
            phone=phone,
            payment_method=payment,
            notes=notes,
        )

        appointment = scheduler.book(draft)
        console.print(
            f"\n[green]✓ Agendado:[/green] {appointment.client_name} em "
            f"{appointment.date} às {appointment.time} "
            f"({format_money(appointment.total_price, config.messaging.currency_symbol)})"
        )
        console.print(f"[dim]ID: {appointment.id}[/dim]\n")

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def edit(
    appointment_id: Annotated[str, typer.Argument(help="Appointment id")],
    client: Annotated[Optional[str], typer.Option("--client", help="Client name")] = None,
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD)")] = None,
    time: Annotated[Optional[str], typer.Option("--time", "-t", help="Time (HH:MM)")] = None,
    service: Annotated[Optional[List[str]], typer.Option("--service", "-s", help="Replace the services; repeat for up to 5.")] = None,
    phone: Annotated[Optional[str], typer.Option("--phone", help="Client phone")] = None,
    payment: Annotated[Optional[str], typer.Option("--payment", help="Payment method")] = None,
    notes: Annotated[Optional[str], typer.Option("--notes", help="Notes")] = None,
    config_file: ConfigOption = None,
):
    """
    Edit an appointment. Only the given fields change.
    """
    try:
        config, scheduler = _load(config_file)
        current = AppointmentDraft.from_appointment(scheduler.get_appointment(appointment_id))

        bundle = current.bundle
        if service:
            bundle = _resolve_services(service, scheduler.services())

        draft = AppointmentDraft(
            client_name=client if client is not None else current.client_name,
            date=_parse_date(date, current.date),
            time=time or current.time,
            bundle=bundle,
            phone=phone if phone is not None else current.phone,
            payment_method=payment if payment is not None else current.payment_method,
            notes=notes if notes is not None else current.notes,
        )

        appointment = scheduler.reschedule(appointment_id, draft)
        console.print(
            f"\n[green]✓ Atualizado:[/green] {appointment.client_name} em "
            f"{appointment.date} às {appointment.time} "
            f"({format_money(appointment.total_price, config.messaging.currency_symbol)})\n"
        )

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def cancel(
    appointment_id: Annotated[str, typer.Argument(help="Appointment id")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
    config_file: ConfigOption = None,
):
    """
    Delete an appointment.
    """
    try:
        _, scheduler = _load(config_file)
        if not yes and not typer.confirm("Deseja realmente excluir este agendamento?"):
            raise typer.Abort()

        scheduler.cancel(appointment_id)
        console.print("\n[green]✓ Agendamento excluído.[/green]\n")

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def attend(
    appointment_id: Annotated[str, typer.Argument(help="Appointment id")],
    config_file: ConfigOption = None,
):
    """
    Toggle whether the client attended.
    """
    try:
        _, scheduler = _load(config_file)
        attended = scheduler.toggle_attendance(appointment_id)
        state = "compareceu" if attended else "não compareceu"
        console.print(f"\n[green]✓ Marcado como {state}.[/green]\n")

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command(name="services")
def list_services(
    config_file: ConfigOption = None,
):
    """
    List the services offered.
    """
    try:
        config, scheduler = _load(config_file)
        services = scheduler.services()

        if not services:
            console.print("[yellow]Nenhum serviço cadastrado.[/yellow]")
            return

        table = Table(
            title="Serviços",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Nome", style="bold yellow")
        table.add_column("Preço", justify="right")
        table.add_column("Duração", justify="right")
        table.add_column("Descrição")
        table.add_column("ID", style="dim")

        for s in services:
            table.add_row(
                s.name,
                format_money(s.price, config.messaging.currency_symbol),
                f"{s.duration} min",
                s.description,
                s.id,
            )

        console.print()
        console.print(table)
        console.print()

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def add_service(
    name: Annotated[str, typer.Option("--name", help="Service name")],
    price: Annotated[str, typer.Option("--price", help="Price, e.g. 80 or 80,50")],
    duration: Annotated[int, typer.Option("--duration", help="Duration in minutes")],
    description: Annotated[str, typer.Option("--description", help="Description")] = "",
    config_file: ConfigOption = None,
):
    """
    Add a service to the catalog.
    """
    try:
        _, scheduler = _load(config_file)
        created = scheduler.add_service(name, price, duration, description)
        console.print(f"\n[green]✓ Serviço criado:[/green] {created.name} [dim]({created.id})[/dim]\n")

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def update_service(
    service_id: Annotated[str, typer.Argument(help="Service id")],
    name: Annotated[Optional[str], typer.Option("--name", help="Service name")] = None,
    price: Annotated[Optional[str], typer.Option("--price", help="Price")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", help="Duration in minutes")] = None,
    description: Annotated[Optional[str], typer.Option("--description", help="Description")] = None,
    config_file: ConfigOption = None,
):
    """
    Change a service. Totals already stored on appointments are kept.
    """
    try:
        _, scheduler = _load(config_file)
        current = next((s for s in scheduler.services() if s.id == service_id), None)
        if current is None:
            raise ValidationError(f"Serviço desconhecido: {service_id!r}")

        updated = scheduler.update_service(
            service_id,
            name if name is not None else current.name,
            price if price is not None else current.price,
            duration if duration is not None else current.duration,
            description if description is not None else current.description,
        )
        console.print(f"\n[green]✓ Serviço atualizado:[/green] {updated.name}\n")

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def delete_service(
    service_id: Annotated[str, typer.Argument(help="Service id")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
    config_file: ConfigOption = None,
):
    """
    Remove a service from the catalog.
    """
    try:
        _, scheduler = _load(config_file)
        linked = scheduler.service_in_use(service_id)

        question = (
            "Este serviço já possui agendamentos vinculados. Tem certeza que deseja excluir?"
            if linked
            else "Tem certeza que deseja excluir este serviço?"
        )
        if not yes and not typer.confirm(question):
            raise typer.Abort()

        if scheduler.remove_service(service_id):
            console.print("\n[green]✓ Serviço excluído.[/green] [yellow]Agendamentos vinculados mantêm o valor já registrado.[/yellow]\n")
        else:
            console.print("\n[green]✓ Serviço excluído.[/green]\n")

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def message(
    appointment_id: Annotated[str, typer.Argument(help="Appointment id")],
    kind: Annotated[str, typer.Option("--kind", "-k", help="confirmacao or lembrete")] = "confirmacao",
    config_file: ConfigOption = None,
):
    """
    Print the WhatsApp confirmation or reminder text and link.
    """
    try:
        config, scheduler = _load(config_file)
        appointment = scheduler.get_appointment(appointment_id)

        text = build_message(
            appointment,
            scheduler.services(),
            kind,
            config.business,
            config.messaging.currency_symbol,
        )
        url = whatsapp_url(appointment.phone, text, config.messaging.country_code)

        console.print(Panel(text, title=kind.capitalize()))
        console.print(url, soft_wrap=True)

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def backup(
    output: Annotated[Path, typer.Option("--output", "-o", help="Directory for the backup file")] = Path("."),
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Selected date recorded in the backup")] = None,
    config_file: ConfigOption = None,
):
    """
    Export services and appointments to a JSON file.
    """
    try:
        config, scheduler = _load(config_file)
        now = pendulum.now(config.timezone)
        selected = _parse_date(date, now.to_date_string())

        payload = build_backup(
            scheduler.services(),
            scheduler.appointments(),
            selected,
            exported_at=now,
        )
        path = write_backup(output / backup_filename(config.business.name, now.to_date_string()), payload)
        console.print(f"\n[green]✓ Backup salvo em[/green] {path}\n")

    except (StudioBookError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]studiobook[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
