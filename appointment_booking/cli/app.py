"""
Main CLI application using Typer.
"""

import logging
import random
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.json_store import JsonAppointmentRepository
from ..config import AppConfig, load_config
from ..domain.calendar_grid import BusinessHours
from ..domain.exceptions import BookingError
from ..domain.models import AppointmentType, DateRange, format_interval, parse_instant
from ..services.booking_service import BookingService, next_week_range, this_week_range

app = typer.Typer(
    name="appointment-booking",
    help="Find, optimize and book appointment slots in the practice calendar",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
StartOption = Annotated[Optional[str], typer.Option("--start", help="Range start (YYYY-MM-DD HH:MM)")]
EndOption = Annotated[Optional[str], typer.Option("--end", help="Range end (YYYY-MM-DD HH:MM)")]
NextWeekOption = Annotated[bool, typer.Option("--next-week", help="Search next week (Monday-Friday).")]
TypeArgument = Annotated[str, typer.Argument(help="Appointment type: short, medium or long")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Appointment booking for a practice with fixed business hours.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_service(config: AppConfig) -> BookingService:
    return BookingService(
        repository=JsonAppointmentRepository(config.store_file),
        business_hours=config.to_business_hours(),
    )


def _parse_range_end(text: str, tz: str) -> pendulum.DateTime:
    """A bare date as range end means the end of that day."""
    end = parse_instant(text, tz)
    if " " not in text.strip():
        end = end.end_of("day")
    return end


def _determine_date_range(
    *,
    business_hours: BusinessHours,
    next_week: bool,
    start_option: Optional[str],
    end_option: Optional[str]
) -> DateRange:
    """
    Resolve the query range from the shortcut flag or explicit dates.

    Without any option the range runs from now until the end of this
    working week.
    """
    tz = business_hours.timezone

    if next_week and (start_option or end_option):
        raise typer.BadParameter("--next-week cannot be combined with --start/--end")

    now = pendulum.now(tz)

    if next_week:
        return next_week_range(now)

    if not start_option and not end_option:
        return this_week_range(now, business_hours)

    if start_option:
        start = parse_instant(start_option, tz)
    else:
        start = business_hours.next_working_instant(now)

    if end_option:
        end = _parse_range_end(end_option, tz)
    else:
        end = start.end_of("day")

    return DateRange(start=start, end=end)


def _fail(message: object) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(str(message))}")
    raise typer.Exit(1)


@app.command()
def slots(
    appointment_type: Annotated[
        Optional[str],
        typer.Argument(help="Appointment type: short, medium or long. Defaults to the config value."),
    ] = None,
    optimized: Annotated[bool, typer.Option("--optimized", "-o", help="Offer at most one slot per hour.")] = False,
    start: StartOption = None,
    end: EndOption = None,
    next_week: NextWeekOption = False,
    config_file: ConfigOption = None,
):
    """
    List free time slots for an appointment type.

    Examples:

        appointment-booking slots short

        appointment-booking slots medium --optimized --next-week

        appointment-booking slots long --start "2024-11-25 08:00" --end 2024-11-29
    """
    try:
        config = load_config(config_file)
        service = _build_service(config)
        if appointment_type is None:
            requested = config.defaults.get_appointment_type()
        else:
            requested = AppointmentType.parse(appointment_type)
        date_range = _determine_date_range(
            business_hours=service.business_hours,
            next_week=next_week,
            start_option=start,
            end_option=end,
        )

        found = service.free_slots(date_range, requested, optimized=optimized)
    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(e)

    title = "Optimized free time slots" if optimized else "Free time slots"
    console.print(f"\n[bold cyan]{title}[/bold cyan] for {requested.display_name}: {date_range}\n")

    if not found:
        console.print("[yellow]⚠ No free slots found.[/yellow]\n")
        return

    for slot_start in found:
        slot_end = slot_start.add(minutes=requested.duration_minutes)
        console.print(f"  {format_interval(slot_start, slot_end)}")

    console.print(f"\n[bold green]✓ {len(found)} free slot(s)[/bold green]\n")


@app.command()
def book(
    appointment_type: TypeArgument,
    start: Annotated[str, typer.Argument(help="Appointment start (YYYY-MM-DD HH:MM)")],
    config_file: ConfigOption = None,
):
    """
    Book a new appointment.
    """
    try:
        config = load_config(config_file)
        service = _build_service(config)
        requested = AppointmentType.parse(appointment_type)
        appointment = service.book(parse_instant(start, config.timezone), requested)
    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(f"[green]✓ Appointment booked:[/green] {appointment.format_display()}")


@app.command()
def cancel(
    start: Annotated[str, typer.Argument(help="Start of the appointment to cancel (YYYY-MM-DD HH:MM)")],
    config_file: ConfigOption = None,
):
    """
    Cancel a booked appointment.
    """
    try:
        config = load_config(config_file)
        service = _build_service(config)
        appointment = service.cancel(parse_instant(start, config.timezone))
    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(f"[green]✓ Appointment cancelled:[/green] {appointment.format_display()}")


@app.command("list")
def list_appointments(
    start: StartOption = None,
    end: EndOption = None,
    next_week: NextWeekOption = False,
    show_all: Annotated[bool, typer.Option("--all", help="List every booked appointment.")] = False,
    config_file: ConfigOption = None,
):
    """
    List booked appointments.
    """
    try:
        config = load_config(config_file)
        service = _build_service(config)
        if show_all:
            appointments = service.appointments()
        else:
            date_range = _determine_date_range(
                business_hours=service.business_hours,
                next_week=next_week,
                start_option=start,
                end_option=end,
            )
            appointments = service.appointments(date_range)
    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if not appointments:
        console.print("[yellow]No booked appointments.[/yellow]")
        return

    table = Table(
        title="Booked appointments",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Date", style="bold yellow")
    table.add_column("Time")
    table.add_column("Type", style="dim")

    for appointment in appointments:
        table.add_row(
            appointment.start.format("ddd DD.MM.YYYY"),
            f"{appointment.start.format('HH:mm')} - {appointment.end.format('HH:mm')}",
            appointment.appointment_type.display_name,
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def fill(
    appointment_type: TypeArgument,
    percentage: Annotated[
        Optional[int],
        typer.Argument(min=1, max=100, help="Percentage of open time to fill. Defaults to the config value."),
    ] = None,
    start: StartOption = None,
    end: EndOption = None,
    next_week: NextWeekOption = False,
    seed: Annotated[Optional[int], typer.Option("--seed", help="Random seed for reproducible fills.")] = None,
    config_file: ConfigOption = None,
):
    """
    Fill the calendar with random appointments (for testing).
    """
    try:
        config = load_config(config_file)
        service = _build_service(config)
        requested = AppointmentType.parse(appointment_type)
        date_range = _determine_date_range(
            business_hours=service.business_hours,
            next_week=next_week,
            start_option=start,
            end_option=end,
        )
        added = service.fill_random(
            date_range,
            requested,
            percentage if percentage is not None else config.defaults.fill_percentage,
            rng=random.Random(seed),
        )
    except (BookingError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(f"[green]✓ Added {len(added)} {requested.display_name} appointment(s)[/green]")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]appointment-booking[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
