"""Command-line front end for the operator console."""
from __future__ import annotations

import logging
from typing import List, Optional

import typer

from lodgedesk.config import get_config
from lodgedesk.console import (
    cancel_reservation,
    check_in_reservation,
    check_out_reservation,
    create_reservation,
    list_available_rooms,
    list_reservations,
    list_rooms,
    parse_guest_spec,
    reservation_actions,
)
from lodgedesk.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="lodgedesk",
    help="Console for rooms and reservations of a small lodging business.",
    add_completion=False,
)


def _emit(message: str) -> None:
    typer.echo(message)
    if message.startswith("❌"):
        raise typer.Exit(code=1)


@app.callback()
def setup() -> None:
    try:
        level = get_config().get_log_level()
    except ConfigurationError as e:
        _emit(f"❌ Configuração inválida: {e}")
        return
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=level)


@app.command()
def rooms(
    status: Optional[str] = typer.Option(None, "--status", help="AVAILABLE, CLEANING or REPAIRS_NEEDED"),
) -> None:
    """List rooms."""
    _emit(list_rooms(status))


@app.command()
def available(
    check_in: str = typer.Argument(..., help="Check-in date (YYYY-MM-DD or ISO-8601)"),
    check_out: str = typer.Argument(..., help="Check-out date (YYYY-MM-DD or ISO-8601)"),
    guests: Optional[int] = typer.Option(None, "--guests", help="Only rooms that fit this many guests"),
) -> None:
    """List rooms free for a period."""
    _emit(list_available_rooms(check_in, check_out, guests=guests))


@app.command()
def reservations(
    start: Optional[str] = typer.Option(None, "--start", help="Stays ending after this date"),
    end: Optional[str] = typer.Option(None, "--end", help="Stays starting before this date"),
    room: Optional[int] = typer.Option(None, "--room", help="Room id"),
    status: Optional[str] = typer.Option(None, "--status", help="CONFIRMED, CHECKED_IN, CHECKED_OUT or CANCELLED"),
) -> None:
    """List reservations."""
    _emit(list_reservations(start, end, room, status))


@app.command()
def reserve(
    room_id: int = typer.Argument(..., help="Room id"),
    check_in: str = typer.Argument(..., help="Check-in date"),
    check_out: str = typer.Argument(..., help="Check-out date"),
    guest: List[str] = typer.Option(..., "--guest", "-g", help="name;cpf;phone[;support contact], once per guest"),
    num_guests: Optional[int] = typer.Option(None, "--num-guests", help="Defaults to the number of --guest entries"),
) -> None:
    """Create a reservation."""
    try:
        guests = [parse_guest_spec(g) for g in guest]
    except ValueError as e:
        _emit(f"❌ {e}")
        return
    _emit(create_reservation(room_id, check_in, check_out, guests, num_guests=num_guests))


@app.command("check-in")
def check_in(reservation_id: int = typer.Argument(..., help="Reservation id")) -> None:
    """Check guests in."""
    _emit(check_in_reservation(reservation_id))


@app.command("check-out")
def check_out(reservation_id: int = typer.Argument(..., help="Reservation id")) -> None:
    """Check guests out."""
    _emit(check_out_reservation(reservation_id))


@app.command()
def cancel(reservation_id: int = typer.Argument(..., help="Reservation id")) -> None:
    """Cancel a confirmed reservation (until the cutoff before check-in)."""
    _emit(cancel_reservation(reservation_id))


@app.command()
def actions(reservation_id: int = typer.Argument(..., help="Reservation id")) -> None:
    """Show what can be done with a reservation right now."""
    _emit(reservation_actions(reservation_id))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        logger.info("Stopped by user")


if __name__ == "__main__":
    main()
