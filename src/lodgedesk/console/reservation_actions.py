from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from lodgedesk.clock import parse_instant
from lodgedesk.console import DATE_FORMAT, DATETIME_FORMAT, failure, get_session
from lodgedesk.exceptions import LodgeDeskError
from lodgedesk.models import LifecycleAction, Reservation
from lodgedesk.schemas import ReservationCandidate, ReservationFilter
from lodgedesk.services import AvailabilityService, LifecycleService, ReservationService

logger = logging.getLogger(__name__)

ACTION_LABELS = {
    LifecycleAction.CHECK_IN: "Check-in",
    LifecycleAction.CHECK_OUT: "Check-out",
    LifecycleAction.CANCEL: "Cancelar",
}

STATUS_LABELS = {
    "CONFIRMED": "Confirmada",
    "CHECKED_IN": "Check-in",
    "CHECKED_OUT": "Check-out",
    "CANCELLED": "Cancelada",
}


# ------------------------------------
# Helpers
# ------------------------------------
def parse_guest_spec(spec: str) -> Dict[str, Any]:
    """
    Parses ``"name;cpf;phone[;support]"`` into a guest payload.
    Empty parts stay absent, so ``"Ana;;11999990000"`` is a guest without CPF.
    """
    parts = [p.strip() for p in spec.split(";")]
    if len(parts) < 3 or len(parts) > 4:
        raise ValueError(f"Hóspede inválido '{spec}'. Formato esperado: nome;cpf;telefone[;contato]")
    keys = ("name", "cpf", "contactPhone", "supportContact")
    return {key: value for key, value in zip(keys, parts) if value}


def _format_reservation(reservation: Reservation) -> str:
    room = reservation.room
    room_label = f"Quarto {room.number} ({room.name})" if room else f"Quarto #{reservation.room_id}"
    return (
        f"{reservation.get_reference_code()} | {room_label} | "
        f"{reservation.check_in.strftime(DATE_FORMAT)} → {reservation.check_out.strftime(DATE_FORMAT)} | "
        f"{reservation.num_guests} hóspede(s) | {STATUS_LABELS.get(reservation.status.value, reservation.status.value)}"
    )


# ------------------------------------
# ACTIONS
# ------------------------------------
def list_available_rooms(
    check_in: Optional[str], check_out: Optional[str], guests: Optional[int] = None
) -> str:
    """Rooms free for the interval; nothing is queried until both dates are given."""
    if not check_in or not check_out:
        return "Selecione as datas de check-in e check-out para ver os quartos disponíveis."
    try:
        rooms = AvailabilityService(get_session()).find_available_rooms(
            parse_instant(check_in), parse_instant(check_out), guests=guests
        )
    except (LodgeDeskError, ValueError) as e:
        return failure("Falha ao consultar disponibilidade", e)

    if not rooms:
        return "Nenhum quarto disponível para o período selecionado."
    lines = ["Quartos disponíveis:"]
    for room in rooms:
        lines.append(f"• #{room.id} Quarto {room.number} - {room.name} (capacidade {room.capacity})")
    return "\n".join(lines)


def list_reservations(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    room_id: Optional[int] = None,
    status: Optional[str] = None,
) -> str:
    try:
        filters = ReservationFilter(
            start_date=start_date, end_date=end_date, room_id=room_id, status=status.upper() if status else None
        )
        reservations = ReservationService(get_session()).list_reservations(filters)
    except (LodgeDeskError, ValidationError, ValueError) as e:
        return failure("Falha ao carregar reservas", e)

    if not reservations:
        return "Nenhuma reserva encontrada."
    return "\n".join(_format_reservation(r) for r in reservations)


def create_reservation(
    room_id: int,
    check_in: str,
    check_out: str,
    guests: List[Dict[str, Any]],
    num_guests: Optional[int] = None,
) -> str:
    """
    Validates and submits a reservation. ``num_guests`` defaults to the number
    of guest entries given.
    """
    try:
        candidate = ReservationCandidate(
            room_id=room_id,
            num_guests=num_guests if num_guests is not None else len(guests),
            check_in=check_in,
            check_out=check_out,
            guests=guests,
        )
        reservation = ReservationService(get_session()).create_reservation(candidate)
    except (LodgeDeskError, ValidationError, ValueError) as e:
        return failure("Falha ao criar reserva", e)

    return f"✅ Reserva criada com sucesso! {_format_reservation(reservation)}"


def _apply(reservation_id: int, action: LifecycleAction, success: str, prefix: str) -> str:
    try:
        reservation = LifecycleService(get_session()).apply_action(reservation_id, action)
    except LodgeDeskError as e:
        return failure(prefix, e)
    return f"✅ {success} {_format_reservation(reservation)}"


def check_in_reservation(reservation_id: int) -> str:
    return _apply(reservation_id, LifecycleAction.CHECK_IN, "Check-in realizado com sucesso!", "Falha ao realizar check-in")


def check_out_reservation(reservation_id: int) -> str:
    return _apply(reservation_id, LifecycleAction.CHECK_OUT, "Check-out realizado com sucesso!", "Falha ao realizar check-out")


def cancel_reservation(reservation_id: int) -> str:
    return _apply(reservation_id, LifecycleAction.CANCEL, "Reserva cancelada com sucesso!", "Falha ao cancelar reserva")


def reservation_actions(reservation_id: int) -> str:
    """Actions the operator can take on a reservation now, with the cancellation notice."""
    try:
        session = get_session()
        lifecycle = LifecycleService(session)
        reservation = ReservationService(session).get_reservation(reservation_id)
    except LodgeDeskError as e:
        return failure("Falha ao carregar reserva", e)

    actions = lifecycle.allowed_actions(reservation)
    result = _format_reservation(reservation) + "\n"
    if actions:
        result += "Ações disponíveis: " + ", ".join(ACTION_LABELS[a] for a in actions) + "\n"
    else:
        result += "Nenhuma ação disponível.\n"
    if reservation.is_confirmed():
        deadline = lifecycle.cancellation_deadline(reservation)
        result += (
            f"Cancelamentos só são permitidos até {lifecycle.cutoff_days} dias antes do check-in "
            f"(até {deadline.strftime(DATETIME_FORMAT)}).\n"
        )
    return result.rstrip("\n")
