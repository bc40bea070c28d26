"""
Operator console actions.

Each action returns a display message: ``✅ ...`` on success, ``❌ ...`` when a
rule, the collaborator or the input refused the operation. Booking errors
never escape an action, so a front end only has to show the message.
"""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from lodgedesk.adapters.base import AccountAdapter
from lodgedesk.config import get_config
from lodgedesk.exceptions import (
    AuthenticationError,
    CancellationWindowExpiredError,
    CapacityExceededError,
    ConflictError,
    DuplicateGuestIdError,
    GuestCountMismatchError,
    IllegalTransitionError,
    InvalidDateRangeError,
    LodgeDeskError,
    ReservationNotFoundError,
    RoomNotFoundError,
    ServerValidationError,
    TransportError,
)
from lodgedesk.session import Session

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d/%m/%Y"
DATETIME_FORMAT = "%d/%m/%Y %H:%M"

# Global session instance
_session: Optional[Session] = None


def get_session() -> Session:
    """
    Returns the process-wide session, building it from configuration on first
    use (logging in when credentials are configured).
    """
    global _session
    if _session is None:
        config = get_config()
        adapter = config.create_adapter()
        cutoff = config.get_cancellation_cutoff_days()
        username, password = config.get_username(), config.get_password()
        if isinstance(adapter, AccountAdapter) and username and password:
            _session = Session.login(adapter, username, password, cancellation_cutoff_days=cutoff)
        else:
            _session = Session.local(adapter, cancellation_cutoff_days=cutoff)
    return _session


def set_session(session: Optional[Session]) -> None:
    """Sets a custom session (useful for tests)."""
    global _session
    _session = session


def describe_error(error: Exception) -> str:
    """Operator-facing description of why an operation was refused."""
    if isinstance(error, RoomNotFoundError):
        return f"Quarto {error.room_id} não encontrado."
    if isinstance(error, CapacityExceededError):
        return f"O número de hóspedes ({error.num_guests}) excede a capacidade do quarto ({error.capacity})."
    if isinstance(error, GuestCountMismatchError):
        return f"Foram informados {error.provided} hóspedes, mas a reserva é para {error.expected}."
    if isinstance(error, InvalidDateRangeError):
        return "A data de check-out deve ser posterior à de check-in."
    if isinstance(error, DuplicateGuestIdError):
        return f"CPF duplicado: {error.cpf}."
    if isinstance(error, CancellationWindowExpiredError):
        return (
            "Cancelamentos só são permitidos até "
            f"{error.deadline.strftime(DATETIME_FORMAT)} (antes do check-in)."
        )
    if isinstance(error, IllegalTransitionError):
        if error.status:
            return f"Ação '{error.action}' não permitida para reservas com status {error.status}."
        return f"Ação '{error.action}' recusada pelo servidor: {error.reason}"
    if isinstance(error, ReservationNotFoundError):
        return f"Reserva {error.reservation_id} não encontrada."
    if isinstance(error, ConflictError):
        return f"Conflito: {error} Atualize os dados e tente novamente."
    if isinstance(error, AuthenticationError):
        return "Sessão expirada ou credenciais inválidas. Faça login novamente."
    if isinstance(error, TransportError):
        return f"Não foi possível contatar o servidor ({error}). Tente novamente."
    if isinstance(error, ServerValidationError):
        return f"O servidor recusou os dados: {error}"
    if isinstance(error, ValidationError):
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in error.errors())
        return f"Dados inválidos: {fields}."
    if isinstance(error, LodgeDeskError):
        return str(error)
    return f"Dados inválidos: {error}"


def failure(prefix: str, error: Exception) -> str:
    return f"❌ {prefix}: {describe_error(error)}"


from .reservation_actions import (
    cancel_reservation,
    check_in_reservation,
    check_out_reservation,
    create_reservation,
    list_available_rooms,
    list_reservations,
    parse_guest_spec,
    reservation_actions,
)
from .room_actions import list_rooms

__all__ = [
    "get_session",
    "set_session",
    "describe_error",
    "cancel_reservation",
    "check_in_reservation",
    "check_out_reservation",
    "create_reservation",
    "list_available_rooms",
    "list_reservations",
    "list_rooms",
    "parse_guest_spec",
    "reservation_actions",
]
