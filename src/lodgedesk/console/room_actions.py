from __future__ import annotations

from typing import Optional

from lodgedesk.console import failure, get_session
from lodgedesk.exceptions import LodgeDeskError
from lodgedesk.models import RoomStatus
from lodgedesk.services import RoomService

STATUS_LABELS = {
    RoomStatus.AVAILABLE: "Disponível",
    RoomStatus.CLEANING: "Em limpeza",
    RoomStatus.REPAIRS_NEEDED: "Precisa de reparos",
}


def list_rooms(status: Optional[str] = None) -> str:
    try:
        rooms = RoomService(get_session()).list_rooms(status.upper() if status else None)
    except (LodgeDeskError, ValueError) as e:
        return failure("Falha ao carregar quartos", e)

    if not rooms:
        return "Nenhum quarto cadastrado."
    lines = []
    for room in rooms:
        line = f"#{room.id} Quarto {room.number} - {room.name} | capacidade {room.capacity} | {STATUS_LABELS[room.status]}"
        if room.notes:
            line += f" | {room.notes}"
        lines.append(line)
    return "\n".join(lines)
