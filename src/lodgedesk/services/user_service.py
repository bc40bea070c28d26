from __future__ import annotations

import logging
from typing import Any, Dict, List, Union

from lodgedesk.exceptions import InvalidUserError
from lodgedesk.models import User
from lodgedesk.schemas import UserInput, UserUpdate
from lodgedesk.session import Session

logger = logging.getLogger(__name__)


class UserService:
    """Staff accounts. Username uniqueness is left to the collaborator (ConflictError)."""

    def __init__(self, session: Session):
        self.session = session

    def list_users(self) -> List[User]:
        return [User.from_dict(u) for u in self.session.accounts().list_users()]

    def create_user(self, user: Union[UserInput, Dict[str, Any]]) -> User:
        user = UserInput.model_validate(user)
        for field_name in ("name", "username", "password"):
            if not getattr(user, field_name).strip():
                raise InvalidUserError(f"User {field_name} is required")
        created = User.from_dict(self.session.accounts().create_user(user.to_payload()))
        logger.info(f"User '{created.username}' created")
        return created

    def update_user(self, user_id: int, changes: Union[UserUpdate, Dict[str, Any]]) -> User:
        changes = UserUpdate.model_validate(changes)
        for field_name in ("name", "username", "password"):
            value = getattr(changes, field_name)
            if value is not None and not value.strip():
                raise InvalidUserError(f"User {field_name} cannot be blank")
        return User.from_dict(self.session.accounts().update_user(user_id, changes.to_payload()))

    def delete_user(self, user_id: int) -> None:
        self.session.accounts().delete_user(user_id)
        logger.info(f"User {user_id} deleted")
