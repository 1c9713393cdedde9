"""Cabinet, membership and user lookups."""

from typing import Set

from ..models import Cabinet, CabinetMember, User, MEMBER_FULL_ROLE
from ..exceptions import CabinetNotFoundError, UserNotFoundError
from .base import BaseRepository


class CabinetRepository(BaseRepository[Cabinet]):

    model_class = Cabinet
    not_found_error = CabinetNotFoundError

    def is_member_full(self, cabinet_id: str, user_id: str) -> bool:
        return (
            self.db.query(CabinetMember)
            .filter(
                CabinetMember.cabinet_id == cabinet_id,
                CabinetMember.user_id == user_id,
                CabinetMember.role == MEMBER_FULL_ROLE,
            )
            .first()
            is not None
        )

    def member_full_cabinet_ids(self, user_id: str) -> Set[str]:
        rows = (
            self.db.query(CabinetMember.cabinet_id)
            .filter(CabinetMember.user_id == user_id, CabinetMember.role == MEMBER_FULL_ROLE)
            .all()
        )
        return {row[0] for row in rows}


class UserRepository(BaseRepository[User]):

    model_class = User
    not_found_error = UserNotFoundError
