from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import NewUser, User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(self, user: NewUser) -> int:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def count_admins(self) -> int:
        raise NotImplementedError

    def set_active(self, user_id: int, *, active: bool) -> bool:
        raise NotImplementedError

    def update_rates(self, user_id: int, *, normal_rate: Decimal, overtime_rate: Decimal) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        """False if the user does not exist; ``ConflictError`` while they own
        timesheets or invoices. The check and the delete run in one transaction.
        """

        raise NotImplementedError
