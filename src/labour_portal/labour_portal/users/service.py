from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_bool, require_min_length, require_non_empty, require_positive_decimal
from ..core.enums import Role, UserType
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from .model import NewUser, User
from .repository import UserRepository

log = logging.getLogger(__name__)


class AuthService:
    """Use cases: login and self-registration."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> User:
        user = self._users.get_by_username((username or "").strip())
        if not user:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")
        if not user.active:
            raise AuthenticationError("Your account is deactivated. Please contact your administrator.")
        return user

    def register(
        self,
        data: Mapping[str, Any],
        *,
        default_normal_rate: Decimal,
        default_overtime_rate: Decimal,
    ) -> User:
        role_s = data.get("role") or Role.CANDIDATE.value
        try:
            role = Role(role_s)
        except ValueError:
            raise ValidationError("Invalid role")
        if role == Role.ADMIN:
            raise AuthorizationError("Admin accounts cannot be self-registered")

        user_id = create_account(
            self._users,
            data,
            role=role,
            default_normal_rate=default_normal_rate,
            default_overtime_rate=default_overtime_rate,
        )
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        log.info("User %s registered as %s", user.username, role.value)
        return user


def create_account(
    users: UserRepository,
    data: Mapping[str, Any],
    *,
    role: Role,
    default_normal_rate: Decimal,
    default_overtime_rate: Decimal,
) -> int:
    username = require_non_empty(data.get("username"), "Username")
    password = require_min_length(data.get("password") or "", "Password", 5)
    email = require_non_empty(data.get("email"), "Email")
    if "@" not in email:
        raise ValidationError("Email is invalid")

    normal_rate = default_normal_rate
    overtime_rate = default_overtime_rate
    if data.get("normalRate") not in (None, ""):
        normal_rate = require_positive_decimal(data.get("normalRate"), "Normal rate")
    if data.get("overtimeRate") not in (None, ""):
        overtime_rate = require_positive_decimal(data.get("overtimeRate"), "Overtime rate")

    user_type = None
    if data.get("userType"):
        try:
            user_type = UserType(data["userType"])
        except ValueError:
            raise ValidationError("Invalid user type")

    if users.get_by_username(username):
        raise ConflictError("Username already exists")

    return users.create_user(
        NewUser(
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
            normal_rate=normal_rate,
            overtime_rate=overtime_rate,
            email=email,
            nino=(data.get("nino") or None),
            utr=(data.get("utr") or None),
            user_type=user_type,
            phone_number=(data.get("phoneNumber") or None),
            address=(data.get("address") or None),
        )
    )


class UserService:
    """Use cases: manage users (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_user(self, *, current_role: Role, current_user_id: int, user_id: int) -> User:
        if current_role != Role.ADMIN and int(current_user_id) != int(user_id):
            raise AuthorizationError("You can only view your own account")
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, *, current_role: Role) -> Sequence[User]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can list users")
        return self._users.list_all()

    def set_active(self, *, current_role: Role, user_id: int, active: Any) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change account status")
        active = require_bool(active, "Active status")
        if not self._users.set_active(int(user_id), active=active):
            raise NotFoundError("User not found")
        log.info("User %s active=%s", user_id, active)

    def update_rates(self, *, current_role: Role, user_id: int, normal_rate: Any, overtime_rate: Any) -> User:
        """Change a user's live rates; existing timesheets keep their snapshot."""
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change rates")
        normal = require_positive_decimal(normal_rate, "Normal rate")
        overtime = require_positive_decimal(overtime_rate, "Overtime rate")

        if not self._users.update_rates(int(user_id), normal_rate=normal, overtime_rate=overtime):
            raise NotFoundError("User not found")
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        log.info("Rates for user %s set to %s / %s", user_id, normal, overtime)
        return user

    def delete_user(self, *, current_role: Role, current_user_id: int, user_id: int) -> None:
        """Refused while the user owns timesheets or invoices; deactivate them instead."""
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can delete users")
        if int(user_id) == int(current_user_id):
            raise ValidationError("Cannot delete your own account")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if user.role == Role.ADMIN and self._users.count_admins() <= 1:
            raise ConflictError("Cannot delete the last admin account")

        if not self._users.delete_by_id(int(user_id)):
            raise NotFoundError("User not found")
        log.info("User %s deleted", user_id)
