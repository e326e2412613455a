from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..common.money import format_money
from ..core.enums import Role, UserType


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    ``normal_rate``/``overtime_rate`` are the live billing rates; timesheets copy
    them at submission time.
    """

    user_id: int
    username: str
    password_hash: str
    role: Role
    normal_rate: Decimal
    overtime_rate: Decimal
    active: bool = True
    email: Optional[str] = None
    nino: Optional[str] = None
    utr: Optional[str] = None
    user_type: Optional[UserType] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "role": self.role.value,
            "active": self.active,
            "normalRate": format_money(self.normal_rate),
            "overtimeRate": format_money(self.overtime_rate),
            "email": self.email,
            "nino": self.nino,
            "utr": self.utr,
            "userType": self.user_type.value if self.user_type else None,
            "phoneNumber": self.phone_number,
            "address": self.address,
        }


@dataclass(frozen=True)
class NewUser:
    username: str
    password_hash: str
    role: Role
    normal_rate: Decimal
    overtime_rate: Decimal
    email: Optional[str] = None
    nino: Optional[str] = None
    utr: Optional[str] = None
    user_type: Optional[UserType] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    active: bool = True
