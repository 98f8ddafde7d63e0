from dataclasses import dataclass
from enum import IntEnum
from uuid import UUID


class UserType(IntEnum):
    ADMIN = 0
    TEACHER = 1
    STUDENT = 2


@dataclass
class User:
    school_id: int
    user_id: UUID
    email: str
    password: str
    user_type: UserType
    changed_password: bool
    first_name: str
    last_name: str
    phone_number: str = ""
    last_time_online: int = 0

    def __post_init__(self):
        self.user_type = UserType(self.user_type)

    @property
    def is_admin(self):
        return self.user_type == UserType.ADMIN

    @property
    def can_teach(self):
        return self.user_type in (UserType.ADMIN, UserType.TEACHER)

    def to_json(self, secure=False):
        # El hash de la contraseña nunca sale del servicio
        value = {
            "user_id": str(self.user_id),
            "email": self.email,
            "user_type": int(self.user_type),
            "first_name": self.first_name,
            "last_name": self.last_name,
        }
        if not secure:
            value["school_id"] = self.school_id
            value["phone_number"] = self.phone_number
            value["last_time_online"] = self.last_time_online
            value["changed_password"] = self.changed_password
        return value


@dataclass
class Token:
    school_id: int
    value: str
    user_id: UUID
