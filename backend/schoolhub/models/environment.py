"""Países, escuelas y feriados (keyspace environment)."""
from dataclasses import dataclass
from enum import IntEnum


class HolidayType(IntEnum):
    NATIONAL = 0
    CUSTOM = 1


@dataclass
class Country:
    id: int
    name: str
    code: str

    def to_json(self, secure=False):
        value = {"name": self.name}
        if not secure:
            value["id"] = self.id
            value["code"] = self.code
        return value


@dataclass
class School:
    id: int
    name: str
    country_id: int
    image_path: str = ""

    def to_json(self, secure=False):
        value = {
            "name": self.name,
            "country_id": self.country_id,
            "image_path": self.image_path,
        }
        if not secure:
            value["id"] = self.id
        return value


@dataclass
class Holiday:
    country_or_school_id: int
    type: HolidayType
    date: int
    name: str

    def __post_init__(self):
        self.type = HolidayType(self.type)

    def to_json(self, secure=False):
        value = {"time": self.date, "name": self.name}
        if not secure:
            value["country_or_school_id"] = self.country_or_school_id
            value["type"] = self.type.name
        return value
