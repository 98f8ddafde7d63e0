"""Metadatos de archivos y referencias de contacto de alumnos."""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List
from uuid import UUID


class FileType(IntEnum):
    FILE = 0
    FOLDER = 1


class ReferenceType(IntEnum):
    EMAIL = 0
    PHONE = 1


@dataclass
class File:
    school_id: int
    id: UUID
    type: FileType
    name: str
    added_by_user: UUID
    files: List[UUID] = field(default_factory=list)
    path_to_file: str = ""
    size: int = 0
    visible_to_students: bool = True
    students_can_add: bool = False

    def __post_init__(self):
        self.type = FileType(self.type)

    def to_json(self, secure=False):
        value = {
            "id": str(self.id),
            "name": self.name,
            "type": int(self.type),
            "files": [str(f) for f in self.files],
            "created_by_user_id": str(self.added_by_user),
            "visible_to_students": self.visible_to_students,
            "students_can_add": self.students_can_add,
        }
        if not secure:
            value["school_id"] = self.school_id
            value["size"] = self.size
        return value


@dataclass
class StudentReference:
    school_id: int
    student_id: UUID
    reference: str
    type: ReferenceType

    def __post_init__(self):
        self.type = ReferenceType(self.type)

    def to_json(self, secure=False):
        value = {"id": str(self.student_id), "reference": self.reference, "type": int(self.type)}
        if not secure:
            value["school_id"] = self.school_id
        return value
