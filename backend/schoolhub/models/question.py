from dataclasses import dataclass
from enum import IntEnum
from uuid import UUID


class AnswerOwnerType(IntEnum):
    ANNOUNCEMENT = 0
    QUESTION = 1


@dataclass
class Question:
    school_id: int
    id: UUID
    text: str
    time_added: int
    added_by_user_id: UUID

    def to_json(self, secure=False):
        value = {
            "id": str(self.id),
            "content": self.text,
            "created_at": self.time_added,
            "added_by_user_id": str(self.added_by_user_id),
        }
        if not secure:
            value["school_id"] = self.school_id
        return value


@dataclass
class Answer:
    school_id: int
    id: UUID
    created_at: int
    created_by: UUID
    content: str

    def to_json(self, secure=False):
        value = {
            "id": str(self.id),
            "created_by": str(self.created_by),
            "created_at": self.created_at,
            "content": self.content,
        }
        if not secure:
            value["school_id"] = self.school_id
        return value
