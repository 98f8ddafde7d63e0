from dataclasses import dataclass
from enum import IntEnum
from uuid import UUID


class TodoType(IntEnum):
    NOT_STARTED = 0
    IN_PROGRESS = 1
    DONE = 2


@dataclass
class Todo:
    school_id: int
    id: UUID
    text: str
    type: TodoType = TodoType.NOT_STARTED

    def __post_init__(self):
        self.type = TodoType(self.type)

    def to_json(self, secure=False):
        value = {"todo_id": str(self.id), "text": self.text, "type": int(self.type)}
        if not secure:
            value["school_id"] = self.school_id
        return value
