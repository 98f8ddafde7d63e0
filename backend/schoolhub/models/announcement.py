from dataclasses import dataclass, field
from typing import List
from uuid import UUID


@dataclass
class Announcement:
    school_id: int
    id: UUID
    created_at: int
    created_by: UUID
    title: str
    content: str
    allow_answers: bool = True
    files: List[UUID] = field(default_factory=list)

    def to_json(self, secure=False):
        value = {
            "id": str(self.id),
            "created_by": str(self.created_by),
            "created_at": self.created_at,
            "title": self.title,
            "content": self.content,
            "allow_answers": self.allow_answers,
            "files": [str(f) for f in self.files],
        }
        if not secure:
            value["school_id"] = self.school_id
        return value
