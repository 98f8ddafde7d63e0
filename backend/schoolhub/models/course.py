from dataclasses import dataclass, field
from typing import List
from uuid import UUID


@dataclass
class Course:
    school_id: int
    id: UUID
    name: str
    course_thumbnail: str = ""
    created_at: int = 0
    start_date: int = 0
    end_date: int = 0
    files: List[UUID] = field(default_factory=list)

    def to_json(self, secure=False):
        value = {
            "id": str(self.id),
            "school_id": self.school_id,
            "name": self.name,
            "course_thumbnail": self.course_thumbnail,
            "files": [str(f) for f in self.files],
        }
        if not secure:
            value["created_at"] = self.created_at
            value["start_date"] = self.start_date
            value["end_date"] = self.end_date
        return value


@dataclass
class Lecture:
    school_id: int
    course_id: UUID
    starting_time: int
    duration: int
    location: str = ""

    def to_json(self, secure=False):
        value = {
            "course_id": str(self.course_id),
            "starting_time": self.starting_time,
            "duration": self.duration,
            "location": self.location,
        }
        if not secure:
            value["school_id"] = self.school_id
        return value
