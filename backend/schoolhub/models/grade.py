from dataclasses import dataclass
from uuid import UUID


@dataclass
class Grade:
    school_id: int
    id: UUID
    evaluated_id: UUID
    evaluator_id: UUID
    course_id: UUID
    grade: int
    out_of: int
    created_at: int
    # -1 = sin peso asignado
    weight: float = -1.0

    def to_json(self, secure=False):
        value = {
            "id": str(self.id),
            "evaluated_id": str(self.evaluated_id),
            "evaluator_id": str(self.evaluator_id),
            "course_id": str(self.course_id),
            "grade": self.grade,
            "out_of": self.out_of,
            "created_at": self.created_at,
            "weight": self.weight,
        }
        if not secure:
            value["school_id"] = self.school_id
        return value
