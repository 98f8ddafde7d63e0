from dataclasses import dataclass
from uuid import UUID

# Paleta de colores que entiende el frontend
ALLOWED_COLOURS = (
    "whiteAlpha", "blackAlpha", "gray", "red", "orange", "yellow", "green",
    "teal", "blue", "cyan", "purple", "pink", "linkedin", "facebook",
    "messenger", "whatsapp", "twitter", "telegram",
)


@dataclass
class Tag:
    school_id: int
    id: UUID
    value: str
    colour: str

    def to_json(self, secure=False):
        value = {"id": str(self.id), "name": self.value, "colour": self.colour}
        if not secure:
            value["school_id"] = self.school_id
        return value
