"""Data classes for family tree entities and layout output."""

from dataclasses import dataclass, field

# camelCase key used by the JSON input contract -> dataclass attribute
_FIELD_KEYS = {
    "id": "id",
    "firstName": "first_name",
    "lastName": "last_name",
    "birthDate": "birth_date",
    "deathDate": "death_date",
    "gender": "gender",
    "photo": "photo",
    "bio": "bio",
    "occupation": "occupation",
    "location": "location",
    "spouseId": "spouse_id",
    "parentIds": "parent_ids",
    "childrenIds": "children_ids",
}


@dataclass
class Person:
    id: str
    first_name: str = ""
    last_name: str = ""
    birth_date: str | None = None  # ISO format YYYY-MM-DD, or any parsable spelling
    death_date: str | None = None
    gender: str = "other"  # male, female, other
    spouse_id: str | None = None
    parent_ids: list[str] = field(default_factory=list)
    children_ids: list[str] = field(default_factory=list)
    photo: str | None = None
    bio: str | None = None
    occupation: str | None = None
    location: str | None = None

    @property
    def full_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.id

    @classmethod
    def from_dict(cls, data: dict) -> "Person":
        """Build a person from a camelCase record, ignoring unknown keys."""
        kwargs = {attr: data[key] for key, attr in _FIELD_KEYS.items() if key in data}
        kwargs["id"] = str(kwargs["id"])
        if kwargs.get("spouse_id") is not None:
            kwargs["spouse_id"] = str(kwargs["spouse_id"])
        kwargs["parent_ids"] = [str(i) for i in kwargs.get("parent_ids") or []]
        kwargs["children_ids"] = [str(i) for i in kwargs.get("children_ids") or []]
        return cls(**kwargs)

    def to_dict(self) -> dict:
        data = {key: getattr(self, attr) for key, attr in _FIELD_KEYS.items()}
        data["parentIds"] = list(self.parent_ids)
        data["childrenIds"] = list(self.children_ids)
        return data


@dataclass
class NodePosition:
    x: float
    y: float
    person: Person
    level: int  # generation depth, 0 for roots
    index: int  # 0 = primary (left) member of a couple, 1 = spouse (right)


@dataclass(frozen=True)
class Connector:
    kind: str  # spouse, parent_drop, sibling_bar, child_stub
    x1: float
    y1: float
    x2: float
    y2: float
    source_id: str
    target_id: str | None = None
