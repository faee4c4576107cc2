"""Animal record used by the pedigree analysis."""

from collections.abc import Mapping
from dataclasses import dataclass, field

from farmika.pedigree.slots import ALL_SLOTS, is_populated

MALE_GENDERS = frozenset({"male", "macho", "m", "masculino"})
FEMALE_GENDERS = frozenset({"female", "hembra", "f", "femenino"})


@dataclass
class Animal:
    """An animal and its raw pedigree slots.

    Slot values are kept exactly as stored: an animal id, a free-text name
    imported from a paper pedigree, or blank. Use an AncestorIndex to turn
    them into ids.
    """

    id: str
    name: str = ""
    species: str | None = None
    gender: str | None = None
    lifecycle_status: str | None = "active"
    health_status: str | None = None
    pedigree_max_generation: int | None = None
    pedigree: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping) -> "Animal":
        """Build an Animal from a storage row (snake_case columns)."""
        pedigree = {slot: str(row[slot]).strip() for slot in ALL_SLOTS if is_populated(row.get(slot))}
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            species=row.get("species"),
            gender=row.get("gender"),
            lifecycle_status=row.get("lifecycle_status") or "active",
            health_status=row.get("health_status"),
            pedigree_max_generation=row.get("pedigree_max_generation"),
            pedigree=pedigree,
        )

    def ancestor(self, slot: str) -> str | None:
        """Raw reference stored in a pedigree slot, or None if empty."""
        value = self.pedigree.get(slot)
        return value if is_populated(value) else None

    @property
    def mother_ref(self) -> str | None:
        return self.ancestor("mother_id")

    @property
    def father_ref(self) -> str | None:
        return self.ancestor("father_id")

    @property
    def normalized_gender(self) -> str:
        return (self.gender or "").strip().lower()

    @property
    def is_male(self) -> bool:
        return self.normalized_gender in MALE_GENDERS

    @property
    def is_female(self) -> bool:
        return self.normalized_gender in FEMALE_GENDERS

    @property
    def is_active(self) -> bool:
        return (self.lifecycle_status or "active").lower() == "active"

    @property
    def label(self) -> str:
        return self.name or self.id
