"""Ancestor resolution: map a pedigree slot value (id or name) to an animal id.

Pedigree slots hold either a stable animal id or a free-text name pasted in
from a paper pedigree. Callers never branch on which one they have; they
resolve every reference through an AncestorIndex built from the current
population snapshot. A reference that does not resolve is simply an
ancestor that is not linked to a record yet, and is returned as None.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from farmika.pedigree.models import Animal
from farmika.pedigree.slots import GENERATION_SLOTS


def _name_key(name: str) -> str:
    return name.strip().lower()


@dataclass
class AncestorIndex:
    """Lookup tables for one population snapshot."""

    by_id: dict[str, Animal] = field(default_factory=dict)
    id_by_name: dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(cls, population: Iterable[Animal]) -> "AncestorIndex":
        """Build the id and lowercase-name maps.

        Names are not unique; when two animals share a name the later one
        in the population wins.
        """
        index = cls()
        for animal in population:
            index.by_id[animal.id] = animal
            if animal.name and animal.name.strip():
                index.id_by_name[_name_key(animal.name)] = animal.id
        return index

    def resolve(self, ref: str | None) -> str | None:
        """Resolve a reference to a canonical animal id, or None."""
        if ref is None:
            return None
        ref = str(ref)
        if not ref.strip():
            return None
        if ref in self.by_id:
            return ref
        return self.id_by_name.get(_name_key(ref))

    def get(self, animal_id: str | None) -> Animal | None:
        if animal_id is None:
            return None
        return self.by_id.get(animal_id)

    def resolve_generation(self, animal: Animal, generation: int) -> set[str]:
        """Resolved ids of every populated slot in one generation."""
        resolved = (self.resolve(animal.ancestor(slot)) for slot in GENERATION_SLOTS[generation])
        return {animal_id for animal_id in resolved if animal_id is not None}

    def __len__(self) -> int:
        return len(self.by_id)


def as_index(population: "Iterable[Animal] | AncestorIndex") -> AncestorIndex:
    """Accept either a prebuilt index or a population and return an index."""
    if isinstance(population, AncestorIndex):
        return population
    return AncestorIndex.build(population)


def resolve_ancestor(ref: str | None, population: "Iterable[Animal] | AncestorIndex") -> str | None:
    """Resolve an ancestor reference against a population.

    Args:
        ref: Slot value - an animal id, a free-text name, or blank
        population: Animals of the current snapshot, or an AncestorIndex built from them

    Returns:
        The canonical animal id, or None if the reference is empty or unlinked
    """
    return as_index(population).resolve(ref)
