"""Family relationship classification between two animals.

Checks run closest relationship first and the first match wins:

1. parent-child (either direction)
2. siblings (shared resolved mother, then shared resolved father)
3. grandparent-grandchild (either direction)

Every detected relationship blocks breeding. Unresolved ancestors never
match each other: two animals with unknown mothers are not siblings.

Classification never raises. An unexpected failure is logged and reported
as "none" so that a lookup problem cannot block every pairing on the farm.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from farmika.pedigree.models import Animal
from farmika.pedigree.resolver import AncestorIndex, as_index

logger = logging.getLogger(__name__)

# Grandparents are generation 2; shallower analyses skip that check
GRANDPARENT_GENERATION = 2


class RelationshipType(Enum):
    NONE = "none"
    PARENT_CHILD = "parent-child"
    SIBLINGS = "siblings"
    GRANDPARENT_GRANDCHILD = "grandparent-grandchild"


@dataclass(frozen=True)
class RelationshipVerdict:
    type: RelationshipType
    details: str
    should_block: bool

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "details": self.details,
            "shouldBlock": self.should_block,
        }


def _blocked(relationship: RelationshipType, details: str) -> RelationshipVerdict:
    return RelationshipVerdict(relationship, details, should_block=True)


def _unrelated(details: str) -> RelationshipVerdict:
    return RelationshipVerdict(RelationshipType.NONE, details, should_block=False)


def _classify(a: Animal, b: Animal, index: AncestorIndex, max_depth: int) -> RelationshipVerdict:
    a_mother = index.resolve(a.mother_ref)
    a_father = index.resolve(a.father_ref)
    b_mother = index.resolve(b.mother_ref)
    b_father = index.resolve(b.father_ref)
    logger.debug("%s parents: mother=%s, father=%s", a.label, a_mother, a_father)
    logger.debug("%s parents: mother=%s, father=%s", b.label, b_mother, b_father)

    if a.id in (b_mother, b_father):
        return _blocked(RelationshipType.PARENT_CHILD, f"{a.label} is the parent of {b.label}")
    if b.id in (a_mother, a_father):
        return _blocked(RelationshipType.PARENT_CHILD, f"{b.label} is the parent of {a.label}")

    if a_mother is not None and a_mother == b_mother:
        mother = index.get(a_mother)
        return _blocked(
            RelationshipType.SIBLINGS,
            f"Both animals share the same mother: {mother.label if mother else 'Unknown'}",
        )
    if a_father is not None and a_father == b_father:
        father = index.get(a_father)
        return _blocked(
            RelationshipType.SIBLINGS,
            f"Both animals share the same father: {father.label if father else 'Unknown'}",
        )

    if max_depth >= GRANDPARENT_GENERATION:
        if b.id in index.resolve_generation(a, GRANDPARENT_GENERATION):
            return _blocked(
                RelationshipType.GRANDPARENT_GRANDCHILD,
                f"{b.label} is a grandparent of {a.label}",
            )
        if a.id in index.resolve_generation(b, GRANDPARENT_GENERATION):
            return _blocked(
                RelationshipType.GRANDPARENT_GRANDCHILD,
                f"{a.label} is a grandparent of {b.label}",
            )

    return _unrelated("No direct family relationship detected")


def classify_relationship(
    animal_a: Animal,
    animal_b: Animal,
    population: Iterable[Animal] | AncestorIndex,
    max_depth: int = GRANDPARENT_GENERATION,
) -> RelationshipVerdict:
    """
    Classify the family relationship between two animals.

    Args:
        animal_a: First animal
        animal_b: Second animal
        population: Current animal snapshot (or an AncestorIndex built from it),
            used to resolve name-keyed ancestors
        max_depth: Pedigree generations to inspect; the grandparent check
            runs only when this is 2 or more

    Returns:
        RelationshipVerdict; should_block is True for every detected relationship
    """
    try:
        if animal_a.id == animal_b.id:
            return _unrelated("Same animal")
        index = as_index(population)
        return _classify(animal_a, animal_b, index, max_depth)
    except Exception:
        logger.exception(
            "Error checking relationship between %s and %s",
            getattr(animal_a, "id", animal_a),
            getattr(animal_b, "id", animal_b),
        )
        return _unrelated("Error checking relationships")
