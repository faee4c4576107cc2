"""
Wright's kinship coefficient over recorded pedigrees.

For each ancestor shared by the two animals:

    F = sum(0.5 ** (n1 + n2 + 1))

where n1 and n2 are the generation distances from each animal to the
shared ancestor. Only the closest occurrence of each ancestor is counted.

Ancestors are keyed by resolved animal id when the slot links to a known
record. Unlinked names are compared after normalization (accents stripped,
upper-case, punctuation removed), so the same stallion typed into two paper
pedigrees still matches.

References:
-----------
[1] Wright, S. (1922). "Coefficients of inbreeding and relationship"
    The American Naturalist 56:330-338
"""

import re
import unicodedata
from dataclasses import dataclass, field

from farmika.pedigree.models import Animal
from farmika.pedigree.resolver import AncestorIndex
from farmika.pedigree.slots import GENERATION_SLOTS, MAX_GENERATION

# Risk thresholds (percent)
LOW_RISK_MAX_PERCENT = 3.0
MODERATE_RISK_MAX_PERCENT = 8.0

GENERATION_NAMES = {
    1: "parent",
    2: "grandparent",
    3: "great-grandparent",
    4: "great-great-grandparent",
    5: "great-great-great-grandparent",
}


@dataclass
class CommonAncestor:
    key: str
    name: str
    generations: int
    relationship_path: str


@dataclass
class KinshipResult:
    coefficient: float
    percentage: float
    risk_level: str
    common_ancestors: list[CommonAncestor] = field(default_factory=list)


def normalize_name(name: str | None) -> str:
    """Normalize a free-text ancestor name for matching."""
    if not name:
        return ""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = re.sub(r"[^A-Z0-9\s]", "", stripped.upper())
    return re.sub(r"\s+", " ", cleaned).strip()


def risk_level(percentage: float) -> str:
    """Map an inbreeding percentage to low / moderate / high."""
    if percentage < LOW_RISK_MAX_PERCENT:
        return "low"
    if percentage < MODERATE_RISK_MAX_PERCENT:
        return "moderate"
    return "high"


def _ancestor_key(ref: str, index: AncestorIndex) -> str | None:
    animal_id = index.resolve(ref)
    if animal_id is not None:
        return f"id:{animal_id}"
    name = normalize_name(ref)
    return f"name:{name}" if name else None


def build_ancestor_generations(
    animal: Animal,
    index: AncestorIndex,
    max_depth: int = MAX_GENERATION,
) -> dict[str, tuple[int, str]]:
    """
    Map each recorded ancestor to its closest generation.

    Args:
        animal: Animal whose pedigree to walk
        index: Resolver index for the population snapshot
        max_depth: Deepest generation to include (1-5)

    Returns:
        Dict of ancestor key -> (generation, display name)
    """
    ancestors: dict[str, tuple[int, str]] = {}
    for generation in range(1, min(max_depth, MAX_GENERATION) + 1):
        for slot in GENERATION_SLOTS[generation]:
            ref = animal.ancestor(slot)
            if ref is None:
                continue
            key = _ancestor_key(ref, index)
            if key is None or key in ancestors:
                continue
            linked = index.get(index.resolve(ref))
            ancestors[key] = (generation, linked.label if linked else ref)
    return ancestors


def kinship_coefficient(
    animal_a: Animal,
    animal_b: Animal,
    index: AncestorIndex,
    max_depth: int = MAX_GENERATION,
) -> KinshipResult:
    """
    Wright's coefficient for the offspring of two animals.

    Args:
        animal_a: First parent candidate
        animal_b: Second parent candidate
        index: Resolver index for the population snapshot
        max_depth: Generations of each pedigree to compare

    Returns:
        KinshipResult with coefficient, percentage, risk level and shared ancestors
    """
    ancestors_a = build_ancestor_generations(animal_a, index, max_depth)
    ancestors_b = build_ancestor_generations(animal_b, index, max_depth)

    total = 0.0
    common = []
    for key, (gen_a, name) in ancestors_a.items():
        if key not in ancestors_b:
            continue
        gen_b = ancestors_b[key][0]
        total += 0.5 ** (gen_a + gen_b + 1)
        common.append(
            CommonAncestor(
                key=key,
                name=name,
                generations=min(gen_a, gen_b),
                relationship_path=f"{GENERATION_NAMES[gen_a]} - {GENERATION_NAMES[gen_b]}",
            )
        )

    percentage = total * 100
    common.sort(key=lambda c: (c.generations, c.name))
    return KinshipResult(
        coefficient=total,
        percentage=percentage,
        risk_level=risk_level(percentage),
        common_ancestors=common,
    )
