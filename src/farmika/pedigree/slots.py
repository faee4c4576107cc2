"""Pedigree slot layout: 62 ancestor columns across 5 generations.

Column names match the storage schema so rows can be read without mapping.
Within each generation the paternal side comes first.
"""

MAX_GENERATION = 5

GEN1_SLOTS = ("father_id", "mother_id")

GEN2_SLOTS = (
    "paternal_grandfather_id",
    "paternal_grandmother_id",
    "maternal_grandfather_id",
    "maternal_grandmother_id",
)

GEN3_SLOTS = tuple(
    f"{side}_great_{ancestor}_{line}_id"
    for side in ("paternal", "maternal")
    for line in ("paternal", "maternal")
    for ancestor in ("grandfather", "grandmother")
)

_GEN4_CODES = ("ggggf", "ggggm", "gggmf", "gggmm", "ggfgf", "ggfgm", "ggmgf", "ggmgm")

GEN4_SLOTS = tuple(f"gen4_paternal_{code}_p" for code in _GEN4_CODES) + tuple(
    f"gen4_maternal_{code}_m" for code in _GEN4_CODES
)

GEN5_SLOTS = tuple(f"gen5_paternal_{i}" for i in range(1, 17)) + tuple(
    f"gen5_maternal_{i}" for i in range(1, 17)
)

GENERATION_SLOTS: dict[int, tuple[str, ...]] = {
    1: GEN1_SLOTS,
    2: GEN2_SLOTS,
    3: GEN3_SLOTS,
    4: GEN4_SLOTS,
    5: GEN5_SLOTS,
}

ALL_SLOTS: tuple[str, ...] = tuple(slot for gen in sorted(GENERATION_SLOTS) for slot in GENERATION_SLOTS[gen])


def is_populated(value: str | None) -> bool:
    """True if a slot value holds anything other than blanks."""
    return bool(value and str(value).strip())
