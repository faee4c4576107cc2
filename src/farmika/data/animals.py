"""Animal data helpers for the hosted backend.

Provides functions to:
- Fetch the full animal population (with all 62 pedigree slots)
- Keep lifecycle status so callers can tell active animals from deceased ancestors
- Write the detected pedigree depth back to an animal record
- Store pedigree slots imported from pasted text
"""

from farmika.core.client import select_rows, update_rows
from farmika.pedigree.depth import detect_generation_depth
from farmika.pedigree.models import Animal

ANIMALS_TABLE = "animals"


async def fetch_all_animal_rows() -> list[dict]:
    """Fetch raw animal rows, every column."""
    return await select_rows(ANIMALS_TABLE, {"order": "name.asc"})


async def fetch_all_animals() -> list[Animal]:
    """
    Fetch every animal on the farm.

    Returns:
        List of Animal records

    Raises:
        RetryableError: Storage unavailable after retries
        AuthenticationError: Session rejected
    """
    rows = await fetch_all_animal_rows()
    return [Animal.from_row(row) for row in rows]


async def write_detected_depth(animal_id: str, depth: int) -> None:
    """
    Store the detected pedigree depth on an animal record.

    Writing the same depth twice leaves the record unchanged.

    Args:
        animal_id: Animal to update
        depth: Generation depth (1-5)
    """
    await update_rows(ANIMALS_TABLE, {"id": f"eq.{animal_id}"}, {"pedigree_max_generation": depth})


async def write_pedigree_slots(animal_id: str, slots: dict[str, str]) -> None:
    """
    Store imported pedigree slot values on an animal record.

    Only the given slots are written; the stored depth is recomputed from them.

    Args:
        animal_id: Animal to update
        slots: Slot name -> ancestor reference (see farmika.pedigree.text_import)
    """
    values: dict = dict(slots)
    values["pedigree_max_generation"] = detect_generation_depth(slots)
    await update_rows(ANIMALS_TABLE, {"id": f"eq.{animal_id}"}, values)
