"""Data modules - animals and breeding records from the hosted backend."""

from farmika.data import animals, breeding
from farmika.data.animals import (
    fetch_all_animal_rows,
    fetch_all_animals,
    write_detected_depth,
    write_pedigree_slots,
)
from farmika.data.breeding import BreedingEvent, fetch_breeding_events

__all__ = [
    "animals",
    "breeding",
    "fetch_all_animals",
    "fetch_all_animal_rows",
    "write_detected_depth",
    "write_pedigree_slots",
    "BreedingEvent",
    "fetch_breeding_events",
]
