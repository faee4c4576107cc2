"""Pedigree generation-depth detection and write-back.

The detected depth is the deepest generation with any recorded ancestor.
Generations are not required to be contiguous: imported pedigrees often
fill in great-great-grandparents without the generation in between, and
such an animal still reports the deeper generation.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import TypedDict

from farmika.core.client import AuthenticationError
from farmika.core.config import settings
from farmika.pedigree.models import Animal
from farmika.pedigree.slots import GENERATION_SLOTS, MAX_GENERATION, is_populated

logger = logging.getLogger(__name__)

# Parents are always the minimum tracked generation
MIN_DEPTH = 1


class DepthSyncResult(TypedDict):
    """Outcome of a depth write-back run."""

    updated: int
    unchanged: int
    errors: int


def detect_generation_depth(animal: Animal | Mapping) -> int:
    """
    Deepest pedigree generation (1-5) with at least one populated slot.

    Args:
        animal: An Animal, or a raw storage row with slot columns

    Returns:
        Generation depth; 1 if no slot is populated
    """
    if isinstance(animal, Animal):
        values = animal.pedigree
    else:
        values = animal

    depth = MIN_DEPTH
    for generation in range(1, MAX_GENERATION + 1):
        if any(is_populated(values.get(slot)) for slot in GENERATION_SLOTS[generation]):
            depth = generation
    return depth


async def sync_pedigree_depths(
    animals: list[Animal] | None = None,
    batch_size: int | None = None,
    writer=None,
) -> DepthSyncResult:
    """
    Detect every animal's pedigree depth and store it on the animal record.

    Animals whose stored depth already matches are skipped. Writes within a
    batch run concurrently; batches run one after another to bound the
    number of in-flight requests.

    Args:
        animals: Population to process (fetched from storage if None)
        batch_size: Writes per batch (default settings.depth_write_batch_size)
        writer: async callable(animal_id, depth); defaults to write_detected_depth

    Returns:
        DepthSyncResult with updated/unchanged/error counts

    Raises:
        AuthenticationError: Session rejected; remaining batches are not written
    """
    if animals is None:
        from farmika.data.animals import fetch_all_animals

        animals = await fetch_all_animals()
    if writer is None:
        from farmika.data.animals import write_detected_depth

        writer = write_detected_depth
    batch_size = batch_size or settings.depth_write_batch_size

    result: DepthSyncResult = {"updated": 0, "unchanged": 0, "errors": 0}

    pending: list[tuple[str, int]] = []
    for animal in animals:
        depth = detect_generation_depth(animal)
        if animal.pedigree_max_generation == depth:
            result["unchanged"] += 1
        else:
            pending.append((animal.id, depth))

    for start in range(0, len(pending), batch_size):
        batch = pending[start : start + batch_size]
        outcomes = await asyncio.gather(
            *(writer(animal_id, depth) for animal_id, depth in batch),
            return_exceptions=True,
        )
        for (animal_id, depth), outcome in zip(batch, outcomes, strict=True):
            if isinstance(outcome, (AuthenticationError, asyncio.CancelledError)):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.error("Failed to store depth %d for animal %s: %s", depth, animal_id, outcome)
                result["errors"] += 1
            else:
                result["updated"] += 1
        logger.info("Depth write-back: %d/%d processed", min(start + batch_size, len(pending)), len(pending))

    return result
