"""Breeding recommendations for the active herd.

Enumerates every male x female pair of the same species among active
animals, drops pairs the relationship classifier blocks, and ranks the rest
by a compatibility score. The pedigree depth inspected per pair depends on
the client: constrained (mobile) clients default to 2 generations,
unconstrained ones to 4. A shallower depth can miss distant relatives but
never reports a relationship that is not there.

Results are cached per (depth, environment class) and stay valid until
invalidate_recommendations() is called after animals or breeding records
change. Concurrent requests for the same key share one computation.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable, Iterable
from dataclasses import dataclass, field

from farmika.core.config import EnvironmentClass, default_max_depth, settings
from farmika.pedigree.kinship import KinshipResult, kinship_coefficient
from farmika.pedigree.models import Animal
from farmika.pedigree.relationships import classify_relationship
from farmika.pedigree.resolver import AncestorIndex
from farmika.pedigree.slots import MAX_GENERATION

logger = logging.getLogger(__name__)

Scorer = Callable[[Animal, Animal, KinshipResult], float]
AnimalFetcher = Callable[[], Awaitable[list[Animal]]]

# =============================================================================
# Compatibility Scoring
# =============================================================================

BASE_SCORE = 50

RISK_ADJUSTMENT = {
    "low": 20,
    "moderate": -10,
    "high": -40,
}

GOOD_HEALTH = frozenset({"healthy", "good"})
POOR_HEALTH = frozenset({"sick", "treatment"})


def _health(animal: Animal) -> str:
    return (animal.health_status or "unknown").strip().lower()


def compatibility_score(male: Animal, female: Animal, kinship: KinshipResult) -> int:
    """
    Default pair score (0-100) from health, inbreeding risk and species.

    Args:
        male: Sire candidate
        female: Dam candidate
        kinship: Kinship analysis for the pair

    Returns:
        Integer score, higher is better
    """
    score = BASE_SCORE
    male_health = _health(male)
    female_health = _health(female)

    if male_health == "healthy" and female_health == "healthy":
        score += 30
    elif male_health in GOOD_HEALTH and female_health in GOOD_HEALTH:
        score += 20
    elif male_health not in POOR_HEALTH and female_health not in POOR_HEALTH:
        score += 10

    score += RISK_ADJUSTMENT.get(kinship.risk_level, 0)

    if male.species == female.species:
        score += 10

    if "sick" in (male_health, female_health):
        score -= 20
    if "treatment" in (male_health, female_health):
        score -= 15

    return round(min(100, max(0, score)))


def _notes(male: Animal, female: Animal, kinship: KinshipResult, score: float) -> list[str]:
    notes = []
    if kinship.risk_level == "low":
        notes.append("Excellent genetic compatibility")
    elif kinship.risk_level == "moderate":
        notes.append("Moderate compatibility - monitor offspring")
    else:
        notes.append("High inbreeding risk - not recommended")

    if score > 80:
        notes.append("High compatibility expected")
    elif score > 60:
        notes.append("Good compatibility")
    else:
        notes.append("Limited compatibility")

    if _health(male) == "healthy" and _health(female) == "healthy":
        notes.append("Both animals in excellent health")

    if kinship.common_ancestors:
        shared = ", ".join(a.name for a in kinship.common_ancestors[:3])
        notes.append(f"Shared ancestors: {shared}")

    return notes


# =============================================================================
# Recommendation Generation
# =============================================================================


@dataclass
class BreedingRecommendation:
    male_id: str
    male_name: str
    female_id: str
    female_name: str
    species: str | None
    compatibility_score: float
    inbreeding_risk: str
    kinship_percentage: float
    notes: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return f"{self.male_id}-{self.female_id}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "maleId": self.male_id,
            "maleName": self.male_name,
            "femaleId": self.female_id,
            "femaleName": self.female_name,
            "species": self.species,
            "compatibilityScore": self.compatibility_score,
            "inbreedingRisk": self.inbreeding_risk,
            "kinshipPercentage": round(self.kinship_percentage, 2),
            "notes": list(self.notes),
        }


def candidate_pairs(animals: Iterable[Animal]) -> list[tuple[Animal, Animal]]:
    """Active male x female pairs of the same species, in population order."""
    active = [a for a in animals if a.is_active]
    males = [a for a in active if a.is_male]
    females = [a for a in active if a.is_female]
    return [
        (male, female)
        for male in males
        for female in females
        if male.id != female.id and male.species and male.species == female.species
    ]


def build_recommendations(
    population: list[Animal],
    max_depth: int,
    scorer: Scorer | None = None,
    limit: int | None = None,
) -> list[BreedingRecommendation]:
    """
    Rank unblocked breeding pairs from a population snapshot.

    Args:
        population: Every animal on the farm (inactive animals are used
            to resolve ancestors but never proposed)
        max_depth: Pedigree generations to inspect per pair
        scorer: Pair scoring function (default compatibility_score)
        limit: Maximum recommendations to return (None or 0 = all)

    Returns:
        Recommendations sorted by score, best first
    """
    scorer = scorer or compatibility_score
    index = AncestorIndex.build(population)

    recommendations = []
    blocked = 0
    for male, female in candidate_pairs(population):
        verdict = classify_relationship(male, female, index, max_depth=max_depth)
        if verdict.should_block:
            blocked += 1
            logger.debug("Blocked %s x %s: %s", male.label, female.label, verdict.details)
            continue

        kinship = kinship_coefficient(male, female, index, max_depth=max_depth)
        score = scorer(male, female, kinship)
        recommendations.append(
            BreedingRecommendation(
                male_id=male.id,
                male_name=male.label,
                female_id=female.id,
                female_name=female.label,
                species=male.species,
                compatibility_score=score,
                inbreeding_risk=kinship.risk_level,
                kinship_percentage=kinship.percentage,
                notes=_notes(male, female, kinship, score),
            )
        )

    recommendations.sort(key=lambda r: (-r.compatibility_score, r.male_name, r.female_name))
    logger.info(
        "Generated %d breeding recommendations (%d pairs blocked, depth %d)",
        len(recommendations),
        blocked,
        max_depth,
    )
    if limit:
        return recommendations[:limit]
    return recommendations


# =============================================================================
# Cache
# =============================================================================


class RecommendationCache:
    """Per-key result cache that coalesces concurrent computations.

    Entries never expire on their own; call invalidate() when the data they
    were computed from changes. A computation that was already running when
    invalidate() was called finishes for its callers but is not stored.
    """

    def __init__(self):
        self._results: dict[Hashable, list] = {}
        self._inflight: dict[Hashable, asyncio.Task] = {}
        self._generation = 0

    def __contains__(self, key: Hashable) -> bool:
        return key in self._results

    def __len__(self) -> int:
        return len(self._results)

    async def get_or_compute(self, key: Hashable, compute: Callable[[], Awaitable[list]]) -> list:
        if key in self._results:
            logger.info("Returning cached breeding recommendations for %s", key)
            return list(self._results[key])

        task = self._inflight.get(key)
        if task is None:
            generation = self._generation
            task = asyncio.ensure_future(compute())
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._finish(key, t, generation))

        # Shielded so one caller giving up does not cancel the shared computation
        return list(await asyncio.shield(task))

    def _finish(self, key: Hashable, task: asyncio.Task, generation: int) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if task.cancelled() or task.exception() is not None:
            return
        if generation == self._generation:
            self._results[key] = task.result()

    def invalidate(self) -> None:
        self._results.clear()
        self._inflight.clear()
        self._generation += 1


_cache = RecommendationCache()


def invalidate_recommendations() -> None:
    """Drop all cached recommendations (call after animal or breeding changes)."""
    _cache.invalidate()
    logger.info("Breeding recommendations cache cleared")


async def generate_recommendations(
    max_depth: int | None = None,
    environment_class: EnvironmentClass | None = None,
    scorer: Scorer | None = None,
    fetch_animals: AnimalFetcher | None = None,
    cache: RecommendationCache | None = None,
    scorer_key: Hashable | None = None,
) -> list[BreedingRecommendation]:
    """
    Breeding recommendations for the current herd.

    Args:
        max_depth: Pedigree generations to inspect, 1-5 (default depends on environment class)
        environment_class: "constrained" or "unconstrained" (default from settings)
        scorer: Custom pair scoring function
        fetch_animals: async callable returning the population (default: all animals from storage)
        cache: Cache to use (default: module-level cache)
        scorer_key: Stable name for a custom scorer. Results for a custom
            scorer are cached under this key; without it they are computed
            on every call.

    Returns:
        Ranked list of BreedingRecommendation

    Raises:
        ValueError: max_depth outside 1-5
        RetryableError: Storage unavailable after retries
        AuthenticationError: Session rejected; sign in again
    """
    environment_class = environment_class or settings.environment_class
    depth = default_max_depth(environment_class) if max_depth is None else max_depth
    if not 1 <= depth <= MAX_GENERATION:
        raise ValueError(f"max_depth must be between 1 and {MAX_GENERATION}, got {depth}")
    cache = cache if cache is not None else _cache

    if fetch_animals is None:
        from farmika.data.animals import fetch_all_animals

        fetch_animals = fetch_all_animals

    async def compute() -> list[BreedingRecommendation]:
        logger.info("Generating breeding recommendations with depth %d (%s)", depth, environment_class)
        population = await fetch_animals()
        return build_recommendations(population, depth, scorer=scorer, limit=settings.max_recommendations)

    key: tuple = (depth, environment_class)
    if scorer is not None:
        if scorer_key is None:
            return await compute()
        key = (*key, scorer_key)

    return await cache.get_or_compute(key, compute)
