"""
Seasonal breeding analysis.

Aggregates historical breeding outcomes by calendar month and turns them
into best/worst month guidance:

- Fewer than MIN_RELIABLE_BREEDINGS breedings in total: the data is ignored
  and the species profile's default advice is returned.
- Otherwise: months are ranked by pregnancy rate. A top month that the
  species profile lists as unfavorable, or a bottom month it lists as
  optimal, is dropped. Farm data only adds to the species prior; it never
  contradicts it.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TypedDict

from farmika.data.breeding import BreedingEvent, fetch_breeding_events

MONTH_NAMES = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

# Total breedings needed before monthly rates are trusted
MIN_RELIABLE_BREEDINGS = 10

# Months reported on each end of the ranking
MONTHS_REPORTED = 2

COLLECT_MORE_DATA = "Record more breedings to get an analysis based on your own herd"


class MonthlyAggregate(TypedDict):
    """Breedings and confirmed pregnancies in one calendar month."""

    month: str
    breedings: int
    pregnancies: int


class SeasonalAnalysis(TypedDict):
    bestMonths: list[str]
    worstMonths: list[str]
    recommendations: list[str]


@dataclass(frozen=True)
class SpeciesProfile:
    """Prior knowledge about a species' breeding season."""

    species: str
    optimal_months: tuple[str, ...]
    unfavorable_months: tuple[str, ...]
    advice: tuple[str, ...]


DONKEY_PROFILE = SpeciesProfile(
    species="donkey",
    optimal_months=("march", "april", "may"),
    unfavorable_months=("november", "december", "january"),
    advice=(
        "For donkeys: spring (March-May) is the best season for mating",
        "Gestation lasts 12-14 months: plan births for the following spring",
    ),
)


def aggregate_monthly(events: Iterable[BreedingEvent]) -> list[MonthlyAggregate]:
    """
    Count breedings and confirmed pregnancies per calendar month.

    Events without a date are skipped. All twelve months are returned in
    calendar order, including months with no breedings.
    """
    totals = {month: {"breedings": 0, "pregnancies": 0} for month in MONTH_NAMES}
    for event in events:
        if event.event_date is None:
            continue
        month = MONTH_NAMES[event.event_date.month - 1]
        totals[month]["breedings"] += 1
        if event.is_pregnancy:
            totals[month]["pregnancies"] += 1

    return [
        MonthlyAggregate(month=month, breedings=counts["breedings"], pregnancies=counts["pregnancies"])
        for month, counts in totals.items()
    ]


def _count(item: Mapping, *keys: str) -> int:
    for key in keys:
        if item.get(key) is not None:
            return int(item[key])
    return 0


def analyze_seasonal_trends(
    monthly_aggregates: Iterable[Mapping],
    profile: SpeciesProfile = DONKEY_PROFILE,
) -> SeasonalAnalysis:
    """
    Best and worst breeding months from monthly aggregates.

    Args:
        monthly_aggregates: Items with "month", "breedings" (or "breedingsAttempted")
            and "pregnancies" (or "pregnanciesConfirmed")
        profile: Species knowledge used as the default and as a filter

    Returns:
        SeasonalAnalysis with bestMonths, worstMonths and recommendations
    """
    data = [
        (
            str(item["month"]).strip().lower(),
            _count(item, "breedings", "breedingsAttempted"),
            _count(item, "pregnancies", "pregnanciesConfirmed"),
        )
        for item in monthly_aggregates
    ]
    total_breedings = sum(breedings for _, breedings, _ in data)

    if total_breedings < MIN_RELIABLE_BREEDINGS:
        return SeasonalAnalysis(
            bestMonths=list(profile.optimal_months),
            worstMonths=[],
            recommendations=[*profile.advice, COLLECT_MORE_DATA],
        )

    # Stable sort: months with equal rates keep their input order
    ranked = sorted(
        ((month, pregnancies / breedings) for month, breedings, pregnancies in data if breedings > 0),
        key=lambda m: m[1],
        reverse=True,
    )
    best_candidates = [month for month, _ in ranked[:MONTHS_REPORTED]]
    # With fewer than four ranked months the two ends overlap; a month is never both
    worst_candidates = [month for month, _ in ranked[-MONTHS_REPORTED:] if month not in best_candidates]

    best_months = [m for m in best_candidates if m not in profile.unfavorable_months]
    worst_months = [m for m in worst_candidates if m not in profile.optimal_months]

    recommendations = []
    if best_months:
        recommendations.append(f"From your records: best results in {', '.join(best_months)}")
    if worst_months:
        recommendations.append(f"From your records: lowest success in {', '.join(worst_months)}")

    return SeasonalAnalysis(
        bestMonths=best_months,
        worstMonths=worst_months,
        recommendations=[*recommendations, *profile.advice],
    )


async def analyze_breeding_history(
    fetch_events=None,
    profile: SpeciesProfile = DONKEY_PROFILE,
) -> SeasonalAnalysis:
    """
    Fetch breeding records, aggregate by month and analyze.

    Args:
        fetch_events: async callable returning BreedingEvents (default: from storage)
        profile: Species knowledge

    Returns:
        SeasonalAnalysis
    """
    events = await (fetch_events or fetch_breeding_events)()
    return analyze_seasonal_trends(aggregate_monthly(events), profile)
