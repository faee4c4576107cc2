"""Analysis modules - seasonal breeding trends."""

from farmika.analysis.seasonal import (
    DONKEY_PROFILE,
    MIN_RELIABLE_BREEDINGS,
    MONTH_NAMES,
    MonthlyAggregate,
    SeasonalAnalysis,
    SpeciesProfile,
    aggregate_monthly,
    analyze_breeding_history,
    analyze_seasonal_trends,
)

__all__ = [
    "aggregate_monthly",
    "analyze_seasonal_trends",
    "analyze_breeding_history",
    "MonthlyAggregate",
    "SeasonalAnalysis",
    "SpeciesProfile",
    "DONKEY_PROFILE",
    "MIN_RELIABLE_BREEDINGS",
    "MONTH_NAMES",
]
