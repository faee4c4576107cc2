"""Farmika livestock tools.

This package provides pedigree consanguinity analysis and breeding
planning on top of the Farmika hosted backend.

Subpackages:
- farmika.core: Configuration and storage client
- farmika.data: Animals and breeding records
- farmika.pedigree: Ancestor resolution, relationship checks, recommendations
- farmika.analysis: Seasonal breeding analysis
"""

# Re-export common items for convenience
from farmika.analysis import aggregate_monthly, analyze_seasonal_trends
from farmika.core import settings
from farmika.pedigree import (
    classify_relationship,
    detect_generation_depth,
    generate_recommendations,
    invalidate_recommendations,
    resolve_ancestor,
    sync_pedigree_depths,
)

__all__ = [
    "settings",
    "resolve_ancestor",
    "detect_generation_depth",
    "sync_pedigree_depths",
    "classify_relationship",
    "generate_recommendations",
    "invalidate_recommendations",
    "analyze_seasonal_trends",
    "aggregate_monthly",
]

__version__ = "0.1.0"
