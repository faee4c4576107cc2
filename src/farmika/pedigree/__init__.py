"""Pedigree consanguinity analysis.

This module provides:
- The 62-slot pedigree layout (slots.py) and Animal record (models.py)
- Ancestor resolution by id or name (resolver.py)
- Generation-depth detection and write-back (depth.py)
- Family relationship classification (relationships.py)
- Wright's kinship coefficient (kinship.py)
- Breeding recommendations with caching (recommendations.py)
- Pasted-text pedigree import (text_import.py)
- CLI (cli.py, installed as farmika-pedigree)
"""

from farmika.pedigree.depth import DepthSyncResult, detect_generation_depth, sync_pedigree_depths
from farmika.pedigree.kinship import KinshipResult, kinship_coefficient
from farmika.pedigree.models import Animal
from farmika.pedigree.recommendations import (
    BreedingRecommendation,
    RecommendationCache,
    compatibility_score,
    generate_recommendations,
    invalidate_recommendations,
)
from farmika.pedigree.relationships import (
    RelationshipType,
    RelationshipVerdict,
    classify_relationship,
)
from farmika.pedigree.resolver import AncestorIndex, resolve_ancestor
from farmika.pedigree.slots import ALL_SLOTS, GENERATION_SLOTS, MAX_GENERATION
from farmika.pedigree.text_import import parse_pedigree_text

__all__ = [
    # models & layout
    "Animal",
    "ALL_SLOTS",
    "GENERATION_SLOTS",
    "MAX_GENERATION",
    # resolver
    "AncestorIndex",
    "resolve_ancestor",
    # depth
    "detect_generation_depth",
    "sync_pedigree_depths",
    "DepthSyncResult",
    # relationships
    "classify_relationship",
    "RelationshipType",
    "RelationshipVerdict",
    # kinship
    "kinship_coefficient",
    "KinshipResult",
    # recommendations
    "generate_recommendations",
    "invalidate_recommendations",
    "compatibility_score",
    "BreedingRecommendation",
    "RecommendationCache",
    # text import
    "parse_pedigree_text",
]
