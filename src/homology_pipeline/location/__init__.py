"""Genomic location resolution.

Resolves coordinates for batches of genes via MyGene.info, falling back to
NCBI Gene by NCBI Gene ID.
"""

from homology_pipeline.location.models import (
    LocationLookup,
    LocationRecord,
    LocationStatus,
)
from homology_pipeline.location.resolver import (
    LocationResolver,
    fuzzy_match,
    is_insufficient,
    match_location,
)

__all__ = [
    "LocationLookup",
    "LocationRecord",
    "LocationStatus",
    "LocationResolver",
    "fuzzy_match",
    "is_insufficient",
    "match_location",
]
