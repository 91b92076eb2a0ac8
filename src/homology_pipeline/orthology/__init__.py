"""Ortholog resolution module.

Provides the organism registry, SPARQL query construction, ortholog map
building, metadata enrichment, candidate ranking and the pipeline that
sequences them.
"""

from homology_pipeline.orthology.models import (
    GeneDetails,
    GeneRecord,
    OrthologMapResult,
)
from homology_pipeline.orthology.organisms import (
    ALL_TAXA,
    display_name,
    name_for,
    normalize_organism,
    taxid_for,
)
from homology_pipeline.orthology.errors import (
    ErrorKind,
    HomologyError,
    OrthologError,
    OrthologResolutionError,
)
from homology_pipeline.orthology.query import (
    build_ortholog_query,
    build_source_gene_query,
)
from homology_pipeline.orthology.mapper import OrthologMapBuilder
from homology_pipeline.orthology.enrichment import (
    EnrichmentOutcome,
    EnrichmentService,
    needs_enrichment,
    parse_gene_details,
)
from homology_pipeline.orthology.ranking import compare_candidates, rank_candidates
from homology_pipeline.orthology.pipeline import (
    HomologyPipeline,
    ResolutionReport,
    Stage,
    fetch_orthologs,
)

__all__ = [
    "GeneDetails",
    "GeneRecord",
    "OrthologMapResult",
    "ALL_TAXA",
    "display_name",
    "name_for",
    "normalize_organism",
    "taxid_for",
    "ErrorKind",
    "HomologyError",
    "OrthologError",
    "OrthologResolutionError",
    "build_ortholog_query",
    "build_source_gene_query",
    "OrthologMapBuilder",
    "EnrichmentOutcome",
    "EnrichmentService",
    "needs_enrichment",
    "parse_gene_details",
    "compare_candidates",
    "rank_candidates",
    "HomologyPipeline",
    "ResolutionReport",
    "Stage",
    "fetch_orthologs",
]
