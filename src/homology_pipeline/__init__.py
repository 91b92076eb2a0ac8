"""Ortholog resolution with genomic coordinates.

Queries the OrthoDB SPARQL graph for orthologs of a batch of genes, ranks
ambiguous candidates by protein-level similarity and resolves the genomic
location of every gene involved.
"""

__version__ = "0.1.0"

from homology_pipeline.orthology.pipeline import (  # noqa: E402
    HomologyPipeline,
    fetch_orthologs,
)
from homology_pipeline.orthology.errors import (  # noqa: E402
    ErrorKind,
    HomologyError,
    OrthologError,
    OrthologResolutionError,
)

__all__ = [
    "__version__",
    "HomologyPipeline",
    "fetch_orthologs",
    "ErrorKind",
    "HomologyError",
    "OrthologError",
    "OrthologResolutionError",
]
