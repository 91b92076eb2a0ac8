"""Data models for genomic location resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class LocationRecord:
    """Genomic coordinates of one gene.

    Coordinates are provider-native (1-based inclusive for MyGene.info,
    as reported for NCBI); no conversion is applied across providers.

    Attributes:
        name: Gene symbol as reported by the provider
        chromosome: Chromosome name, e.g. "4" or "X"
        start: Start coordinate
        end: End coordinate
        gene_id: Provider gene ID (NCBI Gene ID when known)
        provider: Provider that resolved the record ("mygene" or "ncbi")
    """
    name: str
    chromosome: str
    start: int
    end: int
    gene_id: Optional[str] = None
    provider: str = "mygene"

    @property
    def location(self) -> str:
        return f"{self.chromosome}:{self.start}-{self.end}"

    def to_dict(self) -> dict[str, str]:
        return {"gene": self.name, "location": self.location}


class LocationStatus(str, Enum):
    RESOLVED = "resolved"
    NEEDS_ENRICHMENT = "needs_enrichment"
    UNRESOLVED = "unresolved"


@dataclass
class LocationLookup:
    """Result of resolving one batch of genes.

    Attributes:
        status: RESOLVED when records are usable, NEEDS_ENRICHMENT when the
            primary provider fell short and inputs lack NCBI Gene IDs,
            UNRESOLVED when no provider could help
        records: Resolved locations (provider order)
        provider: Provider that produced the records
        detail: Human-readable reason for a non-RESOLVED status
    """
    status: LocationStatus
    records: list[LocationRecord] = field(default_factory=list)
    provider: Optional[str] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is LocationStatus.RESOLVED
