"""Data models for ortholog resolution."""

from dataclasses import dataclass, field, fields, replace
from typing import Optional


@dataclass(frozen=True)
class GeneDetails:
    """Protein-level attributes parsed from an OrthoDB gene detail record.

    Attributes:
        ensembl_id: Ensembl gene ID (None if not cross-referenced)
        ncbi_gene_id: NCBI Gene ID (None if not cross-referenced)
        amino_acid_count: Protein length in amino acids
        exon_count: Number of exons
        domains: InterPro domain IDs in record order (None if not reported)
    """
    ensembl_id: Optional[str] = None
    ncbi_gene_id: Optional[str] = None
    amino_acid_count: Optional[int] = None
    exon_count: Optional[int] = None
    domains: Optional[tuple[str, ...]] = None


@dataclass(frozen=True)
class GeneRecord:
    """A gene stub from the ortholog graph, optionally enriched.

    Used for both source (anchor) genes and target candidates.

    Attributes:
        name: Gene symbol as reported by OrthoDB (alias-resolved)
        orthodb_id: OrthoDB gene ID, e.g. "10090_0:0011d9"
        ensembl_id: Ensembl gene ID
        ncbi_gene_id: NCBI Gene ID
        amino_acid_count: Protein length in amino acids
        exon_count: Number of exons
        domains: InterPro domain IDs
    """
    name: str
    orthodb_id: Optional[str] = None
    ensembl_id: Optional[str] = None
    ncbi_gene_id: Optional[str] = None
    amino_acid_count: Optional[int] = None
    exon_count: Optional[int] = None
    domains: Optional[tuple[str, ...]] = None

    @property
    def domain_count(self) -> int:
        return len(self.domains) if self.domains else 0

    @property
    def is_enriched(self) -> bool:
        return any(
            getattr(self, f.name) is not None
            for f in fields(GeneDetails)
        )

    def details(self) -> GeneDetails:
        return GeneDetails(**{f.name: getattr(self, f.name) for f in fields(GeneDetails)})

    def merge(self, details: GeneDetails) -> "GeneRecord":
        """Return a copy with absent fields filled from details.

        Fields already set are never overwritten, and None never replaces
        a value, so merging is idempotent.
        """
        updates = {}
        for f in fields(GeneDetails):
            current = getattr(self, f.name)
            incoming = getattr(details, f.name)
            if current is None and incoming is not None:
                updates[f.name] = incoming
        if not updates:
            return self
        return replace(self, **updates)


@dataclass
class OrthologMapResult:
    """Output of one ortholog map build pass.

    Attributes:
        ortholog_map: Source gene (query spelling) -> unique target candidates
        source_registry: Source gene (query spelling) -> anchor record named
            with the OrthoDB alias that matched
        rows_seen: Number of raw bindings processed
        rows_dropped: Bindings discarded because no source alias was queried
    """
    ortholog_map: dict[str, list[GeneRecord]] = field(default_factory=dict)
    source_registry: dict[str, GeneRecord] = field(default_factory=dict)
    rows_seen: int = 0
    rows_dropped: int = 0
