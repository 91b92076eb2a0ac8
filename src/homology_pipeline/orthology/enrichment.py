"""Protein-level metadata enrichment from OrthoDB gene details.

Fills Ensembl / NCBI Gene cross-references, amino acid count, exon count
and InterPro domain lists on gene records. The metadata breaks ties among
ambiguous ortholog candidates and supplies the NCBI Gene IDs used by the
location fallback provider.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from homology_pipeline.api_clients.orthodb import OrthoDBClient
from homology_pipeline.api_clients.rate_limit import RateLimiter
from homology_pipeline.orthology.errors import ErrorKind, OrthologError
from homology_pipeline.orthology.models import GeneDetails, GeneRecord

logger = structlog.get_logger()


def _first_id(entries: Any) -> Optional[str]:
    """Return the first ``id`` of a cross-reference list, or a direct scalar."""
    if isinstance(entries, list):
        for entry in entries:
            if isinstance(entry, dict) and entry.get("id") not in (None, ""):
                return str(entry["id"])
            if isinstance(entry, (str, int)) and entry != "":
                return str(entry)
        return None
    if isinstance(entries, dict):
        value = entries.get("id")
        return str(value) if value not in (None, "") else None
    if isinstance(entries, (str, int)) and entries != "":
        return str(entries)
    return None


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_gene_details(payload: dict[str, Any]) -> GeneDetails:
    """Parse an OrthoDB gene detail record.

    Args:
        payload: The ``data`` object of an ``ogdetails`` response

    Returns:
        GeneDetails with every attribute the record carries

    Notes:
        - The NCBI Gene ID comes from ``entrez`` when present; otherwise it
          is scanned out of ``xrefs`` entries typed "NCBIgene" (common in
          Drosophila melanogaster records)
        - Domains are InterPro IDs in record order
    """
    if not payload:
        return GeneDetails()

    ncbi_gene_id = _first_id(payload.get("entrez"))
    if ncbi_gene_id is None:
        for xref in payload.get("xrefs") or []:
            if isinstance(xref, dict) and xref.get("type") == "NCBIgene" and xref.get("name"):
                ncbi_gene_id = str(xref["name"])
                break

    domains = None
    interpro = payload.get("interpro")
    if isinstance(interpro, list):
        domains = tuple(
            str(entry["id"]) for entry in interpro
            if isinstance(entry, dict) and entry.get("id")
        )

    return GeneDetails(
        ensembl_id=_first_id(payload.get("ensembl")),
        ncbi_gene_id=ncbi_gene_id,
        amino_acid_count=_as_int(payload.get("aas")),
        exon_count=_as_int(payload.get("exons")),
        domains=domains,
    )


def needs_enrichment(source_name: str, candidates: list[GeneRecord]) -> bool:
    """Whether ranking needs metadata for this source gene.

    Ranking is trivial when every candidate already shares the source's name
    (case-insensitive), so no detail lookups are needed.
    """
    source = source_name.lower()
    return not all(c.name.lower() == source for c in candidates)


@dataclass
class EnrichmentOutcome:
    """Result of enriching one source gene and its candidates.

    Attributes:
        source_name: Queried source gene name
        source: Enriched anchor record (None on failure)
        candidates: Enriched candidates in input order
        error: Failure, if any
        skipped: True when enrichment was not needed
    """
    source_name: str
    source: Optional[GeneRecord] = None
    candidates: list[GeneRecord] = field(default_factory=list)
    error: Optional[OrthologError] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class EnrichmentService:
    """Fetches OrthoDB gene details and merges them into gene records.

    Detail requests for distinct genes are issued concurrently and pass
    through the rate limiter, which bounds how many are in flight and how
    quickly they are dispatched.
    """

    def __init__(self, client: OrthoDBClient, rate_limiter: RateLimiter):
        self.client = client
        self.rate_limiter = rate_limiter

    async def enrich(self, gene: GeneRecord) -> GeneRecord:
        """Return gene with absent metadata filled from OrthoDB.

        Genes without an OrthoDB ID, and IDs OrthoDB has no record for, are
        returned unchanged.
        """
        if not gene.orthodb_id:
            logger.debug("enrich_skip_no_id", gene=gene.name)
            return gene

        async with self.rate_limiter:
            payload = await self.client.gene_details(gene.orthodb_id)
        if not payload:
            logger.warning("gene_details_missing", gene=gene.name, orthodb_id=gene.orthodb_id)
            return gene

        return gene.merge(parse_gene_details(payload))

    async def enrich_batch(self, genes: list[GeneRecord]) -> list[GeneRecord]:
        """Enrich genes concurrently, preserving input order."""
        if not genes:
            return []
        return list(await asyncio.gather(*(self.enrich(g) for g in genes)))

    async def enrich_group(
        self,
        source_name: str,
        source_registry: dict[str, GeneRecord],
        candidates: list[GeneRecord],
        source_org: Optional[str] = None,
        target_org: Optional[str] = None,
        force: bool = False,
    ) -> EnrichmentOutcome:
        """Enrich a source gene's anchor record and its target candidates.

        Args:
            source_name: Queried source gene name
            source_registry: Anchor records from the map build
            candidates: Target candidates of this source gene
            source_org: Source organism name (for error messages)
            target_org: Target organism name (for error messages)
            force: Enrich even when every candidate name-matches the source

        Returns:
            EnrichmentOutcome; a missing anchor yields a "gene not found in
            source" error, an empty candidate list an "orthologs not found in
            target" error
        """
        source = source_registry.get(source_name)
        if source is None:
            return EnrichmentOutcome(
                source_name=source_name,
                error=OrthologError(
                    ErrorKind.GENE_NOT_FOUND_IN_SOURCE, source_name, source_org, target_org
                ),
            )
        if not candidates:
            return EnrichmentOutcome(
                source_name=source_name,
                source=source,
                error=OrthologError(
                    ErrorKind.ORTHOLOGS_NOT_FOUND_IN_TARGET, source_name, source_org, target_org
                ),
            )

        if not force and not needs_enrichment(source_name, candidates):
            logger.debug("enrich_skip_name_match", gene=source_name, candidates=len(candidates))
            return EnrichmentOutcome(
                source_name=source_name,
                source=source,
                candidates=list(candidates),
                skipped=True,
            )

        enriched = await self.enrich_batch([source, *candidates])

        logger.info(
            "enrich_group_complete",
            gene=source_name,
            candidates=len(candidates),
            enriched=sum(1 for g in enriched if g.is_enriched),
        )

        return EnrichmentOutcome(
            source_name=source_name,
            source=enriched[0],
            candidates=enriched[1:],
        )
