"""Genomic location resolution with provider fallback.

The primary provider (MyGene.info) answers a whole batch in one request but
misses some genes. The fallback provider (NCBI Gene) is complete for genes
with an NCBI Gene ID. When the primary response falls short and some inputs
lack NCBI Gene IDs, the resolver asks its caller to enrich the batch first.
"""

from typing import Any

import structlog

from homology_pipeline.api_clients.mygene_client import MyGeneClient
from homology_pipeline.api_clients.ncbi import NCBIGeneClient
from homology_pipeline.location.models import LocationLookup, LocationRecord, LocationStatus
from homology_pipeline.location.providers import (
    build_mygene_query,
    hit_is_usable,
    parse_mygene_hit,
    parse_ncbi_summary,
)
from homology_pipeline.orthology.models import GeneRecord

logger = structlog.get_logger()


def is_insufficient(hits: list[dict[str, Any]], requested: int) -> bool:
    """Whether a primary provider response cannot be used as-is.

    Insufficient when there are fewer hits than requested genes, or any hit
    lacks a genomic position or a name.
    """
    if len(hits) < requested:
        return True
    return not all(hit_is_usable(hit) for hit in hits)


class LocationResolver:
    """Resolves coordinates for batches of genes in one organism."""

    def __init__(self, primary: MyGeneClient, fallback: NCBIGeneClient):
        self.primary = primary
        self.fallback = fallback

    async def resolve(self, genes: list[GeneRecord], taxid: str) -> LocationLookup:
        """Resolve a batch via the primary provider, falling back when short.

        Args:
            genes: Genes to locate; NCBI / Ensembl IDs are used when present
            taxid: NCBI Taxonomy ID of the organism (or "all")

        Returns:
            LocationLookup with status RESOLVED, or NEEDS_ENRICHMENT when the
            primary response is insufficient and not every gene carries an
            NCBI Gene ID
        """
        if not genes:
            return LocationLookup(status=LocationStatus.RESOLVED, provider="mygene")

        query = build_mygene_query(genes)
        hits = await self.primary.query(query, taxid)

        if not is_insufficient(hits, len(genes)):
            records = [r for r in (parse_mygene_hit(h) for h in hits) if r is not None]
            # Every hit was usable, but all positions may be on alt loci
            if len(records) >= len(genes):
                logger.info(
                    "locations_resolved",
                    provider="mygene",
                    taxid=taxid,
                    requested=len(genes),
                    resolved=len(records),
                )
                return LocationLookup(
                    status=LocationStatus.RESOLVED,
                    records=records,
                    provider="mygene",
                )

        logger.info(
            "primary_locations_insufficient",
            taxid=taxid,
            requested=len(genes),
            hits=len(hits),
        )

        if all(g.ncbi_gene_id for g in genes):
            return await self.resolve_by_ids(genes)

        missing = [g.name for g in genes if not g.ncbi_gene_id]
        return LocationLookup(
            status=LocationStatus.NEEDS_ENRICHMENT,
            detail=f"no NCBI Gene ID for {', '.join(missing)}",
        )

    async def resolve_by_ids(self, genes: list[GeneRecord]) -> LocationLookup:
        """Resolve a batch through the fallback provider by NCBI Gene ID.

        This is the one-shot retry after forced enrichment: genes still
        lacking an NCBI Gene ID make the batch UNRESOLVED.
        """
        missing = [g.name for g in genes if not g.ncbi_gene_id]
        if missing:
            return LocationLookup(
                status=LocationStatus.UNRESOLVED,
                detail=f"no NCBI Gene ID for {', '.join(missing)}",
            )

        ids = list(dict.fromkeys(g.ncbi_gene_id for g in genes))
        summaries = await self.fallback.gene_summaries(ids)
        records = [r for r in (parse_ncbi_summary(s) for s in summaries) if r is not None]

        logger.info(
            "locations_resolved",
            provider="ncbi",
            requested=len(genes),
            resolved=len(records),
        )

        if not records:
            return LocationLookup(
                status=LocationStatus.UNRESOLVED,
                provider="ncbi",
                detail="NCBI Gene returned no genomic positions",
            )

        return LocationLookup(
            status=LocationStatus.RESOLVED,
            records=records,
            provider="ncbi",
        )


def fuzzy_match(a: str, b: str) -> bool:
    """Whether two gene names denote the same symbol across databases.

    Names match when equal, or equal once hyphens are removed
    (e.g. "NF-YC6" and "NFYC6").
    """
    return a == b or a.replace("-", "") == b.replace("-", "")


def match_location(
    name: str,
    records: list[LocationRecord],
    fallback_index: int,
) -> LocationRecord | None:
    """Find the location of a gene by name, else by position in the batch.

    The positional guess uses the source gene's index in the request and is
    a last resort, not a guarantee.
    """
    for record in records:
        if fuzzy_match(record.name, name):
            return record
    if 0 <= fallback_index < len(records):
        return records[fallback_index]
    return None
