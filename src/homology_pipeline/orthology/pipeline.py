"""Ortholog resolution pipeline.

Sequences the stages of one request:

    query-sent -> map-built -> enriched -> sources-located / targets-located
    -> ranked -> assembled

Gene-level failures (not found, no ortholog in target) are recorded per gene
and do not stop the other genes. A failed location batch fails every gene
that depends on it, since source and target genes are each located in one
shared request.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

import httpx
import structlog

from homology_pipeline.api_clients.base import AsyncAPIClient
from homology_pipeline.api_clients.mygene_client import MyGeneClient
from homology_pipeline.api_clients.ncbi import NCBIGeneClient
from homology_pipeline.api_clients.orthodb import OrthoDBClient
from homology_pipeline.api_clients.rate_limit import RateLimiter
from homology_pipeline.config.schema import HomologyConfig
from homology_pipeline.location.models import LocationLookup, LocationRecord, LocationStatus
from homology_pipeline.location.resolver import LocationResolver, match_location
from homology_pipeline.orthology.enrichment import EnrichmentOutcome, EnrichmentService
from homology_pipeline.orthology.errors import ErrorKind, OrthologError, OrthologResolutionError
from homology_pipeline.orthology.mapper import OrthologMapBuilder, binding_value
from homology_pipeline.orthology.models import GeneRecord
from homology_pipeline.orthology.organisms import normalize_organism, taxid_for
from homology_pipeline.orthology.query import build_ortholog_query, build_source_gene_query
from homology_pipeline.orthology.ranking import rank_candidates

logger = structlog.get_logger()


class Stage(str, Enum):
    QUERY_SENT = "query-sent"
    MAP_BUILT = "map-built"
    ENRICHED = "enriched"
    LOCATED = "located"
    RANKED = "ranked"
    ASSEMBLED = "assembled"


@dataclass
class ResolutionReport:
    """Outcome of one ortholog resolution request.

    Attributes:
        genes: Queried gene names after normalization, in query order
        source_org: Normalized source organism name
        target_org: Normalized target organism name
        results: Gene -> [source location, ranked target locations...]
        errors: Gene -> failure
        stage: Last stage reached
    """
    genes: list[str]
    source_org: str
    target_org: str
    results: dict[str, list[LocationRecord]] = field(default_factory=dict)
    errors: dict[str, OrthologError] = field(default_factory=dict)
    stage: Stage = Stage.QUERY_SENT

    @property
    def ok(self) -> bool:
        return not self.errors

    def fail(self, gene: str, kind: ErrorKind, detail: Optional[str] = None) -> None:
        """Record a failure for gene unless it already failed."""
        self.results.pop(gene, None)
        self.errors.setdefault(
            gene,
            OrthologError(kind, gene, self.source_org, self.target_org, detail),
        )

    def ordered_errors(self) -> list[OrthologError]:
        return [self.errors[g] for g in self.genes if g in self.errors]

    def to_list(self) -> list[list[dict[str, str]]]:
        """Render successful results as [{gene, location}, ...] per gene."""
        return [
            [record.to_dict() for record in self.results[g]]
            for g in self.genes
            if g in self.results
        ]


def normalize_gene_query(genes: str | Sequence[str]) -> list[str]:
    """Strip gene names and collapse case-insensitive duplicates.

    Raises:
        ValueError: If no gene is given or a name is blank
    """
    if isinstance(genes, str):
        genes = [genes]

    normalized: list[str] = []
    seen: set[str] = set()
    for gene in genes:
        name = str(gene).strip()
        if not name:
            raise ValueError("Gene names must not be blank")
        if name.lower() in seen:
            continue
        seen.add(name.lower())
        normalized.append(name)

    if not normalized:
        raise ValueError("At least one gene name is required")
    return normalized


class HomologyPipeline:
    """Wires the ortholog resolution stages together.

    Usage::

        async with HomologyPipeline.from_config(HomologyConfig()) as pipeline:
            report = await pipeline.resolve(["MTOR"], "homo sapiens", ["mus musculus"])
    """

    def __init__(
        self,
        orthodb: OrthoDBClient,
        enrichment: EnrichmentService,
        locations: LocationResolver,
        http: Optional[AsyncAPIClient] = None,
    ):
        self.orthodb = orthodb
        self.enrichment = enrichment
        self.locations = locations
        self.http = http

    @classmethod
    def from_config(
        cls,
        config: HomologyConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "HomologyPipeline":
        """Build a pipeline with fresh clients and a fresh rate limiter.

        Args:
            config: HomologyConfig instance
            transport: Optional httpx transport override (tests)
        """
        http = AsyncAPIClient.from_config(config, transport=transport)
        orthodb = OrthoDBClient.from_config(config, http)
        rate_limiter = RateLimiter(
            max_concurrent=config.api.detail_max_concurrency,
            min_interval=config.api.detail_min_interval_seconds,
        )
        locations = LocationResolver(
            primary=MyGeneClient.from_config(config),
            fallback=NCBIGeneClient.from_config(config),
        )
        return cls(
            orthodb=orthodb,
            enrichment=EnrichmentService(orthodb, rate_limiter),
            locations=locations,
            http=http,
        )

    async def __aenter__(self) -> "HomologyPipeline":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self.http is not None:
            await self.http.aclose()

    async def resolve(
        self,
        genes: str | Sequence[str],
        source_org: str,
        target_orgs: str | Sequence[str],
    ) -> ResolutionReport:
        """Resolve orthologs and their locations for a batch of genes.

        Args:
            genes: Gene names in the source organism
            source_org: Source organism scientific name
            target_orgs: Target organism name(s); only the first is used

        Returns:
            ResolutionReport with per-gene results and failures

        Raises:
            ValueError: On an empty gene list or no target organism
            httpx.HTTPError: On OrthoDB transport failures after retries
            urllib.error.URLError: On NCBI transport failures
        """
        genes = normalize_gene_query(genes)
        if isinstance(target_orgs, str):
            target_orgs = [target_orgs]
        if not target_orgs:
            raise ValueError("At least one target organism is required")
        if len(target_orgs) > 1:
            logger.warning(
                "multiple_target_organisms",
                used=target_orgs[0],
                ignored=list(target_orgs[1:]),
            )

        source = normalize_organism(source_org)
        target = normalize_organism(target_orgs[0])
        source_taxid = taxid_for(source)
        target_taxid = taxid_for(target)
        report = ResolutionReport(genes=genes, source_org=source, target_org=target)

        log = logger.bind(source=source, target=target)
        log.info("ortholog_query_sent", genes=genes, source_taxid=source_taxid, target_taxid=target_taxid)

        query = build_ortholog_query(genes, source_taxid, target_taxid)
        bindings = await self.orthodb.sparql(query)
        if not bindings:
            for gene in genes:
                report.fail(gene, ErrorKind.ORTHOLOGS_NOT_FOUND)
            log.info("orthologs_not_found", genes=genes)
            return report

        mapping = OrthologMapBuilder(genes).build(bindings)
        report.stage = Stage.MAP_BUILT

        missing = [g for g in genes if g not in mapping.ortholog_map]
        if missing:
            await self._classify_missing(report, missing, source_taxid)

        if not mapping.ortholog_map:
            return report

        groups = await self._enrich(report, mapping.ortholog_map, mapping.source_registry)
        report.stage = Stage.ENRICHED
        if not groups:
            return report

        sources = [g.source for g in groups]
        targets = _unique_by_name(c for g in groups for c in g.candidates)

        (source_lookup, sources), (target_lookup, targets) = await asyncio.gather(
            self._locate(sources, source_taxid),
            self._locate(targets, target_taxid),
        )
        report.stage = Stage.LOCATED
        groups = _apply_enriched(groups, sources + targets)

        if not source_lookup.ok or not target_lookup.ok:
            failed_org = source if not source_lookup.ok else target
            detail = (source_lookup if not source_lookup.ok else target_lookup).detail
            for group in groups:
                report.errors.setdefault(
                    group.source_name,
                    OrthologError(
                        ErrorKind.LOCATION_UNRESOLVED,
                        group.source_name,
                        source,
                        failed_org if failed_org != source else None,
                        detail,
                    ),
                )
            log.warning("location_batch_unresolved", organism=failed_org, detail=detail)
            return report

        for index, group in enumerate(groups):
            ranked = rank_candidates(group.source, group.candidates)
            report.stage = Stage.RANKED
            self._assemble(report, index, group, ranked, source_lookup, target_lookup)

        report.stage = Stage.ASSEMBLED
        log.info(
            "orthologs_resolved",
            resolved=len(report.results),
            failed=len(report.errors),
        )
        return report

    async def _classify_missing(
        self,
        report: ResolutionReport,
        missing: list[str],
        source_taxid: str,
    ) -> None:
        """Tell genes absent from the source organism from genes lacking orthologs."""
        bindings = await self.orthodb.sparql(build_source_gene_query(missing, source_taxid))
        builder = OrthologMapBuilder(missing)
        present = set()
        for binding in bindings:
            name = binding_value(binding, "gene_s_name")
            resolved = builder.resolve_source_name(name) if name else None
            if resolved is not None:
                present.add(resolved)

        for gene in missing:
            if gene in present:
                report.fail(gene, ErrorKind.ORTHOLOGS_NOT_FOUND_IN_TARGET)
            else:
                report.fail(gene, ErrorKind.GENE_NOT_FOUND_IN_SOURCE)

        logger.info(
            "missing_genes_classified",
            in_source_only=sorted(present),
            not_in_source=[g for g in missing if g not in present],
        )

    async def _enrich(
        self,
        report: ResolutionReport,
        ortholog_map: dict[str, list[GeneRecord]],
        source_registry: dict[str, GeneRecord],
    ) -> list[EnrichmentOutcome]:
        """Enrich every source gene group concurrently; failed groups are recorded."""
        outcomes = await asyncio.gather(*(
            self.enrichment.enrich_group(
                gene,
                source_registry,
                candidates,
                source_org=report.source_org,
                target_org=report.target_org,
            )
            for gene, candidates in ortholog_map.items()
        ))

        groups = []
        for outcome in outcomes:
            if outcome.ok:
                groups.append(outcome)
            else:
                report.errors.setdefault(outcome.source_name, outcome.error)
        return groups

    async def _locate(
        self,
        genes: list[GeneRecord],
        taxid: str,
    ) -> tuple[LocationLookup, list[GeneRecord]]:
        """Locate a batch, escalating once to forced enrichment if needed.

        Returns the lookup and the (possibly enriched) genes. Genes that
        already carry an NCBI Gene ID or OrthoDB details are not fetched again.
        """
        lookup = await self.locations.resolve(genes, taxid)
        if lookup.status is not LocationStatus.NEEDS_ENRICHMENT:
            return lookup, genes

        stale = [i for i, g in enumerate(genes) if not g.ncbi_gene_id and not g.is_enriched]
        logger.info(
            "forced_enrichment",
            taxid=taxid,
            genes=[genes[i].name for i in stale],
            skipped=len(genes) - len(stale),
        )
        genes = list(genes)
        enriched = await self.enrichment.enrich_batch([genes[i] for i in stale])
        for i, gene in zip(stale, enriched):
            genes[i] = gene
        return await self.locations.resolve_by_ids(genes), genes

    def _assemble(
        self,
        report: ResolutionReport,
        index: int,
        group: EnrichmentOutcome,
        ranked: list[GeneRecord],
        source_lookup: LocationLookup,
        target_lookup: LocationLookup,
    ) -> None:
        """Match locations back to one gene group and store its result."""
        gene = group.source_name

        source_location = match_location(group.source.name, source_lookup.records, index)
        if source_location is None:
            report.errors.setdefault(gene, OrthologError(
                ErrorKind.LOCATION_UNRESOLVED, gene, report.source_org, None,
                f"no {source_lookup.provider} position for {group.source.name}",
            ))
            return

        target_locations = []
        for candidate in ranked:
            location = match_location(candidate.name, target_lookup.records, index)
            if location is None:
                report.errors.setdefault(gene, OrthologError(
                    ErrorKind.LOCATION_UNRESOLVED, gene, report.source_org, report.target_org,
                    f"no {target_lookup.provider} position for ortholog {candidate.name}",
                ))
                return
            target_locations.append(location)

        report.results[gene] = [source_location, *target_locations]


def _unique_by_name(genes) -> list[GeneRecord]:
    unique: dict[str, GeneRecord] = {}
    for gene in genes:
        unique.setdefault(gene.name.lower(), gene)
    return list(unique.values())


def _apply_enriched(
    groups: list[EnrichmentOutcome],
    genes: list[GeneRecord],
) -> list[EnrichmentOutcome]:
    """Carry metadata gained during forced enrichment back into the groups."""
    by_id = {g.orthodb_id: g for g in genes if g.orthodb_id}

    def refresh(gene: GeneRecord) -> GeneRecord:
        enriched = by_id.get(gene.orthodb_id)
        return gene.merge(enriched.details()) if enriched is not None else gene

    for group in groups:
        group.source = refresh(group.source)
        group.candidates = [refresh(c) for c in group.candidates]
    return groups


async def fetch_orthologs(
    genes: str | Sequence[str],
    source_org: str,
    target_orgs: str | Sequence[str],
    config: Optional[HomologyConfig] = None,
    strict: bool = False,
) -> list[list[dict[str, str]]]:
    """Fetch orthologs of genes and the genomic locations of all of them.

    Example:
        await fetch_orthologs(["MTOR"], "homo sapiens", ["mus musculus"])
        # [[{"gene": "MTOR", "location": "1:11106535-11262551"},
        #   {"gene": "Mtor", "location": "4:148448582-148557685"}]]

    Args:
        genes: Gene names in the source organism
        source_org: Source organism scientific name, e.g. "homo sapiens"
        target_orgs: Target organism name(s); only the first is used
        config: Pipeline configuration (defaults when omitted)
        strict: Raise if any gene fails, not only when all genes fail

    Returns:
        One list per resolved gene: the source gene's {gene, location}
        followed by each ranked ortholog's {gene, location}

    Raises:
        OrthologResolutionError: When every gene failed (or any, if strict)
    """
    config = config or HomologyConfig()

    async with HomologyPipeline.from_config(config) as pipeline:
        report = await pipeline.resolve(genes, source_org, target_orgs)

    errors = report.ordered_errors()
    if errors and (strict or not report.results):
        raise OrthologResolutionError(errors)
    for error in errors:
        logger.warning("gene_unresolved", gene=error.gene, reason=error.message)

    return report.to_list()
