"""Tests for OrthoDB gene detail enrichment.

Uses a mocked OrthoDB client to avoid real API calls.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from homology_pipeline.api_clients.rate_limit import RateLimiter
from homology_pipeline.orthology.enrichment import (
    EnrichmentService,
    needs_enrichment,
    parse_gene_details,
)
from homology_pipeline.orthology.errors import ErrorKind
from homology_pipeline.orthology.models import GeneDetails, GeneRecord


# Mock ogdetails payload fixtures

MOCK_HUMAN_THAP1 = {
    "ensembl": [{"id": "ENSG00000131931"}],
    "entrez": [{"id": "55145"}],
    "aas": 213,
    "exons": 3,
    "interpro": [
        {"id": "IPR006612", "name": "THAP-type zinc finger"},
        {"id": "IPR026516", "name": "THAP domain containing 1"},
    ],
}

MOCK_FLY_XREFS = {
    "ensembl": [{"id": "FBgn0000008"}],
    "xrefs": [
        {"type": "FlyBase", "name": "FBgn0000008"},
        {"type": "NCBIgene", "name": "43852"},
    ],
    "aas": "1101",
    "exons": "7",
}


def make_service(details_by_id):
    """Create an EnrichmentService over a fake OrthoDB client."""
    client = MagicMock()
    client.gene_details = AsyncMock(side_effect=lambda gene_id: details_by_id.get(gene_id, {}))
    return EnrichmentService(client, RateLimiter(max_concurrent=3, min_interval=0))


def test_parse_gene_details_full():
    details = parse_gene_details(MOCK_HUMAN_THAP1)

    assert details == GeneDetails(
        ensembl_id="ENSG00000131931",
        ncbi_gene_id="55145",
        amino_acid_count=213,
        exon_count=3,
        domains=("IPR006612", "IPR026516"),
    )


def test_parse_gene_details_ncbi_id_from_xrefs():
    """Test that records without entrez use the NCBIgene cross-reference."""
    details = parse_gene_details(MOCK_FLY_XREFS)

    assert details.ncbi_gene_id == "43852"
    assert details.amino_acid_count == 1101
    assert details.exon_count == 7
    assert details.domains is None


def test_parse_gene_details_empty():
    assert parse_gene_details({}) == GeneDetails()


def test_parse_gene_details_bad_numbers():
    details = parse_gene_details({"aas": "n/a", "exons": None, "interpro": []})

    assert details.amino_acid_count is None
    assert details.exon_count is None
    assert details.domains == ()


def test_merge_only_fills_absent_fields():
    gene = GeneRecord(name="Thap1", orthodb_id="10090_0:000a01", exon_count=3)
    merged = gene.merge(GeneDetails(exon_count=5, ncbi_gene_id="73754"))

    assert merged.exon_count == 3
    assert merged.ncbi_gene_id == "73754"
    assert merged.merge(GeneDetails(exon_count=5, ncbi_gene_id="73754")) == merged


def test_merge_none_never_clears():
    gene = GeneRecord(name="Thap1", ncbi_gene_id="73754")
    assert gene.merge(GeneDetails()) is gene


def test_needs_enrichment():
    assert not needs_enrichment("MTOR", [GeneRecord(name="Mtor")])
    assert needs_enrichment("THAP1", [GeneRecord(name="Thap1"), GeneRecord(name="Thap4")])
    assert not needs_enrichment("MTOR", [])


@pytest.mark.asyncio
async def test_enrich_merges_details():
    service = make_service({"9606_0:thap1": MOCK_HUMAN_THAP1})
    gene = GeneRecord(name="THAP1", orthodb_id="9606_0:thap1")

    enriched = await service.enrich(gene)

    assert enriched.name == "THAP1"
    assert enriched.orthodb_id == "9606_0:thap1"
    assert enriched.exon_count == 3
    assert enriched.domain_count == 2
    assert enriched.is_enriched


@pytest.mark.asyncio
async def test_enrich_without_id_skips_request():
    service = make_service({})
    gene = GeneRecord(name="THAP1")

    assert await service.enrich(gene) is gene
    service.client.gene_details.assert_not_called()


@pytest.mark.asyncio
async def test_enrich_missing_record_returns_gene_unchanged():
    service = make_service({})
    gene = GeneRecord(name="Gone", orthodb_id="10090_0:gone")

    assert await service.enrich(gene) == gene


@pytest.mark.asyncio
async def test_enrich_batch_preserves_order():
    service = make_service({
        "a": {"exons": 1},
        "b": {"exons": 2},
        "c": {"exons": 3},
    })
    genes = [GeneRecord(name=n, orthodb_id=n) for n in ("a", "b", "c")]

    enriched = await service.enrich_batch(genes)

    assert [g.exon_count for g in enriched] == [1, 2, 3]


@pytest.mark.asyncio
async def test_enrich_group_skipped_when_names_match():
    service = make_service({})
    registry = {"MTOR": GeneRecord(name="MTOR", orthodb_id="9606_0:001c7b")}

    outcome = await service.enrich_group("MTOR", registry, [GeneRecord(name="Mtor")])

    assert outcome.ok
    assert outcome.skipped
    assert [c.name for c in outcome.candidates] == ["Mtor"]
    service.client.gene_details.assert_not_called()


@pytest.mark.asyncio
async def test_enrich_group_force():
    service = make_service({"10090_0:0011d9": {"exons": 58}})
    registry = {"MTOR": GeneRecord(name="MTOR")}

    outcome = await service.enrich_group(
        "MTOR", registry, [GeneRecord(name="Mtor", orthodb_id="10090_0:0011d9")], force=True,
    )

    assert not outcome.skipped
    assert outcome.candidates[0].exon_count == 58


@pytest.mark.asyncio
async def test_enrich_group_enriches_source_and_candidates():
    service = make_service({
        "9606_0:thap1": MOCK_HUMAN_THAP1,
        "10090_0:thap1": {"exons": 3, "interpro": [{"id": "IPR006612"}, {"id": "IPR026516"}]},
        "10090_0:thap4": {"exons": 6, "interpro": [{"id": "IPR006612"}, {"id": "IPR011009"}]},
    })
    registry = {"THAP1": GeneRecord(name="THAP1", orthodb_id="9606_0:thap1")}
    candidates = [
        GeneRecord(name="Thap4", orthodb_id="10090_0:thap4"),
        GeneRecord(name="Thap1", orthodb_id="10090_0:thap1"),
    ]

    outcome = await service.enrich_group("THAP1", registry, candidates)

    assert outcome.ok
    assert outcome.source.exon_count == 3
    assert [c.exon_count for c in outcome.candidates] == [6, 3]
    assert service.client.gene_details.await_count == 3


@pytest.mark.asyncio
async def test_enrich_group_missing_anchor():
    service = make_service({})

    outcome = await service.enrich_group(
        "asdf", {}, [], source_org="homo sapiens", target_org="mus musculus",
    )

    assert not outcome.ok
    assert outcome.error.kind is ErrorKind.GENE_NOT_FOUND_IN_SOURCE
    assert 'Gene "asdf" not found in Homo sapiens' in outcome.error.message


@pytest.mark.asyncio
async def test_enrich_group_no_candidates():
    service = make_service({})
    registry = {"NFYA": GeneRecord(name="NFYA")}

    outcome = await service.enrich_group(
        "NFYA", registry, [], source_org="homo sapiens", target_org="zea mays",
    )

    assert outcome.error.kind is ErrorKind.ORTHOLOGS_NOT_FOUND_IN_TARGET
    assert outcome.error.message == (
        'Orthologs not found for gene "NFYA" in target organism Zea mays'
    )
