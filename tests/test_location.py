"""Tests for genomic location resolution.

Tests provider parsing, primary/fallback selection and match-back of
locations to gene names. Uses mocked MyGene.info and NCBI responses.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from homology_pipeline.api_clients.mygene_client import MyGeneClient
from homology_pipeline.location import (
    LocationRecord,
    LocationResolver,
    LocationStatus,
    fuzzy_match,
    is_insufficient,
    match_location,
)
from homology_pipeline.location.providers import (
    build_mygene_query,
    is_alt_locus,
    mygene_term,
    parse_mygene_hit,
    parse_ncbi_summary,
    select_genomic_pos,
)
from homology_pipeline.orthology.models import GeneRecord


# Mock provider response fixtures

MOCK_MTOR_HIT = {
    "_id": "2475",
    "entrezgene": 2475,
    "symbol": "MTOR",
    "name": "mechanistic target of rapamycin kinase",
    "genomic_pos": {"chr": "1", "start": 11106535, "end": 11262551, "strand": -1},
}

MOCK_PTPRC_HIT = {
    "_id": "5788",
    "entrezgene": 5788,
    "symbol": "PTPRC",
    "genomic_pos": [
        {"chr": "CHR_HSCHR1_4_CTG3", "start": 198638457, "end": 198757476, "strand": 1},
        {"chr": "1", "start": 198638671, "end": 198757283, "strand": 1},
    ],
}

MOCK_NO_POS_HIT = {"_id": "266747", "symbol": "nfya-1"}

MOCK_NCBI_NFYA1 = {
    "uid": "175969",
    "name": "nfya-1",
    "genomicinfo": [
        {"chrloc": "V", "chraccver": "NC_003283.11", "chrstart": 15209471, "chrstop": 15206633},
    ],
}


def make_resolver(hits=None, summaries=None):
    """Create a LocationResolver over mocked providers."""
    primary = MagicMock()
    primary.query = AsyncMock(return_value=hits or [])
    fallback = MagicMock()
    fallback.gene_summaries = AsyncMock(return_value=summaries or [])
    return LocationResolver(primary=primary, fallback=fallback)


# Provider parsing

def test_is_alt_locus():
    assert is_alt_locus("CHR_HSCHR1_4_CTG3")
    assert not is_alt_locus("1")
    assert not is_alt_locus("X")


def test_select_genomic_pos_skips_alt_loci():
    pos = select_genomic_pos(MOCK_PTPRC_HIT["genomic_pos"])
    assert pos["chr"] == "1"


def test_select_genomic_pos_only_alt_loci():
    assert select_genomic_pos([{"chr": "CHR_HSCHR1_4_CTG3", "start": 1, "end": 2}]) is None
    assert select_genomic_pos(None) is None


def test_parse_mygene_hit():
    record = parse_mygene_hit(MOCK_MTOR_HIT)

    assert record == LocationRecord(
        name="MTOR", chromosome="1", start=11106535, end=11262551,
        gene_id="2475", provider="mygene",
    )
    assert record.location == "1:11106535-11262551"
    assert record.to_dict() == {"gene": "MTOR", "location": "1:11106535-11262551"}


def test_parse_mygene_hit_ptprc_one_location():
    """Test that PTPRC resolves to exactly one primary-assembly location."""
    record = parse_mygene_hit(MOCK_PTPRC_HIT)

    assert record.chromosome == "1"
    assert record.location == "1:198638671-198757283"


def test_parse_mygene_hit_without_position():
    assert parse_mygene_hit(MOCK_NO_POS_HIT) is None


def test_parse_ncbi_summary():
    record = parse_ncbi_summary(MOCK_NCBI_NFYA1)

    assert record.name == "nfya-1"
    assert record.chromosome == "V"
    assert record.gene_id == "175969"
    assert record.provider == "ncbi"
    # Provider-native coordinates are passed through unchanged
    assert record.location == "V:15209471-15206633"


def test_parse_ncbi_summary_without_genomic_info():
    assert parse_ncbi_summary({"uid": "1", "name": "x", "genomicinfo": []}) is None


def test_mygene_terms():
    assert mygene_term(GeneRecord(name="Mtor", ncbi_gene_id="56717")) == "entrezgene:56717"
    assert mygene_term(GeneRecord(name="Mtor", ensembl_id="ENSMUSG00000028991")) == (
        "ensembl.gene:ENSMUSG00000028991"
    )
    assert mygene_term(GeneRecord(name="Mtor")) == "symbol:Mtor"
    assert build_mygene_query([GeneRecord(name="MTOR"), GeneRecord(name="NFYA")]) == (
        "symbol:MTOR OR symbol:NFYA"
    )


# Sufficiency and fallback

def test_is_insufficient():
    assert not is_insufficient([MOCK_MTOR_HIT], 1)
    assert is_insufficient([], 1)
    assert is_insufficient([MOCK_MTOR_HIT], 2)
    assert is_insufficient([MOCK_MTOR_HIT, MOCK_NO_POS_HIT], 2)
    assert is_insufficient([{"genomic_pos": {"chr": "1", "start": 1, "end": 2}}], 1)


@pytest.mark.asyncio
async def test_resolve_primary_sufficient():
    resolver = make_resolver(hits=[MOCK_MTOR_HIT])

    lookup = await resolver.resolve([GeneRecord(name="MTOR")], "9606")

    assert lookup.ok
    assert lookup.provider == "mygene"
    assert [r.name for r in lookup.records] == ["MTOR"]
    resolver.primary.query.assert_awaited_once_with("symbol:MTOR", "9606")
    resolver.fallback.gene_summaries.assert_not_called()


@pytest.mark.asyncio
async def test_resolve_falls_back_with_ncbi_ids():
    resolver = make_resolver(hits=[MOCK_NO_POS_HIT], summaries=[MOCK_NCBI_NFYA1])
    genes = [GeneRecord(name="nfya-1", ncbi_gene_id="175969")]

    lookup = await resolver.resolve(genes, "6239")

    assert lookup.ok
    assert lookup.provider == "ncbi"
    assert lookup.records[0].name == "nfya-1"
    resolver.fallback.gene_summaries.assert_awaited_once_with(["175969"])


@pytest.mark.asyncio
async def test_resolve_needs_enrichment_without_ids():
    resolver = make_resolver(hits=[MOCK_NO_POS_HIT])

    lookup = await resolver.resolve([GeneRecord(name="nfya-1")], "6239")

    assert lookup.status is LocationStatus.NEEDS_ENRICHMENT
    assert "nfya-1" in lookup.detail
    resolver.fallback.gene_summaries.assert_not_called()


@pytest.mark.asyncio
async def test_resolve_all_alt_loci_is_insufficient():
    """Test that usable hits placed only on alt loci still trigger fallback."""
    alt_only = {
        "symbol": "PTPRC",
        "genomic_pos": [{"chr": "CHR_HSCHR1_4_CTG3", "start": 1, "end": 2}],
    }
    resolver = make_resolver(hits=[alt_only])

    lookup = await resolver.resolve([GeneRecord(name="PTPRC")], "9606")

    assert lookup.status is LocationStatus.NEEDS_ENRICHMENT


@pytest.mark.asyncio
async def test_resolve_empty_batch():
    resolver = make_resolver()

    lookup = await resolver.resolve([], "9606")

    assert lookup.ok
    assert lookup.records == []
    resolver.primary.query.assert_not_called()


@pytest.mark.asyncio
async def test_resolve_by_ids_missing_id_unresolved():
    resolver = make_resolver()

    lookup = await resolver.resolve_by_ids([GeneRecord(name="nfya-1")])

    assert lookup.status is LocationStatus.UNRESOLVED
    resolver.fallback.gene_summaries.assert_not_called()


@pytest.mark.asyncio
async def test_resolve_by_ids_no_records_unresolved():
    resolver = make_resolver(summaries=[{"uid": "1", "name": "x"}])

    lookup = await resolver.resolve_by_ids([GeneRecord(name="x", ncbi_gene_id="1")])

    assert lookup.status is LocationStatus.UNRESOLVED
    assert lookup.provider == "ncbi"


@pytest.mark.asyncio
async def test_resolve_by_ids_deduplicates_ids():
    resolver = make_resolver(summaries=[MOCK_NCBI_NFYA1])
    genes = [
        GeneRecord(name="nfya-1", ncbi_gene_id="175969"),
        GeneRecord(name="NFYA-1", ncbi_gene_id="175969"),
    ]

    await resolver.resolve_by_ids(genes)

    resolver.fallback.gene_summaries.assert_awaited_once_with(["175969"])


# Match-back

@pytest.mark.parametrize("a,b", [
    ("NF-YC6", "NFYC6"),
    ("MTOR", "MTOR"),
    ("nfya-1", "nfya1"),
])
def test_fuzzy_match_symmetric(a, b):
    assert fuzzy_match(a, b)
    assert fuzzy_match(b, a)


def test_fuzzy_match_is_case_sensitive():
    assert not fuzzy_match("Mtor", "MTOR")
    assert not fuzzy_match("NFYA", "NFYB")


def test_match_location_by_name():
    records = [
        LocationRecord(name="Nfyc", chromosome="4", start=1, end=2),
        LocationRecord(name="NFYC6", chromosome="5", start=3, end=4),
    ]

    assert match_location("NF-YC6", records, 0).chromosome == "5"


def test_match_location_positional_fallback():
    records = [
        LocationRecord(name="a", chromosome="1", start=1, end=2),
        LocationRecord(name="b", chromosome="2", start=1, end=2),
    ]

    assert match_location("zzz", records, 1).name == "b"
    assert match_location("zzz", records, 5) is None
    assert match_location("zzz", [], 0) is None


# MyGene client

@pytest.mark.asyncio
async def test_mygene_client_query():
    """Test that the mygene query runs with the expected arguments."""
    with patch('mygene.MyGeneInfo') as mock_mygene:
        mock_mg = MagicMock()
        mock_mygene.return_value = mock_mg
        mock_mg.query.return_value = {"total": 1, "hits": [MOCK_MTOR_HIT]}

        client = MyGeneClient(url="https://mygene.example.org/v3", page_size=20)
        hits = await client.query("symbol:MTOR", "9606")

    assert hits == [MOCK_MTOR_HIT]
    mock_mygene.assert_called_once_with(url="https://mygene.example.org/v3")
    mock_mg.query.assert_called_once_with(
        "symbol:MTOR",
        species="9606",
        fields="symbol,name,genomic_pos,entrezgene",
        size=20,
    )


@pytest.mark.asyncio
async def test_mygene_client_size_covers_batch():
    with patch('mygene.MyGeneInfo') as mock_mygene:
        mock_mg = MagicMock()
        mock_mygene.return_value = mock_mg
        mock_mg.query.return_value = {"hits": []}

        client = MyGeneClient(page_size=2)
        hits = await client.query("symbol:A OR symbol:B OR symbol:C", "9606")

    assert hits == []
    assert mock_mg.query.call_args.kwargs["size"] == 3
