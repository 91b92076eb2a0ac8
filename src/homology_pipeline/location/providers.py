"""Parsing of coordinate provider responses.

MyGene.info hits carry ``genomic_pos`` as a dict or, for genes placed on
several sequences, a list of dicts. NCBI esummary records carry a
``genomicinfo`` list.
"""

from typing import Any, Optional

from homology_pipeline.location.models import LocationRecord
from homology_pipeline.orthology.models import GeneRecord


def is_alt_locus(chromosome: Any) -> bool:
    """Whether a chromosome name denotes an alternative loci scaffold.

    Example: "CHR_HSCHR1_4_CTG3" for PTPRC in humans.
    """
    return "_" in str(chromosome)


def select_genomic_pos(genomic_pos: Any) -> Optional[dict[str, Any]]:
    """Return the first position not placed on an alternative loci scaffold.

    Example:
    https://mygene.info/v3/query?q=symbol:PTPRC&species=9606&fields=symbol,genomic_pos,name
    """
    if isinstance(genomic_pos, dict):
        positions = [genomic_pos]
    elif isinstance(genomic_pos, list):
        positions = [p for p in genomic_pos if isinstance(p, dict)]
    else:
        return None

    for pos in positions:
        if "chr" in pos and not is_alt_locus(pos["chr"]):
            return pos
    return None


def hit_is_usable(hit: dict[str, Any]) -> bool:
    """Whether a MyGene.info hit has both a position and a name."""
    has_name = bool(hit.get("symbol") or hit.get("name"))
    return has_name and "genomic_pos" in hit


def parse_mygene_hit(hit: dict[str, Any]) -> Optional[LocationRecord]:
    """Transform a MyGene.info hit into a LocationRecord.

    Returns None when the hit lacks a name or a primary-assembly position.
    """
    name = hit.get("symbol") or hit.get("name")
    if not name:
        return None

    pos = select_genomic_pos(hit.get("genomic_pos"))
    if pos is None:
        return None

    try:
        start = int(pos["start"])
        end = int(pos["end"])
    except (KeyError, TypeError, ValueError):
        return None

    entrez = hit.get("entrezgene")
    return LocationRecord(
        name=str(name),
        chromosome=str(pos["chr"]),
        start=start,
        end=end,
        gene_id=str(entrez) if entrez is not None else None,
        provider="mygene",
    )


def parse_ncbi_summary(summary: dict[str, Any]) -> Optional[LocationRecord]:
    """Transform an NCBI Gene esummary record into a LocationRecord.

    Example:
    https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esummary.fcgi?db=gene&retmode=json&id=3565955
    """
    name = summary.get("name")
    genomic_info = summary.get("genomicinfo") or []
    if not name or not genomic_info:
        return None

    for info in genomic_info:
        chromosome = info.get("chrloc")
        if not chromosome or is_alt_locus(chromosome):
            continue
        try:
            start = int(info["chrstart"])
            end = int(info["chrstop"])
        except (KeyError, TypeError, ValueError):
            continue
        return LocationRecord(
            name=str(name),
            chromosome=str(chromosome),
            start=start,
            end=end,
            gene_id=str(summary.get("uid")) if summary.get("uid") else None,
            provider="ncbi",
        )
    return None


def mygene_term(gene: GeneRecord) -> str:
    """Build the MyGene.info query term for one gene.

    Cross-reference IDs are unambiguous, so they are preferred over symbols.
    """
    if gene.ncbi_gene_id:
        return f"entrezgene:{gene.ncbi_gene_id}"
    if gene.ensembl_id:
        return f"ensembl.gene:{gene.ensembl_id}"
    return f"symbol:{gene.name}"


def build_mygene_query(genes: list[GeneRecord]) -> str:
    """Join per-gene terms into one batched query string."""
    return " OR ".join(mygene_term(g) for g in genes)
