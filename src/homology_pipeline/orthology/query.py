"""SPARQL query construction for the OrthoDB ortholog graph."""

import re

from homology_pipeline.orthology.organisms import ALL_TAXA

PREFIXES = """\
PREFIX : <http://purl.orthodb.org/>
PREFIX up: <http://purl.uniprot.org/core/>
PREFIX taxon: <http://purl.uniprot.org/taxonomy/>"""

# Regex metacharacters that must be escaped inside the name filter
_REGEX_SPECIAL = re.compile(r"([.^$*+?()\[\]{}|\\])")


def escape_gene_name(name: str) -> str:
    """Escape a gene name for use inside the SPARQL regex string literal.

    The regex escape backslash is itself doubled, since the pattern is
    embedded in a SPARQL string where "\\\\" decodes to one backslash.
    """
    if '"' in name or "\n" in name:
        raise ValueError(f"Invalid character in gene name: {name!r}")
    return _REGEX_SPECIAL.sub(r"\\\\\1", name)


def name_filter_pattern(genes: list[str]) -> str:
    """Build the alias-tolerant name pattern, e.g. "(^;?(MTOR|NFYA);?)"."""
    if not genes:
        raise ValueError("At least one gene name is required")
    alternatives = "|".join(escape_gene_name(g) for g in genes)
    return f"(^;?({alternatives});?)"


def _organism_clause(variable: str, taxid: str) -> str:
    if taxid == ALL_TAXA:
        return ""
    return f"  ?{variable} up:organism/a taxon:{taxid} .\n"


def build_ortholog_query(genes: list[str], source_taxid: str, target_taxid: str) -> str:
    """Build one query selecting source/target name pairs for all genes.

    Selects genes that are typed as genes, share an ortholog group, belong
    to the source and target organisms respectively, and whose source-side
    name matches one of the requested genes (case-insensitive).

    Args:
        genes: Gene names to resolve in one round trip
        source_taxid: NCBI Taxonomy ID of the source organism, or "all"
        target_taxid: NCBI Taxonomy ID of the target organism, or "all"

    Returns:
        SPARQL query string
    """
    pattern = name_filter_pattern(genes)
    return (
        f"{PREFIXES}\n"
        "SELECT ?gene_s ?gene_s_name ?gene_t ?gene_t_name\n"
        "WHERE {\n"
        "  ?gene_s a :Gene .\n"
        "  ?gene_t a :Gene .\n"
        "  ?gene_s :name ?gene_s_name .\n"
        "  ?gene_t :name ?gene_t_name .\n"
        f"{_organism_clause('gene_s', source_taxid)}"
        f"{_organism_clause('gene_t', target_taxid)}"
        "  ?gene_s :memberOf ?og .\n"
        "  ?gene_t :memberOf ?og .\n"
        f'  FILTER (regex(?gene_s_name, "{pattern}", "i"))\n'
        "}"
    )


def build_source_gene_query(genes: list[str], source_taxid: str) -> str:
    """Build a query selecting only source genes matching the name filter.

    Used to tell a gene missing from the source organism apart from a gene
    that exists but has no ortholog in the target organism.
    """
    pattern = name_filter_pattern(genes)
    return (
        f"{PREFIXES}\n"
        "SELECT DISTINCT ?gene_s ?gene_s_name\n"
        "WHERE {\n"
        "  ?gene_s a :Gene .\n"
        "  ?gene_s :name ?gene_s_name .\n"
        f"{_organism_clause('gene_s', source_taxid)}"
        f'  FILTER (regex(?gene_s_name, "{pattern}", "i"))\n'
        "}"
    )
