"""Organism scientific name <-> NCBI Taxonomy ID registry."""

import re

# Taxid used when an organism is not in the registry: matching is unscoped
ALL_TAXA = "all"

TAXIDS_BY_NAME: dict[str, str] = {
    "aedes aegypti": "7159",
    "anopheles gambiae": "7165",
    "arabidopsis thaliana": "3702",
    "aspergillis fumigatus": "746128",
    "aspergillus niger": "5061",
    "aspergillus oryzae": "5062",
    "bos taurus": "9913",
    "brachypodium distachyon": "15368",
    "caenorhabditis elegans": "6239",
    "callithrix jacchus": "9483",
    "canis lupus familiaris": "9615",
    "chlorocebus sabaeus": "60711",
    "ciona intestinalis": "7719",
    "capsicum annuum": "4072",
    "culex quinquefasciatus": "7176",
    "danio rerio": "7955",
    "drosophila melanogaster": "7227",
    "equus caballus": "9796",
    "felis catus": "9685",
    "gallus gallus": "9031",
    "glycine max": "3847",
    "gorilla gorilla": "9593",
    "homo sapiens": "9606",
    "hordeum vulgare": "4513",
    "macaca fascicularis": "9541",
    "macaca mulatta": "9544",
    "mus musculus": "10090",
    "musa acuminata": "4641",
    "oryza sativa": "4530",
    "ornithorhynchus anatinus": "9258",
    "pan paniscus": "9597",
    "pan troglodytes": "9598",
    "plasmodium falciparum": "5833",
    "rattus norvegicus": "10116",
    "saccharomyces cerevisiae": "4932",
    "solanum lycopersicum": "4081",
    "sus scrofa": "9823",
    "vitis vinifera": "29760",
    "zea mays": "4577",
}

NAMES_BY_TAXID: dict[str, str] = {taxid: name for name, taxid in TAXIDS_BY_NAME.items()}


def normalize_organism(name: str) -> str:
    """Normalize an organism name to lowercase, single-space form.

    Hyphens and underscores are read as spaces, so "Homo-sapiens" and
    "homo_sapiens" both become "homo sapiens".
    """
    return re.sub(r"[\s_\-]+", " ", name.strip().lower()).strip()


def taxid_for(name: str) -> str:
    """Return the taxid of an organism, or ALL_TAXA when unsupported."""
    return TAXIDS_BY_NAME.get(normalize_organism(name), ALL_TAXA)


def name_for(taxid: str) -> str | None:
    """Return the registry name of a taxid, or None when unknown."""
    return NAMES_BY_TAXID.get(str(taxid))


def is_supported(name: str) -> bool:
    return normalize_organism(name) in TAXIDS_BY_NAME


def display_name(name: str) -> str:
    """Render an organism name as "Genus species", e.g. "Mus musculus"."""
    normalized = normalize_organism(name)
    return normalized[:1].upper() + normalized[1:]
