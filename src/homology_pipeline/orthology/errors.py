"""Error taxonomy for ortholog resolution.

Expected domain conditions (gene or ortholog not found, location not
resolved) are returned as OrthologError values by the pipeline stages.
OrthologResolutionError is raised only at the public boundary, by
fetch_orthologs. Transport and parsing failures propagate as the httpx /
json exceptions that caused them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from homology_pipeline.orthology.organisms import display_name


class ErrorKind(str, Enum):
    GENE_NOT_FOUND_IN_SOURCE = "geneNotFound"
    ORTHOLOGS_NOT_FOUND = "orthologsNotFound"
    ORTHOLOGS_NOT_FOUND_IN_TARGET = "orthologsNotFoundInTarget"
    LOCATION_UNRESOLVED = "locationUnresolved"


@dataclass(frozen=True)
class OrthologError:
    """A failed resolution for one queried gene.

    Attributes:
        kind: Error category
        gene: Queried gene name (or comma-joined names for batch failures)
        source_org: Source organism name
        target_org: Target organism name
        detail: Optional upstream detail appended to the message
    """
    kind: ErrorKind
    gene: str
    source_org: Optional[str] = None
    target_org: Optional[str] = None
    detail: Optional[str] = None

    @property
    def message(self) -> str:
        source = display_name(self.source_org) if self.source_org else "source organism"
        target = display_name(self.target_org) if self.target_org else "target organism"

        if self.kind is ErrorKind.GENE_NOT_FOUND_IN_SOURCE:
            summary = f'Gene "{self.gene}" not found in {source}'
        elif self.kind is ErrorKind.ORTHOLOGS_NOT_FOUND:
            summary = f'Orthologs not found for gene "{self.gene}"'
        elif self.kind is ErrorKind.ORTHOLOGS_NOT_FOUND_IN_TARGET:
            summary = f'Orthologs not found for gene "{self.gene}" in target organism {target}'
        else:
            org = target if self.target_org else source
            summary = f'Location not resolved for gene "{self.gene}" in {org}'

        if self.detail:
            summary += f": {self.detail}"
        return summary

    def __str__(self) -> str:
        return self.message


class HomologyError(Exception):
    """Base class for homology_pipeline exceptions."""


class OrthologResolutionError(HomologyError):
    """Raised by fetch_orthologs when resolution fails.

    Attributes:
        errors: Every per-gene failure of the request, in query order
    """

    def __init__(self, errors: list[OrthologError]):
        if not errors:
            raise ValueError("OrthologResolutionError requires at least one error")
        self.errors = list(errors)
        super().__init__("; ".join(e.message for e in self.errors))

    @property
    def kind(self) -> ErrorKind:
        """Kind of the first failure."""
        return self.errors[0].kind
