"""NCBI Gene summaries via Biopython Entrez.

Docs: https://www.ncbi.nlm.nih.gov/books/NBK25499/#chapter4.ESummary
"""

import asyncio
import json
import logging
from typing import Any, Optional

from Bio import Entrez

from homology_pipeline.config.schema import HomologyConfig

logger = logging.getLogger(__name__)


class NCBIGeneClient:
    """Fetches NCBI Gene summaries (name and genomic info) by gene id.

    Entrez is synchronous and retries failed requests itself (``max_tries``);
    calls run in a worker thread so the event loop keeps serving other
    batches.
    """

    def __init__(
        self,
        email: Optional[str] = None,
        api_key: Optional[str] = None,
        max_tries: int = 3,
    ):
        self.email = email
        self.api_key = api_key
        self.max_tries = max_tries

        # NCBI E-utilities require an email; an API key raises the rate limit
        if email:
            Entrez.email = email
        if api_key:
            Entrez.api_key = api_key
        Entrez.max_tries = max_tries

    @classmethod
    def from_config(cls, config: HomologyConfig) -> "NCBIGeneClient":
        return cls(
            email=config.endpoints.ncbi_email,
            api_key=config.endpoints.ncbi_api_key,
            max_tries=config.api.max_retries,
        )

    def _esummary(self, gene_ids: list[str]) -> dict[str, Any]:
        handle = Entrez.esummary(db="gene", id=",".join(gene_ids), retmode="json")
        try:
            return json.load(handle)
        finally:
            handle.close()

    async def gene_summaries(self, gene_ids: list[str]) -> list[dict[str, Any]]:
        """Return one esummary record per id, in the order NCBI lists them.

        Example:
        https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esummary.fcgi?db=gene&retmode=json&id=2475,56717

        Raises:
            urllib.error.URLError: On transport failure after Entrez retries
        """
        if not gene_ids:
            return []

        data = await asyncio.to_thread(self._esummary, gene_ids)
        result = data.get("result", {})

        summaries = []
        for uid in result.get("uids", []):
            summary = result.get(uid)
            if isinstance(summary, dict):
                summaries.append(summary)

        logger.debug(f"NCBI esummary returned {len(summaries)}/{len(gene_ids)} records")
        return summaries
