"""Batched gene position queries via mygene.

Docs: https://docs.mygene.info/en/v3/
"""

import asyncio
import logging
from typing import Any

import mygene

from homology_pipeline.config.schema import HomologyConfig

logger = logging.getLogger(__name__)

MYGENE_FIELDS = "symbol,name,genomic_pos,entrezgene"


class MyGeneClient:
    """Runs MyGene.info full-text queries off the event loop.

    The mygene client is synchronous; each query runs in a worker thread so
    concurrent location batches do not block one another.
    """

    def __init__(self, url: str = "https://mygene.info/v3", page_size: int = 20):
        self.page_size = page_size
        self.mg = mygene.MyGeneInfo(url=url)

    @classmethod
    def from_config(cls, config: HomologyConfig) -> "MyGeneClient":
        return cls(
            url=config.endpoints.mygene_url,
            page_size=config.api.mygene_page_size,
        )

    async def query(self, q: str, taxid: str) -> list[dict[str, Any]]:
        """Run one query and return its hits.

        Example:
        https://mygene.info/v3/query?q=symbol:MTOR%20OR%20symbol:BRCA1&species=9606&fields=symbol,genomic_pos,name
        """
        size = max(self.page_size, q.count(" OR ") + 1)
        data = await asyncio.to_thread(
            self.mg.query,
            q,
            species=taxid,
            fields=MYGENE_FIELDS,
            size=size,
        )
        hits = data.get("hits", []) if isinstance(data, dict) else []
        logger.debug(f"MyGene.info returned {len(hits)} hits for taxid {taxid}")
        return hits
