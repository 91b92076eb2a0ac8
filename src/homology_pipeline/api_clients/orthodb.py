"""OrthoDB SPARQL and gene detail client.

API docs: https://www.orthodb.org/?page=api
SPARQL endpoint docs: https://sparql.orthodb.org/
"""

import logging
from typing import Any

from homology_pipeline.api_clients.base import AsyncAPIClient
from homology_pipeline.config.schema import HomologyConfig

logger = logging.getLogger(__name__)


class OrthoDBClient:
    """Thin wrapper over the OrthoDB SPARQL endpoint and REST API."""

    def __init__(self, http: AsyncAPIClient, sparql_url: str, api_url: str):
        self.http = http
        self.sparql_url = sparql_url
        self.api_url = api_url

    @classmethod
    def from_config(cls, config: HomologyConfig, http: AsyncAPIClient) -> "OrthoDBClient":
        return cls(
            http=http,
            sparql_url=config.endpoints.sparql_url,
            api_url=config.endpoints.orthodb_api_url,
        )

    async def sparql(self, query: str) -> list[dict[str, Any]]:
        """Run a SPARQL query and return its result bindings.

        Example:
        https://sparql.orthodb.org/sparql?query=...&format=json
        """
        logger.debug(f"SPARQL query ({len(query)} chars) to {self.sparql_url}")
        data = await self.http.get_json(
            self.sparql_url,
            params={"query": query, "format": "json"},
        )
        return data.get("results", {}).get("bindings", [])

    async def gene_details(self, gene_id: str) -> dict[str, Any]:
        """Fetch the detail record of one OrthoDB gene.

        Returns an empty dict when OrthoDB has no record for the id.

        Example:
        https://data.orthodb.org/current/ogdetails?id=9606_0:001c7b
        """
        data = await self.http.get_json(
            f"{self.api_url}/ogdetails",
            params={"id": gene_id},
            allow_not_found=True,
        )
        if not data:
            return {}
        return data.get("data") or {}
