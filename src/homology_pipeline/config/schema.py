"""Pydantic models for pipeline configuration."""

import hashlib
import json
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class EndpointConfig(BaseModel):
    """Base URLs of the upstream services."""

    sparql_url: str = Field(
        default="https://sparql.orthodb.org/sparql",
        description="OrthoDB SPARQL endpoint",
    )
    orthodb_api_url: str = Field(
        default="https://data.orthodb.org/current",
        description="OrthoDB REST API base (gene details)",
    )
    mygene_url: str = Field(
        default="https://mygene.info/v3",
        description="MyGene.info API base",
    )
    ncbi_email: Optional[str] = Field(
        default=None,
        description="Contact email sent with NCBI E-utilities requests",
    )
    ncbi_api_key: Optional[str] = Field(
        default=None,
        description="NCBI API key (raises the E-utilities rate limit)",
    )

    @field_validator("sparql_url", "orthodb_api_url", "mygene_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs so paths can be appended with '/'."""
        return v.rstrip("/")


class APIConfig(BaseModel):
    """Configuration for API clients."""

    max_retries: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Maximum retry attempts for failed requests",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds",
    )
    detail_max_concurrency: int = Field(
        default=3,
        ge=1,
        description="Maximum concurrent OrthoDB gene detail requests",
    )
    detail_min_interval_seconds: float = Field(
        default=0.333,
        ge=0.0,
        description="Minimum delay between gene detail request dispatches",
    )
    mygene_page_size: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Maximum hits requested from MyGene.info per batch",
    )


class HomologyConfig(BaseModel):
    """Main pipeline configuration."""

    endpoints: EndpointConfig = Field(
        default_factory=EndpointConfig,
        description="Upstream service endpoints",
    )
    api: APIConfig = Field(
        default_factory=APIConfig,
        description="API client configuration",
    )

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        The NCBI API key is excluded so hashes can be shared in logs.
        """
        config_dict = self.model_dump(mode="python")
        config_dict["endpoints"].pop("ncbi_api_key", None)
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
