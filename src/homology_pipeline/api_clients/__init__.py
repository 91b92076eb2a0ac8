"""Upstream service clients."""

from homology_pipeline.api_clients.base import AsyncAPIClient
from homology_pipeline.api_clients.mygene_client import MyGeneClient
from homology_pipeline.api_clients.ncbi import NCBIGeneClient
from homology_pipeline.api_clients.orthodb import OrthoDBClient
from homology_pipeline.api_clients.rate_limit import RateLimiter

__all__ = [
    "AsyncAPIClient",
    "MyGeneClient",
    "NCBIGeneClient",
    "OrthoDBClient",
    "RateLimiter",
]
