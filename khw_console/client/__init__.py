"""
KHW Backend API Client Abstraction
Interface and implementations for search/version collaborators
"""

from khw_console.client.protocol import (
    KHWApiClientProtocol,
    ManualVersionAPIProtocol,
    SimilarManualSearchAPIProtocol,
)
from khw_console.client.factory import get_api_client

__all__ = [
    "KHWApiClientProtocol",
    "ManualVersionAPIProtocol",
    "SimilarManualSearchAPIProtocol",
    "get_api_client",
]
