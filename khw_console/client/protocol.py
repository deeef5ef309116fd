"""
KHW Backend API Protocol (Interface)
Defines contract consumed by the search controller and version compare coordinator
"""

from typing import Protocol

from khw_console.schemas.compare import ManualVersionDetail, ManualVersionInfo
from khw_console.schemas.search import ManualSearchHit, SearchQuery


class SimilarManualSearchAPIProtocol(Protocol):
    """
    Protocol for similar manual search

    RFP Reference: GET /api/v1/manuals/search
    """

    async def search(self, query: SearchQuery) -> list[ManualSearchHit]:
        """
        Search manuals similar to the query text

        Args:
            query: Search query (text + optional business_type/error_code filters)

        Returns:
            Hits ordered by similarity (highest first)

        Raises:
            ApiError: If the request fails
        """
        ...


class ManualVersionAPIProtocol(Protocol):
    """
    Protocol for manual version lookup

    RFP Reference: FR-14 (Manual version comparison)
    - GET /api/v1/manuals/{manual_id}/versions
    - GET /api/v1/manuals/{manual_id}/versions/{version}
    """

    async def list_versions(self, manual_id: str) -> list[ManualVersionInfo]:
        """
        List versions of a manual group

        Returns:
            Versions ordered newest-first

        Raises:
            ApiError: If the request fails
        """
        ...

    async def get_version(self, manual_id: str, version: str) -> ManualVersionDetail | None:
        """
        Get a specific version detail

        Returns:
            Version detail, or None if the backend returned no data

        Raises:
            ApiError: If the request fails
        """
        ...


class KHWApiClientProtocol(SimilarManualSearchAPIProtocol, ManualVersionAPIProtocol, Protocol):
    """Full backend client used by the console"""

    async def aclose(self) -> None:
        ...
