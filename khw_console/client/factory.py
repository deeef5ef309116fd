"""
API Client Factory
Creates appropriate backend client based on configuration
"""

from khw_console.client.http import KHWApiClient
from khw_console.client.mock import MockKHWApiClient
from khw_console.client.protocol import KHWApiClientProtocol
from khw_console.core.config import settings
from khw_console.core.logging import get_logger

logger = get_logger(__name__)


def get_api_client() -> KHWApiClientProtocol:
    """
    Get backend client implementation based on configuration

    Returns:
        Backend client implementation

    Raises:
        ValueError: If api_client is not supported

    Usage:
        client = get_api_client()
        hits = await client.search(SearchQuery(text="로그인 오류"))
    """
    client_type = settings.api_client

    logger.info("api_client_factory", client_type=client_type, base_url=settings.api_url)

    if client_type == "mock":
        return MockKHWApiClient()

    if client_type == "http":
        return KHWApiClient()

    raise ValueError(
        f"Unsupported api_client: {client_type}. Supported clients: mock, http"
    )


# Singleton instance for dependency injection
_api_client: KHWApiClientProtocol | None = None


def get_api_client_instance() -> KHWApiClientProtocol:
    """
    Get singleton backend client instance

    Returns:
        Backend client instance
    """
    global _api_client
    if _api_client is None:
        _api_client = get_api_client()
    return _api_client
