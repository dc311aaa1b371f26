"""
Base service classes for upstream API interactions
"""

import logging
from abc import ABC
from typing import Any

import requests

from analyzerr.exceptions import NotFoundError, ServiceUnavailableError
from analyzerr.models.filters import QueueFilters
from analyzerr.models.queue_item import QueueItem


class BaseService(ABC):
    """Thin JSON client with bounded timeouts and no retries."""

    service_name = "service"
    api_prefix = ""
    health_endpoint = ""

    def __init__(self, base_url: str | None, api_key: str | None, timeout: float = 5):
        """
        Initialize the service.

        Args:
            base_url: The base URL for the API
            api_key: The API key or token used for authentication
            timeout: Per-request timeout in seconds
        """
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)
        self.session = requests.Session()
        self.session.headers.update(self._default_headers())

    def _default_headers(self) -> dict[str, str]:
        return {"Accept": "application/json"}

    def is_ready(self) -> bool:
        """Whether both URL and credentials are configured"""
        return bool(self.base_url and self.api_key)

    def _build_url(self, endpoint: str) -> str:
        prefix = f"/{self.api_prefix}" if self.api_prefix else ""
        return f"{self.base_url}{prefix}/{endpoint.lstrip('/')}"

    def _make_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (without leading slash)
            params: Query parameters
            data: JSON data to send in request body

        Returns:
            Decoded JSON response

        Raises:
            NotFoundError: If the upstream answers 404
            ServiceUnavailableError: If the service is not configured or the request fails
        """
        if not self.is_ready():
            raise ServiceUnavailableError(f"{self.service_name} is not configured")

        url = self._build_url(endpoint)
        self.logger.debug(f"Making {method} request to {url}")

        try:
            response = self.session.request(method=method, url=url, json=data, params=params, timeout=self.timeout)
            if response.status_code == 404:
                raise NotFoundError(f"{self.service_name} resource not found: {endpoint}")
            response.raise_for_status()
            return response.json()

        except requests.exceptions.RequestException as e:
            self.logger.error(f"Request failed: {e}")
            raise ServiceUnavailableError(f"{self.service_name} request failed: {e}") from e

    def test_connection(self) -> bool:
        """
        Test the connection to the API.

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            self._make_request("GET", self.health_endpoint)
            self.logger.info("Connection test successful")
            return True
        except ServiceUnavailableError as e:
            self.logger.error(f"Connection test failed: {e.message}")
            return False


class ArrService(BaseService):
    """Shared behaviour for the Radarr/Sonarr v3 APIs."""

    api_prefix = "api/v3"
    health_endpoint = "system/status"
    queue_page_size = 1000

    def _default_headers(self) -> dict[str, str]:
        return {"X-Api-Key": self.api_key or "", "Content-Type": "application/json", "Accept": "application/json"}

    def get_queue(self, filters: QueueFilters | None = None) -> list[QueueItem]:
        """
        Get the current download queue.

        Args:
            filters: Optional status/protocol/download client filters

        Returns:
            Queue items, untagged
        """
        response = self._make_request("GET", "queue", params={"page": 1, "pageSize": self.queue_page_size})
        records = response.get("records", []) if isinstance(response, dict) else response or []

        items = [QueueItem.from_api(record) for record in records]
        if filters:
            items = [item for item in items if filters.matches(item)]

        self.logger.info(f"Found {len(items)} queue items")
        return items
