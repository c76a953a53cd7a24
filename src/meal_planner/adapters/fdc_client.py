"""USDA FoodData Central API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class FdcClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(
        self,
        query: str,
        data_types: list[str],
        page_size: int = 20,
        timeout: float = 10,
    ) -> object:
        """Search foods by query and return the decoded JSON body."""

    async def get_food(self, fdc_id: int, timeout: float = 10) -> object:
        """Fetch a food by FDC id and return the decoded JSON body."""


@dataclass
class HttpxFdcClient(FdcClient):
    """HTTPX-backed FDC client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, api_key: str, base_url: str, user_agent: str | None = None
    ) -> "HttpxFdcClient":
        """Create an FDC client with a managed httpx session."""
        headers = {"Accept": "application/json"}
        if user_agent:
            headers["User-Agent"] = user_agent
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(headers=headers),
        )

    async def search_foods(
        self,
        query: str,
        data_types: list[str],
        page_size: int = 20,
        timeout: float = 10,
    ) -> object:
        """Search foods by query."""
        params: dict[str, str | int] = {
            "query": query,
            "pageSize": page_size,
            "pageNumber": 1,
            "sortBy": "dataType.keyword",
            "sortOrder": "asc",
            "api_key": self.api_key,
        }
        if data_types:
            params["dataType"] = ",".join(data_types)
        response = await self.http_client.get(
            f"{self.base_url}/foods/search",
            params=params,
            timeout=timeout,
        )
        response.raise_for_status()
        return response.json()

    async def get_food(self, fdc_id: int, timeout: float = 10) -> object:
        """Fetch a food by FDC id."""
        response = await self.http_client.get(
            f"{self.base_url}/food/{fdc_id}",
            params={"api_key": self.api_key},
            timeout=timeout,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
