"""OpenFoodFacts API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

SEARCH_FIELDS = (
    "code",
    "product_name",
    "nutrition_grades",
    "nutriments",
    "nova_group",
    "nutrient_levels",
    "ingredients_analysis_tags",
    "categories_tags",
    "countries_tags",
    "image_url",
    "image_front_url",
    "last_modified_t",
)


class OpenFoodFactsClient(Protocol):
    """Interface for OpenFoodFacts API interactions."""

    async def search_products(
        self, query: str, page_size: int = 20, timeout: float = 10
    ) -> object:
        """Search products by free text and return the decoded JSON body."""

    async def get_product(self, barcode: str, timeout: float = 8) -> object:
        """Fetch a product by barcode and return the decoded JSON body."""

    async def upload_product(
        self,
        fields: dict[str, str],
        image: bytes | None = None,
        timeout: float = 10,
    ) -> None:
        """Submit a product contribution as a multipart form."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed OpenFoodFacts client."""

    base_url: str
    api_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, base_url: str, api_url: str, user_agent: str
    ) -> "HttpxOpenFoodFactsClient":
        """Create an OpenFoodFacts client with a managed httpx session."""
        return cls(
            base_url=base_url,
            api_url=api_url,
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
        )

    async def search_products(
        self, query: str, page_size: int = 20, timeout: float = 10
    ) -> object:
        """Search products sorted by popularity."""
        response = await self.http_client.get(
            f"{self.api_url}/search",
            params={
                "search_terms": query,
                "fields": ",".join(SEARCH_FIELDS),
                "page_size": page_size,
                "sort_by": "popularity",
            },
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
        response.raise_for_status()
        return response.json()

    async def get_product(self, barcode: str, timeout: float = 8) -> object:
        """Fetch a single product by barcode."""
        response = await self.http_client.get(
            f"{self.base_url}/api/v0/product/{barcode}.json",
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
        response.raise_for_status()
        return response.json()

    async def upload_product(
        self,
        fields: dict[str, str],
        image: bytes | None = None,
        timeout: float = 10,
    ) -> None:
        """Post a product contribution as multipart form data."""
        parts: dict[str, tuple[str | None, str | bytes] | tuple[str, bytes, str]] = {
            name: (None, value) for name, value in fields.items()
        }
        if image is not None:
            parts["imgupload_front"] = ("front.jpg", image, "image/jpeg")
        response = await self.http_client.post(
            f"{self.base_url}/cgi/product_jqm2.pl",
            files=parts,
            timeout=timeout,
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
