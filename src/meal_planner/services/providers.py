"""Shared plumbing for the food database providers."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Protocol, TypeVar

import httpx

from meal_planner.domain.errors import ErrorKind, ProviderError
from meal_planner.domain.foods import CanonicalFoodItem
from meal_planner.services.cache import Cache

MIN_QUERY_LENGTH = 2

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class FoodProvider(Protocol):
    """Search interface implemented by each food database adapter."""

    name: str
    cache: Cache

    async def search(self, query: str) -> list[CanonicalFoodItem]:
        """Search the database; raises ``ProviderError`` on failure."""


def is_searchable(query: str) -> bool:
    """Return True when a query is long enough to hit the network."""
    return len(query.strip()) >= MIN_QUERY_LENGTH


async def call_provider(
    provider: str, func: Callable[[], Awaitable[T]], *, timeout: float
) -> T:
    """Await a provider call under a deadline, translating failures.

    Raises ``ProviderError`` with the matching ``ErrorKind``.
    """
    try:
        return await asyncio.wait_for(func(), timeout=timeout)
    except (TimeoutError, httpx.TimeoutException) as exc:
        raise ProviderError(
            ErrorKind.TIMEOUT, provider, f"{provider} timed out after {timeout}s"
        ) from exc
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code
        kind = (
            ErrorKind.NOT_FOUND
            if status_code == httpx.codes.NOT_FOUND
            else ErrorKind.PROVIDER_UNAVAILABLE
        )
        raise ProviderError(
            kind, provider, f"{provider} returned HTTP {status_code}", status_code
        ) from exc
    except httpx.HTTPError as exc:
        raise ProviderError(
            ErrorKind.PROVIDER_UNAVAILABLE, provider, f"{provider} unreachable: {exc}"
        ) from exc
    except ValueError as exc:
        raise ProviderError(
            ErrorKind.PARSE_FAILURE, provider, f"{provider} sent malformed JSON"
        ) from exc


def records_from(payload: object, key: str, provider: str) -> list[object]:
    """Return the list stored under ``key`` in a decoded JSON payload."""
    if not isinstance(payload, dict):
        raise ProviderError(
            ErrorKind.PARSE_FAILURE, provider, f"{provider} payload is not an object"
        )
    records = payload.get(key) or []
    if not isinstance(records, list):
        raise ProviderError(
            ErrorKind.PARSE_FAILURE, provider, f"{provider} '{key}' is not a list"
        )
    return records


def convert_batch(
    records: Iterable[object],
    convert: Callable[[dict], CanonicalFoodItem | None],
    provider: str,
) -> list[CanonicalFoodItem]:
    """Convert provider records, dropping the ones that cannot be normalized."""
    items: list[CanonicalFoodItem] = []
    for record in records:
        if not isinstance(record, dict):
            _logger.warning("Skipping %s record of type %s", provider, type(record))
            continue
        try:
            item = convert(record)
        except (KeyError, TypeError, ValueError) as exc:
            _logger.warning(
                "Skipping %s record %s: %s",
                provider,
                record.get("code") or record.get("fdcId"),
                exc,
            )
            continue
        if item is not None:
            items.append(item)
    return items
