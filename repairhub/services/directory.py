"""
Region/City Directory: where the signup form gets its region and city lists.

``StaticRegionDirectory`` serves the bundled map. ``RemoteRegionDirectory``
fetches ``/api/regions`` and keeps serving the last good map (or the bundled
one) from its synchronous snapshot.
"""

import logging
from typing import Protocol

import httpx
from pydantic import ValidationError

from repairhub.schemas import RegionEntry

logger = logging.getLogger(__name__)

REGIONS_ENDPOINT = "/api/regions"

DEFAULT_REGION_CITY_MAP: dict[str, list[str]] = {
    "Addis Ababa": ["Addis Ababa"],
    "Oromia": ["Adama", "Dire Dawa", "Jimma", "Shashemene"],
    "Amhara": ["Bahir Dar", "Gondar", "Dessie", "Debre Markos"],
    "Tigray": ["Mekelle", "Shire", "Axum", "Adigrat"],
    "Sidama": ["Hawassa"],
    "Somali": ["Jigjiga", "Degehabur", "Gode"],
    "Benishangul-Gumuz": ["Assosa", "Metekel", "Kamashi"],
    "Gambella": ["Gambella", "Abobo", "Itang"],
    "Afar": ["Semera", "Dubti", "Logiya"],
    "Southern Nations, Nationalities, and Peoples' Region (SNNPR)": ["Arba Minch", "Jinka", "Wolayta Sodo"],
}


class DirectoryError(Exception):
    """Raised when the region list cannot be loaded or understood."""


class RegionDirectory(Protocol):
    def get_region_city_map(self) -> dict[str, list[str]]: ...

    async def fetch_region_city_map(self) -> dict[str, list[str]]: ...


def _copy(mapping: dict[str, list[str]]) -> dict[str, list[str]]:
    return {region: list(cities) for region, cities in mapping.items()}


class StaticRegionDirectory:
    def __init__(self, mapping: dict[str, list[str]] | None = None):
        self._mapping = _copy(DEFAULT_REGION_CITY_MAP if mapping is None else mapping)

    def get_region_city_map(self) -> dict[str, list[str]]:
        return _copy(self._mapping)

    async def fetch_region_city_map(self) -> dict[str, list[str]]:
        return _copy(self._mapping)


def parse_regions_payload(payload) -> dict[str, list[str]]:
    """
    Accept either ``{"Region": ["City", ...]}`` or
    ``[{"name": "Region", "cities": [...]}, ...]``.
    """
    if isinstance(payload, dict):
        mapping = {}
        for region, cities in payload.items():
            if not isinstance(cities, list) or not all(isinstance(c, str) for c in cities):
                raise DirectoryError(f"Cities for region {region!r} must be a list of strings")
            mapping[str(region)] = list(cities)
        return mapping
    if isinstance(payload, list):
        try:
            entries = [RegionEntry.model_validate(item) for item in payload]
        except ValidationError as e:
            raise DirectoryError(f"Malformed region entry: {e}") from e
        return {entry.name: entry.cities for entry in entries}
    raise DirectoryError(f"Unexpected regions payload type: {type(payload).__name__}")


class RemoteRegionDirectory:
    def __init__(self, http: httpx.AsyncClient, fallback: dict[str, list[str]] | None = None):
        self._http = http
        self._mapping = _copy(DEFAULT_REGION_CITY_MAP if fallback is None else fallback)

    def get_region_city_map(self) -> dict[str, list[str]]:
        return _copy(self._mapping)

    async def fetch_region_city_map(self) -> dict[str, list[str]]:
        try:
            resp = await self._http.get(REGIONS_ENDPOINT)
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Failed to fetch regions: %s", e)
            raise DirectoryError(f"Failed to fetch regions: {e}") from e

        mapping = parse_regions_payload(payload)
        self._mapping = mapping
        logger.info("Loaded %d regions from API", len(mapping))
        return _copy(mapping)
