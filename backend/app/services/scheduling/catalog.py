# backend/app/services/scheduling/catalog.py
"""
Service catalog: the shop's bookable services and their durations.

Built once per process, either from the built-in data below or from the
JSON file pointed to by settings.catalog_path:

    {
      "services": [
        {"id": "...", "name": "...", "duration": 1.5, "category": "detailing"}
      ],
      "incompatible": [["id A", "id B"], ...]
    }

"duration" is in hours, a multiple of 0.25.
"""

import json
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator

from ...config import settings
from .errors import UnknownService


class ServiceCategory(str, Enum):
    COATING = "coating"
    PACKAGE = "package"
    DETAILING = "detailing"


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    duration_minutes: int
    category: ServiceCategory
    includes: tuple[str, ...] = ()

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValueError(f"Service {self.id!r} must have a positive duration")

    @property
    def duration_hours(self) -> float:
        return self.duration_minutes / 60


# Interior/Engine Detailing are 1.5h each:
# UV Graphene + Interior + Engine = 7h, Powder + Interior = 3.5h.
DEFAULT_SERVICES: tuple[Service, ...] = (
    Service("UV Graphene Ceramic Coating", "UV Graphene Ceramic Coating", 240, ServiceCategory.COATING),
    Service("Powder Coating", "Powder Coating", 120, ServiceCategory.COATING),
    Service("Moto/Oto VIP", "Moto/Oto VIP", 180, ServiceCategory.PACKAGE, ("interior", "engine")),
    Service("Full Moto/Oto SPA", "Full Moto/Oto SPA", 240, ServiceCategory.PACKAGE, ("interior", "engine", "premium")),
    Service("Modernized Interior Detailing", "Modernized Interior Detailing", 90, ServiceCategory.DETAILING, ("interior",)),
    Service("Modernized Engine Detailing", "Modernized Engine Detailing", 90, ServiceCategory.DETAILING, ("engine",)),
)

DEFAULT_INCOMPATIBLE: tuple[tuple[str, str], ...] = (
    # Coatings
    ("UV Graphene Ceramic Coating", "Powder Coating"),
    # Powder Coating vs detailing packages
    ("Powder Coating", "Moto/Oto VIP"),
    ("Powder Coating", "Full Moto/Oto SPA"),
    # Packages already include interior/engine work
    ("Moto/Oto VIP", "Full Moto/Oto SPA"),
    ("Moto/Oto VIP", "Modernized Interior Detailing"),
    ("Moto/Oto VIP", "Modernized Engine Detailing"),
    ("Full Moto/Oto SPA", "Modernized Interior Detailing"),
    ("Full Moto/Oto SPA", "Modernized Engine Detailing"),
)


class ServiceCatalog:
    """Immutable, ordered registry of services keyed by id."""

    def __init__(self, services: Iterable[Service]):
        self._services: tuple[Service, ...] = tuple(services)
        self._by_id: dict[str, Service] = {}
        self._index: dict[str, int] = {}
        for position, service in enumerate(self._services):
            if service.id in self._by_id:
                raise ValueError(f"Duplicate service id in catalog: {service.id!r}")
            self._by_id[service.id] = service
            self._index[service.id] = position
        if not self._services:
            raise ValueError("Service catalog is empty")

    def __iter__(self) -> Iterator[Service]:
        return iter(self._services)

    def __len__(self) -> int:
        return len(self._services)

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._by_id

    def get(self, service_id: str) -> Service:
        try:
            return self._by_id[service_id]
        except KeyError:
            raise UnknownService(service_id) from None

    def index_of(self, service_id: str) -> int:
        return self._index[service_id]

    def resolve(self, service_ids: Iterable[str]) -> tuple[Service, ...]:
        """
        Map ids to services, dropping repeated ids (first occurrence wins).

        Raises UnknownService for the first id missing from the catalog.
        """
        seen: set[str] = set()
        resolved: list[Service] = []
        for service_id in service_ids:
            if service_id in seen:
                continue
            seen.add(service_id)
            resolved.append(self.get(service_id))
        return tuple(resolved)


# ── Loading ──────────────────────────────────────────────────────────────


def parse_catalog_data(data: dict) -> tuple[list[Service], list[tuple[str, str]]]:
    """
    Parse catalog JSON data into services and incompatible pairs.

    Raises ValueError on malformed entries.
    """
    try:
        raw_services = data["services"]
    except (KeyError, TypeError):
        raise ValueError("Catalog data must contain a 'services' list") from None

    services = []
    for entry in raw_services:
        try:
            duration_min = round(float(entry["duration"]) * 60)
            services.append(Service(
                id=str(entry["id"]),
                name=str(entry.get("name") or entry["id"]),
                duration_minutes=duration_min,
                category=ServiceCategory(entry["category"]),
                includes=tuple(entry.get("includes", ())),
            ))
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed catalog entry {entry!r}: {e}") from e

    pairs = []
    for pair in data.get("incompatible", []):
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise ValueError(f"Incompatible rule must be a pair, got {pair!r}")
        pairs.append((str(pair[0]), str(pair[1])))

    return services, pairs


@lru_cache
def _load_catalog_data(path: str | None) -> tuple[tuple[Service, ...], tuple[tuple[str, str], ...]]:
    if not path:
        return DEFAULT_SERVICES, DEFAULT_INCOMPATIBLE
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    services, pairs = parse_catalog_data(data)
    return tuple(services), tuple(pairs)


@lru_cache
def get_service_catalog() -> ServiceCatalog:
    """Get the process-wide service catalog (singleton)."""
    services, _ = _load_catalog_data(settings.catalog_path)
    return ServiceCatalog(services)


def get_incompatible_pairs() -> tuple[tuple[str, str], ...]:
    _, pairs = _load_catalog_data(settings.catalog_path)
    return pairs
