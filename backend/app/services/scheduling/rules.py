# backend/app/services/scheduling/rules.py
"""
Service compatibility rules.

A rule is an unordered pair of service ids that may not be booked together.
The whole rule set is data, loaded once alongside the catalog.
"""

from dataclasses import dataclass
from functools import lru_cache
from itertools import combinations
from typing import Iterable

from .catalog import ServiceCatalog, get_incompatible_pairs, get_service_catalog


@dataclass(frozen=True)
class CompatibilityResult:
    valid: bool
    reason: str | None = None
    pair: tuple[str, str] | None = None


class CompatibilityRuleSet:
    """Symmetric set of forbidden service pairs over a catalog."""

    def __init__(self, catalog: ServiceCatalog, pairs: Iterable[tuple[str, str]]):
        self._catalog = catalog
        rules: set[frozenset[str]] = set()
        for a, b in pairs:
            for service_id in (a, b):
                if service_id not in catalog:
                    raise ValueError(f"Compatibility rule references unknown service {service_id!r}")
            if a == b:
                raise ValueError(f"Service {a!r} cannot be incompatible with itself")
            rules.add(frozenset((a, b)))
        self._rules = frozenset(rules)

    def __len__(self) -> int:
        return len(self._rules)

    def conflicts(self, a: str, b: str) -> bool:
        return frozenset((a, b)) in self._rules

    def pairs(self) -> list[tuple[str, str]]:
        """Rules as (a, b) tuples, both members and the list in catalog order."""
        ordered = [
            tuple(sorted(rule, key=self._catalog.index_of))
            for rule in self._rules
        ]
        return sorted(ordered, key=lambda p: (self._catalog.index_of(p[0]), self._catalog.index_of(p[1])))

    def validate(self, service_ids: Iterable[str]) -> CompatibilityResult:
        """
        Check a selection against the rules.

        Raises UnknownService for ids missing from the catalog. When several
        pairs conflict, the first one in catalog order is reported so the
        message is stable for the same input.
        """
        services = self._catalog.resolve(service_ids)
        ordered = sorted(services, key=lambda s: self._catalog.index_of(s.id))

        for first, second in combinations(ordered, 2):
            if self.conflicts(first.id, second.id):
                return CompatibilityResult(
                    valid=False,
                    reason=f"{first.name} cannot be combined with {second.name}",
                    pair=(first.id, second.id),
                )

        return CompatibilityResult(valid=True)


@lru_cache
def get_rule_set() -> CompatibilityRuleSet:
    """Get the process-wide rule set (singleton)."""
    return CompatibilityRuleSet(get_service_catalog(), get_incompatible_pairs())
