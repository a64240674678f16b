# backend/app/services/scheduling/__init__.py
"""
Multi-service booking scheduler for a single-bay shop.

catalog → rules → duration → generator + conflicts → availability
"""

from .config import SchedulingConfig, get_scheduling_config
from .catalog import Service, ServiceCatalog, ServiceCategory, get_service_catalog
from .rules import CompatibilityRuleSet, get_rule_set
from .availability import AvailabilityService, AvailableSlots, Slot, ValidationVerdict

__all__ = [
    "SchedulingConfig",
    "get_scheduling_config",
    "Service",
    "ServiceCatalog",
    "ServiceCategory",
    "get_service_catalog",
    "CompatibilityRuleSet",
    "get_rule_set",
    "AvailabilityService",
    "AvailableSlots",
    "Slot",
    "ValidationVerdict",
]
