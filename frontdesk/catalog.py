"""Static catalog of the plumbing services on offer."""

from __future__ import annotations

from typing import Optional

from frontdesk.models.session import ServiceType


ServiceEntry = dict[str, str]

_SERVICES: dict[str, ServiceEntry] = {
    ServiceType.EMERGENCY.value: {
        "name": "Emergency Plumbing",
        "description": "24/7 emergency service for burst pipes, major leaks, and sewage backups",
        "estimatedTime": "1-2 hours response time",
    },
    ServiceType.DRAIN.value: {
        "name": "Drain Cleaning",
        "description": "Professional drain cleaning and clog removal",
        "estimatedTime": "1 hour service call",
    },
    ServiceType.WATER_HEATER.value: {
        "name": "Water Heater Services",
        "description": "Repair, replacement, and installation of water heaters",
        "estimatedTime": "2-4 hours depending on service",
    },
    ServiceType.LEAK.value: {
        "name": "Leak Detection & Repair",
        "description": "Finding and fixing hidden leaks in your plumbing system",
        "estimatedTime": "1-2 hours",
    },
    ServiceType.INSTALLATION.value: {
        "name": "Fixture Installation",
        "description": "Installation of faucets, toilets, sinks, and other fixtures",
        "estimatedTime": "1-3 hours depending on fixture",
    },
    ServiceType.GENERAL.value: {
        "name": "General Plumbing",
        "description": "General plumbing maintenance and repairs",
        "estimatedTime": "1-2 hours",
    },
}


class ServiceCatalog:
    """Read-only lookup of service type -> description."""

    def get(self, key: str | None) -> Optional[ServiceEntry]:
        if not key:
            return None
        entry = _SERVICES.get(key)
        return dict(entry) if entry else None

    def keys(self) -> list[str]:
        return list(_SERVICES)

    def list(self) -> dict[str, ServiceEntry]:
        return {key: dict(entry) for key, entry in _SERVICES.items()}
