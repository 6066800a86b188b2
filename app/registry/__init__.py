"""
app/registry package marker.
"""

from app.registry.loader import OrganizationRegistry, get_organization_registry, load_organizations

__all__ = [
    "OrganizationRegistry",
    "get_organization_registry",
    "load_organizations",
]
