"""crates.io read-API client."""

from crategate.drivers.registry.models import CrateLookup, LookupStatus, OwnersLookup
from crategate.drivers.registry.registry_client import RegistryClient

__all__ = ["CrateLookup", "LookupStatus", "OwnersLookup", "RegistryClient"]
