"""Response models for the crates.io read API and tagged lookup results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class CrateVersionEntry(BaseModel):
    """One entry of ``versions`` in ``GET /api/v1/crates/{name}``."""

    model_config = ConfigDict(extra="ignore")

    num: str
    yanked: bool = False


class CrateResponse(BaseModel):
    """Body of ``GET /api/v1/crates/{name}``."""

    model_config = ConfigDict(extra="ignore")

    versions: list[CrateVersionEntry]


class OwnerUser(BaseModel):
    """One entry of ``users`` in ``GET /api/v1/crates/{name}/owner_user``."""

    model_config = ConfigDict(extra="ignore")

    login: str
    name: str | None = None


class OwnersResponse(BaseModel):
    """Body of ``GET /api/v1/crates/{name}/owner_user``."""

    model_config = ConfigDict(extra="ignore")

    users: list[OwnerUser]


class LookupStatus(StrEnum):
    """Outcome of a single registry query."""

    OK = "ok"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True, slots=True)
class CrateLookup:
    """Tagged result of the existence/version query.

    ``versions`` holds the raw version strings (including yanked ones,
    which can never be re-published) when ``status`` is OK.
    """

    status: LookupStatus
    versions: tuple[str, ...] = ()
    error: str | None = None


@dataclass(frozen=True, slots=True)
class OwnersLookup:
    """Tagged result of the ownership query."""

    status: LookupStatus
    owners: tuple[str, ...] = ()
    error: str | None = None
