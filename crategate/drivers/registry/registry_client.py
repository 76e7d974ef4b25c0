"""Read-only crates.io registry client using httpx.AsyncClient.

Queries are explicit fallible calls returning tagged results
(:class:`LookupStatus` OK / NOT_FOUND / TRANSPORT_ERROR); HTTP and network
problems are never raised to the caller. Only an explicit 404 means the
crate does not exist. Every other failure of the existence query makes the
registry state ambiguous and is reported as :class:`RegistryUnreachable`.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from crategate.drivers.registry.models import (
    CrateLookup,
    CrateResponse,
    LookupStatus,
    OwnersLookup,
    OwnersResponse,
)
from crategate.kernel.config.models import RegistryConfig
from crategate.kernel.domain.models import RegistryInfo, RegistryResult, RegistryUnreachable
from crategate.kernel.domain.version import Version
from crategate.kernel.logging import get_logger

logger = get_logger(__name__)

_STATUS_MESSAGES = {
    403: (
        "Access forbidden. This could be due to IP-based rate limiting or other "
        "restrictions by the registry."
    ),
    429: "Rate limit exceeded for the registry API. Please try again later.",
}


def _status_error(status_code: int) -> str:
    return _STATUS_MESSAGES.get(
        status_code, f"Unexpected response from the registry API. Status code: {status_code}"
    )


class RegistryClient:
    """Read-only client for the crates.io API.

    Parameters
    ----------
    base_url : str
        Registry base URL (default: https://crates.io).
    timeout : float
        Request timeout in seconds; exceeding it is a transport error.
    user_agent : str
        Sent with every request. crates.io rejects requests without one.

    Examples
    --------
    Basic usage::

        client = RegistryClient()
        result = await client.aquery("serde", username="dtolnay")
        await client.aclose()
    """

    def __init__(
        self,
        base_url: str = "https://crates.io",
        timeout: float = 10.0,
        user_agent: str = "crategate",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {"User-Agent": user_agent, "Accept": "application/json"}
        self._client: httpx.AsyncClient | None = None
        # Test hook: injected transport for httpx.MockTransport
        self._transport: httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_config(cls, config: RegistryConfig) -> RegistryClient:
        return cls(base_url=config.url, timeout=config.timeout, user_agent=config.user_agent)

    def _get_client(self) -> httpx.AsyncClient:
        """Lazily create the httpx client on first use."""
        if self._client is None:
            kwargs: dict[str, Any] = {
                "base_url": self._base_url,
                "timeout": self._timeout,
                "headers": self._headers,
                "follow_redirects": True,
            }
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def _aget(self, path: str) -> httpx.Response | str:
        """GET ``path``; return the response, or an error string on transport failure."""
        try:
            return await self._get_client().get(path)
        except httpx.TimeoutException:
            return f"request timed out after {self._timeout}s"
        except httpx.HTTPError as e:
            return f"failed to send request to the registry API: {e}"

    async def afetch_crate(self, name: str) -> CrateLookup:
        """Query whether ``name`` exists and which versions are published."""
        path = f"/api/v1/crates/{quote(name, safe='')}"
        response = await self._aget(path)
        if isinstance(response, str):
            logger.debug("Crate lookup for {name} failed: {error}", name=name, error=response)
            return CrateLookup(LookupStatus.TRANSPORT_ERROR, error=response)

        if response.status_code == 404:
            return CrateLookup(LookupStatus.NOT_FOUND)
        if response.status_code != 200:
            return CrateLookup(
                LookupStatus.TRANSPORT_ERROR, error=_status_error(response.status_code)
            )

        try:
            body = CrateResponse.model_validate_json(response.content)
        except PydanticValidationError as e:
            logger.debug("Invalid crate response for {name}: {error}", name=name, error=e)
            return CrateLookup(
                LookupStatus.TRANSPORT_ERROR,
                error="Invalid API response: 'versions' field is missing or not an array",
            )
        return CrateLookup(LookupStatus.OK, versions=tuple(v.num for v in body.versions))

    async def afetch_owners(self, name: str) -> OwnersLookup:
        """Query the user owners of ``name``."""
        path = f"/api/v1/crates/{quote(name, safe='')}/owner_user"
        response = await self._aget(path)
        if isinstance(response, str):
            return OwnersLookup(LookupStatus.TRANSPORT_ERROR, error=response)
        if response.status_code == 404:
            return OwnersLookup(LookupStatus.NOT_FOUND, error="owners not found")
        if response.status_code != 200:
            return OwnersLookup(
                LookupStatus.TRANSPORT_ERROR,
                error=f"Failed to get crate owners. {_status_error(response.status_code)}",
            )
        try:
            body = OwnersResponse.model_validate_json(response.content)
        except PydanticValidationError:
            return OwnersLookup(
                LookupStatus.TRANSPORT_ERROR,
                error="Invalid API response: 'users' field is missing or not an array",
            )
        return OwnersLookup(LookupStatus.OK, owners=tuple(u.login for u in body.users))

    async def aquery(self, name: str, username: str | None) -> RegistryResult:
        """Run the existence/version query and, if the crate exists, the ownership query.

        Parameters
        ----------
        name : str
            Crate name from the manifest
        username : str | None
            Registry login; without one ownership stays undetermined

        Returns
        -------
        RegistryInfo | RegistryUnreachable
            Unreachable only when the existence query failed for a reason
            other than an explicit "not found"
        """
        crate = await self.afetch_crate(name)
        if crate.status is LookupStatus.NOT_FOUND:
            logger.debug("Crate {name} does not exist on the registry", name=name)
            return RegistryInfo(exists=False)
        if crate.status is LookupStatus.TRANSPORT_ERROR:
            logger.warning("Registry unreachable for {name}: {error}", name=name, error=crate.error)
            return RegistryUnreachable(crate.error or "unknown error")

        versions = _sorted_versions(crate.versions)

        if not username:
            return RegistryInfo(
                exists=True,
                published_versions=versions,
                ownership_error="no registry username configured",
            )

        owners = await self.afetch_owners(name)
        if owners.status is not LookupStatus.OK:
            logger.debug(
                "Ownership query for {name} failed: {error}", name=name, error=owners.error
            )
            return RegistryInfo(
                exists=True,
                published_versions=versions,
                ownership_error=owners.error,
            )
        return RegistryInfo(
            exists=True,
            published_versions=versions,
            current_user_is_owner=username in owners.owners,
            owners=owners.owners,
        )

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _sorted_versions(raw: tuple[str, ...]) -> tuple[Version, ...]:
    parsed = []
    for text in raw:
        try:
            parsed.append(Version.parse(text))
        except ValueError:
            logger.debug("Skipping unparseable published version {text!r}", text=text)
    return tuple(sorted(parsed))
