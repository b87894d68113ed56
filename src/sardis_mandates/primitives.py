"""
Primitive registry client.

Mandate ``core`` payloads are typed by a primitive kind (``swap@1``,
``transfer@1``...). The kinds, and a JSON Schema for each, are published in
the mandate-specs repository:

    {base}/primitives/registry.json      index of kinds -> schemaPath
    {base}/{schemaPath}                  JSON Schema for one kind

Example usage:
    ```python
    async with PrimitiveRegistryClient() as registry:
        schema = await registry.fetch_schema("swap@1")
        core = await registry.build_core("swap@1", {"chainId": 1, "amountIn": "100"})
    ```
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

import httpx
from pydantic import ValidationError as PydanticValidationError

from .config import MandateSettings, get_settings
from .constants import REGISTRY_INDEX_PATH
from .exceptions import PrimitiveNotFound, RegistryError, ValidationError
from .models import PrimitiveCore
from .schemas import PrimitiveRegistry

logger = logging.getLogger(__name__)


@runtime_checkable
class PrimitiveRegistryLike(Protocol):
    """Local validation hook for ``core`` payloads, keyed by primitive kind."""

    def validate(self, core: PrimitiveCore) -> tuple[bool, Optional[str]]:
        """Return (ok, reason)."""
        ...

    def parse(self, core: PrimitiveCore) -> Any:
        """Return a typed payload; may raise on invalid input."""
        ...


class PrimitiveRegistryClient:
    """
    Read-only client for the mandate-specs primitive registry.

    Registry indexes are cached per base URL and schemas per (base URL, kind)
    for the lifetime of the client; call ``clear_cache()`` to refetch.

    Args:
        base_url: Specs base URL (default: ``MANDATE_SPECS_BASE_URL``)
        timeout: Request timeout in seconds (default: ``MANDATE_REGISTRY_TIMEOUT``)
        client: Externally owned httpx.AsyncClient; not closed by ``aclose()``
        settings: Settings to read defaults from instead of the process settings
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[MandateSettings] = None,
    ):
        settings = settings or get_settings()
        self._base_url = (base_url or settings.specs_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.registry_timeout
        self._client = client
        self._owns_client = client is None
        self._registries: dict[str, PrimitiveRegistry] = {}
        self._schemas: dict[tuple[str, str], dict[str, Any]] = {}

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                timeout=self._timeout,
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def _get_json(self, url: str) -> Any:
        client = await self._get_client()
        logger.debug(f"GET {url}")
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            raise RegistryError(f"Failed to fetch {url}: {e}", url=url) from e

        if response.status_code >= 400:
            raise RegistryError(
                f"Failed to fetch {url}: HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise RegistryError(f"Invalid JSON from {url}", url=url, status_code=response.status_code) from e

    def _resolve_base(self, base_url: Optional[str]) -> str:
        return (base_url or self._base_url).rstrip("/")

    async def fetch_registry(self, base_url: Optional[str] = None) -> PrimitiveRegistry:
        """Fetch (or return the cached) registry index."""
        base = self._resolve_base(base_url)
        cached = self._registries.get(base)
        if cached is not None:
            return cached

        url = f"{base}/{REGISTRY_INDEX_PATH}"
        data = await self._get_json(url)
        try:
            registry = PrimitiveRegistry.model_validate(data)
        except PydanticValidationError as e:
            raise RegistryError(f"Malformed registry index at {url}: {e}", url=url) from e

        self._registries[base] = registry
        logger.debug(f"Loaded {len(registry.primitives)} primitive kinds from {url}")
        return registry

    async def fetch_schema(self, kind: str, base_url: Optional[str] = None) -> dict[str, Any]:
        """Fetch the JSON Schema for a primitive kind.

        Raises:
            PrimitiveNotFound: kind is not listed in the registry
            RegistryError: index or schema could not be fetched
        """
        base = self._resolve_base(base_url)
        cached = self._schemas.get((base, kind))
        if cached is not None:
            return cached

        registry = await self.fetch_registry(base)
        entry = registry.find(kind)
        if entry is None:
            raise PrimitiveNotFound(kind, base_url=base)

        url = f"{base}/{entry.schema_path.lstrip('/')}"
        schema = await self._get_json(url)
        if not isinstance(schema, dict):
            raise RegistryError(f"Schema at {url} is not a JSON object", url=url)

        self._schemas[(base, kind)] = schema
        return schema

    async def build_core(self, kind: str, payload: Any, base_url: Optional[str] = None) -> PrimitiveCore:
        """Wrap a payload as a mandate ``core`` for a registered kind.

        The kind's schema is fetched (and cached) to confirm the kind exists;
        the payload itself is not validated against it.
        """
        if not isinstance(kind, str) or not kind.strip():
            raise ValidationError("core.kind is required", field="core.kind")
        if payload is None:
            raise ValidationError("core.payload is required", field="core.payload")
        await self.fetch_schema(kind, base_url)
        return PrimitiveCore(kind=kind, payload=payload)

    def clear_cache(self) -> None:
        self._registries.clear()
        self._schemas.clear()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client is not None:
            if not self._client.is_closed:
                await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PrimitiveRegistryClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


__all__ = ["PrimitiveRegistryLike", "PrimitiveRegistryClient"]
