"""
HTTP Record Providers

Talks to the per-category REST services. Every category exposes the same
resource layout under its own path:

    GET    /{path}          -> list of records for the bearer's user
    POST   /{path}          -> create
    PATCH  /{path}/{id}     -> update
    DELETE /{path}/{id}     -> delete

Timeouts are the only resilience applied here; there are no retries.
"""

from typing import Any, Optional

import httpx

from networth.config import ApiSettings, get_settings
from networth.models.records import Category, Identity
from networth.services.providers.interface import (
    ProviderError,
    RawRecord,
    WritableRecordProvider,
)


CATEGORY_PATHS: dict[Category, str] = {
    Category.GOLD: "gold-assets",
    Category.BONDS: "bond-assets",
    Category.STOCKS: "stock-assets",
    Category.PROPERTY: "properties",
    Category.MUTUAL_FUNDS: "mutual-funds",
    Category.BANK_ACCOUNTS: "bank-accounts",
    Category.LOANS: "loans",
    Category.CREDIT_CARDS: "credit-cards",
}


class HttpRecordProvider(WritableRecordProvider):
    """Record provider backed by one REST resource."""
    
    def __init__(
        self,
        category: Category,
        client: httpx.AsyncClient,
        path: Optional[str] = None,
    ):
        self.category = category
        self._client = client
        self._path = "/" + (path or CATEGORY_PATHS[category]).strip("/")
    
    def _headers(self, identity: Identity) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if identity.access_token:
            headers["Authorization"] = f"Bearer {identity.access_token}"
        return headers
    
    async def _request(
        self,
        method: str,
        identity: Identity,
        suffix: str = "",
        payload: Optional[RawRecord] = None,
    ) -> Any:
        try:
            resp = await self._client.request(
                method,
                self._path + suffix,
                headers=self._headers(identity),
                json=payload,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                self.category,
                f"{method} {self._path}{suffix} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                self.category,
                f"{method} {self._path}{suffix} failed: {e!r}",
            ) from e
        
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(self.category, "response is not valid JSON") from e
    
    async def get_all(self, identity: Identity) -> list[RawRecord]:
        body = await self._request("GET", identity)
        if not isinstance(body, list):
            raise ProviderError(
                self.category,
                f"expected a list of records, got {type(body).__name__}",
            )
        return body
    
    async def create(self, identity: Identity, payload: RawRecord) -> RawRecord:
        return await self._request("POST", identity, payload=payload) or {}
    
    async def update(
        self,
        identity: Identity,
        record_id: str,
        payload: RawRecord,
    ) -> RawRecord:
        return await self._request(
            "PATCH", identity, suffix=f"/{record_id}", payload=payload
        ) or {}
    
    async def delete(self, identity: Identity, record_id: str) -> bool:
        await self._request("DELETE", identity, suffix=f"/{record_id}")
        return True


def create_http_client(settings: Optional[ApiSettings] = None) -> httpx.AsyncClient:
    """Shared client for all category providers."""
    settings = settings or get_settings().api
    return httpx.AsyncClient(
        base_url=settings.base_url,
        timeout=settings.timeout_seconds,
        headers={"Content-Type": "application/json"},
    )


def create_http_providers(
    client: httpx.AsyncClient,
) -> dict[Category, HttpRecordProvider]:
    """One HTTP provider per category, all sharing one client."""
    return {
        category: HttpRecordProvider(category, client)
        for category in Category
    }
