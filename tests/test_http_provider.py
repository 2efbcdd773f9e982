"""
Tests for the HTTP record providers, using httpx.MockTransport.
"""

import json

import httpx
import pytest

from conftest import ALICE
from networth.models import Category
from networth.services.providers import (
    CATEGORY_PATHS,
    HttpRecordProvider,
    ProviderError,
    create_http_providers,
)


BASE_URL = "http://records.test/api"


def client_for(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


class TestHttpRecordProvider:
    """Tests for request shape and error mapping."""
    
    @pytest.mark.asyncio
    async def test_get_all_sends_bearer_token(self):
        seen = {}
        
        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=[{"id": "g1", "currentValue": "10"}])
        
        async with client_for(handler) as client:
            records = await HttpRecordProvider(Category.GOLD, client).get_all(ALICE)
        
        assert records == [{"id": "g1", "currentValue": "10"}]
        assert seen["path"] == "/api/gold-assets"
        assert seen["auth"] == "Bearer token-a"
    
    @pytest.mark.asyncio
    async def test_error_status_raises_provider_error(self):
        def handler(request):
            return httpx.Response(503, json={"message": "unavailable"})
        
        async with client_for(handler) as client:
            with pytest.raises(ProviderError) as exc_info:
                await HttpRecordProvider(Category.BONDS, client).get_all(ALICE)
        
        assert exc_info.value.status_code == 503
        assert exc_info.value.category == Category.BONDS
    
    @pytest.mark.asyncio
    async def test_non_list_body_raises(self):
        def handler(request):
            return httpx.Response(200, json={"items": []})
        
        async with client_for(handler) as client:
            with pytest.raises(ProviderError, match="expected a list"):
                await HttpRecordProvider(Category.LOANS, client).get_all(ALICE)
    
    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>oops</html>")
        
        async with client_for(handler) as client:
            with pytest.raises(ProviderError, match="not valid JSON"):
                await HttpRecordProvider(Category.LOANS, client).get_all(ALICE)
    
    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)
        
        async with client_for(handler) as client:
            with pytest.raises(ProviderError) as exc_info:
                await HttpRecordProvider(Category.STOCKS, client).get_all(ALICE)
        
        assert exc_info.value.status_code is None
    
    @pytest.mark.asyncio
    async def test_write_methods(self):
        calls = []
        
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content) if request.content else None
            calls.append((request.method, request.url.path, body))
            if request.method == "DELETE":
                return httpx.Response(204)
            return httpx.Response(200, json={"id": "c1", **(body or {})})
        
        async with client_for(handler) as client:
            provider = HttpRecordProvider(Category.CREDIT_CARDS, client)
            created = await provider.create(ALICE, {"cardName": "Gold"})
            updated = await provider.update(ALICE, "c1", {"usedAmount": "5"})
            deleted = await provider.delete(ALICE, "c1")
        
        assert created == {"id": "c1", "cardName": "Gold"}
        assert updated["usedAmount"] == "5"
        assert deleted is True
        assert calls == [
            ("POST", "/api/credit-cards", {"cardName": "Gold"}),
            ("PATCH", "/api/credit-cards/c1", {"usedAmount": "5"}),
            ("DELETE", "/api/credit-cards/c1", None),
        ]
    
    def test_one_provider_per_category(self):
        client = httpx.AsyncClient(base_url=BASE_URL)
        providers = create_http_providers(client)
        assert set(providers) == set(Category)
        assert set(CATEGORY_PATHS) == set(Category)
        assert providers[Category.MUTUAL_FUNDS].category == Category.MUTUAL_FUNDS
