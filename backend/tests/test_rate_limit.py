"""
KVPad Backend — Rate Limit Middleware Tests
============================================

What we test:
    ✅ Writes beyond the window limit get 429 with Retry-After
    ✅ Reads are never limited
"""

import pytest
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from httpx import AsyncClient, ASGITransport

from kvpad.middleware.rate_limit import RateLimitMiddleware


def _app(max_requests: int) -> FastAPI:
    app = FastAPI()

    @app.api_route("/doc", methods=["GET", "POST"])
    async def doc():
        return PlainTextResponse("ok")

    app.add_middleware(RateLimitMiddleware, max_requests=max_requests, window=60)
    return app


class TestRateLimitMiddleware:

    @pytest.mark.asyncio
    async def test_writes_over_limit_rejected(self):
        transport = ASGITransport(app=_app(max_requests=2))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            assert (await client.post("/doc")).status_code == 200
            assert (await client.post("/doc")).status_code == 200

            response = await client.post("/doc")

        assert response.status_code == 429
        assert response.json()["error"] == "rate_limit_exceeded"
        assert 1 <= int(response.headers["retry-after"]) <= 61

    @pytest.mark.asyncio
    async def test_reads_not_limited(self):
        transport = ASGITransport(app=_app(max_requests=1))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await client.post("/doc")
            for _ in range(5):
                assert (await client.get("/doc")).status_code == 200
