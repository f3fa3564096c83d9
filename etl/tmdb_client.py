from __future__ import annotations
import asyncio
import time
from typing import Dict, Any, List
import httpx

TMDB_BASE = "https://api.themoviedb.org/3"
DETAIL_APPENDS = ("external_ids", "credits", "videos", "watch/providers")


class TMDBClient:
    def __init__(self, api_key: str, timeout: float = 15.0, rate_per_sec: float = 20.0):
        self.api_key = api_key
        self.timeout = timeout
        self.rate = rate_per_sec
        self._last = 0.0
        self._lock = asyncio.Lock()
        self._client = httpx.AsyncClient(timeout=self.timeout)

    async def _throttle(self):
        async with self._lock:
            dt = time.time() - self._last
            min_gap = 1.0 / max(self.rate, 1e-6)
            if dt < min_gap:
                await asyncio.sleep(min_gap - dt)
            self._last = time.time()

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        await self._throttle()
        q = dict(params)
        q["api_key"] = self.api_key
        r = await self._client.get(f"{TMDB_BASE}{path}", params=q)
        r.raise_for_status()
        return r.json()

    async def popular(self, page: int) -> List[Dict[str, Any]]:
        data = await self._get("/movie/popular", {"page": page})
        return data.get("results") or []

    async def details(self, movie_id: int) -> Dict[str, Any]:
        """
        Single movie record with ids, cast, videos and watch providers appended.
        """
        return await self._get(
            f"/movie/{movie_id}",
            {"language": "en-US", "append_to_response": ",".join(DETAIL_APPENDS)},
        )

    async def aclose(self):
        await self._client.aclose()
