from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from api.core.errors import UpstreamUnavailable

OMDB_BASE = "https://www.omdbapi.com/"

log = logging.getLogger(__name__)


def _clean(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.upper() == "N/A":
        return None
    return value


def parse_imdb_rating(raw: Any) -> Optional[float]:
    cleaned = _clean(raw)
    if cleaned is None:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


class OMDbClient:
    """
    Looks up IMDb and Rotten Tomatoes ratings by IMDb id.
    """

    def __init__(self, api_key: str, timeout: float = 15.0) -> None:
        self.api_key = api_key
        self._client = httpx.AsyncClient(timeout=timeout)

    async def _get(self, params: Dict[str, Any]) -> Dict[str, Any]:
        q = dict(params)
        q["apikey"] = self.api_key
        resp = await self._client.get(OMDB_BASE, params=q)
        resp.raise_for_status()
        payload = resp.json()
        if str(payload.get("Response", "True")).lower() == "false":
            raise UpstreamUnavailable(payload.get("Error") or "Unknown error")
        return payload

    async def ratings(self, imdb_id: str) -> Dict[str, Any]:
        payload = await self._get({"i": imdb_id})
        rotten = None
        for entry in payload.get("Ratings") or []:
            if entry.get("Source") == "Rotten Tomatoes":
                rotten = _clean(entry.get("Value"))
                break
        return {
            "imdb_rating": parse_imdb_rating(payload.get("imdbRating")),
            "rotten_tomatoes": rotten,
        }

    async def aclose(self) -> None:
        await self._client.aclose()
