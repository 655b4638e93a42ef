"""
Supabase (PostgREST) client for the matching RPCs.

Matching capabilities, most specific first:
- search_lawyers_from_search: re-runs a stored, AI-classified search
- search_lawyers_advanced: full criteria, multi-location, keywords, urgency
- search_lawyers: reduced criteria, single location
- get_lawyers_list: every active/verified lawyer, unranked

Any of the first three may be missing on a given deployment.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import httpx

from lawyer_match.errors import RpcError
from lawyer_match.models import MatchCandidate

logger = logging.getLogger(__name__)


def _clean_list(values: Optional[Sequence[Any]]) -> tuple:
    if not values:
        return ()
    return tuple(str(v).strip() for v in values if v and str(v).strip())


def _as_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    return int(number) if number is not None else None


def parse_lawyer(item: Dict[str, Any]) -> MatchCandidate:
    """Convert an RPC row to MatchCandidate."""
    locations = _clean_list(item.get("ny_locations"))
    if not locations:
        locations = _clean_list([item.get("location")])

    practice_areas = _clean_list(item.get("practice_areas"))
    if not practice_areas:
        practice_areas = _clean_list([item.get("specialty")])

    return MatchCandidate(
        id=str(item.get("id") or ""),
        full_name=item.get("full_name"),
        avatar_url=item.get("avatar_url"),
        firm_name=item.get("firm_name"),
        hourly_rate=_as_float(item.get("hourly_rate")),
        experience_years=_as_int(item.get("experience_years")),
        rating=_as_float(item.get("rating")),
        total_reviews=_as_int(item.get("total_reviews")),
        languages=_clean_list(item.get("languages")),
        locations=locations,
        practice_areas=practice_areas,
        match_score=_as_float(item.get("match_score")),
    )


class SupabaseClient:
    """Client for the Supabase REST API."""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.url = (url or os.environ.get("SUPABASE_URL") or "").rstrip("/")
        if not self.url:
            raise ValueError("SUPABASE_URL not set")
        self.api_key = api_key or os.environ.get("SUPABASE_ANON_KEY")
        self.access_token = access_token or os.environ.get("SUPABASE_ACCESS_TOKEN")
        self.client = httpx.AsyncClient(
            base_url=f"{self.url}/rest/v1",
            timeout=timeout,
            transport=transport,
        )

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        token = self.access_token or self.api_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = await self.client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise RpcError(f"{method} {path}: {e}") from e
        if resp.is_error:
            raise self._parse_error(resp)
        return resp

    def _parse_error(self, resp: httpx.Response) -> RpcError:
        """PostgREST errors come back as {"code", "message", "details", "hint"}."""
        code = None
        message = resp.text or resp.reason_phrase
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = body.get("code")
            message = body.get("message") or message
        return RpcError(message, code=code, status_code=resp.status_code)

    async def rpc(self, function: str, params: Optional[Dict[str, Any]] = None) -> List[MatchCandidate]:
        """Call a set-returning RPC and parse its rows."""
        logger.info(f"Supabase rpc: {function}")
        resp = await self._request("POST", f"/rpc/{function}", json=params or {})
        data = resp.json() or []
        return [parse_lawyer(item) for item in data]

    async def search_from_search(self, search_id: str, limit: int) -> List[MatchCandidate]:
        return await self.rpc("search_lawyers_from_search", {
            "p_search_id": search_id,
            "p_limit": limit,
        })

    async def search_advanced(
        self,
        practice_area: Optional[str],
        location: Optional[str],
        locations: Optional[List[str]],
        min_rate: Optional[float],
        max_rate: Optional[float],
        specific_issue: Optional[str],
        languages: Optional[List[str]],
        keywords: Optional[List[str]],
        urgency: Optional[str],
        limit: int,
    ) -> List[MatchCandidate]:
        return await self.rpc("search_lawyers_advanced", {
            "p_practice_area": practice_area,
            "p_location": location,
            "p_locations": locations,
            "p_min_rate": min_rate,
            "p_max_rate": max_rate,
            "p_specific_issue": specific_issue,
            "p_languages": languages,
            "p_keywords": keywords,
            "p_urgency": urgency,
            "p_limit": limit,
        })

    async def search_basic(
        self,
        practice_area: Optional[str],
        location: Optional[str],
        min_rate: Optional[float],
        max_rate: Optional[float],
        specific_issue: Optional[str],
        languages: Optional[List[str]],
        limit: int,
    ) -> List[MatchCandidate]:
        return await self.rpc("search_lawyers", {
            "p_practice_area": practice_area,
            "p_location": location,
            "p_min_rate": min_rate,
            "p_max_rate": max_rate,
            "p_specific_issue": specific_issue,
            "p_languages": languages,
            "p_limit": limit,
        })

    async def list_lawyers(self) -> List[MatchCandidate]:
        return await self.rpc("get_lawyers_list")

    async def update_matched_lawyers(self, search_id: str, lawyer_ids: List[str]) -> None:
        """Store the matched lawyer ids on the client_search row."""
        logger.info(f"Saving {len(lawyer_ids)} matched lawyers for search {search_id}")
        await self._request(
            "PATCH",
            "/client_search",
            params={"id": f"eq.{search_id}"},
            json={"matched_lawyers": lawyer_ids},
        )

    async def close(self):
        await self.client.aclose()
