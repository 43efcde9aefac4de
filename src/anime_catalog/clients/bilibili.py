from __future__ import annotations
import asyncio
from typing import Any, Dict, Optional

import httpx
import structlog

from anime_catalog.config import (
    BILIBILI_API_BASE, FOLLOW_HEADERS, PUBLIC_HEADERS, SEASON_TYPE_ANIME, SPACE_HEADERS,
)

log = structlog.get_logger(__name__)

# follow_status values understood by /pgc/web/follow/list
FOLLOW_STATUS = {"watching": 1, "completed": 2, "planned": 3}

async def _get_json(path: str, params: Dict[str, Any], headers: Dict[str, str],
                    client: Optional[httpx.AsyncClient] = None, what: str = "request"
                    ) -> Optional[Dict[str, Any]]:
    """GET one endpoint. Any failure is logged and returned as None."""
    if client is None:
        async with httpx.AsyncClient() as own:
            return await _get_json(path, params, headers, own, what)
    try:
        resp = await client.get(BILIBILI_API_BASE + path, params=params, headers=headers)
        if resp.is_error:
            log.warning("bilibili api error", what=what, status=resp.status_code, body=resp.text[:200])
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        log.warning("bilibili fetch failed", what=what, error=str(e))
        return None
    if not isinstance(data, dict):
        log.warning("bilibili fetch failed", what=what, error=f"unexpected body type {type(data).__name__}")
        return None
    return data

async def fetch_rank_list(season_type: int = SEASON_TYPE_ANIME, day: int = 3,
                          client: Optional[httpx.AsyncClient] = None) -> Optional[Dict[str, Any]]:
    """Ranking list. season_type 1 = anime, 2 = guochuang; day 3 or 7."""
    return await _get_json("/pgc/web/rank/list", {"season_type": season_type, "day": day},
                           PUBLIC_HEADERS, client, what="rank list")

async def fetch_season_info(season_id: str,
                            client: Optional[httpx.AsyncClient] = None) -> Optional[Dict[str, Any]]:
    return await _get_json("/pgc/view/web/season", {"season_id": season_id},
                           PUBLIC_HEADERS, client, what=f"season {season_id}")

def follow_cookie(user_id: str) -> str:
    # only the user id is known here; session cookies stay empty
    return f"DedeUserID={user_id}; buvid3=; SESSDATA=;"

async def fetch_user_follow_list(user_id: str, follow_status: int = 1, page_size: int = 20,
                                 page_num: int = 1, client: Optional[httpx.AsyncClient] = None
                                 ) -> Optional[Dict[str, Any]]:
    params = {"type": 1, "follow_status": follow_status, "ps": page_size, "pn": page_num}
    headers = dict(FOLLOW_HEADERS, Cookie=follow_cookie(user_id))
    data = await _get_json("/pgc/web/follow/list", params, headers, client,
                           what=f"follow list {follow_status}")
    if data is not None:
        log.debug("follow list response", user_id=user_id, follow_status=follow_status, code=data.get("code"))
    return data

async def fetch_user_all_follow_list(user_id: str, page_size: int = 50,
                                     client: Optional[httpx.AsyncClient] = None
                                     ) -> Dict[str, Optional[Dict[str, Any]]]:
    """The three per-status follow lists, fetched concurrently. Missing ones are None."""
    names = list(FOLLOW_STATUS)
    results = await asyncio.gather(
        *(fetch_user_follow_list(user_id, FOLLOW_STATUS[n], page_size, 1, client) for n in names),
        return_exceptions=True)
    out: Dict[str, Optional[Dict[str, Any]]] = {}
    for name, res in zip(names, results):
        if isinstance(res, BaseException):
            log.warning("follow list task failed", status=name, error=repr(res))
            res = None
        out[name] = res
    return out

async def fetch_user_info(user_id: str,
                          client: Optional[httpx.AsyncClient] = None) -> Optional[Dict[str, Any]]:
    return await _get_json("/x/space/acc/info", {"mid": user_id}, SPACE_HEADERS, client,
                           what="user info")
