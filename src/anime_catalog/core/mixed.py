from __future__ import annotations
import asyncio
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import httpx
import structlog

from anime_catalog.clients import bilibili
from anime_catalog.config import DEFAULT_CONFIG, SEASON_TYPE_ANIME, SEASON_TYPE_GUOCHUANG, CatalogConfig
from anime_catalog.core.normalize import normalize_follow_data, normalize_rank_data
from anime_catalog.models import STATUSES, CatalogItem

log = structlog.get_logger(__name__)

T = TypeVar("T")

async def _with_client(client: Optional[httpx.AsyncClient],
                       fn: Callable[[httpx.AsyncClient], Awaitable[T]]) -> T:
    if client is not None:
        return await fn(client)
    async with httpx.AsyncClient() as own:
        return await fn(own)

def _unwrap(name: str, res: Any) -> List[CatalogItem]:
    if isinstance(res, BaseException):
        log.warning("parallel fetch failed", source=name, error=repr(res))
        return []
    return res

async def _rank(season_type: int, limit: int, label: str, cfg: CatalogConfig,
                client: Optional[httpx.AsyncClient]) -> List[CatalogItem]:
    try:
        rank_data = await bilibili.fetch_rank_list(season_type, cfg.rank_day, client=client)
        if not rank_data:
            log.warning("rank list unavailable, returning empty list", category=label)
            return []
        items = normalize_rank_data(rank_data)
        log.info("rank list loaded", category=label, count=len(items))
        return items[:limit]
    except Exception:
        log.exception("rank list processing failed", category=label)
        return []

async def fetch_popular_anime(config: Optional[CatalogConfig] = None,
                              client: Optional[httpx.AsyncClient] = None) -> List[CatalogItem]:
    cfg = config or DEFAULT_CONFIG
    return await _rank(SEASON_TYPE_ANIME, cfg.popular_limit, "anime", cfg, client)

async def fetch_chinese_anime(config: Optional[CatalogConfig] = None,
                              client: Optional[httpx.AsyncClient] = None) -> List[CatalogItem]:
    cfg = config or DEFAULT_CONFIG
    return await _rank(SEASON_TYPE_GUOCHUANG, cfg.chinese_limit, "guochuang", cfg, client)

async def fetch_user_anime_list(user_id: str, config: Optional[CatalogConfig] = None,
                                client: Optional[httpx.AsyncClient] = None) -> List[CatalogItem]:
    """Personal follow list across all three statuses, or [] if any part is unavailable."""
    cfg = config or DEFAULT_CONFIG

    async def run(c: httpx.AsyncClient) -> List[CatalogItem]:
        log.info("loading follow list", user_id=user_id)
        user_info = await bilibili.fetch_user_info(user_id, client=c)
        if not user_info or user_info.get("code") != 0:
            log.warning("user missing or not accessible", user_id=user_id)
            return []
        name = (user_info.get("data") or {}).get("name") or "未知用户"
        log.info("user info loaded", user_id=user_id, name=name)

        lists = await bilibili.fetch_user_all_follow_list(user_id, cfg.follow_page_size, client=c)
        missing = [s for s in STATUSES if lists.get(s) is None]
        if missing:
            # login required, no follow records, endpoint locked down or changed: indistinguishable here
            log.warning("follow lists unavailable", user_id=user_id, missing=missing)
            return []

        per_status = {s: normalize_follow_data(lists[s], s) for s in STATUSES}
        log.info("follow lists loaded", user_id=user_id,
                 **{s: len(v) for s, v in per_status.items()})
        merged = [it for s in STATUSES for it in per_status[s]]
        return merged[:cfg.personal_limit]

    try:
        return await _with_client(client, run)
    except Exception:
        log.exception("follow list processing failed", user_id=user_id)
        return []

async def fetch_mixed_anime_data(user_id: str, config: Optional[CatalogConfig] = None,
                                 client: Optional[httpx.AsyncClient] = None) -> List[CatalogItem]:
    """Personal list first; popular anime plus guochuang rankings when it comes back empty."""
    cfg = config or DEFAULT_CONFIG

    async def run(c: httpx.AsyncClient) -> List[CatalogItem]:
        personal = await fetch_user_anime_list(user_id, cfg, client=c)
        if personal:
            log.info("using follow list", count=len(personal))
            return personal
        log.info("follow list empty, falling back to rankings")
        popular, chinese = await asyncio.gather(
            fetch_popular_anime(cfg, client=c), fetch_chinese_anime(cfg, client=c),
            return_exceptions=True)
        popular, chinese = _unwrap("anime", popular), _unwrap("guochuang", chinese)
        log.info("using rankings", anime=len(popular), guochuang=len(chinese),
                 total=len(popular) + len(chinese))
        return popular + chinese

    try:
        return await _with_client(client, run)
    except Exception:
        log.exception("mixed catalog failed", user_id=user_id)
        return []
