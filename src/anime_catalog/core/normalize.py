from __future__ import annotations
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from anime_catalog.config import BANGUMI_PLAY_URL
from anime_catalog.models import (
    DEFAULT_COVER, STATUSES, UNKNOWN, UNKNOWN_TITLE, CatalogItem,
)

_INT = re.compile(r"\d+")
_YEAR = re.compile(r"\d{4}")

def _first(d: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        v = d.get(k)
        if v not in (None, "", [], {}): return v
    return None

def _first_int(v: Any) -> Optional[int]:
    if isinstance(v, bool): return None
    if isinstance(v, (int, float)): return int(v)
    if isinstance(v, str):
        m = _INT.search(v)
        return int(m.group(0)) if m else None
    return None

# numeric dates above this are milliseconds, below it seconds
_MS_THRESHOLD = 1e11

def _year(pub_date: Any) -> str:
    if isinstance(pub_date, (int, float)) and not isinstance(pub_date, bool) and pub_date > 0:
        ts = pub_date / 1000 if pub_date > _MS_THRESHOLD else pub_date
        try: return str(datetime.fromtimestamp(ts, tz=timezone.utc).year)
        except (OverflowError, OSError, ValueError): return UNKNOWN
    if isinstance(pub_date, str):
        m = _YEAR.search(pub_date)
        if m: return m.group(0)
    return UNKNOWN

def _genres(styles: Any) -> Tuple[str, ...]:
    if not isinstance(styles, list): return (UNKNOWN,)
    names = [s.get("name") if isinstance(s, dict) else s for s in styles]
    return tuple(str(n) for n in names if n) or (UNKNOWN,)

def _studio(item: Mapping[str, Any]) -> str:
    new_ep = item.get("new_ep") or {}
    if isinstance(new_ep, dict) and new_ep.get("show_text"): return str(new_ep["show_text"])
    areas = item.get("areas") or []
    if isinstance(areas, list) and areas and isinstance(areas[0], dict) and areas[0].get("name"):
        return str(areas[0]["name"])
    return UNKNOWN

def _total_episodes(item: Mapping[str, Any]) -> int:
    total = _first_int(item.get("total_episode"))
    if total:
        return total
    new_ep = item.get("new_ep") or {}
    if isinstance(new_ep, dict):
        return _first_int(new_ep.get("index_show")) or 0
    return 0

def _rating(v: Any) -> float:
    if isinstance(v, dict): v = v.get("score")
    if isinstance(v, bool) or v in (None, ""): return 0
    try: return float(v)
    except (TypeError, ValueError): return 0

def _link(item: Mapping[str, Any]) -> str:
    if item.get("url"): return str(item["url"])
    sid = item.get("season_id")
    return BANGUMI_PLAY_URL.format(season_id=sid) if sid not in (None, "") else ""

def normalize_item(item: Mapping[str, Any], status: str, *,
                   rating: Any = None, progress: Any = None) -> CatalogItem:
    if status not in STATUSES:
        raise ValueError(f"unknown status {status!r}, expected one of {STATUSES}")
    total = _total_episodes(item)
    pub = item.get("pub_date")
    pub_str = pub if isinstance(pub, str) else ""
    return CatalogItem(
        title=str(_first(item, "title", "name") or UNKNOWN_TITLE),
        status=status,  # type: ignore[arg-type]
        rating=_rating(rating),
        cover=str(_first(item, "cover", "pic") or DEFAULT_COVER),
        description=str(_first(item, "desc", "evaluate") or ""),
        episodes=f"{total} episodes",
        year=_year(pub),
        genre=_genres(item.get("styles")),
        studio=_studio(item),
        link=_link(item),
        progress=_first_int(progress) or 0,
        total_episodes=total,
        start_date=pub_str,
        end_date=pub_str,
    )

def _records(envelope: Any) -> List[Dict[str, Any]]:
    if not isinstance(envelope, dict): return []
    result = envelope.get("result")
    rows = result.get("list") if isinstance(result, dict) else None
    if not isinstance(rows, list): return []
    return [r for r in rows if isinstance(r, dict)]

def normalize_rank_data(rank_data: Any) -> List[CatalogItem]:
    """Ranking entries carry neither progress nor a personal rating: they land as planned."""
    return [normalize_item(r, "planned") for r in _records(rank_data)]

def normalize_follow_data(follow_data: Any, status: str) -> List[CatalogItem]:
    if status not in STATUSES:
        raise ValueError(f"unknown status {status!r}, expected one of {STATUSES}")
    return [normalize_item(r, status, rating=r.get("rating"), progress=r.get("progress"))
            for r in _records(follow_data)]

def normalize_season_data(season_data: Any) -> Optional[CatalogItem]:
    """Season detail keeps the show under result, with dates under publish and an episode array."""
    if not isinstance(season_data, dict) or not isinstance(season_data.get("result"), dict):
        return None
    season = dict(season_data["result"])
    publish = season.get("publish") or {}
    if not season.get("pub_date") and isinstance(publish, dict) and publish.get("pub_time"):
        season["pub_date"] = publish["pub_time"]
    if not season.get("total_episode") and isinstance(season.get("episodes"), list):
        season["total_episode"] = len(season["episodes"])
    rating = season.get("rating")
    return normalize_item(season, "planned", rating=rating)
