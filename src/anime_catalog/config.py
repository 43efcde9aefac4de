from __future__ import annotations
from dataclasses import dataclass
from typing import Dict

BILIBILI_API_BASE = "https://api.bilibili.com"
BANGUMI_PLAY_URL = "https://www.bilibili.com/bangumi/play/ss{season_id}"

_UA_SHORT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
_UA_FULL = _UA_SHORT + " (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"

PUBLIC_HEADERS: Dict[str, str] = {"User-Agent": _UA_SHORT, "Referer": "https://www.bilibili.com/"}
SPACE_HEADERS: Dict[str, str] = {"User-Agent": _UA_SHORT, "Referer": "https://space.bilibili.com/"}
FOLLOW_HEADERS: Dict[str, str] = {
    "User-Agent": _UA_FULL,
    "Referer": "https://www.bilibili.com/",
    "Origin": "https://www.bilibili.com",
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
}

SEASON_TYPE_ANIME = 1
SEASON_TYPE_GUOCHUANG = 2

@dataclass(frozen=True)
class CatalogConfig:
    follow_page_size: int = 50
    personal_limit: int = 50
    popular_limit: int = 20
    chinese_limit: int = 10
    rank_day: int = 3

DEFAULT_CONFIG = CatalogConfig()
