from __future__ import annotations
import argparse
import asyncio
import json
from typing import List, Optional, Sequence

from anime_catalog.clients import bilibili
from anime_catalog.config import CatalogConfig
from anime_catalog.core import mixed
from anime_catalog.core.normalize import normalize_season_data
from anime_catalog.logging_config import configure_logging
from anime_catalog.models import CatalogItem

def _non_negative(raw: str) -> int:
    try: value = int(raw)
    except ValueError: raise argparse.ArgumentTypeError(f"not an integer: {raw!r}") from None
    if value < 0: raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return value

def build_parser() -> argparse.ArgumentParser:
    defaults = CatalogConfig()
    p = argparse.ArgumentParser(prog="anime-catalog", description="Bilibili anime catalog fetcher")
    p.add_argument("--json", action="store_true", help="print items as a JSON array")
    p.add_argument("--log-level", default="WARNING", help="DEBUG/INFO/WARNING/ERROR")
    p.add_argument("--personal-limit", type=_non_negative, default=defaults.personal_limit)
    p.add_argument("--popular-limit", type=_non_negative, default=defaults.popular_limit)
    p.add_argument("--chinese-limit", type=_non_negative, default=defaults.chinese_limit)
    p.add_argument("--rank-day", type=int, default=defaults.rank_day, choices=[3, 7])
    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("mixed", help="follow list, falling back to rankings").add_argument("user_id")
    sub.add_parser("user", help="follow list only").add_argument("user_id")
    sub.add_parser("popular", help="anime ranking")
    sub.add_parser("chinese", help="guochuang ranking")
    sub.add_parser("season", help="one season's detail").add_argument("season_id")
    return p

def _config(args: argparse.Namespace) -> CatalogConfig:
    return CatalogConfig(personal_limit=args.personal_limit, popular_limit=args.popular_limit,
                         chinese_limit=args.chinese_limit, rank_day=args.rank_day)

async def _season(season_id: str) -> List[CatalogItem]:
    item = normalize_season_data(await bilibili.fetch_season_info(season_id))
    return [item] if item else []

async def run_command(args: argparse.Namespace) -> List[CatalogItem]:
    cfg = _config(args)
    if args.command == "mixed": return await mixed.fetch_mixed_anime_data(args.user_id, cfg)
    if args.command == "user": return await mixed.fetch_user_anime_list(args.user_id, cfg)
    if args.command == "popular": return await mixed.fetch_popular_anime(cfg)
    if args.command == "chinese": return await mixed.fetch_chinese_anime(cfg)
    if args.command == "season": return await _season(args.season_id)
    raise ValueError(f"unknown command: {args.command}")

def format_item(it: CatalogItem) -> str:
    line = f"[{it.status}] {it.title} ({it.year}) - {it.episodes}"
    if it.progress: line += f", progress {it.progress}"
    if it.rating: line += f", rating {it.rating:g}"
    return line

def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    items = asyncio.run(run_command(args))
    if args.json:
        print(json.dumps([it.to_dict() for it in items], ensure_ascii=False, indent=2))
    else:
        for it in items: print(format_item(it))
        if not items: print("No items.")
    return 0 if items else 1

if __name__ == "__main__":
    raise SystemExit(main())
