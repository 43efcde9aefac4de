from __future__ import annotations

import asyncio

import httpx
import pytest

from anime_catalog.config import CatalogConfig
from anime_catalog.core import mixed
from anime_catalog.models import CatalogItem
from conftest import FakeBilibili, follow_envelope, rank_envelope

FOLLOW_PREFIX = {"1": "watching", "2": "completed", "3": "planned"}


def _run(api: FakeBilibili, fn, *args, **kwargs) -> list[CatalogItem]:
    async def go() -> list[CatalogItem]:
        async with api.client() as client:
            return await fn(*args, client=client, **kwargs)

    return asyncio.run(go())


def _serve_user(api: FakeBilibili, per_status: int = 5, broken: str | None = None) -> None:
    api.json("/x/space/acc/info", {"code": 0, "data": {"name": "tester"}})

    def follow(request: httpx.Request) -> httpx.Response:
        status = request.url.params["follow_status"]
        if status == broken:
            return httpx.Response(412, text="request rejected")
        return httpx.Response(200, json=follow_envelope(per_status, FOLLOW_PREFIX[status]))

    api.route("/pgc/web/follow/list", follow)


def _serve_rankings(api: FakeBilibili, anime: int = 25, guochuang: int = 25) -> None:
    def rank(request: httpx.Request) -> httpx.Response:
        if request.url.params["season_type"] == "1":
            return httpx.Response(200, json=rank_envelope(anime, "anime"))
        return httpx.Response(200, json=rank_envelope(guochuang, "guochuang"))

    api.route("/pgc/web/rank/list", rank)


def test_user_list_merges_statuses_in_order(api: FakeBilibili) -> None:
    _serve_user(api, per_status=2)
    items = _run(api, mixed.fetch_user_anime_list, "42")
    assert [i.status for i in items] == ["watching"] * 2 + ["completed"] * 2 + ["planned"] * 2
    assert items[0].title == "watching 0"
    assert items[1].progress == 2


def test_user_list_capped_at_fifty(api: FakeBilibili) -> None:
    _serve_user(api, per_status=30)
    items = _run(api, mixed.fetch_user_anime_list, "42")
    assert len(items) == 50
    assert items[-1].status == "completed"


def test_invalid_user_aborts_before_follow_lists(api: FakeBilibili) -> None:
    api.json("/x/space/acc/info", {"code": -404, "message": "啥都木有"})
    assert _run(api, mixed.fetch_user_anime_list, "0") == []
    assert api.paths() == ["/x/space/acc/info"]


@pytest.mark.parametrize("broken", ["1", "2", "3"])
def test_any_missing_status_bucket_empties_personal_list(api: FakeBilibili, broken: str) -> None:
    _serve_user(api, per_status=3, broken=broken)
    assert _run(api, mixed.fetch_user_anime_list, "42") == []


@pytest.mark.parametrize("broken", ["1", "3"])
def test_missing_bucket_triggers_fallback(api: FakeBilibili, broken: str) -> None:
    _serve_user(api, per_status=3, broken=broken)
    _serve_rankings(api)
    items = _run(api, mixed.fetch_mixed_anime_data, "42")
    assert items
    assert all(i.status == "planned" for i in items)
    assert all(i.title.startswith(("anime", "guochuang")) for i in items)


def test_fallback_caps_popular_and_regional(api: FakeBilibili) -> None:
    api.json("/x/space/acc/info", {"code": -404})
    _serve_rankings(api, anime=40, guochuang=40)
    items = _run(api, mixed.fetch_mixed_anime_data, "42")
    assert len(items) == 30
    assert [i.title.split()[0] for i in items] == ["anime"] * 20 + ["guochuang"] * 10


def test_fallback_keeps_one_source_when_other_fails(api: FakeBilibili) -> None:
    api.json("/x/space/acc/info", {"code": -404})

    def rank(request: httpx.Request) -> httpx.Response:
        if request.url.params["season_type"] == "2":
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, json=rank_envelope(3, "anime"))

    api.route("/pgc/web/rank/list", rank)
    items = _run(api, mixed.fetch_mixed_anime_data, "42")
    assert [i.title for i in items] == ["anime 0", "anime 1", "anime 2"]


def test_personal_list_preferred_when_available(api: FakeBilibili) -> None:
    _serve_user(api, per_status=1)
    _serve_rankings(api)
    items = _run(api, mixed.fetch_mixed_anime_data, "42")
    assert [i.status for i in items] == ["watching", "completed", "planned"]
    assert "/pgc/web/rank/list" not in api.paths()


def test_popular_capped_at_twenty(api: FakeBilibili) -> None:
    _serve_rankings(api, anime=25)
    assert len(_run(api, mixed.fetch_popular_anime)) == 20


def test_rank_day_and_caps_follow_config(api: FakeBilibili) -> None:
    _serve_rankings(api, guochuang=8)
    cfg = CatalogConfig(chinese_limit=5, rank_day=7)
    items = _run(api, mixed.fetch_chinese_anime, cfg)
    assert len(items) == 5
    assert api.requests[0].url.params["day"] == "7"


def test_everything_down_gives_empty(api: FakeBilibili) -> None:
    assert _run(api, mixed.fetch_mixed_anime_data, "42") == []


def test_unexpected_errors_are_swallowed(api: FakeBilibili, monkeypatch: pytest.MonkeyPatch) -> None:
    def explode(*_args, **_kwargs):
        raise RuntimeError("normalizer bug")

    _serve_user(api, per_status=1)
    monkeypatch.setattr(mixed, "normalize_follow_data", explode)
    monkeypatch.setattr(mixed, "normalize_rank_data", explode)
    _serve_rankings(api)
    assert _run(api, mixed.fetch_user_anime_list, "42") == []
    assert _run(api, mixed.fetch_mixed_anime_data, "42") == []


def test_millisecond_dates_keep_the_whole_ranking(api: FakeBilibili) -> None:
    envelope = rank_envelope(5, "anime")
    envelope["result"]["list"][0]["pub_date"] = 1696000000000
    api.json("/pgc/web/rank/list", envelope)
    items = _run(api, mixed.fetch_popular_anime)
    assert len(items) == 5
    assert items[0].year == "2023"
