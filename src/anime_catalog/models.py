from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Literal, Tuple

Status = Literal["watching", "completed", "planned"]
STATUSES: Tuple[str, ...] = ("watching", "completed", "planned")

UNKNOWN_TITLE = "未知标题"
UNKNOWN = "未知"
DEFAULT_COVER = "/assets/anime/default.webp"

@dataclass(frozen=True)
class CatalogItem:
    """One normalized anime entry, whatever endpoint it came from."""
    title: str = UNKNOWN_TITLE
    status: Status = "planned"
    rating: float = 0
    cover: str = DEFAULT_COVER
    description: str = ""
    episodes: str = "0 episodes"
    year: str = UNKNOWN
    genre: Tuple[str, ...] = (UNKNOWN,)
    studio: str = UNKNOWN
    link: str = ""
    progress: int = 0
    total_episodes: int = 0
    start_date: str = ""
    end_date: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title, "status": self.status, "rating": self.rating,
            "cover": self.cover, "description": self.description, "episodes": self.episodes,
            "year": self.year, "genre": list(self.genre), "studio": self.studio,
            "link": self.link, "progress": self.progress, "totalEpisodes": self.total_episodes,
            "startDate": self.start_date, "endDate": self.end_date,
        }
