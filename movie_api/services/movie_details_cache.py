"""
電影詳細資料快取

以電影 ID 為 key，把正規化後的 MovieDetail 暫存在記憶體中，
每筆資料在固定時間（預設 1 小時）後失效。過期資料只在下一次讀取時才移除，
沒有背景清理。
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import settings
from ..errors import UpstreamBadResponse
from ..validation import parse_positive_int
from .tmdb_client import TMDBClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovieDetail:
    id: int
    name: str = ""
    year: Optional[int] = None
    genre: Tuple[str, ...] = field(default_factory=tuple)
    imagePath: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "year": self.year,
            "genre": list(self.genre),
            "imagePath": self.imagePath,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["MovieDetail"]:
        """從儲存檔的物件還原；id 不是整數時回傳 None"""
        movie_id = data.get("id")
        if isinstance(movie_id, bool) or not isinstance(movie_id, int) or movie_id <= 0:
            return None

        name = data.get("name")
        year = data.get("year")
        genre = data.get("genre")
        image_path = data.get("imagePath")
        return cls(
            id=movie_id,
            name=name if isinstance(name, str) else "",
            year=year if isinstance(year, int) and not isinstance(year, bool) else None,
            genre=tuple(g for g in genre if isinstance(g, str) and g) if isinstance(genre, list) else (),
            imagePath=image_path if isinstance(image_path, str) else None,
        )


@dataclass
class CacheEntry:
    value: MovieDetail
    expires_at: float


def map_tmdb_movie_details(data: Dict[str, Any]) -> Dict[str, Any]:
    """把 TMDb 原始資料轉成 {id, name, year, genre, imagePath}；id 無效時為 None"""
    movie_id = data.get("id")
    if isinstance(movie_id, bool) or not isinstance(movie_id, (int, float)):
        movie_id = None
    elif isinstance(movie_id, float):
        movie_id = int(movie_id) if movie_id.is_integer() else None

    title = data.get("title")
    name = title if isinstance(title, str) else ""

    # release_date 前 4 碼為年份，例如 "1999-03-31"
    year = None
    release_date = data.get("release_date")
    if isinstance(release_date, str) and len(release_date) >= 4:
        try:
            year = int(release_date[:4])
        except ValueError:
            year = None

    genres: List[str] = []
    raw_genres = data.get("genres")
    if isinstance(raw_genres, list):
        for g in raw_genres:
            genre_name = g.get("name") if isinstance(g, dict) else None
            if isinstance(genre_name, str) and genre_name.strip():
                genres.append(genre_name.strip())

    poster_path = data.get("poster_path")
    image_path = poster_path if isinstance(poster_path, str) else None

    return {
        "id": movie_id,
        "name": name,
        "year": year,
        "genre": genres,
        "imagePath": image_path,
    }


class MovieDetailsCache:
    def __init__(self,
                 tmdb_client: TMDBClient,
                 ttl_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.tmdb_client = tmdb_client
        self.ttl_seconds = settings.MOVIE_DETAILS_CACHE_TTL if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: Dict[int, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _get_live(self, movie_id: int) -> Optional[MovieDetail]:
        entry = self._entries.get(movie_id)
        if entry is None:
            return None
        if self._clock() > entry.expires_at:
            # 過期資料在讀取時移除
            self._entries.pop(movie_id, None)
            logger.debug(f"快取過期，移除 movieId={movie_id}")
            return None
        return entry.value

    def _store(self, movie_id: int, detail: MovieDetail) -> None:
        self._entries[movie_id] = CacheEntry(value=detail, expires_at=self._clock() + self.ttl_seconds)

    def resolve(self, movie_id: Any) -> MovieDetail:
        """取得電影詳細資料，優先讀取快取，否則查詢 TMDb 後寫入快取"""
        movie_id = parse_positive_int(movie_id, "movieId")

        cached = self._get_live(movie_id)
        if cached is not None:
            logger.debug(f"從快取取得電影詳細資料 movieId={movie_id}")
            return cached

        data = self.tmdb_client.get_movie_details(movie_id)
        if not isinstance(data, dict):
            logger.error(f"TMDb 回傳非物件資料 movieId={movie_id}")
            raise UpstreamBadResponse("Invalid response from TMDB API")

        mapped = map_tmdb_movie_details(data)
        if mapped["id"] is None:
            logger.error(f"TMDb 回傳資料缺少有效 id movieId={movie_id}")
            raise UpstreamBadResponse("Invalid movie id in TMDB response")

        detail = MovieDetail(
            id=mapped["id"],
            name=mapped["name"],
            year=mapped["year"],
            genre=tuple(mapped["genre"]),
            imagePath=mapped["imagePath"],
        )
        self._store(movie_id, detail)
        logger.info(f"已快取電影詳細資料 movieId={movie_id}: {detail.name}")
        return detail
