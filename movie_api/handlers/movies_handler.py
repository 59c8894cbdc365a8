"""
電影搜尋與詳細資料處理器
"""
import logging
from typing import Any, Dict, List, Optional

from ..config import settings
from ..errors import UpstreamBadResponse
from ..services.movie_details_cache import MovieDetailsCache
from ..services.tmdb_client import TMDBClient
from ..validation import parse_positive_int, parse_year, require_text

logger = logging.getLogger(__name__)


class MoviesHandler:
    def __init__(self,
                 tmdb_client: TMDBClient,
                 details_cache: MovieDetailsCache,
                 result_limit: Optional[int] = None):
        self.tmdb_client = tmdb_client
        self.details_cache = details_cache
        self.result_limit = settings.SEARCH_RESULT_LIMIT if result_limit is None else result_limit

    def search(self, text: Any, year: Any = None) -> Dict[str, Any]:
        """依文字（與選填年份）搜尋電影，逐頁收集直到達到上限或沒有更多結果"""
        text = require_text(text, "text")

        year_num = None
        if isinstance(year, str):
            year = year.strip()
        if year is not None and year != "":
            year_num = parse_year(year)

        collected: List[Dict[str, Any]] = []
        page = 1
        while len(collected) < self.result_limit:
            data = self.tmdb_client.search_movies(text, year_num, page)
            if not isinstance(data, dict) or not isinstance(data.get("results"), list):
                logger.error(f"TMDb 搜尋回應格式錯誤 text={text!r}, page={page}")
                raise UpstreamBadResponse("Invalid response from TMDB API")

            results = data["results"]
            collected.extend(results)
            if not results:
                break

            total_pages = data.get("total_pages")
            if isinstance(total_pages, bool) or not isinstance(total_pages, (int, float)) or total_pages <= 0:
                break
            if page >= total_pages:
                break
            page += 1

        movies = [
            {
                "id": movie.get("id"),
                "title": movie.get("title"),
                "release_date": movie.get("release_date"),
            }
            for movie in collected[:self.result_limit]
            if isinstance(movie, dict)
        ]
        logger.info(f"搜尋 {text!r} (year={year_num}) 共 {len(movies)} 筆結果，讀取 {page} 頁")
        return {"results": movies, "countResults": len(movies)}

    def get_details(self, movie_id: Any) -> Dict[str, Any]:
        movie_id = parse_positive_int(movie_id, "movieId")
        return self.details_cache.resolve(movie_id).to_dict()
