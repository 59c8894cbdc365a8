"""
我的最愛處理器
"""
import logging
from typing import Any, Dict

from ..errors import AlreadyExists, NotFound
from ..services.favorites_store import FavoritesStore
from ..services.movie_details_cache import MovieDetailsCache
from ..validation import parse_positive_int

logger = logging.getLogger(__name__)


class FavoritesHandler:
    def __init__(self, store: FavoritesStore, details_cache: MovieDetailsCache):
        self.store = store
        self.details_cache = details_cache

    def list_favorites(self) -> Dict[str, Any]:
        favorites = [detail.to_dict() for detail in self.store.list()]
        return {"results": favorites, "countResults": len(favorites)}

    def add_favorite(self, payload: Any) -> Dict[str, Any]:
        """加入我的最愛：先檢查是否已存在，再透過快取取得完整電影資料"""
        movie_id = payload.get("movieId") if isinstance(payload, dict) else None
        movie_id = parse_positive_int(movie_id, "movieId")

        existing = self.store.get(movie_id)
        if existing is not None:
            logger.info(f"電影已在我的最愛中 movieId={movie_id}")
            raise AlreadyExists(favorite=existing.to_dict())

        detail = self.details_cache.resolve(movie_id)
        return self.store.add(detail).to_dict()

    def delete_favorite(self, movie_id: Any) -> Dict[str, Any]:
        movie_id = parse_positive_int(movie_id, "movieId")
        if not self.store.remove(movie_id):
            raise NotFound("Movie not found in favorites")
        return {"status": "ok"}

    def delete_all(self) -> Dict[str, Any]:
        self.store.remove_all()
        return {"status": "ok"}
