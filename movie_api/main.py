"""
FastAPI 主程式
"""
import json
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from .config import Settings, settings as default_settings
from .errors import ApiError, InternalError
from .handlers.favorites_handler import FavoritesHandler
from .handlers.movies_handler import MoviesHandler
from .services.favorites_store import FavoritesStore
from .services.movie_details_cache import MovieDetailsCache
from .services.tmdb_client import TMDBClient

VERSION = "1.0.0"

# 設定日誌
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None,
               tmdb_client: Optional[TMDBClient] = None,
               cache: Optional[MovieDetailsCache] = None,
               store: Optional[FavoritesStore] = None) -> FastAPI:
    """建立 FastAPI 應用；每個應用擁有自己的快取與我的最愛儲存"""
    settings = settings if settings is not None else default_settings

    if tmdb_client is None:
        tmdb_client = TMDBClient(
            api_key=settings.TMDB_API_KEY,
            base_url=settings.TMDB_BASE_URL,
            timeout=settings.TMDB_TIMEOUT,
        )
    if cache is None:
        cache = MovieDetailsCache(tmdb_client, ttl_seconds=settings.MOVIE_DETAILS_CACHE_TTL)
    if store is None:
        store = FavoritesStore(settings.FAVORITES_FILE)

    app = FastAPI(
        title="Movie Favorites API",
        description="TMDb 電影搜尋代理與本地我的最愛清單",
        version=VERSION
    )
    app.state.settings = settings
    app.state.details_cache = cache
    app.state.favorites_store = store

    movies_handler = MoviesHandler(tmdb_client, cache, result_limit=settings.SEARCH_RESULT_LIMIT)
    favorites_handler = FavoritesHandler(store, cache)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"未預期的錯誤 {request.method} {request.url.path}: {exc}")
        error = InternalError()
        return JSONResponse(status_code=error.status, content=error.to_dict())

    @app.get("/health")
    def health_check():
        """健康檢查端點"""
        try:
            settings.validate_settings()
            return {
                "status": "healthy",
                "version": VERSION,
                "services": {
                    "tmdb": "configured",
                    "favorites_file": settings.FAVORITES_FILE
                }
            }
        except ValueError as e:
            return {
                "status": "unhealthy",
                "error": str(e)
            }

    # ---------- 電影 ----------

    @app.get("/api/movies/search")
    def search_movies(text: Optional[str] = None, year: Optional[str] = None):
        return movies_handler.search(text, year)

    @app.get("/api/movies/{movie_id}")
    def get_movie_details(movie_id: str):
        return movies_handler.get_details(movie_id)

    # ---------- 我的最愛 ----------

    @app.get("/api/favorites")
    def get_favorites():
        return favorites_handler.list_favorites()

    @app.post("/api/favorites")
    async def add_favorite(request: Request):
        # body 解析失敗時視為 None，交由驗證回傳 400
        body = await request.body()
        try:
            payload = json.loads(body) if body else None
        except ValueError:
            payload = None

        added = await run_in_threadpool(favorites_handler.add_favorite, payload)
        return JSONResponse(status_code=201, content=added)

    @app.delete("/api/favorites")
    def delete_all_favorites():
        return favorites_handler.delete_all()

    @app.delete("/api/favorites/{movie_id}")
    def delete_favorite(movie_id: str):
        return favorites_handler.delete_favorite(movie_id)

    return app


# 建立 FastAPI 應用
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"啟動服務器 - Host: {default_settings.HOST}, Port: {default_settings.PORT}")
    uvicorn.run(
        "movie_api.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG
    )
