"""
TMDb API 用戶端
 - 以電影 ID 查詢詳細資料
 - 以文字（與選填年份）搜尋電影
"""
import logging
from typing import Any, Dict, Optional

import requests

from ..config import settings
from ..errors import UpstreamConfigError, UpstreamConnectionError, error_for_status

logger = logging.getLogger(__name__)


class TMDBClient:
    def __init__(self,
                 api_key: Optional[str] = None,
                 base_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.api_key = settings.TMDB_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.TMDB_BASE_URL).rstrip("/")
        self.timeout = settings.TMDB_TIMEOUT if timeout is None else timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _build_params(self, query_params: Dict[str, Any]) -> Dict[str, str]:
        if not self.api_key:
            raise UpstreamConfigError()

        params = {"api_key": self.api_key}
        for key, value in query_params.items():
            if value is None or value == "":
                continue
            params[key] = str(value)
        return params

    @staticmethod
    def _parse_body(resp: requests.Response) -> Any:
        """解析回應內容；無法解析時回傳 None 而不拋出錯誤"""
        try:
            return resp.json()
        except ValueError:
            return None

    def _get(self, path: str, query_params: Optional[Dict[str, Any]] = None) -> Any:
        params = self._build_params(query_params or {})
        url = f"{self.base_url}{path}"

        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"TMDb 連線失敗 path={path}: {e}")
            raise UpstreamConnectionError(f"Could not reach TMDB API: {e}") from e

        data = self._parse_body(resp)

        if not resp.ok:
            message = None
            if isinstance(data, dict):
                message = data.get("status_message") or data.get("message")
            if not message:
                message = f"TMDB API error: {resp.status_code} {resp.reason}"
            logger.warning(f"TMDb 回應錯誤 path={path}, status={resp.status_code}: {message}")
            raise error_for_status(resp.status_code, message, details=data)

        return data

    def search_movies(self, text: str, year: Optional[int] = None, page: int = 1) -> Any:
        """搜尋電影，回傳 TMDb 原始結果（含 results 與 total_pages）"""
        return self._get("/search/movie", {"query": text, "year": year, "page": page})

    def get_movie_details(self, movie_id: int) -> Any:
        """以 TMDb ID 取得電影原始詳細資料"""
        return self._get(f"/movie/{movie_id}")
