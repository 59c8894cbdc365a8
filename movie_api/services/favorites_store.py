"""
我的最愛儲存服務

以單一 JSON 檔作為儲存：檔案內容為 MovieDetail 物件組成的陣列（2 格縮排、UTF-8）。
第一次操作時讀取檔案一次，之後只使用記憶體中的資料；每次變更後整份重寫檔案。
"""
import enum
import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict, List, Optional, Union

from ..config import settings
from ..errors import ApiError, BadRequest, FavoritesCorrupted, FavoritesLoadError, FavoritesSaveError
from ..validation import parse_positive_int
from .movie_details_cache import MovieDetail

logger = logging.getLogger(__name__)


class StoreState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


class FavoritesStore:
    def __init__(self, file_path: Optional[str] = None):
        self.file_path = file_path or settings.FAVORITES_FILE
        self.state = StoreState.UNINITIALIZED
        self._favorites: Dict[int, MovieDetail] = {}
        self._failure: Optional[ApiError] = None
        self._lock = threading.RLock()

    # ---------- 初始化 ----------

    def _ensure_initialized(self) -> None:
        if self.state is StoreState.READY:
            return

        with self._lock:
            if self.state is StoreState.READY:
                return
            if self.state is StoreState.FAILED:
                raise self._failure

            try:
                self._load()
            except FavoritesCorrupted as e:
                self.state = StoreState.FAILED
                self._failure = e
                raise
            self.state = StoreState.READY

    def _load(self) -> None:
        store_dir = os.path.dirname(self.file_path)
        try:
            if store_dir:
                os.makedirs(store_dir, exist_ok=True)

            if not os.path.exists(self.file_path):
                logger.info(f"找不到我的最愛檔案，建立空白檔案: {self.file_path}")
                self._write_text("[]")
                return

            with open(self.file_path, "r", encoding="utf-8") as f:
                content = f.read()
        except UnicodeDecodeError as e:
            logger.error(f"我的最愛檔案不是有效的 UTF-8: {e}")
            raise FavoritesCorrupted() from e
        except OSError as e:
            logger.error(f"載入我的最愛檔案失敗: {e}")
            raise FavoritesLoadError() from e

        if not content.strip():
            logger.info(f"我的最愛檔案為空，重設為 []: {self.file_path}")
            try:
                self._write_text("[]")
            except OSError as e:
                logger.error(f"重設我的最愛檔案失敗: {e}")
                raise FavoritesLoadError() from e
            return

        try:
            records = json.loads(content)
        except (ValueError, RecursionError) as e:
            logger.error(f"我的最愛檔案 JSON 格式錯誤: {e}")
            raise FavoritesCorrupted() from e

        if not isinstance(records, list):
            logger.error(f"我的最愛檔案最外層不是陣列: {type(records).__name__}")
            raise FavoritesCorrupted()

        for item in records:
            detail = MovieDetail.from_dict(item) if isinstance(item, dict) else None
            if detail is None:
                logger.warning(f"略過無效的我的最愛資料: {item!r}")
                continue
            self._favorites[detail.id] = detail

        logger.info(f"成功載入 {len(self._favorites)} 筆我的最愛")

    # ---------- 寫入 ----------

    def _write_text(self, text: str) -> None:
        """先寫入暫存檔再取代原檔"""
        store_dir = os.path.dirname(self.file_path) or "."
        fd, tmp_path = tempfile.mkstemp(dir=store_dir, prefix=".favorites-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, self.file_path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _save(self) -> None:
        data = [detail.to_dict() for detail in self._favorites.values()]
        try:
            self._write_text(json.dumps(data, ensure_ascii=False, indent=2))
        except OSError as e:
            logger.error(f"儲存我的最愛檔案失敗: {e}")
            raise FavoritesSaveError() from e

    # ---------- 對外操作 ----------

    def list(self) -> List[MovieDetail]:
        with self._lock:
            self._ensure_initialized()
            return list(self._favorites.values())

    def get(self, movie_id: Any) -> Optional[MovieDetail]:
        movie_id = parse_positive_int(movie_id, "movieId")
        with self._lock:
            self._ensure_initialized()
            return self._favorites.get(movie_id)

    def add(self, record: Union[MovieDetail, Dict[str, Any]]) -> MovieDetail:
        """新增（或覆蓋）一筆我的最愛；重複檢查由呼叫端負責"""
        with self._lock:
            self._ensure_initialized()

            if isinstance(record, dict):
                record = MovieDetail.from_dict(record)
            if not isinstance(record, MovieDetail) or record.id <= 0:
                raise BadRequest("Invalid movie object")

            self._favorites[record.id] = record
            self._save()
        logger.info(f"已加入我的最愛 movieId={record.id}: {record.name}")
        return record

    def remove(self, movie_id: Any) -> bool:
        movie_id = parse_positive_int(movie_id, "movieId")
        with self._lock:
            self._ensure_initialized()

            removed = self._favorites.pop(movie_id, None) is not None
            if removed:
                self._save()
        if removed:
            logger.info(f"已移除我的最愛 movieId={movie_id}")
        return removed

    def remove_all(self) -> bool:
        with self._lock:
            self._ensure_initialized()

            had_favorites = len(self._favorites) > 0
            self._favorites.clear()
            if had_favorites:
                self._save()
        if had_favorites:
            logger.info("已清空我的最愛")
        return had_favorites
