"""
應用程式設定檔
"""
import os
from dotenv import load_dotenv

# 載入環境變數
load_dotenv()

class Settings:
    # TMDb API 設定
    TMDB_API_KEY: str = os.getenv("TMDB_API_KEY", "")
    TMDB_BASE_URL: str = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")
    TMDB_TIMEOUT: float = float(os.getenv("TMDB_TIMEOUT", "10"))

    # 我的最愛儲存檔
    FAVORITES_FILE: str = os.getenv("FAVORITES_FILE", os.path.join("data", "favorites.json"))

    # 電影詳細資料快取（秒）
    MOVIE_DETAILS_CACHE_TTL: int = int(os.getenv("MOVIE_DETAILS_CACHE_TTL", "3600"))

    # 搜尋結果上限
    SEARCH_RESULT_LIMIT: int = int(os.getenv("SEARCH_RESULT_LIMIT", "50"))

    # 應用程式設定
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    def validate_settings(self):
        """驗證必要的設定是否已填入"""
        missing = []

        if not self.TMDB_API_KEY:
            missing.append("TMDB_API_KEY")

        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

        return True

# 建立全域設定實例
settings = Settings()
