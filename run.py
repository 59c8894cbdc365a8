"""
應用程式啟動腳本
"""
import sys
import logging

import uvicorn

from movie_api.config import settings

# 設定日誌
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    try:
        # 驗證設定
        settings.validate_settings()
        logger.info("✅ 設定驗證成功")

        # 顯示服務資訊
        logger.info("🚀 啟動電影我的最愛 API 服務")
        logger.info(f"📡 Host: {settings.HOST}")
        logger.info(f"🔌 Port: {settings.PORT}")
        logger.info(f"💾 我的最愛檔案: {settings.FAVORITES_FILE}")
        logger.info(f"🐛 Debug 模式: {settings.DEBUG}")

        # 啟動服務器
        uvicorn.run(
            "movie_api.main:app",
            host=settings.HOST,
            port=settings.PORT,
            reload=settings.DEBUG,
            log_level=settings.LOG_LEVEL.lower()
        )

    except ValueError as e:
        logger.error(f"❌ 設定驗證失敗: {e}")
        logger.info("📝 請檢查 .env 檔案中的 TMDB_API_KEY 設定")
        sys.exit(1)
    except Exception as e:
        logger.error(f"❌ 啟動失敗: {e}")
        sys.exit(1)
