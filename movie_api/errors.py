"""
錯誤類別定義

每個錯誤都帶有 HTTP status 與機器可讀的 code，HTTP 層統一轉成
{"error": code, "message": message} 回應。
"""
from typing import Any, Dict, Optional


class ApiError(Exception):
    """所有 API 錯誤的基底類別"""

    status: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self,
                 message: Optional[str] = None,
                 status: Optional[int] = None,
                 code: Optional[str] = None,
                 details: Any = None):
        self.message = message or self.default_message
        if status is not None:
            self.status = status
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class BadRequest(ApiError):
    status = 400
    code = "BAD_REQUEST"
    default_message = "Bad request"


class NotFound(ApiError):
    status = 404
    code = "NOT_FOUND"
    default_message = "Movie not found in favorites"


class AlreadyExists(ApiError):
    status = 409
    code = "ALREADY_EXISTS"
    default_message = "Movie is already in favorites"

    def __init__(self, message: Optional[str] = None, favorite: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.favorite = favorite

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["favorite"] = self.favorite
        return body


# ---------- 上游（TMDb）錯誤 ----------

class UpstreamUnavailable(ApiError):
    """上游呼叫失敗；status 沿用上游回傳的狀態碼"""

    status = 502
    code = "TMDB_API_ERROR"
    default_message = "An error occurred while fetching data from TMDB API"


class UpstreamAuthError(UpstreamUnavailable):
    status = 401
    code = "TMDB_UNAUTHORIZED"


class UpstreamNotFound(UpstreamUnavailable):
    status = 404
    code = "TMDB_NOT_FOUND"


class UpstreamRateLimited(UpstreamUnavailable):
    status = 429
    code = "TMDB_RATE_LIMITED"


class UpstreamServerError(UpstreamUnavailable):
    status = 502
    code = "TMDB_SERVER_ERROR"


class UpstreamBadResponse(UpstreamUnavailable):
    status = 502
    code = "TMDB_SERVER_ERROR"
    default_message = "Invalid response from TMDB API"


class UpstreamConnectionError(UpstreamUnavailable):
    status = 502
    code = "TMDB_UNAVAILABLE"
    default_message = "Could not reach TMDB API"


class UpstreamConfigError(ApiError):
    status = 500
    code = "TMDB_API_KEY_MISSING"
    default_message = "TMDB_API_KEY is not set in environment variables"


# ---------- 我的最愛儲存檔錯誤 ----------

class FavoritesCorrupted(ApiError):
    status = 500
    code = "FAVORITES_FILE_CORRUPTED"
    default_message = "Favorites JSON file is corrupted"


class FavoritesLoadError(ApiError):
    status = 500
    code = "FAVORITES_LOAD_ERROR"
    default_message = "Failed to load favorites JSON file"


class FavoritesSaveError(ApiError):
    status = 500
    code = "FAVORITES_SAVE_ERROR"
    default_message = "Failed to save favorites JSON file"


class InternalError(ApiError):
    pass


def error_for_status(status: int, message: Optional[str] = None, details: Any = None) -> UpstreamUnavailable:
    """依上游 HTTP 狀態碼挑選對應的錯誤類別"""
    if status == 401:
        error_cls = UpstreamAuthError
    elif status == 404:
        error_cls = UpstreamNotFound
    elif status == 429:
        error_cls = UpstreamRateLimited
    elif status >= 500:
        error_cls = UpstreamServerError
    else:
        error_cls = UpstreamUnavailable
    return error_cls(message, status=status, details=details)
