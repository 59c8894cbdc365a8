"""
查詢參數與 request body 驗證工具
"""
import math
import re
from datetime import datetime
from typing import Any, Optional

from .errors import BadRequest

MIN_YEAR = 1000

# 只接受 ASCII 十進位數字（可含小數點與指數），不接受 "1_000" 或全形數字
NUMBER_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


def _to_integer(value: Any) -> Optional[int]:
    """把 int / 整數值 float / 數字字串轉成 int，無法轉換時回傳 None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        text = value.strip()
        if not NUMBER_PATTERN.fullmatch(text):
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        if math.isfinite(number) and number.is_integer():
            return int(number)
    return None


def parse_positive_int(value: Any, field: str = "movieId") -> int:
    """驗證並回傳正整數 ID"""
    number = _to_integer(value)
    if number is None or number <= 0:
        raise BadRequest(f"{field} must be a valid integer greater than 0")
    return number


def parse_year(value: Any) -> int:
    """年份必須為 1000 到今年之間的整數"""
    current_year = datetime.now().year
    number = _to_integer(value)
    if number is None or number < MIN_YEAR or number > current_year:
        raise BadRequest(f"year must be a valid integer between {MIN_YEAR} and {current_year}")
    return number


def require_text(value: Any, field: str = "text") -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise BadRequest(f'Missing or empty "{field}" query parameter')
    return text
