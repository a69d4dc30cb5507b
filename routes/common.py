# routes/common.py
"""各蓝图共用的小工具：id / 日期 / 数字解析。"""
from __future__ import annotations

from datetime import datetime, timezone


def parse_id(raw) -> int | None:
    """路由里的 id 统一用字符串接收，非法返回 None（由调用方回 400）。"""
    try:
        v = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return v if v > 0 else None


def parse_datetime(v) -> datetime | None:
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v
    if isinstance(v, (int, float)):
        # 前端 Date.now() 毫秒时间戳
        return datetime.fromtimestamp(v / 1000.0, tz=timezone.utc).replace(tzinfo=None)
    s = str(v).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    # 统一存成 naive UTC
    if dt.tzinfo is not None:
        dt = (dt - dt.utcoffset()).replace(tzinfo=None)
    return dt


def to_float(v, default=None):
    try:
        return float(v) if v is not None and v != "" else default
    except (TypeError, ValueError):
        return default
