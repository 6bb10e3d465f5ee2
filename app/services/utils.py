from __future__ import annotations

from datetime import datetime, date
import math
import re
import unicodedata


def norm_str(v):
    if v is None:
        return None
    s = str(v).strip()
    return s if s != "" else None


def to_date(v):
    """
    date | datetime | 'YYYY-MM-DD' | ISO datetime -> date (día calendario).
    Retorna None si no se puede interpretar.
    """
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        s = v.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(s).date()
        except ValueError:
            return None
    return None


def total_paginas(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def norm_lookup(s: str | None) -> str | None:
    if s is None:
        return None
    s = str(s).strip()
    if not s:
        return None
    s = s.upper()
    s = unicodedata.normalize("NFKD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = re.sub(r"\s+", " ", s).strip()
    return s


def norm_codigo(s: str | None) -> str | None:
    """'en desarrollo' -> 'EN_DESARROLLO'"""
    s = norm_lookup(s)
    if s is None:
        return None
    return s.replace(" ", "_")
