import re
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException, status

from homecare.db.session import SessionLocal

YMD_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Unicode hyphens/dashes/minus that sneak into pasted ids
_DASHES = dict.fromkeys(map(ord, "\u2010\u2011\u2012\u2013\u2014\u2015\u2212"), "-")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def parse_ymd(value: Optional[str]) -> Optional[date]:
    s = (value or "").strip()
    if not YMD_RE.match(s):
        return None
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        return None


def require_ymd(value: Optional[str], detail: str = "date must be YYYY-MM-DD") -> date:
    d = parse_ymd(value)
    if d is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    return d


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    s = (value or "").strip()
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid timestamp: {s}")


def clean(value: Optional[str]) -> str:
    return (value or "").strip()


def normalize_hyphen(value: Optional[str]) -> str:
    return clean(value).translate(_DASHES)
