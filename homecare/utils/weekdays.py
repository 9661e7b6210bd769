"""Day-of-week rules for POC duties.

A duty's ``days_of_week`` column has been written by several generations of
the care-plan editor, so it arrives in one of these shapes::

    None / "" / [] / {}              no restriction
    ["Mon", "wed", "F", 5]           list of weekday tokens or indices
    {"0": True, "sat": True}         map of weekday -> literal True
    "mon,wed" / "M W F"              delimited string
    '["mon", "fri"]'                 any of the above as a JSON string

``parse_day_constraint`` turns the raw value into a ``DayConstraint`` once;
matching and the presence check only look at the parsed form.

Weekday indices follow the Sunday = 0 convention.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, FrozenSet, Optional
from zoneinfo import ZoneInfo

from homecare.core.config import settings

logger = logging.getLogger(__name__)

DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")

_YMD_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SPLIT_RE = re.compile(r"[,;|/\s]+")


def _build_token_map():
    tokens = {}
    for idx, name in enumerate(DAY_NAMES):
        for token in (name, name[:3], name[0], str(idx)):
            tokens.setdefault(token, set()).add(idx)
    return {token: frozenset(days) for token, days in tokens.items()}


# "s" and "t" are ambiguous and select both candidate days
WEEKDAY_TOKENS = _build_token_map()


class ConstraintKind(str, Enum):
    UNCONSTRAINED = "UNCONSTRAINED"
    WEEKDAYS = "WEEKDAYS"
    MALFORMED = "MALFORMED"


@dataclass(frozen=True)
class DayConstraint:
    kind: ConstraintKind
    days: FrozenSet[int] = field(default_factory=frozenset)
    raw: Any = None

    @property
    def is_present(self) -> bool:
        return self.kind != ConstraintKind.UNCONSTRAINED

    def applies_to(self, weekday: Optional[int], fail_open: bool = True) -> bool:
        if self.kind == ConstraintKind.UNCONSTRAINED:
            return True
        if self.kind == ConstraintKind.MALFORMED:
            return fail_open
        if weekday is None:
            return True
        return weekday in self.days


UNCONSTRAINED = DayConstraint(ConstraintKind.UNCONSTRAINED)


def reference_tz(tz_name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(tz_name or settings.REFERENCE_TIMEZONE)


def normalize_date(value: Any, tz_name: Optional[str] = None) -> Optional[date]:
    """Return the civil date of ``value`` in the reference timezone.

    ``YYYY-MM-DD`` strings and plain ``date`` objects are already civil dates
    and are returned as-is. Datetimes (objects or ISO strings) are converted
    to the reference timezone first; naive ones are taken as UTC.
    Anything else gives ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str):
        s = value.strip()
        if _YMD_RE.match(s):
            try:
                return datetime.strptime(s, "%Y-%m-%d").date()
            except ValueError:
                return None
        try:
            dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(reference_tz(tz_name)).date()
    except (OverflowError, ValueError):
        # shifting into the reference zone left the supported year range
        return None


def weekday_index(value: Any, tz_name: Optional[str] = None) -> Optional[int]:
    """Sunday = 0 ... Saturday = 6, or None when the date can't be read."""
    d = normalize_date(value, tz_name)
    if d is None:
        return None
    # date.weekday() is Monday = 0
    return (d.weekday() + 1) % 7


def weekday_name(idx: int, style: str = "long") -> str:
    name = DAY_NAMES[idx]
    if style == "short":
        return name[:3].capitalize()
    if style == "letter":
        return name[0].upper()
    return name.capitalize()


def _token_days(token: Any) -> Optional[FrozenSet[int]]:
    # bool is an int subclass but never a weekday index
    if isinstance(token, bool):
        return None
    if isinstance(token, int):
        return frozenset([token]) if 0 <= token <= 6 else None
    if isinstance(token, float) and token.is_integer():
        return _token_days(int(token))
    if isinstance(token, str):
        return WEEKDAY_TOKENS.get(token.strip().lower())
    return None


def _days_from_tokens(tokens) -> FrozenSet[int]:
    days = set()
    for token in tokens:
        hit = _token_days(token)
        if hit:
            days.update(hit)
    return frozenset(days)


def _from_list(raw, values) -> DayConstraint:
    if not values:
        return UNCONSTRAINED
    return DayConstraint(ConstraintKind.WEEKDAYS, _days_from_tokens(values), raw)


def _from_map(raw, mapping) -> DayConstraint:
    if not mapping:
        return UNCONSTRAINED
    selected = [key for key, flag in mapping.items() if flag is True]
    return DayConstraint(ConstraintKind.WEEKDAYS, _days_from_tokens(selected), raw)


def _from_string(raw, text: str) -> DayConstraint:
    s = text.strip()
    if not s:
        return UNCONSTRAINED

    try:
        parsed = json.loads(s)
    except RecursionError:
        logger.warning("days_of_week value nested too deeply (%d chars)", len(s))
        return DayConstraint(ConstraintKind.MALFORMED, raw=raw)
    except ValueError:
        parsed = s
        if s[0] in "[{":
            logger.warning("Unparseable days_of_week value %r", raw)
            return DayConstraint(ConstraintKind.MALFORMED, raw=raw)

    if parsed is None:
        return UNCONSTRAINED
    if isinstance(parsed, list):
        return _from_list(raw, parsed)
    if isinstance(parsed, dict):
        return _from_map(raw, parsed)
    if not isinstance(parsed, str):
        return _from_scalar(raw, parsed)

    tokens = [t for t in _SPLIT_RE.split(parsed.strip()) if t]
    if not tokens:
        return UNCONSTRAINED
    days = _days_from_tokens(tokens)
    if not days:
        logger.warning("No weekday recognised in days_of_week value %r", raw)
        return DayConstraint(ConstraintKind.MALFORMED, raw=raw)
    return DayConstraint(ConstraintKind.WEEKDAYS, days, raw)


def _from_scalar(raw, value) -> DayConstraint:
    if value is False:
        return UNCONSTRAINED
    days = _token_days(value)
    if days is None:
        logger.warning("Unsupported days_of_week value %r", raw)
        return DayConstraint(ConstraintKind.MALFORMED, raw=raw)
    return DayConstraint(ConstraintKind.WEEKDAYS, days, raw)


def parse_day_constraint(raw: Any) -> DayConstraint:
    if raw is None:
        return UNCONSTRAINED
    if isinstance(raw, DayConstraint):
        return raw
    if isinstance(raw, str):
        return _from_string(raw, raw)
    if isinstance(raw, (list, tuple, set, frozenset)):
        return _from_list(raw, list(raw))
    if isinstance(raw, dict):
        return _from_map(raw, raw)
    return _from_scalar(raw, raw)


def has_day_constraint(raw: Any) -> bool:
    """True when ``raw`` actually restricts the duty to some weekdays."""
    return parse_day_constraint(raw).is_present


def duty_applies_to_day(
    raw: Any,
    target: Any,
    fail_open: Optional[bool] = None,
    tz_name: Optional[str] = None,
) -> bool:
    if fail_open is None:
        fail_open = settings.DUTY_DAYS_FAIL_OPEN
    constraint = parse_day_constraint(raw)
    if constraint.kind == ConstraintKind.UNCONSTRAINED:
        return True
    return constraint.applies_to(weekday_index(target, tz_name), fail_open=fail_open)
