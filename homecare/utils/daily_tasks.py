from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from homecare.core.config import settings
from homecare.db.models.log_task import COMPLETION_STATUSES
from homecare.utils.weekdays import duty_applies_to_day, parse_day_constraint


def to_iso(value: Any) -> Optional[str]:
    """ISO-8601 text for a datetime (naive values are stored UTC)."""
    if not value:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def normalize_completion(value: Any) -> Optional[str]:
    if not value:
        return None
    s = str(value).strip().upper()
    return s if s in COMPLETION_STATUSES else None


def field_of(record: Any, name: str, camel: Optional[str] = None) -> Any:
    """Read ``name`` from an ORM row, or ``camel``/``name`` from a plain mapping."""
    if record is None:
        return None
    if isinstance(record, Mapping):
        if camel and camel in record:
            return record[camel]
        return record.get(name)
    return getattr(record, name, None)


def as_task_no(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _duty_is_shown(duty, target, logs_by_duty_id, fail_open) -> bool:
    constraint = parse_day_constraint(field_of(duty, "days_of_week", "daysOfWeek"))
    if not duty_applies_to_day(constraint, target, fail_open=fail_open):
        return False
    if constraint.is_present:
        return True

    # Unrestricted duties only show up once someone has logged them for this day
    duty_id = str(field_of(duty, "id") or "").strip()
    if not duty_id:
        return False
    return duty_id in logs_by_duty_id


def build_tasks_for_day(
    target: Any,
    duties: Iterable[Any],
    logs_by_duty_id: Mapping[str, Any],
    fail_open: Optional[bool] = None,
) -> List[dict]:
    """Merge a POC's duties with one daily log's task rows for ``target``.

    ``duties`` are PocDuty rows or plain records (``daysOfWeek``, ``taskNo``
    ...) in display order, ``logs_by_duty_id`` maps duty id -> task log row or
    record (``completionStatus``, ``completedAt``). The result keeps the duty
    order and carries ``None`` for status/note/timestamp when the duty has
    not been logged yet.
    """
    if fail_open is None:
        fail_open = settings.DUTY_DAYS_FAIL_OPEN
    logs_by_duty_id = logs_by_duty_id or {}

    tasks = []
    for idx, duty in enumerate(duties or []):
        if not _duty_is_shown(duty, target, logs_by_duty_id, fail_open):
            continue

        duty_id = str(field_of(duty, "id") or idx)
        name = field_of(duty, "duty")
        log = logs_by_duty_id.get(duty_id)
        tasks.append({
            "id": duty_id,
            "taskNo": as_task_no(field_of(duty, "task_no", "taskNo")),
            "duty": name if name is not None else f"Task {idx + 1}",
            "category": field_of(duty, "category") or None,
            "status": normalize_completion(field_of(log, "completion_status", "completionStatus")),
            "note": field_of(log, "note"),
            "timestamp": to_iso(field_of(log, "completed_at", "completedAt")),
        })
    return tasks
