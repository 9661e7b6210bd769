import json
import logging
import math
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy import desc, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from homecare.core.config import settings
from homecare.db.models.log import DAILY_LOG_STATUSES, PocDailyLog
from homecare.db.models.log_task import PocDailyTaskLog
from homecare.db.models.poc import Poc
from homecare.routers import deps
from homecare.routers.poc import read_duties
from homecare.schemas.daily_log import DailyLogCreate, DailyLogPatch
from homecare.utils.activity import log_activity
from homecare.utils.daily_tasks import build_tasks_for_day, normalize_completion, to_iso

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/poc/daily-logs",
    tags=["daily-logs"],
)


def as_int(value: Optional[str], fallback: int) -> int:
    try:
        n = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(n) or n <= 0:
        return fallback
    return max(int(n), 1)


def safe_status_list(raw: Optional[str]):
    if not raw:
        return None
    parts = [p.strip().upper() for p in raw.split(",")]
    out = [p for p in parts if p in DAILY_LOG_STATUSES]
    return out or None


def read_task_logs(db: Session, daily_log_id: str) -> Dict[str, PocDailyTaskLog]:
    rows = db.query(PocDailyTaskLog).filter(PocDailyTaskLog.daily_log_id == daily_log_id).all()
    return {str(r.poc_duty_id): r for r in rows if r.poc_duty_id}


def serialize_log_header(log: PocDailyLog) -> dict:
    return {
        "id": log.id,
        "pocId": log.poc_id,
        "individualId": log.individual_id,
        "dspId": log.dsp_id,
        "date": log.date.isoformat(),
        "status": log.status,
        "submittedAt": to_iso(log.submitted_at),
        "createdAt": to_iso(log.created_at),
        "updatedAt": to_iso(log.updated_at),
    }


def build_detail(db: Session, log: PocDailyLog) -> dict:
    duties = read_duties(db, log.poc_id)
    task_logs = read_task_logs(db, log.id)

    item = serialize_log_header(log)
    item["pocNumber"] = log.poc.poc_number if log.poc else None
    item["tasks"] = build_tasks_for_day(
        log.date, duties, task_logs, fail_open=settings.DUTY_DAYS_FAIL_OPEN
    )
    return item


def get_log_or_404(db: Session, id: str) -> PocDailyLog:
    log = db.query(PocDailyLog).filter(PocDailyLog.id == deps.clean(id)).first()
    if not log:
        raise HTTPException(status_code=404, detail="Not found")
    return log


@router.get("")
async def list_daily_logs(
    pocId: Optional[str] = None,
    individualId: Optional[str] = None,
    dspId: Optional[str] = None,
    dateFrom: Optional[str] = None,
    dateTo: Optional[str] = None,
    status: Optional[str] = None,
    page: Optional[str] = None,
    pageSize: Optional[str] = None,
    db: Session = Depends(deps.get_db),
):
    page_n = as_int(page, 1)
    page_size = min(as_int(pageSize, settings.DAILY_LOGS_PAGE_SIZE), settings.DAILY_LOGS_MAX_PAGE_SIZE)

    query = db.query(PocDailyLog)

    if deps.clean(pocId):
        query = query.filter(PocDailyLog.poc_id == deps.clean(pocId))
    if deps.clean(individualId):
        query = query.filter(PocDailyLog.individual_id == deps.clean(individualId))
    if deps.clean(dspId):
        query = query.filter(PocDailyLog.dsp_id == deps.clean(dspId))

    date_from = deps.parse_ymd(dateFrom)
    if date_from:
        query = query.filter(PocDailyLog.date >= date_from)
    date_to = deps.parse_ymd(dateTo)
    if date_to:
        query = query.filter(PocDailyLog.date <= date_to)

    statuses = safe_status_list(status)
    if statuses:
        query = query.filter(PocDailyLog.status.in_(statuses))

    total = query.count()
    offset = (page_n - 1) * page_size

    logs = []
    if offset < total:
        logs = query.order_by(desc(PocDailyLog.date), desc(PocDailyLog.updated_at))\
            .limit(page_size)\
            .offset(offset)\
            .all()

    counts = {}
    if logs:
        counts = dict(
            db.query(PocDailyTaskLog.daily_log_id, func.count(PocDailyTaskLog.id))
            .filter(PocDailyTaskLog.daily_log_id.in_([row.id for row in logs]))
            .group_by(PocDailyTaskLog.daily_log_id)
            .all()
        )

    items = []
    for log in logs:
        item = serialize_log_header(log)
        item["taskCount"] = counts.get(log.id, 0)
        items.append(item)

    return {
        "ok": True,
        "page": page_n,
        "pageSize": page_size,
        "total": total,
        "totalPages": max(1, -(-total // page_size)),
        "items": items,
    }


def find_daily_log(db: Session, poc_id: str, individual_id: str, log_date) -> Optional[PocDailyLog]:
    return db.query(PocDailyLog).filter(
        PocDailyLog.poc_id == poc_id,
        PocDailyLog.individual_id == individual_id,
        PocDailyLog.date == log_date,
    ).first()


@router.post("")
async def create_daily_log(body: DailyLogCreate, db: Session = Depends(deps.get_db)):
    """Create-or-get the one daily log of a POC/individual/date."""
    poc_id = deps.clean(body.pocId)
    individual_id = deps.clean(body.individualId)
    created_by = deps.clean(body.createdBy) or "office"

    if not poc_id:
        raise HTTPException(status_code=400, detail="Missing pocId")
    if not individual_id:
        raise HTTPException(status_code=400, detail="Missing individualId")
    log_date = deps.require_ymd(body.date, "Invalid date (expected YYYY-MM-DD)")

    poc = db.query(Poc).filter(Poc.id == poc_id).first()
    if not poc:
        raise HTTPException(status_code=404, detail="POC not found")

    found = find_daily_log(db, poc_id, individual_id, log_date)
    if found:
        return {"ok": True, "id": found.id, "created": False}

    new_log = PocDailyLog(
        poc=poc,
        individual_id=individual_id,
        dsp_id=deps.clean(body.dspId) or None,
        date=log_date,
        status="DRAFT",
        created_by=created_by,
    )
    db.add(new_log)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with another request creating the same day
        db.rollback()
        found = find_daily_log(db, poc_id, individual_id, log_date)
        if found:
            return {"ok": True, "id": found.id, "created": False}
        raise

    log_activity(db, created_by, "CREATE", "DAILY_LOG", new_log.id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"ok": True, "id": new_log.id, "created": True},
    )


@router.get("/{id}")
async def get_daily_log(id: str, db: Session = Depends(deps.get_db)):
    log = get_log_or_404(db, id)
    return {"ok": True, "item": build_detail(db, log)}


@router.patch("/{id}")
async def update_daily_log(id: str, body: DailyLogPatch, db: Session = Depends(deps.get_db)):
    log = get_log_or_404(db, id)
    now = datetime.now(timezone.utc)

    next_status = (body.status or log.status or "DRAFT").strip().upper()
    if next_status not in DAILY_LOG_STATUSES:
        raise HTTPException(status_code=400, detail="status must be DRAFT or SUBMITTED")

    log.status = next_status
    if next_status == "SUBMITTED":
        log.submitted_at = log.submitted_at or now
    else:
        log.submitted_at = None
    log.updated_at = now

    existing = read_task_logs(db, log.id)
    duty_ids = {d.id for d in read_duties(db, log.poc_id)}

    for t in body.tasks:
        duty_id = deps.normalize_hyphen(t.pocDutyId or t.id)
        if not duty_id:
            continue
        if duty_id not in duty_ids:
            logger.warning(f"PATCH /poc/daily-logs/{log.id}: skipping duty {duty_id!r} not in POC {log.poc_id}")
            continue

        completion = normalize_completion(t.status)
        completed_at = deps.parse_timestamp(t.timestamp)
        row = existing.get(duty_id)

        if not completion:
            # No usable status: touch an existing row only, never create one
            if row is None:
                continue
            if t.note is not None:
                row.note = t.note
            if completed_at:
                row.completed_at = completed_at
            row.updated_at = now
            continue

        if row is None:
            row = PocDailyTaskLog(poc_duty_id=duty_id)
            log.task_entries.append(row)
            existing[duty_id] = row

        row.completion_status = completion
        row.note = t.note
        row.completed_at = completed_at or row.completed_at or now
        row.updated_at = now

    db.commit()
    db.refresh(log)

    log_activity(db, log.dsp_id, "UPDATE", "DAILY_LOG", log.id,
                 json.dumps({"status": next_status, "tasks": len(body.tasks)}))
    return {"ok": True, "item": build_detail(db, log)}
