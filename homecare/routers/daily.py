import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import desc, or_
from sqlalchemy.orm import Session

from homecare.db.models.log import PocDailyLog
from homecare.db.models.log_task import PocDailyTaskLog
from homecare.db.models.poc import Poc, PocDuty
from homecare.routers import deps
from homecare.routers.logs import find_daily_log, serialize_log_header
from homecare.routers.poc import read_duties, serialize_poc
from homecare.schemas.daily_log import DailyEntry
from homecare.utils.activity import log_activity
from homecare.utils.daily_tasks import normalize_completion, to_iso

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/poc/daily",
    tags=["daily"],
)

ACTIONS = ("SAVE_DRAFT", "SUBMIT")


def find_active_poc(db: Session, individual_id: str, day):
    """Latest-starting POC of the individual that covers ``day``."""
    return db.query(Poc).filter(
        Poc.individual_id == individual_id,
        Poc.start_date <= day,
        or_(Poc.stop_date.is_(None), Poc.stop_date >= day),
    ).order_by(desc(Poc.start_date)).first()


def serialize_task_row(row: PocDailyTaskLog) -> dict:
    return {
        "id": row.id,
        "pocDutyId": row.poc_duty_id,
        "completionStatus": row.completion_status,
        "completedAt": to_iso(row.completed_at),
        "note": row.note,
    }


def serialize_daily_log(log: PocDailyLog) -> dict:
    item = serialize_log_header(log)
    item["tasks"] = [serialize_task_row(r) for r in log.task_entries]
    return item


@router.get("")
async def get_daily(individualId: str = "", date: str = "", db: Session = Depends(deps.get_db)):
    individual_id = deps.clean(individualId)
    if not individual_id or not deps.clean(date):
        raise HTTPException(status_code=400, detail="individualId and date are required")
    day = deps.require_ymd(date)

    poc = find_active_poc(db, individual_id, day)
    if not poc:
        return {
            "poc": None,
            "duties": [],
            "dailyLog": None,
            "message": "No active POC found for this date",
        }

    duties = read_duties(db, poc.id)
    log = find_daily_log(db, poc.id, individual_id, day)

    poc_data = serialize_poc(poc, duties)
    return {
        "poc": poc_data,
        "duties": poc_data["duties"],
        "dailyLog": serialize_daily_log(log) if log else None,
    }


@router.post("")
async def save_daily(body: DailyEntry, db: Session = Depends(deps.get_db)):
    action = deps.clean(body.action).upper()
    individual_id = deps.clean(body.individualId)
    dsp_id = deps.clean(body.dspId)

    if action not in ACTIONS:
        raise HTTPException(status_code=400, detail="action must be SAVE_DRAFT or SUBMIT")
    if not individual_id or not deps.clean(body.date) or not dsp_id:
        raise HTTPException(status_code=400, detail="individualId, date, dspId are required")
    day = deps.require_ymd(body.date)

    poc = find_active_poc(db, individual_id, day)
    if not poc:
        raise HTTPException(status_code=404, detail="No active POC found for this date")

    tasks = []
    seen = set()
    for t in body.tasks:
        duty_id = deps.normalize_hyphen(t.pocDutyId)
        if not duty_id or duty_id in seen:
            continue
        seen.add(duty_id)
        tasks.append((duty_id, t))

    if not tasks:
        raise HTTPException(status_code=400, detail="tasks must include at least 1 valid pocDutyId")

    valid = {
        row.id for row in db.query(PocDuty.id)
        .filter(PocDuty.poc_id == poc.id, PocDuty.id.in_(list(seen)))
        .all()
    }
    invalid = [duty_id for duty_id, _ in tasks if duty_id not in valid]
    if invalid:
        raise HTTPException(status_code=400, detail={
            "error": "Some pocDutyId do not exist or do not belong to this POC",
            "invalidPocDutyIds": invalid,
            "pocId": poc.id,
        })

    now = datetime.now(timezone.utc)
    submitting = action == "SUBMIT"

    log = find_daily_log(db, poc.id, individual_id, day)
    if log is None:
        log = PocDailyLog(poc=poc, individual_id=individual_id, date=day, created_by=dsp_id)
        db.add(log)

    log.dsp_id = dsp_id
    log.status = "SUBMITTED" if submitting else "DRAFT"
    if submitting:
        log.submitted_at = log.submitted_at or now
    log.updated_at = now

    # Replace all task rows for this daily log
    log.task_entries.clear()
    db.flush()

    for duty_id, t in tasks:
        log.task_entries.append(PocDailyTaskLog(
            poc_duty_id=duty_id,
            completion_status=normalize_completion(t.completionStatus) or "INDEPENDENT",
            completed_at=now if submitting else None,
            note=t.note or None,
        ))

    db.commit()
    db.refresh(log)

    log_activity(db, dsp_id, action, "DAILY_LOG", log.id, json.dumps({"tasks": len(tasks)}))
    return {
        "ok": True,
        "action": action,
        "pocId": poc.id,
        "dailyLog": serialize_daily_log(log),
    }
