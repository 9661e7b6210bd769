import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from homecare.core.config import settings
from homecare.db.models.poc import Poc, PocDuty
from homecare.routers import deps
from homecare.schemas.poc import DutyIn, PocCreate, PocUpdate
from homecare.utils.activity import log_activity
from homecare.utils.weekdays import duty_applies_to_day

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/poc",
    tags=["poc"],
)


def duty_order():
    # nulls last, then by description
    return (
        PocDuty.sort_order.is_(None), PocDuty.sort_order,
        PocDuty.task_no.is_(None), PocDuty.task_no,
        PocDuty.duty,
    )


def read_duties(db: Session, poc_id: str):
    if not poc_id:
        return []
    return db.query(PocDuty).filter(PocDuty.poc_id == poc_id).order_by(*duty_order()).all()


def serialize_duty(d: PocDuty) -> dict:
    return {
        "id": d.id,
        "pocId": d.poc_id,
        "category": d.category,
        "taskNo": d.task_no,
        "duty": d.duty or "",
        "minutes": d.minutes,
        "asNeeded": bool(d.as_needed),
        "timesWeekMin": d.times_week_min,
        "timesWeekMax": d.times_week_max,
        "daysOfWeek": d.days_of_week,
        "instruction": d.instruction,
        "sortOrder": d.sort_order,
    }


def serialize_poc(poc: Poc, duties=None) -> dict:
    if duties is None:
        duties = sorted(poc.duties, key=lambda d: (d.sort_order is None, d.sort_order or 0))
    return {
        "id": poc.id,
        "individualId": poc.individual_id,
        "pocNumber": poc.poc_number,
        "startDate": poc.start_date.isoformat() if poc.start_date else None,
        "stopDate": poc.stop_date.isoformat() if poc.stop_date else None,
        "shift": poc.shift,
        "note": poc.note,
        "createdBy": poc.created_by,
        "createdAt": poc.created_at.isoformat() if poc.created_at else None,
        "duties": [serialize_duty(d) for d in duties],
    }


def build_duty(poc_id: str, d: DutyIn) -> PocDuty:
    return PocDuty(
        poc_id=poc_id,
        category=d.category or "",
        task_no=d.taskNo or 0,
        duty=d.duty or "",
        minutes=d.minutes,
        as_needed=bool(d.asNeeded),
        times_week_min=d.timesWeekMin,
        times_week_max=d.timesWeekMax,
        days_of_week=d.daysOfWeek,
        instruction=d.instruction or None,
        sort_order=d.sortOrder or 0,
    )


@router.get("/duties")
async def list_duties(
    pocId: str = "",
    date: Optional[str] = None,
    db: Session = Depends(deps.get_db),
):
    poc_id = deps.clean(pocId)
    if not poc_id:
        raise HTTPException(status_code=400, detail="Missing pocId")

    duties = read_duties(db, poc_id)

    # Only the weekday rule applies here; log-dependent filtering is done per daily log
    target = deps.parse_ymd(date)
    if target is not None:
        duties = [
            d for d in duties
            if duty_applies_to_day(d.days_of_week, target, fail_open=settings.DUTY_DAYS_FAIL_OPEN)
        ]

    return {"ok": True, "items": [serialize_duty(d) for d in duties]}


@router.get("")
async def list_pocs(individualId: str = "", db: Session = Depends(deps.get_db)):
    individual_id = deps.clean(individualId)
    if not individual_id:
        raise HTTPException(status_code=400, detail="Missing required query: individualId")

    pocs = db.query(Poc)\
        .filter(Poc.individual_id == individual_id)\
        .order_by(desc(Poc.created_at), desc(Poc.start_date))\
        .all()
    return {"items": [serialize_poc(p) for p in pocs]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_poc(body: PocCreate, db: Session = Depends(deps.get_db)):
    individual_id = deps.clean(body.individualId)
    poc_number = deps.clean(body.pocNumber)
    if not individual_id:
        raise HTTPException(status_code=400, detail="individualId is required")
    if not poc_number:
        raise HTTPException(status_code=400, detail="pocNumber is required")
    start_date = deps.require_ymd(body.startDate, "startDate is required (YYYY-MM-DD)")
    stop_date = deps.parse_ymd(body.stopDate)

    poc = Poc(
        individual_id=individual_id,
        poc_number=poc_number,
        start_date=start_date,
        stop_date=stop_date,
        shift=body.shift or "All",
        note=body.note,
        created_by=body.createdBy,
    )
    db.add(poc)
    try:
        db.flush()  # Get ID
        for d in body.duties:
            poc.duties.append(build_duty(poc.id, d))
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"POST /poc rejected: {e.orig}")
        raise HTTPException(status_code=409, detail="Duplicate / Unique constraint error")

    log_activity(db, body.createdBy, "CREATE", "POC", poc.id,
                 json.dumps({"pocNumber": poc_number, "duties": len(body.duties)}))
    return {"ok": True, "id": poc.id}


def get_poc_or_404(db: Session, id: str) -> Poc:
    poc = db.query(Poc).filter(Poc.id == deps.clean(id)).first()
    if not poc:
        raise HTTPException(status_code=404, detail="POC not found")
    return poc


@router.get("/{id}")
async def get_poc(id: str, db: Session = Depends(deps.get_db)):
    poc = get_poc_or_404(db, id)
    return {"item": serialize_poc(poc, read_duties(db, poc.id))}


@router.patch("/{id}")
async def update_poc(id: str, body: PocUpdate, db: Session = Depends(deps.get_db)):
    poc = get_poc_or_404(db, id)

    start_date = deps.parse_ymd(body.startDate)
    if start_date:
        poc.start_date = start_date
    poc.stop_date = deps.parse_ymd(body.stopDate)
    if body.shift is not None:
        poc.shift = body.shift
    poc.note = body.note

    # The editor always sends the full list; an omitted list clears the duties.
    # Task logs of removed duties stay and drop out of the daily view.
    try:
        poc.duties.clear()
        db.flush()
        for d in body.duties:
            poc.duties.append(build_duty(poc.id, d))
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"PATCH /poc/{poc.id} rejected: {e.orig}")
        raise HTTPException(status_code=409, detail="Duplicate / Unique constraint error")

    log_activity(db, None, "UPDATE", "POC", poc.id, json.dumps({"duties": len(body.duties)}))
    return {"ok": True}


@router.delete("/{id}")
async def delete_poc(id: str, db: Session = Depends(deps.get_db)):
    poc = get_poc_or_404(db, id)
    poc_id = poc.id
    db.delete(poc)
    db.commit()

    log_activity(db, None, "DELETE", "POC", poc_id)
    return {"ok": True}
