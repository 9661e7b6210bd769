import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from homecare.db.models.service import Service
from homecare.routers import deps
from homecare.schemas.service import RateConfigIn, ServiceCreate, ServiceUpdate
from homecare.utils.activity import log_activity
from homecare.utils.notes_config import build_rate_config, merge_notes_with_config, parse_notes_config

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/services",
    tags=["services"],
)


def serialize_service(s: Service) -> dict:
    config, notes_free = parse_notes_config(s.notes)
    return {
        "id": s.id,
        "serviceCode": s.service_code,
        "serviceName": s.service_name,
        "billingCode": s.billing_code,
        "category": s.category,
        "description": s.description,
        "status": s.status,
        "billable": bool(s.billable),
        "notes": s.notes,
        "notesFree": notes_free,
        "config": config,
    }


def notes_with_config(notes, config: RateConfigIn):
    try:
        cfg = build_rate_config(
            config.levelType,
            service_type=config.serviceType,
            level=config.level,
            format=config.format,
            rate=config.rate,
            rate_per_mile=config.ratePerMile,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    # free notes only; any stale [CONFIG] line is replaced
    _, notes_free = parse_notes_config(notes)
    return merge_notes_with_config(notes_free, cfg)


@router.get("")
async def list_services(db: Session = Depends(deps.get_db)):
    services = db.query(Service).order_by(Service.category, Service.service_code).all()
    return {"services": [serialize_service(s) for s in services]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_service(body: ServiceCreate, db: Session = Depends(deps.get_db)):
    missing = [
        name for name, value in (
            ("serviceCode", body.serviceCode),
            ("serviceName", body.serviceName),
            ("category", body.category),
            ("status", body.status),
        ) if not deps.clean(value)
    ]
    if missing:
        raise HTTPException(status_code=400, detail="Missing required fields: " + ", ".join(missing))

    notes = body.notes or None
    if body.config is not None:
        notes = notes_with_config(body.notes, body.config)

    service = Service(
        service_code=deps.clean(body.serviceCode),
        service_name=deps.clean(body.serviceName),
        billing_code=body.billingCode or None,
        category=body.category,
        description=body.description or None,
        status=body.status,
        billable=bool(body.billable),
        notes=notes,
    )
    db.add(service)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Service code already exists. Please choose another code.")

    db.refresh(service)
    log_activity(db, None, "CREATE", "SERVICE", service.id)
    return serialize_service(service)


def get_service_or_404(db: Session, id: int) -> Service:
    service = db.query(Service).filter(Service.id == id).first()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.get("/{id}")
async def get_service(id: int, db: Session = Depends(deps.get_db)):
    return serialize_service(get_service_or_404(db, id))


@router.patch("/{id}")
async def update_service(id: int, body: ServiceUpdate, db: Session = Depends(deps.get_db)):
    service = get_service_or_404(db, id)

    # service_code / service_name stay locked once created
    if body.billingCode is not None:
        service.billing_code = body.billingCode.strip() or None
    if body.category is not None:
        service.category = body.category
    if body.status is not None:
        service.status = body.status
    if body.billable is not None:
        service.billable = body.billable
    if body.description is not None:
        service.description = body.description.strip() or None

    if body.config is not None:
        notes = body.notes if body.notes is not None else service.notes
        service.notes = notes_with_config(notes, body.config)
    elif body.notes is not None:
        service.notes = body.notes or None

    db.commit()
    db.refresh(service)
    log_activity(db, None, "UPDATE", "SERVICE", service.id)
    return serialize_service(service)
