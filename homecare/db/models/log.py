from sqlalchemy import Column, String, ForeignKey, DateTime, Date, UniqueConstraint
from sqlalchemy.orm import backref, relationship
from sqlalchemy.sql import func
from homecare.db.base_class import Base
from homecare.db.models.poc import new_id

DAILY_LOG_STATUSES = ("DRAFT", "SUBMITTED")


class PocDailyLog(Base):
    __tablename__ = "poc_daily_logs"
    __table_args__ = (
        UniqueConstraint("poc_id", "individual_id", "date", name="uq_poc_daily_log_day"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    poc_id = Column(String(36), ForeignKey("pocs.id"), nullable=False, index=True)
    individual_id = Column(String(64), nullable=False, index=True)
    dsp_id = Column(String(64), nullable=True, index=True)
    date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="DRAFT")
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(100), default="office")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    poc = relationship("Poc", backref=backref("daily_logs", cascade="all, delete"))
    task_entries = relationship(
        "PocDailyTaskLog",
        back_populates="log",
        cascade="all, delete-orphan",
        order_by="PocDailyTaskLog.created_at",
    )
